# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import codecs

from matrixscan.app_bricks.code_session import DecodeFailure, EncodingHint, TextDecoder


def test_decode_with_hint():
    decoder = TextDecoder()

    assert decoder.decode(b"ABC", EncodingHint("ascii")) == "ABC"
    assert decoder.decode(b"\x82\xbf", EncodingHint("shift_jis")) == "ち"
    assert decoder.decode(codecs.BOM_UTF8 + b"ABC", EncodingHint("utf-8-sig", bom=True)) == "ABC"


def test_decode_failures():
    decoder = TextDecoder()

    # Bytes invalid under the hint
    result = decoder.decode(b"\x82\xbf", EncodingHint("utf-8"))
    assert isinstance(result, DecodeFailure)
    assert not result

    # Unknown codec
    assert isinstance(decoder.decode(b"ABC", EncodingHint("no-such-codec")), DecodeFailure)

    # Malformed hint
    assert isinstance(decoder.decode(b"ABC", "utf-8"), DecodeFailure)
    assert isinstance(decoder.decode(b"ABC", None), DecodeFailure)
    assert isinstance(decoder.decode(b"ABC", EncodingHint(None)), DecodeFailure)
    assert isinstance(decoder.decode(b"ABC", EncodingHint(42)), DecodeFailure)

    # Codec that does not produce text
    assert isinstance(decoder.decode(b"QUJD", EncodingHint("base64")), DecodeFailure)

    # Nothing but a byte-order mark
    assert isinstance(decoder.decode(codecs.BOM_UTF8, EncodingHint("utf-8-sig", bom=True)), DecodeFailure)
