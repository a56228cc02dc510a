# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

from types import SimpleNamespace
from unittest.mock import MagicMock

import numpy as np
import pytest

pytest.importorskip("cv2", exc_type=ImportError)
pyzbar = pytest.importorskip("pyzbar.pyzbar", exc_type=ImportError)

from PIL import Image  # noqa: E402

from matrixscan.app_bricks.code_session import ScanSession  # noqa: E402
from matrixscan.app_bricks.code_tracking import CodeTracking  # noqa: E402


class FakeDecoder:
    """Replaces pyzbar's decode() with canned results, one list per call."""

    def __init__(self, *frames):
        self._frames = list(frames)
        self.received = []

    def __call__(self, image, symbols=None):
        self.received.append((image, symbols))
        if not self._frames:
            return []
        return [SimpleNamespace(data=data, type=kind) for kind, data in self._frames.pop(0)]


@pytest.fixture
def frame() -> np.ndarray:
    return np.zeros((48, 64, 3), dtype=np.uint8)


def _install(monkeypatch: pytest.MonkeyPatch, decoder) -> None:
    monkeypatch.setattr("matrixscan.app_bricks.code_tracking.tracking.decode", decoder)


def test_requires_a_symbology():
    with pytest.raises(ValueError):
        CodeTracking(detect_qr=False, detect_barcode=False)


def test_disabled_engine_ignores_frames(monkeypatch: pytest.MonkeyPatch, frame: np.ndarray):
    decoder = FakeDecoder([("QRCODE", b"ABC")])
    _install(monkeypatch, decoder)

    engine = CodeTracking()
    listener = MagicMock()
    engine.add_listener(listener)

    assert engine.process_frame(frame) == []
    listener.assert_not_called()
    assert decoder.received == []


def test_batches_carry_raw_payloads_and_stable_ids(monkeypatch: pytest.MonkeyPatch, frame: np.ndarray):
    sjis = "ち".encode("shift_jis")
    decoder = FakeDecoder(
        [("QRCODE", b"ABC"), ("QRCODE", sjis)],
        [("QRCODE", sjis), ("EAN13", b"4006381333931")],
    )
    _install(monkeypatch, decoder)

    engine = CodeTracking()
    batches = []
    engine.add_listener(batches.append)
    engine.enable()

    engine.process_frame(frame)
    engine.process_frame(frame)

    assert len(batches) == 2
    first, second = batches
    assert [o.raw_payload for o in first] == [b"ABC", sjis]
    assert [o.symbology for o in first] == ["QRCODE", "QRCODE"]
    assert all(o.text is None for o in first)

    # The Shift-JIS code keeps its identifier, the new barcode gets a new one
    assert second[0].identifier == first[1].identifier
    assert second[1].identifier not in (first[0].identifier, first[1].identifier)


def test_frames_are_converted_to_grayscale(monkeypatch: pytest.MonkeyPatch, frame: np.ndarray):
    decoder = FakeDecoder()
    _install(monkeypatch, decoder)

    engine = CodeTracking(detect_barcode=False)
    engine.enable()

    engine.process_frame(frame)
    engine.process_frame(Image.new("RGB", (64, 48)))
    engine.process_frame(np.zeros((48, 64), dtype=np.uint8))

    assert all(image.ndim == 2 for image, _ in decoder.received)
    assert all(symbols == [pyzbar.ZBarSymbol.QRCODE, pyzbar.ZBarSymbol.SQCODE] for _, symbols in decoder.received)


def test_listener_errors_are_isolated(monkeypatch: pytest.MonkeyPatch, frame: np.ndarray):
    _install(monkeypatch, FakeDecoder([("QRCODE", b"ABC")]))

    engine = CodeTracking()
    errors = []
    engine.on_error(errors.append)

    failing = MagicMock(side_effect=RuntimeError("listener failure"))
    working = MagicMock()
    engine.add_listener(failing)
    engine.add_listener(working)
    engine.enable()

    engine.process_frame(frame)

    working.assert_called_once()
    assert len(errors) == 1


def test_decoder_errors_are_reported(monkeypatch: pytest.MonkeyPatch, frame: np.ndarray):
    def failing_decode(image, symbols=None):
        raise pyzbar.PyZbarError("zbar failure")

    _install(monkeypatch, failing_decode)

    engine = CodeTracking()
    on_error = MagicMock()
    engine.on_error(on_error)
    engine.enable()

    assert engine.process_frame(frame) == []
    on_error.assert_called_once()


def test_remove_listener(monkeypatch: pytest.MonkeyPatch, frame: np.ndarray):
    _install(monkeypatch, FakeDecoder([("QRCODE", b"ABC")]))

    engine = CodeTracking()
    listener = MagicMock()
    engine.add_listener(listener)
    engine.remove_listener(listener)
    engine.enable()

    engine.process_frame(frame)
    listener.assert_not_called()

    with pytest.raises(TypeError):
        engine.add_listener("not callable")


def test_scan_session_with_code_tracking(monkeypatch: pytest.MonkeyPatch, frame: np.ndarray):
    _install(
        monkeypatch,
        FakeDecoder(
            [("QRCODE", b"ABC")],
            [("QRCODE", b"ABC"), ("QRCODE", "ち".encode("shift_jis")), ("QRCODE", b"\x81")],
            [("QRCODE", b"LATE")],
        ),
    )

    engine = CodeTracking()
    session = ScanSession(engine=engine)

    session.start()
    assert engine.is_enabled

    engine.process_frame(frame)
    engine.process_frame(frame)
    session.stop()
    assert not engine.is_enabled

    # Disabled engine: the frame is not even scanned
    engine.process_frame(frame)

    assert session.export_results() == ["ABC", "ち"]


def test_real_decoder_on_blank_frame(frame: np.ndarray):
    engine = CodeTracking()
    batches = []
    engine.add_listener(batches.append)
    engine.enable()

    assert engine.process_frame(frame) == []
    assert batches == [[]]
