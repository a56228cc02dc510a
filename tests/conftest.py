# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import pytest

import matrixscan.app_utils.app as app
from matrixscan.app_utils import AppController


@pytest.fixture(autouse=True)
def app_instance(monkeypatch: pytest.MonkeyPatch) -> AppController:
    """Provides a fresh AppController for each test, so that bricks created by a test are not
    registered with the module-level App.
    """
    instance = AppController()
    monkeypatch.setattr(app, "App", instance)
    return instance
