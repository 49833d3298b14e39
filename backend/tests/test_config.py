"""Tests for application settings and the server launcher."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from faceoff.config import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("MAX_PARTICIPANTS", raising=False)
    settings = Settings(_env_file=None)
    assert settings.max_participants == 22
    assert settings.cors_origins_list == ["http://localhost:5173", "http://127.0.0.1:5173"]


@pytest.mark.parametrize("value", ["30", "23", "1"])
def test_capacity_outside_limits_rejected(monkeypatch, value):
    monkeypatch.setenv("MAX_PARTICIPANTS", value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_smaller_capacity_allowed(monkeypatch):
    monkeypatch.setenv("MAX_PARTICIPANTS", "10")
    assert Settings(_env_file=None).max_participants == 10


def test_launcher_uses_server_settings():
    from faceoff import __main__ as launcher

    with patch.object(launcher, "settings", Settings(_env_file=None, host="127.0.0.1", port=9000, debug=True)), \
            patch.object(launcher.uvicorn, "run") as run:
        launcher.main()

    run.assert_called_once_with(
        "faceoff.main:app", host="127.0.0.1", port=9000, reload=True, log_level="info"
    )
