"""
Tests for environment-driven configuration.
"""
import pytest
from pydantic import ValidationError

from odora.app import build_app
from odora.config import OdoraConfig, TransportType


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "ODORA_STORAGE_PATH",
        "ODORA_PHOTO_DIR",
        "ODORA_CAPTURE_DIR",
        "OPENAI_API_KEY",
        "ODORA_TIMEZONE",
        "ODORA_DEBUG",
        "ODORA_TRANSPORT",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = OdoraConfig.from_env()
    assert config.storage_path is None
    assert config.capture_dir is None
    assert config.openai_api_key is None
    assert config.timezone == "UTC"
    assert config.transport == TransportType.STDIO
    assert config.debug is False


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("ODORA_STORAGE_PATH", str(tmp_path / "odora.json"))
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("ODORA_TIMEZONE", "Europe/Lisbon")
    monkeypatch.setenv("ODORA_DEBUG", "true")

    config = OdoraConfig.from_env()
    assert config.storage_path == str(tmp_path / "odora.json")
    assert config.openai_api_key == "sk-test"
    assert config.tzinfo.key == "Europe/Lisbon"
    assert config.debug is True


def test_unknown_timezone_rejected(monkeypatch):
    monkeypatch.setenv("ODORA_TIMEZONE", "Mars/Olympus_Mons")
    with pytest.raises(ValidationError):
        OdoraConfig.from_env()


def test_capture_dir_reaches_photo_library(monkeypatch, tmp_path):
    monkeypatch.setenv("ODORA_PHOTO_DIR", str(tmp_path / "photos"))
    monkeypatch.setenv("ODORA_CAPTURE_DIR", str(tmp_path / "camera"))

    app = build_app(OdoraConfig.from_env())
    assert app.photos.directory == tmp_path / "photos"
    assert app.photos.capture_dir == tmp_path / "camera"
