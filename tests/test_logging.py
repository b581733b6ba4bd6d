import logging
from civicops.core.config import settings
from civicops.core.logging import LOG_FORMAT, configure_logging

def test_configure_logging_uses_explicit_level(monkeypatch):
    captured = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

    configure_logging("debug")

    assert captured == {"level": "DEBUG", "format": LOG_FORMAT}

def test_configure_logging_defaults_to_settings(monkeypatch):
    captured = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))
    monkeypatch.setattr(settings, "LOG_LEVEL", "warning")

    configure_logging()

    assert captured["level"] == "WARNING"
