from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from log_config import SecretMaskingFormatter, build_handlers, configure_logging, secrets_from_env


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord("core.sweeper", logging.INFO, __file__, 1, message, None, None)


def test_formatter_masks_longest_secret_first() -> None:
    formatter = SecretMaskingFormatter(["abc", "abc123", ""])

    line = formatter.format(_record("token abc123 and abc"))

    assert line.endswith("token *** and ***")
    assert "abc" not in line


def test_secrets_resolve_from_env_names(monkeypatch) -> None:
    monkeypatch.setenv("BOT_API", "123:secret")
    monkeypatch.delenv("MISSING_SECRET", raising=False)

    secrets = secrets_from_env({"enabled": True, "patterns": ["BOT_API", "MISSING_SECRET"]})

    assert secrets == ["123:secret"]
    assert secrets_from_env({"enabled": False, "patterns": ["BOT_API"]}) == []


def test_file_handler_is_relative_to_project_root(tmp_path) -> None:
    config = {"console": False, "file": {"enabled": True, "path": "logs/sweep.log", "backup_count": 2}}

    handlers = build_handlers(config, str(tmp_path))

    assert len(handlers) == 1
    handler = handlers[0]
    assert isinstance(handler, RotatingFileHandler)
    assert handler.baseFilename == str(tmp_path / "logs" / "sweep.log")
    assert handler.backupCount == 2
    assert isinstance(handler.formatter, SecretMaskingFormatter)
    handler.close()


def test_disabled_logging_installs_nothing(tmp_path) -> None:
    assert configure_logging({"enabled": False}, str(tmp_path)) is False
    assert configure_logging(None, str(tmp_path)) is False
    assert configure_logging({"enabled": True, "console": False}, str(tmp_path)) is False


def test_noisy_client_loggers_are_quieted(tmp_path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    google = logging.getLogger("google")
    saved_google = google.level
    try:
        assert configure_logging({"enabled": True, "level": "debug"}, str(tmp_path)) is True
        assert root.level == logging.DEBUG
        assert google.level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        google.setLevel(saved_google)
