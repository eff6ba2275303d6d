"""Logging setup for chatsweep.

Sweep logs end up in cron mail, Cloud Logging or a rotating file, so every
handler shares one formatter that masks configured secrets (bot token,
credential paths) before a line leaves the process.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MASK = "***"

# Client libraries that log every HTTP round trip at INFO.
NOISY_LOGGERS = ("google", "google.auth", "urllib3", "grpc")


class SecretMaskingFormatter(logging.Formatter):
    """Formatter that replaces known secret values in the rendered line."""

    def __init__(self, secrets: Iterable[str], fmt: str = LOG_FORMAT, datefmt: Optional[str] = DATE_FORMAT) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        # Longest first so a secret containing another is masked whole.
        self._secrets = sorted({secret for secret in secrets if secret}, key=len, reverse=True)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        for secret in self._secrets:
            line = line.replace(secret, MASK)
        return line


def secrets_from_env(redact: dict) -> list[str]:
    """Resolve the env var names listed under redact.patterns to their values."""

    if not redact.get("enabled", False):
        return []
    return [value for value in (os.getenv(name) for name in redact.get("patterns", [])) if value]


def _file_handler(file_cfg: dict, project_root: str) -> RotatingFileHandler:
    path = file_cfg.get("path", "logs/chatsweep.log")
    if not os.path.isabs(path):
        path = os.path.join(project_root, path)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )


def build_handlers(config: dict, project_root: str) -> list[logging.Handler]:
    """Create the console/file handlers requested by the logging config."""

    formatter = SecretMaskingFormatter(secrets_from_env(config.get("redact", {})))
    handlers: list[logging.Handler] = []
    if config.get("console", True):
        handlers.append(logging.StreamHandler())
    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        handlers.append(_file_handler(file_cfg, project_root))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(config: Optional[dict], project_root: str) -> bool:
    """Install handlers on the root logger; returns False when logging is off."""

    config = config or {}
    if not config.get("enabled", False):
        return False

    level = getattr(logging, str(config.get("level", "INFO")).upper(), logging.INFO)
    handlers = build_handlers(config, project_root)
    if not handlers:
        return False

    logging.basicConfig(level=level, handlers=handlers, force=True)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    return True
