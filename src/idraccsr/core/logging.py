"""Logging setup for idraccsr.

Console records go to stderr; stdout is reserved for certificates and CSR text.
A log file is added when the directory from the ``logging`` section of
``config/local.yml`` (default ``./logs``) is writable. Every record carries a
``host`` field and has credentials masked.
"""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

DEFAULT_CONFIG_PATH = Path("config/local.yml")
LOG_FORMAT = "%(asctime)s | %(levelname)s | host=%(host)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(slots=True)
class LoggingConfig:
    """The ``logging`` section of local.yml with defaults applied."""

    directory: Path = Path("./logs")
    filename: str = "idraccsr.log"
    level: int = logging.INFO

    @classmethod
    def from_section(cls, section: Mapping[str, Any]) -> LoggingConfig:
        config = cls()
        if section.get("directory"):
            config.directory = Path(section["directory"]).expanduser()
        if section.get("filename"):
            config.filename = str(section["filename"])
        config.level = _parse_level(section.get("level"), config.level)
        return config


class HostContextFilter(logging.Filter):
    """Ensure every record contains a host name."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "host", None):
            record.host = "-"
        return True


class SecretScrubberFilter(logging.Filter):
    """Mask password and token values, including JSON-quoted keys from response bodies."""

    SECRET_PATTERN = re.compile(
        r"(password|secret|x-auth-token|token)(\"?\s*[=:]\s*\"?)([^\s,\"}]+)", re.IGNORECASE
    )

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except Exception:  # pragma: no cover - malformed record args
            return True

        cleaned = self.SECRET_PATTERN.sub(r"\1\2***", message)
        if cleaned != message:
            record.msg = cleaned
            record.args = ()
        return True


def _parse_level(raw_level: Any, default: int) -> int:
    if isinstance(raw_level, str):
        level = logging.getLevelName(raw_level.upper())
        if isinstance(level, int):
            return level
    if isinstance(raw_level, int) and not isinstance(raw_level, bool):
        return raw_level
    return default


def _read_logging_section(config_path: Path) -> Mapping[str, Any]:
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError):
        return {}

    section = data.get("logging") if isinstance(data, Mapping) else None
    return section if isinstance(section, Mapping) else {}


def _file_handler(config: LoggingConfig) -> logging.Handler | None:
    try:
        config.directory.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(config.directory / config.filename, encoding="utf-8")
    except OSError:
        return None


def setup_logging(config_path: str | Path | None = None, cli_level: int | None = None) -> logging.Logger:
    """Configure the root logger and return the ``idraccsr`` logger.

    ``cli_level`` (from ``--debug``) takes precedence over ``logging.level``.
    """

    config = LoggingConfig.from_section(_read_logging_section(Path(config_path or DEFAULT_CONFIG_PATH)))
    level = cli_level if cli_level is not None else config.level

    file_handler = _file_handler(config)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if file_handler is not None:
        handlers.append(file_handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(HostContextFilter())
        handler.addFilter(SecretScrubberFilter())
        root_logger.addHandler(handler)

    logger = logging.getLogger("idraccsr")
    logger.setLevel(level)

    if file_handler is None:
        logger.warning("Log directory '%s' is not writable; logging to console only.", config.directory)
    else:
        logger.debug("Logging initialized at %s", file_handler.baseFilename)
    return logger
