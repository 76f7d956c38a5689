"""Storage helpers for writing CSR text and certificate exports to disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Sequence


def write_csr(path: Path, csr: str, logger: logging.Logger, log_extra: dict[str, Any] | None = None) -> Path:
    """Write CSR text verbatim, replacing any existing file.

    Raises ``OSError`` when the file cannot be written.
    """

    log_extra = log_extra or {}
    path.parent.mkdir(parents=True, exist_ok=True)
    # newline="" keeps the device's line endings untouched
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(csr)
    logger.info("csr saved path=%s bytes=%d", path, len(csr.encode("utf-8")), extra=log_extra)
    return path


def save_certificates_json(
    path: Path,
    certificates: Sequence[dict[str, Any]],
    logger: logging.Logger,
    log_extra: dict[str, Any] | None = None,
) -> Path:
    """Persist fetched certificate records as a JSON array."""

    log_extra = log_extra or {}
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(list(certificates), indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("certificates saved path=%s count=%d", path, len(certificates), extra=log_extra)
    return path
