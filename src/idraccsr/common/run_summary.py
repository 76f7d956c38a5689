"""Helpers for building and persisting a machine-readable run summary."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class RunSummary:
    """Outcome of one invocation against one management controller."""

    host: str
    action: str
    timestamp: str
    status: str = "pending"
    feature_supported: bool | None = None
    certificates_count: int | None = None
    csr_path: str | None = None
    error: str | None = None

    def succeed(self) -> None:
        self.status = "success"

    def fail(self, error: object) -> None:
        self.status = "failed"
        self.error = str(error)

    def to_dict(self) -> dict[str, object]:
        return {
            "host": self.host,
            "action": self.action,
            "timestamp": self.timestamp,
            "status": self.status,
            "feature_supported": self.feature_supported,
            "certificates_count": self.certificates_count,
            "csr_path": self.csr_path,
            "error": self.error,
        }

    def save(self, path: Path, logger: logging.Logger) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")

        logger.info("run_summary_json_saved path=%s", path, extra={"host": self.host})
        return path
