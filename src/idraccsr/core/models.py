"""Data models for a single iDRAC certificate invocation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal


CredentialSource = Literal["cli", "env", "prompt"]
CsrAction = Literal["get", "generate", "check"]


@dataclass(slots=True)
class Credentials:
    """Authentication material for the Redfish service.

    Exactly one mode is active: ``token`` or the ``username``/``password`` pair.
    """

    token: str | None = None
    username: str | None = None
    password: str | None = None
    source: CredentialSource = "cli"

    @property
    def uses_token(self) -> bool:
        return bool(self.token)

    def __repr__(self) -> str:
        mode = "token" if self.uses_token else f"basic user={self.username}"
        return f"Credentials({mode}, source={self.source})"


@dataclass(slots=True)
class ConnectionParameters:
    """Target address and transport policy."""

    host: str
    verify_tls: bool = True
    timeout: float | None = None

    @property
    def base_url(self) -> str:
        host = self.host.rstrip("/")
        if host.startswith(("http://", "https://")):
            return host
        # bare IPv6 literal
        if host.count(":") > 1 and not host.startswith("["):
            return f"https://[{host}]"
        return f"https://{host}"


@dataclass(slots=True)
class CsrSubject:
    """Certificate subject fields supplied by the operator."""

    city: str
    state: str
    country: str
    common_name: str
    organization: str
    organizational_unit: str
    email: str | None = None


@dataclass(slots=True)
class CsrResult:
    """CSR text returned by the device and where it was saved."""

    csr: str
    saved_path: Path | None = None
