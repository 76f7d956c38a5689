"""Redfish HTTP client for iDRAC management controllers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import requests
import urllib3

from idraccsr.core.models import ConnectionParameters, Credentials

ACCEPTED_STATUSES = (200, 202)


class RedfishClientError(RuntimeError):
    """Base exception for Redfish client errors."""


class RedfishTransportError(RedfishClientError):
    """Raised when the request never produced an HTTP response."""


class RedfishStatusError(RedfishClientError):
    """Raised when the device answers with an unexpected HTTP status."""

    def __init__(self, message: str, status_code: int, detail: str = "") -> None:
        super().__init__(f"{message} status={status_code}" + (f" detail={detail}" if detail else ""))
        self.status_code = status_code
        self.detail = detail


class RedfishResponseError(RedfishClientError):
    """Raised when a response body is not the JSON the caller expects."""


class FeatureNotSupportedError(RedfishClientError):
    """Raised when the device does not advertise a required action."""


@dataclass(slots=True)
class RedfishResponse:
    """Status code and decoded JSON body of one request."""

    status_code: int
    body: dict[str, Any]


@dataclass(slots=True)
class RedfishClient:
    """Authenticated Redfish client bound to one management controller."""

    connection: ConnectionParameters
    credentials: Credentials
    session: requests.Session = field(default_factory=requests.Session)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def __post_init__(self) -> None:
        if not self.connection.verify_tls:
            self.logger.warning(
                "TLS certificate verification disabled host=%s; the device identity is not checked",
                self.connection.host,
                extra=self.log_extra,
            )
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    @property
    def log_extra(self) -> dict[str, Any]:
        return {"host": self.connection.host}

    def get(self, path: str, accepted: tuple[int, ...] = ACCEPTED_STATUSES) -> RedfishResponse:
        """GET ``path`` and return the decoded body when the status is accepted."""

        return self._request("GET", path, accepted=accepted)

    def post(
        self, path: str, payload: dict[str, Any], accepted: tuple[int, ...] = ACCEPTED_STATUSES
    ) -> RedfishResponse:
        """POST a JSON ``payload`` to ``path``."""

        return self._request("POST", path, accepted=accepted, payload=payload)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> RedfishClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _headers(self, with_body: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if with_body:
            headers["Content-Type"] = "application/json"
        if self.credentials.uses_token:
            headers["X-Auth-Token"] = str(self.credentials.token)
        return headers

    def _auth(self) -> tuple[str, str] | None:
        if self.credentials.uses_token:
            return None
        return (self.credentials.username or "", self.credentials.password or "")

    def _request(
        self,
        method: str,
        path: str,
        accepted: tuple[int, ...],
        payload: dict[str, Any] | None = None,
    ) -> RedfishResponse:
        url = f"{self.connection.base_url}{path}"
        self.logger.debug("redfish request method=%s url=%s", method, url, extra=self.log_extra)

        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(with_body=payload is not None),
                auth=self._auth(),
                json=payload,
                verify=self.connection.verify_tls,
                timeout=self.connection.timeout,
            )
        except requests.RequestException as exc:
            raise RedfishTransportError(f"{method} {path} failed: {exc}") from exc

        self.logger.debug(
            "redfish response method=%s path=%s status=%s", method, path, response.status_code, extra=self.log_extra
        )
        if response.status_code not in accepted:
            raise RedfishStatusError(f"{method} {path} failed", response.status_code, response.text.strip())

        try:
            body = response.json()
        except ValueError as exc:
            raise RedfishResponseError(f"{method} {path} returned a body that is not JSON") from exc

        if not isinstance(body, dict):
            raise RedfishResponseError(f"{method} {path} returned a JSON {type(body).__name__}, expected an object")

        return RedfishResponse(status_code=response.status_code, body=body)
