"""Shared fakes for Redfish tests."""

import json
import logging
import sys
from pathlib import Path
from typing import Any
from unittest import mock

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from idraccsr.core.models import ConnectionParameters, Credentials  # noqa: E402
from idraccsr.redfish.client import RedfishClient  # noqa: E402

CERTIFICATE_SERVICE_BODY = {
    "@odata.id": "/redfish/v1/CertificateService",
    "Actions": {
        "#CertificateService.GenerateCSR": {
            "target": "/redfish/v1/CertificateService/Actions/CertificateService.GenerateCSR"
        },
        "#CertificateService.ReplaceCertificate": {
            "target": "/redfish/v1/CertificateService/Actions/CertificateService.ReplaceCertificate"
        },
    },
}

LEGACY_CERTIFICATE_SERVICE_BODY = {
    "@odata.id": "/redfish/v1/CertificateService",
    "Actions": {},
}


def fake_response(status_code: int, body: Any = None, text: str | None = None) -> mock.Mock:
    response = mock.Mock()
    response.status_code = status_code
    if body is None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
        response.text = text or ""
    else:
        response.json.return_value = body
        response.text = text if text is not None else json.dumps(body)
    return response


def make_client(
    *responses: mock.Mock, credentials: Credentials | None = None, verify_tls: bool = True
) -> RedfishClient:
    session = mock.Mock()
    session.request.side_effect = list(responses)
    return RedfishClient(
        ConnectionParameters(host="192.168.0.120", verify_tls=verify_tls),
        credentials or Credentials(username="root", password="calvin"),
        session=session,
        logger=logging.getLogger("idraccsr.test"),
    )


def requested_urls(client: RedfishClient) -> list[str]:
    return [call.args[1] for call in client.session.request.call_args_list]
