"""Certificate service operations for iDRAC devices."""

from __future__ import annotations

import logging
from typing import Any

from idraccsr.core.models import CsrSubject
from idraccsr.redfish.client import FeatureNotSupportedError, RedfishClient, RedfishResponseError

CERTIFICATE_SERVICE_URI = "/redfish/v1/CertificateService"
HTTPS_CERTIFICATES_URI = "/redfish/v1/Managers/iDRAC.Embedded.1/NetworkProtocol/HTTPS/Certificates"
EXPANDED_CERTIFICATES_URI = f"{HTTPS_CERTIFICATES_URI}?$expand=*($levels=1)"
GENERATE_CSR_URI = f"{CERTIFICATE_SERVICE_URI}/Actions/CertificateService.GenerateCSR"
GENERATE_CSR_ACTION = "#CertificateService.GenerateCSR"

UNSUPPORTED_MESSAGE = "device firmware version or credentials do not support this feature"


def verify_feature_support(client: RedfishClient, logger: logging.Logger) -> bool:
    """Check the certificate service for the GenerateCSR action.

    Returns False (after logging a warning) when the action is missing. Status,
    transport and parse failures propagate as ``RedfishClientError``.
    """

    response = client.get(CERTIFICATE_SERVICE_URI)
    actions = response.body.get("Actions")
    if isinstance(actions, dict) and GENERATE_CSR_ACTION in actions:
        logger.debug("certificate service supports %s", GENERATE_CSR_ACTION, extra=client.log_extra)
        return True

    logger.warning("%s, %s not found", UNSUPPORTED_MESSAGE, GENERATE_CSR_ACTION, extra=client.log_extra)
    return False


def require_feature_support(client: RedfishClient, logger: logging.Logger) -> None:
    """Raise ``FeatureNotSupportedError`` unless the device can generate CSRs."""

    if not verify_feature_support(client, logger):
        raise FeatureNotSupportedError(UNSUPPORTED_MESSAGE)


def fetch_certificates(client: RedfishClient, logger: logging.Logger) -> list[dict[str, Any]]:
    """Return the certificates installed on the iDRAC HTTPS service, in device order."""

    response = client.get(EXPANDED_CERTIFICATES_URI)
    members = response.body.get("Members", [])
    if not isinstance(members, list):
        raise RedfishResponseError("certificate collection 'Members' is not a list")

    logger.info("certificates received count=%d", len(members), extra=client.log_extra)
    return members


def build_csr_payload(subject: CsrSubject) -> dict[str, Any]:
    """Build the GenerateCSR request body for the HTTPS certificate collection."""

    payload: dict[str, Any] = {
        "CertificateCollection": {"@odata.id": HTTPS_CERTIFICATES_URI},
        "City": subject.city,
        "CommonName": subject.common_name,
        "Country": subject.country,
        "Organization": subject.organization,
        "OrganizationalUnit": subject.organizational_unit,
        "State": subject.state,
    }
    if subject.email:
        payload["Email"] = subject.email
    return payload


def generate_csr(client: RedfishClient, subject: CsrSubject, logger: logging.Logger) -> str:
    """Ask the device to generate a CSR and return the PEM text."""

    payload = build_csr_payload(subject)
    logger.info(
        "requesting csr common_name=%s organization=%s",
        subject.common_name,
        subject.organization,
        extra=client.log_extra,
    )
    response = client.post(GENERATE_CSR_URI, payload, accepted=(200,))

    csr = response.body.get("CSRString")
    if not isinstance(csr, str):
        raise RedfishResponseError("GenerateCSR response has no 'CSRString' text")

    logger.info("csr generated bytes=%d", len(csr.encode("utf-8")), extra=client.log_extra)
    return csr
