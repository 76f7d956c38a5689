"""Command-line interface for idraccsr."""

from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from idraccsr.common.run_summary import RunSummary
from idraccsr.core.config import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_CSR_FILENAME,
    LocalConfigError,
    SubjectError,
    build_subject,
    load_local_config,
    resolve_connection,
    resolve_csr_path,
)
from idraccsr.core.logging import setup_logging
from idraccsr.core.models import CsrAction, CsrResult, CsrSubject
from idraccsr.core.secrets import CredentialsError, resolve_credentials
from idraccsr.core.storage import save_certificates_json, write_csr
from idraccsr.redfish.certificates import fetch_certificates, generate_csr, require_feature_support
from idraccsr.redfish.client import FeatureNotSupportedError, RedfishClient, RedfishClientError

SCRIPT_EXAMPLES = f"""\
- idraccsr --ip 192.168.0.120 -u root -p calvin --get
    Print the certificates installed on the iDRAC HTTPS service.

- idraccsr --ip 192.168.0.120 -x 2a5c3c5e9b8d4f7a --generate --city Austin --state Texas \\
    --country US --commonname Test --org "Test group" --orgunit lab --email tester@email.com
    Generate a CSR using an X-Auth-Token and save it to {DEFAULT_CSR_FILENAME}.

- idraccsr --ip 192.168.0.120 -u root --insecure --get
    Prompt for the password and skip TLS certificate verification (self-signed iDRAC certificate).
"""


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""

    parser = argparse.ArgumentParser(
        description=(
            "Get the TLS certificates installed on an iDRAC HTTPS service or generate a "
            "Certificate Signing Request through the Redfish API."
        ),
    )

    connection = parser.add_argument_group("connection")
    connection.add_argument("--ip", dest="host", help="iDRAC address. Overrides redfish.host in local.yml.")
    connection.add_argument("-u", "--username", help="iDRAC username")
    connection.add_argument("-p", "--password", help="iDRAC password. Prompted for when omitted.")
    connection.add_argument("-x", "--token", help="X-Auth-Token session token. Takes precedence over -u/-p.")
    connection.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS certificate verification of the iDRAC. Only use on trusted networks.",
    )
    connection.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")

    actions = parser.add_mutually_exclusive_group()
    actions.add_argument("--get", action="store_true", help="Get the certificates installed on the HTTPS service")
    actions.add_argument("--generate", action="store_true", help="Generate a CSR with the subject fields below")

    subject = parser.add_argument_group("CSR subject")
    subject.add_argument("--city", help="City or locality")
    subject.add_argument("--state", help="State or province")
    subject.add_argument("--country", help="Two-letter country code")
    subject.add_argument("--commonname", help="Common name, usually the iDRAC host name")
    subject.add_argument("--org", help="Organization name")
    subject.add_argument("--orgunit", help="Organizational unit")
    subject.add_argument("--email", help="E-mail address (optional)")

    output = parser.add_argument_group("output")
    output.add_argument(
        "--output",
        type=Path,
        default=None,
        help=f"CSR file path. Defaults to ./{DEFAULT_CSR_FILENAME} or output.csr_file in local.yml.",
    )
    output.add_argument("--certificates-file", type=Path, default=None, help="Also save certificates as JSON")
    output.add_argument("--summary-file", type=Path, default=None, help="Save a JSON summary of the run")

    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to local.yml")
    parser.add_argument("--debug", action="store_true", help="Enable debug-level logging")
    parser.add_argument("--script-examples", action="store_true", help="Print usage examples and exit")

    return parser


def _selected_action(args: argparse.Namespace) -> CsrAction:
    if args.get:
        return "get"
    if args.generate:
        return "generate"
    return "check"


def main(argv: list[str] | None = None) -> int:
    """Run the CLI."""

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.script_examples:
        print(SCRIPT_EXAMPLES)
        return 0

    logger = setup_logging(args.config, cli_level=logging.DEBUG if args.debug else None)
    action = _selected_action(args)

    try:
        local_config = load_local_config(args.config, logger)
        connection = resolve_connection(args.host, args.insecure, args.timeout, local_config, logger)
        subject = build_subject(vars(args)) if action == "generate" else None
        credentials = resolve_credentials(
            args.token, args.username or local_config.redfish.username, args.password
        )
    except (LocalConfigError, SubjectError, CredentialsError) as exc:
        logger.error("%s", exc)
        return 1

    csr_path = resolve_csr_path(args.output, local_config)

    with RedfishClient(connection, credentials, logger=logger) as client:
        return execute(
            client,
            action,
            logger,
            subject=subject,
            csr_path=csr_path,
            certificates_file=args.certificates_file,
            summary_file=args.summary_file,
        )


def execute(
    client: RedfishClient,
    action: CsrAction,
    logger: logging.Logger,
    *,
    subject: CsrSubject | None = None,
    csr_path: Path | None = None,
    certificates_file: Path | None = None,
    summary_file: Path | None = None,
) -> int:
    """Check the device for CSR support, then run at most one certificate action."""

    summary = RunSummary(host=client.connection.host, action=action, timestamp=_timestamp())
    exit_code = _execute(client, action, logger, summary, subject, csr_path, certificates_file)

    if summary_file is not None:
        try:
            summary.save(summary_file, logger)
        except OSError as exc:
            logger.error('unable to save run summary path=%s reason="%s"', summary_file, exc, extra=client.log_extra)

    return exit_code


def _execute(
    client: RedfishClient,
    action: CsrAction,
    logger: logging.Logger,
    summary: RunSummary,
    subject: CsrSubject | None,
    csr_path: Path | None,
    certificates_file: Path | None,
) -> int:
    log_extra = client.log_extra

    try:
        require_feature_support(client, logger)
    except FeatureNotSupportedError as exc:
        summary.feature_supported = False
        summary.fail(exc)
        return 1
    except RedfishClientError as exc:
        logger.error("capability check failed: %s", exc, extra=log_extra)
        summary.fail(exc)
        return 1

    summary.feature_supported = True

    if action == "get":
        return _run_get(client, logger, summary, certificates_file)
    if action == "generate":
        if subject is None:
            raise ValueError("subject is required to generate a CSR")
        return _run_generate(client, subject, csr_path or Path(DEFAULT_CSR_FILENAME), logger, summary)

    logger.info("no action requested, use --get or --generate", extra=log_extra)
    summary.succeed()
    return 0


def _run_get(
    client: RedfishClient, logger: logging.Logger, summary: RunSummary, certificates_file: Path | None
) -> int:
    log_extra = client.log_extra
    try:
        certificates = fetch_certificates(client, logger)
    except RedfishClientError as exc:
        logger.error("certificate request failed: %s", exc, extra=log_extra)
        summary.fail(exc)
        return 1

    summary.certificates_count = len(certificates)
    for certificate in certificates:
        print(json.dumps(certificate, indent=2, ensure_ascii=False))

    if certificates_file is not None:
        try:
            save_certificates_json(certificates_file, certificates, logger, log_extra)
        except OSError as exc:
            logger.error('unable to save certificates path=%s reason="%s"', certificates_file, exc, extra=log_extra)
            summary.fail(exc)
            return 1

    summary.succeed()
    return 0


def _run_generate(
    client: RedfishClient, subject: CsrSubject, csr_path: Path, logger: logging.Logger, summary: RunSummary
) -> int:
    log_extra = client.log_extra
    try:
        csr = generate_csr(client, subject, logger)
    except RedfishClientError as exc:
        logger.error("csr generation failed: %s", exc, extra=log_extra)
        summary.fail(exc)
        return 1

    result = CsrResult(csr=csr)
    print(result.csr)

    try:
        result.saved_path = write_csr(csr_path, result.csr, logger, log_extra)
    except OSError as exc:
        logger.error('unable to write csr file path=%s reason="%s"', csr_path, exc, extra=log_extra)
        summary.fail(exc)
        return 1

    summary.csr_path = str(result.saved_path)
    summary.succeed()
    return 0


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")
