"""Configuration helpers for idraccsr."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any, Mapping

import yaml

from idraccsr.core.models import ConnectionParameters, CsrSubject

DEFAULT_CONFIG_PATH = Path("config/local.yml")
DEFAULT_CSR_FILENAME = "idrac_generated_csr.txt"

# CLI option name -> CsrSubject attribute
SUBJECT_FIELDS: tuple[tuple[str, str], ...] = (
    ("city", "city"),
    ("state", "state"),
    ("country", "country"),
    ("commonname", "common_name"),
    ("org", "organization"),
    ("orgunit", "organizational_unit"),
)


class LocalConfigError(ValueError):
    """Raised when local.yml cannot be parsed or validated."""


class SubjectError(ValueError):
    """Raised when CSR subject fields are missing or invalid."""


@dataclass(slots=True)
class RedfishSettings:
    """Values from the ``redfish`` section of local.yml."""

    host: str | None = None
    username: str | None = None
    verify_tls: bool | None = None
    timeout: float | None = None


@dataclass(slots=True)
class LocalConfig:
    """Parsed local.yml."""

    redfish: RedfishSettings
    csr_file: Path | None = None
    source_path: Path | None = None


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise LocalConfigError(f"local.yml: section '{name}' must be a mapping.")
    return value


def _optional_string(mapping: Mapping[str, Any], field: str, context: str) -> str | None:
    value = mapping.get(field)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise LocalConfigError(f"{context}: field '{field}' must be a string.")
    return value


def _validate_timeout(value: Any, context: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LocalConfigError(f"{context}: timeout must be a number of seconds.")
    if value <= 0:
        raise LocalConfigError(f"{context}: timeout must be greater than zero.")
    return float(value)


def _parse_redfish_section(section: Mapping[str, Any]) -> RedfishSettings:
    context = "local.yml redfish"
    for forbidden in ("password", "token"):
        if forbidden in section:
            raise LocalConfigError(
                f"{context}: field '{forbidden}' is not allowed in local.yml. "
                "Use the command line, IDRACCSR_* environment variables or the prompt."
            )

    verify_tls = section.get("verify_tls")
    if verify_tls is not None and not isinstance(verify_tls, bool):
        raise LocalConfigError(f"{context}: verify_tls must be true or false.")

    return RedfishSettings(
        host=_optional_string(section, "host", context),
        username=_optional_string(section, "username", context),
        verify_tls=verify_tls,
        timeout=_validate_timeout(section.get("timeout"), context),
    )


def load_local_config(path: Path | None = None, logger: logging.Logger | None = None) -> LocalConfig:
    """Load and validate local.yml. A missing file yields defaults."""

    logger = logger or logging.getLogger(__name__)
    config_file = Path(path) if path else DEFAULT_CONFIG_PATH

    if not config_file.exists():
        logger.debug("local config not found at %s", config_file)
        return LocalConfig(redfish=RedfishSettings())

    try:
        with config_file.open("r", encoding="utf-8") as handle:
            raw_data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise LocalConfigError(f"Unable to read local config: {config_file}") from exc

    if not isinstance(raw_data, Mapping):
        raise LocalConfigError("Top-level local.yml structure must be a mapping.")

    redfish = _parse_redfish_section(_section(raw_data, "redfish"))
    csr_file = _optional_string(_section(raw_data, "output"), "csr_file", "local.yml output")

    logger.debug("local config loaded from %s", config_file)
    return LocalConfig(
        redfish=redfish,
        csr_file=Path(csr_file).expanduser() if csr_file else None,
        source_path=config_file,
    )


def resolve_connection(
    cli_host: str | None,
    cli_insecure: bool,
    cli_timeout: float | None,
    local_config: LocalConfig,
    logger: logging.Logger,
) -> ConnectionParameters:
    """Build connection parameters with priority: CLI > local.yml > default."""

    host = cli_host or local_config.redfish.host
    if not host:
        raise LocalConfigError("No target address given. Use --ip or redfish.host in local.yml.")

    if cli_insecure:
        verify_tls, source = False, "cli"
    elif local_config.redfish.verify_tls is not None:
        verify_tls, source = local_config.redfish.verify_tls, "local_yml"
    else:
        verify_tls, source = True, "default"

    if cli_timeout is not None:
        timeout = _validate_timeout(cli_timeout, "--timeout")
    else:
        timeout = local_config.redfish.timeout

    logger.debug(
        "connection resolved host=%s verify_tls=%s source=%s timeout=%s",
        host,
        verify_tls,
        source,
        timeout,
        extra={"host": host},
    )
    return ConnectionParameters(host=host, verify_tls=verify_tls, timeout=timeout)


def resolve_csr_path(cli_output: Path | None, local_config: LocalConfig) -> Path:
    """Return the CSR output path: CLI > local.yml > ./idrac_generated_csr.txt."""

    if cli_output:
        return Path(cli_output).expanduser()
    if local_config.csr_file:
        return local_config.csr_file
    return Path.cwd() / DEFAULT_CSR_FILENAME


def build_subject(values: Mapping[str, Any]) -> CsrSubject:
    """Build a CsrSubject from CLI values, reporting every missing field at once."""

    missing = [option for option, _ in SUBJECT_FIELDS if not values.get(option)]
    if missing:
        flags = ", ".join(f"--{option}" for option in missing)
        raise SubjectError(f"CSR generation requires: {flags}.")

    fields = {attribute: values[option] for option, attribute in SUBJECT_FIELDS}
    email = values.get("email") or None
    return CsrSubject(email=email, **fields)
