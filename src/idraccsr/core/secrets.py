"""Credential resolution helpers.

Credentials come from the command line first, then from ``IDRACCSR_*``
environment variables, and finally from an interactive prompt. A token always
wins over a username/password pair from the same or a lower-priority source.
"""

from __future__ import annotations

import getpass
import logging
import os
from typing import Callable, Mapping

from idraccsr.core.models import Credentials

logger = logging.getLogger(__name__)

ENV_PREFIX = "IDRACCSR_"
ENV_TOKEN = f"{ENV_PREFIX}TOKEN"
ENV_USERNAME = f"{ENV_PREFIX}USERNAME"
ENV_PASSWORD = f"{ENV_PREFIX}PASSWORD"

Prompt = Callable[[str], str]


class CredentialsError(ValueError):
    """Raised when no usable credentials could be obtained."""


def _env_value(environ: Mapping[str, str], key: str) -> str | None:
    value = environ.get(key)
    return value if value else None


def resolve_credentials(
    token: str | None = None,
    username: str | None = None,
    password: str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    prompt_username: Prompt = input,
    prompt_password: Prompt = getpass.getpass,
) -> Credentials:
    """Resolve credentials for the Redfish session.

    Resolution order:
    1. ``token`` argument
    2. ``username`` and ``password`` arguments
    3. ``IDRACCSR_TOKEN``
    4. ``IDRACCSR_USERNAME`` / ``IDRACCSR_PASSWORD`` (a CLI username is kept)
    5. interactive prompt for whatever is still missing
    """

    environ = os.environ if environ is None else environ

    if token:
        logger.debug("credentials resolved mode=token source=cli")
        return Credentials(token=token, source="cli")

    if username and password:
        logger.debug("credentials resolved mode=basic source=cli")
        return Credentials(username=username, password=password, source="cli")

    env_token = _env_value(environ, ENV_TOKEN)
    if env_token:
        logger.debug("credentials resolved mode=token source=env")
        return Credentials(token=env_token, source="env")

    username = username or _env_value(environ, ENV_USERNAME)
    password = password or _env_value(environ, ENV_PASSWORD)
    if username and password:
        logger.debug("credentials resolved mode=basic source=env")
        return Credentials(username=username, password=password, source="env")

    try:
        if not username:
            username = prompt_username("iDRAC username: ").strip()
        if not password:
            password = prompt_password(f"iDRAC password for {username}: ")
    except EOFError as exc:
        raise CredentialsError("No credentials supplied and no terminal to prompt on.") from exc
    except KeyboardInterrupt as exc:
        raise CredentialsError("Credential prompt cancelled.") from exc

    if not username or not password:
        raise CredentialsError("Username and password are required when no token is supplied.")

    logger.debug("credentials resolved mode=basic source=prompt")
    return Credentials(username=username, password=password, source="prompt")
