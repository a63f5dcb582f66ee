"""Configuration for the MetroHero client."""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "METROHERO_API_KEY"
API_URL_ENV_VAR = "METROHERO_API_URL"
TIMEOUT_ENV_VAR = "METROHERO_TIMEOUT"

DEFAULT_API_URL = "https://dcmetrohero.com/api/v1"
DEFAULT_TIMEOUT = 10.0


def resolve_api_key(
    cli_value: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """
    Pick the API key to use.

    Args:
        cli_value: Key passed on the command line, if any.
        environ: Environment to read from. Defaults to os.environ.

    Returns:
        The command-line key when given, otherwise the key from
        METROHERO_API_KEY, otherwise None. Blank values count as missing.
    """
    if environ is None:
        environ = os.environ

    if cli_value and cli_value.strip():
        return cli_value.strip()

    env_value = environ.get(API_KEY_ENV_VAR, "")
    if env_value.strip():
        return env_value.strip()

    return None


def require_api_key(
    cli_value: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Like resolve_api_key(), but raise ConfigurationError when no key is set."""
    api_key = resolve_api_key(cli_value, environ)
    if api_key is None:
        raise ConfigurationError(
            f"No MetroHero API key: pass --api-key or set {API_KEY_ENV_VAR}"
        )
    return api_key


@dataclass
class Settings:
    """Connection settings for MetroHeroClient."""
    api_key: Optional[str] = None
    base_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT  # Seconds

    @classmethod
    def from_env(
        cls,
        api_key: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        if environ is None:
            environ = os.environ

        base_url = environ.get(API_URL_ENV_VAR, "").strip() or DEFAULT_API_URL

        raw_timeout = environ.get(TIMEOUT_ENV_VAR, "").strip()
        timeout = DEFAULT_TIMEOUT
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError as exc:
                raise ConfigurationError(
                    f"{TIMEOUT_ENV_VAR} must be a number of seconds, got '{raw_timeout}'"
                ) from exc
            if timeout <= 0:
                raise ConfigurationError(f"{TIMEOUT_ENV_VAR} must be positive")

        if base_url != DEFAULT_API_URL:
            logger.debug(f"Using MetroHero API at {base_url}")

        return cls(
            api_key=resolve_api_key(api_key, environ),
            base_url=base_url.rstrip("/"),
            timeout=timeout,
        )
