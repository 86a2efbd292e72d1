"""Build configuration from environment variables and an optional ``.env`` file."""

import os
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from codeforces_client.config import ClientConfig, Credentials
from codeforces_client.domain.exceptions import ConfigurationError


def _expiry_from_env(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return datetime.fromtimestamp(int(raw.strip()), tz=timezone.utc)
    except ValueError as e:
        raise ConfigurationError(f"CF_CLEARANCE_EXPIRES must be unix seconds, got {raw!r}") from e


def load_from_env(dotenv_path: Optional[str] = None) -> tuple[ClientConfig, Credentials]:
    """
    Read client settings from the environment.

    Variables: ``CF_HANDLE``, ``CF_API_KEY``, ``CF_API_SECRET``,
    ``CF_COOKIES``, ``CF_CLEARANCE``, ``CF_CLEARANCE_EXPIRES`` (unix
    seconds) and ``CF_CLEARANCE_USER_AGENT``. Values already in the
    environment win over the ``.env`` file.

    Raises:
        ConfigurationError: A value cannot be parsed
    """
    load_dotenv(dotenv_path)

    try:
        config = ClientConfig(
            api_key=os.getenv("CF_API_KEY") or None,
            api_secret=os.getenv("CF_API_SECRET") or None,
        )
        credentials = Credentials(
            handle=os.getenv("CF_HANDLE", "").strip(),
            cookies=os.getenv("CF_COOKIES", ""),
            bypass_cookie=os.getenv("CF_CLEARANCE", "").strip(),
            bypass_expires_at=_expiry_from_env(os.getenv("CF_CLEARANCE_EXPIRES")),
            bypass_user_agent=os.getenv("CF_CLEARANCE_USER_AGENT", "").strip(),
        )
    except ValidationError as e:
        raise ConfigurationError(f"invalid configuration: {e}") from e

    return config, credentials
