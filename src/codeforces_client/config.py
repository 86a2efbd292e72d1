"""Client configuration objects.

The client never reads files or the environment on its own; a caller builds
these objects (see :mod:`codeforces_client.settings` for a dotenv helper) and
passes them to the factory functions in :mod:`codeforces_client.services`.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class ClientConfig(BaseModel):
    """Tunable settings shared by the API client, session and parsers."""

    model_config = ConfigDict(frozen=True)

    api_base_url: str = "https://codeforces.com/api"
    web_base_url: str = "https://codeforces.com"
    request_timeout: float = Field(default=30.0, gt=0)

    requests_per_second: float = Field(default=5.0, gt=0)
    rate_burst: int = Field(default=1, ge=1)
    cache_ttl: float = Field(default=300.0, ge=0)

    api_max_response_size: int = Field(default=10 * 1024 * 1024, gt=0)
    page_max_response_size: int = Field(default=5 * 1024 * 1024, gt=0)

    impersonate: str = "chrome"
    default_user_agent: str = DEFAULT_USER_AGENT

    poll_interval: float = Field(default=2.0, gt=0)
    verdict_timeout: float = Field(default=60.0, gt=0)

    api_key: SecretStr | None = None
    api_secret: SecretStr | None = None

    @field_validator("api_base_url", "web_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def has_api_credentials(self) -> bool:
        return bool(
            self.api_key
            and self.api_secret
            and self.api_key.get_secret_value()
            and self.api_secret.get_secret_value()
        )


class Credentials(BaseModel):
    """Stored identity for the HTML surface."""

    model_config = ConfigDict(frozen=True)

    handle: str = ""
    cookies: str = ""
    bypass_cookie: str = ""
    bypass_expires_at: datetime | None = None
    bypass_user_agent: str = ""
