"""Unit tests for environment loading and the session factory."""

from datetime import datetime, timezone

import pytest

from codeforces_client.config import Credentials
from codeforces_client.domain.exceptions import BypassCookieExpiredError, ConfigurationError
from codeforces_client.services import create_session
from codeforces_client.settings import load_from_env

ENV_VARS = (
    "CF_HANDLE",
    "CF_API_KEY",
    "CF_API_SECRET",
    "CF_COOKIES",
    "CF_CLEARANCE",
    "CF_CLEARANCE_EXPIRES",
    "CF_CLEARANCE_USER_AGENT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so teardown also removes values loaded from .env files
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def empty_dotenv(tmp_path):
    path = tmp_path / ".env"
    path.write_text("")
    return str(path)


def test_defaults_without_environment(empty_dotenv):
    config, credentials = load_from_env(empty_dotenv)

    assert not config.has_api_credentials
    assert credentials.handle == ""
    assert credentials.bypass_expires_at is None


def test_reads_environment(monkeypatch, empty_dotenv):
    monkeypatch.setenv("CF_HANDLE", " tourist ")
    monkeypatch.setenv("CF_API_KEY", "key")
    monkeypatch.setenv("CF_API_SECRET", "secret")
    monkeypatch.setenv("CF_COOKIES", "JSESSIONID=abc; 39ce7=def")
    monkeypatch.setenv("CF_CLEARANCE", "clearance")
    monkeypatch.setenv("CF_CLEARANCE_EXPIRES", "1893456000")
    monkeypatch.setenv("CF_CLEARANCE_USER_AGENT", "Mozilla/5.0 Test")

    config, credentials = load_from_env(empty_dotenv)

    assert config.has_api_credentials
    assert config.api_key.get_secret_value() == "key"
    assert credentials.handle == "tourist"
    assert credentials.bypass_expires_at == datetime(2030, 1, 1, tzinfo=timezone.utc)
    assert credentials.bypass_user_agent == "Mozilla/5.0 Test"


def test_reads_dotenv_file(tmp_path):
    path = tmp_path / ".env"
    path.write_text("CF_HANDLE=petr\nCF_API_KEY=file-key\n")

    config, credentials = load_from_env(str(path))

    assert credentials.handle == "petr"
    assert config.api_key.get_secret_value() == "file-key"
    assert not config.has_api_credentials


def test_invalid_expiry(monkeypatch, empty_dotenv):
    monkeypatch.setenv("CF_CLEARANCE_EXPIRES", "tomorrow")

    with pytest.raises(ConfigurationError, match="CF_CLEARANCE_EXPIRES"):
        load_from_env(empty_dotenv)


def test_create_session_from_credentials(monkeypatch, empty_dotenv, fake_http):
    monkeypatch.setenv("CF_HANDLE", "tourist")
    monkeypatch.setenv("CF_COOKIES", "JSESSIONID=abc; 39ce7=def")
    monkeypatch.setenv("CF_CLEARANCE", "clearance")
    monkeypatch.setenv("CF_CLEARANCE_EXPIRES", "1893456000")
    monkeypatch.setenv("CF_CLEARANCE_USER_AGENT", "Mozilla/5.0 Test")
    config, credentials = load_from_env(empty_dotenv)

    session = create_session(config, credentials, fake_http)

    assert session.is_ready_for_submission()
    assert session.cookies["cf_clearance"] == "clearance"
    assert session.user_agent == "Mozilla/5.0 Test"
    assert session.bypass_cookie_valid(datetime(2029, 1, 1, tzinfo=timezone.utc))


@pytest.mark.asyncio
async def test_bypass_cookie_without_expiry_is_refused(fake_http):
    session = create_session(
        credentials=Credentials(handle="tourist", cookies="JSESSIONID=abc", bypass_cookie="clearance"),
        http_client=fake_http,
    )

    with pytest.raises(BypassCookieExpiredError):
        await session.get("https://codeforces.com/")
