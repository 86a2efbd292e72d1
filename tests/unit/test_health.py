"""Unit tests for the health probes."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from codeforces_client.domain.exceptions import (
    HTTPStatusError,
    PageStructureError,
    SessionValidationError,
    TransportError,
)
from codeforces_client.domain.models.api import User
from codeforces_client.infrastructure.session import AuthSession
from codeforces_client.services import create_health_probes, run_health_probes
from codeforces_client.services.health import (
    ProbeResult,
    ProbeStatus,
    RecoveryAction,
    check_api,
    check_handle,
    check_session,
    check_web_structure,
    overall_status,
)

HOME_LOGGED_IN = '<a href="/profile/tourist">tourist</a><a href="/tourist/logout">Logout</a>'


@pytest.fixture
def api_client():
    client = MagicMock()
    client.ping = AsyncMock(return_value=None)
    client.get_user_info = AsyncMock(return_value=[User(handle="tourist", rank="legendary grandmaster", rating=3800)])
    return client


@pytest.fixture
def page_parser():
    parser = MagicMock()
    parser.verify_page_structure = AsyncMock(return_value=None)
    return parser


@pytest.mark.asyncio
async def test_check_api_healthy(api_client):
    result = await check_api(api_client)

    assert result.ok
    assert result.name == "CF API"
    assert result.action is RecoveryAction.NONE


@pytest.mark.asyncio
async def test_check_api_unreachable(api_client):
    api_client.ping.side_effect = TransportError("dns failure")

    result = await check_api(api_client)

    assert result.status is ProbeStatus.DEGRADED
    assert result.action is RecoveryAction.RETRY
    assert result.details["category"] == "transport"


@pytest.mark.asyncio
async def test_check_web_structure_changed(page_parser):
    page_parser.verify_page_structure.side_effect = PageStructureError(["samples"], "2024.12")

    result = await check_web_structure(page_parser)

    assert result.status is ProbeStatus.DEGRADED
    assert result.action is RecoveryAction.MANUAL_FIX
    assert result.details == {"missing": ["samples"], "selector_version": "2024.12"}


@pytest.mark.asyncio
async def test_check_web_structure_page_unavailable(page_parser):
    page_parser.verify_page_structure.side_effect = HTTPStatusError(503)

    result = await check_web_structure(page_parser)

    assert result.action is RecoveryAction.RETRY


@pytest.mark.asyncio
async def test_check_handle_missing(api_client):
    result = await check_handle(api_client, "")

    assert result.status is ProbeStatus.DEGRADED
    assert result.action is RecoveryAction.USER_PROMPT
    api_client.get_user_info.assert_not_called()


@pytest.mark.asyncio
async def test_check_handle_found(api_client):
    result = await check_handle(api_client, "tourist")

    assert result.ok
    assert result.details == {"handle": "tourist", "rating": 3800, "rank": "legendary grandmaster"}
    api_client.get_user_info.assert_awaited_once_with(["tourist"])


@pytest.mark.asyncio
async def test_check_handle_not_found(api_client):
    api_client.get_user_info.return_value = []

    result = await check_handle(api_client, "nobody")

    assert result.status is ProbeStatus.CRITICAL
    assert result.action is RecoveryAction.MANUAL_FIX


@pytest.mark.asyncio
async def test_check_session_healthy(session, fake_http, respond):
    fake_http.push(respond(HOME_LOGGED_IN))

    result = await check_session(session)

    assert result.ok
    assert result.message == "Logged in as tourist"


@pytest.mark.asyncio
async def test_check_session_not_logged_in(fake_http, config):
    result = await check_session(AuthSession(fake_http, config))

    assert result.action is RecoveryAction.USER_PROMPT
    assert fake_http.calls == []


@pytest.mark.asyncio
async def test_check_session_expired_bypass_cookie(session, fake_http):
    session.set_bypass_cookie("old", datetime.now(timezone.utc) - timedelta(hours=1), "UA")

    result = await check_session(session)

    assert result.message == "Bypass cookie expired"
    assert result.action is RecoveryAction.USER_PROMPT
    assert fake_http.calls == []


@pytest.mark.asyncio
async def test_check_session_rejected(session, fake_http, respond):
    fake_http.push(respond("<a href='/enter'>Enter</a>"))

    result = await check_session(session)

    assert result.status is ProbeStatus.DEGRADED
    assert result.action is RecoveryAction.USER_PROMPT


@pytest.mark.asyncio
async def test_check_session_network_failure(session, fake_http):
    fake_http.push(TransportError("timeout"))

    result = await check_session(session)

    assert result.action is RecoveryAction.RETRY


def test_overall_status():
    healthy = ProbeResult("a", ProbeStatus.HEALTHY, "ok")
    degraded = ProbeResult("b", ProbeStatus.DEGRADED, "meh")
    critical = ProbeResult("c", ProbeStatus.CRITICAL, "bad")

    assert overall_status([]) is ProbeStatus.HEALTHY
    assert overall_status([healthy, degraded]) is ProbeStatus.DEGRADED
    assert overall_status([degraded, critical, healthy]) is ProbeStatus.CRITICAL


@pytest.mark.asyncio
async def test_probes_run_in_order(api_client, page_parser, session, fake_http, respond):
    fake_http.push(respond(HOME_LOGGED_IN))

    probes = create_health_probes(api_client, page_parser, session)
    results = await run_health_probes(probes)

    assert [r.name for r in results] == ["CF API", "CF Web Structure", "CF Handle", "CF Session"]
    assert all(r.ok for r in results)


@pytest.mark.asyncio
async def test_probes_without_session(api_client, page_parser):
    probes = create_health_probes(api_client, page_parser, handle="tourist")

    results = await run_health_probes(probes)

    assert len(results) == 3
    assert overall_status(results) is ProbeStatus.HEALTHY


@pytest.mark.asyncio
async def test_session_validation_error_is_reported(session):
    session.validate = AsyncMock(side_effect=SessionValidationError("revoked"))

    result = await check_session(session)

    assert result.details == {"error": "revoked"}
