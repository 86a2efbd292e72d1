from functools import partial
from typing import Awaitable, Callable, Optional

from codeforces_client.config import ClientConfig, Credentials
from codeforces_client.infrastructure.codeforces_client import CodeforcesApiClient
from codeforces_client.infrastructure.parsers import (
    CURRENT_SELECTORS,
    HTTPClientProtocol,
    ProblemPageParser,
    SelectorProvider,
    SelectorSet,
)
from codeforces_client.infrastructure.session import AuthSession
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
from codeforces_client.services.submission import SubmissionService, classify_submit_response

HealthProbe = Callable[[], Awaitable[ProbeResult]]


def create_api_client(
    config: Optional[ClientConfig] = None, http_client: Optional[HTTPClientProtocol] = None
) -> CodeforcesApiClient:
    """Factory function to create an API client with its own cache and rate limiter."""
    return CodeforcesApiClient(config or ClientConfig(), http_client)


def create_session(
    config: Optional[ClientConfig] = None,
    credentials: Optional[Credentials] = None,
    http_client: Optional[HTTPClientProtocol] = None,
) -> AuthSession:
    """Factory function to create a session loaded with stored credentials."""
    credentials = credentials or Credentials()
    session = AuthSession(http_client, config or ClientConfig(), handle=credentials.handle)

    if credentials.cookies:
        session.set_cookie(credentials.cookies)

    if credentials.bypass_cookie and credentials.bypass_expires_at is not None:
        session.set_bypass_cookie(
            credentials.bypass_cookie,
            credentials.bypass_expires_at,
            credentials.bypass_user_agent,
        )
    elif credentials.bypass_cookie:
        # Without an expiry the cookie is held but refused until set_bypass_cookie is called.
        session.set_cookie(f"cf_clearance={credentials.bypass_cookie}")

    return session


def _resolve_selectors(selectors: SelectorSet | SelectorProvider) -> SelectorSet:
    return selectors if isinstance(selectors, SelectorSet) else selectors.current()


def create_page_parser(
    session: AuthSession, selectors: SelectorSet | SelectorProvider = CURRENT_SELECTORS
) -> ProblemPageParser:
    return ProblemPageParser(session, _resolve_selectors(selectors), base_url=session.base_url)


def create_submission_service(
    session: AuthSession, selectors: SelectorSet | SelectorProvider = CURRENT_SELECTORS
) -> SubmissionService:
    """Factory function to create a submission service; the session must be logged in."""
    return SubmissionService(session, session.config, _resolve_selectors(selectors))


def create_health_probes(
    api_client: CodeforcesApiClient,
    parser: ProblemPageParser,
    session: Optional[AuthSession] = None,
    handle: Optional[str] = None,
) -> list[HealthProbe]:
    """Probes in the order they should run: API, page structure, handle, session."""
    handle = handle if handle is not None else (session.handle if session else None)
    probes: list[HealthProbe] = [
        partial(check_api, api_client),
        partial(check_web_structure, parser),
        partial(check_handle, api_client, handle),
    ]
    if session is not None:
        probes.append(partial(check_session, session))
    return probes


async def run_health_probes(probes: list[HealthProbe]) -> list[ProbeResult]:
    """Run probes one after another so they share the rate limit politely."""
    return [await probe() for probe in probes]


__all__ = [
    "HealthProbe",
    "ProbeResult",
    "ProbeStatus",
    "RecoveryAction",
    "SubmissionService",
    "classify_submit_response",
    "create_api_client",
    "create_health_probes",
    "create_page_parser",
    "create_session",
    "create_submission_service",
    "overall_status",
    "run_health_probes",
]
