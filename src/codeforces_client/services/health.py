"""Read-only health probes for the API, page structure, handle and session."""

import time
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Iterable, Optional

from loguru import logger

from codeforces_client.domain.exceptions import (
    AuthenticationError,
    CodeforcesClientError,
    PageStructureError,
)
from codeforces_client.infrastructure.codeforces_client import CodeforcesApiClient
from codeforces_client.infrastructure.parsers import ProblemPageParserProtocol
from codeforces_client.infrastructure.session import AuthSession


class ProbeStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    CRITICAL = "critical"


class RecoveryAction(str, Enum):
    """What a caller should do about a failed probe."""

    NONE = "none"
    RETRY = "retry"
    USER_PROMPT = "user_prompt"
    MANUAL_FIX = "manual_fix"


@dataclass(frozen=True)
class ProbeResult:
    name: str
    status: ProbeStatus
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    action: RecoveryAction = RecoveryAction.NONE
    duration: timedelta = field(default_factory=timedelta)

    @property
    def ok(self) -> bool:
        return self.status is ProbeStatus.HEALTHY


class _Timer:
    def __init__(self) -> None:
        self._start = time.perf_counter()

    @property
    def elapsed(self) -> timedelta:
        return timedelta(seconds=time.perf_counter() - self._start)


async def check_api(api_client: CodeforcesApiClient) -> ProbeResult:
    """Ping the JSON API, bypassing the cache."""
    name = "CF API"
    timer = _Timer()
    try:
        await api_client.ping()
    except CodeforcesClientError as e:
        logger.debug(f"API probe failed: {e}")
        return ProbeResult(
            name,
            ProbeStatus.DEGRADED,
            "CF API unreachable",
            details={"error": str(e), "category": e.category.value},
            action=RecoveryAction.RETRY,
            duration=timer.elapsed,
        )
    return ProbeResult(name, ProbeStatus.HEALTHY, "CF API OK", duration=timer.elapsed)


async def check_web_structure(parser: ProblemPageParserProtocol) -> ProbeResult:
    """Verify the selector table against a reference problem page."""
    name = "CF Web Structure"
    timer = _Timer()
    try:
        await parser.verify_page_structure()
    except PageStructureError as e:
        return ProbeResult(
            name,
            ProbeStatus.DEGRADED,
            "CF page structure changed",
            details={"missing": e.missing, "selector_version": e.selector_version},
            action=RecoveryAction.MANUAL_FIX,
            duration=timer.elapsed,
        )
    except CodeforcesClientError as e:
        return ProbeResult(
            name,
            ProbeStatus.DEGRADED,
            "CF problem page unavailable",
            details={"error": str(e), "category": e.category.value},
            action=RecoveryAction.RETRY,
            duration=timer.elapsed,
        )
    return ProbeResult(name, ProbeStatus.HEALTHY, "CF web structure OK", duration=timer.elapsed)


async def check_handle(api_client: CodeforcesApiClient, handle: Optional[str]) -> ProbeResult:
    """Confirm the configured handle exists."""
    name = "CF Handle"
    timer = _Timer()
    if not handle:
        return ProbeResult(
            name,
            ProbeStatus.DEGRADED,
            "CF handle not configured",
            details={"hint": "set CF_HANDLE"},
            action=RecoveryAction.USER_PROMPT,
            duration=timer.elapsed,
        )

    try:
        users = await api_client.get_user_info([handle])
    except CodeforcesClientError as e:
        return ProbeResult(
            name,
            ProbeStatus.DEGRADED,
            "Cannot verify handle",
            details={"error": str(e), "category": e.category.value},
            action=RecoveryAction.RETRY,
            duration=timer.elapsed,
        )

    if not users:
        return ProbeResult(
            name,
            ProbeStatus.CRITICAL,
            "Handle not found on CF",
            details={"handle": handle},
            action=RecoveryAction.MANUAL_FIX,
            duration=timer.elapsed,
        )

    user = users[0]
    return ProbeResult(
        name,
        ProbeStatus.HEALTHY,
        f"{user.handle} ({user.rank or 'unranked'}, {user.rating or 'unrated'})",
        details={"handle": user.handle, "rating": user.rating, "rank": user.rank},
        duration=timer.elapsed,
    )


async def check_session(session: AuthSession) -> ProbeResult:
    """Check cookies, bypass cookie and that the site recognises the session."""
    name = "CF Session"
    timer = _Timer()

    if not session.is_ready_for_submission():
        return ProbeResult(
            name,
            ProbeStatus.DEGRADED,
            "Not logged in",
            details={"has_handle": bool(session.handle), "authenticated": session.is_authenticated()},
            action=RecoveryAction.USER_PROMPT,
            duration=timer.elapsed,
        )

    if session.has_bypass_cookie and not session.bypass_cookie_valid():
        expires_at = session.bypass_expires_at
        return ProbeResult(
            name,
            ProbeStatus.DEGRADED,
            "Bypass cookie expired",
            details={"expires_at": expires_at.isoformat() if expires_at else None},
            action=RecoveryAction.USER_PROMPT,
            duration=timer.elapsed,
        )

    try:
        await session.validate()
    except AuthenticationError as e:
        return ProbeResult(
            name,
            ProbeStatus.DEGRADED,
            "Session rejected by CF",
            details={"error": str(e)},
            action=RecoveryAction.USER_PROMPT,
            duration=timer.elapsed,
        )
    except CodeforcesClientError as e:
        return ProbeResult(
            name,
            ProbeStatus.DEGRADED,
            "Cannot verify session",
            details={"error": str(e), "category": e.category.value},
            action=RecoveryAction.RETRY,
            duration=timer.elapsed,
        )

    return ProbeResult(name, ProbeStatus.HEALTHY, f"Logged in as {session.handle}", duration=timer.elapsed)


def overall_status(results: Iterable[ProbeResult]) -> ProbeStatus:
    """Worst status among probe results; HEALTHY when there are none."""
    statuses = {result.status for result in results}
    if ProbeStatus.CRITICAL in statuses:
        return ProbeStatus.CRITICAL
    if ProbeStatus.DEGRADED in statuses:
        return ProbeStatus.DEGRADED
    return ProbeStatus.HEALTHY
