"""Authenticated HTML session: cookies, CSRF token and bypass cookie state."""

import re
from datetime import datetime, timezone
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

from curl_cffi.requests import Cookies
from loguru import logger

from codeforces_client.config import ClientConfig
from codeforces_client.domain.exceptions import (
    BotChallengeError,
    BypassCookieExpiredError,
    CSRFTokenNotFoundError,
    HTTPStatusError,
    NotAuthenticatedError,
    SessionValidationError,
)

from .http_client import AsyncHTTPClient, HTTPResponse
from .parsers.html_utils import extract_csrf_token, is_bot_challenge
from .parsers.interfaces import HTTPClientProtocol

BYPASS_COOKIE_NAME = "cf_clearance"
SESSION_COOKIE_NAMES = ("JSESSIONID", "X-User")

HANDLE_VARIABLE_PATTERN = re.compile(r"""\bhandle\s*=\s*["']([^"']*)["']""")

BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


class AuthSession:
    """
    Cookie-based session for the HTML side of the site.

    Holds the cookie jar, the user's handle, the latest CSRF token and the
    bot-mitigation bypass cookie together with the user agent that obtained
    it. A session has a single owner; it is not meant to be shared between
    concurrent submissions.
    """

    def __init__(
        self,
        http_client: Optional[HTTPClientProtocol] = None,
        config: Optional[ClientConfig] = None,
        handle: str = "",
    ):
        """
        Initialize session.

        Args:
            http_client: HTTP client instance (one is created when omitted)
            config: Client configuration
            handle: Codeforces handle the cookies belong to
        """
        self.config = config or ClientConfig()
        self._owns_http_client = http_client is None
        self.http_client = http_client or AsyncHTTPClient(
            timeout=self.config.request_timeout,
            impersonate=self.config.impersonate,
            max_size=self.config.page_max_response_size,
        )
        self.base_url = self.config.web_base_url

        host = urlparse(self.base_url).hostname or ""
        self.cookie_domain = f".{host}" if "." in host else host

        self._jar = Cookies()
        self._handle = handle
        self._csrf_token = ""
        self._bypass_value = ""
        self._bypass_expires_at: Optional[datetime] = None
        self._bypass_user_agent = ""

    # Cookies and identity

    def set_cookie(self, raw: str) -> None:
        """
        Load cookies copied from a browser, e.g. ``"JSESSIONID=x; 39ce7=y"``.

        Pairs are split on the first ``=``; malformed pairs are skipped. A
        ``cf_clearance`` entry becomes the bypass cookie value.
        """
        for pair in raw.split(";"):
            name, sep, value = pair.strip().partition("=")
            name, value = name.strip(), value.strip()
            if not sep or not name:
                continue

            self._jar.set(name, value, domain=self.cookie_domain, path="/")
            if name == BYPASS_COOKIE_NAME:
                self._bypass_value = value

    def set_handle(self, handle: str) -> None:
        self._handle = handle.strip()

    @property
    def handle(self) -> str:
        return self._handle

    @property
    def csrf_token(self) -> str:
        return self._csrf_token

    @csrf_token.setter
    def csrf_token(self, token: str) -> None:
        self._csrf_token = token

    @property
    def cookies(self) -> dict[str, str]:
        """Snapshot of the jar as ``name -> value``."""
        return {cookie.name: cookie.value or "" for cookie in self._jar.jar}

    def has_cookies(self) -> bool:
        return len(self.cookies) > 0

    def is_authenticated(self) -> bool:
        """Heuristic: a session-identifying cookie is present."""
        cookies = self.cookies
        return any(name in cookies for name in SESSION_COOKIE_NAMES)

    def is_ready_for_submission(self) -> bool:
        return self.is_authenticated() and bool(self._handle)

    # Bypass cookie

    def set_bypass_cookie(self, value: str, expires_at: datetime, user_agent: str) -> None:
        """
        Install the bot-mitigation bypass cookie.

        The cookie is only honoured for the user agent that obtained it, so
        every request made while it is set carries ``user_agent``.
        """
        self._bypass_value = value.strip()
        self._bypass_expires_at = _as_utc(expires_at)
        self._bypass_user_agent = user_agent.strip()
        if self._bypass_value:
            self._jar.set(BYPASS_COOKIE_NAME, self._bypass_value, domain=self.cookie_domain, path="/")

    def clear_bypass_cookie(self) -> None:
        self._bypass_value = ""
        self._bypass_expires_at = None
        self._bypass_user_agent = ""
        self._jar.delete(BYPASS_COOKIE_NAME)

    @property
    def has_bypass_cookie(self) -> bool:
        return bool(self._bypass_value) or self._bypass_expires_at is not None

    @property
    def bypass_expires_at(self) -> Optional[datetime]:
        return self._bypass_expires_at

    def bypass_cookie_valid(self, now: Optional[datetime] = None) -> bool:
        """True iff the bypass cookie is non-empty and expires strictly after ``now``."""
        if not self._bypass_value or self._bypass_expires_at is None:
            return False
        now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
        return self._bypass_expires_at > now

    @property
    def user_agent(self) -> str:
        if self.has_bypass_cookie and self._bypass_user_agent:
            return self._bypass_user_agent
        return self.config.default_user_agent

    # Requests

    def _check_bypass_cookie(self) -> None:
        if self.has_bypass_cookie and self._bypass_expires_at is None:
            raise BypassCookieExpiredError(
                "bypass cookie has no expiry or user agent; "
                "call set_bypass_cookie with the value, expiry and user agent of the issuing browser"
            )
        if self.has_bypass_cookie and not self.bypass_cookie_valid():
            expired = self._bypass_expires_at.isoformat() if self._bypass_expires_at else "unknown"
            raise BypassCookieExpiredError(
                f"bypass cookie is empty or expired (expires at {expired}); "
                "obtain a new cf_clearance value with the browser it was issued to"
            )

    def _headers(self, extra: Optional[Mapping[str, str]] = None) -> dict[str, str]:
        headers = {"User-Agent": self.user_agent, **BROWSER_HEADERS}
        if extra:
            headers.update(extra)
        return headers

    def _absorb(self, url: str, response: HTTPResponse) -> HTTPResponse:
        for name, value in response.cookies.items():
            self._jar.set(name, value, domain=self.cookie_domain, path="/")

        if is_bot_challenge(response.text):
            raise BotChallengeError(url, response.status_code)
        return response

    async def get(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        allow_redirects: bool = True,
    ) -> HTTPResponse:
        """
        GET a site page with the session's cookies and user agent.

        Raises:
            BypassCookieExpiredError: Bypass cookie is set but no longer valid
            BotChallengeError: A challenge page came back instead of content
            TransportError: Network failure
        """
        self._check_bypass_cookie()
        response = await self.http_client.request(
            "GET",
            url,
            params=params,
            headers=self._headers(),
            cookies=self.cookies,
            allow_redirects=allow_redirects,
            max_size=self.config.page_max_response_size,
        )
        return self._absorb(url, response)

    async def post(
        self,
        url: str,
        data: Mapping[str, Any],
        *,
        headers: Optional[Mapping[str, str]] = None,
        allow_redirects: bool = False,
    ) -> HTTPResponse:
        """POST a form. Redirects are not followed by default."""
        self._check_bypass_cookie()
        extra = {"Origin": self.base_url, "Referer": url}
        if headers:
            extra.update(headers)

        response = await self.http_client.request(
            "POST",
            url,
            data=data,
            headers=self._headers(extra),
            cookies=self.cookies,
            allow_redirects=allow_redirects,
            max_size=self.config.page_max_response_size,
        )
        return self._absorb(url, response)

    async def _get_root(self) -> str:
        url = f"{self.base_url}/"
        response = await self.get(url)
        if not response.is_success:
            raise HTTPStatusError(response.status_code, response.text, url)
        return response.text

    async def refresh_csrf_token(self) -> str:
        """
        Fetch the site root and store a fresh CSRF token.

        Raises:
            CSRFTokenNotFoundError: No supported token pattern matched
        """
        html = await self._get_root()
        token = extract_csrf_token(html)
        if not token:
            raise CSRFTokenNotFoundError(f"{self.base_url}/")

        self._csrf_token = token
        logger.debug("CSRF token refreshed")
        return token

    async def validate(self) -> None:
        """
        Confirm the site still recognises the session.

        Cookies can be revoked server-side while still present locally, so
        this loads the site root and requires a logout link and, when a handle
        is configured, that handle rendered on the page. The CSRF token is
        refreshed from the same page when one is found.

        Raises:
            NotAuthenticatedError: No cookies are loaded
            SessionValidationError: Page does not show a logged-in session
        """
        if not self.has_cookies():
            raise NotAuthenticatedError("no cookies set")

        html = await self._get_root()

        if "/logout" not in html:
            raise SessionValidationError("session invalid - not logged in")

        if self._handle and not _handle_rendered(html, self._handle):
            raise SessionValidationError(f"session does not belong to handle {self._handle!r}")

        token = extract_csrf_token(html)
        if token:
            self._csrf_token = token

        logger.info(f"Session validated for {self._handle or 'unknown handle'}")

    async def close(self) -> None:
        """Close the HTTP client if this session created it."""
        if self._owns_http_client:
            await self.http_client.close()


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _handle_rendered(html: str, handle: str) -> bool:
    """Handle appears as the page's ``handle = "..."`` variable or as visible text."""
    match = HANDLE_VARIABLE_PATTERN.search(html)
    if match:
        return match.group(1).lower() == handle.lower()

    wanted = re.escape(handle)
    return bool(
        re.search(rf">\s*{wanted}\s*<", html, re.IGNORECASE)
        or re.search(rf"/profile/{wanted}[\"'/]", html, re.IGNORECASE)
    )
