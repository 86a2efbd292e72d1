"""Async HTTP client built on curl_cffi browser impersonation."""

from dataclasses import dataclass, field
from typing import Any, AsyncIterable, Mapping, Optional

from curl_cffi.requests import AsyncSession, Cookies
from curl_cffi.requests.exceptions import RequestException
from loguru import logger

from codeforces_client.domain.exceptions import TransportError

DEFAULT_MAX_RESPONSE_SIZE = 5 * 1024 * 1024


def _charset(content_type: Optional[str]) -> str:
    """Charset declared in a Content-Type header, utf-8 otherwise."""
    if content_type:
        for part in content_type.split(";")[1:]:
            key, _, value = part.strip().partition("=")
            if key.lower() == "charset" and value:
                return value.strip("\"'")
    return "utf-8"


async def read_bounded(chunks: AsyncIterable[bytes], limit: int) -> tuple[bytes, bool]:
    """
    Read at most ``limit`` bytes from a chunk stream.

    Returns the body and whether it was cut off. A body that exactly fills
    the limit is only reported as complete if no further data follows.
    """
    parts: list[bytes] = []
    received = 0
    async for chunk in chunks:
        if not chunk:
            continue
        remaining = limit - received
        if len(chunk) > remaining:
            parts.append(chunk[:remaining])
            return b"".join(parts), True
        parts.append(chunk)
        received += len(chunk)
    return b"".join(parts), False


@dataclass(frozen=True)
class HTTPResponse:
    """Fully read (and size-bounded) HTTP response."""

    status_code: int
    content: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)
    url: str = ""
    cookies: Mapping[str, str] = field(default_factory=dict)
    truncated: bool = False
    encoding: str = "utf-8"

    @property
    def text(self) -> str:
        try:
            return self.content.decode(self.encoding or "utf-8", errors="replace")
        except LookupError:
            # Unknown charset name in Content-Type
            return self.content.decode("utf-8", errors="replace")

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


class AsyncHTTPClient:
    """Thin wrapper over ``curl_cffi.requests.AsyncSession``.

    Bodies are streamed and cut off at ``max_size`` bytes, so a runaway
    response cannot exhaust memory. Network failures are raised as
    :class:`TransportError`; task cancellation propagates untouched.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        impersonate: str = "chrome",
        max_size: int = DEFAULT_MAX_RESPONSE_SIZE,
    ):
        """
        Initialize HTTP client.

        Args:
            timeout: Per-request timeout in seconds
            impersonate: curl_cffi browser fingerprint to present
            max_size: Default body size bound in bytes
        """
        self.timeout = timeout
        self.impersonate = impersonate
        self.max_size = max_size
        self._session: Optional[AsyncSession] = None

    def _get_session(self) -> AsyncSession:
        if self._session is None:
            # Cookies are owned by AuthSession and passed per request.
            self._session = AsyncSession(impersonate=self.impersonate, timeout=self.timeout)
        return self._session

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        cookies: Optional[Cookies | Mapping[str, str]] = None,
        allow_redirects: bool = True,
        max_size: Optional[int] = None,
    ) -> HTTPResponse:
        """Send a request and read at most ``max_size`` bytes of the body."""
        limit = max_size or self.max_size
        session = self._get_session()
        logger.debug(f"{method} {url}")

        try:
            async with session.stream(
                method,
                url,
                params=params,
                data=data,
                headers=dict(headers) if headers else None,
                cookies=cookies,
                allow_redirects=allow_redirects,
            ) as response:
                content, truncated = await read_bounded(response.aiter_content(), limit)
                return HTTPResponse(
                    status_code=response.status_code,
                    content=content,
                    headers=dict(response.headers.items()),
                    url=str(response.url),
                    cookies=dict(response.cookies.items()),
                    truncated=truncated,
                    encoding=_charset(response.headers.get("content-type")),
                )
        except RequestException as e:
            logger.debug(f"{method} {url} failed: {e}")
            raise TransportError(f"{method} {url} failed: {e}", url=url) from e

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "AsyncHTTPClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
