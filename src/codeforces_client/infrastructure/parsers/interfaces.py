"""Protocol interfaces for parsers and their collaborators."""

from typing import TYPE_CHECKING, Any, Mapping, Optional, Protocol

from codeforces_client.domain.models import ContestProblemLink, ParsedProblem

if TYPE_CHECKING:
    from codeforces_client.infrastructure.http_client import HTTPResponse


class HTTPClientProtocol(Protocol):
    """Protocol for HTTP client."""

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        cookies: Any = None,
        allow_redirects: bool = True,
        max_size: Optional[int] = None,
    ) -> "HTTPResponse":
        """Send a request and return the size-bounded response."""
        ...


class PageFetcherProtocol(Protocol):
    """Anything that can GET a site page with session state attached."""

    async def get(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        allow_redirects: bool = True,
    ) -> "HTTPResponse":
        """Fetch a page."""
        ...


class ProblemPageParserProtocol(Protocol):
    """Protocol for parsing problem pages."""

    async def parse_problem(self, contest_id: int, index: str) -> ParsedProblem:
        """Parse a contest problem page."""
        ...

    async def parse_problemset(self, contest_id: int, index: str) -> ParsedProblem:
        """Parse a problemset problem page."""
        ...

    async def parse_contest_problems(self, contest_id: int, gym: bool = False) -> list[ContestProblemLink]:
        """List problems of a contest."""
        ...

    async def verify_page_structure(self, reference: tuple[int, str] = (1, "A")) -> None:
        """Check the selector table against a reference page."""
        ...
