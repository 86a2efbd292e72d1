"""Client for the documented Codeforces JSON API."""

import json
from typing import Any, Optional, Sequence

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from codeforces_client.config import ClientConfig
from codeforces_client.domain import filters
from codeforces_client.domain.exceptions import (
    APIError,
    HTTPStatusError,
    NotFoundError,
    ResponseDecodeError,
)
from codeforces_client.domain.models.api import (
    Contest,
    ContestStandings,
    Problem,
    ProblemsResponse,
    RatingChange,
    Submission,
    User,
)

from .cache import ResponseCache
from .http_client import AsyncHTTPClient
from .parsers.interfaces import HTTPClientProtocol
from .rate_limiter import RateLimiter
from .signing import SignedRequestBuilder


API_USER_AGENT = "codeforces-client/1.0"
SOLVED_SCAN_COUNT = 10000


class CodeforcesApiClient:
    """Rate-limited, cached client for ``https://codeforces.com/api``.

    Every network call waits for the shared token bucket, successful decoded
    results are cached per method and parameters, and bodies larger than the
    configured bound are cut off (and therefore fail to decode). Nothing is
    retried internally.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        http_client: Optional[HTTPClientProtocol] = None,
        *,
        cache: Optional[ResponseCache] = None,
        limiter: Optional[RateLimiter] = None,
        signer: Optional[SignedRequestBuilder] = None,
    ):
        """
        Initialize API client.

        Args:
            config: Client configuration, defaults are used when omitted
            http_client: HTTP client instance
            cache: Response cache (a private one is created from config)
            limiter: Rate limiter (a private one is created from config)
            signer: Request signer (created from config API credentials)
        """
        self.config = config or ClientConfig()
        self._owns_http_client = http_client is None
        self.http_client = http_client or AsyncHTTPClient(
            timeout=self.config.request_timeout,
            impersonate=self.config.impersonate,
            max_size=self.config.api_max_response_size,
        )
        self.cache = cache if cache is not None else ResponseCache(ttl=self.config.cache_ttl)
        self.limiter = limiter or RateLimiter(
            rate=self.config.requests_per_second, burst=self.config.rate_burst
        )

        if signer is None and self.config.has_api_credentials:
            signer = SignedRequestBuilder(
                self.config.api_key.get_secret_value(),
                self.config.api_secret.get_secret_value(),
            )
        self.signer = signer

    @property
    def has_credentials(self) -> bool:
        """True if API key and secret are configured."""
        return self.signer is not None

    def clear_cache(self) -> None:
        self.cache.clear()

    async def close(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._owns_http_client:
            await self.http_client.close()

    async def _request(
        self, method: str, params: dict[str, Any], authenticated: bool
    ) -> dict[str, Any]:
        """Issue one API call and return the decoded envelope."""
        await self.limiter.acquire()

        query = {key: value for key, value in params.items() if value is not None}
        if authenticated and self.signer is not None:
            query = self.signer.sign(method, query)

        url = f"{self.config.api_base_url}/{method}"
        response = await self.http_client.request(
            "GET",
            url,
            params=query,
            headers={"User-Agent": API_USER_AGENT, "Accept": "application/json"},
            max_size=self.config.api_max_response_size,
        )

        if not response.is_success:
            raise HTTPStatusError(response.status_code, response.text, url)

        try:
            payload = json.loads(response.content)
        except ValueError as e:
            reason = "response exceeded size limit" if response.truncated else str(e)
            raise ResponseDecodeError(f"parse response of {method}: {reason}") from e

        if not isinstance(payload, dict):
            raise ResponseDecodeError(f"parse response of {method}: unexpected document")

        if payload.get("status") != "OK":
            raise APIError(payload.get("comment") or "unknown error", method)

        return payload

    async def call(
        self,
        method: str,
        params: Optional[dict[str, Any]] = None,
        result_type: Any = Any,
        *,
        authenticated: bool = False,
        use_cache: bool = True,
    ) -> Any:
        """
        Call an API method and validate its ``result``.

        Args:
            method: API method name, e.g. ``user.info``
            params: Query parameters; lists are joined with ``;``
            result_type: Type the result is validated against
            authenticated: Sign the request when credentials are configured
            use_cache: Read from and store into the response cache

        Returns:
            Validated result

        Raises:
            HTTPStatusError: Non-2xx response
            APIError: Envelope status is not OK
            ResponseDecodeError: Body is not valid JSON or does not match
        """
        params = _encode_params(params or {})
        signed = authenticated and self.signer is not None
        # Signed calls may see private data, so they never share entries with public ones.
        key = ResponseCache.make_key(method, {**params, "_signed": "true"} if signed else params)

        if use_cache:
            hit, cached = self.cache.get(key)
            if hit:
                logger.debug(f"Cache hit: {key}")
                return cached

        payload = await self._request(method, params, authenticated)

        try:
            result = TypeAdapter(result_type).validate_python(payload.get("result"))
        except ValidationError as e:
            raise ResponseDecodeError(f"parse result of {method}: {e}") from e

        if use_cache:
            self.cache.set(key, result)
        return result

    # Problems

    async def get_problems(self, tags: Optional[Sequence[str]] = None) -> ProblemsResponse:
        """Get the problemset, optionally filtered by tags on the server."""
        params = {"tags": list(tags)} if tags else {}
        return await self.call("problemset.problems", params, ProblemsResponse)

    async def get_problem(self, contest_id: int, index: str) -> Problem:
        """Get a single problem by contest ID and index."""
        key = ResponseCache.make_key("problem", {"contestId": contest_id, "index": index})
        hit, cached = self.cache.get(key)
        if hit:
            return cached

        problems = await self.get_problems()
        for problem in problems.problems:
            if problem.contest_id == contest_id and problem.index == index:
                self.cache.set(key, problem)
                return problem

        raise NotFoundError(f"problem {contest_id}{index} not found")

    async def get_solved_problems(self, handle: str) -> list[Problem]:
        """Get unique problems with at least one accepted submission."""
        submissions = await self.get_user_submissions(handle, from_=1, count=SOLVED_SCAN_COUNT)

        seen: set[str] = set()
        solved: list[Problem] = []
        for submission in submissions:
            if not submission.is_accepted:
                continue
            key = submission.problem.problem_id
            if key not in seen:
                seen.add(key)
                solved.append(submission.problem)
        return solved

    async def filter_problems(
        self,
        min_rating: Optional[int] = None,
        max_rating: Optional[int] = None,
        tags: Optional[Sequence[str]] = None,
        exclude_solved: bool = False,
        handle: Optional[str] = None,
    ) -> list[Problem]:
        """
        Filter the problemset in memory.

        Unrated problems are kept regardless of the rating range. Every given
        tag must be present on a problem. Solved problems of ``handle`` are
        dropped when ``exclude_solved`` is set.
        """
        problems = (await self.get_problems()).problems
        problems = filters.filter_by_rating(problems, min_rating, max_rating)
        if tags:
            problems = filters.filter_by_tags(problems, tags)

        if exclude_solved and handle:
            solved = await self.get_solved_problems(handle)
            problems = filters.exclude_solved(problems, (p.problem_id for p in solved))

        logger.debug(f"Filtered problemset down to {len(problems)} problems")
        return problems

    # Users

    async def get_user_info(self, handles: Sequence[str]) -> list[User]:
        if not handles:
            raise ValueError("no handles provided")
        return await self.call("user.info", {"handles": list(handles)}, list[User])

    async def get_user_submissions(
        self,
        handle: str,
        from_: Optional[int] = None,
        count: Optional[int] = None,
        *,
        authenticated: bool = False,
    ) -> list[Submission]:
        params = {"handle": handle, "from": from_ or None, "count": count or None}
        return await self.call(
            "user.status", params, list[Submission], authenticated=authenticated
        )

    async def get_user_rating(self, handle: str) -> list[RatingChange]:
        return await self.call("user.rating", {"handle": handle}, list[RatingChange])

    # Contests

    async def get_contests(self, gym: bool = False) -> list[Contest]:
        return await self.call("contest.list", {"gym": gym}, list[Contest])

    async def get_contest(self, contest_id: int) -> Contest:
        """Get contest information from the (cached) contest list."""
        key = ResponseCache.make_key("contest", {"contestId": contest_id})
        hit, cached = self.cache.get(key)
        if hit:
            return cached

        for contest in await self.get_contests(gym=False):
            if contest.id == contest_id:
                self.cache.set(key, contest)
                return contest

        raise NotFoundError(f"contest {contest_id} not found")

    async def get_contest_standings(
        self,
        contest_id: int,
        from_: Optional[int] = None,
        count: Optional[int] = None,
        handles: Optional[Sequence[str]] = None,
        show_unofficial: bool = False,
        *,
        authenticated: bool = False,
    ) -> ContestStandings:
        """Get contest standings. Standings change quickly, so they are not cached."""
        params = {
            "contestId": contest_id,
            "from": from_ or None,
            "count": count or None,
            "handles": list(handles) if handles else None,
            "showUnofficial": show_unofficial,
        }
        return await self.call(
            "contest.standings",
            params,
            ContestStandings,
            authenticated=authenticated,
            use_cache=False,
        )

    async def ping(self) -> None:
        """Check the API is reachable without touching the cache."""
        await self.call("contest.list", {"gym": False}, list[Contest], use_cache=False)


def _encode_params(params: dict[str, Any]) -> dict[str, Any]:
    encoded: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            encoded[key] = ";".join(str(item) for item in value)
        else:
            encoded[key] = str(value)
    return encoded
