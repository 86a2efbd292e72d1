"""Service for submitting solutions and following their verdicts."""

import asyncio
from typing import Awaitable, Callable, Mapping, Optional
from urllib.parse import urlencode

from loguru import logger

from codeforces_client.config import ClientConfig
from codeforces_client.domain.exceptions import (
    ContestOverError,
    CSRFTokenNotFoundError,
    DuplicateSubmissionError,
    HTTPStatusError,
    NotAuthenticatedError,
    PageStructureError,
    ParsingError,
    SourceTooLongError,
    SubmissionError,
    SubmissionNotAllowedError,
    VerdictTimeoutError,
)
from codeforces_client.domain.models.identifiers import ContestIdentifier
from codeforces_client.domain.models.submission import SubmissionResult
from codeforces_client.infrastructure.parsers import (
    CURRENT_SELECTORS,
    SelectorSet,
    URLParser,
    find_missing_form_elements,
    parse_submission_listing,
    parse_submission_page,
)
from codeforces_client.infrastructure.parsers.html_utils import (
    extract_csrf_token,
    extract_hidden_input,
)
from codeforces_client.infrastructure.session import AuthSession

SUBMIT_ACTION = "submitSolutionFormSubmitted"
TAB_SIZE = 4

# Checked in order against a 200 response body.
REJECTION_PHRASES: tuple[tuple[str, type[SubmissionError]], ...] = (
    ("You have submitted exactly the same code before", DuplicateSubmissionError),
    ("Source code is too long", SourceTooLongError),
    ("You are not allowed to submit", SubmissionNotAllowedError),
    ("Contest is over", ContestOverError),
)


def classify_submit_response(
    status_code: int, headers: Mapping[str, str], body: str
) -> Optional[str]:
    """
    Decide whether a submit POST was accepted.

    A redirect with a ``Location`` header is success. A 200 is success unless
    the body carries one of the known rejection phrases. Anything else fails.

    Returns:
        Redirect target, or None for a plain 200 success

    Raises:
        DuplicateSubmissionError, SourceTooLongError,
        SubmissionNotAllowedError, ContestOverError: Known rejection phrase
        SubmissionError: Any other status
    """
    location = next((value for key, value in headers.items() if key.lower() == "location"), None)
    if 300 <= status_code < 400 and location:
        return location

    if status_code == 200:
        for phrase, error in REJECTION_PHRASES:
            if phrase in body:
                raise error(status_code, body)
        return None

    raise SubmissionError(f"submission failed: HTTP {status_code}", status_code, body)


class SubmissionService:
    """Submits solutions through the HTML form and polls for verdicts."""

    def __init__(
        self,
        session: AuthSession,
        config: Optional[ClientConfig] = None,
        selectors: SelectorSet = CURRENT_SELECTORS,
        *,
        clock: Optional[Callable[[], float]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize service.

        Args:
            session: Authenticated session with a handle set
            config: Client configuration (poll interval, verdict timeout)
            selectors: Selector table for submission pages
            clock: Monotonic clock for polling deadlines, the event loop's by default
            sleep: Coroutine used between polls

        Raises:
            NotAuthenticatedError: Session has no handle or no session cookie
        """
        if not session.handle:
            raise NotAuthenticatedError("handle not set")
        if not session.is_authenticated():
            raise NotAuthenticatedError("session cookie not set; load browser cookies first")

        self.session = session
        self.config = config or session.config
        self.selectors = selectors
        self._clock = clock
        self._sleep = sleep

    def _contest(self, contest_id: int, gym: bool) -> ContestIdentifier:
        return ContestIdentifier(contest_id=contest_id, is_gym=gym)

    async def _get_page(self, url: str) -> str:
        response = await self.session.get(url)
        if not response.is_success:
            raise HTTPStatusError(response.status_code, response.text, url)
        return response.text

    async def submit(self, contest_id: int, index: str, language_id: int, source: str) -> SubmissionResult:
        """
        Submit a solution to a contest problem.

        Args:
            contest_id: Contest ID
            index: Problem index, e.g. ``A``
            language_id: Site compiler id (``programTypeId``)
            source: Solution source code

        Returns:
            The most recent row of the user's submission listing, assumed to be
            the one just created
        """
        return await self._submit(self._contest(contest_id, False), index, language_id, source)

    async def submit_to_gym(self, contest_id: int, index: str, language_id: int, source: str) -> SubmissionResult:
        """Submit a solution to a gym problem."""
        return await self._submit(self._contest(contest_id, True), index, language_id, source)

    async def _submit(
        self, contest: ContestIdentifier, index: str, language_id: int, source: str
    ) -> SubmissionResult:
        base_url = self.session.base_url
        submit_url = URLParser.build_submit_url(contest, base_url)
        action = "submit gym solution" if contest.is_gym else "submit solution"
        logger.debug(f"Submitting {contest}/{index} (language {language_id})")

        page = await self.session.get(submit_url)
        if not page.is_success:
            raise SubmissionError(f"get submit page: HTTP {page.status_code}", page.status_code, page.text)

        html = page.text
        token = extract_csrf_token(html)
        if not token:
            raise CSRFTokenNotFoundError(submit_url)
        self.session.csrf_token = token

        form = {
            "csrf_token": token,
            "ftaa": extract_hidden_input(html, "ftaa"),
            "bfaa": extract_hidden_input(html, "bfaa"),
            "action": SUBMIT_ACTION,
            "submittedProblemIndex": index,
            "programTypeId": str(language_id),
            "source": source,
            "tabSize": str(TAB_SIZE),
            "sourceFile": "",
        }

        post_url = f"{submit_url}?{urlencode({'csrf_token': token})}"
        response = await self.session.post(post_url, form)

        try:
            classify_submit_response(response.status_code, response.headers, response.text)
        except SubmissionError as e:
            logger.debug(f"{action} rejected: {e}")
            if type(e) is SubmissionError:
                raise SubmissionError(f"{action}: {e}", e.status_code, e.body) from e
            raise

        result = await self.get_latest_submission(contest.contest_id, gym=contest.is_gym)
        if not result.problem_index:
            result.problem_index = index

        logger.info(f"Submission {result.submission_id} created for {contest}/{index}")
        return result

    async def _fetch_listing(self, contest: ContestIdentifier) -> list[SubmissionResult]:
        url = URLParser.build_my_submissions_url(contest, self.session.base_url)
        html = await self._get_page(url)
        return parse_submission_listing(html, contest.contest_id, self.selectors.submission)

    async def get_latest_submission(self, contest_id: int, gym: bool = False) -> SubmissionResult:
        """Most recent row of the user's own submission listing."""
        submissions = await self._fetch_listing(self._contest(contest_id, gym))
        if not submissions:
            raise ParsingError(f"no submissions found in listing of contest {contest_id}")
        return submissions[0]

    async def get_submission(self, submission_id: int, contest_id: int, gym: bool = False) -> SubmissionResult:
        """Read a single submission page."""
        contest = self._contest(contest_id, gym)
        url = URLParser.build_submission_url(contest, submission_id, self.session.base_url)
        html = await self._get_page(url)
        return parse_submission_page(html, submission_id, contest_id, self.selectors.submission)

    async def wait_for_verdict(
        self,
        submission_id: int,
        contest_id: int,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
        gym: bool = False,
    ) -> SubmissionResult:
        """
        Poll the submission listing until the submission reaches a final verdict.

        A submission that is not listed yet counts as queued. Network errors
        and cancellation propagate immediately.

        Args:
            submission_id: Submission to follow
            contest_id: Contest the submission belongs to
            timeout: Seconds to wait, ``verdict_timeout`` from config by default
            interval: Seconds between polls, ``poll_interval`` from config by default
            gym: Whether the contest is a gym contest

        Raises:
            VerdictTimeoutError: Deadline passed before a final verdict
        """
        timeout = self.config.verdict_timeout if timeout is None else timeout
        interval = self.config.poll_interval if interval is None else interval
        clock = self._clock or asyncio.get_running_loop().time
        deadline = clock() + timeout
        contest = self._contest(contest_id, gym)

        polls = 0
        while True:
            polls += 1
            listing = await self._fetch_listing(contest)
            current = next((row for row in listing if row.submission_id == submission_id), None)

            if current is not None and current.is_terminal:
                logger.info(f"Submission {submission_id}: {current.status} after {polls} polls")
                return current

            status = current.status if current is not None else "not listed"
            logger.debug(f"Submission {submission_id}: {status} (poll {polls})")

            remaining = deadline - clock()
            if remaining <= 0:
                raise VerdictTimeoutError(submission_id, timeout)
            await self._sleep(min(interval, remaining))

    async def verify_submit_page(self, contest_id: int, gym: bool = False) -> None:
        """
        Check the submit form still has every element a submission needs.

        Raises:
            PageStructureError: Listing the missing form elements
        """
        url = URLParser.build_submit_url(self._contest(contest_id, gym), self.session.base_url)
        html = await self._get_page(url)

        missing = find_missing_form_elements(html, self.selectors.submission)
        if missing:
            raise PageStructureError(missing, self.selectors.version, url)
