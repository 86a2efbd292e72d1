"""Parser and builder for Codeforces URLs."""

import re
from urllib.parse import urlparse

from loguru import logger

from codeforces_client.domain.exceptions import ParsingError
from codeforces_client.domain.models.identifiers import ContestIdentifier, ProblemIdentifier

BASE_URL = "https://codeforces.com"


class URLParsingError(ParsingError, ValueError):
    """Invalid URL format or unable to parse URL."""

    pass


class URLParser:
    """Parser for various Codeforces URL formats."""

    # problemset/problem/1234/A
    PROBLEMSET_PATTERN = r"codeforces\.(?:com|ru)/problemset/problem/(\d+)/([A-Z]\d*)"
    # contest/1234/problem/A or gym/100001/problem/A
    PROBLEM_PATTERN = r"codeforces\.(?:com|ru)/(contest|gym)/(\d+)/problem/([A-Z]\d*)"
    # contest/1234 or gym/1234
    CONTEST_PATTERN = r"codeforces\.(?:com|ru)/(contest|gym)/(\d+)"

    @staticmethod
    def _check_url(url: str) -> None:
        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise URLParsingError(f"Failed to parse URL: {url}") from e
        if not parsed.scheme or not parsed.netloc:
            raise URLParsingError(f"Invalid URL format: {url}")

    @classmethod
    def parse(cls, url: str) -> ProblemIdentifier:
        """
        Parse Codeforces problem URL and extract problem identifier.
        """
        logger.debug(f"Parsing URL: {url}")
        cls._check_url(url)

        match = re.search(cls.PROBLEMSET_PATTERN, url)
        if match:
            contest_id, index = match.groups()
            return ProblemIdentifier(contest_id=int(contest_id), index=index)

        match = re.search(cls.PROBLEM_PATTERN, url)
        if match:
            kind, contest_id, index = match.groups()
            return ProblemIdentifier(contest_id=int(contest_id), index=index, is_gym=kind == "gym")

        raise URLParsingError(
            f"Unrecognized Codeforces URL format: {url}. "
            "Expected format: https://codeforces.com/problemset/problem/<contest_id>/<index>"
        )

    @classmethod
    def parse_contest_url(cls, url: str) -> ContestIdentifier:
        """
        Parse Codeforces contest URL and extract contest identifier.
        """
        logger.debug(f"Parsing contest URL: {url}")
        cls._check_url(url)

        match = re.search(cls.CONTEST_PATTERN, url)
        if match:
            kind, contest_id = match.groups()
            return ContestIdentifier(contest_id=int(contest_id), is_gym=kind == "gym")

        raise URLParsingError(
            f"Unrecognized Codeforces contest URL format: {url}. "
            "Expected format: https://codeforces.com/contest/<contest_id>"
        )

    @staticmethod
    def _section(is_gym: bool) -> str:
        return "gym" if is_gym else "contest"

    @classmethod
    def build_problem_url(cls, identifier: ProblemIdentifier, base_url: str = BASE_URL) -> str:
        """Problem page inside its contest (or gym)."""
        section = cls._section(identifier.is_gym)
        return f"{base_url}/{section}/{identifier.contest_id}/problem/{identifier.index}"

    @classmethod
    def build_problemset_url(cls, identifier: ProblemIdentifier, base_url: str = BASE_URL) -> str:
        return f"{base_url}/problemset/problem/{identifier.contest_id}/{identifier.index}"

    @classmethod
    def build_contest_url(cls, identifier: ContestIdentifier, base_url: str = BASE_URL) -> str:
        return f"{base_url}/{cls._section(identifier.is_gym)}/{identifier.contest_id}"

    @classmethod
    def build_submit_url(cls, identifier: ContestIdentifier, base_url: str = BASE_URL) -> str:
        return f"{cls.build_contest_url(identifier, base_url)}/submit"

    @classmethod
    def build_my_submissions_url(cls, identifier: ContestIdentifier, base_url: str = BASE_URL) -> str:
        return f"{cls.build_contest_url(identifier, base_url)}/my"

    @classmethod
    def build_submission_url(
        cls, identifier: ContestIdentifier, submission_id: int, base_url: str = BASE_URL
    ) -> str:
        return f"{cls.build_contest_url(identifier, base_url)}/submission/{submission_id}"
