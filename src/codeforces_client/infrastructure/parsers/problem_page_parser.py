"""Parser for extracting problem data from HTML pages."""

from typing import Optional

from bs4 import BeautifulSoup, Tag
from loguru import logger

from codeforces_client.domain.exceptions import HTTPStatusError, PageStructureError
from codeforces_client.domain.models.identifiers import ContestIdentifier, ProblemIdentifier
from codeforces_client.domain.models.parsing import ContestProblemLink, ParsedProblem, Sample

from .html_utils import (
    clean_title,
    collapse_whitespace,
    direct_text,
    extract_limit,
    extract_pre_text,
    extract_problem_index,
    parse_rating,
)
from .interfaces import PageFetcherProtocol, ProblemPageParserProtocol
from .selectors import CURRENT_SELECTORS, ProblemSelectors, SelectorSet
from .url_parser import BASE_URL, URLParser

REFERENCE_PROBLEM = (1, "A")


class ProblemPageParser(ProblemPageParserProtocol):
    """Parser for extracting data from Codeforces problem and contest pages."""

    def __init__(
        self,
        session: PageFetcherProtocol,
        selectors: SelectorSet = CURRENT_SELECTORS,
        base_url: str = BASE_URL,
    ):
        """
        Initialize parser.

        Args:
            session: Page fetcher, normally an AuthSession
            selectors: Selector table to extract with
            base_url: Site root used to build page URLs
        """
        self.session = session
        self.selectors = selectors
        self.base_url = base_url.rstrip("/")

    async def _fetch(self, url: str) -> str:
        logger.debug(f"Fetching page: {url}")
        response = await self.session.get(url)
        if not response.is_success:
            raise HTTPStatusError(response.status_code, response.text, url)
        return response.text

    async def parse_problem(self, contest_id: int, index: str) -> ParsedProblem:
        """Parse a problem page inside its contest."""
        url = URLParser.build_problem_url(ProblemIdentifier(contest_id, index), self.base_url)
        html = await self._fetch(url)
        return self.parse_problem_html(html, contest_id, index, url)

    async def parse_problemset(self, contest_id: int, index: str) -> ParsedProblem:
        """Parse a problem page from the problemset archive."""
        url = URLParser.build_problemset_url(ProblemIdentifier(contest_id, index), self.base_url)
        html = await self._fetch(url)
        return self.parse_problem_html(html, contest_id, index, url)

    async def parse_gym_problem(self, contest_id: int, index: str) -> ParsedProblem:
        """Parse a problem page of a gym contest."""
        identifier = ProblemIdentifier(contest_id, index, is_gym=True)
        url = URLParser.build_problem_url(identifier, self.base_url)
        html = await self._fetch(url)
        return self.parse_problem_html(html, contest_id, index, url)

    def parse_problem_html(self, html: str, contest_id: int, index: str, url: str) -> ParsedProblem:
        """
        Extract problem data from page markup.

        Each field is extracted independently; a field whose selector matches
        nothing is left empty and logged instead of failing the parse.

        Args:
            html: Page markup
            contest_id: Contest the problem belongs to
            index: Problem index, e.g. ``B1``
            url: Page URL, stored on the result

        Returns:
            Parsed problem
        """
        soup = BeautifulSoup(html, "lxml")
        sel = self.selectors.problem

        title = self._first(soup, sel.title, "title", url)
        time_limit = self._first(soup, sel.time_limit, "time limit", url)
        memory_limit = self._first(soup, sel.memory_limit, "memory limit", url)
        statement = self._first(soup, sel.statement, "statement", url)

        problem = ParsedProblem(
            contest_id=contest_id,
            index=index,
            url=url,
            name=clean_title(title.get_text(" ")) if title else "",
            time_limit=extract_limit(time_limit.get_text(" "), "time limit per test") if time_limit else "",
            memory_limit=(
                extract_limit(memory_limit.get_text(" "), "memory limit per test") if memory_limit else ""
            ),
            statement=direct_text(statement),
            input_spec=self._section_text(soup.select_one(sel.input_spec), sel),
            output_spec=self._section_text(soup.select_one(sel.output_spec), sel),
            note=self._section_text(soup.select_one(sel.note), sel),
            samples=self._extract_samples(soup, sel),
            tags=self._extract_tags(soup, sel),
            rating=self._extract_rating(soup, sel),
        )

        logger.debug(f"Parsed problem {problem.problem_id}: {len(problem.samples)} samples")
        return problem

    @staticmethod
    def _first(soup: BeautifulSoup, selector: str, field: str, url: str) -> Optional[Tag]:
        node = soup.select_one(selector)
        if node is None:
            logger.warning(f"No {field} found on {url} (selector {selector!r})")
        return node

    @staticmethod
    def _section_text(node: Optional[Tag], sel: ProblemSelectors) -> str:
        """Section body without its heading (``Input``, ``Output``, ``Note``)."""
        if node is None:
            return ""
        text = collapse_whitespace(node.get_text(" "))
        heading = node.select_one(sel.section_title)
        if heading is not None:
            title = collapse_whitespace(heading.get_text(" "))
            if text.startswith(title):
                text = text[len(title):].strip()
        return text

    @staticmethod
    def _extract_samples(soup: BeautifulSoup, sel: ProblemSelectors) -> tuple[Sample, ...]:
        container = soup.select_one(sel.sample_tests)
        if container is None:
            return ()

        # Paired blocks first; older statements list inputs and outputs flat.
        blocks = container.select(sel.sample_pair) or [container]

        samples = []
        for block in blocks:
            inputs = block.select(sel.sample_input)
            outputs = block.select(sel.sample_output)
            for input_pre, output_pre in zip(inputs, outputs):
                samples.append(
                    Sample(
                        index=len(samples) + 1,
                        input=extract_pre_text(input_pre),
                        output=extract_pre_text(output_pre),
                    )
                )
        if not samples and blocks[0] is not container:
            # Empty paired wrappers next to flat pre blocks
            for input_pre, output_pre in zip(
                container.select(sel.sample_input), container.select(sel.sample_output)
            ):
                samples.append(
                    Sample(
                        index=len(samples) + 1,
                        input=extract_pre_text(input_pre),
                        output=extract_pre_text(output_pre),
                    )
                )
        return tuple(samples)

    @staticmethod
    def _extract_tags(soup: BeautifulSoup, sel: ProblemSelectors) -> tuple[str, ...]:
        tags: list[str] = []
        for node in soup.select(sel.tags):
            tag = collapse_whitespace(node.get_text(" "))
            # "*1400" is the difficulty, not a tag
            if tag and not tag.startswith("*") and tag not in tags:
                tags.append(tag)
        return tuple(tags)

    @staticmethod
    def _extract_rating(soup: BeautifulSoup, sel: ProblemSelectors) -> Optional[int]:
        for node in soup.select(sel.rating):
            text = node.get_text().strip()
            if text.startswith("*"):
                return parse_rating(text)
        return None

    async def parse_contest_problems(self, contest_id: int, gym: bool = False) -> list[ContestProblemLink]:
        """
        List the problems of a contest from its dashboard table.

        The header row and rows without a problem link are skipped.
        """
        url = URLParser.build_contest_url(ContestIdentifier(contest_id, is_gym=gym), self.base_url)
        html = await self._fetch(url)
        return self.parse_contest_problems_html(html, contest_id)

    def parse_contest_problems_html(self, html: str, contest_id: int) -> list[ContestProblemLink]:
        soup = BeautifulSoup(html, "lxml")
        sel = self.selectors.contest

        problems = []
        for row in soup.select(sel.problem_row)[1:]:
            link = row.select_one(sel.problem_link)
            href = link.get("href", "") if link else ""
            index = extract_problem_index(href)
            if not index:
                continue

            name_node = row.select_one(sel.problem_name)
            problems.append(
                ContestProblemLink(
                    contest_id=contest_id,
                    index=index,
                    name=collapse_whitespace(name_node.get_text(" ")) if name_node else "",
                    url=href if href.startswith("http") else f"{self.base_url}{href}",
                )
            )

        logger.debug(f"Found {len(problems)} problems in contest {contest_id}")
        return problems

    async def verify_page_structure(self, reference: tuple[int, str] = REFERENCE_PROBLEM) -> None:
        """
        Check that the selector table still matches a known problem page.

        Raises:
            PageStructureError: Listing every selector group that matched nothing
            HTTPStatusError: Reference page did not load
        """
        contest_id, index = reference
        url = URLParser.build_problemset_url(ProblemIdentifier(contest_id, index), self.base_url)
        soup = BeautifulSoup(await self._fetch(url), "lxml")

        sel = self.selectors.problem
        missing = [name for name, attr in sel.critical if not soup.select(getattr(sel, attr))]
        if missing:
            raise PageStructureError(missing, self.selectors.version, url)

        logger.debug(f"Page structure matches selector version {self.selectors.version}")
