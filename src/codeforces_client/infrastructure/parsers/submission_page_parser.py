"""Parser for submission listings, single-submission pages and the submit form."""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from bs4 import BeautifulSoup, Tag

from codeforces_client.domain.exceptions import ParsingError
from codeforces_client.domain.models.submission import (
    SubmissionResult,
    SubmissionState,
    Verdict,
    classify_status,
    normalize_verdict,
)

from .html_utils import (
    collapse_whitespace,
    extract_problem_index,
    parse_duration_ms,
    parse_memory_bytes,
)
from .selectors import CURRENT_SELECTORS, SubmissionSelectors

FAILED_TEST_PATTERN = re.compile(r"on (?:pre)?test (\d+)", re.IGNORECASE)

# Submission times are rendered in Moscow time for anonymous and default profiles.
SITE_TIMEZONE = timezone(timedelta(hours=3))
SITE_TIME_FORMAT = "%b/%d/%Y %H:%M"


def _cell_text(row: Tag, selector: str) -> str:
    cell = row.select_one(selector)
    return collapse_whitespace(cell.get_text(" ")) if cell else ""


def _passed_tests(status_text: str) -> int:
    """Tests passed before the failing one, e.g. 4 for "Wrong answer on test 5"."""
    match = FAILED_TEST_PATTERN.search(status_text)
    return max(int(match.group(1)) - 1, 0) if match else 0


def parse_submitted_at(text: str) -> Optional[datetime]:
    try:
        return datetime.strptime(text.strip(), SITE_TIME_FORMAT).replace(tzinfo=SITE_TIMEZONE)
    except ValueError:
        return None


def parse_submission_row(
    row: Tag, contest_id: int, selectors: SubmissionSelectors = CURRENT_SELECTORS.submission
) -> SubmissionResult:
    """
    Parse one row of a "my submissions" table.

    Args:
        row: ``<tr>`` carrying a ``data-submission-id`` attribute
        contest_id: Contest the listing belongs to
        selectors: Submission selector table

    Returns:
        Submission state as shown in the row

    Raises:
        ParsingError: The row has no numeric submission id
    """
    raw_id = row.get("data-submission-id")
    if not raw_id:
        raise ParsingError("submission row has no data-submission-id attribute")
    try:
        submission_id = int(str(raw_id).strip())
    except ValueError as e:
        raise ParsingError(f"invalid submission id: {raw_id!r}") from e

    status_text = _cell_text(row, selectors.status_cell)
    transition = classify_status(status_text)

    if not transition.is_terminal:
        status = transition.label
    elif transition.verdict == Verdict.OK:
        status = "Accepted"
    else:
        status = status_text

    link = row.select_one("a[href*='/problem/']")
    submitted_at_cell = row.select_one(selectors.submitted_at_cell)

    return SubmissionResult(
        submission_id=submission_id,
        contest_id=contest_id,
        problem_index=extract_problem_index(link.get("href", "")) if link else "",
        verdict=transition.verdict,
        time=parse_duration_ms(_cell_text(row, selectors.time_cell)),
        memory=parse_memory_bytes(_cell_text(row, selectors.memory_cell)),
        passed_tests=_passed_tests(status_text) if transition.is_terminal else 0,
        submitted_at=parse_submitted_at(submitted_at_cell.get_text()) if submitted_at_cell else None,
        status=status,
    )


def parse_submission_listing(
    html: str, contest_id: int, selectors: SubmissionSelectors = CURRENT_SELECTORS.submission
) -> list[SubmissionResult]:
    """All submission rows of a listing page, most recent first."""
    soup = BeautifulSoup(html, "lxml")
    return [parse_submission_row(row, contest_id, selectors) for row in soup.select(selectors.submission_row)]


def parse_submission_page(
    html: str,
    submission_id: int,
    contest_id: int,
    selectors: SubmissionSelectors = CURRENT_SELECTORS.submission,
) -> SubmissionResult:
    """
    Parse a single-submission page.

    The verdict banner's style class decides the status: ``verdict-waiting``
    is still queued or running, ``verdict-accepted`` is accepted and anything
    else is judged. Time and memory come from the results table and default
    to zero.
    """
    soup = BeautifulSoup(html, "lxml")
    result = SubmissionResult(submission_id=submission_id, contest_id=contest_id)

    banner = soup.select_one(selectors.verdict_banner)
    banner_text = collapse_whitespace(banner.get_text(" ")) if banner else ""
    classes = banner.get("class", []) if banner else []

    if banner is None or "verdict-waiting" in classes:
        running = classify_status(banner_text).state is SubmissionState.RUNNING
        result.status = "Running" if running else "In queue"
    elif "verdict-accepted" in classes:
        result.status = "Accepted"
        result.verdict = Verdict.OK
    else:
        result.status = "Judged"
        result.verdict = normalize_verdict(banner_text)
        result.passed_tests = _passed_tests(banner_text)

    table = soup.select_one(selectors.results_table)
    if table is not None:
        for cell in table.select("td"):
            text = collapse_whitespace(cell.get_text(" "))
            if not result.time and parse_duration_ms(text):
                result.time = parse_duration_ms(text)
            elif not result.memory and parse_memory_bytes(text):
                result.memory = parse_memory_bytes(text)

        link = table.select_one("a[href*='/problem/']")
        if link is not None:
            result.problem_index = extract_problem_index(link.get("href", ""))

    return result


def find_missing_form_elements(
    html: str, selectors: SubmissionSelectors = CURRENT_SELECTORS.submission
) -> list[str]:
    """Names of submit-form elements that are absent from the page."""
    soup = BeautifulSoup(html, "lxml")
    checks = (
        ("csrf_token", selectors.csrf_input),
        ("submittedProblemIndex", selectors.problem_index_input),
        ("programTypeId", selectors.language_select),
        ("source", selectors.source_textarea),
        ("submit", selectors.submit_button),
    )
    return [name for name, selector in checks if soup.select_one(selector) is None]
