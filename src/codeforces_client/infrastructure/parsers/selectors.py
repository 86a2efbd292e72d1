"""Versioned CSS selector tables for Codeforces pages.

Site markup changes without notice. Every selector the parsers use lives
here so that a new table can be dropped in without touching extraction code;
``ProblemPageParser.verify_page_structure`` reports which groups stopped
matching.
"""

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class ProblemSelectors:
    """Selectors for a problem statement page."""

    title: str = ".problem-statement .header .title"
    time_limit: str = ".problem-statement .header .time-limit"
    memory_limit: str = ".problem-statement .header .memory-limit"
    statement: str = ".problem-statement > div:not([class])"
    input_spec: str = ".problem-statement .input-specification"
    output_spec: str = ".problem-statement .output-specification"
    note: str = ".problem-statement .note"
    sample_tests: str = ".problem-statement .sample-tests"
    sample_pair: str = ".sample-test"
    sample_input: str = ".input pre"
    sample_output: str = ".output pre"
    section_title: str = ".section-title"
    tags: str = ".roundbox .tag-box"
    rating: str = ".roundbox .tag-box"

    # (report name, attribute) pairs checked by the structure probe.
    critical: tuple[tuple[str, str], ...] = (
        ("title", "title"),
        ("time_limit", "time_limit"),
        ("memory_limit", "memory_limit"),
        ("statement", "statement"),
        ("samples", "sample_tests"),
    )


@dataclass(frozen=True)
class ContestSelectors:
    """Selectors for a contest dashboard page."""

    problem_row: str = "table.problems tr"
    problem_link: str = "td a[href*='/problem/']"
    problem_name: str = "td:nth-of-type(2) a"


@dataclass(frozen=True)
class SubmissionSelectors:
    """Selectors for submit form, submission listing and submission pages."""

    submission_row: str = "tr[data-submission-id]"
    status_cell: str = "td.status-cell"
    time_cell: str = "td.time-consumed-cell"
    memory_cell: str = "td.memory-consumed-cell"
    submitted_at_cell: str = ".format-time"
    passed_tests: str = ".verdict-format-judged, .passed-test-count"
    verdict_banner: str = "span[class^='verdict-'], span[class*=' verdict-']"
    results_table: str = "table.datatable"

    csrf_input: str = "input[name=csrf_token]"
    problem_index_input: str = "[name=submittedProblemIndex]"
    language_select: str = "select[name=programTypeId]"
    source_textarea: str = "textarea[name=source]"
    submit_button: str = "input[type=submit]"


@dataclass(frozen=True)
class SelectorSet:
    """A complete, versioned selector table."""

    version: str
    updated: str
    problem: ProblemSelectors = field(default_factory=ProblemSelectors)
    contest: ContestSelectors = field(default_factory=ContestSelectors)
    submission: SubmissionSelectors = field(default_factory=SubmissionSelectors)


class SelectorProvider(Protocol):
    """Source of the selector table a parser should use."""

    def current(self) -> SelectorSet:
        ...


CURRENT_SELECTORS = SelectorSet(version="2024.12", updated="2024-12-20")


class StaticSelectorProvider:
    """Always returns the same table."""

    def __init__(self, selectors: SelectorSet = CURRENT_SELECTORS):
        self._selectors = selectors

    def current(self) -> SelectorSet:
        return self._selectors
