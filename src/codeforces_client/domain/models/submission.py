"""Submission results, verdicts and judge status classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum, StrEnum


class Verdict(StrEnum):
    """Canonical judge verdict codes, matching the JSON API vocabulary."""

    OK = "OK"
    WRONG_ANSWER = "WRONG_ANSWER"
    TIME_LIMIT_EXCEEDED = "TIME_LIMIT_EXCEEDED"
    MEMORY_LIMIT_EXCEEDED = "MEMORY_LIMIT_EXCEEDED"
    RUNTIME_ERROR = "RUNTIME_ERROR"
    COMPILATION_ERROR = "COMPILATION_ERROR"
    PRESENTATION_ERROR = "PRESENTATION_ERROR"
    IDLENESS_LIMIT_EXCEEDED = "IDLENESS_LIMIT_EXCEEDED"
    CHALLENGED = "CHALLENGED"


# Checked in order against the lower-cased judge text.
_VERDICT_PHRASES: tuple[tuple[str, Verdict], ...] = (
    ("accepted", Verdict.OK),
    ("pretests passed", Verdict.OK),
    ("happy new year", Verdict.OK),
    ("wrong answer", Verdict.WRONG_ANSWER),
    ("time limit exceeded", Verdict.TIME_LIMIT_EXCEEDED),
    ("memory limit exceeded", Verdict.MEMORY_LIMIT_EXCEEDED),
    ("runtime error", Verdict.RUNTIME_ERROR),
    ("compilation error", Verdict.COMPILATION_ERROR),
    ("presentation error", Verdict.PRESENTATION_ERROR),
    ("idleness limit exceeded", Verdict.IDLENESS_LIMIT_EXCEEDED),
    ("hacked", Verdict.CHALLENGED),
)

_QUEUED_PREFIXES = ("in queue", "pending", "waiting")
_RUNNING_PREFIXES = ("running", "testing", "compiling", "judging")


def normalize_verdict(text: str) -> str:
    """
    Map freeform judge text to a canonical verdict code.

    Unrecognized text is returned unchanged (stripped) so that new or rare
    verdicts are not lost.
    """
    text = text.strip()
    if not text:
        return ""

    if text in Verdict.__members__:
        return Verdict(text)

    lowered = text.lower()
    for phrase, verdict in _VERDICT_PHRASES:
        if lowered.startswith(phrase):
            return verdict
    return text


class SubmissionState(Enum):
    """Lifecycle of a submission on the judge."""

    QUEUED = "queued"
    RUNNING = "running"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class StatusTransition:
    """Result of classifying one status observation."""

    state: SubmissionState
    verdict: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.state is SubmissionState.TERMINAL

    @property
    def label(self) -> str:
        """Short human status: "In queue", "Running", "Accepted" or the verdict text."""
        if self.state is SubmissionState.QUEUED:
            return "In queue"
        if self.state is SubmissionState.RUNNING:
            return "Running"
        if self.verdict == Verdict.OK:
            return "Accepted"
        return self.verdict


def classify_status(text: str) -> StatusTransition:
    """Classify a status cell or verdict banner text into a submission state."""
    stripped = text.strip()
    lowered = stripped.lower()

    if not lowered or lowered.startswith(_QUEUED_PREFIXES):
        return StatusTransition(SubmissionState.QUEUED)
    if lowered.startswith(_RUNNING_PREFIXES):
        return StatusTransition(SubmissionState.RUNNING)
    return StatusTransition(SubmissionState.TERMINAL, normalize_verdict(stripped))


@dataclass
class SubmissionResult:
    """State of one submission as scraped from the site."""

    submission_id: int
    contest_id: int
    problem_index: str = ""
    verdict: str = ""
    time: timedelta = field(default_factory=timedelta)
    memory: int = 0
    passed_tests: int = 0
    submitted_at: datetime | None = None
    status: str = ""

    @property
    def is_accepted(self) -> bool:
        return self.verdict == Verdict.OK

    @property
    def is_terminal(self) -> bool:
        return classify_status(self.status).is_terminal
