"""Domain models package."""

from .api import (
    Contest,
    ContestStandings,
    Problem,
    ProblemsResponse,
    RatingChange,
    Submission,
    User,
)
from .identifiers import ContestIdentifier, ProblemIdentifier
from .parsing import ContestProblemLink, ParsedProblem, Sample
from .submission import (
    StatusTransition,
    SubmissionResult,
    SubmissionState,
    Verdict,
    classify_status,
    normalize_verdict,
)

__all__ = [
    "Contest",
    "ContestIdentifier",
    "ContestProblemLink",
    "ContestStandings",
    "ParsedProblem",
    "Problem",
    "ProblemIdentifier",
    "ProblemsResponse",
    "RatingChange",
    "Sample",
    "StatusTransition",
    "Submission",
    "SubmissionResult",
    "SubmissionState",
    "User",
    "Verdict",
    "classify_status",
    "normalize_verdict",
]
