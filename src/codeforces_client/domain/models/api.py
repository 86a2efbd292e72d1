"""Pydantic models for Codeforces JSON API objects."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Base for API records: camelCase on the wire, unknown fields ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Problem(APIModel):
    contest_id: int | None = None
    problemset_name: str | None = None
    index: str
    name: str
    type: str = "PROGRAMMING"
    points: float | None = None
    rating: int | None = None
    tags: list[str] = Field(default_factory=list)

    @property
    def problem_id(self) -> str:
        """Short identifier such as ``1234A``."""
        return f"{self.contest_id or ''}{self.index}"


class ProblemStatistics(APIModel):
    contest_id: int | None = None
    index: str
    solved_count: int = 0


class ProblemsResponse(APIModel):
    problems: list[Problem] = Field(default_factory=list)
    problem_statistics: list[ProblemStatistics] = Field(default_factory=list)


class User(APIModel):
    handle: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    country: str | None = None
    city: str | None = None
    organization: str | None = None
    contribution: int = 0
    rank: str | None = None
    rating: int | None = None
    max_rank: str | None = None
    max_rating: int | None = None
    last_online_time_seconds: int | None = None
    registration_time_seconds: int | None = None
    friend_of_count: int = 0
    avatar: str | None = None
    title_photo: str | None = None


class Member(APIModel):
    handle: str
    name: str | None = None


class Party(APIModel):
    contest_id: int | None = None
    members: list[Member] = Field(default_factory=list)
    participant_type: str | None = None
    team_id: int | None = None
    team_name: str | None = None
    ghost: bool = False
    room: int | None = None
    start_time_seconds: int | None = None


class Submission(APIModel):
    id: int
    contest_id: int | None = None
    creation_time_seconds: int
    relative_time_seconds: int | None = None
    problem: Problem
    author: Party | None = None
    programming_language: str = ""
    verdict: str | None = None
    testset: str | None = None
    passed_test_count: int = 0
    time_consumed_millis: int = 0
    memory_consumed_bytes: int = 0
    points: float | None = None

    @property
    def is_accepted(self) -> bool:
        return self.verdict == "OK"


class RatingChange(APIModel):
    contest_id: int
    contest_name: str
    handle: str
    rank: int
    rating_update_time_seconds: int
    old_rating: int
    new_rating: int

    @property
    def delta(self) -> int:
        return self.new_rating - self.old_rating


class Contest(APIModel):
    id: int
    name: str
    type: str | None = None
    phase: str | None = None
    frozen: bool = False
    duration_seconds: int | None = None
    start_time_seconds: int | None = None
    relative_time_seconds: int | None = None
    prepared_by: str | None = None
    kind: str | None = None
    difficulty: int | None = None


class ProblemResult(APIModel):
    points: float = 0
    penalty: int | None = None
    rejected_attempt_count: int = 0
    type: str | None = None
    best_submission_time_seconds: int | None = None


class RanklistRow(APIModel):
    party: Party
    rank: int
    points: float = 0
    penalty: int = 0
    successful_hack_count: int = 0
    unsuccessful_hack_count: int = 0
    problem_results: list[ProblemResult] = Field(default_factory=list)


class ContestStandings(APIModel):
    contest: Contest
    problems: list[Problem] = Field(default_factory=list)
    rows: list[RanklistRow] = Field(default_factory=list)
