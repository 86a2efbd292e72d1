"""Value objects for data scraped from HTML pages."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Sample:
    """A sample test shown in the problem statement."""

    index: int
    input: str
    output: str


@dataclass(frozen=True)
class ParsedProblem:
    """Data extracted from a problem page.

    Fields that could not be located on the page are left empty rather than
    failing the whole parse.
    """

    contest_id: int
    index: str
    url: str
    name: str = ""
    time_limit: str = ""
    memory_limit: str = ""
    statement: str = ""
    input_spec: str = ""
    output_spec: str = ""
    note: str = ""
    samples: tuple[Sample, ...] = field(default_factory=tuple)
    tags: tuple[str, ...] = field(default_factory=tuple)
    rating: int | None = None

    @property
    def problem_id(self) -> str:
        return f"{self.contest_id}{self.index}"


@dataclass(frozen=True)
class ContestProblemLink:
    """A row of the contest problem table."""

    contest_id: int
    index: str
    name: str
    url: str
