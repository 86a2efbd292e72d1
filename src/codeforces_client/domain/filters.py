"""In-memory filters over problemset records."""

from typing import Iterable, Optional, Sequence

from .models.api import Problem


def filter_by_rating(
    problems: Iterable[Problem], min_rating: Optional[int], max_rating: Optional[int]
) -> list[Problem]:
    """Keep problems inside the rating range. Unrated problems always pass."""
    result = []
    for problem in problems:
        if problem.rating:
            if min_rating and problem.rating < min_rating:
                continue
            if max_rating and problem.rating > max_rating:
                continue
        result.append(problem)
    return result


def filter_by_tags(problems: Iterable[Problem], tags: Sequence[str]) -> list[Problem]:
    """Keep problems carrying every given tag (case-insensitive)."""
    wanted = {tag.strip().lower() for tag in tags if tag.strip()}
    return [p for p in problems if wanted <= {tag.lower() for tag in p.tags}]


def exclude_solved(problems: Iterable[Problem], solved_ids: Iterable[str]) -> list[Problem]:
    excluded = set(solved_ids)
    return [p for p in problems if p.problem_id not in excluded]
