"""
keysmith.predicates

Structural checks applied to a candidate before the weakness heuristic.
All of them take the unformatted candidate, so separators never count.
"""

from itertools import groupby
from typing import Iterable, Optional

from .charsets import CharacterClass
from .requirements import GenerationParameters, OccurrenceBound


def contains_required_sets(candidate: str, required_sets: Iterable[CharacterClass]) -> bool:
    return all(char_class.intersects(candidate) for char_class in required_sets)


def starts_with_restricted(candidate: str, prefix: str) -> bool:
    """True when the candidate begins with the restricted string."""
    return bool(prefix) and candidate[:len(prefix)] == prefix


def ends_with_restricted(candidate: str, suffix: str) -> bool:
    """True when the candidate ends with the restricted string."""
    return bool(suffix) and candidate[-len(suffix):] == suffix


def count_specific(candidate: str, characters: str) -> int:
    if not characters:
        return 0
    return CharacterClass.of(characters).count_in(candidate)


def has_at_least(candidate: str, characters: str, n: int) -> bool:
    return count_specific(candidate, characters) >= n


def has_at_most(candidate: str, characters: str, n: int) -> bool:
    return count_specific(candidate, characters) <= n


def longest_run(candidate: str) -> int:
    return max((sum(1 for _ in run) for _, run in groupby(candidate)), default=0)


def within_consecutive_limit(candidate: str, n: int) -> bool:
    """No run of more than `n` identical consecutive characters."""
    return longest_run(candidate) <= n


def _bound_ok(candidate: str, bound: Optional[OccurrenceBound], check) -> bool:
    return bound is None or check(candidate, bound.characters, bound.count)


def passes_all(candidate: str, params: GenerationParameters) -> bool:
    """
    Run every structural check `params` asks for, in order: required sets,
    start/end restrictions, occurrence bounds, consecutive-identical limit.
    """
    if not contains_required_sets(candidate, params.required_character_sets):
        return False
    if starts_with_restricted(candidate, params.cannot_start_with):
        return False
    if ends_with_restricted(candidate, params.cannot_end_with):
        return False
    if not _bound_ok(candidate, params.min_occurrences, has_at_least):
        return False
    if not _bound_ok(candidate, params.max_occurrences, has_at_most):
        return False
    if params.max_consecutive_identical is not None:
        return within_consecutive_limit(candidate, params.max_consecutive_identical)
    return True
