"""String comparison helpers used for approximate name matching."""

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from rapidfuzz.distance import Levenshtein

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class BestMatch:
    """Closest candidate found by find_best_match."""

    index: int
    match: str
    distance: int


def normalize_string(value: Optional[str]) -> str:
    """Lower-case, trim and collapse inner whitespace."""
    return _WHITESPACE.sub(" ", (value or "").strip().lower())


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance between two normalized strings."""
    return int(Levenshtein.distance(normalize_string(a), normalize_string(b)))


def find_best_match(target: str, candidates: Sequence[str]) -> Optional[BestMatch]:
    """Find the candidate with the smallest edit distance to target.

    Ties keep the earliest candidate, so callers control the tie-break policy
    through the order of ``candidates``. An exact (normalized) match returns
    immediately with distance 0.

    Args:
        target: String to match
        candidates: Candidate strings in priority order

    Returns:
        BestMatch, or None when there are no candidates
    """
    normalized_target = normalize_string(target)
    best: Optional[BestMatch] = None

    for index, candidate in enumerate(candidates):
        normalized_candidate = normalize_string(candidate)
        if normalized_candidate == normalized_target:
            return BestMatch(index=index, match=candidate, distance=0)

        distance = int(Levenshtein.distance(normalized_target, normalized_candidate))
        if best is None or distance < best.distance:
            best = BestMatch(index=index, match=candidate, distance=distance)

    return best


def category_name_threshold(name: str) -> int:
    """Maximum edit distance for a category name to count as a near-duplicate."""
    return 1 if len(name) <= 6 else 2


def description_threshold(a: str, b: str) -> int:
    """Maximum edit distance for two recurring descriptions to be duplicates."""
    return max(2, int(max(len(a), len(b)) * 0.2))
