"""
Edit distance helpers for the fuzzy matching tier.

Levenshtein distance over Unicode code points, computed by the
``Levenshtein`` C extension, plus the length-scaled acceptance bound.
"""

import math
from typing import Optional

import Levenshtein


def distance(a: str, b: str, max_distance: Optional[int] = None) -> int:
    """
    Levenshtein distance between two strings.

    Args:
        a: First string
        b: Second string
        max_distance: Optional bound. When the true distance exceeds it,
            ``max_distance + 1`` is returned instead of the exact value.

    Returns:
        Number of single-character insertions, deletions and substitutions

    Examples:
        >>> distance("kitten", "sitting")
        3
        >>> distance("", "abc")
        3
    """
    if a == b:
        return 0
    if not a or not b:
        return len(a) + len(b)
    if max_distance is None:
        return Levenshtein.distance(a, b)
    if max_distance < 0:
        raise ValueError(f"max_distance must be non-negative, got {max_distance}")
    return Levenshtein.distance(a, b, score_cutoff=max_distance)


def fuzzy_threshold(len_a: int, len_b: int,
                    base_min: int = 2, rate: float = 0.20) -> int:
    """
    Largest distance still accepted as a fuzzy match.

    ``max(base_min, ceil(max(len_a, len_b) * rate))``. The product is
    rounded before ``ceil`` so that e.g. ``15 * 0.2`` gives 3, not 4.

    Args:
        len_a: Length of the input key
        len_b: Length of the master key
        base_min: Minimum tolerated distance for short keys
        rate: Tolerated fraction of the longer key's length

    Returns:
        Maximum accepted edit distance
    """
    max_len = max(len_a, len_b)
    return max(base_min, math.ceil(round(max_len * rate, 9)))
