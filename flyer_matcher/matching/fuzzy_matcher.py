"""
Fuzzy matching module for machine names.

Uses bounded Levenshtein distance between loose keys. The accepted
distance scales with key length: ``max(base_min, ceil(max_len * rate))``.
"""

from typing import Optional

from flyer_matcher.matching.edit_distance import distance, fuzzy_threshold
from flyer_matcher.matching.master_index import MasterIndex
from flyer_matcher.matching.match_result import TierMatch


class FuzzyMatcher:
    """
    Fuzzy matching engine using Levenshtein distance.

    Compares the input key against every master key and keeps the
    accepted candidate with the strictly smallest distance; ties keep the
    first candidate in index order.
    """

    def __init__(self, base_min: int = 2, rate: float = 0.20,
                 scan_aliases: bool = False):
        """
        Initialize the fuzzy matcher.

        Args:
            base_min: Minimum accepted distance for short keys
            rate: Accepted distance as a fraction of the longer key length
            scan_aliases: Include alias keys in the scan
        """
        self.base_min = base_min
        self.rate = rate
        self.scan_aliases = scan_aliases

    def match(self, loose_key: str, index: MasterIndex) -> Optional[TierMatch]:
        """
        Find the closest master key within the length-scaled bound.

        Args:
            loose_key: Loose key of the input line
            index: Loaded master index

        Returns:
            TierMatch with the distance, or None if nothing is close enough
        """
        if not loose_key:
            return None

        best: Optional[TierMatch] = None
        for key, official in index.iterate_keys(self.scan_aliases):
            allowed = self.max_distance(loose_key, key)
            if best is not None:
                # only a strictly smaller distance can replace the current best
                allowed = min(allowed, best.distance - 1)
                if allowed < 0:
                    break
            d = distance(loose_key, key, max_distance=allowed)
            if d <= allowed:
                best = TierMatch(official=official, matched_key=key, distance=d)

        return best

    def max_distance(self, a: str, b: str) -> int:
        """Largest accepted distance between keys ``a`` and ``b``."""
        return fuzzy_threshold(len(a), len(b), self.base_min, self.rate)
