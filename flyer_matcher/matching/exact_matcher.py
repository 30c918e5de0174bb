"""
Exact matching module for machine names.

Looks a loose key up in the master index. Alias keys are part of the
same lookup, so an alias hit is reported as exact too.
"""

from typing import Optional

from flyer_matcher.matching.master_index import MasterIndex
from flyer_matcher.matching.match_result import TierMatch


class ExactMatcher:
    """Exact loose-key lookup against the master index."""

    def match(self, loose_key: str, index: MasterIndex) -> Optional[TierMatch]:
        """
        Attempt an exact match.

        Args:
            loose_key: Loose key of the input line
            index: Loaded master index

        Returns:
            TierMatch if the key is bound, None otherwise
        """
        if not loose_key:
            return None

        official = index.resolve_exact(loose_key)
        if official is None:
            return None

        return TierMatch(official=official, matched_key=loose_key)
