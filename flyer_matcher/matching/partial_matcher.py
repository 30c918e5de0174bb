"""
Partial (containment) matching module for machine names.

Accepts a master entry when its loose key is contained in the input key,
or the input key is contained in it. Short master keys are excluded so
that two- or three-character names do not match half the flyer.
"""

import logging
from typing import Optional

from flyer_matcher.matching.master_index import MasterIndex
from flyer_matcher.matching.match_result import TierMatch

logger = logging.getLogger(__name__)


class PartialMatcher:
    """
    Containment matcher over master loose keys.

    Two policies are available:

    - ``first``: the first containing entry in index order wins. A longer,
      less specific entry loaded earlier can shadow a better later one.
    - ``longest``: the longest containing master key wins (ties keep the
      first in index order).
    """

    def __init__(self, min_length: int = 4, policy: str = 'first',
                 scan_aliases: bool = False):
        """
        Initialize the partial matcher.

        Args:
            min_length: Minimum master key length eligible for containment
            policy: 'first' or 'longest'
            scan_aliases: Include alias keys in the scan
        """
        if policy not in ('first', 'longest'):
            raise ValueError(f"Invalid partial policy '{policy}'")
        self.min_length = min_length
        self.policy = policy
        self.scan_aliases = scan_aliases

    def match(self, loose_key: str, index: MasterIndex) -> Optional[TierMatch]:
        """
        Find a master key in a containment relation with ``loose_key``.

        Args:
            loose_key: Loose key of the input line
            index: Loaded master index

        Returns:
            TierMatch for the accepted entry, or None
        """
        if not loose_key:
            return None

        best: Optional[TierMatch] = None
        for key, official in index.iterate_keys(self.scan_aliases):
            if len(key) < self.min_length:
                continue
            if key not in loose_key and loose_key not in key:
                continue

            if self.policy == 'first':
                return TierMatch(official=official, matched_key=key)
            if best is None or len(key) > len(best.matched_key):
                best = TierMatch(official=official, matched_key=key)

        if best is not None:
            logger.debug("Longest partial match for '%s': '%s'", loose_key, best.matched_key)
        return best
