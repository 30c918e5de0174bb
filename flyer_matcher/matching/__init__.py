"""
Machine-name matching engine package.

Provides cascade matching of flyer lines against the master list using:
- Exact matching (loose-key lookup, aliases included)
- Partial matching (loose-key containment above a length guard)
- Fuzzy matching (bounded Levenshtein distance scaled by key length)

The extractor coordinates these tiers, applies the noise filter and
deduplicates the output by loose key and by official name.
"""

import logging

from flyer_matcher.matching.match_result import MatchResult, MatchType, ResultSet, TierMatch
from flyer_matcher.matching.types import DEFAULT_PRESET, PRESETS, MatcherConfig
from flyer_matcher.matching.edit_distance import distance, fuzzy_threshold
from flyer_matcher.matching.master_index import MasterEntry, MasterIndex
from flyer_matcher.matching.exact_matcher import ExactMatcher
from flyer_matcher.matching.partial_matcher import PartialMatcher
from flyer_matcher.matching.fuzzy_matcher import FuzzyMatcher
from flyer_matcher.matching.extractor import Extractor

_logger = logging.getLogger(__name__)


def build_extractor(
    index: MasterIndex,
    preset: str = DEFAULT_PRESET,
    noise_filter=None,
    **config_overrides,
) -> Extractor:
    """
    Build an Extractor from a named preset.

    Args:
        index: Loaded master index.
        preset: Preset name ('strict', 'alias_fuzzy', 'relaxed').
        noise_filter: NoiseFilter (created internally if None).
        **config_overrides: MatcherConfig fields replacing the preset's.

    Returns:
        Configured Extractor instance.
    """
    config = MatcherConfig.preset(preset, **config_overrides)
    _logger.info("Matcher preset '%s': tiers=%s", preset, ",".join(config.tiers))
    return Extractor(index=index, config=config, noise_filter=noise_filter)


__all__ = [
    "DEFAULT_PRESET",
    "PRESETS",
    "Extractor",
    "ExactMatcher",
    "FuzzyMatcher",
    "MasterEntry",
    "MasterIndex",
    "MatchResult",
    "MatchType",
    "MatcherConfig",
    "PartialMatcher",
    "ResultSet",
    "TierMatch",
    "build_extractor",
    "distance",
    "fuzzy_threshold",
]
