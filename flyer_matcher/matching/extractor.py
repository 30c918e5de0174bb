"""
Extraction engine for machine-name reconciliation.

Implements cascade classification of flyer lines against the master index
and assembles the deduplicated result set.

Cascade order (per line, terminal on first success):
  Step 0: Noise filter            -> SKIP
  Step 1: Duplicate loose key     -> dropped
  Step 2: Exact (primary + alias) -> EXACT
  Step 3: Optional re-split on inline separators, fragments classified
          through the full cascade
  Step 4: Partial containment     -> PARTIAL
  Step 5: Bounded edit distance   -> FUZZY
  Step 6: Otherwise               -> UNMATCHED

Re-split applies to every line that misses the exact tier. When no
fragment resolves, the whole-line partial, fuzzy or unmatched result
stands.

After the pass, records are deduplicated again by official name so that
a machine confirmed by several lines appears once.
"""

import logging
import re
import unicodedata
from typing import Any, List, Optional, Sequence, Set, Tuple

from flyer_matcher.extraction.filters import NoiseFilter
from flyer_matcher.matching.exact_matcher import ExactMatcher
from flyer_matcher.matching.fuzzy_matcher import FuzzyMatcher
from flyer_matcher.matching.master_index import MasterIndex
from flyer_matcher.matching.match_result import MatchResult, MatchType, ResultSet, TierMatch
from flyer_matcher.matching.partial_matcher import PartialMatcher
from flyer_matcher.matching.types import MatcherConfig
from flyer_matcher.normalization.text_normalizer import NameNormalizer

logger = logging.getLogger(__name__)

# Inline separators between several names in one table cell
RESPLIT_SEPARATORS = re.compile(r'[/／・･,，、､]')


def _line_parts(line: Any) -> Tuple[str, Optional[int], Optional[str]]:
    """
    Split a line into (text, page, extraction method).

    Accepts plain strings or objects carrying ``text`` / ``page`` /
    ``method`` attributes (e.g. RawLine).
    """
    if isinstance(line, str):
        return line, None, None
    if line is None:
        return '', None, None
    text = getattr(line, 'text', '')
    page = getattr(line, 'page', None)
    method = getattr(line, 'method', None)
    if method is not None:
        method = getattr(method, 'value', method)
    return text or '', page, method


class Extractor:
    """
    Cascade matcher and result assembler for one master index.

    The tier set and thresholds come from a MatcherConfig; see
    ``MatcherConfig.preset`` for the named variants. All per-run state
    (seen keys, output records) lives inside ``extract``, so one Extractor
    can serve any number of runs.
    """

    def __init__(self,
                 index: MasterIndex,
                 config: Optional[MatcherConfig] = None,
                 noise_filter: Optional[NoiseFilter] = None,
                 normalizer: Optional[NameNormalizer] = None):
        """
        Initialize the extractor.

        Args:
            index: Loaded master index
            config: MatcherConfig (defaults to the 'relaxed' preset)
            noise_filter: NoiseFilter instance (creates new if None)
            normalizer: NameNormalizer instance (creates new if None)
        """
        self.index = index
        self.config = config or MatcherConfig()
        self.normalizer = normalizer or NameNormalizer()
        self.noise_filter = noise_filter or NoiseFilter(normalizer=self.normalizer)

        self.exact_matcher = ExactMatcher()
        self.partial_matcher = PartialMatcher(
            min_length=self.config.partial_min_length,
            policy=self.config.partial_policy,
            scan_aliases=self.config.scan_aliases,
        )
        self.fuzzy_matcher = FuzzyMatcher(
            base_min=self.config.fuzzy_base_min,
            rate=self.config.fuzzy_rate,
            scan_aliases=self.config.scan_aliases,
        )

    def extract(self, lines: Sequence[Any]) -> ResultSet:
        """
        Classify every line and build the deduplicated result set.

        Args:
            lines: Raw line strings or RawLine-like objects

        Returns:
            ResultSet with resolved records (unique by loose key and by
            official name) and the unmatched lines
        """
        result = ResultSet()
        seen_keys: Set[str] = set()
        resolved: List[MatchResult] = []

        if len(self.index) == 0:
            logger.warning("Master index is empty; no line can resolve")

        for line in lines:
            result.lines_seen += 1
            text, page, method = _line_parts(line)

            record = self.classify(text, page=page, extraction=method, seen_keys=seen_keys)
            if record is None:
                result.duplicates += 1
                continue
            if record.match_type is MatchType.SKIP:
                result.skipped += 1
                continue
            if self.config.resplit and record.match_type is not MatchType.EXACT:
                fragments = self._resplit(text, page, method, seen_keys)
                if fragments:
                    for fragment in fragments:
                        seen_keys.add(fragment.loose_key)
                    resolved.extend(fragments)
                    continue

            if record.is_resolved:
                seen_keys.add(record.loose_key)
                resolved.append(record)
            else:
                result.unmatched.append(record)

        officials_seen: Set[str] = set()
        for record in resolved:
            if record.official in officials_seen:
                result.merged += 1
                continue
            officials_seen.add(record.official)
            result.records.append(record)

        if result.lines_seen == 0:
            logger.warning("No candidate lines supplied to extraction")

        counts = result.counts_by_type()
        logger.info(
            "Extraction: %d lines -> %d machines "
            "(exact %d / partial %d / fuzzy %d, unmatched %d, "
            "skipped %d, duplicate keys %d, merged %d)",
            result.lines_seen, len(result),
            counts['exact'], counts['partial'], counts['fuzzy'],
            counts['unmatched'], result.skipped, result.duplicates, result.merged,
        )
        return result

    def classify(self, text: str,
                 page: Optional[int] = None,
                 extraction: Optional[str] = None,
                 seen_keys: Optional[Set[str]] = None,
                 from_fragment: bool = False) -> Optional[MatchResult]:
        """
        Classify a single line through the tier cascade.

        Args:
            text: Raw line text
            page: Source page, passed through to the record
            extraction: Extraction method label, passed through to the record
            seen_keys: Loose keys already resolved in this run
            from_fragment: Mark the record as coming from a re-split fragment

        Returns:
            MatchResult, or None when the loose key was already resolved
        """
        form = self.normalizer.normalize(text)
        common = dict(
            raw=text,
            display=form.display,
            loose_key=form.loose_key,
            page=page,
            extraction=extraction,
            from_fragment=from_fragment,
        )

        reason = self.noise_filter.reason(text)
        if reason is not None:
            logger.debug("Skip (%s): %r", reason, text)
            return MatchResult(match_type=MatchType.SKIP, **common)

        if seen_keys is not None and form.loose_key in seen_keys:
            logger.debug("Duplicate key '%s': %r", form.loose_key, text)
            return None

        hit = self.exact_matcher.match(form.loose_key, self.index)
        if hit:
            return self._record(MatchType.EXACT, hit, common)

        if self.config.partial_enabled:
            hit = self.partial_matcher.match(form.loose_key, self.index)
            if hit:
                return self._record(MatchType.PARTIAL, hit, common)

        if self.config.fuzzy_enabled:
            hit = self.fuzzy_matcher.match(form.loose_key, self.index)
            if hit:
                return self._record(MatchType.FUZZY, hit, common)

        logger.debug("Unmatched: %r", form.display)
        return MatchResult(match_type=MatchType.UNMATCHED, **common)

    def _record(self, match_type: MatchType, hit: TierMatch, common: dict) -> MatchResult:
        """Build a resolved record from a tier hit."""
        logger.debug(
            "%s: %r -> %r (key '%s')",
            match_type.value, common['raw'], hit.official, hit.matched_key,
        )
        return MatchResult(
            match_type=match_type,
            official=hit.official,
            matched_key=hit.matched_key,
            distance=hit.distance if match_type is MatchType.FUZZY else None,
            **common,
        )

    def _resplit(self, text: str, page: Optional[int], method: Optional[str],
                 seen_keys: Set[str]) -> List[MatchResult]:
        """
        Re-classify the fragments of a line joined by inline separators.

        Fragments are classified once each (no recursive split); fragments
        that do not resolve are dropped.
        """
        normalized = unicodedata.normalize('NFKC', text)
        if not RESPLIT_SEPARATORS.search(normalized):
            return []

        fragments: List[MatchResult] = []
        local_keys = set(seen_keys)
        for part in RESPLIT_SEPARATORS.split(normalized):
            part = part.strip()
            if not part:
                continue
            record = self.classify(
                part, page=page, extraction=method,
                seen_keys=local_keys, from_fragment=True,
            )
            if record is None or not record.is_resolved:
                continue
            local_keys.add(record.loose_key)
            fragments.append(record)

        if fragments:
            logger.debug("Re-split %r into %d resolved fragments", text, len(fragments))
        return fragments
