"""
Data structures for matching results.

Defines the per-line classification record produced by the extractor and
the deduplicated result set built for one extraction run.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional


class MatchType(Enum):
    """Classification of one input line."""
    EXACT = "exact"
    PARTIAL = "partial"
    FUZZY = "fuzzy"
    UNMATCHED = "unmatched"
    SKIP = "skip"

    @property
    def is_resolved(self) -> bool:
        """True for the tiers that resolve to an official name."""
        return self in (MatchType.EXACT, MatchType.PARTIAL, MatchType.FUZZY)


@dataclass(frozen=True)
class TierMatch:
    """
    Hit returned by a single matching tier.

    Attributes:
        official: Official name the input resolved to
        matched_key: Master loose key that was hit
        distance: Edit distance (fuzzy tier only)
    """
    official: str
    matched_key: str
    distance: Optional[int] = None


@dataclass(frozen=True)
class MatchResult:
    """
    Classification of a single line.

    Attributes:
        match_type: Tier that classified the line
        raw: Original line text
        display: Normalized display form
        loose_key: Loose comparison key
        official: Resolved official name (exact / partial / fuzzy only)
        distance: Edit distance to the master key (fuzzy only)
        matched_key: Master loose key that was hit
        page: Source page (1-based), when the line came with provenance
        extraction: Extraction method label ('text' / 'ocr'), when known
        from_fragment: True when the record came from a re-split fragment
    """
    match_type: MatchType
    raw: str
    display: str
    loose_key: str
    official: Optional[str] = None
    distance: Optional[int] = None
    matched_key: Optional[str] = None
    page: Optional[int] = None
    extraction: Optional[str] = None
    from_fragment: bool = False

    def __post_init__(self):
        """Validate the tag / payload combination."""
        if self.match_type.is_resolved and not self.official:
            raise ValueError(
                f"{self.match_type.value} result requires an official name"
            )
        if not self.match_type.is_resolved and self.official is not None:
            raise ValueError(
                f"{self.match_type.value} result cannot carry an official name"
            )
        if self.match_type is MatchType.FUZZY:
            if self.distance is None or self.distance < 0:
                raise ValueError("Fuzzy result requires a non-negative distance")
        elif self.distance is not None:
            raise ValueError(
                f"Distance is only valid for fuzzy results, got {self.match_type.value}"
            )

    @property
    def is_resolved(self) -> bool:
        """Check if the line resolved to an official name."""
        return self.match_type.is_resolved

    @property
    def name(self) -> str:
        """Official name, or the display form as a provisional name."""
        return self.official if self.official else self.display

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "match_type": self.match_type.value,
            "raw": self.raw,
            "display": self.display,
            "loose_key": self.loose_key,
            "official": self.official,
            "distance": self.distance,
            "matched_key": self.matched_key,
            "page": self.page,
            "extraction": self.extraction,
            "from_fragment": self.from_fragment,
        }


@dataclass
class ResultSet:
    """
    Deduplicated output of one extraction run.

    Iteration and ``len()`` cover the resolved records only, in first-seen
    order. Lines that survived noise filtering without resolving are kept
    in ``unmatched`` for the auxiliary dump.

    Attributes:
        records: Resolved records, unique by loose key and by official name
        unmatched: Unmatched records in input order
        lines_seen: Number of input lines (fragments not counted)
        skipped: Lines rejected as noise
        duplicates: Lines dropped because their loose key was already resolved
        merged: Resolved lines dropped because their official name was already output
    """
    records: List[MatchResult] = field(default_factory=list)
    unmatched: List[MatchResult] = field(default_factory=list)
    lines_seen: int = 0
    skipped: int = 0
    duplicates: int = 0
    merged: int = 0

    def __iter__(self) -> Iterator[MatchResult]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def officials(self) -> List[str]:
        """Official names in output order."""
        return [r.official for r in self.records]

    def counts_by_type(self) -> Dict[str, int]:
        """Number of output records per match type (unmatched included)."""
        counts = Counter(r.match_type.value for r in self.records)
        counts[MatchType.UNMATCHED.value] = len(self.unmatched)
        return {
            t.value: counts.get(t.value, 0)
            for t in MatchType if t is not MatchType.SKIP
        }

    def rows(self, include_unmatched: bool = False) -> List[MatchResult]:
        """Records for tabular output, optionally followed by unmatched lines."""
        if include_unmatched:
            return list(self.records) + list(self.unmatched)
        return list(self.records)
