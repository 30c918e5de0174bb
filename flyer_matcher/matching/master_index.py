"""
Master index of official machine names.

Holds the official names (plus optional aliases) loaded from the master
list and exposes the loose-key lookups used by the matching tiers.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from flyer_matcher.normalization.text_normalizer import NameNormalizer

logger = logging.getLogger(__name__)

# Loose keys of first cells that mark a header row
HEADER_TOKENS = (
    'official_name', 'official', 'name', 'machine_name', 'machine',
    '機種名', '機種', '正式名称', '正式名', '公式名',
)

# Separators between several aliases written in one cell
ALIAS_SEPARATORS = re.compile(r'[,，|｜／、､]')


@dataclass(frozen=True)
class MasterEntry:
    """
    One official name from the master list.

    Attributes:
        official: Official name as written in the master (trimmed)
        loose_key: Loose key of the official name
        alias_keys: Loose keys of the aliases bound to this entry
    """
    official: str
    loose_key: str
    alias_keys: FrozenSet[str] = frozenset()


def _cell_text(cell: Any) -> str:
    """Cell value as trimmed text; None / NaN become ''."""
    if cell is None:
        return ''
    if isinstance(cell, float) and math.isnan(cell):
        return ''
    return str(cell).strip()


class MasterIndex:
    """
    Loose-key index over the master list.

    Primary keys (from official names) and alias keys form one logical
    lookup. A primary key binds to the first official that produced it;
    alias keys never override a primary binding.

    The index is read-only after ``load``; calling ``load`` again replaces
    the whole state at once.
    """

    def __init__(self, normalizer: Optional[NameNormalizer] = None):
        """
        Initialize an empty index.

        Args:
            normalizer: NameNormalizer instance (creates new if None)
        """
        self.normalizer = normalizer or NameNormalizer()
        self._entries: List[MasterEntry] = []
        self._primary: Dict[str, str] = {}
        self._aliases: Dict[str, str] = {}

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[Any]],
                  normalizer: Optional[NameNormalizer] = None) -> 'MasterIndex':
        """Build and load an index in one step."""
        index = cls(normalizer)
        index.load(rows)
        return index

    def load(self, rows: Iterable[Sequence[Any]]) -> int:
        """
        Load the master list, replacing any previous state.

        Column 1 of each row is the official name. Every further cell may
        hold one or more aliases separated by ``ALIAS_SEPARATORS``. The
        first non-blank row is skipped when its first cell is a known header
        token.

        Args:
            rows: Row tuples / lists

        Returns:
            Number of entries loaded
        """
        entries: List[MasterEntry] = []
        primary: Dict[str, str] = {}
        aliases: Dict[str, str] = {}
        dropped = 0
        header_checked = False

        for row_num, row in enumerate(rows):
            if not row or not any(_cell_text(cell) for cell in row):
                continue
            official = _cell_text(row[0])
            if not header_checked:
                header_checked = True
                if self._is_header(official):
                    logger.debug("Skipping master header row %d: %r", row_num + 1, official)
                    continue
            if not official:
                continue

            loose = self.normalizer.make_loose_key(official)
            if not loose:
                logger.debug("Master row %d has no comparable text: %r", row_num + 1, official)
                dropped += 1
                continue
            if loose in primary:
                logger.debug(
                    "Master row %d duplicates key '%s' (kept %r, dropped %r)",
                    row_num + 1, loose, primary[loose], official,
                )
                dropped += 1
                continue

            primary[loose] = official
            # a primary binding reclaims a key held by an earlier alias
            aliases.pop(loose, None)

            alias_keys = []
            for alias in self._split_aliases(row[1:]):
                alias_key = self.normalizer.make_loose_key(alias)
                if not alias_key or alias_key == loose:
                    continue
                if alias_key in primary or alias_key in aliases:
                    continue
                aliases[alias_key] = official
                alias_keys.append(alias_key)

            entries.append(MasterEntry(official, loose, frozenset(alias_keys)))

        self._entries = entries
        self._primary = primary
        self._aliases = aliases

        logger.info(
            "Master index loaded: %d entries, %d alias keys (%d rows dropped)",
            len(entries), len(aliases), dropped,
        )
        return len(entries)

    def has_exact(self, loose_key: str) -> bool:
        """Check whether a loose key is bound to an official name."""
        return self.resolve_exact(loose_key) is not None

    def resolve_exact(self, loose_key: str) -> Optional[str]:
        """
        Resolve a loose key through the primary and alias bindings.

        Args:
            loose_key: Loose key to look up

        Returns:
            Official name, or None if the key is unknown
        """
        if not loose_key:
            return None
        official = self._primary.get(loose_key)
        if official is not None:
            return official
        return self._aliases.get(loose_key)

    def iterate_entries(self) -> Iterator[MasterEntry]:
        """Entries in first-seen order."""
        return iter(self._entries)

    def iterate_keys(self, include_aliases: bool = False) -> Iterator[Tuple[str, str]]:
        """
        (loose_key, official) pairs for partial / fuzzy scans.

        Each entry's primary key comes first, followed by its alias keys
        when ``include_aliases`` is set.
        """
        for entry in self._entries:
            yield entry.loose_key, entry.official
            if include_aliases:
                for alias_key in sorted(entry.alias_keys):
                    if self._aliases.get(alias_key) == entry.official:
                        yield alias_key, entry.official

    @property
    def officials(self) -> List[str]:
        """Official names in first-seen order."""
        return [e.official for e in self._entries]

    @property
    def alias_count(self) -> int:
        """Number of alias keys bound in the index."""
        return len(self._aliases)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, loose_key: str) -> bool:
        return self.has_exact(loose_key)

    def _is_header(self, first_cell: str) -> bool:
        """Check whether a first cell looks like a column name."""
        key = self.normalizer.make_loose_key(first_cell)
        if not key:
            return False
        return key in _header_keys(self.normalizer)

    def _split_aliases(self, cells: Sequence[Any]) -> List[str]:
        """Split alias cells into individual alias strings."""
        aliases = []
        for cell in cells:
            text = _cell_text(cell)
            if not text:
                continue
            for part in ALIAS_SEPARATORS.split(text):
                part = part.strip()
                if part:
                    aliases.append(part)
        return aliases


def _header_keys(normalizer: NameNormalizer) -> FrozenSet[str]:
    """Loose keys of ``HEADER_TOKENS``."""
    return frozenset(normalizer.make_loose_key(t) for t in HEADER_TOKENS)
