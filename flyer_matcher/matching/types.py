"""
Type definitions for the machine-name matching engine.

Holds the matcher configuration and the named presets that select which
tiers run and with which thresholds.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict


PARTIAL_POLICIES = ('first', 'longest')


@dataclass(frozen=True)
class MatcherConfig:
    """
    Configuration for matching tiers and thresholds.

    Attributes:
        partial_enabled: Run the containment tier after exact lookup
        fuzzy_enabled: Run the edit-distance tier
        fuzzy_base_min: Minimum accepted distance regardless of key length
        fuzzy_rate: Accepted distance as a fraction of the longer key
        partial_min_length: Master keys shorter than this never match partially
        partial_policy: 'first' accepts the first containing entry in index
            order; 'longest' accepts the longest containing master key
        scan_aliases: Let partial / fuzzy tiers scan alias keys too
        resplit: Re-split lines that miss the exact tier on inline separators
    """
    partial_enabled: bool = True
    fuzzy_enabled: bool = True
    fuzzy_base_min: int = 2
    fuzzy_rate: float = 0.20
    partial_min_length: int = 4
    partial_policy: str = 'first'
    scan_aliases: bool = False
    resplit: bool = False

    def __post_init__(self):
        """Validate thresholds."""
        if self.fuzzy_base_min < 0:
            raise ValueError(
                f"fuzzy_base_min must be non-negative, got {self.fuzzy_base_min}"
            )
        if not 0.0 <= self.fuzzy_rate <= 1.0:
            raise ValueError(
                f"fuzzy_rate must be between 0 and 1, got {self.fuzzy_rate}"
            )
        if self.partial_min_length < 1:
            raise ValueError(
                f"partial_min_length must be at least 1, got {self.partial_min_length}"
            )
        if self.partial_policy not in PARTIAL_POLICIES:
            raise ValueError(
                f"Invalid partial_policy '{self.partial_policy}', "
                f"must be one of {PARTIAL_POLICIES}"
            )

    @property
    def tiers(self) -> tuple:
        """Enabled tier names in cascade order."""
        tiers = ['exact']
        if self.partial_enabled:
            tiers.append('partial')
        if self.fuzzy_enabled:
            tiers.append('fuzzy')
        return tuple(tiers)

    @classmethod
    def preset(cls, name: str, **overrides) -> 'MatcherConfig':
        """
        Build a configuration from a named preset.

        Args:
            name: One of ``PRESETS``
            **overrides: Field values replacing the preset's

        Returns:
            MatcherConfig instance

        Raises:
            KeyError: If the preset name is unknown
        """
        if name not in PRESETS:
            raise KeyError(
                f"Unknown matcher preset '{name}', must be one of {sorted(PRESETS)}"
            )
        return replace(PRESETS[name], **overrides)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging / YAML output."""
        return {
            'partial_enabled': self.partial_enabled,
            'fuzzy_enabled': self.fuzzy_enabled,
            'fuzzy_base_min': self.fuzzy_base_min,
            'fuzzy_rate': self.fuzzy_rate,
            'partial_min_length': self.partial_min_length,
            'partial_policy': self.partial_policy,
            'scan_aliases': self.scan_aliases,
            'resplit': self.resplit,
        }


PRESETS: Dict[str, MatcherConfig] = {
    # exact / alias lookup only
    'strict': MatcherConfig(partial_enabled=False, fuzzy_enabled=False),
    # exact + edit distance, aliases scanned by the fuzzy tier
    'alias_fuzzy': MatcherConfig(partial_enabled=False, scan_aliases=True),
    # exact + containment + edit distance
    'relaxed': MatcherConfig(),
}

DEFAULT_PRESET = 'relaxed'
