"""
Text normalization package for machine name processing.

Provides the display form used for presentation and the loose key used
by every matching tier.
"""

from .text_normalizer import (
    NORMALIZATION_VERSION,
    NameNormalizer,
    NormalizedForm,
    make_loose_key,
    normalize,
    normalize_display,
)

__all__ = [
    'NORMALIZATION_VERSION',
    'NameNormalizer',
    'NormalizedForm',
    'make_loose_key',
    'normalize',
    'normalize_display',
]
