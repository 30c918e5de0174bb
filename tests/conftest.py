"""
Pytest configuration and shared fixtures for flyer matcher tests.

Provides:
- Normalizer and noise filter instances
- Master indexes (sample master, scenario master, empty)
- Extractors per preset
- Master / line files written to tmp_path
"""

import csv
from pathlib import Path

import pytest

from flyer_matcher.extraction.filters import NoiseFilter
from flyer_matcher.matching import build_extractor
from flyer_matcher.matching.extractor import Extractor
from flyer_matcher.matching.master_index import MasterIndex
from flyer_matcher.matching.types import MatcherConfig
from flyer_matcher.normalization.text_normalizer import NameNormalizer
from tests.fixtures.test_data import MASTER_HEADER, MASTER_ROWS, SCENARIO_MASTER


# ============================================================================
# NORMALIZATION FIXTURES
# ============================================================================

@pytest.fixture(scope="session")
def normalizer():
    """Shared NameNormalizer instance (stateless)."""
    return NameNormalizer()


@pytest.fixture
def noise_filter(normalizer):
    """NoiseFilter with the default denylist."""
    return NoiseFilter(normalizer=normalizer)


# ============================================================================
# MASTER INDEX FIXTURES
# ============================================================================

@pytest.fixture
def master_index(normalizer):
    """Index over the sample master (header row included)."""
    return MasterIndex.from_rows([MASTER_HEADER] + MASTER_ROWS, normalizer=normalizer)


@pytest.fixture
def scenario_index(normalizer):
    """Two-machine master without aliases."""
    return MasterIndex.from_rows(SCENARIO_MASTER, normalizer=normalizer)


@pytest.fixture
def empty_index(normalizer):
    """Index with zero entries."""
    return MasterIndex(normalizer)


# ============================================================================
# EXTRACTOR FIXTURES
# ============================================================================

@pytest.fixture
def extractor(master_index):
    """Extractor with the default (relaxed) preset."""
    return Extractor(master_index, config=MatcherConfig())


@pytest.fixture
def strict_extractor(master_index):
    """Extractor running the exact tier only."""
    return build_extractor(master_index, preset='strict')


@pytest.fixture
def alias_fuzzy_extractor(master_index):
    """Extractor with exact + fuzzy over primary and alias keys."""
    return build_extractor(master_index, preset='alias_fuzzy')


# ============================================================================
# FILE FIXTURES
# ============================================================================

@pytest.fixture
def master_csv(tmp_path) -> Path:
    """Sample master written as a BOM-prefixed CSV."""
    path = tmp_path / "master.csv"
    with open(path, 'w', encoding='utf-8-sig', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(MASTER_HEADER)
        writer.writerows(MASTER_ROWS)
    return path


@pytest.fixture
def lines_txt(tmp_path) -> Path:
    """Plain-text line dump with blank lines mixed in."""
    path = tmp_path / "lines.txt"
    path.write_text("ABC-777\n\n  ラッキーセブン  \nXYZ-123\n", encoding='utf-8')
    return path
