"""
Behavioural invariants of the reconciliation engine.

Each test pins one guarantee the output relies on: exact completeness,
the fuzzy distance bound, one record per official name, noise rejection,
and the reference flyer scenarios.
"""

import pytest

from flyer_matcher.matching import Extractor, MasterIndex, MatchType, build_extractor
from flyer_matcher.matching.edit_distance import fuzzy_threshold
from flyer_matcher.normalization import make_loose_key
from tests.fixtures.test_data import (
    FUZZY_SAMPLE_LINES,
    MASTER_OFFICIALS,
    SCENARIO_LINES,
)


# ============================================================================
# EXACT COMPLETENESS
# ============================================================================

class TestExactCompleteness:
    """Every official name resolves to itself through the exact tier."""

    @pytest.mark.parametrize("preset", ['strict', 'alias_fuzzy', 'relaxed'])
    @pytest.mark.parametrize("official", MASTER_OFFICIALS)
    def test_official_resolves_exactly(self, master_index, preset, official):
        result = build_extractor(master_index, preset=preset).extract([official])
        assert len(result) == 1
        record = result.records[0]
        assert record.match_type is MatchType.EXACT
        assert record.official == official


# ============================================================================
# FUZZY DISTANCE BOUND
# ============================================================================

class TestFuzzyBound:
    """Fuzzy hits never exceed the length-scaled distance bound."""

    @pytest.mark.parametrize("preset", ['alias_fuzzy', 'relaxed'])
    def test_fuzzy_records_within_bound(self, master_index, preset):
        extractor = build_extractor(master_index, preset=preset)
        for line in FUZZY_SAMPLE_LINES:
            record = extractor.classify(line)
            if record is None or record.match_type is not MatchType.FUZZY:
                continue
            bound = fuzzy_threshold(len(record.loose_key), len(record.matched_key))
            assert 0 < record.distance <= bound, line


# ============================================================================
# DEDUPLICATION
# ============================================================================

class TestDedupByOfficial:
    """Distinct lines resolving to one official name yield one record."""

    @pytest.mark.parametrize("lines", [
        ['Lucky Seven', 'ラッキーセブン'],
        ['ABC-777', 'ABC-778'],
        ['【新台】北斗の拳★', '北斗の拳'],
        ['ハイパーブラスタ', 'HYPER BLAST', 'ハイブラ'],
    ])
    def test_one_record_per_official(self, extractor, lines):
        result = extractor.extract(lines)
        assert len(result) == 1
        assert result.merged == len(lines) - 1

    def test_first_occurrence_wins(self, extractor):
        result = extractor.extract(['ABC-778', 'ABC-777'])
        assert result.records[0].match_type is MatchType.FUZZY
        assert result.records[0].raw == 'ABC-778'

    def test_output_order_is_first_seen(self, extractor):
        result = extractor.extract(['海物語', 'ABC-777', 'Lucky Seven'])
        assert result.officials() == ['海物語', 'ABC-777', 'Lucky Seven']


# ============================================================================
# NOISE REJECTION
# ============================================================================

class TestNoiseRejection:
    """Denylisted lines never reach the output."""

    def test_short_line_skipped(self, extractor):
        record = extractor.classify('新台')
        assert record.match_type is MatchType.SKIP

    def test_noise_wins_over_containment(self):
        index = MasterIndex.from_rows([['おすすめパチンコ物語']])
        extractor = Extractor(index)
        result = extractor.extract(['おすすめ', 'オススメ'])
        assert len(result) == 0
        assert result.unmatched == []
        assert result.skipped == 2

    def test_noise_wins_over_exact(self):
        index = MasterIndex.from_rows([['お知らせ']])
        result = Extractor(index).extract(['お知らせ'])
        assert len(result) == 0
        assert result.skipped == 1


# ============================================================================
# SCENARIOS
# ============================================================================

class TestScenarios:
    """Reference flyers."""

    def test_two_machine_flyer(self, scenario_index):
        result = Extractor(scenario_index).extract(SCENARIO_LINES)
        assert result.officials() == ['ABC-777']
        assert result.duplicates == 1
        assert result.skipped == 1
        assert [r.raw for r in result.unmatched] == ['ラッキーセブン案内']

    @pytest.mark.parametrize("preset,match_type", [
        ('alias_fuzzy', MatchType.FUZZY),
        ('relaxed', None),
    ])
    def test_two_machine_flyer_with_alias(self, preset, match_type):
        index = MasterIndex.from_rows([['ABC-777'], ['Lucky Seven', 'ラッキーセブン']])
        result = build_extractor(index, preset=preset).extract(SCENARIO_LINES)
        if match_type is None:
            assert result.officials() == ['ABC-777']
        else:
            assert result.officials() == ['ABC-777', 'Lucky Seven']
            assert result.records[1].match_type is match_type

    def test_alias_scan_in_partial_tier(self):
        index = MasterIndex.from_rows([['ABC-777'], ['Lucky Seven', 'ラッキーセブン']])
        result = build_extractor(index, scan_aliases=True).extract(SCENARIO_LINES)
        assert result.officials() == ['ABC-777', 'Lucky Seven']
        assert result.records[1].match_type is MatchType.PARTIAL

    def test_noise_line_never_output(self, scenario_index):
        for preset in ('strict', 'alias_fuzzy', 'relaxed'):
            result = build_extractor(scenario_index, preset=preset).extract(SCENARIO_LINES)
            raws = [r.raw for r in result.rows(include_unmatched=True)]
            assert '新台入替のお知らせ' not in raws

    def test_empty_master(self, empty_index):
        result = Extractor(empty_index).extract(SCENARIO_LINES + ['Lucky Seven'])
        assert len(result) == 0
        assert result.officials() == []

    def test_full_width_spaces_and_star(self, extractor):
        line = 'Lucky　　　Seven★'
        assert make_loose_key(line) == 'luckyseven'
        record = extractor.classify(line)
        assert record.match_type is MatchType.EXACT
        assert record.official == 'Lucky Seven'

    def test_full_width_spaces_inside_japanese_name(self, extractor):
        record = extractor.classify('ハイ　パー　ブラ　スト★')
        assert record.match_type is MatchType.EXACT
        assert record.official == 'ハイパーブラスト'
