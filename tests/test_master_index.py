"""
Tests for the master index and master file loading.

Tests:
- Header detection, blank and garbage rows
- Primary key collisions (first wins)
- Alias binding and primary reclaim
- Key iteration order
- CSV / Excel master files
"""

import pandas as pd
import pytest

from flyer_matcher.extraction.master_file import load_master_index, read_master_rows
from flyer_matcher.matching.master_index import MasterEntry, MasterIndex
from tests.fixtures.test_data import MASTER_HEADER, MASTER_OFFICIALS, MASTER_ROWS


# ============================================================================
# LOADING RULES
# ============================================================================

class TestMasterLoading:
    """Tests for MasterIndex.load."""

    def test_header_row_skipped(self, master_index):
        assert len(master_index) == len(MASTER_ROWS)
        assert master_index.officials == MASTER_OFFICIALS
        assert '機種名' not in master_index

    def test_header_token_only_skipped_on_first_row(self):
        index = MasterIndex.from_rows([['ABC-777'], ['machine']])
        assert index.officials == ['ABC-777', 'machine']

    @pytest.mark.parametrize("header", ['official_name', 'Name', '正式名称', '機種'])
    def test_header_tokens(self, header):
        index = MasterIndex.from_rows([[header], ['ABC-777']])
        assert index.officials == ['ABC-777']

    def test_header_after_leading_blank_rows(self):
        index = MasterIndex.from_rows([[], ['', None], ['official_name', 'alias'], ['ABC-777']])
        assert index.officials == ['ABC-777']

    def test_header_token_after_first_entry_kept(self):
        index = MasterIndex.from_rows([[''], ['ABC-777'], ['official_name']])
        assert index.officials == ['ABC-777', 'official_name']

    def test_blank_and_garbage_rows_skipped(self):
        index = MasterIndex.from_rows([[], [''], ['   '], [None], ['★★★'], ['ABC-777']])
        assert index.officials == ['ABC-777']

    def test_official_kept_as_written(self):
        index = MasterIndex.from_rows([['  Ｐ ＡＢＣ－７７７  ']])
        assert index.officials == ['Ｐ ＡＢＣ－７７７']
        assert index.resolve_exact('pabc-777') == 'Ｐ ＡＢＣ－７７７'

    def test_duplicate_key_first_wins(self):
        index = MasterIndex.from_rows([['ABC-777'], ['ａｂｃ－７７７'], ['abc 777']])
        assert index.officials == ['ABC-777', 'abc 777']
        assert index.resolve_exact('abc-777') == 'ABC-777'

    def test_nan_cells_ignored(self):
        index = MasterIndex.from_rows([['ABC-777', float('nan')], [float('nan'), 'x']])
        assert index.officials == ['ABC-777']
        assert index.alias_count == 0

    def test_reload_replaces_state(self, master_index):
        count = master_index.load([['Only One']])
        assert count == 1
        assert master_index.officials == ['Only One']
        assert not master_index.has_exact('abc-777')

    def test_empty_index(self, empty_index):
        assert len(empty_index) == 0
        assert empty_index.resolve_exact('abc-777') is None
        assert list(empty_index.iterate_keys(include_aliases=True)) == []


# ============================================================================
# ALIASES
# ============================================================================

class TestAliases:
    """Alias splitting and binding rules."""

    def test_alias_resolves_to_official(self, master_index):
        assert master_index.resolve_exact('らっき-せぶん') == 'Lucky Seven'
        assert master_index.resolve_exact('hyperblast') == 'ハイパーブラスト'
        assert master_index.resolve_exact('はいぶら') == 'ハイパーブラスト'

    def test_alias_cell_split(self):
        index = MasterIndex.from_rows([['Lucky Seven', 'ラッキーセブン|LS7', '幸運の7,ラキセ']])
        assert index.alias_count == 4
        entry = next(index.iterate_entries())
        assert entry.alias_keys == frozenset({'らっき-せぶん', 'ls7', '幸運の7', 'らきせ'})

    def test_alias_never_overrides_primary(self):
        index = MasterIndex.from_rows([['ABC-777'], ['Lucky Seven', 'abc-777']])
        assert index.resolve_exact('abc-777') == 'ABC-777'
        assert index.alias_count == 0

    def test_primary_reclaims_alias_key(self):
        index = MasterIndex.from_rows([['Lucky Seven', 'ABC-777'], ['ABC-777']])
        assert index.resolve_exact('abc-777') == 'ABC-777'
        assert index.alias_count == 0
        keys = list(index.iterate_keys(include_aliases=True))
        assert keys == [('luckyseven', 'Lucky Seven'), ('abc-777', 'ABC-777')]

    def test_first_alias_binding_wins(self):
        index = MasterIndex.from_rows([['ABC-777', 'Seven'], ['Lucky Seven', 'SEVEN']])
        assert index.resolve_exact('seven') == 'ABC-777'

    def test_alias_equal_to_own_primary_ignored(self):
        index = MasterIndex.from_rows([['ABC-777', 'ａｂｃ－７７７']])
        assert index.alias_count == 0


# ============================================================================
# LOOKUP & ITERATION
# ============================================================================

class TestLookup:
    """Exact lookup and scan order."""

    def test_contains(self, master_index):
        assert 'abc-777' in master_index
        assert 'xyz' not in master_index
        assert '' not in master_index

    def test_iterate_primary_keys(self, master_index):
        keys = [k for k, _ in master_index.iterate_keys()]
        assert keys == ['abc-777', 'luckyseven', 'はいぱ-ぶらすと', '北斗の拳', '海物語']

    def test_iterate_with_aliases(self, master_index):
        pairs = list(master_index.iterate_keys(include_aliases=True))
        assert pairs == [
            ('abc-777', 'ABC-777'),
            ('luckyseven', 'Lucky Seven'),
            ('らっき-せぶん', 'Lucky Seven'),
            ('はいぱ-ぶらすと', 'ハイパーブラスト'),
            ('hyperblast', 'ハイパーブラスト'),
            ('はいぶら', 'ハイパーブラスト'),
            ('北斗の拳', '北斗の拳'),
            ('海物語', '海物語'),
        ]

    def test_entries(self, master_index):
        entry = list(master_index.iterate_entries())[0]
        assert entry == MasterEntry('ABC-777', 'abc-777', frozenset())


# ============================================================================
# MASTER FILES
# ============================================================================

class TestMasterFiles:
    """Tests for read_master_rows / load_master_index."""

    def test_csv_with_bom(self, master_csv):
        rows = read_master_rows(master_csv)
        assert rows[0] == MASTER_HEADER
        assert len(rows) == len(MASTER_ROWS) + 1

    def test_load_csv_index(self, master_csv):
        index = load_master_index(master_csv)
        assert index.officials == MASTER_OFFICIALS

    def test_ragged_text_file(self, tmp_path):
        path = tmp_path / "master.txt"
        path.write_text("ABC-777\nLucky Seven,ラッキーセブン\n\n", encoding='utf-8')
        index = load_master_index(path)
        assert index.officials == ['ABC-777', 'Lucky Seven']
        assert index.alias_count == 1

    def test_tsv(self, tmp_path):
        path = tmp_path / "master.tsv"
        path.write_text("ABC-777\tトリプルセブン\n", encoding='utf-8')
        index = load_master_index(path)
        assert index.resolve_exact('とりぷるせぶん') == 'ABC-777'

    def test_excel(self, tmp_path):
        path = tmp_path / "master.xlsx"
        pd.DataFrame([MASTER_HEADER] + MASTER_ROWS).to_excel(path, header=False, index=False)
        index = load_master_index(path)
        assert index.officials == MASTER_OFFICIALS
        assert index.resolve_exact('らっき-せぶん') == 'Lucky Seven'

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_master_rows(tmp_path / "missing.csv")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "master.json"
        path.write_text("[]", encoding='utf-8')
        with pytest.raises(ValueError):
            read_master_rows(path)
