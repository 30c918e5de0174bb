"""
Tests for configuration management.
"""

from pathlib import Path

import pytest
import yaml

from flyer_matcher.extraction.filters import NoiseFilter
from flyer_matcher.matching.types import MatcherConfig
from flyer_matcher.utils.config_manager import ConfigManager

PROJECT_CONFIG = Path(__file__).parent.parent / "config" / "matcher_config.yaml"


class TestConfigLoading:
    """Loading, merging and persistence."""

    def test_defaults_without_file(self):
        config = ConfigManager()
        assert config.get_matching_param('preset') == 'relaxed'
        assert config.get_noise_param('ng_min_length') == 3
        assert config.get_extraction_param('min_page_chars') == 20
        assert config.get_export_param('source_cut') == 120
        assert config.validate_config() == []

    def test_missing_path_uses_defaults(self, tmp_path):
        config = ConfigManager(tmp_path / "missing.yaml")
        assert config.get_all_config() == ConfigManager.DEFAULT_CONFIG

    def test_project_config_is_valid(self):
        config = ConfigManager(PROJECT_CONFIG)
        assert config.validate_config() == []
        assert config.get_matching_param('fuzzy_rate') == 0.2

    def test_partial_file_merged_with_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("matching:\n  preset: strict\n", encoding='utf-8')
        config = ConfigManager(path)
        assert config.get_matching_param('preset') == 'strict'
        assert config.get_matching_param('fuzzy_base_min') == 2
        assert config.get_export_param('bom') is True

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding='utf-8')
        config = ConfigManager(path)
        assert config.get_all_config() == ConfigManager.DEFAULT_CONFIG

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("matching: [unclosed\n", encoding='utf-8')
        with pytest.raises(yaml.YAMLError):
            ConfigManager(path)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigManager().load_config(tmp_path / "missing.yaml")

    def test_save_and_reload(self, tmp_path):
        config = ConfigManager()
        config.update_param('noise', 'ng_words', ['お知らせ', '新台入替'])
        path = tmp_path / "saved" / "config.yaml"
        config.save_config(path)

        reloaded = ConfigManager(path)
        assert reloaded.get_noise_param('ng_words') == ['お知らせ', '新台入替']
        assert 'お知らせ' in path.read_text(encoding='utf-8')

    def test_save_without_path(self):
        with pytest.raises(ValueError):
            ConfigManager().save_config()

    def test_reset(self):
        config = ConfigManager()
        config.update_param('matching', 'preset', 'strict')
        config.reset_to_defaults()
        assert config.get_matching_param('preset') == 'relaxed'


class TestConfigAccess:
    """Parameter access and updates."""

    def test_unknown_param(self):
        with pytest.raises(KeyError):
            ConfigManager().get_matching_param('nope')

    def test_unknown_section(self):
        with pytest.raises(KeyError):
            ConfigManager().update_param('database', 'batch_size', 10)

    def test_defaults_not_shared(self):
        config = ConfigManager()
        config.update_param('matching', 'preset', 'strict')
        assert ConfigManager.DEFAULT_CONFIG['matching']['preset'] == 'relaxed'


class TestConfigBuilders:
    """MatcherConfig / NoiseFilter construction."""

    def test_matcher_config_from_defaults(self):
        matcher_config = ConfigManager().matcher_config()
        assert isinstance(matcher_config, MatcherConfig)
        assert matcher_config == MatcherConfig.preset('relaxed')

    def test_matcher_config_preset_override(self):
        config = ConfigManager()
        config.update_param('matching', 'resplit', True)
        matcher_config = config.matcher_config('alias_fuzzy')
        assert matcher_config.tiers == ('exact', 'fuzzy')
        assert matcher_config.scan_aliases
        assert matcher_config.resplit

    def test_noise_filter(self):
        config = ConfigManager()
        config.update_param('noise', 'ng_min_length', 2)
        noise_filter = config.noise_filter()
        assert isinstance(noise_filter, NoiseFilter)
        assert noise_filter.reason('新台入荷ABC') == 'ng_word'


class TestConfigValidation:
    """validate_config error reporting."""

    @pytest.mark.parametrize("section,name,value", [
        ('matching', 'preset', 'loose'),
        ('matching', 'fuzzy_rate', 2.0),
        ('matching', 'fuzzy_base_min', -1),
        ('matching', 'partial_min_length', 0),
        ('matching', 'partial_policy', 'best'),
        ('noise', 'ng_words', 'お知らせ'),
        ('noise', 'ng_min_length', 0),
        ('extraction', 'ocr_zoom', 0),
        ('export', 'source_cut', -5),
    ])
    def test_invalid_values_reported(self, section, name, value):
        config = ConfigManager()
        config.update_param(section, name, value)
        errors = config.validate_config()
        assert len(errors) == 1
        assert name in errors[0]
