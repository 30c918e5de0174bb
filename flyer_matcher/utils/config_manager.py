"""
Configuration management for the flyer matcher.

Handles loading, updating, and persisting configuration including
matching thresholds, the noise denylist, PDF extraction and export settings.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from flyer_matcher.extraction.filters import DEFAULT_NG_WORDS, NoiseFilter
from flyer_matcher.matching.types import PARTIAL_POLICIES, PRESETS, MatcherConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Manages matcher configuration.

    Values from the YAML file are merged section by section onto
    ``DEFAULT_CONFIG``, so a file only needs the keys it changes.
    """

    DEFAULT_CONFIG = {
        'matching': {
            'preset': 'relaxed',
            'fuzzy_base_min': 2,
            'fuzzy_rate': 0.20,
            'partial_min_length': 4,
            'partial_policy': 'first',
            'resplit': False,
        },
        'noise': {
            'ng_words': list(DEFAULT_NG_WORDS),
            'ng_min_length': 3,
            'min_display_length': 3,
        },
        'extraction': {
            'ocr_fallback': True,
            'min_page_chars': 20,
            'ocr_lang': 'jpn+eng',
            'ocr_zoom': 2.0,
        },
        'export': {
            'source_cut': 120,
            'bom': True,
            'include_unmatched': False,
            'include_provenance': False,
            'workbook': False,
        },
    }

    SECTIONS = ('matching', 'noise', 'extraction', 'export')

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to YAML configuration file
        """
        self.config_path = Path(config_path) if config_path else None
        self.config: Dict[str, Any] = {}

        if self.config_path and self.config_path.exists():
            self.load_config(self.config_path)
        else:
            logger.info("No config file found, using defaults")
            self.config = copy.deepcopy(self.DEFAULT_CONFIG)

    def load_config(self, path: Path) -> Dict[str, Any]:
        """
        Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            Loaded configuration dictionary

        Raises:
            FileNotFoundError: If config file does not exist
            yaml.YAMLError: If config file is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                loaded_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML config: {e}")
            raise

        if not loaded_config:
            logger.warning(f"Empty config file at {path}, using defaults")
            self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        else:
            self.config = self._merge_with_defaults(loaded_config)

        self.config_path = path
        logger.info(f"Loaded configuration from {path}")
        return self.config

    # ─────────────────────────────────────────────────────────────────────────
    # Parameter access
    # ─────────────────────────────────────────────────────────────────────────

    def _get_param(self, section: str, name: str) -> Any:
        if name not in self.config.get(section, {}):
            raise KeyError(f"{section.capitalize()} parameter '{name}' not found in configuration")
        return self.config[section][name]

    def get_matching_param(self, name: str) -> Any:
        """
        Get a matching parameter by name.

        Raises:
            KeyError: If parameter not found
        """
        return self._get_param('matching', name)

    def get_noise_param(self, name: str) -> Any:
        """Get a noise filter parameter by name."""
        return self._get_param('noise', name)

    def get_extraction_param(self, name: str) -> Any:
        """Get a PDF extraction parameter by name."""
        return self._get_param('extraction', name)

    def get_export_param(self, name: str) -> Any:
        """Get an export parameter by name."""
        return self._get_param('export', name)

    def update_param(self, section: str, name: str, value: Any) -> None:
        """
        Update a single parameter.

        Args:
            section: One of 'matching', 'noise', 'extraction', 'export'
            name: Parameter name
            value: New value

        Raises:
            KeyError: If the section is unknown
        """
        if section not in self.SECTIONS:
            raise KeyError(f"Unknown config section '{section}', must be one of {self.SECTIONS}")

        old_value = self.config.setdefault(section, {}).get(name)
        self.config[section][name] = value
        logger.info(f"Updated {section}.{name}: {old_value} -> {value}")

    # ─────────────────────────────────────────────────────────────────────────
    # Builders
    # ─────────────────────────────────────────────────────────────────────────

    def matcher_config(self, preset: Optional[str] = None) -> MatcherConfig:
        """
        Build the MatcherConfig described by the 'matching' section.

        Args:
            preset: Preset name overriding the configured one

        Returns:
            MatcherConfig instance
        """
        matching = self.config['matching']
        return MatcherConfig.preset(
            preset or matching['preset'],
            fuzzy_base_min=matching['fuzzy_base_min'],
            fuzzy_rate=matching['fuzzy_rate'],
            partial_min_length=matching['partial_min_length'],
            partial_policy=matching['partial_policy'],
            resplit=matching['resplit'],
        )

    def noise_filter(self) -> NoiseFilter:
        """Build the NoiseFilter described by the 'noise' section."""
        noise = self.config['noise']
        return NoiseFilter(
            ng_words=noise['ng_words'],
            ng_min_length=noise['ng_min_length'],
            min_display_length=noise['min_display_length'],
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Persistence
    # ─────────────────────────────────────────────────────────────────────────

    def save_config(self, path: Optional[Path] = None) -> None:
        """
        Save configuration to YAML file.

        Args:
            path: Path to save to (uses self.config_path if not provided)

        Raises:
            ValueError: If no path provided and no config_path set
        """
        save_path = Path(path) if path else self.config_path
        if not save_path:
            raise ValueError("No path provided and no config_path set")

        save_path.parent.mkdir(parents=True, exist_ok=True)
        with open(save_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(
                self.config,
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
                indent=2,
            )
        logger.info(f"Saved configuration to {save_path}")

    def get_all_config(self) -> Dict[str, Any]:
        """Get a copy of the complete configuration dictionary."""
        return copy.deepcopy(self.config)

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        logger.info("Configuration reset to defaults")

    def _merge_with_defaults(self, loaded_config: dict) -> dict:
        """Merge loaded config with defaults to ensure all keys exist."""
        merged = copy.deepcopy(self.DEFAULT_CONFIG)

        for section, values in loaded_config.items():
            if section in merged and isinstance(values, dict):
                merged[section].update(values)
            else:
                merged[section] = values

        return merged

    def validate_config(self) -> List[str]:
        """
        Validate the current configuration.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        matching = self.config.get('matching', {})
        if matching.get('preset') not in PRESETS:
            errors.append(
                f"matching.preset must be one of {sorted(PRESETS)}, got {matching.get('preset')!r}"
            )
        for name in ('fuzzy_base_min', 'partial_min_length'):
            value = matching.get(name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(f"matching.{name} must be a non-negative integer")
        if matching.get('partial_min_length') == 0:
            errors.append("matching.partial_min_length must be at least 1")
        rate = matching.get('fuzzy_rate')
        if not isinstance(rate, (int, float)) or not 0.0 <= rate <= 1.0:
            errors.append(f"matching.fuzzy_rate must be between 0 and 1, got {rate}")
        if matching.get('partial_policy') not in PARTIAL_POLICIES:
            errors.append(f"matching.partial_policy must be one of {PARTIAL_POLICIES}")

        noise = self.config.get('noise', {})
        if not isinstance(noise.get('ng_words'), list):
            errors.append("noise.ng_words must be a list of phrases")
        ng_min = noise.get('ng_min_length')
        if not isinstance(ng_min, int) or ng_min < 1:
            errors.append("noise.ng_min_length must be a positive integer")
        min_display = noise.get('min_display_length')
        if not isinstance(min_display, int) or min_display < 0:
            errors.append("noise.min_display_length must be a non-negative integer")

        extraction = self.config.get('extraction', {})
        min_chars = extraction.get('min_page_chars')
        if not isinstance(min_chars, int) or min_chars < 0:
            errors.append("extraction.min_page_chars must be a non-negative integer")
        zoom = extraction.get('ocr_zoom')
        if not isinstance(zoom, (int, float)) or zoom <= 0:
            errors.append("extraction.ocr_zoom must be positive")

        cut = self.config.get('export', {}).get('source_cut')
        if not isinstance(cut, int) or cut < 0:
            errors.append("export.source_cut must be a non-negative integer")

        return errors
