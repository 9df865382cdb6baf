"""
Plugin options loader.

Reads the translator plugin options (collections, fields, vendor settings)
from a YAML file and validates them.

Example file:

    enabled: true
    fallbackLocales: [en]
    collections:
      insights:
        fields: [title, excerpt, content]
        settings:
          formality: prefer_more
        access:
          translate: true
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from autolocale.config import Settings, get_settings
from autolocale.core.models import LocaleSet, PluginOptions

logger = logging.getLogger(__name__)


class PluginConfigLoader:
    """Loads plugin options from YAML files or dicts."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def load(self, path: Path | str | None = None) -> PluginOptions:
        """
        Load plugin options.

        Falls back to `Settings.plugin_config_path`; with no path at all an
        empty (enabled, no collections) configuration is returned.
        """
        path = path or self.settings.plugin_config_path
        if not path:
            logger.info("No plugin config path set - no collections configured")
            return PluginOptions()

        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        options = self.from_dict(data)
        logger.info(
            f"Loaded plugin options from {path}: "
            f"{len(options.collections)} collection(s)"
        )
        return options

    def from_dict(self, data: dict[str, Any]) -> PluginOptions:
        return PluginOptions.model_validate(data)

    def locale_set(self) -> LocaleSet:
        """Build the locale set from settings."""
        return LocaleSet.parse(self.settings.locale_codes, self.settings.default_locale)
