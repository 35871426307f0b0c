"""
Configuration utility for stylestats.

Options enable individual metrics. A config is the default option set
overlaid with a JSON file or a mapping supplied by the caller.
"""

import copy
import json
import logging
import os
import re
from typing import Any, Dict, Mapping, Optional, Pattern, Union

from stylestats.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS: Dict[str, Any] = {
    "published": True,
    "paths": True,
    "stylesheets": True,
    "styleElements": True,
    "size": True,
    "dataUriSize": True,
    "ratioOfDataUriSize": True,
    "gzippedSize": False,
    "rules": True,
    "selectors": True,
    "simplicity": True,
    "mostIdentifier": True,
    "mostIdentifierSelector": True,
    "lowestCohesion": True,
    "lowestCohesionSelector": True,
    "totalUniqueFontSizes": True,
    "uniqueFontSizes": True,
    "totalUniqueFontFamilies": True,
    "uniqueFontFamilies": True,
    "totalUniqueColors": True,
    "uniqueColors": True,
    "idSelectors": True,
    "universalSelectors": True,
    "unqualifiedAttributeSelectors": True,
    "javascriptSpecificSelectors": "[-_]js[-_]|js[A-Z]",
    "userSpecifiedSelectors": False,
    "importantKeywords": True,
    "floatProperties": True,
    "propertiesCount": 10,
    "mediaQueries": True,
    "requestOptions": {},
    "stylusCommand": "stylus",
    "maxWorkers": 8,
}

# Keyword arguments accepted by requests.Session.get
REQUEST_OPTION_KEYS = {
    "headers", "timeout", "proxies", "verify", "cert",
    "auth", "cookies", "allow_redirects", "params",
}

PATTERN_OPTIONS = ("javascriptSpecificSelectors", "userSpecifiedSelectors")


class Config:
    """Option set for one analysis run."""

    def __init__(self, overrides: Union[str, Mapping[str, Any], None] = None):
        """
        Initialize the configuration.

        Args:
            overrides: Path to a JSON config file, a mapping of options, or None
        """
        self.config = copy.deepcopy(DEFAULT_OPTIONS)
        self._patterns: Dict[str, Optional[Pattern]] = {}

        if isinstance(overrides, str):
            self.config.update(self.load(overrides))
        elif overrides is not None:
            self.config.update(overrides)

        for key in self.config:
            if key not in DEFAULT_OPTIONS:
                logger.debug(f"Unrecognized option kept as-is: {key}")

        self._compile_patterns()

    @staticmethod
    def load(config_path: str) -> Dict[str, Any]:
        """
        Load option overrides from a JSON file.

        Args:
            config_path: Path to the config file

        Returns:
            Dict[str, Any]: The options found in the file

        Raises:
            ConfigError: If the file cannot be read or parsed
        """
        if not os.path.isfile(config_path):
            raise ConfigError("Configuration file not found", source=config_path)
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Cannot load configuration: {e}", source=config_path) from e

        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a JSON object", source=config_path)

        logger.debug(f"Configuration loaded from {config_path}")
        return data

    def _compile_patterns(self) -> None:
        for name in PATTERN_OPTIONS:
            raw = self.config.get(name)
            if not raw or not isinstance(raw, str):
                self._patterns[name] = None
                continue
            try:
                self._patterns[name] = re.compile(raw)
            except re.error as e:
                raise ConfigError(f"Invalid pattern for {name}: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def enabled(self, key: str) -> bool:
        """Return True if the option is set to a truthy value."""
        return bool(self.config.get(key))

    def pattern(self, key: str) -> Optional[Pattern]:
        """
        Get the precompiled regular expression for a pattern option.

        Args:
            key: ``javascriptSpecificSelectors`` or ``userSpecifiedSelectors``

        Returns:
            The compiled pattern, or None when the option is disabled
        """
        return self._patterns.get(key)

    @property
    def properties_limit(self) -> int:
        value = self.config.get("propertiesCount")
        if value is True:
            return DEFAULT_OPTIONS["propertiesCount"]
        if not value:
            return 0
        try:
            return max(int(value), 0)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"propertiesCount must be an integer, got {value!r}") from e

    @property
    def max_workers(self) -> int:
        value = self.config.get("maxWorkers") or DEFAULT_OPTIONS["maxWorkers"]
        return max(int(value), 1)

    def request_options(self) -> Dict[str, Any]:
        """
        Get the keyword arguments passed through to every HTTP request.

        Returns:
            Dict[str, Any]: A copy of the recognized request options
        """
        raw = self.config.get("requestOptions") or {}
        options = {}
        for key, value in raw.items():
            if key in REQUEST_OPTION_KEYS:
                options[key] = copy.deepcopy(value)
            else:
                logger.debug(f"Ignoring request option: {key}")
        return options

    def get_all(self) -> Dict[str, Any]:
        return copy.deepcopy(self.config)
