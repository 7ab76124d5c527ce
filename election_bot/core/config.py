"""Optional YAML overrides for the keyword denylist and dataset list.

Secrets never live in the YAML file; it may reference them as ``${VAR}``
and they are filled in from the environment at load time.
"""

import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml

from ..config import get_settings

logger = logging.getLogger(__name__)

ENV_VAR_PATTERN = re.compile(r"\$\{([^}^{]+)\}")


class ConfigLoader:
    """Reads ``config/config.yaml`` once.

    Usage:
        config = ConfigLoader("config/config.yaml")
        config.get("election_data.datasets")
        config.string_list("keyword_filter.blocked_keywords")

    A missing or unparsable file leaves every override unset.
    """

    def __init__(self, config_path: str = "config/config.yaml"):
        self.config_path = Path(config_path)
        self._config: dict[str, Any] = {}
        self.load()

    def load(self):
        if not self.config_path.exists():
            logger.warning(f"Config file not found at {self.config_path}, using defaults")
            return

        raw = ENV_VAR_PATTERN.sub(self._env_value, self.config_path.read_text(encoding="utf-8"))

        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML config {self.config_path}: {e}")
            return

        if data is not None and not isinstance(data, dict):
            logger.error(f"Config root in {self.config_path} must be a mapping, ignoring it")
            return

        self._config = data or {}
        logger.info(f"Loaded config overrides from {self.config_path}")

    @staticmethod
    def _env_value(match: re.Match) -> str:
        # Unset variables stay as written
        return os.environ.get(match.group(1), match.group(0))

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key such as ``election_data.datasets``."""
        node: Any = self._config
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return default
            node = node[part]
        return node

    def string_list(self, key: str) -> Optional[list[str]]:
        """A list-of-strings override, or None when unset or malformed."""
        value = self.get(key)
        if value is None:
            return None
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            logger.warning(f"Config key {key} must be a list of strings, ignoring it")
            return None
        return value


@lru_cache
def get_config() -> ConfigLoader:
    """Get cached YAML config instance."""
    return ConfigLoader(get_settings().config_path)
