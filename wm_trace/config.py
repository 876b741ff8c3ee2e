"""Configuration for the trace checker.

The only tunable behavior is how window names are matched by each assertion.
System windows are identified by fixed titles and matched exactly, while app
windows are identified by package names and matched by substring. The
defaults keep that asymmetry; a JSON config file can override it per
assertion:

    {
        "matching": {
            "above_app": "exact",
            "non_app": "exact",
            "app": "substring",
            "app_on_top": "substring",
            "region": "substring",
            "activity": "substring"
        }
    }
"""

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "WM_TRACE_CONFIG"
DEFAULT_CONFIG_FILE = Path.home() / ".config/wm-trace/config.json"


class MatchStrategy(str, Enum):
    """How a queried name is compared to a window identifier."""
    EXACT = "exact"
    SUBSTRING = "substring"
    PREFIX = "prefix"

    def matches(self, candidate: str, name: str) -> bool:
        if self is MatchStrategy.EXACT:
            return candidate == name
        if self is MatchStrategy.PREFIX:
            return candidate.startswith(name)
        return name in candidate


class MatchingConfig(BaseModel):
    """Match strategy per assertion."""
    above_app: MatchStrategy = Field(MatchStrategy.EXACT, description="is_above_app_window")
    non_app: MatchStrategy = Field(MatchStrategy.EXACT, description="has_non_app_window")
    app: MatchStrategy = Field(MatchStrategy.SUBSTRING, description="is_app_window_visible")
    app_on_top: MatchStrategy = Field(MatchStrategy.SUBSTRING, description="is_visible_app_window_on_top")
    region: MatchStrategy = Field(MatchStrategy.SUBSTRING, description="covers_at_least/at_most_region")
    activity: MatchStrategy = Field(MatchStrategy.SUBSTRING, description="activity assertions")


class CheckerConfig(BaseModel):
    """Top level checker configuration."""
    matching: MatchingConfig = Field(default_factory=MatchingConfig)


DEFAULT_CONFIG = CheckerConfig()


def resolve_config_file(config_file: Optional[Path] = None) -> Path:
    """Pick the config file: explicit argument, then $WM_TRACE_CONFIG, then the default path."""
    if config_file is not None:
        return Path(config_file).expanduser()
    env_value = os.environ.get(CONFIG_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config(config_file: Optional[Path] = None) -> CheckerConfig:
    """Load checker configuration from JSON.

    Args:
        config_file: Path to config.json (default: $WM_TRACE_CONFIG or
            ~/.config/wm-trace/config.json)

    Returns:
        CheckerConfig, defaults when the file does not exist

    Raises:
        ValueError: If the file exists but is not a valid configuration
    """
    path = resolve_config_file(config_file)

    if not path.exists():
        logger.info(f"Config file does not exist: {path}, using defaults")
        return CheckerConfig()

    try:
        with open(path) as f:
            data = json.load(f)
        config = CheckerConfig.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"Invalid checker config {path}: {e}") from e

    logger.info(f"Loaded checker config from {path}")
    logger.debug(f"Matching strategies: {config.matching.model_dump(mode='json')}")
    return config
