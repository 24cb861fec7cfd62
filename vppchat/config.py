"""vppchat configuration management."""

import json
import logging
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from .runtime import VppRuntime
from .types import DEFAULT_LOCUS, VppState
from .xdg import get_xdg_config_path

logger = logging.getLogger(__name__)


class Config(BaseModel):
    """vppchat configuration.

    ``default_locus`` and ``default_assumptions`` seed the protocol state of
    every new conversation.
    """

    model_config = ConfigDict(
        extra="allow",
        str_strip_whitespace=True,
    )

    default_locus: Optional[str] = DEFAULT_LOCUS
    default_assumptions: int = Field(default=0, ge=0)
    state_file: Optional[Path] = None


def get_config_path() -> Path:
    return get_xdg_config_path("config.json")


def load_config(path: Optional[Path] = None) -> Config:
    """Load vppchat configuration from JSON file.

    Args:
        path: Path to config.json file. If None, uses default path

    Returns:
        Config object with loaded settings. Returns default config if the file
        doesn't exist or can't be read.
    """
    if path is None:
        path = get_config_path()

    if not path.exists():
        return Config()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return Config.model_validate(data)

    except json.JSONDecodeError as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return Config()
    except Exception as e:
        logger.warning("Failed to load config from %s: %s", path, e)
        return Config()


def save_config(config: Config, path: Optional[Path] = None) -> None:
    """Save vppchat configuration to JSON file.

    Args:
        config: Config object to save
        path: Path to config.json file. If None, uses default path

    Raises:
        IOError: If file cannot be written
    """
    if path is None:
        path = get_config_path()

    path.parent.mkdir(parents=True, exist_ok=True)

    # default_locus=None is meaningful (no locus), so keep it in the file
    config_data = config.model_dump(mode="json")
    if config_data.get("state_file") is None:
        config_data.pop("state_file", None)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(config_data, f, indent=2)


def update_config(path: Optional[Path], mutate: Callable[[Config], None]) -> Config:
    """Load config, apply ``mutate`` to it and save it back.

    Args:
        path: Path to config.json file. If None, uses default path
        mutate: Callable that edits the Config in place

    Returns:
        The saved Config
    """
    config = load_config(path)
    mutate(config)
    save_config(config, path)
    return config


def set_default_locus(locus: Optional[str], path: Optional[Path] = None) -> None:
    """Set the locus new conversations start with (None for no locus)."""
    update_config(path, lambda cfg: setattr(cfg, "default_locus", locus or None))


def set_default_assumptions(assumptions: int, path: Optional[Path] = None) -> None:
    """Set the assumptions count new conversations start with (clamped to 0)."""
    update_config(path, lambda cfg: setattr(cfg, "default_assumptions", max(0, assumptions)))


def default_state(config: Optional[Config] = None) -> VppState:
    """Build the initial protocol state for a new conversation."""
    if config is None:
        config = load_config()
    return VppState(assumptions=config.default_assumptions, locus=config.default_locus)


def new_runtime_from_config(config: Optional[Config] = None) -> VppRuntime:
    """Create a runtime seeded from configuration."""
    return VppRuntime(default_state(config))
