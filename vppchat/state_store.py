"""JSON storage for protocol state between CLI invocations."""

import json
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from vppchat.config import Config, default_state, load_config
from vppchat.types import VppState
from vppchat.xdg import get_xdg_data_path


def get_state_path(config: Optional[Config] = None) -> Path:
    """Get path to the state file.

    Returns:
        Configured ``state_file`` or ~/.local/share/vppchat/state.json
    """
    if config is not None and config.state_file:
        return Path(config.state_file).expanduser()
    return get_xdg_data_path() / "state.json"


def load_state(path: Path, config: Optional[Config] = None) -> VppState:
    """Load protocol state from JSON.

    Args:
        path: State file path
        config: Config used to seed the state when the file doesn't exist

    Returns:
        Stored state, or a fresh default state if the file doesn't exist

    Raises:
        RuntimeError: If the file exists but can't be read or validated
    """
    if not path.exists():
        return default_state(config if config is not None else load_config())

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return VppState.model_validate(data)
    except (json.JSONDecodeError, OSError, ValidationError) as e:
        raise RuntimeError(f"Failed to load state from {path}: {e}") from e


def save_state(state: VppState, path: Path) -> None:
    """Write protocol state to JSON.

    Raises:
        RuntimeError: If the file can't be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(state.model_dump_json(indent=2))
    except OSError as e:
        raise RuntimeError(f"Failed to save state to {path}: {e}") from e
