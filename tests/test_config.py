"""Tests for config module."""

import json

from vppchat.config import (
    Config,
    default_state,
    get_config_path,
    load_config,
    new_runtime_from_config,
    save_config,
    set_default_assumptions,
    set_default_locus,
    update_config,
)
from vppchat.types import VppTag


def test_load_config_nonexistent(tmp_path):
    """Test loading config from nonexistent file returns default config."""
    config = load_config(tmp_path / "config.json")

    assert config.default_locus == "VPPConsole"
    assert config.default_assumptions == 0
    assert config.state_file is None


def test_save_and_load_config(tmp_path):
    """Test saving and loading config."""
    config_path = tmp_path / "config.json"

    save_config(Config(default_locus="Research", default_assumptions=2, state_file=tmp_path / "s.json"), config_path)

    assert config_path.exists()

    loaded = load_config(config_path)
    assert loaded.default_locus == "Research"
    assert loaded.default_assumptions == 2
    assert loaded.state_file == tmp_path / "s.json"


def test_unset_locus_survives_save(tmp_path):
    """Test that an explicitly unset locus is not replaced by the default on reload."""
    config_path = tmp_path / "config.json"

    set_default_locus(None, config_path)

    assert json.loads(config_path.read_text())["default_locus"] is None
    assert load_config(config_path).default_locus is None


def test_set_default_assumptions_clamps(tmp_path):
    config_path = tmp_path / "config.json"

    set_default_assumptions(-3, config_path)

    assert load_config(config_path).default_assumptions == 0


def test_update_config(tmp_path):
    config_path = tmp_path / "config.json"

    update_config(config_path, lambda cfg: setattr(cfg, "default_locus", "Thread A"))

    assert load_config(config_path).default_locus == "Thread A"


def test_load_config_invalid_json(tmp_path):
    """Test loading invalid JSON falls back to defaults."""
    config_path = tmp_path / "config.json"
    config_path.write_text("{not json")

    config = load_config(config_path)
    assert config.default_locus == "VPPConsole"


def test_load_config_invalid_values(tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"default_assumptions": -1}))

    assert load_config(config_path).default_assumptions == 0


def test_config_extra_fields_allowed(tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"default_locus": "  Padded  ", "theme": "nord"}))

    config = load_config(config_path)
    assert config.default_locus == "Padded"


def test_default_config_path_uses_xdg(isolated_xdg):
    assert get_config_path() == isolated_xdg / ".config" / "vppchat" / "config.json"


def test_runtime_from_config():
    runtime = new_runtime_from_config(Config(default_locus="Thread", default_assumptions=3))

    assert runtime.state.current_tag == VppTag.G
    assert runtime.state.cycle_index == 1
    assert runtime.state.assumptions == 3
    assert runtime.state.locus == "Thread"


def test_default_state_reads_config_file(isolated_xdg):
    save_config(Config(default_locus="From file"), get_config_path())

    assert default_state().locus == "From file"
