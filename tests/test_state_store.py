"""Tests for protocol state storage."""

import pytest

from vppchat.config import Config
from vppchat.state_store import get_state_path, load_state, save_state
from vppchat.types import VppState, VppTag


def test_load_missing_state_uses_config(state_path):
    state = load_state(state_path, Config(default_locus="Seeded", default_assumptions=1))

    assert state == VppState(locus="Seeded", assumptions=1)


def test_save_and_load_state(state_path):
    original = VppState(current_tag=VppTag.E_O, cycle_index=4, assumptions=2, locus=None)

    save_state(original, state_path)

    assert load_state(state_path) == original


def test_load_corrupt_state(state_path):
    state_path.write_text("{broken")

    with pytest.raises(RuntimeError, match="Failed to load state"):
        load_state(state_path)


def test_load_state_with_unknown_tag(state_path):
    state_path.write_text('{"current_tag": "zz"}')

    with pytest.raises(RuntimeError):
        load_state(state_path)


def test_state_path_defaults(isolated_xdg, tmp_path):
    assert get_state_path() == isolated_xdg / ".local" / "share" / "vppchat" / "state.json"
    assert get_state_path(Config(state_file=tmp_path / "custom.json")) == tmp_path / "custom.json"
