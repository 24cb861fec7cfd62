"""Test configuration and fixtures."""

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch) -> Path:
    """Point config and data lookups at a per-test directory.

    Keeps tests away from the real ~/.config/vppchat and ~/.local/share/vppchat.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".local" / "share"))
    return home


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    return tmp_path / "state.json"


@pytest.fixture
def sample_reply() -> str:
    """Well-formed assistant reply with a sources table."""
    return "\n".join(
        [
            "<c>",
            "Which parser should we keep?",
            "",
            "Sources:",
            "| id | kind | ref | name |",
            "| --- | --- | --- | --- |",
            "| s1 | web | docs.python.org/3/library/re.html | re docs |",
            "",
            "[Version=v1.4 | Tag=<c_3> | Sources=<web> | Assumptions=1 | Cycle=3/3 | Locus=Parser]",
        ]
    )
