"""Tests for VPP protocol types."""

import json

import pytest

from vppchat.types import (
    ECHOABLE_TAGS,
    AssumptionsConfig,
    AssumptionsMode,
    VppModifiers,
    VppState,
    VppTag,
)


def test_tag_wire_values():
    assert [tag.value for tag in VppTag] == ["g", "q", "o", "c", "o_f", "e", "e_o"]


@pytest.mark.parametrize("token", ["g", "o_f", "e_o"])
def test_tag_parse_known(token):
    assert VppTag.parse(token).value == token


@pytest.mark.parametrize("token", ["G", "x", "", "o f"])
def test_tag_parse_unknown(token):
    assert VppTag.parse(token) is None


def test_echoable_tags():
    assert ECHOABLE_TAGS == {VppTag.G, VppTag.Q, VppTag.O, VppTag.C}


def test_modifiers_defaults():
    modifiers = VppModifiers()
    assert modifiers.correctness.value == "neutral"
    assert modifiers.severity.value == "none"
    assert modifiers.echo_target is None


class TestAssumptionsConfig:
    def test_none_has_no_flag(self):
        config = AssumptionsConfig()
        assert config.mode == AssumptionsMode.NONE
        assert config.header_flag is None
        assert config.count == 0

    def test_zero(self):
        assert AssumptionsConfig.zero().header_flag == "--assumptions=0"

    def test_custom_counts_non_blank_items(self):
        config = AssumptionsConfig.custom(["a", " ", "b", "c"])
        assert config.count == 3
        assert config.header_flag == "--assumptions=3"

    def test_custom_minimum_one(self):
        assert AssumptionsConfig.custom([]).header_flag == "--assumptions=1"
        assert AssumptionsConfig.custom(["  "]).count == 1


class TestVppState:
    def test_json_round_trip(self):
        state = VppState(current_tag=VppTag.O_F, cycle_index=3, assumptions=2, locus=None)
        data = json.loads(state.model_dump_json())
        assert data["current_tag"] == "o_f"
        assert VppState.model_validate(data) == state

    def test_default(self):
        assert VppState.default() == VppState(current_tag=VppTag.G, cycle_index=1, assumptions=0, locus="VPPConsole")
