"""Tests for footer line parsing helpers."""

import pytest

from vppchat.footer import (
    extract_sources_token,
    find_footer_line,
    parse_cycle_value,
    parse_footer_line,
    parse_tag_token,
    split_footer_fields,
)
from vppchat.types import VppTag

FOOTER = "[Version=v1.4 | Tag=<q_2> | Sources=<web> | Assumptions=1 | Cycle=2/3 | Locus=VPPConsole]"


def test_split_footer_fields():
    fields = split_footer_fields(FOOTER)
    assert fields == [
        ("Version", "v1.4"),
        ("Tag", "<q_2>"),
        ("Sources", "<web>"),
        ("Assumptions", "1"),
        ("Cycle", "2/3"),
        ("Locus", "VPPConsole"),
    ]


def test_split_footer_fields_tolerates_spacing_and_missing_brackets():
    assert split_footer_fields("  Tag = <g_1>|Cycle=1/3 ") == [("Tag", "<g_1>"), ("Cycle", "1/3")]


@pytest.mark.parametrize(
    "value,expected",
    [
        ("<g_1>", (VppTag.G, 1)),
        ("<o_f_3>", (VppTag.O_F, 3)),
        ("<e_o_2>", (VppTag.E_O, 2)),
        ("<e_o>", (VppTag.E_O, None)),
        ("q_4", (VppTag.Q, 4)),
        ("<c_x>", (VppTag.C, None)),
        ("<zz_1>", (None, 1)),
        ("<>", (None, None)),
        ("<G_1>", (None, 1)),
        ("<q_\u0663>", (VppTag.Q, None)),
    ],
)
def test_parse_tag_token(value, expected):
    assert parse_tag_token(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2/3", 2),
        ("7", 7),
        ("x/3", None),
        ("", None),
        ("-1/3", -1),
        (" +2 /3", 2),
        ("1_0/3", None),
        ("\u0663/3", None),
    ],
)
def test_parse_cycle_value(value, expected):
    assert parse_cycle_value(value) == expected


def test_extract_sources_token():
    assert extract_sources_token(FOOTER) == "web"
    assert extract_sources_token("[Tag=<g_1> | Sources=<s1,s2>]") == "s1,s2"
    assert extract_sources_token("[Tag=<g_1> | Sources=mixed]") == "mixed"
    assert extract_sources_token("[Tag=<g_1>]") is None


def test_find_footer_line():
    assert find_footer_line(f"<q>\nbody\n{FOOTER}\n\n") == FOOTER
    assert find_footer_line("<q>\nbody") is None
    assert find_footer_line("") is None


def test_parse_footer_line():
    footer = parse_footer_line(FOOTER)
    assert footer is not None
    assert footer.version == "v1.4"
    assert footer.tag == VppTag.Q
    assert footer.cycle_index == 2
    assert footer.sources == "web"
    assert footer.assumptions == 1
    assert footer.locus == "VPPConsole"


def test_parse_footer_line_without_tag():
    assert parse_footer_line("[Version=v1.4 | Cycle=2/3]") is None


def test_parse_footer_line_defaults():
    footer = parse_footer_line("[Tag=<o> | Assumptions=lots | Locus=nil]")
    assert footer.tag == VppTag.O
    assert footer.cycle_index == 1
    assert footer.assumptions is None
    assert footer.locus is None
