"""Tolerant parsing helpers for VPP footer lines.

Footer lines may come straight from a model that does not follow the format
exactly, so every helper here skips what it cannot read instead of raising.
"""

import logging
import re
from typing import List, Optional, Tuple

from vppchat.types import VppFooter, VppTag

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"^[+-]?[0-9]+$")


def _strip_angle(value: str) -> str:
    """Remove one surrounding pair of ``<``/``>`` if present."""
    value = value.strip()
    if value.startswith("<"):
        value = value[1:]
    if value.endswith(">"):
        value = value[:-1]
    return value.strip()


def _parse_int(value: str) -> Optional[int]:
    """Parse a plain ASCII integer; digit separators and other scripts are rejected."""
    value = value.strip()
    if not _INTEGER.match(value):
        return None
    return int(value)


def looks_like_footer(line: str) -> bool:
    """Check the same markers reply validation uses for a footer line."""
    line = line.strip()
    return line.startswith("[") and "Version=" in line and "Tag=<" in line


def split_footer_fields(line: str) -> List[Tuple[str, str]]:
    """Split a footer line into ``(key, value)`` pairs.

    The surrounding brackets are optional, fields are separated by ``|`` and
    each key and value is trimmed. Fields without ``=`` are dropped.

    Args:
        line: Footer line, e.g. ``[Version=v1.4 | Tag=<g_1> | Cycle=1/3]``

    Returns:
        List of (key, value) tuples in the order they appear
    """
    body = line.strip()
    if body.startswith("["):
        body = body[1:]
    if body.endswith("]"):
        body = body[:-1]

    fields = []
    for raw in body.split("|"):
        raw = raw.strip()
        if "=" not in raw:
            if raw:
                logger.debug("Skipping footer field without '=': %r", raw)
            continue
        key, _, value = raw.partition("=")
        fields.append((key.strip(), value.strip()))
    return fields


def parse_tag_token(value: str) -> Tuple[Optional[VppTag], Optional[int]]:
    """Parse a ``Tag=`` value such as ``<q_2>`` or ``<o_f_3>``.

    Tags may themselves contain ``_``, so a trailing integer after the last
    ``_`` is taken as the cycle index and the rest as the tag.

    Returns:
        Tuple of (tag or None, cycle index or None)
    """
    token = _strip_angle(value)
    if not token:
        return None, None

    if "_" in token:
        prefix, suffix = token.rsplit("_", 1)
        cycle = _parse_int(suffix)
        if cycle is not None:
            return VppTag.parse(prefix), cycle

    whole = VppTag.parse(token)
    if whole is not None:
        return whole, None

    return VppTag.parse(token.split("_", 1)[0]), None


def parse_cycle_value(value: str) -> Optional[int]:
    """Parse a ``Cycle=N/M`` value, returning N."""
    return _parse_int(value.split("/", 1)[0])


def extract_sources_token(line: str) -> Optional[str]:
    """Return the raw ``Sources=`` value of a footer line without brackets.

    Args:
        line: Footer line

    Returns:
        Token such as ``none``, ``web``, ``mixed`` or a caller supplied
        override, or None when the field is absent
    """
    token = None
    for key, value in split_footer_fields(line):
        if key == "Sources":
            token = _strip_angle(value)
    return token


def find_footer_line(text: str) -> Optional[str]:
    """Return the last non-blank line of a reply if it looks like a footer."""
    for line in reversed(text.split("\n")):
        if not line.strip():
            continue
        return line.strip() if looks_like_footer(line) else None
    return None


def parse_footer_line(line: str) -> Optional[VppFooter]:
    """Parse every known field of a footer line into a VppFooter.

    Unlike runtime ingestion this also reads ``Version``, ``Sources`` and
    ``Assumptions``. Fields are applied in order so a later ``Cycle`` value
    overrides the cycle carried by ``Tag``.

    Returns:
        VppFooter, or None if the line carries no recognizable tag
    """
    tag = None
    cycle = None
    version = None
    sources = None
    assumptions = None
    locus = None

    for key, value in split_footer_fields(line):
        if key == "Version":
            version = value or None
        elif key == "Tag":
            parsed_tag, parsed_cycle = parse_tag_token(value)
            if parsed_tag is not None:
                tag = parsed_tag
            if parsed_cycle is not None:
                cycle = max(1, parsed_cycle)
        elif key == "Cycle":
            parsed_cycle = parse_cycle_value(value)
            if parsed_cycle is not None:
                cycle = max(1, parsed_cycle)
        elif key == "Sources":
            sources = _strip_angle(value) or None
        elif key == "Assumptions":
            parsed = _parse_int(_strip_angle(value))
            if parsed is not None:
                assumptions = max(0, parsed)
        elif key == "Locus":
            locus = None if not value or value.lower() == "nil" else value

    if tag is None:
        return None

    return VppFooter(
        version=version,
        tag=tag,
        cycle_index=cycle or 1,
        sources=sources,
        assumptions=assumptions,
        locus=locus,
    )
