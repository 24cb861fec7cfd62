"""Sources table: markdown rendering and parsing of attached references."""

import logging
import re
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vppchat.types import VppSourceKind, VppSources

logger = logging.getLogger(__name__)

TABLE_TITLE = "Sources:"
TABLE_COLUMNS = ["id", "kind", "ref", "name"]

_CELL_SPLIT = re.compile(r"(?<!\\)\|")
_SEPARATOR_CELL = re.compile(r"^:?-{3,}:?$")
_TOKEN_ID = re.compile(r"^s(\d+)$")


class VppSourceRef(BaseModel):
    """One attached reference listed in a sources table.

    Ids are short tokens such as ``s1`` that are stable within a message.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., description="Per-message token, e.g. 's1'")
    kind: VppSourceKind = Field(..., description="file, web, repo or ssh")
    ref: str = Field(..., description="User-entered locator or pattern")
    display_name: Optional[str] = Field(default=None, description="Optional human-readable label")

    @field_validator("display_name")
    @classmethod
    def blank_name_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


def summarize_sources(refs: Iterable[VppSourceRef]) -> VppSources:
    return VppSources.summary(refs)


def _token_number(token_id: str) -> Optional[int]:
    match = _TOKEN_ID.match(token_id)
    return int(match.group(1)) if match else None


def sorted_by_token(refs: Iterable[VppSourceRef]) -> List[VppSourceRef]:
    """Order refs by the numeric suffix of ``sN`` ids, then by id.

    Ids without a numeric suffix sort after numbered ones.
    """

    def key(ref: VppSourceRef):
        number = _token_number(ref.id)
        if number is None:
            return (1, 0, ref.id)
        return (0, number, ref.id)

    return sorted(refs, key=key)


def next_token_id(refs: Iterable[VppSourceRef]) -> str:
    """Return the first ``sN`` id not already used by refs."""
    used = {ref.id for ref in refs}
    n = 1
    while f"s{n}" in used:
        n += 1
    return f"s{n}"


def _escape_cell(value: str) -> str:
    return value.replace("|", "\\|")


def _unescape_cell(value: str) -> str:
    return value.strip().replace("\\|", "|")


def _split_row(line: str) -> Optional[List[str]]:
    """Split a markdown table row into cells, or None if it isn't a row."""
    line = line.strip()
    if not line.startswith("|"):
        return None
    body = line[1:]
    if body.endswith("|") and not body.endswith("\\|"):
        body = body[:-1]
    return [_unescape_cell(cell) for cell in _CELL_SPLIT.split(body)]


def format_sources_table(refs: Iterable[VppSourceRef]) -> str:
    """Render refs as the markdown block embedded in outbound messages.

    Rows keep the order given; use sorted_by_token() first for display order.

    Args:
        refs: Source references to render

    Returns:
        Markdown block, or an empty string if there are no refs
    """
    rows = list(refs)
    if not rows:
        return ""

    out = [
        TABLE_TITLE,
        "| " + " | ".join(TABLE_COLUMNS) + " |",
        "| " + " | ".join("---" for _ in TABLE_COLUMNS) + " |",
    ]
    for ref in rows:
        cells = [ref.id, ref.kind.value, ref.ref, ref.display_name or ""]
        out.append("| " + " | ".join(_escape_cell(cell) for cell in cells) + " |")
    return "\n".join(out)


def _is_header(cells: List[str]) -> bool:
    lowered = [cell.lower() for cell in cells]
    return lowered in (TABLE_COLUMNS, TABLE_COLUMNS[:3])


def _read_rows(lines: List[str]) -> List[VppSourceRef]:
    """Read table rows until the first line that is not a table row."""
    refs = []
    for line in lines:
        cells = _split_row(line)
        if cells is None:
            break
        if all(_SEPARATOR_CELL.match(cell) for cell in cells):
            continue
        if len(cells) < 3:
            logger.debug("Skipping short sources row: %r", line)
            continue

        token_id, kind_value, ref = cells[0], cells[1].lower(), cells[2]
        display_name = cells[3] if len(cells) > 3 and cells[3] else None
        try:
            kind = VppSourceKind(kind_value)
        except ValueError:
            logger.debug("Skipping sources row with unknown kind %r", kind_value)
            continue
        if not token_id or not ref:
            logger.debug("Skipping incomplete sources row: %r", line)
            continue

        refs.append(VppSourceRef(id=token_id, kind=kind, ref=ref, display_name=display_name))
    return refs


def parse_sources_table(text: str) -> List[VppSourceRef]:
    """Extract the first sources table found in arbitrary reply text.

    Accepts both the four-column form written by format_sources_table() and
    the older three-column ``| id | kind | ref |`` form. Rows with an unknown
    kind, missing cells or an empty ref are skipped. A header line with no
    usable rows under it is passed over and the search continues below it.

    Args:
        text: Reply or message text that may embed a sources table

    Returns:
        Parsed refs in table order (empty if no table is present)
    """
    lines = text.split("\n")
    for index, line in enumerate(lines):
        cells = _split_row(line)
        if cells is None or not _is_header(cells):
            continue
        refs = _read_rows(lines[index + 1 :])
        if refs:
            return refs
        logger.debug("Sources header on line %d has no rows", index + 1)

    return []
