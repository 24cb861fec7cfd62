"""VPP runtime: protocol state transitions, header/footer synthesis and reply checks.

One VppRuntime belongs to one conversation. It does no I/O and holds no locks;
callers that share an instance across threads must serialize access.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Sequence

from vppchat.footer import (
    extract_sources_token,
    find_footer_line,
    parse_cycle_value,
    parse_tag_token,
    split_footer_fields,
)
from vppchat.sources import VppSourceRef, parse_sources_table
from vppchat.types import (
    CYCLE_DISPLAY_LENGTH,
    ECHOABLE_TAGS,
    FOOTER_VERSION,
    AssumptionsConfig,
    VppCorrectness,
    VppModifiers,
    VppSeverity,
    VppSources,
    VppState,
    VppTag,
)

logger = logging.getLogger(__name__)

ISSUE_REPLY_EMPTY = "Reply empty"
ISSUE_MISSING_TAG_LINE = "Missing leading tag line"
ISSUE_MISSING_FOOTER = "Missing footer metadata"

# Advisory only: set_tag() accepts any transition.
ALLOWED_NEXT_TAGS: Dict[VppTag, FrozenSet[VppTag]] = {
    VppTag.G: frozenset({VppTag.Q, VppTag.O}),
    VppTag.Q: frozenset({VppTag.O, VppTag.C}),
    VppTag.O: frozenset({VppTag.C, VppTag.O_F}),
    VppTag.C: frozenset({VppTag.O_F, VppTag.G}),
    VppTag.O_F: frozenset({VppTag.G, VppTag.Q}),
    VppTag.E: frozenset({VppTag.G}),
    VppTag.E_O: frozenset({VppTag.G}),
}


@dataclass
class VppValidationResult:
    """Outcome of a structural reply check."""

    is_valid: bool
    issues: List[str] = field(default_factory=list)


@dataclass
class VppReplyIngest:
    """What ingest_assistant_reply() learned from one reply.

    Attributes:
        validation: Structural validation result for the reply
        footer_line: Footer line that was ingested, if any
        sources_token: Raw ``Sources=`` value from the footer, if any
        sources: Sources table the model echoed back, if any
    """

    validation: VppValidationResult
    footer_line: Optional[str] = None
    sources_token: Optional[str] = None
    sources: List[VppSourceRef] = field(default_factory=list)


class VppRuntime:
    """Protocol state holder for a single conversation.

    Example:
        >>> runtime = VppRuntime()
        >>> runtime.set_tag(VppTag.Q)
        >>> runtime.next_in_cycle()
        >>> runtime.make_footer(VppSources.WEB)
        '[Version=v1.4 | Tag=<q_2> | Sources=<web> | Assumptions=0 | Cycle=2/3 | Locus=VPPConsole]'
    """

    def __init__(self, state: Optional[VppState] = None):
        self.state = state if state is not None else VppState.default()

    # State transitions

    def set_tag(self, tag: VppTag) -> None:
        """Make ``tag`` the current phase. Every transition is accepted."""
        if not self.is_advised_transition(tag):
            logger.debug("Unadvised transition %s -> %s", self.state.current_tag.value, tag.value)
        self.state.current_tag = tag

    def allowed_next_tags(self, tag: Optional[VppTag] = None) -> FrozenSet[VppTag]:
        """Advisory set of tags that normally follow ``tag`` (default: current tag)."""
        return ALLOWED_NEXT_TAGS[tag if tag is not None else self.state.current_tag]

    def is_advised_transition(self, tag: VppTag) -> bool:
        return tag in self.allowed_next_tags()

    def next_in_cycle(self) -> None:
        self.state.cycle_index = max(1, self.state.cycle_index + 1)

    def new_cycle(self) -> None:
        """Start a fresh loop at ``g``, cycle 1."""
        self.state.cycle_index = 1
        self.state.current_tag = VppTag.G

    def set_assumptions(self, assumptions: int) -> None:
        self.state.assumptions = max(0, assumptions)

    def set_locus(self, locus: Optional[str]) -> None:
        self.state.locus = locus

    # Header synthesis

    def make_header(self, tag: VppTag, modifiers: Optional[VppModifiers] = None) -> str:
        """Build the ``!<tag> ...`` line prefixed to an outbound user message.

        An escape header (``e``) always names a destination: a missing or
        non-echoable echo target falls back to ``g``.

        Args:
            tag: Requested phase
            modifiers: Correctness, severity and echo target for this message

        Returns:
            Header line, e.g. ``!<e> --incorrect --major --<q>``
        """
        if modifiers is None:
            modifiers = VppModifiers()

        parts = [f"!<{tag.value}>"]

        if modifiers.correctness == VppCorrectness.CORRECT:
            parts.append("--correct")
        elif modifiers.correctness == VppCorrectness.INCORRECT:
            parts.append("--incorrect")

        if modifiers.severity == VppSeverity.MINOR:
            parts.append("--minor")
        elif modifiers.severity == VppSeverity.MAJOR:
            parts.append("--major")

        echo = modifiers.echo_target
        if tag == VppTag.E and echo not in ECHOABLE_TAGS:
            echo = VppTag.G

        if echo is not None and echo not in (VppTag.E, VppTag.E_O):
            parts.append(f"--<{echo.value}>")

        return " ".join(parts)

    def compose_user_message(
        self,
        draft: str,
        modifiers: Optional[VppModifiers] = None,
        assumptions: Optional[AssumptionsConfig] = None,
        tag: Optional[VppTag] = None,
    ) -> str:
        """Prefix a user draft with its header line.

        Args:
            draft: User text; surrounding whitespace is trimmed
            modifiers: Header modifiers
            assumptions: Composer assumptions selection, adds ``--assumptions=N``
            tag: Phase to request (defaults to the current tag)

        Returns:
            Message body ready to send to the model
        """
        header = self.make_header(tag if tag is not None else self.state.current_tag, modifiers)
        if assumptions is not None and assumptions.header_flag:
            header += f" {assumptions.header_flag}"
        return header + "\n" + draft.strip()

    # Footer synthesis

    def make_footer(
        self,
        sources: VppSources = VppSources.NONE,
        source_tokens: Optional[Sequence[str]] = None,
    ) -> str:
        """Build the metadata line that terminates an assistant reply.

        Args:
            sources: Summary token for the reply's attachments
            source_tokens: Explicit tokens (e.g. ``["s1", "s2"]``) written
                verbatim in place of the summary when non-empty

        Returns:
            Footer line, e.g. ``[Version=v1.4 | Tag=<g_1> | Sources=<none> | ...]``
        """
        state = self.state
        token = ",".join(source_tokens) if source_tokens else sources.value

        parts = [
            f"Version={FOOTER_VERSION}",
            f"Tag=<{state.current_tag.value}_{state.cycle_index}>",
            f"Sources=<{token}>",
            f"Assumptions={state.assumptions}",
            f"Cycle={state.cycle_index}/{CYCLE_DISPLAY_LENGTH}",
        ]
        if state.locus:
            parts.append(f"Locus={state.locus}")

        return "[" + " | ".join(parts) + "]"

    # Footer ingestion

    def ingest_footer_line(self, line: str) -> None:
        """Update tag, cycle and locus from a footer line.

        Fields apply in the order they appear, so ``Cycle=`` after ``Tag=``
        wins. Version, Sources and Assumptions are not restored. Malformed
        fields are skipped.

        make_footer() omits ``Locus`` when no locus is set, so a footer with a
        recognized tag and no ``Locus`` field clears the locus.
        """
        tag_seen = False
        locus_seen = False

        for key, value in split_footer_fields(line):
            if key == "Tag":
                tag, cycle = parse_tag_token(value)
                if tag is not None:
                    self.state.current_tag = tag
                    tag_seen = True
                else:
                    logger.debug("Ignoring unknown footer tag %r", value)
                if cycle is not None:
                    self.state.cycle_index = max(1, cycle)
            elif key == "Cycle":
                cycle = parse_cycle_value(value)
                if cycle is not None:
                    self.state.cycle_index = max(1, cycle)
                else:
                    logger.debug("Ignoring malformed footer cycle %r", value)
            elif key == "Locus":
                locus_seen = True
                if not value or value.lower() == "nil":
                    self.state.locus = None
                else:
                    self.state.locus = value

        if tag_seen and not locus_seen:
            self.state.locus = None

    # Reply validation

    def validate_assistant_reply(self, text: str) -> VppValidationResult:
        """Check that a reply opens with a tag line and ends with a footer.

        This is structural only: tag legality and footer completeness are
        not checked. An empty reply reports ``Reply empty`` and nothing else.
        """
        lines = text.split("\n") if text else []

        if not lines:
            return VppValidationResult(is_valid=False, issues=[ISSUE_REPLY_EMPTY])

        issues = []
        first, last = lines[0], lines[-1]
        if not (first.startswith("<") or first.startswith("!<")):
            issues.append(ISSUE_MISSING_TAG_LINE)
        if not (last.startswith("[") and "Version=" in last and "Tag=<" in last):
            issues.append(ISSUE_MISSING_FOOTER)

        return VppValidationResult(is_valid=not issues, issues=issues)

    def ingest_assistant_reply(self, text: str) -> VppReplyIngest:
        """Validate a reply, then ingest its footer and read its sources.

        The footer is ingested even when validation reports issues, as long
        as the last non-blank line looks like a footer.
        """
        result = VppReplyIngest(validation=self.validate_assistant_reply(text))

        footer = find_footer_line(text)
        if footer is not None:
            self.ingest_footer_line(footer)
            result.footer_line = footer
            result.sources_token = extract_sources_token(footer)

        result.sources = parse_sources_table(text)
        if result.validation.issues:
            logger.info("Assistant reply failed validation: %s", ", ".join(result.validation.issues))
        return result
