"""Core VPP protocol types: tags, modifiers, sources and runtime state."""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

FOOTER_VERSION = "v1.4"
CYCLE_DISPLAY_LENGTH = 3
DEFAULT_LOCUS = "VPPConsole"


class VppTag(str, Enum):
    """Phase of the structured reasoning loop.

    Wire values are lowercase and case sensitive.
    """

    G = "g"
    Q = "q"
    O = "o"  # noqa: E741
    C = "c"
    O_F = "o_f"
    E = "e"
    E_O = "e_o"

    @classmethod
    def parse(cls, token: str) -> Optional["VppTag"]:
        """Look up a tag by its wire value, returning None when unknown."""
        try:
            return cls(token)
        except ValueError:
            return None


# Tags an escape header may point back to
ECHOABLE_TAGS: FrozenSet[VppTag] = frozenset({VppTag.G, VppTag.Q, VppTag.O, VppTag.C})


class VppCorrectness(str, Enum):
    NEUTRAL = "neutral"
    CORRECT = "correct"
    INCORRECT = "incorrect"


class VppSeverity(str, Enum):
    NONE = "none"
    MINOR = "minor"
    MAJOR = "major"


class VppSourceKind(str, Enum):
    """Category of an attached reference."""

    FILE = "file"
    WEB = "web"
    REPO = "repo"
    SSH = "ssh"


class VppSources(str, Enum):
    """Summary token written into the footer's Sources field."""

    NONE = "none"
    WEB = "web"
    MIXED = "mixed"

    @classmethod
    def summary(cls, refs: Iterable) -> "VppSources":
        """Summarize a list of source references by kind.

        Args:
            refs: Objects with a ``kind`` attribute (usually VppSourceRef)

        Returns:
            NONE for an empty list, WEB if every ref is a web ref, MIXED otherwise
        """
        kinds = {VppSourceKind(ref.kind) for ref in refs}
        if not kinds:
            return cls.NONE
        return cls.WEB if kinds == {VppSourceKind.WEB} else cls.MIXED


@dataclass(frozen=True)
class VppModifiers:
    """Per-message header modifiers.

    Attributes:
        correctness: Whether the user asserts the prior reply was correct
        severity: How serious the correction is
        echo_target: Tag an escape (``e``) header points back to
    """

    correctness: VppCorrectness = VppCorrectness.NEUTRAL
    severity: VppSeverity = VppSeverity.NONE
    echo_target: Optional[VppTag] = None


class AssumptionsMode(str, Enum):
    NONE = "none"
    ZERO = "zero"
    CUSTOM = "custom"


@dataclass(frozen=True)
class AssumptionsConfig:
    """Per-message assumptions selection from the composer.

    ``none`` adds nothing to the header, ``zero`` declares no assumptions and
    ``custom`` declares one per non-blank item (at least one).
    """

    mode: AssumptionsMode = AssumptionsMode.NONE
    items: Tuple[str, ...] = ()

    @classmethod
    def zero(cls) -> "AssumptionsConfig":
        return cls(mode=AssumptionsMode.ZERO)

    @classmethod
    def custom(cls, items: Iterable[str]) -> "AssumptionsConfig":
        return cls(mode=AssumptionsMode.CUSTOM, items=tuple(items))

    @property
    def count(self) -> int:
        if self.mode != AssumptionsMode.CUSTOM:
            return 0
        return max(1, sum(1 for item in self.items if item.strip()))

    @property
    def header_flag(self) -> Optional[str]:
        if self.mode == AssumptionsMode.NONE:
            return None
        return f"--assumptions={self.count}"


class VppState(BaseModel):
    """Mutable protocol state for one conversation.

    ``cycle_index`` is clamped to >= 1 and ``assumptions`` to >= 0 on
    construction and on every assignment. ``locus`` is normalized to a value
    that survives a footer round trip.
    """

    model_config = ConfigDict(validate_assignment=True)

    current_tag: VppTag = Field(default=VppTag.G, description="Active phase")
    cycle_index: int = Field(default=1, description="Position within the nominal 3-step cycle")
    assumptions: int = Field(default=0, description="Declared assumptions for the current turn")
    locus: Optional[str] = Field(default=DEFAULT_LOCUS, description="Topical thread label")

    @field_validator("cycle_index")
    @classmethod
    def clamp_cycle_index(cls, v: int) -> int:
        return max(1, v)

    @field_validator("assumptions")
    @classmethod
    def clamp_assumptions(cls, v: int) -> int:
        return max(0, v)

    @field_validator("locus")
    @classmethod
    def normalize_locus(cls, v: Optional[str]) -> Optional[str]:
        """Keep the locus representable in a footer ``Locus=`` field.

        Line breaks become spaces, ``|`` (the field separator) becomes ``/``,
        surrounding whitespace is trimmed and an empty or ``nil`` value means
        no locus.
        """
        if v is None:
            return None
        v = " ".join(v.splitlines()).replace("|", "/").strip()
        if not v or v.lower() == "nil":
            return None
        return v

    @classmethod
    def default(cls) -> "VppState":
        return cls()


class VppFooter(BaseModel):
    """Structured view of a footer line."""

    version: Optional[str] = None
    tag: VppTag
    cycle_index: int = 1
    sources: Optional[str] = None
    assumptions: Optional[int] = None
    locus: Optional[str] = None
