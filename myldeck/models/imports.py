"""
Deck import models.

This module defines the trust boundary between raw deck-list text and
resolved card printings.

INVARIANTS:
- ParsedDeckLine is UNTRUSTED: the name has not been matched to the catalog
- ImportResolvedCard carries a concrete printing id
- ImportAmbiguousLine needs a user choice before it can become a card
- The import result is a tagged variant: RESOLVED or AMBIGUOUS
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Literal

from myldeck.models.card import CardPrintingRef, LegalStatus


class ImportFormat(str, Enum):
    """Supported import payload formats."""

    TXT = "txt"
    CSV = "csv"


@dataclass(frozen=True, slots=True)
class ParsedDeckLine:
    """
    One deck-list line, parsed but not resolved.

    Attributes:
        line_number: 1-based physical line number in the payload
        original_line: Raw text of the line (trimmed)
        qty: Parsed quantity (positive)
        card_name: Card name as written
        edition_hint: Edition name or code as written, if any
        is_starting_gold: True if the line carried the starting gold marker
    """

    line_number: int
    original_line: str
    qty: int
    card_name: str
    edition_hint: str | None = None
    is_starting_gold: bool = False


@dataclass(frozen=True, slots=True)
class ParseLineError:
    """A line that could not be used, with the reason."""

    line_number: int
    error: str


@dataclass(frozen=True)
class ParseResult:
    """Parser output: usable lines and per-line errors, in payload order."""

    lines: tuple[ParsedDeckLine, ...] = field(default_factory=tuple)
    errors: tuple[ParseLineError, ...] = field(default_factory=tuple)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0


@dataclass(frozen=True, slots=True)
class ImportCardOption:
    """A candidate printing offered to the user for an ambiguous line."""

    card_printing_id: str
    card_name: str
    edition_name: str
    edition_code: str | None
    rarity: str | None
    legal_status: LegalStatus
    image_url: str | None = None

    @classmethod
    def from_printing(cls, printing: CardPrintingRef) -> "ImportCardOption":
        return cls(
            card_printing_id=printing.printing_id,
            card_name=printing.card_name,
            edition_name=printing.edition_name,
            edition_code=printing.edition_code,
            rarity=printing.rarity,
            legal_status=printing.legal_status,
            image_url=printing.image_url,
        )


@dataclass(frozen=True, slots=True)
class ImportResolvedCard:
    """A line resolved to exactly one printing."""

    card_printing_id: str
    qty: int
    is_starting_gold: bool
    line_number: int


class AmbiguityReason(str, Enum):
    """Why a line could not be resolved automatically."""

    MULTIPLE_MATCHES = "MULTIPLE_MATCHES"
    NOT_FOUND = "NOT_FOUND"


@dataclass(frozen=True)
class ImportAmbiguousLine:
    """
    A line the user must disambiguate.

    options is empty only when reason is NOT_FOUND.
    """

    line_number: int
    original_line: str
    qty: int
    card_name: str
    edition_hint: str | None
    is_starting_gold: bool
    reason: AmbiguityReason
    options: tuple[ImportCardOption, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class ImportSelection:
    """User choice for one ambiguous line."""

    line_number: int
    card_printing_id: str


@dataclass(frozen=True)
class ResolvedImport:
    """Every line resolved to a single printing."""

    status: ClassVar[Literal["RESOLVED"]] = "RESOLVED"

    resolved_cards: tuple[ImportResolvedCard, ...] = field(default_factory=tuple)
    errors: tuple[ParseLineError, ...] = field(default_factory=tuple)

    @property
    def imported_count(self) -> int:
        return len(self.resolved_cards)


@dataclass(frozen=True)
class AmbiguousImport:
    """At least one line needs a user choice. Resolved lines are kept."""

    status: ClassVar[Literal["AMBIGUOUS"]] = "AMBIGUOUS"

    resolved_cards: tuple[ImportResolvedCard, ...] = field(default_factory=tuple)
    ambiguous_lines: tuple[ImportAmbiguousLine, ...] = field(default_factory=tuple)
    errors: tuple[ParseLineError, ...] = field(default_factory=tuple)


ImportResult = ResolvedImport | AmbiguousImport
