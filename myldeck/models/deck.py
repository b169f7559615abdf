from dataclasses import dataclass, field
from datetime import datetime, timezone

from myldeck.models.card import CardPrintingRef


@dataclass(frozen=True, slots=True)
class DeckEntry:
    """
    One line item of a candidate deck.

    Entries are not merged by printing: two entries for the same printing
    (or for two printings of the same card) add up.

    Attributes:
        printing: The resolved printing
        quantity: Number of copies (positive)
        is_starting_gold: True for the implicit starting gold card
        is_key_card: Cosmetic highlight, ignored by validation
    """

    printing: CardPrintingRef
    quantity: int
    is_starting_gold: bool = False
    is_key_card: bool = False

    @property
    def card_id(self) -> str:
        return self.printing.card_id

    @property
    def card_name(self) -> str:
        return self.printing.card_name


@dataclass(frozen=True)
class DeckSnapshot:
    """A deck as it is rendered for export."""

    deck_name: str
    format_name: str
    entries: tuple[DeckEntry, ...] = field(default_factory=tuple)
    exported_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def total_cards(self) -> int:
        """Total copies in the deck, starting gold included."""
        return sum(entry.quantity for entry in self.entries)
