"""
Card printing models.

A printing is one physical edition/rarity instance of a card. The catalog
owns printings; this package only reads them for the duration of a
resolution or validation pass.

INVARIANTS:
- CardPrintingRef is immutable after construction
- card_id is the identity used for copy limits (shared across printings)
- printing_id is the identity used for import resolution and legal status
"""

from dataclasses import dataclass
from enum import Enum


class LegalStatus(str, Enum):
    """Catalog legal status of a printing."""

    STANDARD = "STANDARD"
    DISCONTINUED = "DISCONTINUED"


@dataclass(frozen=True, slots=True)
class CardPrintingRef:
    """
    One printing of a card, enriched with the card data validation needs.

    Attributes:
        printing_id: Catalog id of this printing
        card_id: Catalog id of the parent card (stable across printings)
        card_name: Display name of the card
        edition_id: Catalog id of the edition this printing belongs to
        edition_name: Display name of the edition (e.g., "Mundo Gótico")
        card_type: Card type name (e.g., "Aliado", "Oro")
        cost: Casting cost, None for cards without cost (e.g., gold)
        race: Race name for cards that carry one
        rarity: Rarity tier name
        legal_status: STANDARD or DISCONTINUED
        collector_number: Collector number within the edition
        edition_code: Short edition code, usable as an import hint
        edition_release_order: Sort key for editions, lower is older
        image_url: Printing image, surfaced in import disambiguation
        block_id: Catalog id of the block the edition belongs to
        is_unique: At most one copy of the card may be played
        has_ability: The card has a printed ability (disqualifies gold)
        can_be_starting_gold: This printing may be picked as starting gold
    """

    printing_id: str
    card_id: str
    card_name: str
    edition_id: str
    edition_name: str
    card_type: str
    cost: int | None = None
    race: str | None = None
    rarity: str | None = None
    legal_status: LegalStatus = LegalStatus.STANDARD
    collector_number: str | None = None
    edition_code: str | None = None
    edition_release_order: int = 0
    image_url: str | None = None
    block_id: str | None = None
    is_unique: bool = False
    has_ability: bool = False
    can_be_starting_gold: bool = True

    @property
    def is_discontinued(self) -> bool:
        return self.legal_status == LegalStatus.DISCONTINUED
