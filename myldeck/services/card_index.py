"""
Card Resolution Index.

Resolves a (card name, optional edition hint) pair to the catalog printings
it can refer to. This is the lookup half of the import trust boundary.

INVARIANTS:
1. normalize_card_name is the ONLY name normalization; catalog ingestion
   and parser output both go through it
2. The index is read-only after construction (safe to share across calls
   for a stable catalog snapshot)
3. Candidate order is stable: edition release order, then edition name,
   collector number and printing id
4. The edition hint is advisory: it narrows, it never empties a result
"""

import logging
import unicodedata
from collections.abc import Iterable
from types import MappingProxyType

from myldeck.models.card import CardPrintingRef

logger = logging.getLogger(__name__)


def normalize_card_name(text: str) -> str:
    """
    Canonical form of a card or edition name for matching.

    Strips diacritics (NFKD + drop combining marks), folds case and
    collapses whitespace: "  Oro  BÁSICO " -> "oro basico".
    """
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.casefold().split())


def _candidate_sort_key(printing: CardPrintingRef) -> tuple[int, str, str, str]:
    return (
        printing.edition_release_order,
        normalize_card_name(printing.edition_name),
        printing.collector_number or "",
        printing.printing_id,
    )


def _matches_edition(printing: CardPrintingRef, normalized_hint: str) -> bool:
    labels = [printing.edition_name]
    if printing.edition_code:
        labels.append(printing.edition_code)
    return any(normalize_card_name(label) == normalized_hint for label in labels)


class CardResolutionIndex:
    """
    Lookup of catalog printings by normalized card name.

    Built once from a pool of printings. Duplicate printing ids keep the
    first occurrence.
    """

    def __init__(self, printings: Iterable[CardPrintingRef]) -> None:
        by_id: dict[str, CardPrintingRef] = {}
        by_name: dict[str, list[CardPrintingRef]] = {}

        for printing in printings:
            if printing.printing_id in by_id:
                continue
            by_id[printing.printing_id] = printing
            by_name.setdefault(normalize_card_name(printing.card_name), []).append(printing)

        self._by_id = MappingProxyType(by_id)
        self._by_name = MappingProxyType(
            {
                name: tuple(sorted(candidates, key=_candidate_sort_key))
                for name, candidates in by_name.items()
            }
        )
        logger.debug(
            "Built resolution index: %d printings, %d card names",
            len(self._by_id),
            len(self._by_name),
        )

    def __len__(self) -> int:
        """Number of printings in the index."""
        return len(self._by_id)

    def __contains__(self, printing_id: object) -> bool:
        return printing_id in self._by_id

    def get(self, printing_id: str) -> CardPrintingRef | None:
        """Look up a printing by id."""
        return self._by_id.get(printing_id)

    def candidates(self, name: str) -> list[CardPrintingRef]:
        """All printings whose card name matches, in stable order."""
        return list(self._by_name.get(normalize_card_name(name), ()))

    def resolve(self, name: str, edition_hint: str | None = None) -> list[CardPrintingRef]:
        """
        Resolve a card name to matching printings.

        Args:
            name: Card name as written in the deck list
            edition_hint: Edition name or code, if the line carried one

        Returns:
            Matching printings. Empty when the name is unknown, more than
            one when the name is ambiguous. When the hint matches at least
            one candidate's edition, only those candidates are returned;
            otherwise the hint is ignored.
        """
        candidates = self.candidates(name)

        if not edition_hint or len(candidates) <= 1:
            return candidates

        normalized_hint = normalize_card_name(edition_hint)
        narrowed = [p for p in candidates if _matches_edition(p, normalized_hint)]

        if not narrowed:
            logger.debug("Edition hint %r matched no printing of %r", edition_hint, name)
            return candidates

        return narrowed
