"""
Import Resolution Service.

Turns parsed deck-list lines into resolved printings, using a
CardResolutionIndex as the only source of catalog data.

INVARIANTS:
1. Every input line ends up in exactly one of: resolved_cards,
   ambiguous_lines, errors. No line is dropped.
2. Ambiguity is data, not an exception: the result is AMBIGUOUS as soon as
   one line needs a user choice, and resolved lines are kept.
3. Option order within an ambiguous line follows the index (stable).
"""

import logging
from collections.abc import Iterable, Sequence
from enum import Enum

from myldeck.models.failure import ImportSelectionError
from myldeck.models.imports import (
    AmbiguityReason,
    AmbiguousImport,
    ImportAmbiguousLine,
    ImportCardOption,
    ImportResolvedCard,
    ImportResult,
    ImportSelection,
    ParsedDeckLine,
    ParseLineError,
    ResolvedImport,
)
from myldeck.services.card_index import CardResolutionIndex

logger = logging.getLogger(__name__)


class UnresolvedPolicy(str, Enum):
    """What to do with a line whose name matches no printing."""

    # Surface as an ambiguous line with no options (user picks a card)
    AMBIGUOUS = "ambiguous"
    # Surface as a per-line error
    ERROR = "error"


def _not_found_message(line: ParsedDeckLine) -> str:
    message = f'No card found named "{line.card_name}"'
    if line.edition_hint:
        message += f' in edition "{line.edition_hint}"'
    return message


def resolve_import(
    lines: Iterable[ParsedDeckLine],
    index: CardResolutionIndex,
    unresolved_policy: UnresolvedPolicy = UnresolvedPolicy.AMBIGUOUS,
) -> ImportResult:
    """
    Resolve parsed lines against the catalog index.

    Args:
        lines: Parser output, in payload order
        index: Resolution index built from the catalog
        unresolved_policy: How to surface lines with zero matches

    Returns:
        ResolvedImport when every line matched exactly one printing (or
        failed as an error), otherwise AmbiguousImport.
    """
    resolved: list[ImportResolvedCard] = []
    ambiguous: list[ImportAmbiguousLine] = []
    errors: list[ParseLineError] = []

    for line in lines:
        matches = index.resolve(line.card_name, line.edition_hint)

        if len(matches) == 1:
            resolved.append(
                ImportResolvedCard(
                    card_printing_id=matches[0].printing_id,
                    qty=line.qty,
                    is_starting_gold=line.is_starting_gold,
                    line_number=line.line_number,
                )
            )
            continue

        if not matches and unresolved_policy == UnresolvedPolicy.ERROR:
            errors.append(ParseLineError(line_number=line.line_number, error=_not_found_message(line)))
            continue

        ambiguous.append(
            ImportAmbiguousLine(
                line_number=line.line_number,
                original_line=line.original_line,
                qty=line.qty,
                card_name=line.card_name,
                edition_hint=line.edition_hint,
                is_starting_gold=line.is_starting_gold,
                reason=AmbiguityReason.MULTIPLE_MATCHES if matches else AmbiguityReason.NOT_FOUND,
                options=tuple(ImportCardOption.from_printing(p) for p in matches),
            )
        )

    logger.info(
        "Import resolution: %d resolved, %d ambiguous, %d unresolved",
        len(resolved),
        len(ambiguous),
        len(errors),
    )

    if ambiguous:
        return AmbiguousImport(
            resolved_cards=tuple(resolved),
            ambiguous_lines=tuple(ambiguous),
            errors=tuple(errors),
        )
    return ResolvedImport(resolved_cards=tuple(resolved), errors=tuple(errors))


def merge_selections(
    resolved_cards: Sequence[ImportResolvedCard],
    ambiguous_lines: Sequence[ImportAmbiguousLine],
    selections: Sequence[ImportSelection],
    index: CardResolutionIndex,
) -> list[ImportResolvedCard]:
    """
    Finalize an ambiguous import with the user's selections.

    Quantity and starting gold flag come from the ambiguous line, not from
    the selection. A NOT_FOUND line may be resolved to any printing known
    to the index; other lines only to one of their offered options.

    Args:
        resolved_cards: Lines already resolved by the first pass
        ambiguous_lines: Lines that needed a choice
        selections: One selection per ambiguous line
        index: Resolution index used to check the selected printings

    Returns:
        Flat list of resolved cards, ordered by line number

    Raises:
        ImportSelectionError: On a selection for an unknown line, a duplicate
            or missing selection, or a printing that was not offered
    """
    lines_by_number = {line.line_number: line for line in ambiguous_lines}
    chosen: dict[int, str] = {}

    for selection in selections:
        line = lines_by_number.get(selection.line_number)
        if line is None:
            raise ImportSelectionError(selection.line_number, "no ambiguous line with this number")
        if selection.line_number in chosen:
            raise ImportSelectionError(selection.line_number, "more than one selection")

        if line.reason == AmbiguityReason.NOT_FOUND:
            if selection.card_printing_id not in index:
                raise ImportSelectionError(selection.line_number, "selected printing does not exist")
        else:
            offered = {option.card_printing_id for option in line.options}
            if selection.card_printing_id not in offered:
                raise ImportSelectionError(
                    selection.line_number, "selected printing was not one of the options"
                )

        chosen[selection.line_number] = selection.card_printing_id

    for line_number in sorted(lines_by_number):
        if line_number not in chosen:
            raise ImportSelectionError(line_number, "missing selection")

    merged = list(resolved_cards)
    for line_number, printing_id in chosen.items():
        line = lines_by_number[line_number]
        merged.append(
            ImportResolvedCard(
                card_printing_id=printing_id,
                qty=line.qty,
                is_starting_gold=line.is_starting_gold,
                line_number=line_number,
            )
        )

    return sorted(merged, key=lambda card: card.line_number)
