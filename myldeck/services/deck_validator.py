"""
Deck Validation Engine.

Pure, deterministic rules evaluation: a FormatRuleSet and a list of deck
entries in, a ValidationResult out. No I/O, no shared state, no clock.

=============================================================================
EVALUATION ORDER
=============================================================================

Message order is the rule order below; within a rule, messages are ordered
by the rule's natural key (card name, card type...). Tests rely on this.

1. Aggregate quantities per card id (not per printing)
2. Deck size (starting gold excluded)
3. Starting gold (count, type, ability, printing eligibility)
4. Per-card copy limits, bans and unique cards (starting gold included)
5. Legal status of printings
6. Type quotas
7. Format allowances (blocks, editions, races)
8. Stats (never affect validity)

A result is valid iff it carries no BLOCK message.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from myldeck.models.deck import DeckEntry
from myldeck.models.format_rules import FormatRuleSet
from myldeck.models.validation import (
    Severity,
    ValidationCode,
    ValidationMessage,
    ValidationResult,
)
from myldeck.services.card_index import normalize_card_name
from myldeck.services.deck_stats import GOLD_CARD_TYPE, compute_stats

logger = logging.getLogger(__name__)


@dataclass
class CardTally:
    """Copies of one card across all of its printings."""

    card_id: str
    card_name: str
    card_type: str
    race: str | None
    is_unique: bool = False
    total: int = 0
    non_gold: int = 0


def _name_key(name: str, tiebreak: str = "") -> tuple[str, str, str]:
    return (normalize_card_name(name), name, tiebreak)


def aggregate_by_card(entries: Iterable[DeckEntry]) -> dict[str, CardTally]:
    """Sum quantities per card id. Card data comes from the first entry seen."""
    tallies: dict[str, CardTally] = {}

    for entry in entries:
        tally = tallies.get(entry.card_id)
        if tally is None:
            tally = CardTally(
                card_id=entry.card_id,
                card_name=entry.card_name,
                card_type=entry.printing.card_type,
                race=entry.printing.race,
                is_unique=entry.printing.is_unique,
            )
            tallies[entry.card_id] = tally

        tally.total += entry.quantity
        if not entry.is_starting_gold:
            tally.non_gold += entry.quantity

    return tallies


def check_deck_size(rules: FormatRuleSet, non_gold_total: int) -> list[ValidationMessage]:
    """Exactly rules.deck_size non-gold cards."""
    expected = rules.deck_size
    context = {"expected": expected, "found": non_gold_total, "delta": non_gold_total - expected}

    if non_gold_total < expected:
        deficit = expected - non_gold_total
        return [
            ValidationMessage(
                severity=Severity.BLOCK,
                code=ValidationCode.DECK_TOO_FEW_CARDS,
                message=f"Deck must have exactly {expected} cards: {deficit} missing.",
                hint=f"Add {deficit} more card(s).",
                context=context,
            )
        ]

    if non_gold_total > expected:
        excess = non_gold_total - expected
        return [
            ValidationMessage(
                severity=Severity.BLOCK,
                code=ValidationCode.DECK_TOO_MANY_CARDS,
                message=f"Deck must have exactly {expected} cards: {excess} too many.",
                hint=f"Remove {excess} card(s).",
                context=context,
            )
        ]

    return []


def check_starting_gold(
    rules: FormatRuleSet, entries: Sequence[DeckEntry]
) -> list[ValidationMessage]:
    """
    Exactly one flagged entry with quantity 1.

    Each flagged printing must also be eligible: of the configured type,
    without an ability, and allowed as starting gold by the catalog.
    """
    gold_entries = [entry for entry in entries if entry.is_starting_gold]
    gold_qty = sum(entry.quantity for entry in gold_entries)
    messages: list[ValidationMessage] = []

    if rules.starting_gold_required:
        if not gold_entries:
            messages.append(
                ValidationMessage(
                    severity=Severity.BLOCK,
                    code=ValidationCode.STARTING_GOLD_MISSING,
                    message="Deck must have exactly 1 starting gold card.",
                    hint="Mark one gold card as starting gold.",
                    context={"expected": 1, "found": 0},
                )
            )
        elif len(gold_entries) > 1 or gold_qty != 1:
            messages.append(
                ValidationMessage(
                    severity=Severity.BLOCK,
                    code=ValidationCode.STARTING_GOLD_MULTIPLE,
                    message=f"Only 1 starting gold card is allowed, found {gold_qty}.",
                    hint="Unmark the extra starting gold cards.",
                    context={"expected": 1, "found": gold_qty},
                )
            )

    flagged: dict[str, DeckEntry] = {}
    for entry in gold_entries:
        flagged.setdefault(entry.printing.printing_id, entry)

    for entry in sorted(
        flagged.values(), key=lambda e: _name_key(e.card_name, e.printing.printing_id)
    ):
        printing = entry.printing
        identity = {
            "card_id": printing.card_id,
            "card_name": printing.card_name,
            "card_printing_id": printing.printing_id,
        }

        if rules.starting_gold_type is not None and printing.card_type != rules.starting_gold_type:
            messages.append(
                ValidationMessage(
                    severity=Severity.BLOCK,
                    code=ValidationCode.STARTING_GOLD_WRONG_TYPE,
                    message=(
                        f'"{printing.card_name}" is not of type {rules.starting_gold_type} '
                        "and cannot be the starting gold."
                    ),
                    hint=f"Pick a {rules.starting_gold_type} card as starting gold.",
                    context={
                        **identity,
                        "card_type": printing.card_type,
                        "expected_type": rules.starting_gold_type,
                    },
                )
            )

        if printing.has_ability:
            messages.append(
                ValidationMessage(
                    severity=Severity.BLOCK,
                    code=ValidationCode.STARTING_GOLD_MUST_HAVE_NO_ABILITY,
                    message=(
                        f'"{printing.card_name}" has an ability and cannot be the starting gold.'
                    ),
                    hint="Pick a gold card without an ability.",
                    context={**identity, "has_ability": True},
                )
            )

        if not printing.can_be_starting_gold:
            messages.append(
                ValidationMessage(
                    severity=Severity.BLOCK,
                    code=ValidationCode.STARTING_GOLD_NOT_ALLOWED_FOR_PRINTING,
                    message=(
                        f'"{printing.card_name}" [{printing.edition_name}] '
                        "cannot be picked as starting gold."
                    ),
                    hint="Pick another gold printing.",
                    context={**identity, "can_be_starting_gold": False},
                )
            )

    return messages


def check_copy_limits(
    rules: FormatRuleSet, tallies: dict[str, CardTally]
) -> list[ValidationMessage]:
    """
    Bans (limit 0), copy limits and unique cards, per card id.

    Starting gold included. A unique card is reported on top of the copy
    limit, but a banned card only as banned.
    """
    messages: list[ValidationMessage] = []

    for tally in sorted(tallies.values(), key=lambda t: _name_key(t.card_name, t.card_id)):
        limit = rules.limit_for(tally.card_id)
        context = {
            "card_id": tally.card_id,
            "card_name": tally.card_name,
            "held": tally.total,
            "limit": limit,
        }

        if limit == 0:
            messages.append(
                ValidationMessage(
                    severity=Severity.BLOCK,
                    code=ValidationCode.CARD_BANNED,
                    message=f'"{tally.card_name}" is banned in this format.',
                    hint="Remove this card.",
                    context=context,
                )
            )
        elif tally.total > limit:
            messages.append(
                ValidationMessage(
                    severity=Severity.BLOCK,
                    code=ValidationCode.CARD_LIMIT_EXCEEDED,
                    message=(
                        f'"{tally.card_name}" exceeds the copy limit: '
                        f"{tally.total} held, limit {limit}."
                    ),
                    hint=f"Reduce to {limit} copy(ies).",
                    context=context,
                )
            )

        if limit != 0 and tally.is_unique and tally.total > 1:
            messages.append(
                ValidationMessage(
                    severity=Severity.BLOCK,
                    code=ValidationCode.UNIQUE_CARD_MAX_1,
                    message=f'"{tally.card_name}" is unique and may be included only once.',
                    hint="Reduce to 1 copy.",
                    context={**context, "limit": 1},
                )
            )

    return messages


def _distinct_printings(entries: Iterable[DeckEntry]) -> list[DeckEntry]:
    """First entry per printing id, ordered by card name, edition, printing id."""
    firsts: dict[str, DeckEntry] = {}
    for entry in entries:
        firsts.setdefault(entry.printing.printing_id, entry)
    return sorted(
        firsts.values(),
        key=lambda e: (
            _name_key(e.card_name),
            normalize_card_name(e.printing.edition_name),
            e.printing.printing_id,
        ),
    )


def check_legal_status(
    rules: FormatRuleSet, entries: Sequence[DeckEntry]
) -> list[ValidationMessage]:
    """One message per discontinued printing, severity from the format."""
    messages: list[ValidationMessage] = []

    for entry in _distinct_printings(entries):
        printing = entry.printing
        if not printing.is_discontinued:
            continue
        messages.append(
            ValidationMessage(
                severity=rules.discontinued_severity,
                code=ValidationCode.PRINTING_DISCONTINUED,
                message=(
                    f'"{printing.card_name}" [{printing.edition_name}] '
                    "is discontinued for this format."
                ),
                hint="Consider replacing it with another printing or card.",
                context={
                    "card_id": printing.card_id,
                    "card_name": printing.card_name,
                    "card_printing_id": printing.printing_id,
                    "edition_name": printing.edition_name,
                    "legal_status": printing.legal_status.value,
                },
            )
        )

    return messages


def check_type_quotas(
    rules: FormatRuleSet, tallies: dict[str, CardTally]
) -> list[ValidationMessage]:
    """Min/max non-gold copies per card type, ordered by card type."""
    if not rules.type_quotas:
        return []

    counts: dict[str, int] = {}
    for tally in tallies.values():
        counts[tally.card_type] = counts.get(tally.card_type, 0) + tally.non_gold

    messages: list[ValidationMessage] = []
    for quota in sorted(rules.type_quotas, key=lambda q: _name_key(q.card_type)):
        found = counts.get(quota.card_type, 0)
        context = {
            "card_type": quota.card_type,
            "found": found,
            "minimum": quota.minimum,
            "maximum": quota.maximum,
        }

        if quota.minimum is not None and found < quota.minimum:
            messages.append(
                ValidationMessage(
                    severity=quota.severity,
                    code=ValidationCode.TYPE_QUOTA_BELOW_MINIMUM,
                    message=(
                        f"Deck needs at least {quota.minimum} {quota.card_type} card(s), "
                        f"found {found}."
                    ),
                    hint=f"Add {quota.minimum - found} {quota.card_type} card(s).",
                    context=context,
                )
            )
        elif quota.maximum is not None and found > quota.maximum:
            messages.append(
                ValidationMessage(
                    severity=quota.severity,
                    code=ValidationCode.TYPE_QUOTA_ABOVE_MAXIMUM,
                    message=(
                        f"Deck allows at most {quota.maximum} {quota.card_type} card(s), "
                        f"found {found}."
                    ),
                    hint=f"Remove {found - quota.maximum} {quota.card_type} card(s).",
                    context=context,
                )
            )

    return messages


def check_allowances(
    rules: FormatRuleSet,
    entries: Sequence[DeckEntry],
    tallies: dict[str, CardTally],
) -> list[ValidationMessage]:
    """
    Blocks, editions and races outside the format's allowed sets.

    A printing without a block cannot be shown to belong to an allowed one
    and is rejected. A card without a race passes the race allowance.
    """
    messages: list[ValidationMessage] = []

    if rules.allowed_block_ids:
        for entry in _distinct_printings(entries):
            printing = entry.printing
            if printing.block_id in rules.allowed_block_ids:
                continue
            messages.append(
                ValidationMessage(
                    severity=Severity.BLOCK,
                    code=ValidationCode.FORMAT_ALLOWED_BLOCK,
                    message=(
                        f'"{printing.card_name}" [{printing.edition_name}] belongs to a '
                        "block not allowed in this format."
                    ),
                    hint="Remove this card or change format.",
                    context={
                        "card_name": printing.card_name,
                        "card_printing_id": printing.printing_id,
                        "block_id": printing.block_id,
                    },
                )
            )

    if rules.allowed_edition_ids:
        for entry in _distinct_printings(entries):
            printing = entry.printing
            if printing.edition_id in rules.allowed_edition_ids:
                continue
            messages.append(
                ValidationMessage(
                    severity=Severity.BLOCK,
                    code=ValidationCode.EDITION_NOT_ALLOWED,
                    message=(
                        f'"{printing.card_name}" [{printing.edition_name}] belongs to an '
                        "edition not allowed in this format."
                    ),
                    hint="Remove this card or pick a printing from an allowed edition.",
                    context={
                        "card_name": printing.card_name,
                        "card_printing_id": printing.printing_id,
                        "edition_id": printing.edition_id,
                    },
                )
            )

    if rules.allowed_races:
        for tally in sorted(tallies.values(), key=lambda t: _name_key(t.card_name, t.card_id)):
            if tally.race is None or tally.race in rules.allowed_races:
                continue
            messages.append(
                ValidationMessage(
                    severity=Severity.BLOCK,
                    code=ValidationCode.RACE_NOT_ALLOWED,
                    message=f'The race of "{tally.card_name}" ({tally.race}) is not allowed.',
                    hint="Remove this card or change format.",
                    context={
                        "card_id": tally.card_id,
                        "card_name": tally.card_name,
                        "race": tally.race,
                    },
                )
            )

    return messages


def validate_deck(rules: FormatRuleSet, entries: Sequence[DeckEntry]) -> ValidationResult:
    """
    Validate a deck against a format.

    Never raises for well-formed input. An empty deck yields a full result
    (failing deck size, empty stats), not a special case.

    Args:
        rules: Constraints of the target format
        entries: Deck entries with positive quantities

    Returns:
        ValidationResult with ordered messages and computed stats
    """
    entries = list(entries)
    tallies = aggregate_by_card(entries)
    non_gold_total = sum(tally.non_gold for tally in tallies.values())

    messages: list[ValidationMessage] = []
    messages.extend(check_deck_size(rules, non_gold_total))
    messages.extend(check_starting_gold(rules, entries))
    messages.extend(check_copy_limits(rules, tallies))
    messages.extend(check_legal_status(rules, entries))
    messages.extend(check_type_quotas(rules, tallies))
    messages.extend(check_allowances(rules, entries, tallies))

    is_valid = not any(m.severity == Severity.BLOCK for m in messages)

    logger.debug(
        "Validated deck for format %s: valid=%s, %d message(s)",
        rules.format_id,
        is_valid,
        len(messages),
    )

    return ValidationResult(
        is_valid=is_valid,
        messages=tuple(messages),
        computed_stats=compute_stats(entries, rules.starting_gold_type or GOLD_CARD_TYPE),
    )
