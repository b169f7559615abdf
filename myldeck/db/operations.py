"""
Database operations for the catalog, formats and deck versions.

This is the system boundary: rows are converted into the typed, immutable
core models (CardPrintingRef, FormatRuleSet, DeckEntry) here, and nowhere
else. Format params stored as JSON are validated with pydantic before a
FormatRuleSet is built.
"""

import logging
from collections.abc import Iterable, Sequence

from pydantic import BaseModel, Field, ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from myldeck.config import settings
from myldeck.models.card import CardPrintingRef, LegalStatus
from myldeck.models.db import (
    CardDB,
    CardPrintingDB,
    DeckVersionCardDB,
    DeckVersionDB,
    EditionDB,
    FormatCardLimitDB,
    FormatDB,
    FormatTypeQuotaDB,
)
from myldeck.models.deck import DeckEntry
from myldeck.models.failure import FailureKind, KnownError
from myldeck.models.format_rules import FormatRuleSet, TypeQuota
from myldeck.models.validation import Severity, ValidationResult
from myldeck.services.card_index import CardResolutionIndex, normalize_card_name

logger = logging.getLogger(__name__)


class FormatParams(BaseModel):
    """Schema of FormatDB.params. Missing values fall back to settings."""

    deck_size: int = Field(default_factory=lambda: settings.default_deck_size)
    default_card_limit: int = Field(default_factory=lambda: settings.default_card_limit)
    starting_gold_required: bool = Field(
        default_factory=lambda: settings.default_starting_gold_required
    )
    discontinued_severity: Severity = Severity.WARN
    starting_gold_type: str | None = None
    allowed_block_ids: list[str] = Field(default_factory=list)
    allowed_edition_ids: list[str] = Field(default_factory=list)
    allowed_races: list[str] = Field(default_factory=list)


# --- Catalog Operations ---


def _printing_query():  # type: ignore[no-untyped-def]
    return select(CardPrintingDB).options(
        selectinload(CardPrintingDB.card),
        selectinload(CardPrintingDB.edition),
    )


def printing_to_model(row: CardPrintingDB) -> CardPrintingRef:
    """Convert a database printing (with card and edition loaded) to a core model."""
    return CardPrintingRef(
        printing_id=row.printing_id,
        card_id=row.card_id,
        card_name=row.card.name,
        edition_id=row.edition_id,
        edition_name=row.edition.name,
        card_type=row.card.card_type,
        cost=row.card.cost,
        race=row.card.race,
        rarity=row.rarity,
        legal_status=LegalStatus(row.legal_status),
        collector_number=row.collector_number,
        edition_code=row.edition.code,
        edition_release_order=row.edition.release_order,
        image_url=row.image_url,
        block_id=row.edition.block_id,
        is_unique=row.card.is_unique,
        has_ability=row.card.has_ability,
        can_be_starting_gold=row.can_be_starting_gold,
    )


async def get_printings_by_ids(
    session: AsyncSession, printing_ids: Iterable[str]
) -> dict[str, CardPrintingRef]:
    """Load printings by id. Unknown ids are simply absent from the result."""
    ids = set(printing_ids)
    if not ids:
        return {}

    result = await session.execute(_printing_query().where(CardPrintingDB.printing_id.in_(ids)))
    return {row.printing_id: printing_to_model(row) for row in result.scalars()}


async def get_printings_by_names(
    session: AsyncSession, card_names: Iterable[str]
) -> list[CardPrintingRef]:
    """Load every printing of the named cards, matched by normalized name."""
    normalized = {normalize_card_name(name) for name in card_names}
    if not normalized:
        return []

    result = await session.execute(
        _printing_query().join(CardPrintingDB.card).where(CardDB.normalized_name.in_(normalized))
    )
    return [printing_to_model(row) for row in result.scalars()]


async def build_resolution_index(
    session: AsyncSession, card_names: Iterable[str]
) -> CardResolutionIndex:
    """Build a resolution index covering the given card names."""
    printings = await get_printings_by_names(session, card_names)
    return CardResolutionIndex(printings)


async def add_catalog_printing(session: AsyncSession, printing: CardPrintingRef) -> CardPrintingDB:
    """
    Insert a printing, creating its edition and card rows if missing.

    Card and edition rows that already exist are updated from the printing.
    """
    edition = await session.get(EditionDB, printing.edition_id)
    if edition is None:
        edition = EditionDB(edition_id=printing.edition_id)
        session.add(edition)
    edition.name = printing.edition_name
    edition.code = printing.edition_code
    edition.release_order = printing.edition_release_order
    edition.block_id = printing.block_id

    card = await session.get(CardDB, printing.card_id)
    if card is None:
        card = CardDB(card_id=printing.card_id)
        session.add(card)
    card.name = printing.card_name
    card.normalized_name = normalize_card_name(printing.card_name)
    card.card_type = printing.card_type
    card.cost = printing.cost
    card.race = printing.race
    card.is_unique = printing.is_unique
    card.has_ability = printing.has_ability

    row = await session.get(CardPrintingDB, printing.printing_id)
    if row is None:
        row = CardPrintingDB(
            printing_id=printing.printing_id,
            card_id=printing.card_id,
            edition_id=printing.edition_id,
        )
        session.add(row)
    row.rarity = printing.rarity
    row.legal_status = printing.legal_status.value
    row.collector_number = printing.collector_number
    row.image_url = printing.image_url
    row.can_be_starting_gold = printing.can_be_starting_gold

    await session.flush()
    return row


# --- Format Operations ---


async def get_format(session: AsyncSession, format_id: str) -> FormatDB | None:
    """Get a format with its card limits and type quotas."""
    result = await session.execute(
        select(FormatDB)
        .where(FormatDB.format_id == format_id)
        .options(selectinload(FormatDB.card_limits), selectinload(FormatDB.type_quotas))
    )
    return result.scalar_one_or_none()


def format_to_rules(fmt: FormatDB) -> FormatRuleSet:
    """
    Convert a database format to a FormatRuleSet.

    Raises:
        KnownError: If the stored configuration is invalid
    """
    try:
        params = FormatParams.model_validate(fmt.params or {})
        return FormatRuleSet(
            format_id=fmt.format_id,
            deck_size=params.deck_size,
            default_card_limit=params.default_card_limit,
            starting_gold_required=params.starting_gold_required,
            card_limits={limit.card_id: limit.max_qty for limit in fmt.card_limits},
            discontinued_severity=params.discontinued_severity,
            type_quotas=tuple(
                TypeQuota(
                    card_type=quota.card_type,
                    minimum=quota.min_qty,
                    maximum=quota.max_qty,
                    severity=Severity(quota.severity),
                )
                for quota in sorted(fmt.type_quotas, key=lambda q: q.card_type)
            ),
            allowed_edition_ids=frozenset(params.allowed_edition_ids),
            allowed_races=frozenset(params.allowed_races),
            starting_gold_type=params.starting_gold_type,
            allowed_block_ids=frozenset(params.allowed_block_ids),
        )
    except (ValidationError, ValueError) as e:
        # FormatRulesError is a ValueError
        logger.error("Invalid configuration for format %s: %s", fmt.format_id, e)
        raise KnownError(
            kind=FailureKind.INVALID_FORMAT_RULES,
            message=f"Format '{fmt.format_id}' has an invalid configuration.",
            detail=str(e),
            suggestion="Fix the format configuration before validating decks against it.",
            status_code=500,
        ) from e


async def get_format_rules(session: AsyncSession, format_id: str) -> FormatRuleSet | None:
    """Load the rule set of a format. Returns None if the format does not exist."""
    fmt = await get_format(session, format_id)
    if fmt is None:
        return None
    return format_to_rules(fmt)


async def upsert_format(session: AsyncSession, rules: FormatRuleSet, name: str) -> FormatDB:
    """
    Insert or replace a format from a rule set.

    Card limits and type quotas are replaced wholesale.
    """
    fmt = await get_format(session, rules.format_id)
    if fmt is None:
        fmt = FormatDB(format_id=rules.format_id, name=name)
        session.add(fmt)
    else:
        # Delete old rows before inserting new ones (unique per format)
        fmt.card_limits.clear()
        fmt.type_quotas.clear()
        await session.flush()

    fmt.name = name
    fmt.params = {
        "deck_size": rules.deck_size,
        "default_card_limit": rules.default_card_limit,
        "starting_gold_required": rules.starting_gold_required,
        "discontinued_severity": rules.discontinued_severity.value,
        "starting_gold_type": rules.starting_gold_type,
        "allowed_block_ids": sorted(rules.allowed_block_ids),
        "allowed_edition_ids": sorted(rules.allowed_edition_ids),
        "allowed_races": sorted(rules.allowed_races),
    }
    fmt.card_limits = [
        FormatCardLimitDB(card_id=card_id, max_qty=max_qty)
        for card_id, max_qty in sorted(rules.card_limits.items())
    ]
    fmt.type_quotas = [
        FormatTypeQuotaDB(
            card_type=quota.card_type,
            min_qty=quota.minimum,
            max_qty=quota.maximum,
            severity=quota.severity.value,
        )
        for quota in rules.type_quotas
    ]

    await session.flush()
    return fmt


# --- Deck Version Operations ---


async def create_deck_version(
    session: AsyncSession,
    deck_name: str,
    format_id: str,
    entries: Sequence[DeckEntry],
    result: ValidationResult,
    notes: str | None = None,
) -> DeckVersionDB:
    """Persist a deck version together with its validation verdict."""
    version = DeckVersionDB(
        deck_name=deck_name,
        format_id=format_id,
        notes=notes,
        is_valid=result.is_valid,
        validation=result.to_dict(),
    )
    version.cards = [
        DeckVersionCardDB(
            printing_id=entry.printing.printing_id,
            position=position,
            qty=entry.quantity,
            is_starting_gold=entry.is_starting_gold,
            is_key_card=entry.is_key_card,
        )
        for position, entry in enumerate(entries)
    ]
    session.add(version)
    await session.flush()
    await session.refresh(version, attribute_names=["created_at"])

    logger.info(
        "Created deck version %d (%s, format %s, valid=%s)",
        version.id,
        deck_name,
        format_id,
        result.is_valid,
    )
    return version


async def get_deck_version(session: AsyncSession, version_id: int) -> DeckVersionDB | None:
    """Get a deck version with its cards. Returns None if it does not exist."""
    result = await session.execute(
        select(DeckVersionDB)
        .where(DeckVersionDB.id == version_id)
        .options(selectinload(DeckVersionDB.cards))
    )
    return result.scalar_one_or_none()


async def deck_version_entries(session: AsyncSession, version: DeckVersionDB) -> list[DeckEntry]:
    """
    Rebuild the deck entries of a stored version, in deck order.

    Raises:
        KnownError: If a stored printing no longer exists in the catalog
    """
    printings = await get_printings_by_ids(session, (card.printing_id for card in version.cards))
    missing = sorted({c.printing_id for c in version.cards} - printings.keys())
    if missing:
        raise KnownError(
            kind=FailureKind.NOT_FOUND,
            message=f"Deck version {version.id} references printings missing from the catalog.",
            detail=f"Missing printings: {', '.join(missing)}",
            status_code=409,
        )

    return [
        DeckEntry(
            printing=printings[card.printing_id],
            quantity=card.qty,
            is_starting_gold=card.is_starting_gold,
            is_key_card=card.is_key_card,
        )
        for card in version.cards
    ]

