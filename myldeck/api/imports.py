"""
Deck import API endpoints.

Import is a two-step flow:
1. POST /decks/import parses a TXT or CSV deck list and resolves every line
   against the catalog. Lines with zero or several candidate printings come
   back as ambiguous lines with their options.
2. POST /decks/import/resolve merges the user's choices for those lines
   into the final list of resolved cards.

Per-line parse errors never fail the request; they are returned alongside
whatever could be resolved.
"""

import logging
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from myldeck.config import settings
from myldeck.db import build_resolution_index, get_printings_by_ids
from myldeck.db.database import get_session
from myldeck.models.card import LegalStatus
from myldeck.models.failure import FailureKind, KnownError
from myldeck.models.imports import (
    AmbiguityReason,
    AmbiguousImport,
    ImportAmbiguousLine,
    ImportCardOption,
    ImportFormat,
    ImportResolvedCard,
    ImportSelection,
)
from myldeck.parsers import parse_deck_list
from myldeck.services.card_index import CardResolutionIndex
from myldeck.services.import_resolver import (
    UnresolvedPolicy,
    merge_selections,
    resolve_import,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/decks/import", tags=["import"])


class ImportRequest(BaseModel):
    """Request model for importing a deck list."""

    format: ImportFormat = Field(..., description="Payload format: txt or csv")
    payload: str = Field(
        ...,
        description="Raw deck list text",
        examples=["1x Oro Básico [Mundo Gótico] ⭐\n3x Arturo [Espada Sagrada]"],
    )
    unresolved_policy: UnresolvedPolicy = Field(
        default=UnresolvedPolicy.AMBIGUOUS,
        description="'ambiguous' offers unknown names for manual choice, "
        "'error' reports them as line errors",
    )


class LineErrorModel(BaseModel):
    """A line that could not be imported."""

    line_number: int
    error: str


class ResolvedCardModel(BaseModel):
    """A line resolved to exactly one printing."""

    card_printing_id: str
    qty: int = Field(..., ge=1)
    is_starting_gold: bool = False
    line_number: int


class CardOptionModel(BaseModel):
    """A candidate printing for an ambiguous line."""

    card_printing_id: str
    card_name: str
    edition_name: str
    edition_code: str | None = None
    rarity: str | None = None
    legal_status: LegalStatus = LegalStatus.STANDARD
    image_url: str | None = None


class AmbiguousLineModel(BaseModel):
    """A line that needs a user choice."""

    line_number: int
    original_line: str
    qty: int = Field(..., ge=1)
    card_name: str
    edition_hint: str | None = None
    is_starting_gold: bool = False
    reason: AmbiguityReason
    options: list[CardOptionModel] = Field(default_factory=list)


class ImportResponse(BaseModel):
    """Response model for a deck import (either step)."""

    status: Literal["RESOLVED", "AMBIGUOUS"]
    resolved_cards: list[ResolvedCardModel] = Field(default_factory=list)
    ambiguous_lines: list[AmbiguousLineModel] = Field(default_factory=list)
    errors: list[LineErrorModel] = Field(default_factory=list)
    imported_count: int | None = Field(
        default=None,
        description="Number of resolved cards, set when status is RESOLVED",
    )


class SelectionModel(BaseModel):
    """The printing chosen for one ambiguous line."""

    line_number: int
    card_printing_id: str = Field(..., min_length=1)


class ResolveRequest(BaseModel):
    """Request model for finalizing an ambiguous import."""

    resolved_cards: list[ResolvedCardModel] = Field(default_factory=list)
    ambiguous_lines: list[AmbiguousLineModel] = Field(..., min_length=1)
    selections: list[SelectionModel] = Field(default_factory=list)


def _resolved_model(card: ImportResolvedCard) -> ResolvedCardModel:
    return ResolvedCardModel(
        card_printing_id=card.card_printing_id,
        qty=card.qty,
        is_starting_gold=card.is_starting_gold,
        line_number=card.line_number,
    )


def _option_model(option: ImportCardOption) -> CardOptionModel:
    return CardOptionModel(
        card_printing_id=option.card_printing_id,
        card_name=option.card_name,
        edition_name=option.edition_name,
        edition_code=option.edition_code,
        rarity=option.rarity,
        legal_status=option.legal_status,
        image_url=option.image_url,
    )


def _ambiguous_model(line: ImportAmbiguousLine) -> AmbiguousLineModel:
    return AmbiguousLineModel(
        line_number=line.line_number,
        original_line=line.original_line,
        qty=line.qty,
        card_name=line.card_name,
        edition_hint=line.edition_hint,
        is_starting_gold=line.is_starting_gold,
        reason=line.reason,
        options=[_option_model(option) for option in line.options],
    )


def _ambiguous_line(model: AmbiguousLineModel) -> ImportAmbiguousLine:
    return ImportAmbiguousLine(
        line_number=model.line_number,
        original_line=model.original_line,
        qty=model.qty,
        card_name=model.card_name,
        edition_hint=model.edition_hint,
        is_starting_gold=model.is_starting_gold,
        reason=model.reason,
        options=tuple(
            ImportCardOption(
                card_printing_id=option.card_printing_id,
                card_name=option.card_name,
                edition_name=option.edition_name,
                edition_code=option.edition_code,
                rarity=option.rarity,
                legal_status=option.legal_status,
                image_url=option.image_url,
            )
            for option in model.options
        ),
    )


@router.post("", response_model=ImportResponse)
async def import_deck(
    request: ImportRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ImportResponse:
    """
    Parse and resolve a deck list.

    Returns RESOLVED when every usable line matched a single printing,
    AMBIGUOUS when at least one line needs a choice. Parse errors and
    unresolved lines are listed in errors, ordered by line number.
    """
    if len(request.payload) > settings.max_import_payload_chars:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Payload exceeds {settings.max_import_payload_chars} characters",
        )
    if not request.payload.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Import payload cannot be empty",
        )

    parsed = parse_deck_list(request.payload, request.format)
    if not parsed.lines and not parsed.errors:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No card lines found in import payload",
        )

    index = await build_resolution_index(session, {line.card_name for line in parsed.lines})
    result = resolve_import(parsed.lines, index, request.unresolved_policy)

    errors = sorted((*parsed.errors, *result.errors), key=lambda e: e.line_number)
    logger.info(
        "Imported %s deck list: %d line(s), %d error(s), status %s",
        request.format.value,
        len(parsed.lines),
        len(errors),
        result.status,
    )

    if isinstance(result, AmbiguousImport):
        return ImportResponse(
            status=result.status,
            resolved_cards=[_resolved_model(card) for card in result.resolved_cards],
            ambiguous_lines=[_ambiguous_model(line) for line in result.ambiguous_lines],
            errors=[LineErrorModel(line_number=e.line_number, error=e.error) for e in errors],
        )

    return ImportResponse(
        status=result.status,
        resolved_cards=[_resolved_model(card) for card in result.resolved_cards],
        errors=[LineErrorModel(line_number=e.line_number, error=e.error) for e in errors],
        imported_count=result.imported_count,
    )


@router.post("/resolve", response_model=ImportResponse)
async def resolve_ambiguous_import(
    request: ResolveRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ImportResponse:
    """
    Finalize an ambiguous import with one selection per ambiguous line.

    Quantity and starting gold flag come from the ambiguous line.
    Returns 400 if a selection is missing, duplicated, or not one of the
    offered printings.
    """
    selections = [
        ImportSelection(line_number=s.line_number, card_printing_id=s.card_printing_id)
        for s in request.selections
    ]
    known = await get_printings_by_ids(
        session,
        [s.card_printing_id for s in selections]
        + [card.card_printing_id for card in request.resolved_cards],
    )

    merged = merge_selections(
        resolved_cards=[
            ImportResolvedCard(
                card_printing_id=card.card_printing_id,
                qty=card.qty,
                is_starting_gold=card.is_starting_gold,
                line_number=card.line_number,
            )
            for card in request.resolved_cards
        ],
        ambiguous_lines=[_ambiguous_line(line) for line in request.ambiguous_lines],
        selections=selections,
        index=CardResolutionIndex(known.values()),
    )

    unknown = sorted({card.card_printing_id for card in merged} - known.keys())
    if unknown:
        raise KnownError(
            kind=FailureKind.UNRESOLVED_CARDS,
            message=f"{len(unknown)} card printing(s) not found in the catalog.",
            detail=", ".join(unknown),
            suggestion="Import the deck list again.",
            errors=[{"card_printing_id": printing_id} for printing_id in unknown],
        )

    return ImportResponse(
        status="RESOLVED",
        resolved_cards=[_resolved_model(card) for card in merged],
        imported_count=len(merged),
    )
