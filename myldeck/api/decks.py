"""
Deck version API endpoints.

A deck version is an immutable snapshot of a deck, stored together with
the validation verdict it had when it was saved. Versions can be exported
as TXT, CSV or JSON.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from myldeck.api.validation import (
    DeckCardRequest,
    ValidationResponse,
    build_deck_entries,
    load_format_rules,
)
from myldeck.db import (
    create_deck_version,
    deck_version_entries,
    format_to_rules,
    get_deck_version,
    get_format,
)
from myldeck.db.database import get_session
from myldeck.models.db import DeckVersionDB
from myldeck.models.deck import DeckSnapshot
from myldeck.services.deck_validator import validate_deck
from myldeck.services.export_renderer import ExportFormat, render_export

router = APIRouter(prefix="/decks", tags=["decks"])


class DeckVersionCreateRequest(BaseModel):
    """Request model for saving a deck version."""

    deck_name: str = Field(..., min_length=1, max_length=255)
    format_id: str = Field(..., min_length=1)
    notes: str | None = None
    cards: list[DeckCardRequest] = Field(default_factory=list)


class DeckVersionCardResponse(BaseModel):
    """One stored entry of a deck version."""

    card_printing_id: str
    qty: int
    is_starting_gold: bool
    is_key_card: bool


class DeckVersionResponse(BaseModel):
    """Response model for a stored deck version."""

    id: int
    deck_name: str
    format_id: str
    notes: str | None = None
    is_valid: bool
    created_at: datetime | None = None
    cards: list[DeckVersionCardResponse] = Field(default_factory=list)
    validation: ValidationResponse | None = Field(
        default=None,
        description="Validation verdict recorded when the version was saved",
    )


def _version_response(version: DeckVersionDB) -> DeckVersionResponse:
    return DeckVersionResponse(
        id=version.id,
        deck_name=version.deck_name,
        format_id=version.format_id,
        notes=version.notes,
        is_valid=version.is_valid,
        created_at=version.created_at,
        cards=[
            DeckVersionCardResponse(
                card_printing_id=card.printing_id,
                qty=card.qty,
                is_starting_gold=card.is_starting_gold,
                is_key_card=card.is_key_card,
            )
            for card in version.cards
        ],
        validation=(
            ValidationResponse.model_validate(version.validation) if version.validation else None
        ),
    )


async def _load_version(session: AsyncSession, version_id: int) -> DeckVersionDB:
    version = await get_deck_version(session, version_id)
    if version is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Deck version {version_id} not found",
        )
    return version


@router.post(
    "/versions",
    response_model=DeckVersionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_version(
    request: DeckVersionCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckVersionResponse:
    """
    Validate a deck and save it as a new version.

    Invalid decks are saved too; the verdict is stored with the version.
    Returns 404 if the format does not exist.
    """
    rules = await load_format_rules(session, request.format_id)
    entries = await build_deck_entries(session, request.cards)
    result = validate_deck(rules, entries)

    version = await create_deck_version(
        session,
        deck_name=request.deck_name,
        format_id=request.format_id,
        entries=entries,
        result=result,
        notes=request.notes,
    )

    return _version_response(version)


@router.get("/versions/{version_id}", response_model=DeckVersionResponse)
async def get_version(
    version_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckVersionResponse:
    """
    Get a stored deck version.

    Returns 404 if the version does not exist.
    """
    version = await _load_version(session, version_id)
    return _version_response(version)


@router.get("/versions/{version_id}/export")
async def export_version(
    version_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
    export_format: Annotated[ExportFormat, Query(alias="format")] = ExportFormat.TXT,
) -> Response:
    """
    Export a deck version as a downloadable file.

    The deck is validated against the current rules of its format, so the
    export shows today's verdict.
    """
    version = await _load_version(session, version_id)

    fmt = await get_format(session, version.format_id)
    if fmt is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Format '{version.format_id}' not found",
        )

    entries = await deck_version_entries(session, version)
    result = validate_deck(format_to_rules(fmt), entries)
    snapshot = DeckSnapshot(
        deck_name=version.deck_name,
        format_name=fmt.name,
        entries=tuple(entries),
    )

    document = render_export(result, snapshot, export_format)
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )
