"""
Deck validation endpoint.

Validates a candidate deck against a format without persisting anything.
Used for live validation while a deck is being edited.
"""

from collections.abc import Sequence
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from myldeck.db import get_format_rules, get_printings_by_ids
from myldeck.db.database import get_session
from myldeck.models.deck import DeckEntry
from myldeck.models.failure import FailureKind, KnownError
from myldeck.models.format_rules import FormatRuleSet
from myldeck.models.validation import Severity, ValidationCode, ValidationResult
from myldeck.services.deck_validator import validate_deck

router = APIRouter(tags=["validation"])


class DeckCardRequest(BaseModel):
    """One deck entry, by printing id."""

    card_printing_id: str = Field(..., min_length=1)
    qty: int = Field(..., ge=1, description="Number of copies (positive)")
    is_starting_gold: bool = False
    is_key_card: bool = False


class ValidateRequest(BaseModel):
    """Request model for deck validation."""

    format_id: str = Field(..., min_length=1)
    cards: list[DeckCardRequest] = Field(
        default_factory=list,
        description="Deck entries. Entries for the same card add up.",
        examples=[[{"card_printing_id": "p-oro-mg", "qty": 1, "is_starting_gold": True}]],
    )


class ValidationMessageResponse(BaseModel):
    """A single validation diagnostic."""

    severity: Severity
    code: ValidationCode
    message: str
    hint: str | None = None
    context: dict[str, Any] = Field(default_factory=dict)


class TypeCostStatsResponse(BaseModel):
    """Average cost of one card type."""

    qty: int
    costed_qty: int
    avg: float | None = None


class ComputedStatsResponse(BaseModel):
    """Statistics over the cards of the deck other than the starting gold."""

    total_cards: int
    starting_gold_count: int
    cost_histogram: dict[str, int] = Field(
        default_factory=dict,
        description="Non-gold card count per cost (keys are costs as strings)",
    )
    avg_cost: float | None = None
    gold_histogram: dict[str, int] = Field(
        default_factory=dict,
        description="Gold card count per gold value (keys are values as strings)",
    )
    avg_gold_value: float | None = None
    avg_cost_by_type: dict[str, TypeCostStatsResponse] = Field(default_factory=dict)
    type_distribution: dict[str, int] = Field(default_factory=dict)
    race_distribution: dict[str, int] = Field(default_factory=dict)
    rarity_distribution: dict[str, int] = Field(default_factory=dict)


class ValidationResponse(BaseModel):
    """Response model for a validation verdict."""

    is_valid: bool
    messages: list[ValidationMessageResponse] = Field(default_factory=list)
    computed_stats: ComputedStatsResponse


def validation_response(result: ValidationResult) -> ValidationResponse:
    """Convert a ValidationResult to its response model."""
    return ValidationResponse.model_validate(result.to_dict())


async def load_format_rules(session: AsyncSession, format_id: str) -> FormatRuleSet:
    """Load a format's rules or fail with 404."""
    rules = await get_format_rules(session, format_id)
    if rules is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Format '{format_id}' not found",
        )
    return rules


async def build_deck_entries(
    session: AsyncSession, cards: Sequence[DeckCardRequest]
) -> list[DeckEntry]:
    """
    Turn requested cards into deck entries, in request order.

    Raises:
        KnownError: If any printing id is unknown to the catalog
    """
    printings = await get_printings_by_ids(session, (card.card_printing_id for card in cards))

    unknown = sorted({card.card_printing_id for card in cards} - printings.keys())
    if unknown:
        raise KnownError(
            kind=FailureKind.UNRESOLVED_CARDS,
            message=f"{len(unknown)} card printing(s) not found in the catalog.",
            detail=", ".join(unknown),
            suggestion="Re-import the deck list to pick existing printings.",
            errors=[{"card_printing_id": printing_id} for printing_id in unknown],
        )

    return [
        DeckEntry(
            printing=printings[card.card_printing_id],
            quantity=card.qty,
            is_starting_gold=card.is_starting_gold,
            is_key_card=card.is_key_card,
        )
        for card in cards
    ]


@router.post("/validate", response_model=ValidationResponse)
async def validate(
    request: ValidateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ValidationResponse:
    """
    Validate a deck against a format.

    An invalid deck is a normal 200 response with is_valid=false.
    Returns 404 if the format does not exist.
    """
    rules = await load_format_rules(session, request.format_id)
    entries = await build_deck_entries(session, request.cards)
    return validation_response(validate_deck(rules, entries))
