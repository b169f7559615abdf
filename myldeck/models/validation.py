"""
Validation result models.

A ValidationResult is the structured verdict of the validation engine:
pass/fail, an ordered list of severity-tagged messages, and statistics.

INVARIANTS:
- is_valid is True iff no message has severity BLOCK
- messages are ordered by rule evaluation order, never by insertion into
  a mutable structure
- identical input yields an identical result (no timestamps, no timing)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Message severity. Only BLOCK affects validity."""

    BLOCK = "BLOCK"
    WARN = "WARN"


class ValidationCode(str, Enum):
    """Machine-checkable message codes. Closed set."""

    DECK_TOO_FEW_CARDS = "DECK_TOO_FEW_CARDS"
    DECK_TOO_MANY_CARDS = "DECK_TOO_MANY_CARDS"
    STARTING_GOLD_MISSING = "STARTING_GOLD_MISSING"
    STARTING_GOLD_MULTIPLE = "STARTING_GOLD_MULTIPLE"
    STARTING_GOLD_WRONG_TYPE = "STARTING_GOLD_WRONG_TYPE"
    STARTING_GOLD_MUST_HAVE_NO_ABILITY = "STARTING_GOLD_MUST_HAVE_NO_ABILITY"
    STARTING_GOLD_NOT_ALLOWED_FOR_PRINTING = "STARTING_GOLD_NOT_ALLOWED_FOR_PRINTING"
    CARD_BANNED = "CARD_BANNED"
    CARD_LIMIT_EXCEEDED = "CARD_LIMIT_EXCEEDED"
    UNIQUE_CARD_MAX_1 = "UNIQUE_CARD_MAX_1"
    PRINTING_DISCONTINUED = "PRINTING_DISCONTINUED"
    TYPE_QUOTA_BELOW_MINIMUM = "TYPE_QUOTA_BELOW_MINIMUM"
    TYPE_QUOTA_ABOVE_MAXIMUM = "TYPE_QUOTA_ABOVE_MAXIMUM"
    FORMAT_ALLOWED_BLOCK = "FORMAT_ALLOWED_BLOCK"
    EDITION_NOT_ALLOWED = "EDITION_NOT_ALLOWED"
    RACE_NOT_ALLOWED = "RACE_NOT_ALLOWED"


@dataclass(frozen=True)
class ValidationMessage:
    """
    A single diagnostic produced by the validation engine.

    Attributes:
        severity: BLOCK makes the deck invalid, WARN is advisory
        code: Machine-checkable code
        message: Human-readable explanation
        hint: Suggested fix, if any
        context: Structured data for UI display (card name, held, limit...)
    """

    severity: Severity
    code: ValidationCode
    message: str
    hint: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def is_blocking(self) -> bool:
        return self.severity == Severity.BLOCK

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.value,
            "code": self.code.value,
            "message": self.message,
            "hint": self.hint,
            "context": dict(self.context),
        }


@dataclass(frozen=True)
class TypeCostStats:
    """Average cost of one card type. Gold cards count in qty only."""

    qty: int
    costed_qty: int
    avg: float | None

    def to_dict(self) -> dict[str, Any]:
        return {"qty": self.qty, "costed_qty": self.costed_qty, "avg": self.avg}


@dataclass(frozen=True)
class ComputedStats:
    """
    Aggregate statistics over the non-starting-gold cards of a deck.

    Gold cards (the gold card type) feed gold_histogram and avg_gold_value,
    keyed by their printed value; every other costed card feeds
    cost_histogram and avg_cost.

    Distributions map a category key to a card count. Keys are sorted.
    """

    total_cards: int = 0
    starting_gold_count: int = 0
    cost_histogram: dict[int, int] = field(default_factory=dict)
    avg_cost: float | None = None
    gold_histogram: dict[int, int] = field(default_factory=dict)
    avg_gold_value: float | None = None
    avg_cost_by_type: dict[str, TypeCostStats] = field(default_factory=dict)
    type_distribution: dict[str, int] = field(default_factory=dict)
    race_distribution: dict[str, int] = field(default_factory=dict)
    rarity_distribution: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_cards": self.total_cards,
            "starting_gold_count": self.starting_gold_count,
            # JSON object keys are strings
            "cost_histogram": {str(cost): qty for cost, qty in self.cost_histogram.items()},
            "avg_cost": self.avg_cost,
            "gold_histogram": {str(value): qty for value, qty in self.gold_histogram.items()},
            "avg_gold_value": self.avg_gold_value,
            "avg_cost_by_type": {
                card_type: stats.to_dict() for card_type, stats in self.avg_cost_by_type.items()
            },
            "type_distribution": dict(self.type_distribution),
            "race_distribution": dict(self.race_distribution),
            "rarity_distribution": dict(self.rarity_distribution),
        }


@dataclass(frozen=True)
class ValidationResult:
    """Verdict of one validation pass."""

    is_valid: bool
    messages: tuple[ValidationMessage, ...] = field(default_factory=tuple)
    computed_stats: ComputedStats = field(default_factory=ComputedStats)

    @property
    def blocking(self) -> tuple[ValidationMessage, ...]:
        return tuple(m for m in self.messages if m.severity == Severity.BLOCK)

    @property
    def warnings(self) -> tuple[ValidationMessage, ...]:
        return tuple(m for m in self.messages if m.severity == Severity.WARN)

    def codes(self) -> list[ValidationCode]:
        """Message codes in order (handy for assertions and logging)."""
        return [m.code for m in self.messages]

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "messages": [m.to_dict() for m in self.messages],
            "computed_stats": self.computed_stats.to_dict(),
        }
