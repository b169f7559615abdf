"""
Format Rule Set: explicit, immutable format constraints.

INVARIANT: The validation engine receives its FormatRuleSet as an argument.
There is no ambient "current format"; every check is testable in isolation.

A FormatRuleSet captures:
1. Deck size (non-gold cards) and the starting gold requirement
2. Default copy limit and per-card overrides (0 = banned)
3. Severity of discontinued printings for this format
4. Optional type quotas and block/edition/race allowances

Invalid rule sets are rejected at construction. The engine never has to
guess what a non-positive deck size means.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

from myldeck.models.validation import Severity

DEFAULT_DECK_SIZE = 50
DEFAULT_CARD_LIMIT = 3


class FormatRulesError(ValueError):
    """Raised when a rule set is structurally invalid."""

    def __init__(self, format_id: str, reason: str):
        self.format_id = format_id
        self.reason = reason
        super().__init__(f"Invalid rules for format '{format_id}': {reason}")


@dataclass(frozen=True, slots=True)
class TypeQuota:
    """
    Minimum and/or maximum number of non-gold cards of one card type.

    Attributes:
        card_type: Card type name the quota applies to
        minimum: Lower bound (inclusive), None for no lower bound
        maximum: Upper bound (inclusive), None for no upper bound
        severity: Severity of a violation
    """

    card_type: str
    minimum: int | None = None
    maximum: int | None = None
    severity: Severity = Severity.BLOCK

    def __post_init__(self) -> None:
        if self.minimum is None and self.maximum is None:
            raise ValueError(f"Quota for '{self.card_type}' needs a minimum or a maximum")
        if self.minimum is not None and self.minimum < 0:
            raise ValueError(f"Quota minimum for '{self.card_type}' must be >= 0")
        if self.maximum is not None and self.maximum < 0:
            raise ValueError(f"Quota maximum for '{self.card_type}' must be >= 0")
        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            raise ValueError(f"Quota for '{self.card_type}' has minimum > maximum")


@dataclass(frozen=True)
class FormatRuleSet:
    """
    Constraints of one format.

    Attributes:
        format_id: Catalog id of the format
        deck_size: Exact number of non-gold cards required
        default_card_limit: Max copies of any card without an override
        starting_gold_required: Exactly one starting gold card must be present
        card_limits: card_id -> max copies (0 = banned, 1-2 = restricted)
        discontinued_severity: Severity for DISCONTINUED printings
        type_quotas: Per-type count bounds
        allowed_edition_ids: If non-empty, only these editions are legal
        allowed_races: If non-empty, only these races are legal
        starting_gold_type: If set, the starting gold must be of this type
        allowed_block_ids: If non-empty, only printings from these blocks are legal
    """

    format_id: str
    deck_size: int = DEFAULT_DECK_SIZE
    default_card_limit: int = DEFAULT_CARD_LIMIT
    starting_gold_required: bool = True
    card_limits: Mapping[str, int] = field(default_factory=dict)
    discontinued_severity: Severity = Severity.WARN
    type_quotas: tuple[TypeQuota, ...] = field(default_factory=tuple)
    allowed_edition_ids: frozenset[str] = field(default_factory=frozenset)
    allowed_races: frozenset[str] = field(default_factory=frozenset)
    starting_gold_type: str | None = None
    allowed_block_ids: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.deck_size <= 0:
            raise FormatRulesError(self.format_id, f"deck_size must be positive, got {self.deck_size}")
        if self.default_card_limit < 0:
            raise FormatRulesError(
                self.format_id,
                f"default_card_limit must be >= 0, got {self.default_card_limit}",
            )
        for card_id, limit in self.card_limits.items():
            if limit < 0:
                raise FormatRulesError(self.format_id, f"limit for card '{card_id}' is negative")

        seen_types: set[str] = set()
        for quota in self.type_quotas:
            if quota.card_type in seen_types:
                raise FormatRulesError(
                    self.format_id, f"duplicate type quota for '{quota.card_type}'"
                )
            seen_types.add(quota.card_type)

    def limit_for(self, card_id: str) -> int:
        """Effective copy limit for a card: override if present, else default."""
        return self.card_limits.get(card_id, self.default_card_limit)

    def is_banned(self, card_id: str) -> bool:
        return self.limit_for(card_id) == 0
