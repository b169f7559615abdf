from myldeck.models.card import CardPrintingRef, LegalStatus
from myldeck.models.deck import DeckEntry, DeckSnapshot
from myldeck.models.failure import (
    FailureDetail,
    FailureKind,
    ImportSelectionError,
    KnownError,
)
from myldeck.models.format_rules import (
    DEFAULT_CARD_LIMIT,
    DEFAULT_DECK_SIZE,
    FormatRuleSet,
    FormatRulesError,
    TypeQuota,
)
from myldeck.models.imports import (
    AmbiguityReason,
    AmbiguousImport,
    ImportAmbiguousLine,
    ImportCardOption,
    ImportFormat,
    ImportResolvedCard,
    ImportResult,
    ImportSelection,
    ParsedDeckLine,
    ParseLineError,
    ParseResult,
    ResolvedImport,
)
from myldeck.models.validation import (
    ComputedStats,
    Severity,
    TypeCostStats,
    ValidationCode,
    ValidationMessage,
    ValidationResult,
)

__all__ = [
    "AmbiguityReason",
    "AmbiguousImport",
    "CardPrintingRef",
    "ComputedStats",
    "DEFAULT_CARD_LIMIT",
    "DEFAULT_DECK_SIZE",
    "DeckEntry",
    "DeckSnapshot",
    "FailureDetail",
    "FailureKind",
    "FormatRuleSet",
    "FormatRulesError",
    "ImportAmbiguousLine",
    "ImportCardOption",
    "ImportFormat",
    "ImportResolvedCard",
    "ImportResult",
    "ImportSelection",
    "ImportSelectionError",
    "KnownError",
    "LegalStatus",
    "ParseLineError",
    "ParseResult",
    "ParsedDeckLine",
    "ResolvedImport",
    "Severity",
    "TypeCostStats",
    "TypeQuota",
    "ValidationCode",
    "ValidationMessage",
    "ValidationResult",
]
