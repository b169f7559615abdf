"""
Deck engine services.

Pure, synchronous functions over in-memory data: card resolution, import
resolution, validation and export rendering.
"""

from myldeck.services.card_index import CardResolutionIndex, normalize_card_name
from myldeck.services.deck_stats import compute_stats
from myldeck.services.deck_validator import validate_deck
from myldeck.services.export_renderer import (
    ExportDocument,
    ExportFormat,
    render_csv,
    render_export,
    render_json,
    render_txt,
)
from myldeck.services.import_resolver import (
    UnresolvedPolicy,
    merge_selections,
    resolve_import,
)

__all__ = [
    "CardResolutionIndex",
    "ExportDocument",
    "ExportFormat",
    "UnresolvedPolicy",
    "compute_stats",
    "merge_selections",
    "normalize_card_name",
    "render_csv",
    "render_export",
    "render_json",
    "render_txt",
    "resolve_import",
    "validate_deck",
]
