"""
Deck Export Renderer.

THIS MODULE HANDLES OUTPUT RENDERING ONLY.

It accepts a deck snapshot (and the validation result for it, if any) and
produces TXT, CSV or JSON text. It does not validate.

Card order is the same in every format: grouped by card type ascending,
then cost ascending with null cost last, then card name ascending. TXT and
CSV output can be imported back by the deck list parsers.
"""

import csv
import json
import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from io import StringIO
from itertools import groupby
from typing import Any

from myldeck.models.deck import DeckEntry, DeckSnapshot
from myldeck.models.validation import ValidationResult
from myldeck.parsers.txt_deck import STARTING_GOLD_MARKERS
from myldeck.services.card_index import normalize_card_name

JSON_EXPORT_VERSION = "1.1"

CSV_HEADER = (
    "Qty",
    "Card Name",
    "Edition",
    "Type",
    "Cost",
    "Starting Gold",
    "Legal Status",
    "Race",
    "Rarity",
)


class ExportFormat(str, Enum):
    """Supported export formats."""

    TXT = "txt"
    CSV = "csv"
    JSON = "json"


MEDIA_TYPES = {
    ExportFormat.TXT: "text/plain; charset=utf-8",
    ExportFormat.CSV: "text/csv; charset=utf-8",
    ExportFormat.JSON: "application/json; charset=utf-8",
}


@dataclass(frozen=True, slots=True)
class ExportDocument:
    """A rendered export, ready to be sent as a file."""

    content: str
    media_type: str
    filename: str


def _entry_sort_key(entry: DeckEntry) -> tuple[str, bool, int, str, str]:
    printing = entry.printing
    return (
        normalize_card_name(printing.card_type),
        printing.cost is None,
        printing.cost if printing.cost is not None else 0,
        normalize_card_name(printing.card_name),
        printing.printing_id,
    )


def sort_entries(entries: Iterable[DeckEntry]) -> list[DeckEntry]:
    """Type ascending, then cost ascending (null last), then name ascending."""
    return sorted(entries, key=_entry_sort_key)


def sanitize_filename(name: str) -> str:
    """Keep letters, digits, '_', '-' and spaces; spaces become '_'."""
    cleaned = re.sub(r"[^\w\- ]", "", name, flags=re.ASCII)
    cleaned = re.sub(r"\s+", "_", cleaned.strip())
    return cleaned[:100] or "deck"


def format_txt_line(entry: DeckEntry) -> str:
    """Format a single card line: "Nx Name [Edition]" plus the gold marker."""
    line = f"{entry.quantity}x {entry.printing.card_name} [{entry.printing.edition_name}]"
    if entry.is_starting_gold:
        line += f" {STARTING_GOLD_MARKERS[0]}"
    return line


def render_txt(result: ValidationResult | None, snapshot: DeckSnapshot) -> str:
    """
    Render a deck as a plain-text list.

    Header lines use the prefixes the TXT parser skips, so the output can
    be imported back without edits.
    """
    lines: list[str] = [
        f"=== {snapshot.deck_name} ===",
        f"Formato: {snapshot.format_name}",
        f"Cartas: {snapshot.total_cards()}",
    ]

    if result is not None:
        lines.append(f"Estado: {'VÁLIDO' if result.is_valid else 'INVÁLIDO'}")

        blocking = result.blocking
        if blocking:
            lines.append("")
            lines.append("ERRORES DE VALIDACIÓN:")
            lines.extend(f"  - {m.message}" for m in blocking)

        warnings = result.warnings
        if warnings:
            lines.append("")
            lines.append("ADVERTENCIAS:")
            lines.extend(f"  - {m.message}" for m in warnings)

    lines.append("")
    lines.append(f"Exportado: {snapshot.exported_at.isoformat()}")
    lines.append("")
    lines.append("=" * 50)
    lines.append("")

    grouped = groupby(sort_entries(snapshot.entries), key=lambda e: e.printing.card_type)
    for card_type, group in grouped:
        lines.append(f"{card_type}:")
        lines.extend(f"  {format_txt_line(entry)}" for entry in group)
        lines.append("")

    return "\n".join(lines)


def render_csv(result: ValidationResult | None, snapshot: DeckSnapshot) -> str:
    """
    Render a deck as CSV.

    The first six columns match what the CSV parser reads back. Fields with
    commas, quotes or newlines are quoted by the csv module.
    """
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for entry in sort_entries(snapshot.entries):
        printing = entry.printing
        writer.writerow(
            (
                entry.quantity,
                printing.card_name,
                printing.edition_name,
                printing.card_type,
                "" if printing.cost is None else printing.cost,
                "Sí" if entry.is_starting_gold else "No",
                printing.legal_status.value,
                printing.race or "",
                printing.rarity or "",
            )
        )

    return buffer.getvalue()


def _card_payload(entry: DeckEntry) -> dict[str, Any]:
    printing = entry.printing
    return {
        "qty": entry.quantity,
        "card_id": printing.card_id,
        "card_printing_id": printing.printing_id,
        "card_name": printing.card_name,
        "edition_name": printing.edition_name,
        "edition_code": printing.edition_code,
        "card_type_name": printing.card_type,
        "cost": printing.cost,
        "race_name": printing.race,
        "rarity_name": printing.rarity,
        "is_starting_gold": entry.is_starting_gold,
        "is_key_card": entry.is_key_card,
        "legal_status": printing.legal_status.value,
    }


def render_json(result: ValidationResult | None, snapshot: DeckSnapshot) -> str:
    """Render a deck with validation and stats as pretty-printed JSON."""
    payload: dict[str, Any] = {
        "version": JSON_EXPORT_VERSION,
        "deck_name": snapshot.deck_name,
        "format_name": snapshot.format_name,
        "total_cards": snapshot.total_cards(),
        "is_valid": result.is_valid if result is not None else None,
        "validation_messages": (
            [
                {
                    "severity": m.severity.value,
                    "code": m.code.value,
                    "message": m.message,
                    "hint": m.hint,
                }
                for m in result.messages
            ]
            if result is not None
            else None
        ),
        "computed_stats": result.computed_stats.to_dict() if result is not None else None,
        "cards": [_card_payload(entry) for entry in sort_entries(snapshot.entries)],
        "exported_at": snapshot.exported_at.isoformat(),
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


_RENDERERS = {
    ExportFormat.TXT: render_txt,
    ExportFormat.CSV: render_csv,
    ExportFormat.JSON: render_json,
}


def render_export(
    result: ValidationResult | None,
    snapshot: DeckSnapshot,
    fmt: ExportFormat | str,
) -> ExportDocument:
    """
    Render a deck in the requested format.

    Raises:
        ValueError: If the format is not supported
    """
    export_format = ExportFormat(fmt)
    content = _RENDERERS[export_format](result, snapshot)
    return ExportDocument(
        content=content,
        media_type=MEDIA_TYPES[export_format],
        filename=f"{sanitize_filename(snapshot.deck_name)}.{export_format.value}",
    )

