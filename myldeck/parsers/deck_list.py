"""
Deck list import entry point.

Dispatches a raw payload to the TXT or CSV parser.
"""

from myldeck.models.imports import ImportFormat, ParseResult
from myldeck.parsers.csv_deck import parse_csv_deck
from myldeck.parsers.txt_deck import parse_txt_deck


def parse_deck_list(payload: str, format: ImportFormat | str) -> ParseResult:
    """
    Parse a deck list payload in the given format.

    Args:
        payload: Raw deck list text
        format: "txt" or "csv"

    Returns:
        ParseResult with parsed lines and per-line errors

    Raises:
        ValueError: If the format is not supported
    """
    import_format = ImportFormat(format)

    if import_format == ImportFormat.CSV:
        return parse_csv_deck(payload)
    return parse_txt_deck(payload)
