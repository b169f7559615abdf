"""
Parser for the CSV deck list format.

Expected columns (first row is a header and is always skipped):
    Qty, Card Name, Edition, Type, Cost, Starting Gold[, ...]

Example:
    Qty,Card Name,Edition,Type,Cost,Starting Gold,Legal Status
    1,Oro Básico,Mundo Gótico,Oro,,Sí,STANDARD
    3,"Sombra, la Nocturna",Mundo Gótico,Aliado,2,No,STANDARD

Type and Cost are informational and ignored on import; the catalog is the
source of truth for both. Extra trailing columns are ignored.
"""

import csv
import re
from io import StringIO

from myldeck.models.imports import ParsedDeckLine, ParseLineError, ParseResult

MIN_CSV_FIELDS = 6

QUANTITY_PATTERN = re.compile(r"^\d+$")

STARTING_GOLD_VALUES = frozenset({"sí", "si"})


class CsvRowError(ValueError):
    """A single CSV record could not be parsed."""


def is_starting_gold_marker(value: str) -> bool:
    """'Sí' / 'Si' in any case mean starting gold; anything else does not."""
    return value.strip().casefold() in STARTING_GOLD_VALUES


def parse_csv_row(fields: list[str], line_number: int, original_line: str) -> ParsedDeckLine:
    """
    Convert one CSV record into a ParsedDeckLine.

    Raises:
        CsvRowError: If the record has too few fields, a bad quantity or an
            empty card name
    """
    if len(fields) < MIN_CSV_FIELDS:
        raise CsvRowError(
            f"Invalid format: expected at least {MIN_CSV_FIELDS} columns, got {len(fields)}"
        )

    qty_text, card_name, edition_hint = (f.strip() for f in fields[:3])
    starting_gold_text = fields[5]

    if not QUANTITY_PATTERN.match(qty_text) or int(qty_text) <= 0:
        raise CsvRowError(f"Invalid quantity: {qty_text}")

    if not card_name:
        raise CsvRowError("Empty card name")

    return ParsedDeckLine(
        line_number=line_number,
        original_line=original_line,
        qty=int(qty_text),
        card_name=card_name,
        edition_hint=edition_hint or None,
        is_starting_gold=is_starting_gold_marker(starting_gold_text),
    )


def parse_csv_deck(payload: str) -> ParseResult:
    """
    Parse a CSV deck list.

    Quoting follows RFC 4180: fields may be wrapped in double quotes, a
    doubled quote is a literal quote, and commas or newlines inside quotes
    are literal. Line numbers refer to the physical line a record starts on.

    Args:
        payload: Raw CSV text

    Returns:
        ParseResult with per-record lines and errors. A malformed record
        never stops the records after it from being parsed.
    """
    lines: list[ParsedDeckLine] = []
    errors: list[ParseLineError] = []

    raw_lines = payload.split("\n")
    reader = csv.reader(StringIO(payload), strict=True)
    consumed = 0  # physical lines consumed by the reader so far
    is_header = True

    while True:
        start_line = consumed + 1
        try:
            fields = next(reader)
        except StopIteration:
            break
        except csv.Error as e:
            consumed = reader.line_num
            if not is_header:
                errors.append(ParseLineError(line_number=start_line, error=f"Malformed CSV: {e}"))
            is_header = False
            continue
        consumed = reader.line_num

        # Blank records before the header do not count as the header
        if not any(f.strip() for f in fields):
            continue

        if is_header:
            is_header = False
            continue

        original_line = "\n".join(raw_lines[start_line - 1 : consumed]).strip()
        try:
            lines.append(parse_csv_row(fields, start_line, original_line))
        except CsvRowError as e:
            errors.append(ParseLineError(line_number=start_line, error=str(e)))

    return ParseResult(lines=tuple(lines), errors=tuple(errors))
