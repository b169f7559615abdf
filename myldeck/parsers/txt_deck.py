"""
Parser for the plain-text deck list format.

Format, one card per line:
    <quantity>x <card name> [<edition>]

Example:
    1x Oro Básico [Mundo Gótico] ⭐
    3x Sombra Nocturna [Mundo Gótico]
    2x Espada de Fuego

A star marker anywhere on the line flags the starting gold card. Header and
section lines produced by the TXT exporter are skipped, so an exported deck
can be imported back.
"""

import re

from myldeck.models.imports import ParsedDeckLine, ParseLineError, ParseResult

# Pattern: "3x Sombra Nocturna [Mundo Gótico]" or "2x Espada de Fuego"
# Groups: (quantity, card_name, edition_hint)
TXT_LINE_PATTERN = re.compile(r"^(\d+)x\s+(.+?)(?:\s+\[([^\]]+)\])?$")

STARTING_GOLD_MARKERS = ("⭐", "★")

# Lines starting with any of these are export headers, not cards
SKIPPED_PREFIXES = (
    "=",
    "#",
    "-",
    "Formato:",
    "Cartas:",
    "Estado:",
    "Exportado:",
    "ERRORES",
    "ADVERTENCIAS",
)


class TxtLineError(ValueError):
    """A single TXT line could not be parsed."""


def is_skipped_line(line: str) -> bool:
    """True for blank, comment, section and export-header lines."""
    if not line:
        return True
    if line.endswith(":"):
        return True
    return line.startswith(SKIPPED_PREFIXES)


def parse_txt_line(line: str, line_number: int) -> ParsedDeckLine:
    """
    Parse a single non-skipped TXT line.

    Raises:
        TxtLineError: If the line does not match the grammar, the quantity is
            not positive or the card name is empty
    """
    is_starting_gold = any(marker in line for marker in STARTING_GOLD_MARKERS)
    clean_line = line
    for marker in STARTING_GOLD_MARKERS:
        clean_line = clean_line.replace(marker, "")
    clean_line = clean_line.strip()

    match = TXT_LINE_PATTERN.match(clean_line)
    if not match:
        raise TxtLineError('Invalid format: expected "Nx Card Name [Edition]"')

    qty_text, card_name, edition_hint = match.groups()

    qty = int(qty_text)
    if qty <= 0:
        raise TxtLineError(f"Invalid quantity: {qty_text}")

    card_name = card_name.strip()
    if not card_name:
        raise TxtLineError("Empty card name")

    return ParsedDeckLine(
        line_number=line_number,
        original_line=line,
        qty=qty,
        card_name=card_name,
        edition_hint=edition_hint.strip() if edition_hint and edition_hint.strip() else None,
        is_starting_gold=is_starting_gold,
    )


def parse_txt_deck(payload: str) -> ParseResult:
    """
    Parse a TXT deck list.

    Args:
        payload: Raw deck list text

    Returns:
        ParseResult with one ParsedDeckLine per card line and one
        ParseLineError per malformed line. A malformed line never stops
        the lines after it from being parsed.
    """
    lines: list[ParsedDeckLine] = []
    errors: list[ParseLineError] = []

    for index, raw_line in enumerate(payload.split("\n")):
        line_number = index + 1
        line = raw_line.strip()

        if is_skipped_line(line):
            continue

        try:
            lines.append(parse_txt_line(line, line_number))
        except TxtLineError as e:
            errors.append(ParseLineError(line_number=line_number, error=str(e)))

    return ParseResult(lines=tuple(lines), errors=tuple(errors))
