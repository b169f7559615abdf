from myldeck.parsers.csv_deck import parse_csv_deck
from myldeck.parsers.deck_list import parse_deck_list
from myldeck.parsers.txt_deck import parse_txt_deck

__all__ = [
    "parse_csv_deck",
    "parse_deck_list",
    "parse_txt_deck",
]
