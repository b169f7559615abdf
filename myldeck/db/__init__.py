from myldeck.db.database import dispose_engine, get_session, init_db
from myldeck.db.operations import (
    add_catalog_printing,
    build_resolution_index,
    create_deck_version,
    deck_version_entries,
    format_to_rules,
    get_deck_version,
    get_format,
    get_format_rules,
    get_printings_by_ids,
    get_printings_by_names,
    printing_to_model,
    upsert_format,
)

__all__ = [
    "add_catalog_printing",
    "build_resolution_index",
    "create_deck_version",
    "deck_version_entries",
    "dispose_engine",
    "format_to_rules",
    "get_deck_version",
    "get_format",
    "get_format_rules",
    "get_printings_by_ids",
    "get_printings_by_names",
    "get_session",
    "init_db",
    "printing_to_model",
    "upsert_format",
]
