"""
Load catalog printings and format rules from a JSON file.

The catalog is owned by an external system; this job is how its export
gets into the engine's database. Can be run as a standalone script:

    python -m myldeck.jobs.load_catalog catalog.json

File layout:

    {
      "printings": [{"printing_id": "...", "card_id": "...", ...}],
      "formats": [{"format_id": "racial", "name": "Racial Edición", ...}]
    }

Loading is idempotent: existing rows are updated in place.
"""

import argparse
import asyncio
import logging
from pathlib import Path

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from myldeck.config import settings
from myldeck.db.database import get_session_factory, init_db
from myldeck.db.operations import add_catalog_printing, upsert_format
from myldeck.models.card import CardPrintingRef, LegalStatus
from myldeck.models.format_rules import FormatRuleSet, TypeQuota
from myldeck.models.validation import Severity

logger = logging.getLogger(__name__)


class CatalogPrinting(BaseModel):
    """One printing as exported by the catalog."""

    printing_id: str = Field(..., min_length=1)
    card_id: str = Field(..., min_length=1)
    card_name: str = Field(..., min_length=1)
    edition_id: str = Field(..., min_length=1)
    edition_name: str
    card_type: str
    cost: int | None = None
    race: str | None = None
    rarity: str | None = None
    legal_status: LegalStatus = LegalStatus.STANDARD
    collector_number: str | None = None
    edition_code: str | None = None
    edition_release_order: int = 0
    image_url: str | None = None
    block_id: str | None = None
    is_unique: bool = False
    has_ability: bool = False
    can_be_starting_gold: bool = True

    def to_model(self) -> CardPrintingRef:
        return CardPrintingRef(**self.model_dump())


class CatalogTypeQuota(BaseModel):
    card_type: str
    minimum: int | None = None
    maximum: int | None = None
    severity: Severity = Severity.BLOCK


class CatalogFormat(BaseModel):
    """A format and its rules. Omitted values use the configured defaults."""

    format_id: str = Field(..., min_length=1)
    name: str
    deck_size: int = Field(default_factory=lambda: settings.default_deck_size)
    default_card_limit: int = Field(default_factory=lambda: settings.default_card_limit)
    starting_gold_required: bool = Field(
        default_factory=lambda: settings.default_starting_gold_required
    )
    card_limits: dict[str, int] = Field(default_factory=dict)
    discontinued_severity: Severity = Severity.WARN
    type_quotas: list[CatalogTypeQuota] = Field(default_factory=list)
    allowed_block_ids: list[str] = Field(default_factory=list)
    allowed_edition_ids: list[str] = Field(default_factory=list)
    allowed_races: list[str] = Field(default_factory=list)
    starting_gold_type: str | None = None

    def to_rules(self) -> FormatRuleSet:
        """
        Build the rule set.

        Raises:
            FormatRulesError: If the rules are structurally invalid
            ValueError: If a type quota is invalid
        """
        return FormatRuleSet(
            format_id=self.format_id,
            deck_size=self.deck_size,
            default_card_limit=self.default_card_limit,
            starting_gold_required=self.starting_gold_required,
            card_limits=dict(self.card_limits),
            discontinued_severity=self.discontinued_severity,
            type_quotas=tuple(
                TypeQuota(
                    card_type=q.card_type,
                    minimum=q.minimum,
                    maximum=q.maximum,
                    severity=q.severity,
                )
                for q in self.type_quotas
            ),
            allowed_edition_ids=frozenset(self.allowed_edition_ids),
            allowed_races=frozenset(self.allowed_races),
            starting_gold_type=self.starting_gold_type,
            allowed_block_ids=frozenset(self.allowed_block_ids),
        )


class CatalogFile(BaseModel):
    printings: list[CatalogPrinting] = Field(default_factory=list)
    formats: list[CatalogFormat] = Field(default_factory=list)


def read_catalog_file(path: Path) -> CatalogFile:
    """
    Read and validate a catalog JSON file.

    Raises:
        pydantic.ValidationError: If the file does not match the layout
    """
    return CatalogFile.model_validate_json(path.read_text(encoding="utf-8"))


async def import_catalog(session: AsyncSession, catalog: CatalogFile) -> dict[str, int]:
    """
    Write printings and formats to the database (caller commits).

    Format rules are all checked before anything is written.

    Returns:
        Dict with the number of printings and formats written
    """
    rules = [(fmt.to_rules(), fmt.name) for fmt in catalog.formats]

    for printing in catalog.printings:
        await add_catalog_printing(session, printing.to_model())
    for rule_set, name in rules:
        await upsert_format(session, rule_set, name=name)

    return {"printings": len(catalog.printings), "formats": len(rules)}


async def run_load_catalog(path: Path) -> dict[str, int]:
    """Load a catalog file into the configured database."""
    logger.info("Loading catalog from %s...", path)
    catalog = read_catalog_file(path)

    await init_db()
    async with get_session_factory()() as session:
        counts = await import_catalog(session, catalog)
        await session.commit()

    logger.info(
        "Catalog loaded: %d printings, %d formats",
        counts["printings"],
        counts["formats"],
    )
    return counts


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Load catalog printings and formats.")
    parser.add_argument("path", type=Path, help="Catalog JSON file")
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_load_catalog(args.path))


if __name__ == "__main__":
    main()
