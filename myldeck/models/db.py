"""
SQLAlchemy ORM models for persistent storage.

The catalog (editions, cards, printings) and format configuration are
read by the engine's callers; deck versions are written by them. The
validation core itself never touches these models.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class EditionDB(Base):
    """A card edition (set)."""

    __tablename__ = "editions"

    edition_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    code: Mapped[str | None] = mapped_column(String(32), nullable=True)
    release_order: Mapped[int] = mapped_column(Integer, default=0)
    block_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    def __repr__(self) -> str:
        return f"<EditionDB(id={self.edition_id}, name={self.name})>"


class CardDB(Base):
    """
    A card, independent of printing.

    normalized_name is written with normalize_card_name at ingestion so that
    import lookups and catalog names agree.
    """

    __tablename__ = "cards"

    card_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    normalized_name: Mapped[str] = mapped_column(String(255), index=True)
    card_type: Mapped[str] = mapped_column(String(64))
    cost: Mapped[int | None] = mapped_column(Integer, nullable=True)
    race: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_unique: Mapped[bool] = mapped_column(Boolean, default=False)
    has_ability: Mapped[bool] = mapped_column(Boolean, default=False)

    printings: Mapped[list["CardPrintingDB"]] = relationship(back_populates="card")

    def __repr__(self) -> str:
        return f"<CardDB(id={self.card_id}, name={self.name})>"


class CardPrintingDB(Base):
    """One printing of a card in one edition."""

    __tablename__ = "card_printings"

    printing_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    card_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("cards.card_id", ondelete="CASCADE"), index=True
    )
    edition_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("editions.edition_id", ondelete="CASCADE"), index=True
    )
    rarity: Mapped[str | None] = mapped_column(String(64), nullable=True)
    legal_status: Mapped[str] = mapped_column(String(20), default="STANDARD")
    collector_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    can_be_starting_gold: Mapped[bool] = mapped_column(Boolean, default=True)

    card: Mapped["CardDB"] = relationship(back_populates="printings")
    edition: Mapped["EditionDB"] = relationship()

    def __repr__(self) -> str:
        return f"<CardPrintingDB(id={self.printing_id}, card={self.card_id})>"


class FormatDB(Base):
    """
    A format (named rule configuration).

    params holds the scalar rules: deck_size, default_card_limit,
    starting_gold_required, discontinued_severity, starting_gold_type,
    allowed_block_ids, allowed_edition_ids, allowed_races.
    """

    __tablename__ = "formats"

    format_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    params: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    card_limits: Mapped[list["FormatCardLimitDB"]] = relationship(
        back_populates="format", cascade="all, delete-orphan"
    )
    type_quotas: Mapped[list["FormatTypeQuotaDB"]] = relationship(
        back_populates="format", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<FormatDB(id={self.format_id}, name={self.name})>"


class FormatCardLimitDB(Base):
    """Per-card copy limit override (0 = banned)."""

    __tablename__ = "format_card_limits"
    __table_args__ = (UniqueConstraint("format_id", "card_id", name="uq_format_card_limit"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    format_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("formats.format_id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(String(64), index=True)
    max_qty: Mapped[int] = mapped_column(Integer)

    format: Mapped["FormatDB"] = relationship(back_populates="card_limits")


class FormatTypeQuotaDB(Base):
    """Min/max card count for one card type in a format."""

    __tablename__ = "format_type_quotas"
    __table_args__ = (UniqueConstraint("format_id", "card_type", name="uq_format_type_quota"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    format_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("formats.format_id", ondelete="CASCADE"), index=True
    )
    card_type: Mapped[str] = mapped_column(String(64))
    min_qty: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_qty: Mapped[int | None] = mapped_column(Integer, nullable=True)
    severity: Mapped[str] = mapped_column(String(10), default="BLOCK")

    format: Mapped["FormatDB"] = relationship(back_populates="type_quotas")


class DeckVersionDB(Base):
    """
    An immutable snapshot of a deck, stored with its validation verdict.
    """

    __tablename__ = "deck_versions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_name: Mapped[str] = mapped_column(String(255))
    format_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("formats.format_id"), index=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_valid: Mapped[bool] = mapped_column(Boolean, default=False)
    validation: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    cards: Mapped[list["DeckVersionCardDB"]] = relationship(
        back_populates="version",
        cascade="all, delete-orphan",
        order_by="DeckVersionCardDB.position",
    )

    def __repr__(self) -> str:
        return f"<DeckVersionDB(id={self.id}, deck={self.deck_name})>"


class DeckVersionCardDB(Base):
    """One entry of a deck version, in deck order."""

    __tablename__ = "deck_version_cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    version_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("deck_versions.id", ondelete="CASCADE"), index=True
    )
    printing_id: Mapped[str] = mapped_column(String(64), ForeignKey("card_printings.printing_id"))
    position: Mapped[int] = mapped_column(Integer, default=0)
    qty: Mapped[int] = mapped_column(Integer)
    is_starting_gold: Mapped[bool] = mapped_column(Boolean, default=False)
    is_key_card: Mapped[bool] = mapped_column(Boolean, default=False)

    version: Mapped["DeckVersionDB"] = relationship(back_populates="cards")

    def __repr__(self) -> str:
        return f"<DeckVersionCardDB(printing={self.printing_id}, qty={self.qty})>"
