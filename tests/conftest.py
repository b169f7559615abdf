import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from myldeck.db.database import get_session
from myldeck.db.operations import add_catalog_printing, upsert_format
from myldeck.main import app
from myldeck.models.card import CardPrintingRef, LegalStatus
from myldeck.models.db import Base
from myldeck.models.format_rules import FormatRuleSet, TypeQuota
from myldeck.models.validation import Severity

CATALOG = (
    CardPrintingRef(
        printing_id="p-oro-es",
        card_id="c-oro",
        card_name="Oro Básico",
        edition_id="ed-es",
        edition_name="Espada Sagrada",
        card_type="Oro",
        rarity="Común",
        edition_code="ES",
        edition_release_order=1,
    ),
    CardPrintingRef(
        printing_id="p-oro-mg",
        card_id="c-oro",
        card_name="Oro Básico",
        edition_id="ed-mg",
        edition_name="Mundo Gótico",
        card_type="Oro",
        rarity="Común",
        edition_code="MG",
        edition_release_order=2,
    ),
    CardPrintingRef(
        printing_id="p-arturo-es",
        card_id="c-arturo",
        card_name="Arturo",
        edition_id="ed-es",
        edition_name="Espada Sagrada",
        card_type="Aliado",
        cost=3,
        race="Caballero",
        rarity="Real",
        edition_code="ES",
        edition_release_order=1,
    ),
    CardPrintingRef(
        printing_id="p-excalibur-es",
        card_id="c-excalibur",
        card_name="Excalibur",
        edition_id="ed-es",
        edition_name="Espada Sagrada",
        card_type="Arma",
        cost=2,
        rarity="Ultra Real",
        legal_status=LegalStatus.DISCONTINUED,
        edition_code="ES",
        edition_release_order=1,
    ),
    CardPrintingRef(
        printing_id="p-sombra-mg",
        card_id="c-sombra",
        card_name="Sombra Nocturna",
        edition_id="ed-mg",
        edition_name="Mundo Gótico",
        card_type="Aliado",
        cost=2,
        race="Sombra",
        rarity="Cortesano",
        edition_code="MG",
        edition_release_order=2,
    ),
)

# Small format so API tests can build complete decks by hand
TEST_FORMAT = FormatRuleSet(
    format_id="mini",
    deck_size=6,
    card_limits={"c-excalibur": 1},
    type_quotas=(TypeQuota(card_type="Arma", maximum=2),),
)


@pytest.fixture
def catalog() -> tuple[CardPrintingRef, ...]:
    """Printings seeded into the test catalog."""
    return CATALOG


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def seeded_db(async_engine):
    """Seed the catalog and the "mini" format."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        for printing in CATALOG:
            await add_catalog_printing(session, printing)
        await upsert_format(session, TEST_FORMAT, name="Mini Racial")
        await session.commit()
    return async_engine


@pytest.fixture
async def client(async_engine):
    """Provide an async test client with overridden database session."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_txt_export() -> str:
    """A TXT deck list as produced by the exporter."""
    return """=== Caballeros ===
Formato: Mini Racial
Cartas: 4
Estado: INVÁLIDO

ERRORES DE VALIDACIÓN:
  - Deck must have exactly 6 cards: 3 missing.

Exportado: 2026-01-01T00:00:00+00:00

==================================================

Aliado:
  3x Arturo [Espada Sagrada]

Oro:
  1x Oro Básico [Mundo Gótico] ⭐
"""


@pytest.fixture
def strict_discontinued_rules() -> FormatRuleSet:
    """Rule set that blocks discontinued printings."""
    return FormatRuleSet(format_id="strict", discontinued_severity=Severity.BLOCK)
