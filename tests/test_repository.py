"""Test the SQLAlchemy repositories against a seeded in-memory SQLite database."""
import uuid
from decimal import Decimal

import pytest
import pytest_asyncio

from core.database import close_db, create_engine, create_session_factory, init_db, session_scope
from core.errors import RepositoryUnavailable
from patterns.domain_config import DatabaseConfig
from verticals.altars.models.db_models import ConfigurationOptionRecord, ExtraItemRecord
from verticals.altars.models.schemas import OptionKind, QuoteRequest
from verticals.altars.quotes import PricingSnapshot, compute_quote
from verticals.altars.repository import CatalogRepository, RuleRepository
from verticals.altars.seed import (
    THICKNESS_3MM,
    extra_id,
    seed_database,
    seed_pricing_rules,
    seed_snapshot,
)

SQLITE = DatabaseConfig(url="sqlite+aiosqlite:///:memory:")


@pytest_asyncio.fixture
async def engine():
    engine = create_engine(SQLITE)
    await init_db(engine)
    yield engine
    await close_db(engine)


@pytest_asyncio.fixture
async def session(engine):
    factory = create_session_factory(engine)
    async with session_scope(factory) as s:
        await seed_database(s)
    async with session_scope(factory) as s:
        yield s


@pytest.mark.asyncio
async def test_list_options_in_display_order(session):
    options = await CatalogRepository(session).list_options(OptionKind.THICKNESS)
    assert [o.value for o in options] == [Decimal("3"), Decimal("5"), Decimal("6"), Decimal("9")]
    assert options[0].id == THICKNESS_3MM
    assert all(o.kind == OptionKind.THICKNESS and o.unit == "mm" for o in options)


@pytest.mark.asyncio
async def test_unavailable_options_are_hidden(session):
    repo = CatalogRepository(session)
    row = await session.get(ConfigurationOptionRecord, uuid.UUID(THICKNESS_3MM))
    row.available = False
    await session.flush()
    options = await repo.list_options(OptionKind.THICKNESS)
    assert THICKNESS_3MM not in {o.id for o in options}


@pytest.mark.asyncio
async def test_list_active_pricing_rules(session):
    rules = await RuleRepository(session).list_active_pricing_rules()
    assert {r.id for r in rules} == {r.id for r in seed_pricing_rules()}
    small = next(r for r in rules if r.thickness_id == THICKNESS_3MM and r.height_min == 30 and r.width_max == 35)
    assert small.base_price == Decimal("250.00")
    assert small.painted_price == Decimal("350.00")


@pytest.mark.asyncio
async def test_list_active_discount_tiers(session):
    tiers = await RuleRepository(session).list_active_discount_tiers()
    assert [(t.min_quantity, t.percentage) for t in tiers] == [
        (5, Decimal("10.00")),
        (10, Decimal("15.00")),
    ]


@pytest.mark.asyncio
async def test_list_available_extras_filters_by_category(session):
    repo = RuleRepository(session)
    assert len(await repo.list_available_extras()) == 6
    others = await repo.list_available_extras("other")
    assert [e.name for e in others] == ["Cruz Decorativa", "Vela Decorativa"]


@pytest.mark.asyncio
async def test_unavailable_extras_are_hidden(session):
    repo = RuleRepository(session)
    row = await session.get(ExtraItemRecord, uuid.UUID(extra_id("vela")))
    assert isinstance(row, ExtraItemRecord)
    row.available = False
    await session.flush()
    names = [e.name for e in await repo.list_available_extras("other")]
    assert names == ["Cruz Decorativa"]


@pytest.mark.asyncio
async def test_database_snapshot_prices_like_seed_snapshot(session):
    catalog = CatalogRepository(session)
    rules = RuleRepository(session)
    snapshot = PricingSnapshot.build(
        await catalog.list_options(OptionKind.THICKNESS),
        await rules.list_active_pricing_rules(),
        await rules.list_active_discount_tiers(),
        await rules.list_available_extras(),
        height_options=await catalog.list_options(OptionKind.HEIGHT),
        width_options=await catalog.list_options(OptionKind.WIDTH),
    )
    request = QuoteRequest(
        thickness_id=THICKNESS_3MM,
        height=Decimal("40"),
        width=Decimal("25"),
        quantity=6,
        extras=[[extra_id("pan"), 1]],
    )
    assert compute_quote(request, snapshot) == compute_quote(request, seed_snapshot())


@pytest.mark.asyncio
async def test_missing_tables_raise_repository_unavailable():
    engine = create_engine(SQLITE)
    factory = create_session_factory(engine)
    try:
        async with factory() as s:
            with pytest.raises(RepositoryUnavailable) as exc_info:
                await RuleRepository(s).list_active_pricing_rules()
        assert exc_info.value.code == "REPOSITORY_UNAVAILABLE"
        assert exc_info.value.status_code == 503
    finally:
        await close_db(engine)
