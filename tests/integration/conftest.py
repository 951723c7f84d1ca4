import pytest_asyncio
from datetime import date
from decimal import Decimal
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401
from src.depends import get_session
from src.domain.client import Client
from src.domain.exchange_rate import ExchangeRate
from src.domain.service_catalog import BillingUnit, Currency, PricingPolicy, ServiceCatalog
from src.app.use_cases.billing.billing_events import SeedSampleEvents


@pytest_asyncio.fixture(scope="function")
async def engine():
    """In-memory SQLite database, rebuilt for every test"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Create a new database session for each test"""
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session):
    """Create test client with database session override"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    # Override the session dependency to use test session
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def billing_client(db_session) -> int:
    """A client with a default warehouse; returns its id"""
    client = Client(client_code="C1", name="Client One", default_warehouse_id=3)
    db_session.add(client)
    await db_session.commit()
    return client.id


@pytest_asyncio.fixture
async def services(db_session):
    """Catalog entries for the three demo services"""
    rows = [
        ServiceCatalog(
            service_code="TH_SHIPPING",
            service_name="TH Shipping",
            billing_unit=BillingUnit.ORDER,
            pricing_policy=PricingPolicy.THB_BASED,
            default_currency=Currency.THB,
            default_rate=Decimal("120"),
        ),
        ServiceCatalog(
            service_code="TH_BOX",
            service_name="TH Box",
            billing_unit=BillingUnit.BOX,
            pricing_policy=PricingPolicy.THB_BASED,
            default_currency=Currency.THB,
            default_rate=Decimal("8"),
        ),
        ServiceCatalog(
            service_code="OUTBOUND_FEE",
            service_name="Outbound Fee",
            billing_unit=BillingUnit.SKU,
            pricing_policy=PricingPolicy.KRW_FIXED,
            default_currency=Currency.KRW,
            default_rate=Decimal("3500"),
        ),
    ]
    for row in rows:
        db_session.add(row)
    await db_session.commit()
    return [row.service_code for row in rows]


@pytest_asyncio.fixture
async def fx_rate(db_session) -> int:
    """THB/KRW 39.1234 dated 2026-01-31; returns its id"""
    rate = ExchangeRate(rate_date=date(2026, 1, 31), rate=Decimal("39.1234"))
    db_session.add(rate)
    await db_session.commit()
    return rate.id


@pytest_asyncio.fixture
async def sample_events(db_session, billing_client):
    """The three January sample events; returns their ids"""
    event_ids = []
    for event in SeedSampleEvents.sample_events(billing_client, 3, "2026-01"):
        db_session.add(event)
        await db_session.flush()
        event_ids.append(event.id)
    await db_session.commit()
    return event_ids


@pytest_asyncio.fixture
async def generate_january(db_session):
    """Runs GenerateInvoice for January 2026, invoice date 2026-02-01"""
    from src.adapter.repositories import (
        SqlAlchemyBillingEventRepository,
        SqlAlchemyClientRepository,
        SqlAlchemyExchangeRateRepository,
        SqlAlchemyInvoiceItemRepository,
        SqlAlchemyInvoiceRepository,
        SqlAlchemyInvoiceSequenceRepository,
        SqlAlchemyServiceCatalogRepository,
    )
    from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
    from src.app.use_cases.billing.dtos import GenerateInvoiceCommandDTO
    from src.app.use_cases.billing.generate_invoice import GenerateInvoice

    async def run(client_id: int, regenerate: bool = False):
        use_case = GenerateInvoice(
            uow=SqlAlchemyUnitOfWork(db_session),
            client_repo=SqlAlchemyClientRepository(db_session),
            invoice_repo=SqlAlchemyInvoiceRepository(db_session),
            item_repo=SqlAlchemyInvoiceItemRepository(db_session),
            event_repo=SqlAlchemyBillingEventRepository(db_session),
            rate_repo=SqlAlchemyExchangeRateRepository(db_session),
            sequence_repo=SqlAlchemyInvoiceSequenceRepository(db_session),
            service_repo=SqlAlchemyServiceCatalogRepository(db_session),
        )
        return await use_case.execute(
            GenerateInvoiceCommandDTO(
                client_id=client_id,
                invoice_month="2026-01",
                invoice_date=date(2026, 2, 1),
                regenerate_draft=regenerate,
                created_by=1,
            )
        )

    return run
