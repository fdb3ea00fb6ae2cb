import uuid
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from trippat.database import Base
from trippat.models import Hotel, Package, PackageHotel
from trippat.services.catalog_models import SupplierLink
from trippat.services.catalog_repository import SqlCatalogRepository
from trippat.services.errors import NotFoundError
from trippat.services.supplier_client import SupplierHotelRecord

HOTEL_ID = uuid.uuid4()
PACKAGE_ID = uuid.uuid4()


@pytest_asyncio.fixture
async def session():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as db:
        db.add(
            Hotel(
                id=HOTEL_ID,
                name="Sala Resort",
                city="Phuket",
                country_code="TH",
                star_rating=Decimal("4.0"),
                latitude=Decimal("8.132000"),
                longitude=Decimal("98.298000"),
                base_price=Decimal("250.00"),
                currency="SAR",
                amenities=["Pool"],
            )
        )
        package = Package(
            id=PACKAGE_ID,
            title="Phuket Escape",
            price_adult=Decimal("1000.00"),
            discount_type="percentage",
            discount_value=Decimal("10"),
            currency="SAR",
        )
        package.hotel_stays = [
            PackageHotel(hotel_id=HOTEL_ID, nights=2, check_in_day=3),
            PackageHotel(hotel_id=HOTEL_ID, nights=2, check_in_day=1, price_per_night=Decimal("300.00")),
        ]
        db.add(package)
        await db.commit()
        # Force reads through the database so ordering and type mapping are exercised
        db.expunge_all()
        yield db

    await engine.dispose()


@pytest.mark.asyncio
async def test_get_package_maps_stays_in_day_order(session):
    repo = SqlCatalogRepository(session)

    package = await repo.get_package(str(PACKAGE_ID))

    assert package.title == "Phuket Escape"
    assert package.price_adult == 1000
    assert package.discount_type == "percentage"
    assert [s.check_in_day_offset for s in package.hotel_stays] == [1, 3]
    assert package.hotel_stays[0].static_price_per_night == 300
    assert package.hotel_stays[1].static_price_per_night is None


@pytest.mark.asyncio
async def test_unknown_or_malformed_ids_return_none(session):
    repo = SqlCatalogRepository(session)

    assert await repo.get_package(str(uuid.uuid4())) is None
    assert await repo.get_hotel("not-a-uuid") is None


@pytest.mark.asyncio
async def test_hotel_round_trips_supplier_link(session):
    repo = SqlCatalogRepository(session)
    hotel = await repo.get_hotel(str(HOTEL_ID))

    assert hotel.star_rating == 4.0
    assert hotel.location.coordinates.latitude == pytest.approx(8.132)
    assert not hotel.supplier_link.is_linked

    hotel.supplier_link = SupplierLink(
        is_linked=True,
        supplier_hotel_code="1001",
        live_pricing_enabled=True,
        sync_status="synced",
        synced_fields=["description"],
    )
    hotel.description = "Beachfront"
    await repo.save_hotel(hotel)

    reloaded = await repo.get_hotel(str(HOTEL_ID))
    assert reloaded.description == "Beachfront"
    assert reloaded.supplier_link.live_pricing_ready
    assert reloaded.supplier_link.synced_fields == ["description"]


@pytest.mark.asyncio
async def test_save_unknown_hotel(session):
    repo = SqlCatalogRepository(session)
    hotel = await repo.get_hotel(str(HOTEL_ID))
    hotel.id = str(uuid.uuid4())

    with pytest.raises(NotFoundError):
        await repo.save_hotel(hotel)


@pytest.mark.asyncio
async def test_supplier_cache_upsert(session):
    repo = SqlCatalogRepository(session)

    await repo.upsert_supplier_hotel(SupplierHotelRecord(supplier_code="1001", name="Sala"))
    await repo.upsert_supplier_hotel(SupplierHotelRecord(supplier_code="1001", name="Sala Phuket"))

    cached = await repo.get_supplier_hotel("1001")
    assert cached["name"] == "Sala Phuket"
    assert await repo.get_supplier_hotel("9999") is None
