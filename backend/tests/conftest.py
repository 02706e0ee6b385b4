"""
Pytest configuration and fixtures for the Bengkel Manager service tests.

Le sessioni database sono mock (AsyncMock): i test verificano la logica
dei service e il confine transazionale (flush/commit/rollback), non SQL.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession


# ============================================================
# Fixtures per AsyncSession Mock
# ============================================================


@pytest.fixture
def mock_db():
    """Crea un mock di AsyncSession."""
    db = AsyncMock(spec=AsyncSession)
    db.execute = AsyncMock()
    db.add = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.flush = AsyncMock()
    db.refresh = AsyncMock()
    db.delete = AsyncMock()
    return db


def _result(scalar=None, items=None, rows=None):
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.scalar.return_value = scalar
    result.scalars.return_value.all.return_value = list(items or [])
    result.all.return_value = list(rows or [])
    return result


@pytest.fixture
def make_result():
    """
    Factory per i risultati di db.execute.

    - scalar: valore di scalar() / scalar_one_or_none()
    - items: lista restituita da scalars().all()
    - rows: lista restituita da all()
    """
    return _result


# ============================================================
# Mock dei modelli (senza sessione)
# ============================================================

NOW = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


class MockCatalogItem:
    """Mock di Service / Sparepart / Package."""
    def __init__(self, **kwargs):
        self.id = kwargs.get("id", uuid.uuid4())
        self.name = kwargs.get("name", "Ganti Oli")
        self.price = kwargs.get("price", Decimal("50000"))
        self.bundle = kwargs.get("bundle", [])


class MockBundleEntry:
    """Mock di PackageSparepart."""
    def __init__(self, sparepart, quantity=1, package_id=None):
        self.package_id = package_id or uuid.uuid4()
        self.sparepart = sparepart
        self.sparepart_id = sparepart.id if sparepart is not None else uuid.uuid4()
        self.quantity = quantity


class MockUser:
    """Mock del modello User."""
    def __init__(self, **kwargs):
        self.id = kwargs.get("id", uuid.uuid4())
        self.email = kwargs.get("email", "budi@example.com")
        self.role = kwargs.get("role", "owner")
        self.is_active = kwargs.get("is_active", True)

    @property
    def is_staff_or_owner(self):
        return self.role in ("owner", "staff")


class MockVehicle:
    """Mock del modello Vehicle."""
    def __init__(self, **kwargs):
        self.id = kwargs.get("id", uuid.uuid4())
        self.user_id = kwargs.get("user_id", uuid.uuid4())
        self.plate_number = kwargs.get("plate_number", "B 1234 XYZ")
        self.brand = kwargs.get("brand", "Honda")
        self.model = kwargs.get("model", "Beat")
        self.year = kwargs.get("year", 2020)
        self.mileage = kwargs.get("mileage", 15000)
        self.created_at = kwargs.get("created_at", NOW)
        self.updated_at = kwargs.get("updated_at", NOW)


class MockProfile:
    """Mock del modello Profile."""
    def __init__(self, **kwargs):
        self.id = kwargs.get("id", uuid.uuid4())
        self.user_id = kwargs.get("user_id", uuid.uuid4())
        self.name = kwargs.get("name", "Budi Santoso")
        self.email = kwargs.get("email", "budi@example.com")
        self.phone = kwargs.get("phone", "08123456789")
        self.address = kwargs.get("address", "Jl. Merdeka 1, Jakarta")
        self.created_at = kwargs.get("created_at", NOW)


class MockRole:
    """Mock del modello UserRole."""
    def __init__(self, user_id, role="customer"):
        self.id = uuid.uuid4()
        self.user_id = user_id
        self.role = role


@pytest.fixture
def owner_user():
    return MockUser(role="owner")


@pytest.fixture
def staff_user():
    return MockUser(role="staff")


@pytest.fixture
def customer_user():
    return MockUser(role="customer")


@pytest.fixture
def ganti_oli():
    """Servizio "Ganti Oli" a 50.000."""
    return MockCatalogItem(name="Ganti Oli", price=Decimal("50000"))


@pytest.fixture
def filter_oli():
    """Ricambio "Filter Oli" a 30.000."""
    return MockCatalogItem(name="Filter Oli", price=Decimal("30000"))


@pytest.fixture
def paket_a(filter_oli):
    """Pacchetto "Paket A" a 150.000 con un Filter Oli incluso."""
    package = MockCatalogItem(name="Paket A", price=Decimal("150000"))
    package.bundle = [MockBundleEntry(filter_oli, quantity=1, package_id=package.id)]
    return package


@pytest.fixture
def invoice_date():
    return date(2024, 5, 1)
