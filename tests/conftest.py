"""
pytest configuration and fixtures for inventory core tests.
"""
import itertools
import sys
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from models import Base, Project, Tenant, Tower, Unit  # noqa: E402

FLOOR_RISE = {"type": "fixed", "value": 100, "floor_start": 5}


@pytest.fixture
def project_root():
    """Return the project root path."""
    return PROJECT_ROOT


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of a test."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def tenant(db):
    tenant = Tenant(name="Skyline Developers", domain="skyline.example.com", settings={})
    db.add(tenant)
    db.commit()
    return tenant


@pytest.fixture
def project(db, tenant):
    project = Project(
        tenant_id=tenant.id,
        name="Harbour Heights",
        city="Mumbai",
        gst_rate=Decimal("5"),
        stamp_duty_rate=Decimal("5"),
        registration_rate=Decimal("1"),
    )
    db.add(project)
    db.commit()
    return project


@pytest.fixture
def tower(db, project):
    tower = Tower(
        project_id=project.id,
        name="Tower A",
        total_floors=30,
        premiums={
            "floor_rise": dict(FLOOR_RISE),
            "view_premium": [
                {"view": "Sea", "percentage": 5},
                {"view": "Garden", "percentage": 2},
            ],
        },
    )
    db.add(tower)
    db.commit()
    return tower


@pytest.fixture
def make_unit(db, tenant, project, tower):
    """Factory for units; defaults match the floor-12 pricing example."""
    counter = itertools.count(1)

    def _make(**overrides):
        values = {
            "tenant_id": tenant.id,
            "project_id": project.id,
            "tower_id": tower.id,
            "number": f"A-{1200 + next(counter)}",
            "unit_type": "3BHK",
            "floor": 12,
            "carpet_area": Decimal("800"),
            "built_up_area": Decimal("900"),
            "super_built_up_area": Decimal("1000"),
            "base_price": Decimal("10000"),
            "views": [],
            "premium_adjustments": [],
            "additional_charges": [],
        }
        values.update(overrides)
        unit = Unit(**values)
        db.add(unit)
        db.commit()
        return unit

    return _make


@pytest.fixture
def unit(make_unit):
    return make_unit()
