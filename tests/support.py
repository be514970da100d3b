"""Shared fixtures for the test modules."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lims.database import init_db
from lims.models.component import ComponentCategory
from lims.repositories.memory import InMemoryRepository
from lims.repositories.sql import SqlAlchemyRepository
from lims.schemas.component import ComponentRecord

T0 = datetime(2024, 12, 31, 12, 0, tzinfo=timezone.utc)


def memory_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    return engine


def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_component(component_id: str = "1", **overrides) -> ComponentRecord:
    fields = {
        "id": component_id,
        "name": f"Component {component_id}",
        "manufacturer": "Generic",
        "part_number": f"PN-{component_id}",
        "description": "",
        "category": ComponentCategory.OTHER,
        "location": "A1",
        "unit_price": Decimal("0"),
        "quantity": 0,
        "critical_low_threshold": 0,
        "created_at": datetime(2024, 1, 15, 8, 30, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return ComponentRecord(**fields)


def seed(repo, component_id: str = "1", **overrides) -> ComponentRecord:
    """Store a component directly, bypassing the catalog service and the ledger."""
    with repo.transaction():
        return repo.save_component(make_component(component_id, **overrides))


class RepositoryFactory:
    """Mixin: build one repository per test, in memory or on SQLite."""

    backend = "memory"

    def make_repo(self):
        if self.backend == "memory":
            return InMemoryRepository()
        self.engine = memory_engine()
        self.session = session_factory(self.engine)()
        self.addCleanup(self.engine.dispose)
        self.addCleanup(self.session.close)
        return SqlAlchemyRepository(self.session)
