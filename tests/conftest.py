from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.engine import Engine  # noqa: TC002

from taxonomist.adapters.sqlalchemy import SqlAlchemyCatalogStore, create_catalog_engine, shutdown
from taxonomist.adapters.sqlalchemy.migrations import upgrade_head
from taxonomist.domain.reconciliation import CatalogIndex
from tests.helpers.catalog import FakeCatalogStore

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_catalog_engine("sqlite+pysqlite:///:memory:")
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sql_store(sqlite_engine: Engine) -> SqlAlchemyCatalogStore:
    return SqlAlchemyCatalogStore(sqlite_engine)


@pytest.fixture
def fake_store() -> FakeCatalogStore:
    return FakeCatalogStore()


@pytest.fixture
def empty_index() -> CatalogIndex:
    return CatalogIndex.empty()


@pytest.fixture
def physics_payload() -> dict[str, object]:
    return {
        "qualification": "International GCSE",
        "exam_board": "CIE",
        "subject": "Physics - 0625",
        "questions": [{"topic": "Forces", "subtopic": "Motion"}],
    }


@pytest.fixture(autouse=True)
def _reset_sqlalchemy_adapter() -> Iterator[None]:
    yield
    shutdown()
