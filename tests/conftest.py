from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from fieldflow.adapters.sqlalchemy.migrations import upgrade_head
from fieldflow.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyEnrichmentUnitOfWork,
    SqlAlchemyFlowMapUnitOfWork,
    shutdown,
    startup,
)

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture(autouse=True)
def _clear_fieldflow_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("FIELDFLOW_AUTHORITY_RULE", "FIELDFLOW_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_started(sqlite_engine: Engine) -> Iterator[Engine]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield sqlite_engine
    finally:
        shutdown()


@pytest.fixture
def enrichment_unit_of_work(
    sqlite_started: Engine,
) -> Callable[[], SqlAlchemyEnrichmentUnitOfWork]:
    def factory() -> SqlAlchemyEnrichmentUnitOfWork:
        return SqlAlchemyEnrichmentUnitOfWork()

    return factory


@pytest.fixture
def flow_map_unit_of_work(
    sqlite_started: Engine,
) -> Callable[[], SqlAlchemyFlowMapUnitOfWork]:
    def factory() -> SqlAlchemyFlowMapUnitOfWork:
        return SqlAlchemyFlowMapUnitOfWork()

    return factory
