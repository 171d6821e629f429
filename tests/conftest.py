from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "backend"))
os.environ.setdefault("DICTIONARY_DATABASE_DSN", "sqlite://")

from fastapi.testclient import TestClient  # noqa: E402

from dictionary_admin.database import create_db_engine, create_session_factory  # noqa: E402
from dictionary_admin.infrastructure.database.dictionary_store import SqlDictionaryStore  # noqa: E402
from dictionary_admin.infrastructure.database.tables import bootstrap_database  # noqa: E402
from dictionary_admin.main import app, dictionary_service_dependency  # noqa: E402
from dictionary_admin.services.dictionary import DictionaryTreeService  # noqa: E402


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    bootstrap_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def store(session_factory) -> SqlDictionaryStore:
    store = SqlDictionaryStore(session_factory)
    store.create_language(code="en", is_default=True)
    store.create_language(code="ru")
    return store


@pytest.fixture
def service(store: SqlDictionaryStore) -> DictionaryTreeService:
    return DictionaryTreeService(store)


@pytest.fixture
def client(service: DictionaryTreeService):
    app.dependency_overrides[dictionary_service_dependency] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
