"""Shared fixtures: database, sample catalog, scripted oracle and API client."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Optional, Sequence

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool
import sys
from pathlib import Path
import os


def ensure_src_on_path() -> None:
    root = Path(__file__).resolve().parent.parent
    for path in (root / "src", root):
        if str(path) not in sys.path:
            sys.path.append(str(path))


ensure_src_on_path()

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("OPENAI_API_KEY", "test-key")

from api.routers import extraction
from models import Base, get_db
from services.item_oracle import ItemOracle, get_oracle
from services.item_recognition.models import (
    ConfirmedCandidate,
    ItemCatalogEntry,
    ModelConfig,
    OracleConfirmation,
    OracleExtraction,
    RawCandidate,
    TokenUsage,
)

SAMPLE_ITEMS = [
    ItemCatalogEntry(id=1, name="Dragon platebody"),
    ItemCatalogEntry(id=2, name="Dragon chainbody"),
    ItemCatalogEntry(id=3, name="Abyssal whip"),
    ItemCatalogEntry(id=4, name="Bandos chestplate"),
    ItemCatalogEntry(id=5, name="Armadyl godsword"),
    ItemCatalogEntry(id=6, name="Rune"),
    ItemCatalogEntry(id=7, name="Gold"),
    ItemCatalogEntry(id=8, name="Dragon claws"),
    ItemCatalogEntry(id=9, name="Twisted bow"),
    ItemCatalogEntry(id=10, name="Elder maul"),
    ItemCatalogEntry(id=11, name="Dragon scimitar"),
    ItemCatalogEntry(id=12, name="Scythe of vitur"),
    ItemCatalogEntry(id=13, name="Saradomin godsword"),
    ItemCatalogEntry(id=14, name="Dragon (or)"),
    ItemCatalogEntry(id=15, name="Abyssal dagger"),
]

DRAGON_UPDATE = """
    We've made some exciting changes to dragon equipment!
    The Dragon platebody has received a significant buff to its defensive stats.
    Players can now smith Dragon chainbody at 90 Smithing.
    Dragon claws special attack now costs 45% instead of 50%.
"""

GODWARS_UPDATE = """
    The God Wars Dungeon has been updated with new mechanics.
    Bandos now drops the Bandos chestplate more frequently.
    Armadyl godsword special attack has been improved.
    The Saradomin godsword now heals 10% more.
"""

NO_ITEMS_POST = """
    This is a general game update about quality of life improvements.
    We've added new music tracks and fixed several bugs.
    The quest log interface has been redesigned.
"""


def candidate(name: str, confidence: Optional[float] = None, snippet: str = "") -> RawCandidate:
    return RawCandidate(name=name, snippet=snippet or f"... {name} ...", confidence=confidence)


def extraction_of(*names: str, usage: Optional[TokenUsage] = None) -> OracleExtraction:
    return OracleExtraction(
        candidates=[candidate(n) for n in names],
        usage=usage or TokenUsage(prompt_tokens=100, completion_tokens=20),
    )


class FakeOracle(ItemOracle):
    """Oracle that replays scripted responses; an exception in the script is raised."""

    def __init__(
        self,
        extractions: Optional[Sequence[object]] = None,
        confirmations: Optional[Sequence[object]] = None,
    ):
        self.extractions: List[object] = list(extractions or [])
        self.confirmations: List[object] = list(confirmations or [])
        self.extract_calls: List[dict] = []
        self.confirm_calls: List[dict] = []

    async def extract_candidates(self, title, text, model_config: ModelConfig, hints=None):
        self.extract_calls.append({"title": title, "text": text, "hints": list(hints or [])})
        return self._next(self.extractions, OracleExtraction(candidates=[]))

    async def confirm_candidates(self, title, text, names, model_config: ModelConfig):
        self.confirm_calls.append({"title": title, "text": text, "names": list(names)})
        return self._next(self.confirmations, OracleConfirmation(confirmed=[]))

    @staticmethod
    def _next(script: List[object], default):
        if not script:
            return default
        outcome = script.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def confirmation_of(*names: str) -> OracleConfirmation:
    return OracleConfirmation(
        confirmed=[ConfirmedCandidate(name=n, snippet=f"... {n} ...") for n in names],
        usage=TokenUsage(prompt_tokens=50, completion_tokens=5),
    )


@pytest.fixture
def sample_items() -> List[ItemCatalogEntry]:
    return list(SAMPLE_ITEMS)


@pytest.fixture(scope="function")
def db_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    connection = db_engine.connect()
    transaction = connection.begin()
    session = Session(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def fake_oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture(scope="function")
def test_app():
    @asynccontextmanager
    async def test_lifespan(app: FastAPI) -> AsyncGenerator:
        yield

    app = FastAPI(title="ItemSurge Test", version="0.1.0", lifespan=test_lifespan)
    app.include_router(extraction.router, prefix="/api/v1/extraction", tags=["extraction"])

    @app.get("/")
    async def root():
        return {"name": "ItemSurge", "version": "0.1.0", "status": "running"}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


@pytest.fixture(scope="function")
def client(db_session: Session, test_app: FastAPI, fake_oracle: FakeOracle):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    test_app.dependency_overrides[get_db] = override_get_db
    test_app.dependency_overrides[get_oracle] = lambda: fake_oracle
    with TestClient(test_app) as test_client:
        yield test_client
    test_app.dependency_overrides.clear()
