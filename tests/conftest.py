from __future__ import annotations

import os

# Keep the import-time engine off disk; tests bind their own.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime
from typing import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import hamlet.models  # noqa: F401
from hamlet.database import Base, get_db
from hamlet.game import ledger
from hamlet.game.clock import ManualClock, get_clock
from hamlet.game.notifications import RecordingSink
from hamlet.main import app
from hamlet.models.user import User

START = datetime(2026, 1, 1, 12, 0, 0)


@pytest.fixture()
def engine() -> Iterator[Engine]:
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture()
def db(session_factory: sessionmaker) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(START)


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def make_user(db: Session, clock: ManualClock) -> Callable[..., User]:
    def _make(username: str, balance: int = 5_000) -> User:
        user = User(username=username, password_hash="x", created_at=clock.now())
        db.add(user)
        db.flush()
        ledger.open_account(db, ledger.holder_for_user(user.id), opening_balance=balance, now=clock.now())
        db.commit()
        return user

    return _make


@pytest.fixture()
def client(session_factory: sessionmaker, clock: ManualClock) -> Iterator[TestClient]:
    def _get_db() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
