"""Shared fixtures for the notification dispatch tests."""

from __future__ import annotations

import os
import sys
import tempfile
from concurrent.futures import Executor, Future
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

TEST_DB_PATH = Path(tempfile.gettempdir()) / "notification_dispatch_test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.application.use_cases.notifications import NotificationDispatchService  # noqa: E402
from app.infrastructure import models  # noqa: E402,F401
from app.infrastructure.database import Base  # noqa: E402
from app.infrastructure.models import NotificationModel  # noqa: E402


class InlineExecutor(Executor):
    """Run submitted callables immediately on the calling thread."""

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as exc:  # pragma: no cover - surfaced through the future
            future.set_exception(exc)
        return future


class FakeChannel:
    """Channel double whose publish futures are resolved by the test."""

    def __init__(self) -> None:
        self.messages = []
        self.futures: list[Future] = []

    def publish(self, message):
        future: Future = Future()
        self.messages.append(message)
        self.futures.append(future)
        return future

    def succeed(self, index: int = -1) -> None:
        self.futures[index].set_result(1)

    def fail(self, cause: BaseException, index: int = -1) -> None:
        self.futures[index].set_exception(cause)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture()
def service(session_factory, channel) -> NotificationDispatchService:
    return NotificationDispatchService(
        session_factory,
        channel,
        topic_prefix="notifications",
        executor=InlineExecutor(),
    )


@pytest.fixture()
def count_records(session_factory):
    def _count() -> int:
        session = session_factory()
        try:
            return session.query(NotificationModel).count()
        finally:
            session.close()

    return _count
