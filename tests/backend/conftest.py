from datetime import time
from types import SimpleNamespace

import pytest

from backend.core.config import Settings
from backend.database import build_engine, build_session_factory, ensure_schema
from backend.scheduling.resolver import SchedulingService


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f'sqlite:///{tmp_path / "scheduler.db"}',
        jwt_secret_key='test-secret',
        static_tokens=['static-token'],
    )


@pytest.fixture
def engine(settings):
    engine = build_engine(settings)
    ensure_schema(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def service(session_factory, settings) -> SchedulingService:
    return SchedulingService(session_factory, settings)


def make_rule(
    day_of_week: int = 1,
    start: time = time(9, 0),
    end: time = time(10, 0),
    slot_length_minutes: int = 30,
    available: bool = True,
    rule_id: int = 1,
):
    return SimpleNamespace(
        id=rule_id,
        day_of_week=day_of_week,
        start_time=start,
        end_time=end,
        slot_length_minutes=slot_length_minutes,
        available=available,
    )


@pytest.fixture
def rule_factory():
    return make_rule
