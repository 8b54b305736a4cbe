"""Pytest fixtures: 파일 기반 SQLite 위의 RosterStore / ParticipationService / FastAPI 앱."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import update

from skillhub.config import Settings
from skillhub.crud.roster_store import RosterStore
from skillhub.integrations.event_directory import SqlEventDirectory
from skillhub.main import create_app
from skillhub.models.event import Event
from skillhub.services.participation_service import ParticipationService


def _insert_event(store: RosterStore, event_id: str, capacity="2", name: str = "Test event") -> None:
    db = store.session_factory()
    try:
        db.add(Event(id=event_id, name=name, capacity=str(capacity)))
        db.commit()
    finally:
        db.close()


@pytest.fixture
def database_path(tmp_path):
    return tmp_path / "skillhub_test.db"


@pytest.fixture
def database_url(database_path) -> str:
    return f"sqlite:///{database_path}"


@pytest.fixture
def store(database_url):
    # busy timeout 을 넉넉히 잡아 스레드 동시성 테스트에서 잠금 대기가 실패로 보이지 않게 함
    roster = RosterStore(database_url, timeout=30.0).init()
    roster.create_schema()
    yield roster
    roster.shutdown()


@pytest.fixture
def add_event(store):
    def _add(event_id: str, capacity="2", name: str = "Test event") -> None:
        _insert_event(store, event_id, capacity=capacity, name=name)

    return _add


@pytest.fixture
def set_event_capacity(store):
    """이벤트 관리 쪽에서 capacity 값이 바뀐 상황 재현."""

    def _set(event_id: str, capacity) -> None:
        db = store.session_factory()
        try:
            db.execute(update(Event).where(Event.id == event_id).values(capacity=str(capacity)))
            db.commit()
        finally:
            db.close()

    return _set


@pytest.fixture
def service(store) -> ParticipationService:
    return ParticipationService(store, SqlEventDirectory(store.session_factory))


@pytest.fixture
def app(database_url):
    settings = Settings(database_url=database_url, run_migrations=False, store_timeout_sec=30.0)
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        app.state.roster_store.create_schema()
        yield c


@pytest.fixture
def app_event(app, client):
    """앱이 사용하는 DB에 이벤트를 추가하는 헬퍼."""

    def _add(event_id: str, capacity="2", name: str = "Test event") -> None:
        _insert_event(app.state.roster_store, event_id, capacity=capacity, name=name)

    return _add
