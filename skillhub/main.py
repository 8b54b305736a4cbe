import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skillhub.config import EVENT_SOURCE_HTTP, Settings
from skillhub.crud.roster_store import RosterStore
from skillhub.integrations.event_directory import EventDirectory, HttpEventDirectory, SqlEventDirectory
from skillhub.logging_config import setup_logging
from skillhub.routers.participations import router as participations_router
from skillhub.routers.participations import users_router
from skillhub.services.participation_service import ParticipationService

logger = logging.getLogger(__name__)


def _run_alembic_upgrade(database_url: str) -> None:
    """앱 기동 시 DB 마이그레이션 적용 (events, participations 테이블)."""
    from alembic import command
    from alembic.config import Config

    root = Path(__file__).resolve().parent.parent
    cfg = Config(str(root / "alembic.ini"))
    cfg.set_main_option("script_location", str(root / "alembic"))
    cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    cfg.attributes["embedded"] = True
    command.upgrade(cfg, "head")


def _build_event_directory(settings: Settings, store: RosterStore) -> EventDirectory:
    if settings.event_source == EVENT_SOURCE_HTTP:
        return HttpEventDirectory(settings.events_api_base_url, timeout=settings.events_api_timeout_sec)
    return SqlEventDirectory(store.session_factory)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    FastAPI 앱 생성.

    RosterStore 는 startup 에서 만들고 shutdown 에서 정리한다 (모듈 전역 커넥션 없음).
    """
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="SkillHub Participation API",
        description="이벤트 참가 관리 (정원 기반 참가/취소, 참가 상태, 참가자 명단)",
        version="0.1.0",
    )
    app.state.settings = settings

    @app.on_event("startup")
    def _startup() -> None:
        if settings.run_migrations:
            try:
                _run_alembic_upgrade(settings.database_url)
            except Exception:
                # DB 미기동 등으로 실패해도 앱은 기동. 요청은 503 으로 응답하게 된다.
                logger.exception("Alembic upgrade failed")

        store = RosterStore(settings.database_url, timeout=settings.store_timeout_sec).init()
        events = _build_event_directory(settings, store)
        app.state.roster_store = store
        app.state.event_directory = events
        app.state.participation_service = ParticipationService(store, events)
        logger.info("Participation service started (event source: %s)", settings.event_source)

    @app.on_event("shutdown")
    def _shutdown() -> None:
        events = getattr(app.state, "event_directory", None)
        if isinstance(events, HttpEventDirectory):
            events.close()
        store = getattr(app.state, "roster_store", None)
        if store is not None:
            store.shutdown()
        app.state.participation_service = None

    app.include_router(participations_router)
    app.include_router(users_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["Health"])
    def health_check() -> dict:
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("skillhub.main:app", host="0.0.0.0", port=8000, reload=True)
