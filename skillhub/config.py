"""
환경 변수 기반 설정.

.env 파일이 있으면 python-dotenv 로 먼저 읽고, 나머지는 os.getenv 기본값을 사용한다.
Settings 는 create_app() 에 명시적으로 전달되며 모듈 전역 상태로 두지 않는다.
"""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

EVENT_SOURCE_DATABASE = "database"
EVENT_SOURCE_HTTP = "http"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """애플리케이션 설정."""

    # DATABASE_URL 예시:
    # postgresql+psycopg2://skillhub:skillhub@db:5432/skillhub
    database_url: str = "sqlite:///./skillhub.db"
    store_timeout_sec: float = 5.0
    event_source: str = EVENT_SOURCE_DATABASE
    events_api_base_url: str = "http://localhost:3000"
    events_api_timeout_sec: float = 5.0
    log_level: str = "INFO"
    run_migrations: bool = True
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        origins = os.getenv("CORS_ORIGINS", "*")
        settings = cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            store_timeout_sec=float(os.getenv("STORE_TIMEOUT_SEC", str(cls.store_timeout_sec))),
            event_source=os.getenv("EVENT_SOURCE", cls.event_source).strip().lower(),
            events_api_base_url=os.getenv("EVENTS_API_BASE_URL", cls.events_api_base_url),
            events_api_timeout_sec=float(os.getenv("EVENTS_API_TIMEOUT_SEC", str(cls.events_api_timeout_sec))),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            run_migrations=_env_bool("RUN_MIGRATIONS", "true"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )
        if settings.event_source not in (EVENT_SOURCE_DATABASE, EVENT_SOURCE_HTTP):
            raise ValueError(f"EVENT_SOURCE must be 'database' or 'http', got {settings.event_source!r}")
        if settings.store_timeout_sec <= 0:
            raise ValueError("STORE_TIMEOUT_SEC must be positive")
        return settings
