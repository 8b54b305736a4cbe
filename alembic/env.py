import os
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool

from skillhub.models.base import Base
from skillhub.models.event import Event  # noqa: F401 — 테이블 메타데이터 등록용
from skillhub.models.participation import Participation  # noqa: F401

load_dotenv()

config = context.config

# 앱 기동 시에는 create_app() 이 url 을 직접 넣고 로깅도 앱 설정을 유지한다 (embedded=True).
# CLI 실행 시에는 DATABASE_URL 환경 변수가 alembic.ini 값보다 우선.
if not config.attributes.get("embedded", False):
    if os.getenv("DATABASE_URL"):
        config.set_main_option("sqlalchemy.url", os.environ["DATABASE_URL"])
    if config.config_file_name is not None:
        fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
