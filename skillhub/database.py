from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import sessionmaker


def timeout_ms(timeout: float) -> int:
    # postgresql 에서 statement_timeout=0 은 "제한 없음" 이므로 최소 1ms
    return max(1, int(timeout * 1000))


def _connect_args(database_url: str, timeout: float) -> Dict[str, Any]:
    """
    드라이버별 타임아웃 연결 옵션.

    - sqlite: busy timeout (잠금 대기 상한)
    - postgresql: connect_timeout + statement_timeout (쿼리 실행 상한)
    """
    backend = make_url(database_url).get_backend_name()
    if backend == "sqlite":
        return {"timeout": timeout, "check_same_thread": False}
    if backend == "postgresql":
        return {
            "connect_timeout": max(1, int(timeout)),
            "options": f"-c statement_timeout={timeout_ms(timeout)}",
        }
    return {}


def build_engine(database_url: str, timeout: float) -> Engine:
    """
    SQLAlchemy 엔진 생성. 전역 엔진은 두지 않고 RosterStore 가 수명주기를 소유한다.

    - pool_timeout: 커넥션 풀 대기도 같은 타임아웃으로 제한
    - pool_pre_ping: 끊긴 커넥션을 미리 걸러냄
    """
    kwargs: Dict[str, Any] = {
        "echo": False,
        "future": True,
        "pool_pre_ping": True,
        "connect_args": _connect_args(database_url, timeout),
    }
    if make_url(database_url).get_backend_name() != "sqlite":
        kwargs["pool_timeout"] = timeout
    return create_engine(database_url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )
