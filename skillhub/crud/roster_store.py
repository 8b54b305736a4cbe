# 참가자 명단 저장소 (RosterStore). (event_id, user_id) 유니크 제약으로 중복 참가를 원자적으로 차단
import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, List, Optional

from sqlalchemy import delete, func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker

from skillhub.database import build_engine, build_session_factory, timeout_ms
from skillhub.models.base import Base
from skillhub.models.participation import Participation, ParticipationStatus
from skillhub.services.errors import TransientError

logger = logging.getLogger(__name__)


class InsertOutcome(str, Enum):
    INSERTED = "inserted"
    ALREADY_EXISTS = "already_exists"


class RemoveOutcome(str, Enum):
    REMOVED = "removed"
    NOT_FOUND = "not_found"


class RosterStore:
    """
    참가 기록의 영속 저장소.

    - 모든 연산은 짧은 단일 세션/단일 레코드 연산 (다중 레코드 트랜잭션 없음).
    - 참가 인원은 캐시하지 않고 항상 count(*) 로 계산.
    - 저장소 장애(연결 끊김, 타임아웃)는 TransientError 로 올린다. ALREADY_EXISTS/NOT_FOUND 로 바꾸지 않는다.

    수명주기: RosterStore(url) → init() → ... → shutdown()
    """

    def __init__(self, database_url: str, timeout: float = 5.0):
        self.database_url = database_url
        self.timeout = timeout
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    # ---- lifecycle ----

    def init(self) -> "RosterStore":
        if self._engine is None:
            self._engine = build_engine(self.database_url, self.timeout)
            self._session_factory = build_session_factory(self._engine)
        return self

    def shutdown(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None

    def create_schema(self) -> None:
        """metadata 기준 테이블 생성 (테스트/로컬용; 운영은 Alembic)."""
        Base.metadata.create_all(self.engine)

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("RosterStore is not initialized; call init() first")
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            raise RuntimeError("RosterStore is not initialized; call init() first")
        return self._session_factory

    @contextmanager
    def _session(self, timeout: Optional[float] = None) -> Iterator[Session]:
        """세션 1개 = 연산 1개. 드라이버 장애는 TransientError 로 변환 (재시도는 하지 않음)."""
        db: Session = self.session_factory()
        try:
            if timeout is not None:
                self._apply_statement_timeout(db, timeout)
            yield db
        except (OperationalError, PoolTimeoutError) as exc:
            db.rollback()
            logger.warning("Roster store unavailable: %s", exc)
            raise TransientError() from exc
        except IntegrityError:
            db.rollback()
            raise
        except DBAPIError as exc:
            db.rollback()
            if exc.connection_invalidated:
                logger.warning("Roster store connection lost: %s", exc)
                raise TransientError() from exc
            raise
        finally:
            db.close()

    def _apply_statement_timeout(self, db: Session, timeout: float) -> None:
        # postgresql 만 호출 단위 statement_timeout 지원. 그 외(sqlite)는 엔진 생성 시의 store timeout 이 적용된다.
        if self.engine.dialect.name == "postgresql":
            db.execute(text(f"SET LOCAL statement_timeout = {timeout_ms(timeout)}"))
        else:
            logger.debug(
                "Per-call timeout %.3fs not supported on %s; using store timeout %.3fs",
                timeout,
                self.engine.dialect.name,
                self.timeout,
            )

    # ---- operations ----

    def try_insert(self, event_id: str, user_id: str, timeout: Optional[float] = None) -> InsertOutcome:
        """
        registered 상태의 참가 기록 생성 시도.

        같은 (event_id, user_id) 로 동시에 들어오면 유니크 제약 덕분에 정확히 하나만 INSERTED,
        나머지는 IntegrityError → rollback → ALREADY_EXISTS (기록 0건 남김).

        timeout: 호출 단위 상한(초). postgresql 에서만 SET LOCAL statement_timeout 으로 적용되고,
        sqlite 에서는 무시되어 생성자 timeout (busy timeout) 이 쓰인다. 초과 시 TransientError.
        """
        with self._session(timeout) as db:
            db.add(
                Participation(
                    event_id=event_id,
                    user_id=user_id,
                    status=ParticipationStatus.REGISTERED.value,
                )
            )
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                return InsertOutcome.ALREADY_EXISTS
            return InsertOutcome.INSERTED

    def count_by_event(self, event_id: str, timeout: Optional[float] = None) -> int:
        with self._session(timeout) as db:
            stmt = select(func.count(Participation.id)).where(Participation.event_id == event_id)
            return int(db.execute(stmt).scalar_one())

    def remove(self, event_id: str, user_id: str, timeout: Optional[float] = None) -> RemoveOutcome:
        """참가 기록 삭제. 없으면 NOT_FOUND (멱등)."""
        with self._session(timeout) as db:
            result = db.execute(
                delete(Participation).where(
                    Participation.event_id == event_id,
                    Participation.user_id == user_id,
                )
            )
            db.commit()
            return RemoveOutcome.REMOVED if result.rowcount else RemoveOutcome.NOT_FOUND

    def get(self, event_id: str, user_id: str, timeout: Optional[float] = None) -> Optional[Participation]:
        with self._session(timeout) as db:
            stmt = select(Participation).where(
                Participation.event_id == event_id,
                Participation.user_id == user_id,
            )
            return db.execute(stmt).scalars().first()

    def list_by_event(self, event_id: str, timeout: Optional[float] = None) -> List[Participation]:
        """이벤트 참가자 목록. 참가 시각 순 (순서는 화면 표시용)."""
        with self._session(timeout) as db:
            stmt = (
                select(Participation)
                .where(Participation.event_id == event_id)
                .order_by(Participation.created_at, Participation.id)
            )
            return list(db.execute(stmt).scalars().all())

    def list_by_user(self, user_id: str, timeout: Optional[float] = None) -> List[Participation]:
        with self._session(timeout) as db:
            stmt = (
                select(Participation)
                .where(Participation.user_id == user_id)
                .order_by(Participation.created_at.desc(), Participation.id.desc())
            )
            return list(db.execute(stmt).scalars().all())
