# 이벤트 조회 연동: 참가 관리에 필요한 (event_id, capacity) 스냅샷만 가져온다.

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import httpx
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import sessionmaker

from skillhub.models.event import Event
from skillhub.services.errors import InvalidEventCapacity, TransientError

logger = logging.getLogger(__name__)

EVENT_DETAIL_PATH = "/api/events/{event_id}"


@dataclass(frozen=True)
class EventCapacitySnapshot:
    """
    이벤트 정원 스냅샷 (읽기 전용, 요청마다 새로 조회).

    capacity 원본 값은 그대로 보관하고, 정원이 실제로 필요한 시점에만 capacity 로 검증한다.
    정원 데이터가 깨져 있어도 leave / 명단 조회는 막히지 않는다.
    """

    event_id: str
    raw_capacity: Any

    @property
    def capacity(self) -> int:
        return parse_capacity(self.raw_capacity)


def parse_capacity(raw: Any) -> int:
    """
    capacity 원본 값을 0 이상의 정수로 정규화.

    이벤트 문서의 capacity 는 문자열("30")로 저장되어 있다. 숫자가 아닌 값은
    비교 연산까지 흘려보내지 않고 InvalidEventCapacity 로 거절한다.
    """
    if isinstance(raw, bool):
        raise InvalidEventCapacity()
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and raw.strip().isascii() and raw.strip().isdecimal():
        value = int(raw.strip())
    else:
        raise InvalidEventCapacity()
    if value < 0:
        raise InvalidEventCapacity()
    return value


class EventDirectory(ABC):
    """이벤트 조회 인터페이스. 구현은 교체 가능해야 한다."""

    @abstractmethod
    def get_event(self, event_id: str) -> Optional[EventCapacitySnapshot]:
        """이벤트가 없으면 None."""
        ...


class SqlEventDirectory(EventDirectory):
    """같은 DB의 events 테이블에서 정원을 읽는다."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get_event(self, event_id: str) -> Optional[EventCapacitySnapshot]:
        db = self._session_factory()
        try:
            row = db.execute(select(Event.id, Event.capacity).where(Event.id == event_id)).first()
        except (OperationalError, PoolTimeoutError) as exc:
            logger.warning("Event lookup failed for %s: %s", event_id, exc)
            raise TransientError("Event lookup is temporarily unavailable") from exc
        except DBAPIError as exc:
            if exc.connection_invalidated:
                raise TransientError("Event lookup is temporarily unavailable") from exc
            raise
        finally:
            db.close()

        if row is None:
            return None
        return EventCapacitySnapshot(event_id=row.id, raw_capacity=row.capacity)


class HttpEventDirectory(EventDirectory):
    """
    이벤트 API(GET /api/events/{id})에서 정원을 읽는다.

    - 404 → None
    - 그 외 비정상 응답/네트워크 오류/타임아웃/JSON 객체가 아닌 본문 → TransientError (재시도 없음)
    """

    def __init__(self, base_url: str, timeout: float = 5.0, client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def get_event(self, event_id: str) -> Optional[EventCapacitySnapshot]:
        path = EVENT_DETAIL_PATH.format(event_id=quote(event_id, safe=""))
        url = f"{self.base_url}{path}"
        try:
            resp = self._client.get(url)
        except httpx.HTTPError as exc:
            logger.warning("Events API request failed for %s: %s", event_id, exc)
            raise TransientError("Event lookup is temporarily unavailable") from exc

        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            logger.warning("Events API returned HTTP %s for %s", resp.status_code, event_id)
            raise TransientError(f"Events API error: HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            logger.warning("Events API returned a non-JSON body for %s", event_id)
            raise TransientError("Events API returned a malformed response") from exc
        if not isinstance(data, dict):
            logger.warning("Events API returned a non-object body for %s", event_id)
            raise TransientError("Events API returned a malformed response")

        return EventCapacitySnapshot(
            event_id=str(data.get("id") or event_id),
            raw_capacity=data.get("capacity"),
        )
