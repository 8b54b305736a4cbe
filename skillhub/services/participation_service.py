# 참가 서비스: 정원 기반 참가 허용(admission) 정책 + join/leave/status/list
import logging
from dataclasses import dataclass
from typing import List, Optional

from skillhub.crud.roster_store import InsertOutcome, RemoveOutcome, RosterStore
from skillhub.integrations.event_directory import EventCapacitySnapshot, EventDirectory
from skillhub.models.participation import Participation
from skillhub.services.errors import (
    AlreadyParticipating,
    EventFull,
    EventNotFound,
    InvalidEventCapacity,
    NotParticipating,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JoinResult:
    participant_count: int
    capacity: int


@dataclass(frozen=True)
class LeaveResult:
    participant_count: int


@dataclass(frozen=True)
class StatusResult:
    is_participating: bool
    participant_count: int
    capacity: Optional[int]  # 정원 데이터가 깨져 있으면 None


@dataclass(frozen=True)
class Roster:
    participants: List[Participation]
    count: int


class ParticipationService:
    """
    RosterStore 위에서 정원 제한 참가 정책을 적용.

    요청 간 메모리 상태를 두지 않으므로 여러 인스턴스를 조정 없이 띄워도 된다.
    정원은 낙관적 check-then-insert 로 판정한다:
    - 같은 사용자 중복 참가는 저장소 유니크 제약으로 항상 1건만 성공.
    - 정원 경계에서 동시에 count 검사를 통과한 join 수만큼 일시적으로 정원을 초과할 수 있다
      (초과 폭 ≤ 동시에 경쟁한 join 수). 초과가 관측되면 WARNING 로그를 남긴다.

    저장소 오류(TransientError)는 재시도하지 않고 그대로 올린다.
    """

    def __init__(self, store: RosterStore, events: EventDirectory, timeout: Optional[float] = None):
        self.store = store
        self.events = events
        self.timeout = timeout

    def _resolve_event(self, event_id: str) -> EventCapacitySnapshot:
        event = self.events.get_event(event_id)
        if event is None:
            raise EventNotFound()
        return event

    def join(self, event_id: str, user_id: str, timeout: Optional[float] = None) -> JoinResult:
        """
        이벤트 참가.

        1. 이벤트 조회 (없으면 EventNotFound)
        2. 이미 참가 중이면 AlreadyParticipating (변경 없음)
        3. count >= capacity 이면 EventFull (변경 없음)
        4. try_insert: 동시 요청에 졌으면 AlreadyParticipating, 성공하면 최신 count 반환
        """
        timeout = timeout if timeout is not None else self.timeout
        event = self._resolve_event(event_id)
        capacity = event.capacity  # 정원 검증은 join 에서만 (InvalidEventCapacity)

        if self.store.get(event_id, user_id, timeout=timeout) is not None:
            logger.debug("Join rejected (already participating): event=%s user=%s", event_id, user_id)
            raise AlreadyParticipating()

        current_count = self.store.count_by_event(event_id, timeout=timeout)
        if current_count >= capacity:
            logger.debug("Join rejected (full %s/%s): event=%s user=%s", current_count, capacity, event_id, user_id)
            raise EventFull()

        if self.store.try_insert(event_id, user_id, timeout=timeout) is InsertOutcome.ALREADY_EXISTS:
            # 같은 사용자의 동시 join 에 진 경우. 사전 검사 실패와 동일하게 취급.
            logger.debug("Join lost insert race: event=%s user=%s", event_id, user_id)
            raise AlreadyParticipating()

        participant_count = self.store.count_by_event(event_id, timeout=timeout)
        if participant_count > capacity:
            logger.warning(
                "Event %s over capacity after concurrent joins: %s/%s",
                event_id,
                participant_count,
                capacity,
            )
        logger.info("User %s joined event %s (%s/%s)", user_id, event_id, participant_count, capacity)
        return JoinResult(participant_count=participant_count, capacity=capacity)

    def leave(self, event_id: str, user_id: str, timeout: Optional[float] = None) -> LeaveResult:
        """참가 취소. 두 번째 호출은 NotParticipating (별도 카운터가 없으므로 중복 차감 없음)."""
        timeout = timeout if timeout is not None else self.timeout
        self._resolve_event(event_id)

        if self.store.remove(event_id, user_id, timeout=timeout) is RemoveOutcome.NOT_FOUND:
            raise NotParticipating()

        participant_count = self.store.count_by_event(event_id, timeout=timeout)
        logger.info("User %s left event %s (%s remaining)", user_id, event_id, participant_count)
        return LeaveResult(participant_count=participant_count)

    def get_status(self, event_id: str, user_id: str, timeout: Optional[float] = None) -> StatusResult:
        """
        참가 여부 + 현재 인원 + 정원.

        이벤트가 없을 때만 실패한다. capacity 값이 정수가 아니면 capacity=None 으로 응답하고
        참가 여부/인원은 그대로 보여준다 (정원 검증 실패는 join 에서만 오류).
        """
        timeout = timeout if timeout is not None else self.timeout
        event = self._resolve_event(event_id)
        try:
            capacity: Optional[int] = event.capacity
        except InvalidEventCapacity:
            logger.warning("Event %s has an invalid capacity %r", event_id, event.raw_capacity)
            capacity = None
        record = self.store.get(event_id, user_id, timeout=timeout)
        return StatusResult(
            is_participating=record is not None,
            participant_count=self.store.count_by_event(event_id, timeout=timeout),
            capacity=capacity,
        )

    def list_participants(self, event_id: str, timeout: Optional[float] = None) -> Roster:
        """이벤트 참가자 명단. 권한 확인은 호출자(상위 계층) 책임."""
        timeout = timeout if timeout is not None else self.timeout
        self._resolve_event(event_id)
        participants = self.store.list_by_event(event_id, timeout=timeout)
        return Roster(participants=participants, count=len(participants))

    def list_user_participations(self, user_id: str, timeout: Optional[float] = None) -> List[Participation]:
        timeout = timeout if timeout is not None else self.timeout
        return self.store.list_by_user(user_id, timeout=timeout)
