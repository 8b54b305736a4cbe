# 이벤트 참가 API (join / leave / 참가 상태 / 참가자 목록)
import logging
from typing import Callable, NoReturn, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from skillhub.schemas.participation import (
    JoinLeaveBody,
    JoinResponse,
    LeaveResponse,
    ParticipantListResponse,
    ParticipantOut,
    StatusResponse,
    UserParticipationListResponse,
)
from skillhub.services.errors import ParticipationError
from skillhub.services.participation_service import ParticipationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["Participations"])
users_router = APIRouter(prefix="/users", tags=["Participations"])

T = TypeVar("T")


def get_participation_service(request: Request) -> ParticipationService:
    """앱 startup 에서 만든 ParticipationService 를 주입. 테스트는 dependency_overrides 로 교체."""
    service = getattr(request.app.state, "participation_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Participation service is not ready")
    return service


def _raise_http(e: ParticipationError) -> NoReturn:
    raise HTTPException(status_code=e.status_code, detail={"code": e.code, "message": e.message})


def _call(action: str, fn: Callable[[], T]) -> T:
    """서비스 호출 래퍼. 도메인 오류는 종류별 HTTP 로, 예상 못한 오류는 로그 후 500."""
    try:
        return fn()
    except ParticipationError as e:
        _raise_http(e)
    except Exception:
        logger.exception("Unexpected failure during %s", action)
        raise HTTPException(status_code=500, detail=f"Failed to {action}")


@router.post("/{event_id}/join", response_model=JoinResponse)
def post_join(
    event_id: str,
    body: JoinLeaveBody,
    service: ParticipationService = Depends(get_participation_service),
) -> JoinResponse:
    """이벤트 참가. 이미 참가 중/정원 초과는 400, 이벤트 없음은 404, 저장소 장애는 503."""
    result = _call("join event", lambda: service.join(event_id, body.user_id))
    return JoinResponse(participant_count=result.participant_count, capacity=result.capacity)


@router.delete("/{event_id}/leave", response_model=LeaveResponse)
def delete_leave(
    event_id: str,
    body: JoinLeaveBody,
    service: ParticipationService = Depends(get_participation_service),
) -> LeaveResponse:
    """이벤트 참가 취소. 참가 기록이 없으면 400."""
    result = _call("leave event", lambda: service.leave(event_id, body.user_id))
    return LeaveResponse(participant_count=result.participant_count)


@router.get("/{event_id}/participation-status", response_model=StatusResponse)
def get_participation_status(
    event_id: str,
    user_id: str = Query(..., min_length=1, max_length=64),
    service: ParticipationService = Depends(get_participation_service),
) -> StatusResponse:
    """참가 여부 + 현재 인원 + 정원. 참가 기록이 없어도 실패하지 않음 (is_participating=false)."""
    result = _call("get participation status", lambda: service.get_status(event_id, user_id))
    return StatusResponse(
        is_participating=result.is_participating,
        participant_count=result.participant_count,
        capacity=result.capacity,
    )


@router.get("/{event_id}/participants", response_model=ParticipantListResponse)
def get_participants(
    event_id: str,
    service: ParticipationService = Depends(get_participation_service),
) -> ParticipantListResponse:
    """주최자 화면용 참가자 명단 (참가 시각 순)."""
    roster = _call("list participants", lambda: service.list_participants(event_id))
    return ParticipantListResponse(
        participants=[ParticipantOut.from_record(p) for p in roster.participants],
        count=roster.count,
    )


@users_router.get("/{user_id}/participations", response_model=UserParticipationListResponse)
def get_user_participations(
    user_id: str,
    service: ParticipationService = Depends(get_participation_service),
) -> UserParticipationListResponse:
    """사용자의 참가 기록 (최근 참가 순)."""
    records = _call("list user participations", lambda: service.list_user_participations(user_id))
    return UserParticipationListResponse(
        participations=[ParticipantOut.from_record(p) for p in records],
        count=len(records),
    )
