# 참가/취소 요청·응답 스키마

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from skillhub.models.participation import Participation

ParticipationStatusLiteral = Literal["registered", "attended", "completed", "cancelled"]


class JoinLeaveBody(BaseModel):
    """참가/취소 시 사용자 식별자. 인증 계층이 확인한 user_id 를 그대로 전달받는다."""

    user_id: str = Field(..., min_length=1, max_length=64)


class FeedbackSchema(BaseModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comment: Optional[str] = None


class ParticipantOut(BaseModel):
    """참가 기록 응답."""

    model_config = ConfigDict(from_attributes=True)

    event_id: str
    user_id: str
    status: ParticipationStatusLiteral = "registered"
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    feedback: Optional[FeedbackSchema] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Participation) -> "ParticipantOut":
        feedback = None
        if record.feedback_rating is not None or record.feedback_comment is not None:
            feedback = FeedbackSchema(rating=record.feedback_rating, comment=record.feedback_comment)
        return cls(
            event_id=record.event_id,
            user_id=record.user_id,
            status=record.status,
            check_in_time=record.check_in_time,
            check_out_time=record.check_out_time,
            feedback=feedback,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class JoinResponse(BaseModel):
    message: str = "Successfully joined the event"
    participant_count: int
    capacity: int


class LeaveResponse(BaseModel):
    message: str = "Successfully left the event"
    participant_count: int


class StatusResponse(BaseModel):
    is_participating: bool
    participant_count: int
    capacity: Optional[int] = None  # 이벤트 정원 값이 깨져 있으면 null


class ParticipantListResponse(BaseModel):
    participants: List[ParticipantOut]
    count: int


class UserParticipationListResponse(BaseModel):
    participations: List[ParticipantOut]
    count: int
