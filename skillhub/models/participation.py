# Participation 모델: 이벤트 참가 기록 (event_id, user_id 당 1건)

from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from skillhub.models.base import Base


class ParticipationStatus(str, PyEnum):
    """참가 상태. 이 서비스는 REGISTERED 만 생성하고, 나머지는 출석 관리 도구가 전이시킨다."""

    REGISTERED = "registered"
    ATTENDED = "attended"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# DB에는 String(20)으로 저장. 앱에서는 ParticipationStatus로 비교.
STATUS_DEFAULT = ParticipationStatus.REGISTERED.value


class Participation(Base):
    """참가 테이블. (event_id, user_id) 유니크 제약이 중복 참가를 막는 최종 안전장치."""

    __tablename__ = "participations"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=STATUS_DEFAULT, server_default=STATUS_DEFAULT)
    check_in_time = Column(DateTime(timezone=True), nullable=True)
    check_out_time = Column(DateTime(timezone=True), nullable=True)
    feedback_rating = Column(Integer, nullable=True)  # 1..5
    feedback_comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_participation_event_user"),
        CheckConstraint(
            "feedback_rating IS NULL OR (feedback_rating >= 1 AND feedback_rating <= 5)",
            name="ck_participation_feedback_rating",
        ),
    )

    def __repr__(self) -> str:
        return f"<Participation event_id={self.event_id!r} user_id={self.user_id!r} status={self.status!r}>"
