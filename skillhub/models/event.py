# Event 모델: 이벤트 관리 서비스 소유 테이블. 여기서는 정원 조회용으로 읽기만 한다.

from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from skillhub.models.base import Base


class Event(Base):
    """이벤트 테이블. capacity 는 원본 문서 형식 그대로 문자열로 저장된다 (정수 변환은 조회 시점)."""

    __tablename__ = "events"

    id = Column(String(64), primary_key=True)  # 공개 이벤트 id
    name = Column(String(200), nullable=False)
    capacity = Column(String(20), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
