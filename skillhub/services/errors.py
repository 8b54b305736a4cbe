# 참가 관리 오류 분류. 각 오류는 서로 다른 사용자 메시지로 이어지므로 일반 오류로 뭉개지 않는다.


class ParticipationError(Exception):
    """참가 관련 오류의 기반 클래스. 라우터가 status_code 로 HTTP 응답을 만든다."""

    code = "PARTICIPATION_ERROR"
    default_message = "Participation request failed"
    status_code = 400

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class EventNotFound(ParticipationError):
    code = "EVENT_NOT_FOUND"
    default_message = "Event not found"
    status_code = 404


class AlreadyParticipating(ParticipationError):
    code = "ALREADY_PARTICIPATING"
    default_message = "You are already participating in this event"
    status_code = 400


class EventFull(ParticipationError):
    code = "EVENT_FULL"
    default_message = "Event is at full capacity"
    status_code = 400


class NotParticipating(ParticipationError):
    code = "NOT_PARTICIPATING"
    default_message = "You are not participating in this event"
    status_code = 400


class TransientError(ParticipationError):
    """저장소/이벤트 조회 장애 (연결 끊김, 타임아웃). 호출자만 재시도 여부를 결정한다."""

    code = "TRANSIENT"
    default_message = "Participation store is temporarily unavailable"
    status_code = 503


class InvalidEventCapacity(ParticipationError):
    """이벤트의 capacity 값이 0 이상의 정수가 아님."""

    code = "INVALID_EVENT_CAPACITY"
    default_message = "Event capacity is not a valid non-negative integer"
    status_code = 422
