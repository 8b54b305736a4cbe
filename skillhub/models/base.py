from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    모든 SQLAlchemy 모델이 상속하는 Base 클래스.

    Alembic autogenerate 와 RosterStore.create_schema() 가 이 metadata 를 사용한다.
    """

    pass
