from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

# Base 클래스 (모든 모델의 부모)
Base = declarative_base()


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    SQLAlchemy Async Engine 생성.
    echo=True 이면 실행되는 SQL을 로그로 찍는다 (트러블슈팅용).
    """
    return create_async_engine(
        database_url,
        echo=echo,
        future=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
        class_=AsyncSession,
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    employees 테이블 등 SQLAlchemy 모델 기반 테이블을 생성.
    이미 있으면 아무 일도 안 함 (CREATE TABLE IF NOT EXISTS 느낌).
    """
    # 모델이 Base.metadata에 등록되도록 import
    from employee_service.models import employee  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
