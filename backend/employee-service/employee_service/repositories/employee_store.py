"""Employee store: employees 테이블에 대한 CRUD.

라우터는 전역 세션 대신 앱 시작 시 만든 EmployeeStore 인스턴스를 주입받아 사용한다.
"""
import logging
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from employee_service.core.config import Settings
from employee_service.core.db import create_engine, create_session_factory, init_db
from employee_service.core.errors import ConflictError, NotFoundError
from employee_service.models.employee import Employee as EmployeeModel
from employee_service.schemas.employee import Employee

logger = logging.getLogger(__name__)

SAMPLE_EMPLOYEES = [
    ("John Doe", "john.doe@company.com", "Software Engineer"),
    ("Jane Smith", "jane.smith@company.com", "Product Manager"),
    ("Mike Johnson", "mike.johnson@company.com", "Designer"),
]

DUPLICATE_EMAIL_MESSAGE = "Email already exists"
NOT_FOUND_MESSAGE = "Employee not found"

UPDATABLE_FIELDS = ("name", "email", "position")


class EmployeeStore:
    def __init__(self, engine: AsyncEngine, seed_sample_data: bool = False) -> None:
        self._engine = engine
        self._sessions = create_session_factory(engine)
        self._seed_sample_data = seed_sample_data

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmployeeStore":
        engine = create_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
        return cls(engine, seed_sample_data=settings.SEED_SAMPLE_DATA)

    async def open(self) -> None:
        await init_db(self._engine)
        logger.info("Employees table ready (%s)", self._engine.url.render_as_string(hide_password=True))

        if self._seed_sample_data and await self.count() == 0:
            logger.info("Adding sample employees...")
            for name, email, position in SAMPLE_EMPLOYEES:
                await self.insert(name, email, position)
            logger.info("Sample employees added")

    async def close(self) -> None:
        await self._engine.dispose()
        logger.info("Database connections closed")

    async def count(self) -> int:
        async with self._sessions() as session:
            result = await session.execute(select(func.count()).select_from(EmployeeModel))
            return result.scalar_one()

    async def list(self, search: str | None = None) -> list[Employee]:
        """
        전체 직원 목록, search가 있으면 이름에 search가 포함된 직원만.
        최근 생성순 (같은 시각이면 id 큰 순).
        """
        stmt = select(EmployeeModel)
        if search:
            stmt = stmt.where(EmployeeModel.name.contains(search, autoescape=True))
        stmt = stmt.order_by(EmployeeModel.created_at.desc(), EmployeeModel.id.desc())

        async with self._sessions() as session:
            result = await session.execute(stmt)
            return [Employee.model_validate(row) for row in result.scalars().all()]

    async def get(self, employee_id: int) -> Employee:
        async with self._sessions() as session:
            employee = await session.get(EmployeeModel, employee_id)
            if employee is None:
                raise NotFoundError(NOT_FOUND_MESSAGE)
            return Employee.model_validate(employee)

    async def insert(self, name: str, email: str, position: str) -> Employee:
        async with self._sessions() as session:
            employee = EmployeeModel(name=name, email=email, position=position)
            session.add(employee)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise ConflictError(DUPLICATE_EMAIL_MESSAGE)
            # createdAt은 DB가 채우므로 다시 읽어온다
            await session.refresh(employee)
            return Employee.model_validate(employee)

    async def update(self, employee_id: int, fields: dict[str, Any]) -> Employee:
        """보낸 필드만 반영. None 값은 '보내지 않음'으로 취급."""
        async with self._sessions() as session:
            employee = await session.get(EmployeeModel, employee_id)
            if employee is None:
                raise NotFoundError(NOT_FOUND_MESSAGE)

            changes = {
                key: value
                for key, value in fields.items()
                if key in UPDATABLE_FIELDS and value is not None
            }
            if not changes:
                return Employee.model_validate(employee)

            for key, value in changes.items():
                setattr(employee, key, value)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise ConflictError(DUPLICATE_EMAIL_MESSAGE)
            await session.refresh(employee)
            return Employee.model_validate(employee)

    async def delete(self, employee_id: int) -> bool:
        """삭제된 row가 있으면 True, 없는 id면 False"""
        async with self._sessions() as session:
            result = await session.execute(
                delete(EmployeeModel).where(EmployeeModel.id == employee_id)
            )
            await session.commit()
            return result.rowcount > 0
