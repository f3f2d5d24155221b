from sqlalchemy import Column, DateTime, Integer, String, func

from employee_service.core.db import Base


class Employee(Base):
    __tablename__ = "employees"
    # SQLite에서 삭제된 id가 재사용되지 않도록 AUTOINCREMENT 사용
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    position = Column(String(100), nullable=False)
    created_at = Column(
        "createdAt",
        DateTime,
        server_default=func.now(),
        nullable=False,
    )
