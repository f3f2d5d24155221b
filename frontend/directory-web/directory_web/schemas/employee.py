from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Employee(BaseModel):
    """Employee Service 응답 (GET/POST/PUT /api/employees)"""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    email: str
    position: str
    created_at: datetime = Field(alias="createdAt")

    @property
    def created_display(self) -> str:
        # 예: Jan 5, 2025
        return f"{self.created_at:%b} {self.created_at.day}, {self.created_at.year}"


class EmployeeForm(BaseModel):
    """신규 직원 폼 입력값"""
    name: str = ""
    email: str = ""
    position: str = ""

    def is_complete(self) -> bool:
        return bool(self.name and self.email and self.position)
