import re
from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: str) -> bool:
    return EMAIL_PATTERN.fullmatch(value) is not None


class EmployeeCreate(BaseModel):
    """POST /api/employees 요청 바디

    필수 여부는 라우터에서 직접 검사한다 (422 대신 정해진 400 메시지로 응답하기 위해).
    """
    name: str | None = None
    email: str | None = None
    position: str | None = None


class EmployeeUpdate(BaseModel):
    """PUT /api/employees/{id} 요청 바디

    보낸 필드만 반영 (부분 업데이트). id, createdAt 같은 필드가 들어오면 에러.
    """
    model_config = ConfigDict(extra="forbid")  # 정의되지 않은 필드가 들어오면 400

    name: str | None = None
    email: str | None = None
    position: str | None = None


class Employee(BaseModel):
    """응답용 스키마"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    position: str
    # ORM 속성은 created_at, JSON 키는 createdAt
    created_at: datetime = Field(
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )
