import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends, Response, status
from pydantic import ValidationError as SchemaValidationError

from employee_service.core.deps import get_store
from employee_service.core.errors import NotFoundError, ValidationError, describe_validation_errors
from employee_service.repositories.employee_store import NOT_FOUND_MESSAGE, EmployeeStore
from employee_service.schemas.employee import (
    Employee as EmployeeSchema,
    EmployeeCreate,
    EmployeeUpdate,
    is_valid_email,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/employees",
    tags=["employees"],
)

REQUIRED_FIELDS_MESSAGE = "Name, email, and position are required"
EMPTY_FIELDS_MESSAGE = "Name, email, and position cannot be empty"
INVALID_EMAIL_MESSAGE = "Invalid email format"


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


@router.get(
    "",
    response_model=List[EmployeeSchema],
)
async def list_employees(
    search: str | None = None,
    store: EmployeeStore = Depends(get_store),
):
    employees = await store.list(search)
    logger.info("Found %s employees (search=%r)", len(employees), search)
    return employees


@router.get(
    "/{employee_id}",
    response_model=EmployeeSchema,
)
async def get_employee(
    employee_id: int,
    store: EmployeeStore = Depends(get_store),
):
    return await store.get(employee_id)


@router.post(
    "",
    response_model=EmployeeSchema,
    status_code=status.HTTP_201_CREATED,
)
async def create_employee(
    payload: EmployeeCreate | None = None,
    store: EmployeeStore = Depends(get_store),
):
    # 바디가 아예 없으면 필드 누락과 같게 취급
    if payload is None:
        payload = EmployeeCreate()

    if _is_blank(payload.name) or _is_blank(payload.email) or _is_blank(payload.position):
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)

    if not is_valid_email(payload.email):
        raise ValidationError(INVALID_EMAIL_MESSAGE)

    employee = await store.insert(payload.name, payload.email, payload.position)
    logger.info("Employee created: id=%s email=%s", employee.id, employee.email)
    return employee


@router.put(
    "/{employee_id}",
    response_model=EmployeeSchema,
)
async def update_employee(
    employee_id: int,
    payload: Any = Body(None),
    store: EmployeeStore = Depends(get_store),
):
    # 없는 id면 바디 내용과 상관없이 404
    await store.get(employee_id)

    # 바디 검사는 row가 있을 때만 (보낸 필드만, 부분 업데이트)
    try:
        update = EmployeeUpdate.model_validate({} if payload is None else payload)
    except SchemaValidationError as exc:
        raise ValidationError(describe_validation_errors(exc.errors()))
    fields = update.model_dump(exclude_unset=True)

    if any(_is_blank(value) for value in fields.values()):
        raise ValidationError(EMPTY_FIELDS_MESSAGE)

    if "email" in fields and not is_valid_email(fields["email"]):
        raise ValidationError(INVALID_EMAIL_MESSAGE)

    employee = await store.update(employee_id, fields)
    logger.info("Employee updated: id=%s fields=%s", employee_id, sorted(fields))
    return employee


@router.delete(
    "/{employee_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_employee(
    employee_id: int,
    store: EmployeeStore = Depends(get_store),
):
    deleted = await store.delete(employee_id)
    if not deleted:
        raise NotFoundError(NOT_FOUND_MESSAGE)

    logger.info("Employee deleted: id=%s", employee_id)
    # 204 No Content → 바디 없음
    return Response(status_code=status.HTTP_204_NO_CONTENT)
