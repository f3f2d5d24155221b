"""직원 목록 화면 상태와 그 상태를 바꾸는 컨트롤러.

목록 재조회는 Effect가 담당한다. 검색어(dependency)가 바뀔 때만 다시 요청하고,
응답은 가장 마지막 요청 것만 반영한다 (늦게 도착한 이전 응답은 버림).
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from directory_web.core.api_client import ApiError, ApiUnavailableError, EmployeeApiClient
from directory_web.schemas.employee import Employee, EmployeeForm

logger = logging.getLogger(__name__)

FILL_ALL_FIELDS_MESSAGE = "Please fill all fields"

# 리다이렉트 URL의 ?notice= 는 이 키들만 받는다
NOTICES = {
    "added": "Employee added successfully!",
    "deleted": "Employee deleted successfully!",
    "updated": "Employee updated successfully!",
}

_UNSET = object()


class Effect:
    """
    dependency 값이 이전과 달라졌을 때만 callback을 실행한다.
    debounce > 0 이면 마지막 변경 후 그 시간만큼 기다렸다가 한 번만 실행.
    """

    def __init__(self, callback: Callable[..., Awaitable[None]], debounce: float = 0.0) -> None:
        self._callback = callback
        self._debounce = debounce
        self._deps: Any = _UNSET
        self._generation = 0

    async def sync(self, *deps: Any) -> bool:
        if deps == self._deps:
            return False
        self._deps = deps
        self._generation += 1
        generation = self._generation

        if self._debounce > 0:
            await asyncio.sleep(self._debounce)
            if generation != self._generation:
                # 기다리는 동안 더 최신 변경이 들어옴
                return False

        await self._callback(*deps)
        return True


@dataclass
class DirectoryState:
    search: str = ""
    employees: list[Employee] = field(default_factory=list)
    form: EmployeeForm = field(default_factory=EmployeeForm)
    editing: Employee | None = None
    message: str = ""
    message_kind: str = ""  # "success" | "error"
    notice: str = ""  # NOTICES 키 (성공 시)
    error_status: int = 400
    loading: bool = False

    @property
    def has_error(self) -> bool:
        return self.message_kind == "error"


class DirectoryController:
    def __init__(self, api: EmployeeApiClient, search_debounce: float = 0.0) -> None:
        self.api = api
        self.state = DirectoryState()
        self._list_effect = Effect(self._load_employees, debounce=search_debounce)
        self._latest_request = 0
        self._in_flight = 0

    @asynccontextmanager
    async def _loading(self):
        self._in_flight += 1
        self.state.loading = True
        try:
            yield
        finally:
            self._in_flight -= 1
            self.state.loading = self._in_flight > 0

    def _succeed(self, notice: str) -> None:
        self.state.notice = notice
        self.state.message = NOTICES[notice]
        self.state.message_kind = "success"

    def _fail(self, message: str, status_code: int = 400) -> None:
        self.state.message = message
        self.state.message_kind = "error"
        self.state.error_status = status_code

    def report_error(self, exc: ApiError | ApiUnavailableError) -> None:
        """
        API 에러를 화면 메시지와 응답 코드로 바꾼다.
        서버에 닿지 못하면 503, 서버가 5xx면 502, 4xx는 그대로.
        """
        if isinstance(exc, ApiUnavailableError):
            self._fail(exc.message, 503)
        elif 400 <= exc.status_code < 500:
            self._fail(exc.message, exc.status_code)
        else:
            self._fail(exc.message, 502)

    def show_notice(self, notice: str) -> None:
        """알려진 notice 키만 표시. 다른 메시지가 이미 있으면 무시."""
        if notice in NOTICES and not self.state.message:
            self._succeed(notice)

    async def mount(self, search: str = "") -> None:
        await self.set_search(search)

    async def set_search(self, text: str) -> None:
        self.state.search = text
        await self._list_effect.sync(text)

    async def refresh(self) -> None:
        await self._load_employees(self.state.search)

    async def _load_employees(self, search: str) -> None:
        self._latest_request += 1
        request_id = self._latest_request

        async with self._loading():
            try:
                employees = await self.api.list_employees(search or None)
            except (ApiError, ApiUnavailableError) as exc:
                if request_id == self._latest_request:
                    self.report_error(exc)
                return

        if request_id != self._latest_request:
            logger.debug("Discarding stale employee list (request %s, latest %s)", request_id, self._latest_request)
            return
        self.state.employees = employees

    async def submit(self, form: EmployeeForm) -> bool:
        """
        신규 직원 등록. 필드가 하나라도 비어 있으면 요청하지 않는다.
        실패하면 서버 에러 메시지를 보여주고 입력값은 유지.
        """
        self.state.form = form
        if not form.is_complete():
            self._fail(FILL_ALL_FIELDS_MESSAGE)
            return False

        async with self._loading():
            try:
                employee = await self.api.create_employee(form.name, form.email, form.position)
            except (ApiError, ApiUnavailableError) as exc:
                self.report_error(exc)
                return False

        logger.info("Employee added: id=%s", employee.id)
        self.state.form = EmployeeForm()
        self._succeed("added")
        await self.refresh()
        return True

    async def delete(self, employee_id: int, confirmed: bool) -> bool:
        """사용자가 확인(confirmed)한 경우에만 삭제 요청을 보낸다."""
        if not confirmed:
            return False

        async with self._loading():
            try:
                await self.api.delete_employee(employee_id)
            except (ApiError, ApiUnavailableError) as exc:
                self.report_error(exc)
                return False

        logger.info("Employee deleted: id=%s", employee_id)
        self._succeed("deleted")
        await self.refresh()
        return True

    async def start_edit(self, employee_id: int) -> bool:
        async with self._loading():
            try:
                employee = await self.api.get_employee(employee_id)
            except (ApiError, ApiUnavailableError) as exc:
                self.report_error(exc)
                return False

        self.state.editing = employee
        self.state.form = EmployeeForm(name=employee.name, email=employee.email, position=employee.position)
        return True

    async def save_edit(self, employee_id: int, form: EmployeeForm) -> bool:
        """바뀐 필드만 PUT으로 보낸다 (부분 업데이트)."""
        self.state.form = form
        current = self.state.editing
        if current is None or current.id != employee_id:
            if not await self.start_edit(employee_id):
                return False
            current = self.state.editing
            self.state.form = form

        if not form.is_complete():
            self._fail(FILL_ALL_FIELDS_MESSAGE)
            return False

        async with self._loading():
            try:
                changes = {
                    key: value
                    for key, value in form.model_dump().items()
                    if getattr(current, key) != value
                }
                await self.api.update_employee(employee_id, changes)
            except (ApiError, ApiUnavailableError) as exc:
                self.report_error(exc)
                return False

        logger.info("Employee updated: id=%s fields=%s", employee_id, sorted(changes))
        self.state.editing = None
        self.state.form = EmployeeForm()
        self._succeed("updated")
        await self.refresh()
        return True
