import asyncio
from datetime import datetime

import pytest

from directory_web.core.api_client import ApiError, ApiUnavailableError
from directory_web.schemas.employee import Employee, EmployeeForm
from directory_web.state.directory import DirectoryController, Effect


def make_employee(employee_id: int, name: str, email: str | None = None, position: str = "Engineer") -> Employee:
    return Employee(
        id=employee_id,
        name=name,
        email=email or f"{name.split()[0].lower()}@company.com",
        position=position,
        createdAt=datetime(2025, 1, 5, 9, 30),
    )


class FakeApi:
    """EmployeeApiClient 대역. 호출 기록만 남기고 메모리 목록을 돌려준다."""

    def __init__(self, employees=None):
        self.employees = list(employees or [])
        self.calls = []
        self.fail_with = None

    async def list_employees(self, search=None):
        self.calls.append(("list", search))
        if self.fail_with:
            raise self.fail_with
        return [e for e in self.employees if not search or search in e.name]

    async def get_employee(self, employee_id):
        self.calls.append(("get", employee_id))
        for employee in self.employees:
            if employee.id == employee_id:
                return employee
        raise ApiError(404, "Employee not found")

    async def create_employee(self, name, email, position):
        self.calls.append(("create", name, email, position))
        if self.fail_with:
            raise self.fail_with
        employee = make_employee(len(self.employees) + 1, name, email, position)
        self.employees.insert(0, employee)
        return employee

    async def update_employee(self, employee_id, fields):
        self.calls.append(("update", employee_id, fields))
        employee = await self.get_employee(employee_id)
        updated = employee.model_copy(update=fields)
        self.employees = [updated if e.id == employee_id else e for e in self.employees]
        return updated

    async def delete_employee(self, employee_id):
        self.calls.append(("delete", employee_id))
        await self.get_employee(employee_id)
        self.employees = [e for e in self.employees if e.id != employee_id]


@pytest.mark.asyncio
async def test_mount_loads_list():
    api = FakeApi([make_employee(1, "John Doe"), make_employee(2, "Jane Smith")])
    controller = DirectoryController(api)

    await controller.mount()

    assert [e.name for e in controller.state.employees] == ["John Doe", "Jane Smith"]
    assert controller.state.loading is False
    assert api.calls == [("list", None)]


@pytest.mark.asyncio
async def test_search_refetches_only_when_text_changes():
    api = FakeApi([make_employee(1, "John Doe"), make_employee(2, "Jane Smith")])
    controller = DirectoryController(api)

    await controller.mount()
    await controller.set_search("Jane")
    await controller.set_search("Jane")

    assert [e.name for e in controller.state.employees] == ["Jane Smith"]
    assert api.calls == [("list", None), ("list", "Jane")]


@pytest.mark.asyncio
async def test_incomplete_form_is_blocked_without_request():
    api = FakeApi()
    controller = DirectoryController(api)

    ok = await controller.submit(EmployeeForm(name="John Doe", email="", position="Engineer"))

    assert ok is False
    assert api.calls == []
    assert controller.state.message == "Please fill all fields"
    assert controller.state.has_error
    assert controller.state.form.name == "John Doe"


@pytest.mark.asyncio
async def test_submit_success_clears_form_and_refreshes():
    api = FakeApi()
    controller = DirectoryController(api)

    ok = await controller.submit(EmployeeForm(name="John Doe", email="john.doe@company.com", position="Engineer"))

    assert ok is True
    assert controller.state.form == EmployeeForm()
    assert controller.state.message == "Employee added successfully!"
    assert [e.name for e in controller.state.employees] == ["John Doe"]
    assert api.calls[-1] == ("list", None)


@pytest.mark.asyncio
async def test_submit_failure_keeps_form_and_shows_server_message():
    api = FakeApi()
    api.fail_with = ApiError(400, "Email already exists")
    controller = DirectoryController(api)
    form = EmployeeForm(name="John Doe", email="john.doe@company.com", position="Engineer")

    ok = await controller.submit(form)

    assert ok is False
    assert controller.state.form == form
    assert controller.state.message == "Email already exists"
    assert controller.state.loading is False


@pytest.mark.asyncio
async def test_unreachable_api_shows_connectivity_message():
    api = FakeApi()
    api.fail_with = ApiUnavailableError()
    controller = DirectoryController(api)

    await controller.mount()

    assert controller.state.message == "Cannot connect to the employee API. Make sure it is running."
    assert controller.state.employees == []
    assert controller.state.error_status == 503


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc, expected",
    [
        (ApiError(404, "Employee not found"), 404),
        (ApiError(400, "Email already exists"), 400),
        (ApiError(500, "Internal server error"), 502),
        (ApiUnavailableError(), 503),
    ],
)
async def test_report_error_maps_status(exc, expected):
    controller = DirectoryController(FakeApi())

    controller.report_error(exc)

    assert controller.state.has_error
    assert controller.state.message == exc.message
    assert controller.state.error_status == expected


def test_show_notice_accepts_only_known_keys():
    controller = DirectoryController(FakeApi())

    controller.show_notice("<b>free text</b>")
    assert controller.state.message == ""

    controller.show_notice("added")
    assert controller.state.message == "Employee added successfully!"
    assert controller.state.notice == "added"


@pytest.mark.asyncio
async def test_delete_requires_confirmation():
    api = FakeApi([make_employee(1, "John Doe")])
    controller = DirectoryController(api)

    assert await controller.delete(1, confirmed=False) is False
    assert api.calls == []

    assert await controller.delete(1, confirmed=True) is True
    assert controller.state.message == "Employee deleted successfully!"
    assert controller.state.employees == []


@pytest.mark.asyncio
async def test_save_edit_sends_only_changed_fields():
    api = FakeApi([make_employee(1, "John Doe", "john.doe@company.com", "Engineer")])
    controller = DirectoryController(api)

    assert await controller.start_edit(1) is True
    assert controller.state.form.position == "Engineer"

    ok = await controller.save_edit(
        1, EmployeeForm(name="John Doe", email="john.doe@company.com", position="Tech Lead")
    )

    assert ok is True
    assert ("update", 1, {"position": "Tech Lead"}) in api.calls
    assert controller.state.editing is None
    assert controller.state.employees[0].position == "Tech Lead"


@pytest.mark.asyncio
async def test_stale_list_response_is_discarded():
    started = asyncio.Event()
    release = asyncio.Event()

    class SlowFirstApi(FakeApi):
        async def list_employees(self, search=None):
            if search == "J":
                started.set()
                await release.wait()
                return [make_employee(1, "Stale Result")]
            return [make_employee(2, "Jane Smith")]

    controller = DirectoryController(SlowFirstApi())

    first = asyncio.create_task(controller.set_search("J"))
    await started.wait()
    await controller.set_search("Ja")
    assert controller.state.loading is True

    release.set()
    await first

    assert [e.name for e in controller.state.employees] == ["Jane Smith"]
    assert controller.state.loading is False


@pytest.mark.asyncio
async def test_effect_debounce_runs_once_with_latest_value():
    seen = []

    async def callback(value):
        seen.append(value)

    effect = Effect(callback, debounce=0.01)

    results = await asyncio.gather(effect.sync("J"), effect.sync("Ja"), effect.sync("Jan"))

    assert seen == ["Jan"]
    assert results == [False, False, True]


def test_created_display_format():
    assert make_employee(1, "John Doe").created_display == "Jan 5, 2025"
