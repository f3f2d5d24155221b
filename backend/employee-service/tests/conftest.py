import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from employee_service.core.config import Settings
from employee_service.main import create_app
from employee_service.repositories.employee_store import EmployeeStore


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'employees.db'}",
        SEED_SAMPLE_DATA=False,
    )


@pytest.fixture
def client(settings):
    # with 블록 안에서 lifespan(open/close)이 실행된다
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def seeded_client(settings):
    with TestClient(create_app(settings.model_copy(update={"SEED_SAMPLE_DATA": True}))) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def store(settings):
    employee_store = EmployeeStore.from_settings(settings)
    await employee_store.open()
    yield employee_store
    await employee_store.close()


@pytest.fixture
def create_employee(client):
    def _create(name: str, email: str, position: str = "Engineer"):
        return client.post(
            "/api/employees",
            json={"name": name, "email": email, "position": position},
        )

    return _create
