import httpx
import pytest_asyncio

from directory_web.core.api_client import EmployeeApiClient
from directory_web.core.config import Settings as WebSettings
from directory_web.main import create_app as create_web_app
from employee_service.core.config import Settings as BackendSettings
from employee_service.main import create_app as create_backend_app


@pytest_asyncio.fixture
async def backend(tmp_path):
    """실제 Employee Service 앱. ASGITransport는 lifespan을 돌리지 않으므로 store를 직접 연다."""
    settings = BackendSettings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'employees.db'}",
        SEED_SAMPLE_DATA=False,
    )
    app = create_backend_app(settings)
    await app.state.store.open()
    yield app
    await app.state.store.close()


@pytest_asyncio.fixture
async def api(backend):
    client = httpx.AsyncClient(
        transport=httpx.ASGITransport(app=backend),
        base_url="http://employee-service",
    )
    yield EmployeeApiClient(client)
    await client.aclose()


@pytest_asyncio.fixture
async def web(api):
    app = create_web_app(WebSettings(), api=api)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://directory-web",
    ) as client:
        yield client


@pytest_asyncio.fixture
async def offline_web():
    """API 서버가 꺼져 있는 상황: 모든 요청이 연결 실패"""

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    api = EmployeeApiClient(
        httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url="http://employee-service")
    )
    app = create_web_app(WebSettings(), api=api)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://directory-web",
    ) as client:
        yield client
    await api.aclose()
