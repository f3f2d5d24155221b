import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from employee_service.api.employees import router as employees_router
from employee_service.core.config import Settings, get_settings
from employee_service.core.errors import setup_error_handling
from employee_service.repositories.employee_store import EmployeeStore

logger = logging.getLogger(__name__)

ENDPOINTS = [
    "GET /health",
    "GET /api/employees",
    "GET /api/employees/:id",
    "POST /api/employees",
    "PUT /api/employees/:id",
    "DELETE /api/employees/:id",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    store: EmployeeStore = app.state.store
    await store.open()
    yield
    await store.close()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Employee Service",
        version="0.1.0",
        description="Employee directory CRUD service (REST + SQLite + SQLAlchemy)",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = EmployeeStore.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list(),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_error_handling(app)

    @app.get("/health")
    async def health_check():
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "message": "Employee API is running",
        }

    @app.get("/")
    async def root():
        return {
            "message": "Employee Service is running",
            "docs": "/docs",
        }

    @app.get("/test")
    async def test_endpoint():
        return {
            "message": "Backend is working!",
            "endpoints": ENDPOINTS,
        }

    app.include_router(employees_router)
    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    base_url = f"http://localhost:{settings.PORT}"
    logger.info("Employee Management Backend")
    logger.info("Port: %s", settings.PORT)
    logger.info("API: %s/api/employees", base_url)
    logger.info("Health: %s/health", base_url)
    logger.info("Test: %s/test", base_url)

    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
