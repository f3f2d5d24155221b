import logging
from contextlib import asynccontextmanager
from pathlib import Path
from urllib.parse import urlencode

from fastapi import FastAPI, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from directory_web.core.api_client import ApiError, ApiUnavailableError, EmployeeApiClient
from directory_web.core.config import Settings, get_settings
from directory_web.schemas.employee import EmployeeForm
from directory_web.state.directory import DirectoryController

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    api: EmployeeApiClient = app.state.api
    # 시작 시 백엔드 연결 확인 (실패해도 화면은 뜨고, 요청마다 에러 메시지를 보여준다)
    try:
        health = await api.health()
        logger.info("Backend health check: %s", health)
    except (ApiError, ApiUnavailableError) as exc:
        logger.warning("Backend connection failed: %s", exc)
    yield
    await api.aclose()


def _controller(request: Request) -> DirectoryController:
    return DirectoryController(
        request.app.state.api,
        search_debounce=request.app.state.settings.SEARCH_DEBOUNCE,
    )


def _index_url(search: str = "", notice: str = "") -> str:
    params = {key: value for key, value in (("search", search), ("notice", notice)) if value}
    return "/?" + urlencode(params) if params else "/"


def _render(request: Request, name: str, controller: DirectoryController, status_code: int = 200, **extra):
    return templates.TemplateResponse(
        request,
        name,
        {"state": controller.state, **extra},
        status_code=status_code,
    )


def _error_status(controller: DirectoryController) -> int:
    return controller.state.error_status if controller.state.has_error else status.HTTP_200_OK


def create_app(settings: Settings | None = None, api: EmployeeApiClient | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Employee Directory",
        version="0.1.0",
        description="Browser UI for the Employee Service",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.api = api or EmployeeApiClient.from_url(settings.API_BASE_URL, timeout=settings.API_TIMEOUT)

    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request, search: str = "", notice: str = ""):
        controller = _controller(request)
        await controller.mount(search)
        controller.show_notice(notice)
        return _render(request, "index.html", controller)

    @app.post("/employees", response_class=HTMLResponse)
    async def create_employee(
        request: Request,
        name: str = Form(""),
        email: str = Form(""),
        position: str = Form(""),
        search: str = Form(""),
    ):
        controller = _controller(request)
        form = EmployeeForm(name=name, email=email, position=position)
        if await controller.submit(form):
            return RedirectResponse(_index_url(search, controller.state.notice), status_code=status.HTTP_303_SEE_OTHER)

        # 실패: 입력값 유지한 채로 목록과 에러 메시지를 다시 그림
        await controller.mount(search)
        return _render(request, "index.html", controller, status_code=controller.state.error_status)

    @app.get("/employees/{employee_id}/delete", response_class=HTMLResponse)
    async def confirm_delete(request: Request, employee_id: int, search: str = ""):
        controller = _controller(request)
        try:
            employee = await controller.api.get_employee(employee_id)
        except (ApiError, ApiUnavailableError) as exc:
            controller.report_error(exc)
            await controller.mount(search)
            return _render(request, "index.html", controller, status_code=controller.state.error_status)
        controller.state.search = search
        return _render(request, "confirm_delete.html", controller, employee=employee)

    @app.post("/employees/{employee_id}/delete", response_class=HTMLResponse)
    async def delete_employee(
        request: Request,
        employee_id: int,
        confirm: str = Form(""),
        search: str = Form(""),
    ):
        controller = _controller(request)
        if await controller.delete(employee_id, confirmed=confirm == "yes"):
            return RedirectResponse(_index_url(search, controller.state.notice), status_code=status.HTTP_303_SEE_OTHER)
        if not controller.state.has_error:
            # 취소
            return RedirectResponse(_index_url(search), status_code=status.HTTP_303_SEE_OTHER)

        await controller.mount(search)
        return _render(request, "index.html", controller, status_code=controller.state.error_status)

    @app.get("/employees/{employee_id}/edit", response_class=HTMLResponse)
    async def edit_employee(request: Request, employee_id: int, search: str = ""):
        controller = _controller(request)
        controller.state.search = search
        if not await controller.start_edit(employee_id):
            await controller.mount(search)
            return _render(request, "index.html", controller, status_code=controller.state.error_status)
        return _render(request, "edit.html", controller)

    @app.post("/employees/{employee_id}/edit", response_class=HTMLResponse)
    async def save_employee(
        request: Request,
        employee_id: int,
        name: str = Form(""),
        email: str = Form(""),
        position: str = Form(""),
        search: str = Form(""),
    ):
        controller = _controller(request)
        controller.state.search = search
        form = EmployeeForm(name=name, email=email, position=position)
        if await controller.save_edit(employee_id, form):
            return RedirectResponse(_index_url(search, controller.state.notice), status_code=status.HTTP_303_SEE_OTHER)

        if controller.state.editing is None:
            await controller.mount(search)
            return _render(request, "index.html", controller, status_code=controller.state.error_status)
        return _render(request, "edit.html", controller, status_code=_error_status(controller))

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    logger.info("Frontend: http://localhost:%s", settings.PORT)
    logger.info("Backend: %s", settings.API_BASE_URL)
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
