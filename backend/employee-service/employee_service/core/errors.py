import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class EmployeeServiceError(Exception):
    """
    서비스 공통 예외. 핸들러가 {"error": message} 형태로 변환한다.
    """
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(EmployeeServiceError):
    """필수 필드 누락 / 형식 오류"""
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(EmployeeServiceError):
    """email 중복 (unique 제약 위반)"""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(EmployeeServiceError):
    status_code = status.HTTP_404_NOT_FOUND


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def service_error_handler(request: Request, exc: EmployeeServiceError) -> JSONResponse:
    if isinstance(exc, ConflictError):
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    else:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return _error_response(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """라우팅 404, 405 등 프레임워크가 던지는 예외"""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        logger.info("404 Not Found: %s %s", request.method, request.url.path)
    return _error_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    바디가 JSON 객체가 아니거나, 정의되지 않은 필드가 있거나,
    path의 id가 정수가 아닌 경우. FastAPI 기본값(422) 대신 400으로 응답.
    """
    errors = exc.errors()
    logger.info("Request validation failed: %s %s | %s", request.method, request.url.path, errors)
    return _error_response(status.HTTP_400_BAD_REQUEST, describe_validation_errors(errors))


def describe_validation_errors(errors) -> str:
    """pydantic 에러 목록 중 첫 번째를 'Invalid request: 필드: 메시지' 형태로"""
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = " -> ".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"Invalid request: {loc}: {first.get('msg')}" if loc else f"Invalid request: {first.get('msg')}"


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("500 Unhandled exception: %s %s", request.method, request.url.path)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def setup_error_handling(app: FastAPI) -> None:
    app.add_exception_handler(EmployeeServiceError, service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
