"""Employee Service REST 클라이언트 (httpx)."""
import logging
from typing import Any

import httpx

from directory_web.schemas.employee import Employee

logger = logging.getLogger(__name__)

CONNECTION_ERROR_MESSAGE = "Cannot connect to the employee API. Make sure it is running."


class ApiError(Exception):
    """Employee Service가 2xx가 아닌 응답을 준 경우. message는 서버의 error 값."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ApiUnavailableError(Exception):
    """요청이 서버까지 가지 못한 경우 (연결 실패, 타임아웃)"""

    def __init__(self, message: str = CONNECTION_ERROR_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class EmployeeApiClient:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_url(cls, base_url: str, timeout: float = 5.0) -> "EmployeeApiClient":
        return cls(httpx.AsyncClient(base_url=base_url, timeout=timeout))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.error("Employee API unreachable: %s %s (%s)", method, url, exc)
            raise ApiUnavailableError() from exc

        if resp.is_error:
            try:
                body = resp.json()
            except ValueError:
                body = None
            message = (body.get("error") if isinstance(body, dict) else None) or resp.reason_phrase
            logger.info("Employee API error: %s %s -> %s %s", method, url, resp.status_code, message)
            raise ApiError(resp.status_code, message)
        return resp

    async def health(self) -> dict:
        resp = await self._request("GET", "/health")
        return resp.json()

    async def list_employees(self, search: str | None = None) -> list[Employee]:
        params = {"search": search} if search else None
        resp = await self._request("GET", "/api/employees", params=params)
        return [Employee.model_validate(item) for item in resp.json()]

    async def get_employee(self, employee_id: int) -> Employee:
        resp = await self._request("GET", f"/api/employees/{employee_id}")
        return Employee.model_validate(resp.json())

    async def create_employee(self, name: str, email: str, position: str) -> Employee:
        resp = await self._request(
            "POST",
            "/api/employees",
            json={"name": name, "email": email, "position": position},
        )
        return Employee.model_validate(resp.json())

    async def update_employee(self, employee_id: int, fields: dict[str, str]) -> Employee:
        resp = await self._request("PUT", f"/api/employees/{employee_id}", json=fields)
        return Employee.model_validate(resp.json())

    async def delete_employee(self, employee_id: int) -> None:
        await self._request("DELETE", f"/api/employees/{employee_id}")
