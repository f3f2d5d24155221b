from fastapi import Request

from employee_service.repositories.employee_store import EmployeeStore


def get_store(request: Request) -> EmployeeStore:
    """
    앱 시작 시 만들어 app.state에 올려둔 EmployeeStore를 반환.
    라우터는 Depends(get_store)로 주입받는다.
    """
    return request.app.state.store
