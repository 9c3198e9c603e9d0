"""
Employee management routers.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Path, Query
from starlette import status

from api.auth.dependencies import get_current_employee, require_create, require_update, require_delete
from api.common.schemas import JSendResponse
from .schemas import (
    EmployeeInsertPayload, EmployeeUpdatePayload, EmployeeItemData,
    EmployeeResponse, EmployeeListResponse, EmployeeInDB,
)
from .services import (
    list_employees_service, get_employee_service, create_employee_service,
    update_employee_service, delete_employee_service,
)

router = APIRouter()


@router.get("", response_model=EmployeeListResponse)
async def list_employees(
    page: int = Query(1, ge=1, description="Page number (starts from 1)"),
    size: int = Query(50, ge=1, le=200, description="Number of items per page"),
    store_id: Optional[str] = Query(None, alias="storeId", description="Only employees of this store"),
    employee: EmployeeInDB = Depends(get_current_employee)
):
    """
    List employees ordered by name. Any employee may look.
    """
    try:
        employees = await list_employees_service(page, size, store_id)
        return EmployeeListResponse.success(employees)
    except HTTPException as e:
        return EmployeeListResponse.error(message=str(e.detail), code=e.status_code)
    except Exception as e:
        return EmployeeListResponse.error(message=str(e), code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: str = Path(..., description="Employee ID"),
    employee: EmployeeInDB = Depends(get_current_employee)
):
    try:
        result = await get_employee_service(employee_id)
        return EmployeeResponse.success(EmployeeItemData(item=result))
    except HTTPException as e:
        return EmployeeResponse.error(message=str(e.detail), code=e.status_code)
    except Exception as e:
        return EmployeeResponse.error(message=str(e), code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.post("", response_model=EmployeeResponse)
async def create_employee(
    employee_data: EmployeeInsertPayload,
    employee: EmployeeInDB = Depends(require_create)
):
    """
    Create an employee account. Without a password the generated one is e-mailed.
    """
    try:
        result = await create_employee_service(employee_data)
        return EmployeeResponse.success(EmployeeItemData(item=result))
    except HTTPException as e:
        return EmployeeResponse.error(message=str(e.detail), code=e.status_code)
    except Exception as e:
        return EmployeeResponse.error(message=str(e), code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.put("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    update_data: EmployeeUpdatePayload,
    employee_id: str = Path(..., description="Employee ID"),
    employee: EmployeeInDB = Depends(require_update)
):
    try:
        result = await update_employee_service(employee_id, update_data)
        return EmployeeResponse.success(EmployeeItemData(item=result))
    except HTTPException as e:
        return EmployeeResponse.error(message=str(e.detail), code=e.status_code)
    except Exception as e:
        return EmployeeResponse.error(message=str(e), code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.delete("/{employee_id}", response_model=JSendResponse[dict])
async def delete_employee(
    employee_id: str = Path(..., description="Employee ID"),
    employee: EmployeeInDB = Depends(require_delete)
):
    try:
        result = await delete_employee_service(employee_id, requested_by=employee.id)
        return JSendResponse.success(result)
    except HTTPException as e:
        return JSendResponse.error(message=str(e.detail), code=e.status_code)
    except Exception as e:
        return JSendResponse.error(message=str(e), code=status.HTTP_500_INTERNAL_SERVER_ERROR)
