"""
Employee management schemas.
An employee document id is the Firebase Auth uid of the person it describes.
"""

from typing import Optional, List

from pydantic import BaseModel, EmailStr, Field

from api.common.schemas import JSendResponse, PaginationResponse, TimestampMixin


class EmployeeBase(BaseModel):
    """
    Fields shared by every employee shape.
    """
    name: str = Field(..., min_length=2)
    email: str
    storeIds: List[str] = []
    canCreate: bool = False
    canUpdate: bool = False
    canDelete: bool = False
    isDriver: bool = False


class EmployeeInsertPayload(EmployeeBase):
    """
    Request data for creating an employee.
    When no password is given one is generated and e-mailed to the employee.
    """
    email: EmailStr
    password: Optional[str] = Field(None, min_length=6)


class EmployeeUpdatePayload(BaseModel):
    """
    Request data for updating an employee. Only provided fields change.
    """
    name: Optional[str] = Field(None, min_length=2)
    storeIds: Optional[List[str]] = None
    canCreate: Optional[bool] = None
    canUpdate: Optional[bool] = None
    canDelete: Optional[bool] = None
    isDriver: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=6)


class EmployeeInDB(EmployeeBase, TimestampMixin):
    """
    An employee as stored in Firestore.
    """
    id: str


class EmployeeItemData(BaseModel):
    item: EmployeeInDB


class EmployeesData(PaginationResponse[EmployeeInDB]):
    pass


class EmployeeResponse(JSendResponse[EmployeeItemData]):
    """Response model for single employee operations."""
    pass


class EmployeeListResponse(JSendResponse[EmployeesData]):
    """Response model for employee list operations."""
    pass
