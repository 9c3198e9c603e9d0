"""
This module defines the Pydantic models used by the auth endpoints.
"""

from typing import Optional

from pydantic import BaseModel

from api.auth.session import RouteDecision, SessionState
from api.common.schemas import JSendResponse
from api.employees.schemas import EmployeeInDB


class RoleData(BaseModel):
    """
    The resolved role of the caller: admin, wholesale or customer.
    """
    role: str


class SessionData(BaseModel):
    """
    Snapshot of the caller's session together with the decision for one path.
    """
    userId: Optional[str] = None
    role: Optional[str] = None
    state: SessionState
    decision: RouteDecision


class RoleResponse(JSendResponse[RoleData]):
    pass


class AdminProfileResponse(JSendResponse[EmployeeInDB]):
    pass


class SessionResponse(JSendResponse[SessionData]):
    pass
