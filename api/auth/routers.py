from fastapi import APIRouter, Depends, HTTPException, Query
from starlette import status

from .dependencies import get_current_user_id, get_current_employee, get_auth_session
from .schemas import RoleData, RoleResponse, AdminProfileResponse, SessionData, SessionResponse
from .services import resolve_user_role
from .session import (
    AuthSession, resolve_session_state, resolve_public_route,
    resolve_protected_route, resolve_edge_route,
)
from api.employees.schemas import EmployeeInDB

router = APIRouter()

ROUTE_SCOPES = ("public", "protected", "edge")


@router.get("/role", response_model=RoleResponse)
async def get_user_role(user_id: str = Depends(get_current_user_id)):
    """
    Tell the frontend which area the caller belongs to.

    Returns:
        RoleResponse with role admin, wholesale or customer
    """
    try:
        role = await resolve_user_role(user_id)
        return RoleResponse.success(RoleData(role=role))
    except HTTPException as e:
        return RoleResponse.error(message=str(e.detail), code=e.status_code)
    except Exception as e:
        return RoleResponse.error(message=str(e), code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.get("/admin-profile", response_model=AdminProfileResponse)
async def get_admin_profile(employee: EmployeeInDB = Depends(get_current_employee)):
    """
    Return the employee document of the caller. Non-employees get a 403.
    """
    return AdminProfileResponse.success(employee)


@router.get("/route", response_model=SessionResponse)
async def resolve_route(
    path: str = Query("/", description="Path the frontend is about to render"),
    scope: str = Query("public", description="Route kind: public, protected or edge"),
    session: AuthSession = Depends(get_auth_session)
):
    """
    Resolve the gating decision for a path.

    public: employees are redirected to /admin, everybody else renders.
    protected: only employees render, others go to /admin-login.
    edge: role-based protection of /admin, /dashboard and /atacado.
    """
    if scope not in ROUTE_SCOPES:
        return SessionResponse.error(
            message=f"scope must be one of {', '.join(ROUTE_SCOPES)}",
            code=status.HTTP_400_BAD_REQUEST
        )

    if scope == "public":
        decision = resolve_public_route(session)
    elif scope == "protected":
        decision = resolve_protected_route(session)
    else:
        decision = resolve_edge_route(path, session.role if session.is_authenticated else None)

    return SessionResponse.success(SessionData(
        userId=session.user_id,
        role=session.role,
        state=resolve_session_state(session),
        decision=decision
    ))
