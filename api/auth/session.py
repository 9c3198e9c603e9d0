"""
Route gating decisions for the storefront and the admin panel.

Every function here takes the caller's AuthSession explicitly instead of
reading ambient state, so the decisions can be made (and tested) anywhere:
in the HTTP layer, in an edge worker or in a plain unit test.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from api.common.schemas import ADMIN_ROLE, WHOLESALE_ROLE
from api.employees.schemas import EmployeeInDB

HOME_PATH = "/"
LOGIN_PATH = "/login"
ADMIN_PATH = "/admin"
ADMIN_LOGIN_PATH = "/admin-login"
WHOLESALE_PATH = "/atacado"
AUTH_PATH = "/auth"
EDGE_PROTECTED_PREFIXES = (ADMIN_PATH, "/dashboard", WHOLESALE_PATH)


class MissingSessionContext(RuntimeError):
    """
    Raised when route resolution is attempted without a session.
    Returning a default here would silently grant or deny admin access.
    """

    def __init__(self, message: str = "Route resolution requires an AuthSession"):
        super().__init__(message)


class SessionState(str, Enum):
    LOADING = "loading"
    EMPLOYEE = "employee"
    OTHER = "other"


class RouteAction(str, Enum):
    PLACEHOLDER = "placeholder"
    REDIRECT = "redirect"
    RENDER = "render"


class AuthSession(BaseModel):
    """
    What is known about the caller at the moment a route is resolved.

    Attributes:
        user_id: Authenticated uid, None for visitors
        employee_profile: Employee document when the caller is staff
        role: Resolved role name (admin, wholesale or customer), if looked up
        loading: True while the profile lookup has not finished
    """
    user_id: Optional[str] = None
    employee_profile: Optional[EmployeeInDB] = None
    role: Optional[str] = None
    loading: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


class RouteDecision(BaseModel):
    action: RouteAction
    location: Optional[str] = None
    replace: bool = False

    @classmethod
    def placeholder(cls) -> 'RouteDecision':
        return cls(action=RouteAction.PLACEHOLDER)

    @classmethod
    def render(cls) -> 'RouteDecision':
        return cls(action=RouteAction.RENDER)

    @classmethod
    def redirect(cls, location: str, replace: bool = True) -> 'RouteDecision':
        return cls(action=RouteAction.REDIRECT, location=location, replace=replace)


def require_session(session: Optional[AuthSession]) -> AuthSession:
    if session is None:
        raise MissingSessionContext()
    return session


def resolve_session_state(session: Optional[AuthSession]) -> SessionState:
    """
    Collapse a session into Loading / Employee / Other.

    Raises:
        MissingSessionContext: If no session was supplied
    """
    session = require_session(session)
    if session.loading:
        return SessionState.LOADING
    if session.employee_profile is not None:
        return SessionState.EMPLOYEE
    return SessionState.OTHER


def resolve_public_route(session: Optional[AuthSession]) -> RouteDecision:
    """
    Decide what a public storefront route should do.

    Employees are sent to the admin area; visitors and customers see the page.
    No decision is made while the session is still loading.
    """
    state = resolve_session_state(session)
    if state is SessionState.LOADING:
        return RouteDecision.placeholder()
    if state is SessionState.EMPLOYEE:
        return RouteDecision.redirect(ADMIN_PATH)
    return RouteDecision.render()


def resolve_protected_route(session: Optional[AuthSession]) -> RouteDecision:
    """
    Decide what an admin route should do: only employees get through.
    """
    state = resolve_session_state(session)
    if state is SessionState.LOADING:
        return RouteDecision.placeholder()
    if state is SessionState.EMPLOYEE:
        return RouteDecision.render()
    return RouteDecision.redirect(ADMIN_LOGIN_PATH)


def _under(path: str, prefix: str) -> bool:
    # Whole segments only: "/administrativo" is not under "/admin"
    return path == prefix or path.startswith(prefix + "/")


def resolve_edge_route(path: str, role: Optional[str]) -> RouteDecision:
    """
    Role-based protection applied before a page is served.

    Args:
        path: Requested URL path
        role: Role of a verified token holder, None when there is no valid token

    Returns:
        RouteDecision: render, or a (non-replacing) redirect
    """
    if _under(path, AUTH_PATH):
        return RouteDecision.render()

    if not any(_under(path, prefix) for prefix in EDGE_PROTECTED_PREFIXES):
        return RouteDecision.render()

    if role is None:
        return RouteDecision.redirect(LOGIN_PATH, replace=False)

    if _under(path, ADMIN_PATH) and role != ADMIN_ROLE:
        return RouteDecision.redirect(HOME_PATH, replace=False)

    if _under(path, WHOLESALE_PATH) and role != WHOLESALE_ROLE:
        return RouteDecision.redirect(HOME_PATH, replace=False)

    return RouteDecision.render()
