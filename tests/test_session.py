"""
Unit tests for route gating decisions.
"""
import pytest

from api.auth.session import (
    AuthSession, MissingSessionContext, RouteAction, SessionState,
    resolve_session_state, resolve_public_route, resolve_protected_route, resolve_edge_route,
)
from conftest import make_employee


def employee_session():
    return AuthSession(user_id="emp1", employee_profile=make_employee(), role="admin")


class TestPublicRoute:
    """Storefront pages."""

    @pytest.mark.parametrize("path", ["/", "/produtos", "/produto/abc", "/lojas"])
    def test_employee_is_sent_to_admin(self, path):
        decision = resolve_public_route(employee_session())

        assert decision.action == RouteAction.REDIRECT
        assert decision.location == "/admin"
        assert decision.replace is True

    def test_visitor_renders(self):
        decision = resolve_public_route(AuthSession())

        assert decision.action == RouteAction.RENDER
        assert decision.location is None

    def test_customer_without_employee_profile_renders(self):
        decision = resolve_public_route(AuthSession(user_id="u1", role="customer"))

        assert decision.action == RouteAction.RENDER

    def test_loading_shows_placeholder_only(self):
        session = AuthSession(user_id="emp1", employee_profile=make_employee(), loading=True)

        decision = resolve_public_route(session)

        assert decision.action == RouteAction.PLACEHOLDER
        assert decision.location is None


class TestProtectedRoute:
    """Admin pages."""

    def test_employee_renders(self):
        assert resolve_protected_route(employee_session()).action == RouteAction.RENDER

    def test_non_employee_goes_to_admin_login(self):
        decision = resolve_protected_route(AuthSession(user_id="u1", role="customer"))

        assert decision.action == RouteAction.REDIRECT
        assert decision.location == "/admin-login"

    def test_loading_shows_placeholder(self):
        assert resolve_protected_route(AuthSession(loading=True)).action == RouteAction.PLACEHOLDER


class TestSessionContext:

    def test_missing_session_raises(self):
        with pytest.raises(MissingSessionContext):
            resolve_public_route(None)

        with pytest.raises(MissingSessionContext):
            resolve_protected_route(None)

    def test_state_collapse(self):
        assert resolve_session_state(AuthSession(loading=True)) == SessionState.LOADING
        assert resolve_session_state(employee_session()) == SessionState.EMPLOYEE
        assert resolve_session_state(AuthSession()) == SessionState.OTHER


class TestEdgeRoute:
    """Role checks applied before a page is served."""

    def test_auth_pages_always_render(self):
        assert resolve_edge_route("/auth/callback", None).action == RouteAction.RENDER

    def test_unprotected_paths_render_without_token(self):
        assert resolve_edge_route("/produtos", None).action == RouteAction.RENDER
        assert resolve_edge_route("/administrativo", None).action == RouteAction.RENDER
        assert resolve_edge_route("/atacadista", "customer").action == RouteAction.RENDER

    @pytest.mark.parametrize("path", ["/admin", "/admin/produtos", "/dashboard", "/atacado"])
    def test_no_token_goes_to_login(self, path):
        decision = resolve_edge_route(path, None)

        assert decision.action == RouteAction.REDIRECT
        assert decision.location == "/login"
        assert decision.replace is False

    def test_customer_cannot_open_admin(self):
        decision = resolve_edge_route("/admin", "customer")

        assert decision.action == RouteAction.REDIRECT
        assert decision.location == "/"

    def test_admin_cannot_open_wholesale(self):
        decision = resolve_edge_route("/atacado/pedidos", "admin")

        assert decision.location == "/"

    def test_matching_roles_render(self):
        assert resolve_edge_route("/admin/lojas", "admin").action == RouteAction.RENDER
        assert resolve_edge_route("/atacado", "wholesale").action == RouteAction.RENDER
        assert resolve_edge_route("/dashboard", "customer").action == RouteAction.RENDER
