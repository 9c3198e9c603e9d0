"""
Integration tests for the auth endpoints.
"""
from unittest.mock import patch

from api.auth.session import AuthSession
from conftest import make_doc


class TestAuthEndpoints:

    def test_role_for_customer(self, client, mock_firestore):
        missing = make_doc("user123", None, exists=False)
        mock_firestore.collection.return_value.document.return_value.get.return_value = missing

        with patch('firebase_admin.auth.verify_id_token', return_value={"uid": "user123"}):
            response = client.get("/api/auth/role", headers={"Authorization": "Bearer valid_token"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "success"
        assert data["data"]["role"] == "customer"

    def test_role_requires_token(self, client, monkeypatch):
        monkeypatch.delenv("ENV", raising=False)

        response = client.get("/api/auth/role")

        assert response.status_code == 401

    def test_admin_profile_forbidden_for_non_employee(self, client, mock_firestore):
        mock_firestore.collection.return_value.document.return_value.get.return_value = make_doc(
            "user123", None, exists=False
        )

        with patch('firebase_admin.auth.verify_id_token', return_value={"uid": "user123"}):
            response = client.get("/api/auth/admin-profile", headers={"Authorization": "Bearer valid_token"})

        assert response.status_code == 403
        assert response.json()["detail"] == "User is not an admin"

    def test_admin_profile_for_employee(self, client, as_employee):
        response = client.get("/api/auth/admin-profile")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == as_employee.id

    def test_route_public_for_visitor(self, client):
        response = client.get("/api/auth/route", params={"path": "/", "scope": "public"})

        data = response.json()
        assert data["status"] == "success"
        assert data["data"]["state"] == "other"
        assert data["data"]["decision"]["action"] == "render"

    def test_route_public_redirects_employee(self, client):
        session = AuthSession(user_id="emp1", role="admin", employee_profile={
            "id": "emp1", "name": "Maria", "email": "maria@bvcelular.com.br"
        })

        with patch('api.auth.dependencies.build_auth_session', return_value=session):
            response = client.get(
                "/api/auth/route",
                params={"path": "/produtos", "scope": "public"},
                headers={"Authorization": "Bearer valid_token"}
            )

        decision = response.json()["data"]["decision"]
        assert decision["action"] == "redirect"
        assert decision["location"] == "/admin"
        assert decision["replace"] is True

    def test_route_edge_without_token(self, client):
        response = client.get("/api/auth/route", params={"path": "/atacado", "scope": "edge"})

        decision = response.json()["data"]["decision"]
        assert decision["location"] == "/login"

    def test_route_invalid_scope(self, client):
        response = client.get("/api/auth/route", params={"path": "/", "scope": "nope"})

        data = response.json()
        assert data["status"] == "error"
        assert data["code"] == 400
