"""
This module contains pytest fixtures and configuration for testing.
"""
from unittest.mock import MagicMock, patch
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add the project's root directory to the system path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

# Import the main app
from main import app
from api.auth.dependencies import get_current_employee
from api.employees.schemas import EmployeeInDB


@pytest.fixture
def test_app():
    """
    Create a FastAPI test application.
    """
    return app


@pytest.fixture
def client(test_app):
    """
    Create a test client for the FastAPI application.
    Not used as a context manager, so Firebase is never initialized.
    """
    return TestClient(test_app)


@pytest.fixture
def mock_firestore():
    """
    Create a mock for the Firestore client.
    """
    with patch('firebase_admin.firestore.client') as mock:
        # Configure the mock to provide the necessary methods and return values
        firestore_mock = MagicMock()
        mock.return_value = firestore_mock
        yield firestore_mock


@pytest.fixture(autouse=True)
def no_redis():
    """
    Run every test without the listing cache.
    """
    with patch('api.common.cache.get_redis_client', return_value=None):
        yield


def make_employee(**overrides) -> EmployeeInDB:
    data = {
        "id": "emp1",
        "name": "Maria Souza",
        "email": "maria@bvcelular.com.br",
        "storeIds": ["store1"],
        "canCreate": True,
        "canUpdate": True,
        "canDelete": True,
    }
    data.update(overrides)
    return EmployeeInDB(**data)


@pytest.fixture
def employee():
    return make_employee()


@pytest.fixture
def as_employee(test_app, employee):
    """
    Authenticate every request as an all-permissions employee.
    """
    test_app.dependency_overrides[get_current_employee] = lambda: employee
    yield employee
    test_app.dependency_overrides.pop(get_current_employee, None)


@pytest.fixture
def as_read_only_employee(test_app):
    """
    Authenticate every request as an employee without write permissions.
    """
    read_only = make_employee(id="emp2", canCreate=False, canUpdate=False, canDelete=False)
    test_app.dependency_overrides[get_current_employee] = lambda: read_only
    yield read_only
    test_app.dependency_overrides.pop(get_current_employee, None)


def make_doc(doc_id, data, exists=True):
    """A Firestore document snapshot stand-in."""
    doc = MagicMock()
    doc.id = doc_id
    doc.exists = exists
    doc.to_dict.return_value = data
    return doc
