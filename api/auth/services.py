from typing import Optional

from fastapi import HTTPException
from firebase_admin import firestore

from api.auth.session import AuthSession
from api.common.schemas import ADMIN_ROLE, WHOLESALE_ROLE, CUSTOMER_ROLE
from api.employees.schemas import EmployeeInDB

EMPLOYEES_COLLECTION = 'employees'
WHOLESALE_CLIENTS_COLLECTION = 'wholesaleClients'


def get_firestore_client():
    return firestore.client()


async def fetch_employee_profile(user_id: str) -> Optional[EmployeeInDB]:
    """
    Look up the employee profile of a user.

    Args:
        user_id: Firebase Auth uid

    Returns:
        EmployeeInDB if the user is staff, None otherwise

    Raises:
        HTTPException: If Firestore cannot be queried
    """
    if not user_id:
        return None

    try:
        db = get_firestore_client()
        employee_doc = db.collection(EMPLOYEES_COLLECTION).document(user_id).get()

        if not employee_doc.exists:
            return None

        employee_data = employee_doc.to_dict() or {}
        employee_data['id'] = user_id
        return EmployeeInDB(**employee_data)

    except Exception as exc:
        print(f"DEBUG: Employee profile lookup failed for {user_id}: {exc}")
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(exc)}"
        )


async def is_wholesale_client(user_id: str) -> bool:
    try:
        db = get_firestore_client()
        wholesale_doc = db.collection(WHOLESALE_CLIENTS_COLLECTION).document(user_id).get()
    except Exception as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(exc)}"
        )
    return bool(wholesale_doc.exists)


async def resolve_user_role(user_id: str) -> str:
    """
    Resolve the role of an authenticated user.

    Employees are admins; otherwise a wholesale-client record makes the user
    a wholesale buyer; everybody else is a regular customer.
    """
    if await fetch_employee_profile(user_id) is not None:
        return ADMIN_ROLE
    if await is_wholesale_client(user_id):
        return WHOLESALE_ROLE
    return CUSTOMER_ROLE


async def build_auth_session(user_id: Optional[str]) -> AuthSession:
    """
    Build a fully resolved (not loading) session for a caller.

    Args:
        user_id: Verified uid, or None for an anonymous visitor
    """
    if not user_id:
        return AuthSession()

    profile = await fetch_employee_profile(user_id)
    if profile is not None:
        return AuthSession(user_id=user_id, employee_profile=profile, role=ADMIN_ROLE)

    role = WHOLESALE_ROLE if await is_wholesale_client(user_id) else CUSTOMER_ROLE
    return AuthSession(user_id=user_id, role=role)
