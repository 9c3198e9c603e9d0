"""
Employee management services.
"""

import secrets
import string
from typing import Optional

from fastapi import HTTPException
from firebase_admin import auth, firestore

from api.common.email_service import email_service
from api.common.schemas import paginate
from .schemas import (
    EmployeeInDB, EmployeeInsertPayload, EmployeeUpdatePayload, EmployeesData,
)

EMPLOYEES_COLLECTION = 'employees'


def get_firestore_client():
    return firestore.client()


def generate_password(length: int = 12) -> str:
    """Generate a secure random password."""
    alphabet = string.ascii_letters + string.digits + "!@#$%^&*"
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def _to_employee(doc_id: str, data: dict) -> EmployeeInDB:
    data = dict(data or {})
    data['id'] = doc_id
    data.pop('password', None)
    return EmployeeInDB(**data)


async def list_employees_service(page: int = 1, size: int = 50, store_id: Optional[str] = None) -> EmployeesData:
    """
    Get employees ordered by name, optionally only those of one store.
    """
    try:
        db = get_firestore_client()
        query = db.collection(EMPLOYEES_COLLECTION)
        if store_id:
            query = query.where('storeIds', 'array_contains', store_id)

        employees = [_to_employee(doc.id, doc.to_dict()) for doc in query.stream()]
        employees.sort(key=lambda employee: employee.name.lower())

        return EmployeesData(**paginate(employees, page, size))

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to retrieve employees: {str(e)}")


async def get_employee_service(employee_id: str) -> EmployeeInDB:
    """Get a specific employee."""
    if not employee_id:
        raise HTTPException(status_code=400, detail="Missing employee ID parameter")

    try:
        db = get_firestore_client()
        employee_doc = db.collection(EMPLOYEES_COLLECTION).document(employee_id).get()
        if not employee_doc.exists:
            raise HTTPException(status_code=404, detail="Employee not found")
        return _to_employee(employee_id, employee_doc.to_dict())

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to retrieve employee: {str(e)}")


async def create_employee_service(employee_data: EmployeeInsertPayload) -> EmployeeInDB:
    """
    Create the Firebase Auth account and the employee document.

    Without a password one is generated and sent to the employee by e-mail.
    The auth account is rolled back if anything after its creation fails.
    """
    user_record = None
    password = employee_data.password
    generated = password is None
    if generated:
        password = generate_password()

    try:
        try:
            user_record = auth.create_user(
                email=employee_data.email,
                password=password,
                display_name=employee_data.name
            )
        except auth.EmailAlreadyExistsError:
            raise HTTPException(status_code=409, detail="Email is already in use.")

        employee_doc_data = employee_data.model_dump(exclude={'password'})
        employee_doc_data['createdAt'] = firestore.firestore.SERVER_TIMESTAMP
        employee_doc_data['updatedAt'] = firestore.firestore.SERVER_TIMESTAMP

        db = get_firestore_client()
        doc_ref = db.collection(EMPLOYEES_COLLECTION).document(user_record.uid)
        doc_ref.set(employee_doc_data)

        if generated:
            try:
                await email_service.send_employee_credentials_email(
                    to_email=employee_data.email,
                    password=password,
                    employee_name=employee_data.name
                )
            except Exception as email_error:
                # The account exists; an admin can reset the password later
                print(f"Warning: Failed to send email: {str(email_error)}")

        return _to_employee(user_record.uid, doc_ref.get().to_dict())

    except Exception as e:
        if user_record:
            try:
                auth.delete_user(user_record.uid)
                print(f"Successfully rolled back Firebase Auth user: {user_record.uid}")
            except Exception as rollback_error:
                print(f"Failed to rollback Firebase Auth user: {str(rollback_error)}")

        if isinstance(e, HTTPException):
            raise
        raise HTTPException(status_code=500, detail=f"Failed to create employee: {str(e)}")


async def update_employee_service(employee_id: str, update_data: EmployeeUpdatePayload) -> EmployeeInDB:
    """
    Update an employee. A new password or name is also pushed to Firebase Auth.
    """
    if not employee_id:
        raise HTTPException(status_code=400, detail="Missing employee ID parameter")

    try:
        db = get_firestore_client()
        employee_ref = db.collection(EMPLOYEES_COLLECTION).document(employee_id)
        employee_doc = employee_ref.get()

        if not employee_doc.exists:
            raise HTTPException(status_code=404, detail="Employee not found")

        changes = {k: v for k, v in update_data.model_dump(exclude={'password'}).items() if v is not None}

        auth_changes = {}
        if update_data.password:
            auth_changes['password'] = update_data.password
        if update_data.name is not None:
            auth_changes['display_name'] = update_data.name
        if auth_changes:
            auth.update_user(employee_id, **auth_changes)

        changes['updatedAt'] = firestore.firestore.SERVER_TIMESTAMP
        employee_ref.update(changes)

        return _to_employee(employee_id, employee_ref.get().to_dict())

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update employee: {str(e)}")


async def delete_employee_service(employee_id: str, requested_by: Optional[str] = None) -> dict:
    """
    Delete an employee document and its Firebase Auth account.
    Employees cannot delete themselves.
    """
    if not employee_id:
        raise HTTPException(status_code=400, detail="Missing employee ID parameter")

    if requested_by and requested_by == employee_id:
        raise HTTPException(status_code=400, detail="Employees cannot delete their own account")

    try:
        db = get_firestore_client()
        employee_ref = db.collection(EMPLOYEES_COLLECTION).document(employee_id)
        if not employee_ref.get().exists:
            raise HTTPException(status_code=404, detail="Employee not found")

        employee_ref.delete()

        try:
            auth.delete_user(employee_id)
        except auth.UserNotFoundError:
            print(f"Warning: Firebase Auth user {employee_id} was already gone")

        return {"message": "Employee removed successfully"}

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete employee: {str(e)}")
