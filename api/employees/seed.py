"""
Create the first admin account.

Usage: python -m api.employees.seed
Reads SEED_ADMIN_EMAIL / SEED_ADMIN_PASS from the environment.
"""
import asyncio
import os

from firebase_admin import auth, firestore

from .schemas import EmployeeInsertPayload
from .services import create_employee_service, get_firestore_client, _to_employee, EMPLOYEES_COLLECTION

DEFAULT_ADMIN_EMAIL = "admin@bvcelular.com.br"


async def seed_admin(email: str, password: str):
    """
    Create an all-permissions employee unless one already exists for the email.

    An auth account left without an employee document (for example after a
    manual cleanup) gets its document back instead of a second account.

    Returns:
        The created EmployeeInDB, or None when the admin already existed
    """
    admin = EmployeeInsertPayload(
        name="Admin",
        email=email,
        password=password,
        canCreate=True,
        canUpdate=True,
        canDelete=True
    )

    try:
        existing_user = auth.get_user_by_email(email)
    except auth.UserNotFoundError:
        existing_user = None

    if existing_user is None:
        return await create_employee_service(admin)

    db = get_firestore_client()
    doc_ref = db.collection(EMPLOYEES_COLLECTION).document(existing_user.uid)
    if doc_ref.get().exists:
        print(f"Admin already exists: {email}")
        return None

    employee_doc_data = admin.model_dump(exclude={'password'})
    employee_doc_data['createdAt'] = firestore.firestore.SERVER_TIMESTAMP
    employee_doc_data['updatedAt'] = firestore.firestore.SERVER_TIMESTAMP
    doc_ref.set(employee_doc_data)
    print(f"DEBUG: Linked existing auth user {existing_user.uid} as admin")

    return _to_employee(existing_user.uid, doc_ref.get().to_dict())


if __name__ == "__main__":
    from main import init_firebase

    init_firebase()

    admin_email = os.environ.get("SEED_ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL)
    admin_password = os.environ.get("SEED_ADMIN_PASS")
    if not admin_password:
        raise RuntimeError("SEED_ADMIN_PASS environment variable is required.")

    created = asyncio.run(seed_admin(admin_email, admin_password))
    if created:
        print(f"Admin created: {created.email}")
