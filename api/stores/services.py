from typing import List

from fastapi import HTTPException
from firebase_admin import firestore

from api.common.cache import invalidate_product_listings
from api.stores.schemas import StoreInDB, StoreInsertPayload, StoreUpdatePayload

STORES_COLLECTION = 'stores'


def get_firestore_client():
    return firestore.client()


def list_stores_service() -> List[StoreInDB]:
    """
    Service function to retrieve every store ordered by name.

    Returns:
        List of StoreInDB objects

    Raises:
        HTTPException: If errors occur during retrieval
    """
    try:
        db = get_firestore_client()
        store_docs = db.collection(STORES_COLLECTION).order_by('name').get()

        stores = []
        for doc in store_docs:
            store_data = doc.to_dict() or {}
            store_data['id'] = doc.id
            stores.append(StoreInDB(**store_data))
        return stores

    except Exception as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(exc)}"
        )


def get_store_service(store_id: str) -> StoreInDB:
    """
    Service function to retrieve a single store.

    Raises:
        HTTPException: If the store is not found or other errors occur
    """
    if not store_id:
        raise HTTPException(
            status_code=400,
            detail="Missing store ID parameter"
        )

    try:
        db = get_firestore_client()
        store_doc = db.collection(STORES_COLLECTION).document(store_id).get()

        if not store_doc.exists:
            raise HTTPException(
                status_code=404,
                detail=f"Store with ID {store_id} not found"
            )

        store_data = store_doc.to_dict() or {}
        store_data['id'] = store_id
        return StoreInDB(**store_data)

    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(exc)}"
        )


def create_store_service(store_data: StoreInsertPayload) -> StoreInDB:
    """
    Service function to create a new store.

    Args:
        store_data: The store information to create

    Returns:
        StoreInDB object for the created store
    """
    try:
        db = get_firestore_client()

        store_dict = store_data.model_dump()
        store_dict['createdAt'] = firestore.firestore.SERVER_TIMESTAMP
        store_dict['updatedAt'] = firestore.firestore.SERVER_TIMESTAMP

        store_ref = db.collection(STORES_COLLECTION).document()
        store_ref.set(store_dict)

        created_store = store_ref.get().to_dict() or {}
        created_store['id'] = store_ref.id
        return StoreInDB(**created_store)

    except Exception as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(exc)}"
        )


async def update_store_service(store_id: str, store_data: StoreUpdatePayload) -> StoreInDB:
    """
    Service function to update store information. Only provided fields change.

    Raises:
        HTTPException: If the store is not found, nothing is provided or other errors occur
    """
    if not store_id:
        raise HTTPException(
            status_code=400,
            detail="Missing store ID parameter"
        )

    update_data = {k: v for k, v in store_data.model_dump().items() if v is not None}
    if not update_data:
        raise HTTPException(
            status_code=400,
            detail="No fields provided for update"
        )

    try:
        db = get_firestore_client()
        store_ref = db.collection(STORES_COLLECTION).document(store_id)
        store_doc = store_ref.get()

        if not store_doc.exists:
            raise HTTPException(
                status_code=404,
                detail=f"Store with ID {store_id} not found"
            )

        update_data['updatedAt'] = firestore.firestore.SERVER_TIMESTAMP
        store_ref.update(update_data)
        await invalidate_product_listings()

        updated_store = store_ref.get().to_dict() or {}
        updated_store['id'] = store_id
        return StoreInDB(**updated_store)

    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(exc)}"
        )


async def delete_store_service(store_id: str) -> dict:
    """
    Service function to delete a store.

    Product relations pointing at the store are removed in the same batch and
    the store id is pulled from every employee's storeIds. Products themselves
    are kept; they may still be sold by other stores.

    Returns:
        dict: Success message with a deletion summary
    """
    if not store_id:
        raise HTTPException(
            status_code=400,
            detail="Missing store ID parameter"
        )

    try:
        db = get_firestore_client()
        store_ref = db.collection(STORES_COLLECTION).document(store_id)
        store_doc = store_ref.get()

        if not store_doc.exists:
            raise HTTPException(
                status_code=404,
                detail=f"Store with ID {store_id} not found"
            )

        store_data = store_doc.to_dict() or {}
        batch = db.batch()

        relations = db.collection('productStores').where('storeId', '==', store_id).stream()
        relations_deleted = 0
        for relation in relations:
            batch.delete(relation.reference)
            relations_deleted += 1

        employees = db.collection('employees').where('storeIds', 'array_contains', store_id).stream()
        employees_updated = 0
        for employee in employees:
            batch.update(employee.reference, {
                'storeIds': firestore.firestore.ArrayRemove([store_id]),
                'updatedAt': firestore.firestore.SERVER_TIMESTAMP
            })
            employees_updated += 1

        batch.delete(store_ref)
        batch.commit()
        await invalidate_product_listings()

        print(f"DEBUG: Store {store_id} deleted with {relations_deleted} product relations")

        return {
            "message": f"Store '{store_data.get('name', store_id)}' deleted",
            "storeId": store_id,
            "deletionSummary": {
                "productStores": relations_deleted,
                "employeesUpdated": employees_updated
            }
        }

    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error during store deletion: {str(exc)}"
        )
