from typing import Dict, List, Optional

from fastapi import HTTPException
from firebase_admin import firestore

from api.common.cache import (
    get_cache, set_cache, generate_cache_key, invalidate_product_listings, PRODUCT_LIST_PREFIX,
)
from api.common.schemas import paginate
from api.common.storage import upload_images, delete_images
from api.products.payloads import merge_image_urls, to_document, update_changes
from api.products.schemas import (
    ProductInDB, ProductsData, ProductFilters, ProductInsertPayload, ProductUpdatePayload,
)
from api.stores.schemas import StoreSummary

PRODUCTS_COLLECTION = 'products'
PRODUCT_STORES_COLLECTION = 'productStores'
STORES_COLLECTION = 'stores'
RELATED_PRODUCTS_LIMIT = 4


def get_firestore_client():
    return firestore.client()


def relation_id(product_id: str, store_id: str) -> str:
    """Relation documents are keyed by the pair, so a pair is stored once."""
    return f"{product_id}_{store_id}"


def load_store_index(db) -> Dict[str, StoreSummary]:
    """Every store keyed by id, in the shape embedded in products."""
    index = {}
    for doc in db.collection(STORES_COLLECTION).stream():
        data = doc.to_dict() or {}
        index[doc.id] = StoreSummary(
            id=doc.id,
            name=data.get('name', ''),
            whatsapp=data.get('whatsapp'),
            city=data.get('city')
        )
    return index


def load_store_relations(db, product_id: Optional[str] = None) -> Dict[str, List[str]]:
    """
    Map product ids to their store ids, for one product or for all of them.
    """
    query = db.collection(PRODUCT_STORES_COLLECTION)
    if product_id:
        query = query.where('productId', '==', product_id)

    relations: Dict[str, List[str]] = {}
    for doc in query.stream():
        data = doc.to_dict() or {}
        relations.setdefault(data.get('productId'), []).append(data.get('storeId'))
    return relations


def _to_product(doc_id: str, data: dict, store_ids: List[str], store_index: Dict[str, StoreSummary]) -> ProductInDB:
    product_data = dict(data or {})
    product_data['id'] = doc_id
    product_data['storeIds'] = store_ids
    # Relations to stores deleted outside the API are skipped
    product_data['stores'] = [store_index[store_id] for store_id in store_ids if store_id in store_index]
    return ProductInDB(**product_data)


def _matches(product: ProductInDB, filters: ProductFilters) -> bool:
    if filters.q:
        needle = filters.q.strip().lower()
        haystack = " ".join(filter(None, [product.name, product.brand, product.subcategory])).lower()
        if needle not in haystack:
            return False
    if filters.store and filters.store not in product.storeIds:
        return False
    if filters.minPrice is not None and product.price < filters.minPrice:
        return False
    if filters.maxPrice is not None and product.price > filters.maxPrice:
        return False
    return True


def _write_store_relations(db, product_id: str, store_ids: List[str], existing: Optional[List[str]] = None,
                           batch=None):
    """
    Replace the store associations of a product in one batch.
    Repeated store ids land on the same relation document. A caller-supplied
    batch is filled but left for the caller to commit.
    """
    own_batch = batch is None
    if own_batch:
        batch = db.batch()
    for store_id in existing or []:
        batch.delete(db.collection(PRODUCT_STORES_COLLECTION).document(relation_id(product_id, store_id)))
    for store_id in store_ids:
        batch.set(
            db.collection(PRODUCT_STORES_COLLECTION).document(relation_id(product_id, store_id)),
            {
                'productId': product_id,
                'storeId': store_id,
                'createdAt': firestore.firestore.SERVER_TIMESTAMP
            }
        )
    if own_batch:
        batch.commit()


def _ensure_stores_exist(store_ids: List[str], store_index: Dict[str, StoreSummary]):
    missing = sorted({store_id for store_id in store_ids if store_id not in store_index})
    if missing:
        raise HTTPException(
            status_code=404,
            detail=f"Store(s) not found: {', '.join(missing)}"
        )


async def get_products(filters: ProductFilters, page: int = 1, size: int = 100) -> ProductsData:
    """
    Service function to retrieve products with their stores, filtered and paginated.
    Results are cached per filter set until the next catalogue write.

    Args:
        filters: Listing filters from the query string
        page: Page number (starts at 1)
        size: Items per page

    Returns:
        ProductsData object containing the paginated products, newest first

    Raises:
        HTTPException: If errors occur during retrieval
    """
    cache_key = generate_cache_key(
        PRODUCT_LIST_PREFIX,
        {**filters.model_dump(mode="json"), "page": page, "size": size}
    )
    cached = await get_cache(cache_key)
    if cached:
        print(f"DEBUG: Product listing served from cache: {cache_key}")
        return ProductsData(**cached)

    try:
        db = get_firestore_client()
        query = db.collection(PRODUCTS_COLLECTION)
        if filters.category:
            query = query.where('category', '==', filters.category.value)
        if filters.isPromotion is not None:
            query = query.where('isPromotion', '==', filters.isPromotion)

        store_index = load_store_index(db)
        relations = load_store_relations(db)

        products = []
        for doc in query.stream():
            product = _to_product(doc.id, doc.to_dict(), relations.get(doc.id, []), store_index)
            if _matches(product, filters):
                products.append(product)

        products.sort(key=lambda p: p.createdAt.timestamp() if p.createdAt else 0, reverse=True)

        result = ProductsData(**paginate(products, page, size))
        await set_cache(cache_key, result.model_dump(mode="json"))
        return result

    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(exc)}"
        )


async def get_product_by_id(product_id: str) -> ProductInDB:
    """
    Service function to retrieve a single product with its stores.

    Raises:
        HTTPException: If product is not found or other errors occur
    """
    if not product_id:
        raise HTTPException(
            status_code=400,
            detail="Missing product ID parameter"
        )

    try:
        db = get_firestore_client()
        product_doc = db.collection(PRODUCTS_COLLECTION).document(product_id).get()

        if not product_doc.exists:
            raise HTTPException(
                status_code=404,
                detail=f"Product with ID {product_id} not found"
            )

        relations = load_store_relations(db, product_id)
        return _to_product(product_id, product_doc.to_dict(), relations.get(product_id, []), load_store_index(db))

    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(exc)}"
        )


async def get_related_products(product_id: str, limit: int = RELATED_PRODUCTS_LIMIT) -> List[ProductInDB]:
    """
    Other products of the same category, newest first.
    """
    product = await get_product_by_id(product_id)

    try:
        db = get_firestore_client()
        docs = db.collection(PRODUCTS_COLLECTION).where('category', '==', product.category.value).stream()
        store_index = load_store_index(db)
        relations = load_store_relations(db)

        related = [
            _to_product(doc.id, doc.to_dict(), relations.get(doc.id, []), store_index)
            for doc in docs if doc.id != product_id
        ]
        related.sort(key=lambda p: p.createdAt.timestamp() if p.createdAt else 0, reverse=True)
        return related[:limit]

    except Exception as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(exc)}"
        )


async def create_product(payload: ProductInsertPayload) -> ProductInDB:
    """
    Upload the images, store the product and link it to its stores.

    When the product or its store links cannot be written, the product
    document and the uploaded images are removed again.

    Args:
        payload: The insert payload from the payload builder

    Returns:
        The created product with its stores populated
    """
    db = get_firestore_client()
    _ensure_stores_exist(payload.storeIds, load_store_index(db))

    image_urls = await upload_images(payload.imageFiles)

    product_ref = db.collection(PRODUCTS_COLLECTION).document()
    product_written = False
    try:
        product_data = to_document(payload)
        product_data['images'] = image_urls
        product_data['createdAt'] = firestore.firestore.SERVER_TIMESTAMP
        product_data['updatedAt'] = firestore.firestore.SERVER_TIMESTAMP

        product_ref.set(product_data)
        product_written = True

        if payload.storeIds:
            _write_store_relations(db, product_ref.id, payload.storeIds)

    except Exception as exc:
        if product_written:
            try:
                product_ref.delete()
                print(f"DEBUG: Rolled back product {product_ref.id}")
            except Exception as rollback_error:
                print(f"Warning: Failed to roll back product {product_ref.id}: {str(rollback_error)}")
        if image_urls:
            await delete_images(image_urls)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create product: {str(exc)}"
        )

    await invalidate_product_listings()
    print(f"DEBUG: Created product {product_ref.id} in {len(set(payload.storeIds))} store(s)")
    return await get_product_by_id(product_ref.id)


async def update_product(payload: ProductUpdatePayload) -> ProductInDB:
    """
    Apply an update payload.

    New images are uploaded before anything is removed. The final image list
    is the kept images followed by the uploads. Store associations are
    replaced only when the payload carries store ids.

    Raises:
        HTTPException: If the product or a store is not found, or the update fails
    """
    db = get_firestore_client()
    product_ref = db.collection(PRODUCTS_COLLECTION).document(payload.id)
    product_doc = product_ref.get()

    if not product_doc.exists:
        raise HTTPException(
            status_code=404,
            detail=f"Product with ID {payload.id} not found"
        )

    if payload.storeIds is not None:
        _ensure_stores_exist(payload.storeIds, load_store_index(db))

    existing_images = (product_doc.to_dict() or {}).get('images') or []
    uploaded = await upload_images(payload.imageFiles)

    try:
        changes = update_changes(payload)
        changes['images'] = merge_image_urls(existing_images, payload.imagesToDelete, uploaded)
        changes['updatedAt'] = firestore.firestore.SERVER_TIMESTAMP
        if payload.storeIds is None:
            product_ref.update(changes)
        else:
            # Fields and store links change together or not at all
            batch = db.batch()
            batch.update(product_ref, changes)
            current = load_store_relations(db, payload.id).get(payload.id, [])
            _write_store_relations(db, payload.id, payload.storeIds, existing=current, batch=batch)
            batch.commit()

    except Exception as exc:
        if uploaded:
            await delete_images(uploaded)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update product: {str(exc)}"
        )

    removed = [url for url in payload.imagesToDelete if url in existing_images]
    if removed:
        await delete_images(removed)

    await invalidate_product_listings()
    return await get_product_by_id(payload.id)


async def delete_product(product_id: str) -> dict:
    """
    Delete a product, its store associations and its images.

    Returns:
        Summary of what was removed
    """
    if not product_id:
        raise HTTPException(
            status_code=400,
            detail="Missing product ID parameter"
        )

    try:
        db = get_firestore_client()
        product_ref = db.collection(PRODUCTS_COLLECTION).document(product_id)
        product_doc = product_ref.get()

        if not product_doc.exists:
            raise HTTPException(
                status_code=404,
                detail=f"Product with ID {product_id} not found"
            )

        images = (product_doc.to_dict() or {}).get('images') or []
        store_ids = load_store_relations(db, product_id).get(product_id, [])

        batch = db.batch()
        for store_id in store_ids:
            batch.delete(db.collection(PRODUCT_STORES_COLLECTION).document(relation_id(product_id, store_id)))
        batch.delete(product_ref)
        batch.commit()

    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(exc)}"
        )

    images_deleted = await delete_images(images) if images else 0
    await invalidate_product_listings()

    return {
        "message": "Product deleted successfully",
        "productId": product_id,
        "deletionSummary": {
            "productStores": len(store_ids),
            "images": images_deleted
        }
    }
