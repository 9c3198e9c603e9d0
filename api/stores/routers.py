from fastapi import APIRouter, HTTPException, Depends, Path
from starlette import status

from api.auth.dependencies import require_create, require_update, require_delete
from api.common.schemas import JSendResponse
from api.stores.schemas import (
    StoreInsertPayload, StoreUpdatePayload, StoreItemData, StoresData,
    StoreResponse, StoreListResponse,
)
from api.stores.services import (
    list_stores_service, get_store_service, create_store_service,
    update_store_service, delete_store_service,
)

router = APIRouter()


@router.get("", response_model=StoreListResponse)
async def list_stores():
    """
    List every store, ordered by name. Public: the storefront shows them.
    """
    try:
        stores = list_stores_service()
        return StoreListResponse.success(StoresData(items=stores))
    except HTTPException as e:
        return StoreListResponse.error(message=str(e.detail), code=e.status_code)
    except Exception as e:
        return StoreListResponse.error(message=str(e), code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.get("/{store_id}", response_model=StoreResponse)
async def get_store(store_id: str = Path(..., description="The ID of the store")):
    try:
        store = get_store_service(store_id)
        return StoreResponse.success(StoreItemData(item=store))
    except HTTPException as e:
        return StoreResponse.error(message=str(e.detail), code=e.status_code)
    except Exception as e:
        return StoreResponse.error(message=str(e), code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.post("", response_model=StoreResponse)
async def create_store(
    store_data: StoreInsertPayload,
    employee=Depends(require_create)
):
    """
    Create a new store. Requires the canCreate permission.
    """
    try:
        store = create_store_service(store_data)
        return StoreResponse.success(StoreItemData(item=store))
    except HTTPException as e:
        return StoreResponse.error(message=str(e.detail), code=e.status_code)
    except Exception as e:
        return StoreResponse.error(message=str(e), code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.put("/{store_id}", response_model=StoreResponse)
async def update_store(
    store_data: StoreUpdatePayload,
    store_id: str = Path(..., description="The ID of the store to update"),
    employee=Depends(require_update)
):
    """
    Update store information (partial). Requires the canUpdate permission.
    """
    try:
        store = await update_store_service(store_id, store_data)
        return StoreResponse.success(StoreItemData(item=store))
    except HTTPException as e:
        return StoreResponse.error(message=str(e.detail), code=e.status_code)
    except Exception as e:
        return StoreResponse.error(message=str(e), code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.delete("/{store_id}", response_model=JSendResponse[dict])
async def delete_store(
    store_id: str = Path(..., description="The ID of the store to delete"),
    employee=Depends(require_delete)
):
    """
    Delete a store and its product relations. Requires the canDelete permission.
    """
    try:
        result = await delete_store_service(store_id)
        return JSendResponse.success(result)
    except HTTPException as e:
        return JSendResponse.error(message=str(e.detail), code=e.status_code)
    except Exception as e:
        return JSendResponse.error(message=str(e), code=status.HTTP_500_INTERNAL_SERVER_ERROR)
