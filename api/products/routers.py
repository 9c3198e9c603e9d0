from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query, Path, Depends, Request
from starlette import status

from api.auth.dependencies import require_create, require_update, require_delete
from api.common.schemas import JSendResponse
from api.employees.schemas import EmployeeInDB
from api.products.payloads import (
    build_insert_payload, build_update_payload,
    IMAGE_FIELD, STORE_IDS_FIELD, IMAGES_TO_DELETE_FIELD, LIST_FIELD_NAMES, PRODUCT_FIELD_NAMES,
)
from api.products.schemas import (
    ProductsData, ProductDetailData, ProductFilters, ProductCategory,
)
from api.products.services import (
    get_products, get_product_by_id, get_related_products,
    create_product, update_product, delete_product,
)

router = APIRouter()


async def read_product_form(request: Request) -> Dict[str, Any]:
    """
    Dependency that reads the multipart product form.

    Returns:
        dict with the scalar `fields`, the raw `storeIds` (None when the form
        has no such key), the image `files` and `imagesToDelete`
    """
    form = await request.form()

    fields = {}
    for name in PRODUCT_FIELD_NAMES:
        if name not in form:
            continue
        fields[name] = form.getlist(name) if name in LIST_FIELD_NAMES else form.get(name)

    return {
        "fields": fields,
        "storeIds": form.getlist(STORE_IDS_FIELD) if STORE_IDS_FIELD in form else None,
        "files": form.getlist(IMAGE_FIELD),
        "imagesToDelete": form.getlist(IMAGES_TO_DELETE_FIELD),
    }


@router.get("", response_model=JSendResponse[ProductsData])
async def list_products(
        q: Optional[str] = Query(None, description="Text to look for in name, brand or subcategory"),
        category: Optional[ProductCategory] = Query(None, description="aparelho or acessorio"),
        is_promotion: Optional[bool] = Query(None, alias="isPromotion", description="Only (or no) promotions"),
        store: Optional[str] = Query(None, description="Only products sold in this store"),
        min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
        max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
        page: int = Query(1, ge=1, description="Page number"),
        size: int = Query(100, ge=1, le=1000, description="Items per page")
):
    """
    Get the product catalogue, newest first. Public.

    Returns:
        JSendResponse containing products data and pagination info
    """
    try:
        filters = ProductFilters(
            q=q, category=category, isPromotion=is_promotion,
            store=store, minPrice=min_price, maxPrice=max_price
        )
        products_data = await get_products(filters, page, size)
        return JSendResponse.success(products_data)
    except HTTPException as e:
        return JSendResponse.error(
            message=str(e.detail),
            code=e.status_code
        )
    except Exception as e:
        return JSendResponse.error(
            message=str(e),
            code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


@router.get("/{product_id}", response_model=JSendResponse[ProductDetailData])
async def get_product(
        product_id: str = Path(..., description="The ID of the product to retrieve")
):
    """
    Get a product by ID with its stores. Public.
    """
    try:
        product = await get_product_by_id(product_id)
        return JSendResponse.success(ProductDetailData(item=product))
    except HTTPException as e:
        return JSendResponse.error(
            message=str(e.detail),
            code=e.status_code
        )
    except Exception as e:
        return JSendResponse.error(
            message=str(e),
            code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


@router.get("/{product_id}/related", response_model=JSendResponse[ProductsData])
async def list_related_products(
        product_id: str = Path(..., description="The product to find relatives of")
):
    """
    Products of the same category, for the "see also" shelf.
    """
    try:
        related = await get_related_products(product_id)
        return JSendResponse.success(ProductsData(
            items=related, total=len(related), page=1, size=len(related), pages=1
        ))
    except HTTPException as e:
        return JSendResponse.error(
            message=str(e.detail),
            code=e.status_code
        )
    except Exception as e:
        return JSendResponse.error(
            message=str(e),
            code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


@router.post("", response_model=JSendResponse[ProductDetailData])
async def create_product_endpoint(
    form: Dict[str, Any] = Depends(read_product_form),
    employee: EmployeeInDB = Depends(require_create)
):
    """
    Create a product from the multipart admin form.

    The form carries the product fields, `storeIds` (repeated or JSON) and
    up to three `images` files.
    """
    try:
        payload = build_insert_payload(form["fields"], form["storeIds"], form["files"])
        created_product = await create_product(payload)
        return JSendResponse.success(ProductDetailData(item=created_product))
    except HTTPException as e:
        return JSendResponse.error(
            message=str(e.detail),
            code=e.status_code
        )
    except ValueError as e:
        return JSendResponse.error(
            message=str(e),
            code=status.HTTP_400_BAD_REQUEST
        )
    except Exception as e:
        return JSendResponse.error(
            message=str(e),
            code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


@router.put("/{product_id}", response_model=JSendResponse[ProductDetailData])
async def update_existing_product(
        product_id: str = Path(..., description="The ID of the product to update"),
        form: Dict[str, Any] = Depends(read_product_form),
        employee: EmployeeInDB = Depends(require_update)
):
    """
    Update a product from the multipart admin form.

    Only the fields present in the form change. `imagesToDelete` lists
    stored image URLs to drop; new `images` are appended after the kept ones.
    Sending `storeIds` replaces the product's stores.
    """
    try:
        payload = build_update_payload(
            product_id, form["fields"], form["storeIds"], form["files"], form["imagesToDelete"]
        )
        updated_product = await update_product(payload)
        return JSendResponse.success(ProductDetailData(item=updated_product))
    except HTTPException as e:
        return JSendResponse.error(
            message=str(e.detail),
            code=e.status_code
        )
    except ValueError as e:
        return JSendResponse.error(
            message=str(e),
            code=status.HTTP_400_BAD_REQUEST
        )
    except Exception as e:
        return JSendResponse.error(
            message=str(e),
            code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


@router.delete("/{product_id}", response_model=JSendResponse[dict])
async def delete_existing_product(
        product_id: str = Path(..., description="The ID of the product to delete"),
        employee: EmployeeInDB = Depends(require_delete)
):
    """
    Delete a product with its store links and images.
    """
    try:
        result = await delete_product(product_id)
        return JSendResponse.success(result)
    except HTTPException as e:
        return JSendResponse.error(
            message=str(e.detail),
            code=e.status_code
        )
    except Exception as e:
        return JSendResponse.error(
            message=str(e),
            code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
