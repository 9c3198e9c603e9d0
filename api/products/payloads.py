"""
Builds product insert/update payloads out of raw form input.

Admin forms send everything as strings: booleans as "true"/"false", arrays
either repeated or JSON-encoded, store ids possibly nested. The builders
normalize that into typed payloads the services persist, and into the
multipart parts the HTTP client sends.
"""
import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from fastapi import HTTPException
from starlette import status

from api.common.utils import parse_array_field
from api.products.schemas import ProductFields, ProductInsertPayload, ProductUpdatePayload

MAX_IMAGES_PER_REQUEST = 3
IMAGE_FIELD = "images"
# Form keys the builder reads besides the scalar product fields
STORE_IDS_FIELD = "storeIds"
IMAGES_TO_DELETE_FIELD = "imagesToDelete"

PRODUCT_FIELD_NAMES = tuple(ProductFields.model_fields.keys())
LIST_FIELD_NAMES = ("colors", "variants")


def normalize_store_ids(raw: Any) -> List[str]:
    """
    Flatten store ids into a list of non-empty strings.
    Order is kept and duplicates are not removed.
    """
    store_ids = []
    for value in parse_array_field(raw):
        if isinstance(value, (list, tuple)):
            store_ids.extend(normalize_store_ids(list(value)))
            continue
        text = str(value).strip() if value is not None else ""
        if text:
            store_ids.append(text)
    return store_ids


def validate_image_files(files: Optional[Iterable[Any]]) -> List[Any]:
    """
    Drop empty file slots and enforce the per-request image limit.

    Raises:
        HTTPException: 400 when more than MAX_IMAGES_PER_REQUEST files are sent
    """
    valid = []
    for file in files or []:
        if file is None:
            continue
        # Browsers post an unnamed empty part for an untouched file input
        if hasattr(file, "filename") and not file.filename:
            continue
        valid.append(file)

    if len(valid) > MAX_IMAGES_PER_REQUEST:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"At most {MAX_IMAGES_PER_REQUEST} images can be sent per request"
        )
    return valid


def _scalar_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    data = {}
    for name in PRODUCT_FIELD_NAMES:
        value = fields.get(name)
        if value is None:
            continue
        # Empty text inputs mean "not provided"; an empty list field clears it
        if isinstance(value, str) and not value.strip() and name not in LIST_FIELD_NAMES:
            continue
        data[name] = value
    return data


def build_insert_payload(
    fields: Mapping[str, Any],
    store_ids: Any = None,
    files: Optional[Iterable[Any]] = None
) -> ProductInsertPayload:
    """
    Build the payload for creating a product.

    Args:
        fields: Raw scalar fields keyed by product field name
        store_ids: Store ids as a list, a JSON string or nested lists
        files: Image files to upload, at most MAX_IMAGES_PER_REQUEST

    Returns:
        ProductInsertPayload
    """
    return ProductInsertPayload(
        **_scalar_fields(fields),
        storeIds=normalize_store_ids(store_ids),
        imageFiles=validate_image_files(files)
    )


def build_update_payload(
    product_id: str,
    fields: Mapping[str, Any],
    store_ids: Any = None,
    files: Optional[Iterable[Any]] = None,
    images_to_delete: Any = None
) -> ProductUpdatePayload:
    """
    Build the payload for updating a product.

    Fields absent from `fields` stay untouched. `store_ids` None keeps the
    current stores, anything else (an empty list included) replaces them.
    """
    if not product_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing product ID parameter")

    return ProductUpdatePayload(
        id=product_id,
        **_scalar_fields(fields),
        storeIds=None if store_ids is None else normalize_store_ids(store_ids),
        imageFiles=validate_image_files(files),
        imagesToDelete=[str(url) for url in parse_array_field(images_to_delete) if url]
    )


def merge_image_urls(existing: Iterable[str], to_delete: Iterable[str], uploaded: Iterable[str]) -> List[str]:
    """
    Final image list after an update: the kept images in their stored order
    followed by the new uploads in upload order.
    """
    removed = set(to_delete or [])
    return [url for url in (existing or []) if url not in removed] + list(uploaded or [])


def to_document(payload: ProductInsertPayload) -> Dict[str, Any]:
    """Product document fields, without store associations and image files."""
    return payload.model_dump(exclude={"storeIds", "imageFiles"})


def update_changes(payload: ProductUpdatePayload) -> Dict[str, Any]:
    """Only the scalar fields the update actually sets."""
    data = payload.model_dump(exclude={"id", "storeIds", "imageFiles", "imagesToDelete"})
    return {k: v for k, v in data.items() if v is not None}


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_multipart(payload: ProductInsertPayload) -> List[Tuple[str, Any]]:
    """
    Encode an insert payload as multipart parts, the way the admin form posts it.
    Scalars become text parts, lists repeat their key, variants travel as JSON
    and each image file is sent under IMAGE_FIELD.
    """
    parts: List[Tuple[str, Any]] = []
    data = payload.model_dump(mode="json", exclude={"storeIds", "imageFiles", "variants"})

    for name, value in data.items():
        if value is None:
            continue
        if isinstance(value, list):
            for item in value:
                parts.append((name, (None, _form_value(item))))
            continue
        parts.append((name, (None, _form_value(value))))

    if payload.variants:
        variants = [variant.model_dump() for variant in payload.variants]
        parts.append(("variants", (None, json.dumps(variants))))

    for store_id in payload.storeIds:
        parts.append((STORE_IDS_FIELD, (None, store_id)))

    for image in payload.imageFiles:
        parts.append((IMAGE_FIELD, image))

    return parts
