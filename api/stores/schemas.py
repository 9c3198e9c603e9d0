"""
This module defines the Pydantic models used for store management.
These models are used for request and response validation and serialization.
"""

from typing import Optional, List

from pydantic import BaseModel, Field

from api.common.schemas import TimestampMixin, JSendResponse


class StoreBase(BaseModel):
    """
    Fields shared by every store shape.
    """
    name: str = Field(..., min_length=1)
    whatsapp: str = Field(..., min_length=1)
    city: Optional[str] = None
    address: Optional[str] = None
    deliveryFixedFee: float = 0
    freeShippingMinValue: float = 0


class StoreInsertPayload(StoreBase):
    """
    Represents the request data for creating a new store.
    """
    pass


class StoreUpdatePayload(BaseModel):
    """
    Represents the request data for updating store information.
    All fields are optional to allow partial updates.
    """
    name: Optional[str] = Field(None, min_length=1)
    whatsapp: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = None
    address: Optional[str] = None
    deliveryFixedFee: Optional[float] = None
    freeShippingMinValue: Optional[float] = None


class StoreInDB(StoreBase, TimestampMixin):
    """
    Represents a store as stored in the database.
    """
    id: str


class StoreSummary(BaseModel):
    """
    The store fields embedded in a product.
    """
    id: str
    name: str
    whatsapp: Optional[str] = None
    city: Optional[str] = None


class StoreItemData(BaseModel):
    item: StoreInDB


class StoresData(BaseModel):
    items: List[StoreInDB]


class StoreResponse(JSendResponse[StoreItemData]):
    pass


class StoreListResponse(JSendResponse[StoresData]):
    pass
