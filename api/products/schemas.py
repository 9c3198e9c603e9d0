"""
This module defines the Pydantic models used for product management.
These models are used for request and response validation and serialization.
"""

from datetime import datetime, time
from enum import Enum
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, Field, computed_field, field_validator

from api.common.schemas import TimestampMixin, PaginationResponse, JSendResponse
from api.common.utils import is_promotion_active, parse_array_field, localize
from api.stores.schemas import StoreSummary


class ProductCategory(str, Enum):
    APARELHO = "aparelho"
    ACESSORIO = "acessorio"


class ProductVariant(BaseModel):
    """
    A sellable variation of a product, e.g. "128GB / Preto".
    """
    name: str
    attributes: Dict[str, str] = {}
    price: float = 0
    originalPrice: Optional[float] = None
    quantity: int = 0


def _parse_list_field(value):
    # A cleared input arrives as [""]
    return [item for item in parse_array_field(value) if not (isinstance(item, str) and not item.strip())]


def _parse_promotion_end(value):
    """Date-only values mean the end of that day in the store timezone."""
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if len(value) == 10:
            day = datetime.strptime(value, "%Y-%m-%d").date()
            return localize(datetime.combine(day, time(23, 59, 59)))
    return value


class ProductFields(BaseModel):
    """
    Scalar product fields shared by the insert payload and the stored document.
    """
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(0, ge=0)
    originalPrice: Optional[float] = None
    storage: Optional[str] = None
    ram: Optional[str] = None
    colors: List[str] = []
    isPromotion: bool = False
    promotionEndDate: Optional[datetime] = None
    category: ProductCategory = ProductCategory.APARELHO
    brand: Optional[str] = None
    subcategory: Optional[str] = None
    quantity: int = 0
    wholesalePrice: float = 0
    installmentPrice: float = 0
    maxInstallments: int = 12
    hasVariations: bool = False
    variants: List[ProductVariant] = []

    @field_validator('colors', 'variants', mode='before')
    @classmethod
    def parse_list_fields(cls, value):
        return _parse_list_field(value)

    @field_validator('promotionEndDate', mode='before')
    @classmethod
    def parse_promotion_end(cls, value):
        return _parse_promotion_end(value)


class ProductInsertPayload(ProductFields):
    """
    Everything needed to create a product: scalars, store associations and
    the raw image files. Used once and thrown away.
    """
    storeIds: List[str] = []
    imageFiles: List[Any] = Field(default_factory=list, exclude=True)


class ProductUpdatePayload(BaseModel):
    """
    Everything needed to update a product. Scalars left as None keep their
    stored value; storeIds None keeps the current stores, a list replaces them.
    """
    id: str
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    originalPrice: Optional[float] = None
    storage: Optional[str] = None
    ram: Optional[str] = None
    colors: Optional[List[str]] = None
    isPromotion: Optional[bool] = None
    promotionEndDate: Optional[datetime] = None
    category: Optional[ProductCategory] = None
    brand: Optional[str] = None
    subcategory: Optional[str] = None
    quantity: Optional[int] = None
    wholesalePrice: Optional[float] = None
    installmentPrice: Optional[float] = None
    maxInstallments: Optional[int] = None
    hasVariations: Optional[bool] = None
    variants: Optional[List[ProductVariant]] = None
    storeIds: Optional[List[str]] = None
    imageFiles: List[Any] = Field(default_factory=list, exclude=True)
    imagesToDelete: List[str] = []

    @field_validator('colors', 'variants', mode='before')
    @classmethod
    def parse_list_fields(cls, value):
        if value is None:
            return None
        return _parse_list_field(value)

    @field_validator('promotionEndDate', mode='before')
    @classmethod
    def parse_promotion_end(cls, value):
        return _parse_promotion_end(value)


class ProductInDB(ProductFields, TimestampMixin):
    """
    Represents a product as stored, with its images and populated stores.
    """
    id: str
    images: List[str] = []
    storeIds: List[str] = []
    stores: List[StoreSummary] = []

    @field_validator('images', mode='before')
    @classmethod
    def parse_images(cls, value):
        return _parse_list_field(value)

    @computed_field
    @property
    def promotionActive(self) -> bool:
        return is_promotion_active(self.isPromotion, self.promotionEndDate)


class ProductFilters(BaseModel):
    """
    Listing filters, passed through from the query string.
    """
    q: Optional[str] = None
    category: Optional[ProductCategory] = None
    isPromotion: Optional[bool] = None
    store: Optional[str] = None
    minPrice: Optional[float] = None
    maxPrice: Optional[float] = None


class ProductDetailData(BaseModel):
    """
    Container for a single product item.
    """
    item: ProductInDB


class ProductsData(PaginationResponse[ProductInDB]):
    """
    Represents a paginated list of products for response.
    """
    pass


class ProductResponse(JSendResponse[ProductDetailData]):
    """Response model for single product operations."""
    pass


class ProductListResponse(JSendResponse[ProductsData]):
    """Response model for product list operations."""
    pass
