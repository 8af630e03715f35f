from pydantic import BaseModel, Field, AliasChoices
from typing import Optional, List, Dict, Union
from datetime import datetime
from decimal import Decimal

from app.schemas.user import SellerInfo


class ProductAttributeIn(BaseModel):
    """List form of an attribute as sent by the mobile client: {"name": ..., "options": [...]}."""
    name: str
    options: Union[List[str], str] = []

# Either {"pole_material": ["Chrome"], "Colour": "Red"} or [{"name": "pole_material", "options": ["Chrome"]}]
AttributesIn = Union[Dict[str, Union[List[str], str, None]], List[ProductAttributeIn]]

class ProductBase(BaseModel):
    status: Optional[str] = Field(default=None, pattern="^(published|draft|pending|private)$")
    description: Optional[str] = None
    short_description: Optional[str] = None
    sale_price: Optional[Decimal] = Field(default=None, ge=0)
    categories: Optional[List[int]] = None # Category ids
    images: Optional[List[int]] = None # First id is the main image, the rest the gallery
    attributes: Optional[AttributesIn] = None

class ProductCreate(ProductBase):
    # name and regular_price are checked by the catalog so the client gets a 400 with a stable code
    name: Optional[str] = Field(default=None, max_length=255)
    regular_price: Optional[Decimal] = Field(default=None, ge=0)
    seller_id: Optional[int] = None # Honoured for administrators only

class ProductUpdate(ProductBase):
    name: Optional[str] = Field(default=None, max_length=255)
    regular_price: Optional[Decimal] = Field(default=None, ge=0)


class Category(BaseModel):
    id: int
    name: str
    slug: str

    class Config:
        from_attributes = True

class ProductAttribute(BaseModel):
    name: str = Field(validation_alias=AliasChoices("label", "name"))
    values: List[str] = []

    class Config:
        from_attributes = True

class Product(BaseModel):
    id: int
    name: str
    slug: str
    status: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: Decimal
    regular_price: Decimal
    sale_price: Optional[Decimal] = None
    on_sale: bool = False
    seller_id: Optional[int] = None
    seller: Optional[SellerInfo] = None
    categories: List[Category] = []
    image_id: Optional[int] = None
    gallery_image_ids: Optional[List[int]] = None
    attributes: List[ProductAttribute] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class ProductListing(BaseModel):
    products: List[Product]
    total: int
    pages: int
