from pydantic import BaseModel, EmailStr, Field, AliasChoices
from typing import Optional
from datetime import datetime

class UserBase(BaseModel):
    email: EmailStr
    display_name: Optional[str] = Field(default=None, max_length=255)

class UserCreate(UserBase):
    is_superuser: bool = False
    is_active: bool = True

class User(UserBase):
    id: int
    is_active: bool
    is_superuser: bool
    created_at: datetime

    class Config:
        from_attributes = True

class SellerInfo(BaseModel):
    """Public seller card attached to products."""
    id: int
    name: Optional[str] = Field(default=None, validation_alias=AliasChoices("display_name", "name"))
    email: Optional[str] = None

    class Config:
        from_attributes = True
