"""
Request and response schemas.

Each entity lives in its own MongoDB collection ("user", "product", "order").
Documents are stored with snake_case keys; the JSON surface uses camelCase.
Input models ignore unknown keys, so server-controlled fields (createdAt,
status on create, role on create) sent by a client are dropped.
"""

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


OrderStatus = Literal["pending", "paid", "shipped", "cancelled"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ------------ Auth ------------
class UserLogin(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(CamelModel):
    access_token: str


class ClaimsOut(BaseModel):
    sub: str
    email: str
    role: str
    exp: int


# ------------ Users ------------
class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None


class UserOut(CamelModel):
    id: str
    email: str
    name: str
    role: Role = Role.USER
    created_at: Optional[datetime] = None


# ------------ Products ------------
class ProductCreate(CamelModel):
    name: str
    description: Optional[str] = None
    price: float
    stock: int = 0
    image_url: Optional[str] = None


class ProductUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    stock: Optional[int] = None
    image_url: Optional[str] = None


class ProductOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    stock: int = 0
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None


# ------------ Orders ------------
class OrderCreate(CamelModel):
    user_id: str
    product_ids: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("productIds", "product_ids", "items"),
    )
    total: Optional[float] = None


class OrderUpdate(CamelModel):
    product_ids: Optional[List[str]] = Field(
        None,
        validation_alias=AliasChoices("productIds", "product_ids", "items"),
    )
    total: Optional[float] = None
    status: Optional[OrderStatus] = None


class OrderOut(CamelModel):
    id: str
    user_id: str
    items: List[str] = []
    total: float = 0
    status: OrderStatus = "pending"
    created_at: Optional[datetime] = None
