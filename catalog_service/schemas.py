"""
Pydantic schemas for the catalog API.

Wire names are camelCase (``productName``, ``isPublished``...) to keep the
contract the frontend already speaks; Python attributes stay snake_case.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProductType(str, Enum):
    foods = "Foods"
    electronics = "Electronics"
    clothing = "Clothing"
    books = "Books"
    toys = "Toys"
    other = "Other"


class ExchangeEligibility(str, Enum):
    yes = "Yes"
    no = "No"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False
    )


# --- Auth ---
class LoginData(CamelModel):
    email_or_phone: Optional[str] = None


class RegisterData(CamelModel):
    email_or_phone: Optional[str] = None
    name: Optional[str] = None
    password: Optional[str] = None


class VerifyOTPData(CamelModel):
    user_id: Optional[str] = None
    otp: Optional[str] = None


class UserPublic(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: str
    email_or_phone: str
    name: Optional[str] = None
    role: str


class UserProfile(UserPublic):
    is_verified: bool
    created_at: datetime


class OTPIssued(CamelModel):
    success: bool = True
    message: str
    otp: Optional[str] = None
    user_id: str


class LoginResponse(CamelModel):
    success: bool = True
    message: str
    token: str
    user: UserPublic


# --- Products ---
class ProductCreate(CamelModel):
    product_name: str = Field(min_length=1)
    product_type: ProductType
    quantity_stock: int = Field(ge=0)
    mrp: float = Field(ge=0)
    selling_price: float = Field(ge=0)
    brand_name: str = Field(min_length=1)
    exchange_eligibility: ExchangeEligibility = ExchangeEligibility.no


class ProductUpdate(CamelModel):
    product_name: Optional[str] = Field(default=None, min_length=1)
    product_type: Optional[ProductType] = None
    quantity_stock: Optional[int] = Field(default=None, ge=0)
    mrp: Optional[float] = Field(default=None, ge=0)
    selling_price: Optional[float] = Field(default=None, ge=0)
    brand_name: Optional[str] = Field(default=None, min_length=1)
    exchange_eligibility: Optional[ExchangeEligibility] = None


class ProductOwner(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: Optional[str] = None
    email_or_phone: str


class ProductOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_name: str
    product_type: str
    quantity_stock: int
    mrp: float
    selling_price: float
    brand_name: str
    images: List[str] = []
    exchange_eligibility: str
    is_published: bool
    # read from the ``owner`` relationship, sent as ``createdBy``
    created_by: ProductOwner = Field(validation_alias="owner", serialization_alias="createdBy")
    created_at: datetime
    updated_at: datetime


def dump(model: BaseModel) -> dict:
    return model.model_dump(by_alias=True, mode="json")


def product_payload(product) -> dict:
    return dump(ProductOut.model_validate(product))
