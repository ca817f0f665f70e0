from pydantic import BaseModel, EmailStr, Field, field_validator, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Annotated, List, Literal, Optional

# Categories offered by the listing form
Category = Literal[
    "books",
    "electronics",
    "furniture",
    "clothing",
    "stationery",
    "transportation",
    "home",
    "other",
]

# Empty strings count as missing
NonEmptyStr = Annotated[str, Field(min_length=1)]


class CamelModel(BaseModel):
    """
    Wire format is camelCase (roomNumber, whatsappNumber, ...).
    Requests also accept the snake_case field names.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RegisterRequest(CamelModel):
    """
    Registration payload validation.

    Every field is required; empty strings count as missing.
    EmailStr normalises the domain part only, so the local part is
    stored exactly as submitted.
    """
    name: NonEmptyStr
    email: EmailStr
    password: NonEmptyStr
    hostel: NonEmptyStr
    room_number: NonEmptyStr
    whatsapp_number: NonEmptyStr

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) > 128:
            raise ValueError('Password too long')
        return v


class LoginRequest(CamelModel):
    email: EmailStr
    password: NonEmptyStr


class UserResponse(CamelModel):
    """
    Safe account representation for API responses.

    Critical: Never include password_hash in any response.
    """
    id: str
    name: str
    email: str
    hostel: str
    room_number: str
    whatsapp_number: str
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(CamelModel):
    """Only hostel, room and contact details can change after registration."""
    hostel: Optional[str] = Field(default=None, min_length=1)
    room_number: Optional[str] = Field(default=None, min_length=1)
    whatsapp_number: Optional[str] = Field(default=None, min_length=1)


class TokenClaims(BaseModel):
    """Identity claims carried by a session token."""
    id: str
    email: str
    name: str
    iat: int
    exp: int


class SellerSummary(CamelModel):
    id: str
    name: str
    hostel: str
    room_number: str
    whatsapp_number: str
    whatsapp_link: str


class ProductCreate(CamelModel):
    name: NonEmptyStr
    description: NonEmptyStr
    price: float = Field(gt=0)
    category: Category
    images: List[str] = []
    hostel: NonEmptyStr
    room_number: NonEmptyStr


class ProductUpdate(CamelModel):
    """Partial update; fields left out of the body are not touched."""
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, gt=0)
    category: Optional[Category] = None
    images: Optional[List[str]] = None
    hostel: Optional[str] = Field(default=None, min_length=1)
    room_number: Optional[str] = Field(default=None, min_length=1)


class ProductResponse(CamelModel):
    id: str
    name: str
    description: str
    price: float
    category: str
    images: List[str]
    hostel: str
    room_number: str
    seller_id: str
    created_at: datetime
    updated_at: datetime
    seller: Optional[SellerSummary] = None


class HostelCreate(BaseModel):
    name: NonEmptyStr


class HostelResponse(CamelModel):
    id: str
    name: str
    created_at: datetime


class SuccessResponse(BaseModel):
    """
    Generic response for operations without specific return data.
    """
    success: bool = True
