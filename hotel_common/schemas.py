"""Pydantic schemas shared across the services."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .models import BookingStatus, PaymentMethod, PaymentStatus, RoleEnum, RoomStatus, RoomType

DNI_PATTERN = r"^\d{8}$"
PHONE_PATTERN = r"^\d{9}$"


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ProfileCreate(BaseModel):
    full_name: str = Field(..., min_length=3, max_length=150)
    email: EmailStr
    dni: str = Field(..., pattern=DNI_PATTERN)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    address: str = Field(..., min_length=5, max_length=255)
    password: str = Field(..., min_length=6)


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=3, max_length=150)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    address: Optional[str] = Field(None, min_length=5, max_length=255)
    dni: Optional[str] = Field(None, pattern=DNI_PATTERN)


class ProfileRead(BaseModel):
    id: int
    full_name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    dni: Optional[str] = None
    roles: List[RoleEnum] = Field(default_factory=list)
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("roles", mode="before")
    @classmethod
    def _flatten_roles(cls, value):
        return sorted(getattr(entry, "role", entry) for entry in value or [])


class RoleGrant(BaseModel):
    role: RoleEnum


class NavigationItem(BaseModel):
    label: str
    path: str


class RoomBase(BaseModel):
    name: str = Field(..., max_length=150)
    type: RoomType
    price_per_night: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    description: Optional[str] = None
    capacity: int = Field(2, ge=1)
    image_url: Optional[str] = None
    status: RoomStatus = RoomStatus.AVAILABLE
    amenities: List[str] = Field(default_factory=list)


class RoomCreate(RoomBase):
    pass


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=150)
    type: Optional[RoomType] = None
    price_per_night: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    description: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1)
    image_url: Optional[str] = None
    status: Optional[RoomStatus] = None
    amenities: Optional[List[str]] = None


class RoomRead(RoomBase):
    id: int

    model_config = {"from_attributes": True}


class RoomSummary(BaseModel):
    id: int
    name: str
    type: RoomType

    model_config = {"from_attributes": True}


class ServiceBase(BaseModel):
    name: str = Field(..., max_length=150)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    icon: Optional[str] = None
    active: bool = True


class ServiceCreate(ServiceBase):
    pass


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=150)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    icon: Optional[str] = None
    active: Optional[bool] = None


class ServiceRead(ServiceBase):
    id: int

    model_config = {"from_attributes": True}


class QuoteRead(BaseModel):
    room_id: int
    nights: int
    room_subtotal: Decimal
    services_subtotal: Decimal
    total: Decimal


class BookingCreate(BaseModel):
    room_id: int
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    guests: Optional[int] = 1
    service_ids: List[int] = Field(default_factory=list)
    special_requests: str = Field("", max_length=1000)


class BookingServiceRead(BaseModel):
    service_id: int
    quantity: int

    model_config = {"from_attributes": True}


class PaymentSummary(BaseModel):
    id: int
    status: PaymentStatus
    payment_method: PaymentMethod
    receipt_url: Optional[str] = None

    model_config = {"from_attributes": True}


class BookingRead(BaseModel):
    id: int
    user_id: int
    room_id: Optional[int] = None
    check_in: date
    check_out: date
    guests: int
    total_amount: Decimal
    status: BookingStatus
    special_requests: Optional[str] = None
    created_at: datetime
    services: List[BookingServiceRead] = Field(default_factory=list, validation_alias="service_links")

    model_config = {"from_attributes": True, "populate_by_name": True}


class BookingDetailRead(BookingRead):
    room: Optional[RoomSummary] = None
    payments: List[PaymentSummary] = Field(default_factory=list)


class BookingSubmissionRead(BaseModel):
    booking: BookingRead
    payment_path: str


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class PaymentCreate(BaseModel):
    booking_id: int
    payment_method: PaymentMethod


class PaymentRead(BaseModel):
    id: int
    booking_id: int
    user_id: int
    amount: Decimal
    payment_method: PaymentMethod
    status: PaymentStatus
    transaction_id: Optional[str] = None
    receipt_url: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
