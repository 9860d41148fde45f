from datetime import date, datetime
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional

from villa_admin.utils.validation import clean_phone, is_valid_name, is_valid_phone

BOOKING_STATUS_PATTERN = "^(pending|confirmed|checked_in|checked_out|completed|cancelled|no_show)$"
PAYMENT_STATUS_PATTERN = "^(pending|paid|advance_paid|failed|refunded|partial_refund)$"


class SafariRequest(BaseModel):
    safari_option_id: str
    safari_name: Optional[str] = None
    preferred_date: Optional[date] = None
    preferred_timing: Optional[str] = None
    number_of_persons: int = Field(1, ge=1)


class GuestDetails(BaseModel):
    guest_name: str
    email: EmailStr
    phone: str

    @field_validator("guest_name")
    @classmethod
    def check_name(cls, value):
        value = value.strip()
        if not is_valid_name(value):
            raise ValueError("Name must be 2-50 characters and contain only letters and spaces")
        return value

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value):
        if not is_valid_phone(value):
            raise ValueError("Please enter a valid 10-digit Indian mobile number")
        return clean_phone(value)


class BookingCreate(GuestDetails):
    villa_id: str
    package_id: Optional[str] = None
    check_in: date
    check_out: date
    guests: int = Field(..., ge=1)
    special_requests: Optional[str] = None
    safari_requests: List[SafariRequest] = []
    session_id: Optional[str] = None


class AdminBookingCreate(BookingCreate):
    payment_id: Optional[str] = None
    advance_amount: float = Field(0, ge=0)
    status: str = Field("pending", pattern=BOOKING_STATUS_PATTERN)
    booking_source: str = "admin"
    admin_notes: Optional[str] = None


class BookingUpdate(BaseModel):
    guest_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    villa_id: Optional[str] = None
    package_id: Optional[str] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    guests: Optional[int] = Field(None, ge=1)
    advance_amount: Optional[float] = Field(None, ge=0)
    special_requests: Optional[str] = None
    admin_notes: Optional[str] = None

    @field_validator("guest_name")
    @classmethod
    def check_name(cls, value):
        if value is not None and not is_valid_name(value):
            raise ValueError("Name must be 2-50 characters and contain only letters and spaces")
        return value.strip() if value else value

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value):
        if value is not None and not is_valid_phone(value):
            raise ValueError("Please enter a valid 10-digit Indian mobile number")
        return clean_phone(value) if value else value


class BookingStatusUpdate(BaseModel):
    status: str = Field(pattern=BOOKING_STATUS_PATTERN)
    force: bool = False
    admin_notes: Optional[str] = None


class BookingBulkStatus(BaseModel):
    booking_ids: List[str]
    status: str = Field(pattern=BOOKING_STATUS_PATTERN)
    force: bool = False


class PaymentStatusUpdate(BaseModel):
    payment_status: str = Field(pattern=PAYMENT_STATUS_PATTERN)
    payment_id: Optional[str] = None


class UnitAssignment(BaseModel):
    unit_id: Optional[int] = None


class BookingHoldCreate(BaseModel):
    session_id: str = Field(..., min_length=1)
    villa_id: str
    check_in: date
    check_out: date


class PriceQuote(BaseModel):
    villa_id: str
    package_id: Optional[str] = None
    check_in: date
    check_out: date


class BookingOut(BaseModel):
    id: int
    booking_id: str
    guest_name: str
    email: str
    phone: str
    check_in: date
    check_out: date
    guests: int
    villa_id: str
    villa_name: str
    villa_price: float
    package_id: Optional[str] = None
    package_name: Optional[str] = None
    package_price: float
    safari_requests: Optional[list] = None
    safari_total: float
    subtotal: float
    taxes: float
    total_amount: float
    advance_amount: float
    remaining_amount: float
    status: str
    payment_status: str
    payment_id: Optional[str] = None
    special_requests: Optional[str] = None
    admin_notes: Optional[str] = None
    booking_source: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookingActivityOut(BaseModel):
    id: int
    activity_type: str
    description: Optional[str] = None
    performed_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
