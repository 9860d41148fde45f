from datetime import date, datetime
from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional, Union

from villa_admin.schemas.booking import GuestDetails

QUERY_STATUS_PATTERN = "^(pending|confirmed|cancelled|completed)$"


class SafariTiming(BaseModel):
    value: str
    label: str


class SafariOptionCreate(BaseModel):
    id: Optional[str] = Field(None, pattern="^[a-z0-9-]+$")
    name: str = Field(..., min_length=2)
    description: Optional[str] = None
    duration: Optional[str] = None
    price_per_person: float = Field(0, ge=0)
    max_persons: int = Field(6, ge=1)
    timings: List[SafariTiming] = []
    highlights: List[str] = []
    is_active: bool = True


class SafariOptionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = None
    duration: Optional[str] = None
    price_per_person: Optional[float] = Field(None, ge=0)
    max_persons: Optional[int] = Field(None, ge=1)
    timings: Optional[List[SafariTiming]] = None
    highlights: Optional[List[str]] = None
    is_active: Optional[bool] = None


class SafariOptionOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    duration: Optional[str] = None
    price_per_person: float
    max_persons: int
    timings: List[SafariTiming] = []
    highlights: List[str] = []
    is_active: bool

    class Config:
        from_attributes = True


class SafariQueryCreate(GuestDetails):
    safari_option_id: Optional[str] = None
    safari_name: Optional[str] = None
    preferred_date: date
    preferred_timing: Optional[str] = None
    number_of_persons: int = Field(1, ge=1, le=20)
    special_requirements: Optional[str] = None
    booking_id: Optional[str] = None


class SafariQueryUpdate(BaseModel):
    guest_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    preferred_date: Optional[date] = None
    preferred_timing: Optional[str] = None
    number_of_persons: Optional[int] = Field(None, ge=1, le=20)
    special_requirements: Optional[str] = None
    admin_notes: Optional[str] = None
    status: Optional[str] = Field(None, pattern=QUERY_STATUS_PATTERN)


class SafariQueryRespond(BaseModel):
    response: str = Field(..., min_length=1)
    admin_notes: Optional[str] = None
    responded_by: Optional[str] = None


class SafariQueryStatus(BaseModel):
    status: str = Field(pattern=QUERY_STATUS_PATTERN)
    admin_notes: Optional[str] = None


class SafariQueryOut(BaseModel):
    id: Union[int, str]
    booking_id: Optional[str] = None
    guest_name: str
    email: str
    phone: str
    safari_option_id: Optional[str] = None
    safari_name: str
    preferred_date: date
    preferred_timing: Optional[str] = None
    number_of_persons: int
    special_requirements: Optional[str] = None
    status: str
    response: Optional[str] = None
    admin_notes: Optional[str] = None
    responded_by: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
