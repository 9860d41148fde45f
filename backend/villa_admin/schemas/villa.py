from datetime import date, datetime
from pydantic import BaseModel, Field
from typing import List, Optional

VILLA_STATUS_PATTERN = "^(active|inactive|maintenance)$"


class VillaCreate(BaseModel):
    id: Optional[str] = Field(None, pattern="^[a-z0-9-]+$")
    name: str = Field(..., min_length=2)
    description: Optional[str] = None
    base_price: float = Field(..., gt=0)
    max_guests: int = Field(2, ge=1)
    amenities: List[str] = []
    images: List[str] = []
    status: str = Field("active", pattern=VILLA_STATUS_PATTERN)


class VillaUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = None
    base_price: Optional[float] = Field(None, gt=0)
    max_guests: Optional[int] = Field(None, ge=1)
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None
    status: Optional[str] = Field(None, pattern=VILLA_STATUS_PATTERN)


class VillaPricingUpdate(BaseModel):
    base_price: float = Field(..., gt=0)


class VillaBulkStatus(BaseModel):
    villa_ids: List[str]
    status: str = Field(pattern=VILLA_STATUS_PATTERN)


class VillaOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    base_price: float
    max_guests: int
    amenities: List[str] = []
    images: List[str] = []
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PricingRuleCreate(BaseModel):
    villa_id: Optional[str] = None
    name: str
    start_date: date
    end_date: date
    price_modifier: float = Field(1.0, gt=0)
    is_active: bool = True
