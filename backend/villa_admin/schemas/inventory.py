from datetime import date
from pydantic import BaseModel, Field
from typing import List, Optional, Union

UNIT_STATUS_PATTERN = "^(available|maintenance|out_of_order)$"
BLOCK_TYPE_PATTERN = "^(maintenance|owner_use|seasonal_closure|deep_cleaning)$"


class UnitCreate(BaseModel):
    villa_id: str
    unit_number: str = Field(..., min_length=1, max_length=20)
    room_type: Optional[str] = None
    floor: Optional[int] = None
    view_type: Optional[str] = None
    amenities: List[str] = []
    status: str = Field("available", pattern=UNIT_STATUS_PATTERN)
    notes: Optional[str] = None


class UnitUpdate(BaseModel):
    unit_number: Optional[str] = Field(None, min_length=1, max_length=20)
    room_type: Optional[str] = None
    floor: Optional[int] = None
    view_type: Optional[str] = None
    amenities: Optional[List[str]] = None
    status: Optional[str] = Field(None, pattern=UNIT_STATUS_PATTERN)
    notes: Optional[str] = None


class UnitStatusUpdate(BaseModel):
    status: str = Field(pattern=UNIT_STATUS_PATTERN)
    notes: Optional[str] = None


class UnitBlockCreate(BaseModel):
    block_date: date
    block_type: str = Field("maintenance", pattern=BLOCK_TYPE_PATTERN)
    notes: Optional[str] = None


class UnitOut(BaseModel):
    id: Union[int, str]
    villa_id: str
    unit_number: str
    room_type: Optional[str] = None
    floor: Optional[int] = None
    view_type: Optional[str] = None
    amenities: List[str] = []
    status: str
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class BlockOut(BaseModel):
    id: int
    villa_inventory_id: int
    block_date: date
    block_type: str
    notes: Optional[str] = None

    class Config:
        from_attributes = True
