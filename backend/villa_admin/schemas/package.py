from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional


class PackageCreate(BaseModel):
    id: Optional[str] = Field(None, pattern="^[a-z0-9-]+$")
    name: str = Field(..., min_length=2)
    description: Optional[str] = None
    price: float = Field(0, ge=0)
    duration: Optional[str] = "Per night"
    inclusions: List[str] = []
    images: List[str] = []
    is_active: bool = True


class PackageUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    duration: Optional[str] = None
    inclusions: Optional[List[str]] = None
    images: Optional[List[str]] = None
    is_active: Optional[bool] = None


class PackageBulkStatus(BaseModel):
    package_ids: List[str]
    is_active: bool


class PackageOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    duration: Optional[str] = None
    inclusions: List[str] = []
    images: List[str] = []
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
