from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.sql import func
from villa_admin.database.base import Base


class Villa(Base):
    __tablename__ = "villas"

    id = Column(String(100), primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    base_price = Column(Float, nullable=False)
    max_guests = Column(Integer, nullable=False, default=2)
    amenities = Column(JSON, default=list)
    images = Column(JSON, default=list)
    status = Column(String(20), default="active")  # active | inactive | maintenance
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class PricingRule(Base):
    __tablename__ = "pricing_rules"

    id = Column(Integer, primary_key=True, index=True)
    villa_id = Column(String(100), nullable=True, index=True)  # null applies to every villa
    name = Column(String(150), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    price_modifier = Column(Float, nullable=False, default=1.0)
    is_active = Column(Boolean, default=True)
