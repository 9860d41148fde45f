from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.sql import func
from villa_admin.database.base import Base


class SafariOption(Base):
    __tablename__ = "safari_options"

    id = Column(String(100), primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(String(50), nullable=True)
    price_per_person = Column(Float, nullable=False, default=0)
    max_persons = Column(Integer, nullable=False, default=6)
    timings = Column(JSON, default=list)  # [{"value": ..., "label": ...}]
    highlights = Column(JSON, default=list)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class SafariQuery(Base):
    __tablename__ = "safari_queries"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(String(40), nullable=True)  # booking reference, not a foreign key
    guest_name = Column(String(150), nullable=False)
    email = Column(String(150), nullable=False)
    phone = Column(String(20), nullable=False)
    safari_option_id = Column(String(100), ForeignKey("safari_options.id"), nullable=True)
    safari_name = Column(String(150), nullable=False)
    preferred_date = Column(Date, nullable=False)
    preferred_timing = Column(String(50), nullable=True)
    number_of_persons = Column(Integer, nullable=False, default=1)
    special_requirements = Column(Text, nullable=True)
    status = Column(String(20), default="pending", index=True)
    response = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)
    responded_by = Column(String(150), nullable=True)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
