from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    JSON,
    String,
    Text,
)
from sqlalchemy.sql import func
from villa_admin.database.base import Base


class Package(Base):
    __tablename__ = "packages"

    id = Column(String(100), primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False, default=0)
    duration = Column(String(50), nullable=True)
    inclusions = Column(JSON, default=list)
    images = Column(JSON, default=list)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
