from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from villa_admin.database.base import Base
from villa_admin.models.villa import Villa


class VillaUnit(Base):
    __tablename__ = "villa_inventory"

    id = Column(Integer, primary_key=True, index=True)
    villa_id = Column(String(100), ForeignKey("villas.id"), nullable=False, index=True)
    unit_number = Column(String(20), nullable=False, unique=True)
    room_type = Column(String(50), nullable=True)
    floor = Column(Integer, nullable=True)
    view_type = Column(String(50), nullable=True)
    amenities = Column(JSON, default=list)
    status = Column(String(20), default="available")  # available | maintenance | out_of_order
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    villa = relationship(Villa)
    blocks = relationship(
        "InventoryBlock",
        back_populates="unit",
        cascade="all, delete-orphan"
    )


class InventoryBlock(Base):
    __tablename__ = "inventory_blocks"
    __table_args__ = (
        UniqueConstraint("villa_inventory_id", "block_date", name="uq_inventory_block_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    villa_inventory_id = Column(
        Integer,
        ForeignKey("villa_inventory.id", ondelete="CASCADE"),
        nullable=False
    )
    block_date = Column(Date, nullable=False, index=True)
    block_type = Column(String(30), nullable=False, default="maintenance")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    unit = relationship("VillaUnit", back_populates="blocks")
