from sqlalchemy import (
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
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from villa_admin.database.base import Base
from villa_admin.models.inventory import VillaUnit
from villa_admin.models.package import Package
from villa_admin.models.villa import Villa


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(String(40), nullable=False, unique=True, index=True)
    guest_name = Column(String(150), nullable=False)
    email = Column(String(150), nullable=False)
    phone = Column(String(20), nullable=False)
    check_in = Column(Date, nullable=False, index=True)
    check_out = Column(Date, nullable=False, index=True)
    guests = Column(Integer, nullable=False, default=1)

    # Prices are copied at booking time so later catalogue edits leave history intact.
    villa_id = Column(String(100), ForeignKey("villas.id"), nullable=False, index=True)
    villa_name = Column(String(150), nullable=False)
    villa_price = Column(Float, nullable=False)
    package_id = Column(String(100), ForeignKey("packages.id"), nullable=True)
    package_name = Column(String(150), nullable=True)
    package_price = Column(Float, nullable=False, default=0)
    safari_requests = Column(JSON, default=list)
    safari_total = Column(Float, nullable=False, default=0)
    subtotal = Column(Float, nullable=False, default=0)
    taxes = Column(Float, nullable=False, default=0)
    total_amount = Column(Float, nullable=False)
    advance_amount = Column(Float, default=0)
    remaining_amount = Column(Float, default=0)

    status = Column(String(20), default="pending", index=True)
    payment_status = Column(String(20), default="pending")
    payment_id = Column(String(100), nullable=True)
    special_requests = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)
    booking_source = Column(String(20), default="website")
    session_id = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    villa = relationship(Villa)
    package = relationship(Package)
    units = relationship(
        "BookingUnit",
        back_populates="booking",
        cascade="all, delete-orphan"
    )
    activities = relationship(
        "BookingActivity",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingActivity.id"
    )

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days


class BookingUnit(Base):
    __tablename__ = "booking_units"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(
        Integer,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    villa_inventory_id = Column(
        Integer,
        ForeignKey("villa_inventory.id"),
        nullable=False,
        index=True
    )
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    booking = relationship("Booking", back_populates="units")
    unit = relationship(VillaUnit)


class BookingHold(Base):
    __tablename__ = "booking_holds"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(100), nullable=False, index=True)
    villa_id = Column(String(100), ForeignKey("villas.id"), nullable=False)
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class BookingActivity(Base):
    __tablename__ = "booking_activities"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(
        Integer,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    activity_type = Column(String(40), nullable=False)
    description = Column(Text, nullable=True)
    performed_by = Column(String(150), default="system")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    booking = relationship("Booking", back_populates="activities")
