from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Date,
    ForeignKey,
    Numeric,
    JSON,
    Index,
)
from sqlalchemy.orm import relationship

from .base import BaseModel


class Hall(BaseModel):
    __tablename__ = "halls"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    capacity = Column(Integer, nullable=False)
    area = Column(Numeric(10, 2), nullable=True)  # square metres
    location = Column(String(255), nullable=True, index=True)
    amenities = Column(JSON, nullable=False, default=list)
    base_rate = Column(Numeric(12, 2), nullable=False)
    hourly_rate = Column(Numeric(12, 2), nullable=True)
    daily_rate = Column(Numeric(12, 2), nullable=True)
    weekend_rate = Column(Numeric(12, 2), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_available = Column(Boolean, nullable=False, default=True)

    bookings = relationship("HallBooking", back_populates="hall")
    quotations = relationship("HallQuotation", back_populates="hall")
    availability_blocks = relationship(
        "HallAvailabilityBlock",
        back_populates="hall",
        cascade="all, delete-orphan",
    )


class HallAvailabilityBlock(BaseModel):
    """Admin-imposed hold on a hall window (maintenance, private use)."""

    __tablename__ = "hall_availability_blocks"

    id = Column(Integer, primary_key=True, index=True)
    hall_id = Column(Integer, ForeignKey("halls.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    # HH:MM, zero padded so string comparison matches time order
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    is_available = Column(Boolean, nullable=False, default=False)
    reason = Column(String(255), nullable=True)

    hall = relationship("Hall", back_populates="availability_blocks")

    __table_args__ = (
        Index("ix_hall_availability_blocks_hall_date", "hall_id", "date"),
    )
