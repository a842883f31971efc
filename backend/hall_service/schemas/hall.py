from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal


class HallBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    capacity: int = Field(gt=0)
    area: Optional[Decimal] = Field(default=None, ge=0)
    location: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)
    base_rate: Decimal = Field(ge=0)
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    daily_rate: Optional[Decimal] = Field(default=None, ge=0)
    weekend_rate: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("name", mode="before")
    def strip_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class HallCreate(HallBase):
    is_active: bool = True
    is_available: bool = True


class HallUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    capacity: Optional[int] = Field(default=None, gt=0)
    area: Optional[Decimal] = Field(default=None, ge=0)
    location: Optional[str] = None
    amenities: Optional[List[str]] = None
    base_rate: Optional[Decimal] = Field(default=None, ge=0)
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    daily_rate: Optional[Decimal] = Field(default=None, ge=0)
    weekend_rate: Optional[Decimal] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
    is_available: Optional[bool] = None


class HallRead(HallBase):
    id: int
    is_active: bool
    is_available: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class HallFilter(BaseModel):
    is_active: Optional[bool] = None
    is_available: Optional[bool] = None
    location: Optional[str] = None
    min_capacity: Optional[int] = Field(default=None, ge=0)
    max_capacity: Optional[int] = Field(default=None, ge=0)
    max_base_rate: Optional[Decimal] = Field(default=None, ge=0)
    amenity: Optional[str] = None


class HallStatistics(BaseModel):
    hall_id: int
    total_bookings: int
    confirmed_bookings: int
    completed_bookings: int
    cancelled_bookings: int
    total_quotations: int
    accepted_quotations: int
    total_revenue: Decimal
    average_booking_value: Decimal


class AvailabilityBlockCreate(BaseModel):
    date: date
    start_time: str
    end_time: str
    reason: Optional[str] = None


class AvailabilityBlockRead(BaseModel):
    id: int
    hall_id: int
    date: date
    start_time: str
    end_time: str
    is_available: bool
    reason: Optional[str] = None

    model_config = {"from_attributes": True}


class AvailabilityRead(BaseModel):
    hall_id: int
    date: date
    start_time: str
    end_time: str
    available: bool
