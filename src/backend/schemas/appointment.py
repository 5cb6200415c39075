"""
Appointment-related Pydantic schemas.
"""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from models.appointment import AppointmentMethod, AppointmentStatus


class AppointmentBase(BaseModel):
    """Fields set by the organizer at creation time."""

    title: str = Field(..., min_length=1, max_length=200)
    method: AppointmentMethod
    required_participants: int = Field(1, ge=1, description="Headcount target; meaning depends on method")
    weekly_meetings: int = Field(1, ge=1, description="Meetings per week (recurring only)")
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None

    @model_validator(mode="after")
    def check_date_window(self) -> "AppointmentBase":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class AppointmentCreate(AppointmentBase):
    """Schema for creating a new appointment."""

    pass


class Appointment(AppointmentBase):
    """Appointment as read by the scheduling core."""

    id: str
    share_token: Optional[str] = None
    status: AppointmentStatus = AppointmentStatus.ACTIVE
    created_at: Optional[dt.datetime] = None

    model_config = {"from_attributes": True}
