"""Booking maintenance schemas."""

from datetime import datetime

from pydantic import BaseModel


class CloseEndedBookingsResult(BaseModel):
    """Result of one on-demand cleanup run."""

    closed: int
    ran_at: datetime
    duration_seconds: float
