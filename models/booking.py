# models/booking.py
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

BookingStatus = Literal["pending", "confirmed", "cancelled", "completed"]


class BookingCreateRequest(BaseModel):
    prestataire_id: int
    service_id: int
    date_reservation: datetime
    adresse_prestation: str | None = None
    notes: str | None = None


class BookingStatusUpdate(BaseModel):
    statut: BookingStatus
