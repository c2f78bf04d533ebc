# models/message.py
from pydantic import BaseModel, Field


class MessageCreateRequest(BaseModel):
    booking_id: int
    message: str = Field(..., min_length=1)
