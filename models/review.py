# models/review.py
from pydantic import BaseModel, Field


class ReviewCreateRequest(BaseModel):
    booking_id: int
    note: int = Field(..., ge=1, le=5)  # 評分 1~5
    commentaire: str | None = None
    photos_review: list[str] | None = None
