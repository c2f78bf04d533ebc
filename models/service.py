# models/service.py
from decimal import Decimal

from pydantic import BaseModel, Field


class ServiceCreateRequest(BaseModel):
    nom_service: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    prix: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    duree_estimee: int | None = Field(None, ge=0)  # 分鐘
    categorie: str | None = Field(None, max_length=100)
