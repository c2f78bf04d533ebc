# models/provider.py
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


class ProfileUpdateRequest(BaseModel):
    """
    服務提供者檔案的完整覆寫 (不是部分更新)。
    沒有傳的欄位會被寫成 null，只有 metier 是必填 (資料表 NOT NULL)。
    """

    metier: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    annees_experience: int | None = Field(None, ge=0)
    tarif_horaire: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    zone_intervention: str | None = Field(None, max_length=255)
    adresse: str | None = None
    portfolio: Any = None
    disponibilites: Any = None
