# models/user.py
from typing import Literal

from pydantic import BaseModel, Field, field_validator

# "client" 委託人 或 "provider" 服務提供者 (prestataire)
UserRole = Literal["client", "provider"]


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=20)
    role: UserRole
    ville: str | None = Field(None, max_length=100)
    secteur: str | None = Field(None, max_length=100)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        # bcrypt 只處理前 72 bytes，超過就直接拒絕
        if len(value.encode("utf-8")) > 72:
            raise ValueError("password must be at most 72 bytes")
        return value


class LoginRequest(BaseModel):
    email: str
    password: str


def to_public_user(row: dict) -> dict:
    """把資料庫的 users 列轉成可以回傳的格式 (移除 password)"""
    return {key: value for key, value in row.items() if key != "password"}
