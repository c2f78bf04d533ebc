# config.py
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError

# --- 環境變數與預設值 ---
# 正式環境請在 .env 或部署平台的 Environment 設定這些值
# 這裡的預設值只適合本地開發
DEFAULTS = {
    "DB_HOST": "localhost",
    "DB_PORT": "5432",
    "DB_NAME": "gcafo_booking",
    "DB_USER": "postgres",
    "DB_PASSWORD": "",
    "DATABASE_URL": "",  # 有設定時優先使用，例如 postgresql://user:pw@host:5432/db
    "DB_POOL_MIN_SIZE": "1",
    "DB_POOL_MAX_SIZE": "10",
    "JWT_SECRET": "a_very_secret_key_please_change_me",
    "TOKEN_TTL_HOURS": "24",
    "BCRYPT_ROUNDS": "10",
    "HOST": "0.0.0.0",
    "PORT": "3000",
    "LOG_LEVEL": "INFO",
    "CORS_ORIGINS": "*",
    "UPLOAD_ROOT": "uploads",
}


class Settings(BaseModel):
    """執行期設定 (型別由 pydantic 檢查)"""

    model_config = ConfigDict(extra="ignore")

    DB_HOST: str
    DB_PORT: int
    DB_NAME: str
    DB_USER: str
    DB_PASSWORD: str
    DATABASE_URL: str
    DB_POOL_MIN_SIZE: int
    DB_POOL_MAX_SIZE: int
    JWT_SECRET: str
    TOKEN_TTL_HOURS: int
    BCRYPT_ROUNDS: int
    HOST: str
    PORT: int
    LOG_LEVEL: str
    CORS_ORIGINS: str
    UPLOAD_ROOT: str

    @property
    def conninfo(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        # 組合連線字串 (Connection String)，格式與 libpq 相同
        parts = [
            f"dbname={self.DB_NAME}",
            f"user={self.DB_USER}",
            f"host={self.DB_HOST}",
            f"port={self.DB_PORT}",
        ]
        if self.DB_PASSWORD:
            parts.append(f"password={self.DB_PASSWORD}")
        return " ".join(parts)

    @property
    def cors_origins(self) -> list[str]:
        return [item.strip() for item in self.CORS_ORIGINS.split(",") if item.strip()]


def load_settings(*, load_env: bool = True) -> Settings:
    """從 .env 與行程環境變數讀取設定，缺少的欄位使用 DEFAULTS。"""
    if load_env:
        load_dotenv()

    values = {key: os.getenv(key, default) for key, default in DEFAULTS.items()}
    try:
        return Settings.model_validate(values)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
