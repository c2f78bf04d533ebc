# security.py
# 密碼雜湊與 JWT 簽發/驗證
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import bcrypt
import jwt

from config import get_settings

JWT_ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    rounds = get_settings().BCRYPT_ROUNDS
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    # 帳號不存在時也跑一次 bcrypt 比對，讓回應時間不洩漏帳號是否存在
    return hash_password("not-a-real-password")


def verify_password(password: str, password_hash: str | None) -> bool:
    try:
        if not password_hash:
            bcrypt.checkpw(password.encode("utf-8"), dummy_password_hash().encode("utf-8"))
            return False
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # 資料庫裡的雜湊格式不正確，視同密碼錯誤
        return False


def create_access_token(user_id: int, email: str, role: str) -> str:
    """簽發 token，內容為 {userId, email, role}，有效期間由 TOKEN_TTL_HOURS 決定"""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(hours=settings.TOKEN_TTL_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    驗證簽章與到期時間，回傳 claims。
    失敗時丟出 jwt.InvalidTokenError (包含 ExpiredSignatureError)。
    """
    claims = jwt.decode(
        token,
        get_settings().JWT_SECRET,
        algorithms=[JWT_ALGORITHM],
        options={"require": ["exp", "userId", "role"]},
    )
    if not isinstance(claims.get("userId"), int):
        raise jwt.InvalidTokenError("userId claim must be an integer")
    return claims


def parse_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None
