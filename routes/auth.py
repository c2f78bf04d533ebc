import logging

import jwt
from fastapi import APIRouter, Depends, Header, HTTPException, status
from psycopg import AsyncConnection
from psycopg.errors import UniqueViolation
from starlette.concurrency import run_in_threadpool

from db import getDB
from models import LoginRequest, RegisterRequest, to_public_user
from security import create_access_token, decode_access_token, hash_password, parse_bearer_token, verify_password

logger = logging.getLogger(__name__)

# --- 1. 設定 Router ---
router = APIRouter(prefix="/api/auth", tags=["auth"])

# 新註冊的 provider 預設職業
DEFAULT_METIER = "General"

SELECT_USER_BY_EMAIL_SQL = "SELECT * FROM users WHERE email = %(email)s"

INSERT_USER_SQL = """
INSERT INTO users (email, password, full_name, phone, role, ville, secteur)
VALUES (%(email)s, %(password)s, %(full_name)s, %(phone)s, %(role)s, %(ville)s, %(secteur)s)
RETURNING *
"""

INSERT_DEFAULT_PROFILE_SQL = """
INSERT INTO prestataire_profiles (user_id, metier)
VALUES (%(user_id)s, %(metier)s)
"""


# --- 2. 核心依賴函式：取得當前登入者 ---
async def get_current_user(authorization: str | None = Header(default=None)) -> dict:
    """
    從 Authorization: Bearer <token> 取出 token 並驗證。

    - 沒帶 token (或格式不是 Bearer) -> 401
    - token 無效或過期 -> 403
    成功時回傳 token 裡的 claims: {"userId", "email", "role", ...}
    """
    token = parse_bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token required")

    try:
        return decode_access_token(token)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")


# --- 3. 註冊功能 ---
@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, conn: AsyncConnection = Depends(getDB)):
    # 步驟 1: 密碼雜湊 (bcrypt 很吃 CPU，丟到 threadpool 執行)
    hashed_password = await run_in_threadpool(hash_password, payload.password)

    # 步驟 2: 檢查 Email、寫入使用者，provider 同時建立預設檔案 (同一個 transaction)
    try:
        async with conn.transaction():
            async with conn.cursor() as cur:
                await cur.execute(SELECT_USER_BY_EMAIL_SQL, {"email": payload.email})
                if await cur.fetchone():
                    raise HTTPException(status_code=400, detail="Email already in use")

                await cur.execute(
                    INSERT_USER_SQL,
                    {
                        "email": payload.email,
                        "password": hashed_password,
                        "full_name": payload.full_name,
                        "phone": payload.phone,
                        "role": payload.role,
                        "ville": payload.ville,
                        "secteur": payload.secteur,
                    },
                )
                new_user = await cur.fetchone()

                if payload.role == "provider":
                    await cur.execute(
                        INSERT_DEFAULT_PROFILE_SQL,
                        {"user_id": new_user["id"], "metier": DEFAULT_METIER},
                    )
    except UniqueViolation:
        # 兩個請求同時用同一個 Email 註冊
        raise HTTPException(status_code=400, detail="Email already in use")

    logger.info("Registered user id=%s role=%s", new_user["id"], new_user["role"])

    token = create_access_token(new_user["id"], new_user["email"], new_user["role"])
    return {
        "message": "User created successfully",
        "token": token,
        "user": to_public_user(new_user),
    }


# --- 4. 登入功能 ---
@router.post("/login")
async def login(payload: LoginRequest, conn: AsyncConnection = Depends(getDB)):
    async with conn.cursor() as cur:
        await cur.execute(SELECT_USER_BY_EMAIL_SQL, {"email": payload.email})
        user = await cur.fetchone()

    # 不論是 Email 不存在還是密碼錯誤，都回傳同樣的訊息 (也都會跑一次 bcrypt)
    password_hash = user["password"] if user else None
    valid = await run_in_threadpool(verify_password, payload.password, password_hash) and user is not None
    if not valid:
        logger.info("Failed login for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    token = create_access_token(user["id"], user["email"], user["role"])
    return {
        "message": "Login successful",
        "token": token,
        "user": to_public_user(user),
    }
