from fastapi import APIRouter, Depends, HTTPException, Query
from psycopg import AsyncConnection
from psycopg.types.json import Jsonb

from db import getDB
from models import ProfileUpdateRequest, to_public_user
from routes.auth import get_current_user

router = APIRouter(prefix="/api/prestataires", tags=["prestataires"])

# 每位提供者詳情頁最多顯示的評價數
MAX_DETAIL_REVIEWS = 20

# 篩選條件為 NULL 時不套用 (SQL 形狀固定，方便重複使用)
LIST_PROVIDERS_SQL = """
SELECT
    u.id, p.id AS profile_id, u.full_name, u.profile_image, u.is_verified, u.is_certified,
    p.metier, p.description, p.note_moyenne, p.nombre_avis, p.zone_intervention,
    p.tarif_horaire, p.annees_experience, u.ville, u.secteur
FROM users u
JOIN prestataire_profiles p ON u.id = p.user_id
WHERE u.role = 'provider'
  AND (%(ville)s::text IS NULL OR u.ville ILIKE %(ville)s)
  AND (%(metier)s::text IS NULL OR p.metier ILIKE %(metier)s)
ORDER BY p.note_moyenne DESC, u.id ASC
LIMIT %(limit)s OFFSET %(offset)s
"""

SELECT_PROVIDER_SQL = """
SELECT
    u.id, u.email, u.password, u.role, u.full_name, u.phone, u.profile_image,
    u.is_verified, u.is_certified, u.ville, u.secteur, u.created_at,
    p.id AS profile_id, p.metier, p.description, p.annees_experience, p.tarif_horaire,
    p.zone_intervention, p.adresse, p.portfolio, p.disponibilites,
    p.note_moyenne, p.nombre_avis
FROM users u
JOIN prestataire_profiles p ON u.id = p.user_id
WHERE u.id = %(user_id)s AND u.role = 'provider'
"""

SELECT_PROVIDER_SERVICES_SQL = """
SELECT * FROM services
WHERE prestataire_id = %(profile_id)s
ORDER BY created_at DESC, id DESC
"""

SELECT_PROVIDER_REVIEWS_SQL = """
SELECT r.*, u.full_name AS client_name, u.profile_image AS client_image
FROM reviews r
JOIN bookings b ON r.booking_id = b.id
JOIN users u ON b.client_id = u.id
WHERE b.prestataire_id = %(profile_id)s
ORDER BY r.created_at DESC, r.id DESC
LIMIT %(limit)s
"""

UPDATE_PROFILE_SQL = """
UPDATE prestataire_profiles
SET metier = %(metier)s, description = %(description)s, annees_experience = %(annees_experience)s,
    tarif_horaire = %(tarif_horaire)s, zone_intervention = %(zone_intervention)s,
    adresse = %(adresse)s, portfolio = %(portfolio)s, disponibilites = %(disponibilites)s
WHERE user_id = %(user_id)s
RETURNING *
"""


def _contains(value: str | None) -> str | None:
    # 子字串搜尋 (不分大小寫)，空字串視為沒有篩選
    if not value:
        return None
    return f"%{value}%"


def _jsonb(value):
    return Jsonb(value) if value is not None else None


# 1. 提供者列表 (公開)
@router.get("")
async def list_prestataires(
    ville: str | None = Query(None),
    metier: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    conn: AsyncConnection = Depends(getDB),
):
    offset = (page - 1) * limit

    async with conn.cursor() as cur:
        await cur.execute(
            LIST_PROVIDERS_SQL,
            {
                "ville": _contains(ville),
                "metier": _contains(metier),
                "limit": limit,
                "offset": offset,
            },
        )
        prestataires = await cur.fetchall()

    return {
        "prestataires": prestataires,
        "pagination": {"page": page, "limit": limit},
    }


# 2. 更新自己的檔案 (需登入)
@router.put("/profile")
async def update_my_profile(
    payload: ProfileUpdateRequest,
    user: dict = Depends(get_current_user),
    conn: AsyncConnection = Depends(getDB),
):
    params = payload.model_dump()
    params["portfolio"] = _jsonb(payload.portfolio)
    params["disponibilites"] = _jsonb(payload.disponibilites)
    params["user_id"] = user["userId"]

    async with conn.transaction():
        async with conn.cursor() as cur:
            await cur.execute(UPDATE_PROFILE_SQL, params)
            profile = await cur.fetchone()

    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    return {"message": "Profile updated successfully", "profile": profile}


# 3. 提供者詳情：基本資料 + 服務 + 最近評價
@router.get("/{user_id}")
async def get_prestataire(user_id: int, conn: AsyncConnection = Depends(getDB)):
    async with conn.cursor() as cur:
        await cur.execute(SELECT_PROVIDER_SQL, {"user_id": user_id})
        prestataire = await cur.fetchone()

        if not prestataire:
            raise HTTPException(status_code=404, detail="Provider not found")

        profile_id = prestataire["profile_id"]

        await cur.execute(SELECT_PROVIDER_SERVICES_SQL, {"profile_id": profile_id})
        services = await cur.fetchall()

        await cur.execute(
            SELECT_PROVIDER_REVIEWS_SQL,
            {"profile_id": profile_id, "limit": MAX_DETAIL_REVIEWS},
        )
        avis = await cur.fetchall()

    return {
        "prestataire": to_public_user(prestataire),
        "services": services,
        "avis": avis,
    }
