from fastapi import APIRouter, Depends, HTTPException, Query, status
from psycopg import AsyncConnection

from db import getDB
from models import ServiceCreateRequest
from routes.auth import get_current_user

router = APIRouter(prefix="/api/services", tags=["services"])

SELECT_USER_ROLE_SQL = "SELECT role FROM users WHERE id = %(user_id)s"

SELECT_PROFILE_ID_SQL = "SELECT id FROM prestataire_profiles WHERE user_id = %(user_id)s"

INSERT_SERVICE_SQL = """
INSERT INTO services (prestataire_id, nom_service, description, prix, duree_estimee, categorie)
VALUES (%(prestataire_id)s, %(nom_service)s, %(description)s, %(prix)s, %(duree_estimee)s, %(categorie)s)
RETURNING *
"""

LIST_SERVICES_SQL = """
SELECT s.*, u.full_name AS prestataire_name, u.profile_image AS prestataire_image
FROM services s
JOIN prestataire_profiles p ON s.prestataire_id = p.id
JOIN users u ON p.user_id = u.id
WHERE (%(prestataire_id)s::int IS NULL OR s.prestataire_id = %(prestataire_id)s)
ORDER BY s.created_at DESC, s.id DESC
"""


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_service(
    payload: ServiceCreateRequest,
    user: dict = Depends(get_current_user),
    conn: AsyncConnection = Depends(getDB),
):
    async with conn.transaction():
        async with conn.cursor() as cur:
            # 角色以資料庫為準，不相信 token 內的 role
            await cur.execute(SELECT_USER_ROLE_SQL, {"user_id": user["userId"]})
            row = await cur.fetchone()
            if not row or row["role"] != "provider":
                raise HTTPException(status_code=403, detail="Access restricted to providers")

            await cur.execute(SELECT_PROFILE_ID_SQL, {"user_id": user["userId"]})
            profile = await cur.fetchone()
            if not profile:
                raise HTTPException(status_code=404, detail="Provider profile not found")

            await cur.execute(
                INSERT_SERVICE_SQL,
                {"prestataire_id": profile["id"], **payload.model_dump()},
            )
            service = await cur.fetchone()

    return {"message": "Service created successfully", "service": service}


@router.get("")
async def list_services(
    prestataire_id: int | None = Query(None),
    conn: AsyncConnection = Depends(getDB),
):
    async with conn.cursor() as cur:
        await cur.execute(LIST_SERVICES_SQL, {"prestataire_id": prestataire_id})
        services = await cur.fetchall()

    return {"services": services}
