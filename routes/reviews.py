import logging

from fastapi import APIRouter, Depends, HTTPException, status
from psycopg import AsyncConnection
from psycopg.errors import UniqueViolation
from psycopg.types.json import Jsonb

from db import getDB
from models import ReviewCreateRequest
from routes.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reviews", tags=["reviews"])

# 只有預約的委託人本人、且預約已完成，才能評價
SELECT_COMPLETED_BOOKING_SQL = """
SELECT * FROM bookings
WHERE id = %(booking_id)s AND client_id = %(client_id)s AND statut = 'completed'
"""

SELECT_REVIEW_FOR_BOOKING_SQL = "SELECT id FROM reviews WHERE booking_id = %(booking_id)s"

INSERT_REVIEW_SQL = """
INSERT INTO reviews (booking_id, note, commentaire, photos_review)
VALUES (%(booking_id)s, %(note)s, %(commentaire)s, %(photos_review)s)
RETURNING *
"""

# 依照該提供者所有預約底下的評價重新計算平均分數與評價數
REFRESH_PROVIDER_RATING_SQL = """
UPDATE prestataire_profiles
SET note_moyenne = COALESCE((
        SELECT ROUND(AVG(r.note), 2)
        FROM reviews r
        JOIN bookings b ON r.booking_id = b.id
        WHERE b.prestataire_id = prestataire_profiles.id
    ), 0),
    nombre_avis = (
        SELECT COUNT(*)
        FROM reviews r
        JOIN bookings b ON r.booking_id = b.id
        WHERE b.prestataire_id = prestataire_profiles.id
    )
WHERE id = %(prestataire_id)s
RETURNING note_moyenne, nombre_avis
"""


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_review(
    payload: ReviewCreateRequest,
    user: dict = Depends(get_current_user),
    conn: AsyncConnection = Depends(getDB),
):
    """
    新增評價，並在同一個 transaction 內重算提供者的平均評分。
    任何一步失敗都會整個 rollback，平均分數不會和評價不同步。
    """
    try:
        async with conn.transaction():
            async with conn.cursor() as cur:
                # 1. 預約檢查 (本人 + 已完成)
                await cur.execute(
                    SELECT_COMPLETED_BOOKING_SQL,
                    {"booking_id": payload.booking_id, "client_id": user["userId"]},
                )
                booking = await cur.fetchone()
                if not booking:
                    raise HTTPException(status_code=403, detail="Not allowed or booking not completed")

                # 2. 防止重複評價
                await cur.execute(SELECT_REVIEW_FOR_BOOKING_SQL, {"booking_id": payload.booking_id})
                if await cur.fetchone():
                    raise HTTPException(status_code=400, detail="A review already exists for this booking")

                # 3. 寫入評價
                await cur.execute(
                    INSERT_REVIEW_SQL,
                    {
                        "booking_id": payload.booking_id,
                        "note": payload.note,
                        "commentaire": payload.commentaire,
                        "photos_review": Jsonb(payload.photos_review) if payload.photos_review is not None else None,
                    },
                )
                review = await cur.fetchone()

                # 4. 重算平均分數
                await cur.execute(REFRESH_PROVIDER_RATING_SQL, {"prestataire_id": booking["prestataire_id"]})
                rating = await cur.fetchone()
    except UniqueViolation:
        # 同一筆預約同時送出兩則評價，由 UNIQUE(booking_id) 擋下
        raise HTTPException(status_code=400, detail="A review already exists for this booking")

    logger.info(
        "Provider profile %s rating refreshed: %s (%s reviews)",
        booking["prestataire_id"],
        rating["note_moyenne"] if rating else None,
        rating["nombre_avis"] if rating else None,
    )
    return {"message": "Review added successfully", "review": review}
