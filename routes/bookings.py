from fastapi import APIRouter, Depends, HTTPException, Query, status
from psycopg import AsyncConnection
from psycopg.errors import ForeignKeyViolation

from db import getDB
from models import BookingCreateRequest, BookingStatus, BookingStatusUpdate
from routes.auth import get_current_user

router = APIRouter(prefix="/api/bookings", tags=["bookings"])

INSERT_BOOKING_SQL = """
INSERT INTO bookings (client_id, prestataire_id, service_id, date_reservation, adresse_prestation, notes_client)
VALUES (%(client_id)s, %(prestataire_id)s, %(service_id)s, %(date_reservation)s,
        %(adresse_prestation)s, %(notes_client)s)
RETURNING *
"""

# 使用者可能是委託人 (client_id)，也可能是這筆預約的服務提供者 (p.user_id)
LIST_BOOKINGS_SQL = """
SELECT
    b.*,
    u_presta.full_name AS prestataire_name,
    u_presta.profile_image AS prestataire_image,
    u_client.full_name AS client_name,
    u_client.profile_image AS client_image,
    s.nom_service,
    s.prix AS service_prix
FROM bookings b
JOIN prestataire_profiles p ON b.prestataire_id = p.id
JOIN users u_presta ON p.user_id = u_presta.id
JOIN users u_client ON b.client_id = u_client.id
JOIN services s ON b.service_id = s.id
WHERE (b.client_id = %(user_id)s OR p.user_id = %(user_id)s)
  AND (%(statut)s::text IS NULL OR b.statut = %(statut)s)
ORDER BY b.created_at DESC, b.id DESC
"""

UPDATE_BOOKING_STATUS_SQL = """
UPDATE bookings SET statut = %(statut)s, updated_at = NOW()
WHERE id = %(booking_id)s
RETURNING *
"""


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreateRequest,
    user: dict = Depends(get_current_user),
    conn: AsyncConnection = Depends(getDB),
):
    try:
        async with conn.transaction():
            async with conn.cursor() as cur:
                await cur.execute(
                    INSERT_BOOKING_SQL,
                    {
                        "client_id": user["userId"],
                        "prestataire_id": payload.prestataire_id,
                        "service_id": payload.service_id,
                        "date_reservation": payload.date_reservation,
                        "adresse_prestation": payload.adresse_prestation,
                        "notes_client": payload.notes,
                    },
                )
                booking = await cur.fetchone()
    except ForeignKeyViolation:
        raise HTTPException(status_code=404, detail="Provider or service not found")

    return {"message": "Booking created successfully", "booking": booking}


@router.get("")
async def list_bookings(
    statut: BookingStatus | None = Query(None),
    user: dict = Depends(get_current_user),
    conn: AsyncConnection = Depends(getDB),
):
    async with conn.cursor() as cur:
        await cur.execute(LIST_BOOKINGS_SQL, {"user_id": user["userId"], "statut": statut})
        bookings = await cur.fetchall()

    return {"bookings": bookings}


# TODO: 目前任何已登入的使用者都能改任何預約的狀態，需要決定是否限制為 client/provider 本人
@router.put("/{booking_id}/status")
async def update_booking_status(
    booking_id: int,
    payload: BookingStatusUpdate,
    user: dict = Depends(get_current_user),
    conn: AsyncConnection = Depends(getDB),
):
    async with conn.transaction():
        async with conn.cursor() as cur:
            await cur.execute(
                UPDATE_BOOKING_STATUS_SQL,
                {"statut": payload.statut, "booking_id": booking_id},
            )
            booking = await cur.fetchone()

    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    return {"message": "Status updated successfully", "booking": booking}
