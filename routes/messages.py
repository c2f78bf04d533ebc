from fastapi import APIRouter, Depends, HTTPException, status
from psycopg import AsyncConnection
from psycopg.errors import ForeignKeyViolation

from db import getDB
from models import MessageCreateRequest
from routes.auth import get_current_user

router = APIRouter(prefix="/api/messages", tags=["messages"])

LIST_MESSAGES_SQL = """
SELECT m.*, u.full_name AS expediteur_name, u.profile_image AS expediteur_image
FROM messages m
JOIN users u ON m.expediteur_id = u.id
WHERE m.booking_id = %(booking_id)s
ORDER BY m.created_at ASC, m.id ASC
"""

INSERT_MESSAGE_SQL = """
INSERT INTO messages (booking_id, expediteur_id, message)
VALUES (%(booking_id)s, %(expediteur_id)s, %(message)s)
RETURNING *
"""


# 注意：這裡沒有檢查使用者是不是這筆預約的成員
@router.get("/{booking_id}")
async def list_messages(
    booking_id: int,
    user: dict = Depends(get_current_user),
    conn: AsyncConnection = Depends(getDB),
):
    async with conn.cursor() as cur:
        await cur.execute(LIST_MESSAGES_SQL, {"booking_id": booking_id})
        messages = await cur.fetchall()

    return {"messages": messages}


@router.post("", status_code=status.HTTP_201_CREATED)
async def send_message(
    payload: MessageCreateRequest,
    user: dict = Depends(get_current_user),
    conn: AsyncConnection = Depends(getDB),
):
    try:
        async with conn.transaction():
            async with conn.cursor() as cur:
                await cur.execute(
                    INSERT_MESSAGE_SQL,
                    {
                        "booking_id": payload.booking_id,
                        "expediteur_id": user["userId"],
                        "message": payload.message,
                    },
                )
                message_data = await cur.fetchone()
    except ForeignKeyViolation:
        raise HTTPException(status_code=404, detail="Booking not found")

    return {"message": "Message sent successfully", "message_data": message_data}
