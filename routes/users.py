import aiofiles.os
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from psycopg import AsyncConnection

from db import getDB
from models import to_public_user
from routes.auth import get_current_user
# 匯入儲存頭像的工具函式
from utils import image_extension, save_avatar_file

router = APIRouter(prefix="/api/users", tags=["users"])

UPDATE_PROFILE_IMAGE_SQL = """
UPDATE users SET profile_image = %(profile_image)s, updated_at = NOW()
WHERE id = %(user_id)s
RETURNING *
"""


# 上傳 / 更換頭像
@router.put("/profile-image")
async def upload_profile_image(
    file: UploadFile = File(...),
    user: dict = Depends(get_current_user),
    conn: AsyncConnection = Depends(getDB),
):
    ext = image_extension(file.filename)
    if ext is None:
        raise HTTPException(status_code=400, detail="Unsupported image format")

    image_path = await save_avatar_file(file, user["userId"], ext)

    async with conn.transaction():
        async with conn.cursor() as cur:
            await cur.execute(
                UPDATE_PROFILE_IMAGE_SQL,
                {"profile_image": image_path, "user_id": user["userId"]},
            )
            updated = await cur.fetchone()

    if not updated:
        # 使用者已不存在，剛存下的檔案沒有人會用到
        await aiofiles.os.remove(image_path)
        raise HTTPException(status_code=404, detail="User not found")

    return {"message": "Profile image updated successfully", "user": to_public_user(updated)}
