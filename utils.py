import os
from datetime import datetime

import aiofiles  # 非同步檔案處理套件，避免上傳大檔案時卡住整個伺服器
from fastapi import UploadFile

from config import get_settings

# --- 1. 設定檔案儲存路徑常數 ---
FOLDER_AVATARS = "avatars"  # 子資料夾：存放使用者頭像

# 允許上傳的圖片副檔名
ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}

CHUNK_SIZE = 64 * 1024


def upload_root() -> str:
    return get_settings().UPLOAD_ROOT


def setup_upload_directories() -> None:
    """
    初始化資料夾結構：
    伺服器啟動時呼叫，確保資料夾都已經存在 (已存在就跳過)。
    """
    os.makedirs(os.path.join(upload_root(), FOLDER_AVATARS), exist_ok=True)


def image_extension(filename: str | None) -> str | None:
    """回傳小寫副檔名，不是允許的圖片格式時回傳 None"""
    if not filename:
        return None
    ext = os.path.splitext(filename)[1].lower()
    return ext if ext in ALLOWED_IMAGE_EXTENSIONS else None


async def save_avatar_file(file: UploadFile, user_id: int, ext: str) -> str:
    """
    儲存使用者頭像

    - 統一放在 {UPLOAD_ROOT}/avatars/
    - 檔名包含 user_id 與時間戳記，例如 user_1_20231225103000.jpg

    回傳:
    - 相對路徑 (使用 / 分隔)，準備存入資料庫
    """
    root = upload_root()
    target_dir = os.path.join(root, FOLDER_AVATARS)
    os.makedirs(target_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d%H%M%S%f")
    new_filename = f"user_{user_id}_{timestamp}{ext}"
    file_path = os.path.join(target_dir, new_filename)

    # 分塊寫入，避免大檔案一次讀進記憶體
    async with aiofiles.open(file_path, "wb") as out_file:
        while content := await file.read(CHUNK_SIZE):
            await out_file.write(content)

    return f"{root}/{FOLDER_AVATARS}/{new_filename}"
