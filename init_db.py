# init_db.py
import asyncio
import logging

import psycopg

from config import get_settings

logger = logging.getLogger(__name__)

# 定義初始化 SQL 指令
# 使用 IF NOT EXISTS 避免重複建立錯誤，伺服器每次啟動都可以安全地執行
INIT_SQL = """
-- 1. 使用者表 (users)
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    email VARCHAR(255) NOT NULL UNIQUE,
    password VARCHAR(255) NOT NULL,
    role VARCHAR(20) NOT NULL CHECK (role IN ('client', 'provider')),
    full_name VARCHAR(255) NOT NULL,
    phone VARCHAR(20),
    profile_image VARCHAR(500),    -- 頭像路徑
    is_verified BOOLEAN DEFAULT FALSE,
    is_certified BOOLEAN DEFAULT FALSE,
    ville VARCHAR(100),
    secteur VARCHAR(100),
    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW()
);

-- 2. 服務提供者檔案 (prestataire_profiles)，每個 provider 一筆
CREATE TABLE IF NOT EXISTS prestataire_profiles (
    id SERIAL PRIMARY KEY,
    user_id INT NOT NULL UNIQUE REFERENCES users(id) ON DELETE CASCADE,
    metier VARCHAR(255) NOT NULL,
    description TEXT,
    annees_experience INT,
    tarif_horaire DECIMAL(10, 2),
    zone_intervention VARCHAR(255),
    adresse TEXT,
    portfolio JSONB,
    disponibilites JSONB,
    note_moyenne DECIMAL(3, 2) DEFAULT 0.00,  -- 平均評分 (由評價自動重算)
    nombre_avis INT DEFAULT 0
);

-- 3. 服務項目 (services)
CREATE TABLE IF NOT EXISTS services (
    id SERIAL PRIMARY KEY,
    prestataire_id INT NOT NULL REFERENCES prestataire_profiles(id) ON DELETE CASCADE,
    nom_service VARCHAR(255) NOT NULL,
    description TEXT,
    prix DECIMAL(10, 2),
    duree_estimee INT,             -- 預估時間 (分鐘)
    categorie VARCHAR(100),
    created_at TIMESTAMPTZ DEFAULT NOW()
);

-- 4. 預約 (bookings)
CREATE TABLE IF NOT EXISTS bookings (
    id SERIAL PRIMARY KEY,
    client_id INT NOT NULL REFERENCES users(id),
    prestataire_id INT NOT NULL REFERENCES prestataire_profiles(id),
    service_id INT NOT NULL REFERENCES services(id),
    date_reservation TIMESTAMPTZ NOT NULL,
    statut VARCHAR(20) NOT NULL DEFAULT 'pending'
        CHECK (statut IN ('pending', 'confirmed', 'cancelled', 'completed')),
    adresse_prestation TEXT,
    prix_final DECIMAL(10, 2),
    notes_client TEXT,
    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW()
);

-- 5. 評價 (reviews)，一筆預約只能有一則評價
CREATE TABLE IF NOT EXISTS reviews (
    id SERIAL PRIMARY KEY,
    booking_id INT NOT NULL UNIQUE REFERENCES bookings(id) ON DELETE CASCADE,
    note INT NOT NULL CHECK (note BETWEEN 1 AND 5),
    commentaire TEXT,
    photos_review JSONB,
    created_at TIMESTAMPTZ DEFAULT NOW()
);

-- 6. 訊息 (messages)
CREATE TABLE IF NOT EXISTS messages (
    id SERIAL PRIMARY KEY,
    booking_id INT NOT NULL REFERENCES bookings(id) ON DELETE CASCADE,
    expediteur_id INT NOT NULL REFERENCES users(id),
    message TEXT NOT NULL,
    lu BOOLEAN DEFAULT FALSE,
    created_at TIMESTAMPTZ DEFAULT NOW()
);

-- 建立索引以加速列表查詢
CREATE INDEX IF NOT EXISTS idx_services_prestataire ON services(prestataire_id);
CREATE INDEX IF NOT EXISTS idx_bookings_client ON bookings(client_id);
CREATE INDEX IF NOT EXISTS idx_bookings_prestataire ON bookings(prestataire_id);
CREATE INDEX IF NOT EXISTS idx_messages_booking ON messages(booking_id);
"""


async def init_database(conn: psycopg.AsyncConnection) -> bool:
    """
    執行資料庫初始化 (建立資料表)。

    失敗時只記錄錯誤並回傳 False，伺服器仍會繼續啟動，
    之後每個請求遇到資料庫錯誤會回傳 500。
    """
    try:
        logger.info("Checking database schema")
        async with conn.transaction():
            async with conn.cursor() as cur:
                await cur.execute(INIT_SQL)
        logger.info("Database schema ready")
        return True
    except psycopg.Error:
        logger.exception("Database initialisation failed")
        return False


async def _main() -> None:
    # 單獨執行 `python init_db.py` 時使用，方便手動建表
    async with await psycopg.AsyncConnection.connect(get_settings().conninfo) as conn:
        await init_database(conn)


if __name__ == "__main__":
    from log_config import configure_logging

    configure_logging()
    asyncio.run(_main())
