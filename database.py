# database.py
import json
import sqlite3
from datetime import datetime
from typing import List, Optional

from activity_feed import ActivityItem, ActivityMirror
from badges import UserSnapshot
from config import DATABASE_FILE, MIRROR_TIMEOUT_SECONDS


def get_conn(db_file: str = DATABASE_FILE):
    return sqlite3.connect(db_file, timeout=MIRROR_TIMEOUT_SECONDS, check_same_thread=False)


def init_db(db_file: str = DATABASE_FILE):
    """Create the activities and users tables if they don't exist. Call this once at app startup."""
    conn = get_conn(db_file)
    c = conn.cursor()
    c.execute("""
        CREATE TABLE IF NOT EXISTS activities (
            id TEXT PRIMARY KEY,
            type TEXT NOT NULL,
            actor_id TEXT NOT NULL,
            actor_name TEXT,
            actor_photo TEXT,
            target_id TEXT NOT NULL,
            metadata TEXT,
            created_at TEXT NOT NULL
        )
    """)
    c.execute("CREATE INDEX IF NOT EXISTS idx_activities_target ON activities (target_id)")
    c.execute("""
        CREATE TABLE IF NOT EXISTS users (
            user_id TEXT PRIMARY KEY,
            is_verified INTEGER NOT NULL DEFAULT 0,
            is_premium INTEGER NOT NULL DEFAULT 0,
            created_at TEXT,
            last_active TEXT
        )
    """)
    conn.commit()
    conn.close()


# ----------------------
# Activities
# ----------------------
def insert_activity(item: ActivityItem, db_file: str = DATABASE_FILE) -> None:
    conn = get_conn(db_file)
    try:
        conn.execute("""
            INSERT INTO activities (id, type, actor_id, actor_name, actor_photo, target_id, metadata, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            item.id,
            item.type.value,
            item.actor_id,
            item.actor_name,
            item.actor_photo,
            item.target_id,
            json.dumps(item.metadata) if item.metadata is not None else None,
            item.timestamp.isoformat(timespec="microseconds"),
        ))
        conn.commit()
    finally:
        conn.close()


def get_activities_for_target(target_id: str, limit: int, db_file: str = DATABASE_FILE) -> List[ActivityItem]:
    """Newest first; rows written in the same instant keep their insertion order."""
    conn = get_conn(db_file)
    try:
        rows = conn.execute("""
            SELECT id, type, actor_id, actor_name, actor_photo, target_id, metadata, created_at
            FROM activities
            WHERE target_id = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?
        """, (target_id, limit)).fetchall()
    finally:
        conn.close()

    return [
        ActivityItem(
            id=row[0],
            type=row[1],
            actor_id=row[2],
            actor_name=row[3] or "",
            actor_photo=row[4] or "",
            target_id=row[5],
            metadata=json.loads(row[6]) if row[6] else None,
            timestamp=datetime.fromisoformat(row[7]),
        )
        for row in rows
    ]


class SqliteActivityMirror(ActivityMirror):
    """Durable copy of the feed; when configured, user activity reads come from here."""

    durable = True

    def __init__(self, db_file: str = DATABASE_FILE):
        self.db_file = db_file
        init_db(db_file)

    def save(self, item: ActivityItem) -> None:
        insert_activity(item, self.db_file)

    def load_for_target(self, target_id: str, limit: int) -> List[ActivityItem]:
        return get_activities_for_target(target_id, limit, self.db_file)


# ----------------------
# Users
# ----------------------
def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def add_or_update_user(user: UserSnapshot, db_file: str = DATABASE_FILE) -> None:
    """Insert a new user snapshot or replace the stored one."""
    conn = get_conn(db_file)
    c = conn.cursor()
    # Upsert style
    c.execute("""
        INSERT INTO users (user_id, is_verified, is_premium, created_at, last_active)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(user_id) DO UPDATE SET
            is_verified=excluded.is_verified,
            is_premium=excluded.is_premium,
            created_at=excluded.created_at,
            last_active=excluded.last_active
    """, (user.id, int(user.is_verified), int(user.is_premium), _iso(user.created_at), _iso(user.last_active)))
    conn.commit()
    conn.close()


def get_user(user_id: str, db_file: str = DATABASE_FILE) -> Optional[UserSnapshot]:
    conn = get_conn(db_file)
    c = conn.cursor()
    c.execute(
        "SELECT user_id, is_verified, is_premium, created_at, last_active FROM users WHERE user_id = ?",
        (user_id,),
    )
    row = c.fetchone()
    conn.close()
    if row is None:
        return None
    return UserSnapshot(
        id=row[0],
        is_verified=bool(row[1]),
        is_premium=bool(row[2]),
        created_at=datetime.fromisoformat(row[3]) if row[3] else None,
        last_active=datetime.fromisoformat(row[4]) if row[4] else None,
    )


def delete_user(user_id: str, db_file: str = DATABASE_FILE) -> None:
    conn = get_conn(db_file)
    c = conn.cursor()
    c.execute("DELETE FROM users WHERE user_id = ?", (user_id,))
    conn.commit()
    conn.close()
