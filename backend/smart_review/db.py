# smart_review/db.py
"""
Review history persistence.

Two backends share the same small interface:
- SupabaseHistoryStore: the hosted `code_reviews` table (used when SUPABASE_URL
  and SUPABASE_SERVICE_ROLE_KEY are set).
- SQLiteHistoryStore: a local sqlite file for development and tests.

Rows are written once after a successful review and never updated; reads
are always newest first.
"""
import os
import uuid
import sqlite3
import logging
import pathlib
import datetime
from typing import List, Optional

from dotenv import load_dotenv
from supabase import create_client, Client

from smart_review.models import HistoryRecord

load_dotenv()

logger = logging.getLogger("history")

SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
HISTORY_TABLE = os.getenv("HISTORY_TABLE", "code_reviews")
HISTORY_DB_PATH = os.getenv("HISTORY_DB_PATH", "data/history.sqlite")

SCHEMA = [
    "CREATE TABLE IF NOT EXISTS code_reviews ("
    " id TEXT PRIMARY KEY, user_id TEXT NOT NULL, code TEXT NOT NULL,"
    " language TEXT NOT NULL, review TEXT NOT NULL, user_level TEXT NOT NULL,"
    " created_at TEXT NOT NULL)",
    "CREATE INDEX IF NOT EXISTS idx_code_reviews_user ON code_reviews (user_id, created_at)",
]


def utcnow_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def new_record(user_id: str, code: str, language: str, review: str, user_level: str) -> HistoryRecord:
    return HistoryRecord(
        id=str(uuid.uuid4()),
        user_id=user_id,
        code=code,
        language=language,
        review=review,
        user_level=user_level,
        created_at=utcnow_iso(),
    )


class HistoryStore:
    def save(self, record: HistoryRecord) -> None:
        raise NotImplementedError

    def list_for_user(self, user_id: str, page: int = 1, page_size: int = 20) -> List[HistoryRecord]:
        raise NotImplementedError

    def get_for_user(self, user_id: str, record_id: str) -> Optional[HistoryRecord]:
        raise NotImplementedError


class SQLiteHistoryStore(HistoryStore):
    def __init__(self, db_path: str = HISTORY_DB_PATH):
        self.db_path = pathlib.Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._conn()
        try:
            for stmt in SCHEMA:
                conn.execute(stmt)
            conn.commit()
        finally:
            conn.close()

    def _conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def save(self, record: HistoryRecord) -> None:
        conn = self._conn()
        try:
            conn.execute(
                "INSERT INTO code_reviews(id, user_id, code, language, review, user_level, created_at)"
                " VALUES (?,?,?,?,?,?,?)",
                (record.id or str(uuid.uuid4()), record.user_id, record.code, record.language,
                 record.review, record.user_level, record.created_at),
            )
            conn.commit()
        finally:
            conn.close()

    def list_for_user(self, user_id: str, page: int = 1, page_size: int = 20) -> List[HistoryRecord]:
        offset = (page - 1) * page_size
        conn = self._conn()
        try:
            rows = conn.execute(
                "SELECT * FROM code_reviews WHERE user_id=? ORDER BY created_at DESC LIMIT ? OFFSET ?",
                (user_id, page_size, offset),
            ).fetchall()
        finally:
            conn.close()
        return [HistoryRecord(**dict(r)) for r in rows]

    def get_for_user(self, user_id: str, record_id: str) -> Optional[HistoryRecord]:
        conn = self._conn()
        try:
            row = conn.execute(
                "SELECT * FROM code_reviews WHERE user_id=? AND id=?",
                (user_id, record_id),
            ).fetchone()
        finally:
            conn.close()
        return HistoryRecord(**dict(row)) if row else None


class SupabaseHistoryStore(HistoryStore):
    def __init__(self, client: Client, table: str = HISTORY_TABLE):
        self.client = client
        self.table = table

    def save(self, record: HistoryRecord) -> None:
        row = record.model_dump(exclude_none=True)
        res = self.client.table(self.table).insert(row).execute()
        logger.debug("%s insert response: %s", self.table, res)

    def list_for_user(self, user_id: str, page: int = 1, page_size: int = 20) -> List[HistoryRecord]:
        start = (page - 1) * page_size
        res = (
            self.client.table(self.table)
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .range(start, start + page_size - 1)
            .execute()
        )
        return [HistoryRecord(**_normalize_row(r)) for r in (res.data or [])]

    def get_for_user(self, user_id: str, record_id: str) -> Optional[HistoryRecord]:
        res = (
            self.client.table(self.table)
            .select("*")
            .eq("user_id", user_id)
            .eq("id", record_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return HistoryRecord(**_normalize_row(rows[0])) if rows else None


def _normalize_row(row: dict) -> dict:
    # postgres hands back uuid ids and timestamptz values; the API speaks strings
    out = dict(row)
    for key in ("id", "user_id", "created_at"):
        if out.get(key) is not None:
            out[key] = str(out[key])
    return out


# -------------------------------------------------------------------
# Optional Supabase integration
# -------------------------------------------------------------------
supabase: Optional[Client] = None
if SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY:
    try:
        supabase = create_client(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)
        logger.info("Supabase client initialized")
    except Exception as e:
        supabase = None
        logger.warning("Failed to initialize Supabase client: %s", e)
else:
    logger.info("Supabase env vars not set – using local sqlite history at %s", HISTORY_DB_PATH)

_store: Optional[HistoryStore] = None


def get_history_store() -> HistoryStore:
    """FastAPI dependency returning the process-wide history store."""
    global _store
    if _store is None:
        _store = SupabaseHistoryStore(supabase) if supabase else SQLiteHistoryStore()
    return _store
