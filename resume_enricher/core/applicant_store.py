from __future__ import annotations

import json
import os
import sqlite3
import threading
from datetime import datetime, timezone
from typing import Any

from resume_enricher.core.config import settings
from resume_enricher.schemas.applicant import ExtractedResume

_conn: sqlite3.Connection | None = None
_conn_lock = threading.Lock()


class ApplicantValidationError(ValueError):
    pass


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _get_connection() -> sqlite3.Connection:
    global _conn
    with _conn_lock:
        if _conn is not None:
            return _conn

        db_path = settings.applicant_db_path
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        _conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        _conn.execute("PRAGMA journal_mode=WAL;")
        _conn.execute("PRAGMA synchronous=NORMAL;")
        _conn.execute("PRAGMA busy_timeout=5000;")
        _conn.execute(
            """
            CREATE TABLE IF NOT EXISTS applicants (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                email TEXT NOT NULL,
                education_json TEXT NOT NULL,
                experience_json TEXT NOT NULL,
                skills_json TEXT NOT NULL,
                summary TEXT NOT NULL,
                created_at TEXT NOT NULL
            );
            """
        )
        _conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_applicants_name
            ON applicants (name COLLATE NOCASE);
            """
        )
        return _conn


def init_store() -> None:
    _get_connection()


def save_applicant(record: ExtractedResume) -> int:
    missing = [field for field in ("name", "email") if not getattr(record, field)]
    if missing:
        raise ApplicantValidationError(f"Missing required fields: {', '.join(missing)}")

    conn = _get_connection()
    with _conn_lock:
        cur = conn.execute(
            """
            INSERT INTO applicants (
                name, email, education_json, experience_json, skills_json, summary, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.name,
                record.email,
                json.dumps(record.education.model_dump(), ensure_ascii=False),
                json.dumps(record.experience.model_dump(), ensure_ascii=False),
                json.dumps(record.skills, ensure_ascii=False),
                record.summary,
                _utc_now(),
            ),
        )
        conn.commit()
        return int(cur.lastrowid)


def search_applicants(name: str) -> list[dict[str, Any]]:
    needle = name.strip().lower()
    if not needle:
        return []

    conn = _get_connection()
    with _conn_lock:
        cur = conn.execute(
            """
            SELECT id, name, email, education_json, experience_json, skills_json, summary, created_at
            FROM applicants
            WHERE instr(lower(name), ?) > 0
            ORDER BY id
            """,
            (needle,),
        )
        rows = cur.fetchall()

    return [
        {
            "id": row[0],
            "name": row[1],
            "email": row[2],
            "education": json.loads(row[3]) if row[3] else {},
            "experience": json.loads(row[4]) if row[4] else {},
            "skills": json.loads(row[5]) if row[5] else [],
            "summary": row[6],
            "created_at": row[7],
        }
        for row in rows
    ]


def clear_applicants() -> None:
    conn = _get_connection()
    with _conn_lock:
        conn.execute("DELETE FROM applicants")
        conn.commit()
