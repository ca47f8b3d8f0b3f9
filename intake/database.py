"""
Local SQLite store for scholarships and applications.
Used for development and tests; production uses the Supabase store.
"""

import json
import logging
import sqlite3
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

from intake.config import get_settings
from intake.schema import ScholarshipRule

logger = logging.getLogger(__name__)

DB_PATH = get_settings().db_path

APPLICATION_COLUMNS = [
    "scholarship_id",
    "full_name",
    "email_address",
    "date_of_birth",
    "gender",
    "phone_number",
    "address",
    "preferred_university",
    "country",
    "academic_level",
    "intended_major",
    "gpa_academic_performance",
    "extracurricular_activities",
    "parent_guardian_name",
    "parent_guardian_contact",
    "financial_need_statement",
    "how_heard_about",
    "motivation_statement",
    "terms_agreed",
    "uploaded_documents_json",
    "suitability_percent",
    "suitability_breakdown_json",
    "status",
]


def _connect() -> sqlite3.Connection:
    db_path = Path(DB_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    return conn


def init_database() -> None:
    """Create the scholarships and scholarship_applications tables if missing."""
    conn = _connect()
    try:
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS scholarships (
                id INTEGER PRIMARY KEY,
                name TEXT,
                academic_level TEXT,
                min_gpa TEXT,
                number_of_awards INTEGER,
                status TEXT DEFAULT 'active',
                application_deadline TEXT,
                field_of_study TEXT,
                country TEXT,
                reserved_slots INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS scholarship_applications (
                application_id INTEGER PRIMARY KEY AUTOINCREMENT,
                scholarship_id INTEGER NOT NULL REFERENCES scholarships(id),
                full_name TEXT NOT NULL,
                email_address TEXT NOT NULL,
                date_of_birth TEXT NOT NULL,
                gender TEXT,
                phone_number TEXT,
                address TEXT,
                preferred_university TEXT,
                country TEXT,
                academic_level TEXT,
                intended_major TEXT,
                gpa_academic_performance TEXT,
                extracurricular_activities TEXT,
                parent_guardian_name TEXT,
                parent_guardian_contact TEXT,
                financial_need_statement TEXT,
                how_heard_about TEXT,
                motivation_statement TEXT,
                terms_agreed INTEGER DEFAULT 0,
                uploaded_documents_json TEXT,
                suitability_percent INTEGER,
                suitability_breakdown_json TEXT,
                status TEXT DEFAULT 'pending',
                application_date TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_applications_scholarship_email
            ON scholarship_applications(scholarship_id, email_address)
        """)
        conn.commit()
    finally:
        conn.close()


def _row_to_rule(row: sqlite3.Row) -> ScholarshipRule:
    deadline = row["application_deadline"]
    return ScholarshipRule(
        id=row["id"],
        name=row["name"],
        academic_level=row["academic_level"],
        min_gpa=Decimal(str(row["min_gpa"])) if row["min_gpa"] not in (None, "") else None,
        capacity=row["number_of_awards"],
        status=row["status"] or "inactive",
        application_deadline=datetime.strptime(deadline[:10], "%Y-%m-%d").date() if deadline else None,
        field_of_study=row["field_of_study"],
        country=row["country"],
    )


def save_scholarship(rule: ScholarshipRule) -> None:
    """Insert or replace a scholarship row (seeding and admin tooling)."""
    init_database()
    conn = _connect()
    try:
        conn.execute("""
            INSERT OR REPLACE INTO scholarships (
                id, name, academic_level, min_gpa, number_of_awards,
                status, application_deadline, field_of_study, country
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            rule.id,
            rule.name,
            rule.academic_level,
            str(rule.min_gpa) if rule.min_gpa is not None else None,
            rule.capacity,
            rule.status,
            rule.application_deadline.isoformat() if rule.application_deadline else None,
            rule.field_of_study,
            rule.country,
        ))
        conn.commit()
    finally:
        conn.close()


def find_scholarship(scholarship_id: int) -> Optional[ScholarshipRule]:
    conn = _connect()
    try:
        row = conn.execute("SELECT * FROM scholarships WHERE id = ? LIMIT 1", (scholarship_id,)).fetchone()
        return _row_to_rule(row) if row else None
    finally:
        conn.close()


def count_applications(scholarship_id: int) -> int:
    conn = _connect()
    try:
        row = conn.execute(
            "SELECT COUNT(*) AS count FROM scholarship_applications WHERE scholarship_id = ?",
            (scholarship_id,),
        ).fetchone()
        return int(row["count"])
    finally:
        conn.close()


def application_exists(scholarship_id: int, email: str) -> bool:
    """Case- and whitespace-insensitive email match within one scholarship."""
    conn = _connect()
    try:
        row = conn.execute(
            """
            SELECT 1 FROM scholarship_applications
            WHERE scholarship_id = ? AND LOWER(TRIM(email_address)) = ?
            LIMIT 1
            """,
            (scholarship_id, (email or "").strip().lower()),
        ).fetchone()
        return row is not None
    finally:
        conn.close()


def insert_application(record: Dict[str, Any]) -> int:
    """Insert an application record; returns the new application_id. Raises on failure."""
    values = dict(record)
    values["uploaded_documents_json"] = json.dumps(values.pop("uploaded_documents", []) or [])
    breakdown = values.pop("suitability_breakdown", None)
    values["suitability_breakdown_json"] = json.dumps(breakdown) if breakdown is not None else None
    values["terms_agreed"] = 1 if values.get("terms_agreed") else 0
    values.setdefault("status", "pending")

    placeholders = ", ".join("?" for _ in APPLICATION_COLUMNS)
    conn = _connect()
    try:
        cursor = conn.execute(
            f"INSERT INTO scholarship_applications ({', '.join(APPLICATION_COLUMNS)}) VALUES ({placeholders})",
            tuple(values.get(column) for column in APPLICATION_COLUMNS),
        )
        conn.commit()
        return int(cursor.lastrowid)
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def try_reserve_slot(scholarship_id: int) -> bool:
    """
    Atomically claim one award slot. A single conditional UPDATE, so two
    connections can never both take the last slot.
    """
    conn = _connect()
    try:
        cursor = conn.execute("""
            UPDATE scholarships
            SET reserved_slots = MAX(
                COALESCE(reserved_slots, 0),
                (SELECT COUNT(*) FROM scholarship_applications a WHERE a.scholarship_id = scholarships.id)
            ) + 1
            WHERE id = ?
              AND (
                number_of_awards IS NULL
                OR number_of_awards <= 0
                OR MAX(
                    COALESCE(reserved_slots, 0),
                    (SELECT COUNT(*) FROM scholarship_applications a WHERE a.scholarship_id = scholarships.id)
                ) < number_of_awards
              )
        """, (scholarship_id,))
        conn.commit()
        return cursor.rowcount == 1
    finally:
        conn.close()


def release_slot(scholarship_id: int) -> None:
    conn = _connect()
    try:
        conn.execute(
            "UPDATE scholarships SET reserved_slots = MAX(COALESCE(reserved_slots, 0) - 1, 0) WHERE id = ?",
            (scholarship_id,),
        )
        conn.commit()
    finally:
        conn.close()


def get_application(application_id: int) -> Optional[Dict[str, Any]]:
    conn = _connect()
    try:
        row = conn.execute(
            "SELECT * FROM scholarship_applications WHERE application_id = ? LIMIT 1",
            (application_id,),
        ).fetchone()
    finally:
        conn.close()
    if not row:
        return None
    record = dict(row)
    record["uploaded_documents"] = json.loads(record.pop("uploaded_documents_json") or "[]")
    breakdown_json = record.pop("suitability_breakdown_json")
    record["suitability_breakdown"] = json.loads(breakdown_json) if breakdown_json else None
    record["terms_agreed"] = bool(record["terms_agreed"])
    return record
