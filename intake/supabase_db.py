"""
Supabase PostgreSQL store for scholarships and applications.

Duplicate lookup and slot reservation run server-side as Postgres functions.
The email comparison is LOWER(TRIM(..)) on both sides, and the capacity check
and the increment happen in one statement:

    create function scholarship_application_exists(p_scholarship_id bigint, p_email text) returns boolean as $$
      select exists (
        select 1 from scholarship_applications
        where scholarship_id = p_scholarship_id
          and lower(trim(email_address)) = lower(trim(p_email))
      );
    $$ language sql stable;

    create function try_reserve_scholarship_slot(p_scholarship_id bigint) returns boolean as $$
      update scholarships s set reserved_slots = greatest(
          coalesce(s.reserved_slots, 0),
          (select count(*) from scholarship_applications a where a.scholarship_id = s.id)) + 1
      where s.id = p_scholarship_id
        and (s.number_of_awards is null or s.number_of_awards <= 0
             or greatest(coalesce(s.reserved_slots, 0),
                  (select count(*) from scholarship_applications a where a.scholarship_id = s.id))
                < s.number_of_awards)
      returning true;
    $$ language sql;

    create function release_scholarship_slot(p_scholarship_id bigint) returns void as $$
      update scholarships set reserved_slots = greatest(coalesce(reserved_slots, 0) - 1, 0)
      where id = p_scholarship_id;
    $$ language sql;
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from intake.schema import ScholarshipRule
from intake.supabase_client import get_service_client

logger = logging.getLogger(__name__)

SCHOLARSHIPS_TABLE = "scholarships"
APPLICATIONS_TABLE = "scholarship_applications"


def _client():
    client = get_service_client()
    if not client:
        raise RuntimeError("Could not initialize Supabase client")
    return client


def _row_to_rule(row: Dict[str, Any]) -> ScholarshipRule:
    deadline = row.get("application_deadline") or row.get("deadline_date")
    min_gpa = row.get("min_gpa")
    return ScholarshipRule(
        id=row["id"],
        name=row.get("name"),
        academic_level=row.get("academic_level"),
        min_gpa=Decimal(str(min_gpa)) if min_gpa not in (None, "") else None,
        capacity=row.get("number_of_awards"),
        status=row.get("status") or "inactive",
        application_deadline=datetime.strptime(str(deadline)[:10], "%Y-%m-%d").date() if deadline else None,
        field_of_study=row.get("field_of_study"),
        country=row.get("country"),
    )


def find_scholarship(scholarship_id: int) -> Optional[ScholarshipRule]:
    result = (
        _client()
        .table(SCHOLARSHIPS_TABLE)
        .select("*")
        .eq("id", scholarship_id)
        .limit(1)
        .execute()
    )
    if result.data and len(result.data) > 0:
        return _row_to_rule(result.data[0])
    return None


def count_applications(scholarship_id: int) -> int:
    result = (
        _client()
        .table(APPLICATIONS_TABLE)
        .select("application_id", count="exact")
        .eq("scholarship_id", scholarship_id)
        .limit(1)
        .execute()
    )
    return int(result.count or 0)


def application_exists(scholarship_id: int, email: str) -> bool:
    result = _client().rpc(
        "scholarship_application_exists",
        {"p_scholarship_id": scholarship_id, "p_email": (email or "").strip().lower()},
    ).execute()
    return bool(result.data)


def insert_application(record: Dict[str, Any]) -> int:
    values = dict(record)
    values["uploaded_documents_json"] = values.pop("uploaded_documents", []) or []
    breakdown = values.pop("suitability_breakdown", None)
    if breakdown is not None:
        values["suitability_breakdown_json"] = breakdown
    values.setdefault("status", "pending")

    result = _client().table(APPLICATIONS_TABLE).insert(values).execute()
    if not result.data:
        raise RuntimeError("Insert returned no data")
    return int(result.data[0]["application_id"])


def try_reserve_slot(scholarship_id: int) -> bool:
    result = _client().rpc("try_reserve_scholarship_slot", {"p_scholarship_id": scholarship_id}).execute()
    return bool(result.data)


def release_slot(scholarship_id: int) -> None:
    _client().rpc("release_scholarship_slot", {"p_scholarship_id": scholarship_id}).execute()


def get_application(application_id: int) -> Optional[Dict[str, Any]]:
    result = (
        _client()
        .table(APPLICATIONS_TABLE)
        .select("*")
        .eq("application_id", application_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        return None
    record = dict(result.data[0])
    record["uploaded_documents"] = record.pop("uploaded_documents_json", None) or []
    record["suitability_breakdown"] = record.pop("suitability_breakdown_json", None)
    return record
