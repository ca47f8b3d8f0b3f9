"""
Validation module: coerces normalized fields into an application and checks it
against a scholarship's eligibility rules.

Both steps are pure. Each failed check yields a RowError of a distinct kind;
the first failure wins.
"""

import re
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError

from intake.errors import ErrorKind, RowError
from intake.normalize import REQUIRED_FIELDS, parse_gpa
from intake.schema import NormalizedApplication, ScholarshipRule

WILDCARD_LEVEL = "other"
SCHOLARSHIP_ID_PATTERN = re.compile(r"[0-9]+")

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d-%m-%Y",
    "%d.%m.%Y",
)


def parse_date(value: Any) -> Optional[date]:
    """Parse a calendar date from the accepted input formats. None if invalid."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_scholarship_id(value: Any) -> Optional[int]:
    """Positive integer id, or None."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not SCHOLARSHIP_ID_PATTERN.fullmatch(text):
        return None
    number = int(text)
    return number if number > 0 else None


def coerce_application(fields: Dict[str, Any]) -> Tuple[Optional[NormalizedApplication], Optional[RowError]]:
    """
    Checks 1-3: required fields, scholarship id, date of birth.

    Returns (application, None) on success or (None, RowError).
    """
    missing = [name for name in REQUIRED_FIELDS if not fields.get(name)]
    if missing:
        return None, RowError(
            ErrorKind.MISSING_FIELD,
            f"Missing required field(s): {', '.join(missing)}",
        )

    scholarship_id = parse_scholarship_id(fields["scholarship_id"])
    if scholarship_id is None:
        return None, RowError(
            ErrorKind.INVALID_SCHOLARSHIP_ID,
            f"Invalid scholarship_id: {fields['scholarship_id']}",
        )

    date_of_birth = parse_date(fields["date_of_birth"])
    if date_of_birth is None:
        return None, RowError(
            ErrorKind.INVALID_DATE,
            f"Invalid date_of_birth: {fields['date_of_birth']}",
        )

    payload = dict(fields)
    payload["scholarship_id"] = scholarship_id
    payload["date_of_birth"] = date_of_birth
    payload["email_address"] = str(fields["email_address"]).strip()
    try:
        application = NormalizedApplication(**payload)
    except ValidationError as e:
        return None, RowError(ErrorKind.MISSING_FIELD, f"Invalid application fields: {e.errors()[0].get('msg')}")
    return application, None


def academic_level_matches(applicant_level: Optional[str], required_level: Optional[str]) -> bool:
    """True unless both levels are known, the rule is not the wildcard, and they differ."""
    applicant = (applicant_level or "").strip().lower()
    required = (required_level or "").strip().lower()
    if not applicant or not required or required == WILDCARD_LEVEL:
        return True
    return applicant == required


def check_eligibility(
    application: NormalizedApplication,
    rule: Optional[ScholarshipRule],
    today: Optional[date] = None,
) -> Optional[RowError]:
    """Checks 4-8 against the scholarship rule. None means eligible."""
    effective_today = today or date.today()

    if rule is None:
        return RowError(
            ErrorKind.SCHOLARSHIP_NOT_FOUND,
            f"Scholarship {application.scholarship_id} not found",
        )

    if not rule.is_active:
        return RowError(ErrorKind.SCHOLARSHIP_INACTIVE, "Scholarship is not active")

    if rule.application_deadline is not None and rule.application_deadline < effective_today:
        return RowError(
            ErrorKind.DEADLINE_PASSED,
            f"Application deadline passed on {rule.application_deadline.isoformat()}",
        )

    if not academic_level_matches(application.academic_level, rule.academic_level):
        return RowError(
            ErrorKind.ACADEMIC_LEVEL_MISMATCH,
            f"Academic level '{application.academic_level}' does not match required '{rule.academic_level}'",
        )

    if rule.min_gpa is not None:
        gpa = parse_gpa(application.gpa_academic_performance)
        if gpa is None:
            return RowError(
                ErrorKind.GPA_BELOW_MINIMUM,
                f"GPA missing; minimum required is {rule.min_gpa}",
            )
        if gpa < rule.min_gpa:
            return RowError(
                ErrorKind.GPA_BELOW_MINIMUM,
                f"GPA {gpa} is below the minimum of {rule.min_gpa}",
            )

    return None
