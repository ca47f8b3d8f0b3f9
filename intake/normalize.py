"""
Row normalization: maps CSV cells or free-form web form fields onto the
application field set, plus deterministic parsers for GPA, booleans and
document references.
"""

import json
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ["full_name", "email_address", "scholarship_id", "date_of_birth"]

OPTIONAL_FIELDS = [
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
    "uploaded_documents",
]

APPLICATION_FIELDS = REQUIRED_FIELDS + OPTIONAL_FIELDS

# Ordered alias table for lenient (web form) normalization. First hit wins.
FIELD_ALIASES: Dict[str, List[str]] = {
    "full_name": ["full_name", "fullName", "name", "applicant_name", "applicantName"],
    "email_address": ["email_address", "emailAddress", "email"],
    "scholarship_id": ["scholarship_id", "scholarshipId", "scholarship"],
    "date_of_birth": ["date_of_birth", "dateOfBirth", "dob", "birth_date", "birthDate"],
    "gender": ["gender"],
    "phone_number": ["phone_number", "phoneNumber", "phone"],
    "address": ["address"],
    "preferred_university": ["preferred_university", "preferredUniversity", "university"],
    "country": ["country"],
    "academic_level": ["academic_level", "academicLevel", "level"],
    "intended_major": ["intended_major", "intendedMajor", "major"],
    "gpa_academic_performance": ["gpa_academic_performance", "gpaAcademicPerformance", "gpa"],
    "extracurricular_activities": [
        "extracurricular_activities",
        "extracurricularActivities",
        "extracurriculars",
    ],
    "parent_guardian_name": ["parent_guardian_name", "parentGuardianName"],
    "parent_guardian_contact": ["parent_guardian_contact", "parentGuardianContact"],
    "financial_need_statement": ["financial_need_statement", "financialNeedStatement"],
    "how_heard_about": ["how_heard_about", "howHeardAbout"],
    "motivation_statement": ["motivation_statement", "motivationStatement", "motivation"],
    "terms_agreed": ["terms_agreed", "termsAgreed", "terms"],
    "uploaded_documents": [
        "uploaded_documents",
        "uploadedDocuments",
        "uploaded_documents_json",
        "documents",
    ],
}

KNOWN_ALIASES = {alias.lower() for aliases in FIELD_ALIASES.values() for alias in aliases}

# Key hints used only when no alias matched a required identity field.
INFERENCE_HINTS = {
    "email_address": "email",
    "full_name": "name",
}

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
GPA_PATTERN = re.compile(r"[0-9]+(\.[0-9]+)?")
TRUE_VALUES = {"on", "true", "1", "yes", "y"}


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value).strip()
    return text or None


def build_header_index(header_cells: Sequence[str]) -> Dict[str, int]:
    """Case-insensitive header name -> column index. First occurrence wins."""
    index: Dict[str, int] = {}
    for position, name in enumerate(header_cells):
        key = (name or "").strip().lower()
        if key and key not in index:
            index[key] = position
    return index


def get_cell(
    cells: Sequence[str],
    header_index: Mapping[str, int],
    name: str,
    fallback: Optional[str] = None,
) -> Optional[str]:
    """Trimmed cell for ``name``, or ``fallback`` when the column is absent or blank."""
    position = header_index.get(name.lower())
    if position is None or position >= len(cells):
        return fallback
    value = (cells[position] or "").strip()
    return value or fallback


def normalize_csv_row(
    cells: Sequence[str],
    header_index: Mapping[str, int],
    scholarship_override: Optional[int] = None,
) -> Dict[str, Any]:
    """Strict (bulk) mode: exact header names only."""
    fields: Dict[str, Any] = {name: get_cell(cells, header_index, name) for name in APPLICATION_FIELDS}
    if scholarship_override is not None:
        fields["scholarship_id"] = str(scholarship_override)
    fields["terms_agreed"] = parse_bool(fields["terms_agreed"])
    fields["uploaded_documents"] = parse_documents(fields["uploaded_documents"])
    return fields


def _infer_field(form: Mapping[str, Any], field: str) -> Optional[str]:
    hint = INFERENCE_HINTS[field]
    for key, raw in form.items():
        if key.lower() in KNOWN_ALIASES:
            continue
        value = _clean(raw)
        if not value:
            continue
        if hint in key.lower():
            return value
        if field == "email_address" and EMAIL_PATTERN.match(value):
            return value
    return None


def normalize_form(form: Mapping[str, Any], allow_inference: bool = True) -> Dict[str, Any]:
    """
    Lenient (single-submission) mode.

    Each logical field is resolved through its alias list. If a required identity
    field (email, name) is still missing and ``allow_inference`` is set, keys not
    claimed by any alias are scanned for a name hint or an email-shaped value.
    """
    lowered = {str(key).lower(): value for key, value in form.items()}
    fields: Dict[str, Any] = {}

    for field, aliases in FIELD_ALIASES.items():
        value = None
        for alias in aliases:
            candidate = lowered.get(alias.lower())
            if field == "uploaded_documents" and isinstance(candidate, (list, tuple)):
                value = candidate
                break
            candidate = _clean(candidate)
            if candidate:
                value = candidate
                break
        fields[field] = value

    if allow_inference:
        for field in INFERENCE_HINTS:
            if not fields.get(field):
                inferred = _infer_field(form, field)
                if inferred:
                    logger.info(f"Inferred {field} from unlabelled form field")
                    fields[field] = inferred

    fields["terms_agreed"] = parse_bool(fields["terms_agreed"])
    fields["uploaded_documents"] = parse_documents(fields["uploaded_documents"])
    return fields


def parse_gpa(text: Optional[str]) -> Optional[Decimal]:
    """
    First numeric substring of a free-text GPA ("3.7/4.0" -> 3.7).
    Returns None when no number is present so "unknown" stays distinct from zero.
    """
    if not text:
        return None
    match = GPA_PATTERN.search(str(text))
    if not match:
        return None
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return None


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUE_VALUES


def parse_documents(value: Any) -> List[str]:
    """Document references from a list, a JSON array string, or a ;/, separated string."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [text for text in (_clean(item) for item in value) if text]
    text = str(value).strip()
    if not text:
        return []
    if text.startswith("["):
        try:
            decoded = json.loads(text)
        except ValueError:
            decoded = None
        if isinstance(decoded, list):
            return parse_documents(decoded)
    return [part.strip() for part in re.split(r"[;,]", text) if part.strip()]
