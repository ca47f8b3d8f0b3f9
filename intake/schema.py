"""
Data models for scholarship application intake.
Uses Pydantic for validation and type safety.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, Field

from intake.errors import ErrorKind


class ScholarshipRule(BaseModel):
    """
    Read-only snapshot of a scholarship's eligibility rules, loaded once per batch.

    ``academic_level == "other"`` matches any applicant level.
    ``capacity`` of None or 0 means unlimited awards.
    """
    id: int
    name: Optional[str] = None
    academic_level: Optional[str] = None
    min_gpa: Optional[Decimal] = None
    capacity: Optional[int] = None  # number_of_awards
    status: str = "active"
    application_deadline: Optional[date] = None
    field_of_study: Optional[str] = None
    country: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return (self.status or "").strip().lower() == "active"

    @property
    def has_capacity_limit(self) -> bool:
        return self.capacity is not None and self.capacity > 0


class NormalizedApplication(BaseModel):
    """
    Application fields after normalization and coercion.
    Becomes a stored application record only on successful admission.
    """
    full_name: str
    email_address: str
    scholarship_id: int
    date_of_birth: date

    gender: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    preferred_university: Optional[str] = None
    country: Optional[str] = None
    academic_level: Optional[str] = None
    intended_major: Optional[str] = None
    gpa_academic_performance: Optional[str] = None  # free text, e.g. "3.7/4.0"
    extracurricular_activities: Optional[str] = None
    parent_guardian_name: Optional[str] = None
    parent_guardian_contact: Optional[str] = None
    financial_need_statement: Optional[str] = None
    how_heard_about: Optional[str] = None
    motivation_statement: Optional[str] = None
    terms_agreed: bool = False
    uploaded_documents: List[str] = Field(default_factory=list)

    def to_record(self) -> dict:
        """Column dict for the storage layer."""
        record = self.model_dump(exclude={"uploaded_documents"})
        record["date_of_birth"] = self.date_of_birth.isoformat()
        record["uploaded_documents"] = list(self.uploaded_documents)
        return record


class RowOutcome(BaseModel):
    """Result of processing one CSV data row."""
    row: int
    status: str  # inserted | duplicate | error
    message: Optional[str] = None
    email: Optional[str] = None
    scholarship_id: Optional[int] = None
    kind: Optional[ErrorKind] = None
    application_id: Optional[int] = None

    def to_response(self) -> dict:
        payload = {"row": self.row, "status": self.status}
        if self.status == "error" and self.message:
            payload["message"] = self.message
        if self.email:
            payload["email"] = self.email
        if self.scholarship_id is not None:
            payload["scholarship_id"] = self.scholarship_id
        return payload


class BreakdownItem(BaseModel):
    key: str
    points: int
    max_points: int


class SuitabilityResult(BaseModel):
    score: int
    breakdown: List[BreakdownItem]

    def breakdown_payload(self) -> List[dict]:
        return [{"key": item.key, "points": item.points} for item in self.breakdown]
