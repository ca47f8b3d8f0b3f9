"""
Deterministic suitability scoring (0-100) of one application against its scholarship.

Advisory only. Unlike validation, GPA scoring has soft tolerance bands below the
minimum, and unknown values earn partial credit.
"""

from decimal import Decimal
from typing import List, Optional

from intake.normalize import parse_gpa
from intake.schema import BreakdownItem, NormalizedApplication, ScholarshipRule, SuitabilityResult
from intake.validate import WILDCARD_LEVEL

MAX_SCORE = 100

# Criterion order is part of the output contract.
CRITERIA_WEIGHTS = {
    "academic_level": 20,
    "gpa": 25,
    "field_of_study": 20,
    "country": 10,
    "documents": 10,
    "motivation": 10,
    "extracurricular": 5,
}

GPA_NEAR_MISS = Decimal("0.2")
GPA_FAR_MISS = Decimal("0.5")


def _norm(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def score_academic_level(applicant_level: Optional[str], required_level: Optional[str]) -> int:
    applicant = _norm(applicant_level)
    required = _norm(required_level)
    if not applicant or not required:
        return 10
    if required == WILDCARD_LEVEL or applicant == required:
        return 20
    return 0


def score_gpa(gpa: Optional[Decimal], min_gpa: Optional[Decimal]) -> int:
    if gpa is None or min_gpa is None:
        return 10
    if gpa >= min_gpa:
        return 25
    if gpa >= min_gpa - GPA_NEAR_MISS:
        return 15
    if gpa >= min_gpa - GPA_FAR_MISS:
        return 8
    return 0


def score_field_of_study(intended_major: Optional[str], field_of_study: Optional[str]) -> int:
    field = _norm(field_of_study)
    if not field:
        return 10
    major = _norm(intended_major)
    if major and (major in field or field in major):
        return 20
    return 0


def score_country(applicant_country: Optional[str], scholarship_country: Optional[str]) -> int:
    applicant = _norm(applicant_country)
    sponsor = _norm(scholarship_country)
    if not applicant or not sponsor:
        return 5
    return 10 if applicant == sponsor else 0


def score_documents(documents: List[str]) -> int:
    return 10 if any(doc for doc in documents) else 0


def score_motivation(statement: Optional[str]) -> int:
    length = len((statement or "").strip())
    if length >= 150:
        return 10
    if length >= 60:
        return 6
    if length > 0:
        return 3
    return 0


def score_extracurricular(activities: Optional[str]) -> int:
    length = len((activities or "").strip())
    if length >= 80:
        return 5
    if length >= 20:
        return 3
    if length > 0:
        return 2
    return 0


def score_application(application: NormalizedApplication, rule: ScholarshipRule) -> SuitabilityResult:
    points = {
        "academic_level": score_academic_level(application.academic_level, rule.academic_level),
        "gpa": score_gpa(parse_gpa(application.gpa_academic_performance), rule.min_gpa),
        "field_of_study": score_field_of_study(application.intended_major, rule.field_of_study),
        "country": score_country(application.country, rule.country),
        "documents": score_documents(application.uploaded_documents),
        "motivation": score_motivation(application.motivation_statement),
        "extracurricular": score_extracurricular(application.extracurricular_activities),
    }

    breakdown = [
        BreakdownItem(key=key, points=min(points[key], weight), max_points=weight)
        for key, weight in CRITERIA_WEIGHTS.items()
    ]
    total = sum(item.points for item in breakdown)
    return SuitabilityResult(score=max(0, min(MAX_SCORE, total)), breakdown=breakdown)
