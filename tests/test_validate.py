"""
Validation tests: coercion of required fields and eligibility rule checks.
"""

from datetime import date
from decimal import Decimal

from intake.errors import ErrorKind
from intake.validate import check_eligibility, coerce_application, parse_date


def _base_fields(**overrides):
    base = {
        "full_name": "Jane Doe",
        "email_address": " Jane@Example.com ",
        "scholarship_id": "1",
        "date_of_birth": "2004-05-06",
        "academic_level": "Undergraduate",
        "gpa_academic_performance": "3.5",
        "terms_agreed": True,
        "uploaded_documents": [],
    }
    base.update(overrides)
    return base


def _application(**overrides):
    application, error = coerce_application(_base_fields(**overrides))
    assert error is None
    return application


def test_coerce_happy_path_normalizes_date_and_id():
    application, error = coerce_application(_base_fields(date_of_birth="05/06/2004"))
    assert error is None
    assert application.scholarship_id == 1
    assert application.date_of_birth == date(2004, 5, 6)
    assert application.to_record()["date_of_birth"] == "2004-05-06"
    assert application.email_address == "Jane@Example.com"


def test_missing_required_fields_listed():
    application, error = coerce_application(_base_fields(full_name=None, date_of_birth=""))
    assert application is None
    assert error.kind == ErrorKind.MISSING_FIELD
    assert "full_name" in error.message
    assert "date_of_birth" in error.message


def test_invalid_scholarship_id():
    for value in ("abc", "0", "-3", "1.5"):
        _, error = coerce_application(_base_fields(scholarship_id=value))
        assert error.kind == ErrorKind.INVALID_SCHOLARSHIP_ID


def test_invalid_date():
    _, error = coerce_application(_base_fields(date_of_birth="2004-02-30"))
    assert error.kind == ErrorKind.INVALID_DATE


def test_parse_date_formats():
    assert parse_date("2004/05/06") == date(2004, 5, 6)
    assert parse_date("06.05.2004") == date(2004, 5, 6)
    assert parse_date("2004-05-06T00:00:00Z") == date(2004, 5, 6)
    assert parse_date("not a date") is None


def test_eligible_application_passes(rule, today):
    assert check_eligibility(_application(), rule, today) is None


def test_scholarship_not_found(today):
    error = check_eligibility(_application(), None, today)
    assert error.kind == ErrorKind.SCHOLARSHIP_NOT_FOUND


def test_inactive_scholarship(rule_factory, today):
    error = check_eligibility(_application(), rule_factory(status="inactive"), today)
    assert error.kind == ErrorKind.SCHOLARSHIP_INACTIVE


def test_deadline_passed_but_today_is_allowed(rule_factory, today):
    assert check_eligibility(_application(), rule_factory(application_deadline=today), today) is None
    error = check_eligibility(_application(), rule_factory(application_deadline=date(2026, 1, 14)), today)
    assert error.kind == ErrorKind.DEADLINE_PASSED


def test_academic_level_mismatch(rule_factory, today):
    error = check_eligibility(_application(academic_level="postgraduate"), rule_factory(), today)
    assert error.kind == ErrorKind.ACADEMIC_LEVEL_MISMATCH


def test_academic_level_wildcard_and_unknown_pass(rule_factory, today):
    assert check_eligibility(_application(academic_level="postgraduate"), rule_factory(academic_level="Other"), today) is None
    assert check_eligibility(_application(academic_level=None), rule_factory(), today) is None


def test_gpa_below_minimum_is_hard_cutoff(rule_factory, today):
    error = check_eligibility(_application(gpa_academic_performance="2.9"), rule_factory(), today)
    assert error.kind == ErrorKind.GPA_BELOW_MINIMUM


def test_gpa_missing_fails_when_minimum_set(rule_factory, today):
    error = check_eligibility(_application(gpa_academic_performance="n/a"), rule_factory(), today)
    assert error.kind == ErrorKind.GPA_BELOW_MINIMUM


def test_gpa_free_text_and_no_minimum(rule_factory, today):
    assert check_eligibility(_application(gpa_academic_performance="3.0 out of 4"), rule_factory(), today) is None
    assert check_eligibility(_application(gpa_academic_performance=None), rule_factory(min_gpa=None), today) is None


def test_checks_run_in_order(rule_factory, today):
    rule = rule_factory(status="inactive", min_gpa=Decimal("4.0"))
    error = check_eligibility(_application(gpa_academic_performance="1.0"), rule, today)
    assert error.kind == ErrorKind.SCHOLARSHIP_INACTIVE
