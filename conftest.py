"""Pytest fixtures shared across the intake tests: an in-memory store and sample scholarships."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from intake.schema import ScholarshipRule

TODAY = date(2026, 1, 15)


class FakeStore:
    """In-memory stand-in for the storage collaborator."""

    def __init__(self, scholarships=None, applications=None):
        self.scholarships = {rule.id: rule for rule in (scholarships or [])}
        self.applications = [dict(a) for a in (applications or [])]
        self.reserved = {}
        self.refuse_reservations = False
        self.fail_inserts = False
        self.scholarship_lookups = 0
        self.released = []

    def find_scholarship(self, scholarship_id):
        self.scholarship_lookups += 1
        return self.scholarships.get(scholarship_id)

    def count_applications(self, scholarship_id):
        return sum(1 for a in self.applications if a["scholarship_id"] == scholarship_id)

    def application_exists(self, scholarship_id, email):
        wanted = (email or "").strip().lower()
        return any(
            a["scholarship_id"] == scholarship_id and a["email_address"].strip().lower() == wanted
            for a in self.applications
        )

    def insert_application(self, record):
        if self.fail_inserts:
            raise ConnectionError("connection lost")
        stored = dict(record)
        stored["application_id"] = len(self.applications) + 1
        self.applications.append(stored)
        return stored["application_id"]

    def try_reserve_slot(self, scholarship_id):
        if self.refuse_reservations:
            return False
        rule = self.scholarships[scholarship_id]
        used = max(self.reserved.get(scholarship_id, 0), self.count_applications(scholarship_id))
        if rule.has_capacity_limit and used >= rule.capacity:
            return False
        self.reserved[scholarship_id] = used + 1
        return True

    def release_slot(self, scholarship_id):
        self.released.append(scholarship_id)
        self.reserved[scholarship_id] = max(self.reserved.get(scholarship_id, 0) - 1, 0)

    def get_application(self, application_id):
        for a in self.applications:
            if a["application_id"] == application_id:
                return a
        return None


def make_rule(**overrides) -> ScholarshipRule:
    base = {
        "id": 1,
        "name": "STEM Excellence Award",
        "academic_level": "undergraduate",
        "min_gpa": Decimal("3.0"),
        "capacity": None,
        "status": "active",
        "application_deadline": date.today() + timedelta(days=180),
        "field_of_study": "Computer Science",
        "country": "Rwanda",
    }
    base.update(overrides)
    return ScholarshipRule(**base)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def rule():
    return make_rule()


@pytest.fixture
def store(rule):
    return FakeStore(scholarships=[rule])


@pytest.fixture
def rule_factory():
    return make_rule


@pytest.fixture
def store_factory():
    return FakeStore
