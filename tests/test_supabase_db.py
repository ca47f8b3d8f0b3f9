"""
Supabase store tests. The PostgREST client is replaced with a MagicMock chain.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from intake import supabase_db


@pytest.fixture
def client():
    mock_client = MagicMock()
    with patch("intake.supabase_db._client", return_value=mock_client):
        yield mock_client


def _result(data=None, count=None):
    result = MagicMock()
    result.data = data
    result.count = count
    return result


def _table_query(client):
    # select/eq/limit all return the same chain object
    query = client.table.return_value
    query.select.return_value = query
    query.eq.return_value = query
    query.limit.return_value = query
    return query


class TestScholarshipLookup:
    def test_deadline_falls_back_to_deadline_date(self, client):
        query = _table_query(client)
        query.execute.return_value = _result(data=[{
            "id": 4,
            "name": "Women in Engineering",
            "academic_level": "undergraduate",
            "min_gpa": 3.2,
            "number_of_awards": 5,
            "status": "active",
            "deadline_date": "2026-09-01T00:00:00+00:00",
        }])

        rule = supabase_db.find_scholarship(4)

        client.table.assert_called_with("scholarships")
        assert rule.application_deadline == date(2026, 9, 1)
        assert rule.min_gpa == Decimal("3.2")
        assert rule.capacity == 5

    def test_missing_scholarship(self, client):
        _table_query(client).execute.return_value = _result(data=[])
        assert supabase_db.find_scholarship(99) is None

    def test_count_uses_exact_count(self, client):
        query = _table_query(client)
        query.execute.return_value = _result(data=[], count=7)
        assert supabase_db.count_applications(1) == 7
        query.select.assert_called_with("application_id", count="exact")


class TestApplicationExists:
    def test_comparison_runs_server_side_on_trimmed_lowercase_email(self, client):
        client.rpc.return_value.execute.return_value = _result(data=True)

        assert supabase_db.application_exists(1, " A*B@Example.com ") is True
        client.rpc.assert_called_once_with(
            "scholarship_application_exists",
            {"p_scholarship_id": 1, "p_email": "a*b@example.com"},
        )
        client.table.assert_not_called()

    def test_no_match(self, client):
        client.rpc.return_value.execute.return_value = _result(data=False)
        assert supabase_db.application_exists(1, "jane@example.com") is False


class TestInsertApplication:
    def test_documents_and_breakdown_go_to_json_columns(self, client):
        query = client.table.return_value
        query.insert.return_value.execute.return_value = _result(data=[{"application_id": 12}])

        application_id = supabase_db.insert_application({
            "scholarship_id": 1,
            "full_name": "Jane Doe",
            "email_address": "jane@example.com",
            "uploaded_documents": ["docs/transcript.pdf"],
            "suitability_percent": 80,
            "suitability_breakdown": [{"key": "gpa", "points": 25}],
        })

        assert application_id == 12
        values = query.insert.call_args.args[0]
        assert values["uploaded_documents_json"] == ["docs/transcript.pdf"]
        assert values["suitability_breakdown_json"] == [{"key": "gpa", "points": 25}]
        assert values["status"] == "pending"
        assert "uploaded_documents" not in values
        assert "suitability_breakdown" not in values

    def test_empty_insert_result_raises(self, client):
        client.table.return_value.insert.return_value.execute.return_value = _result(data=[])
        with pytest.raises(RuntimeError):
            supabase_db.insert_application({"scholarship_id": 1})


class TestSlots:
    def test_reservation_granted(self, client):
        client.rpc.return_value.execute.return_value = _result(data=True)
        assert supabase_db.try_reserve_slot(3) is True
        client.rpc.assert_called_once_with("try_reserve_scholarship_slot", {"p_scholarship_id": 3})

    def test_null_rpc_data_means_refused(self, client):
        client.rpc.return_value.execute.return_value = _result(data=None)
        assert supabase_db.try_reserve_slot(3) is False

    def test_release(self, client):
        supabase_db.release_slot(3)
        client.rpc.assert_called_once_with("release_scholarship_slot", {"p_scholarship_id": 3})


def test_missing_client_raises():
    with patch("intake.supabase_db.get_service_client", return_value=None):
        with pytest.raises(RuntimeError):
            supabase_db.find_scholarship(1)
