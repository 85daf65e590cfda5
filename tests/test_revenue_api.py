"""
API tests for daily revenue intake.
"""
import pytest

from models import Employee


def _payload(**overrides):
    """Matched entry: cash 700 + network 300, employees 600 + 400."""
    payload = {
        "branch_id": 1,
        "revenue_date": "2025-03-10",
        "cash": "700.00",
        "network": "300.00",
        "employee_revenues": [
            {"employee_id": 1, "cash": "400.00", "network": "200.00"},
            {"employee_id": 2, "cash": "300.00", "network": "100.00"},
        ],
    }
    payload.update(overrides)
    return payload


UNMATCHED_CONTRIBUTIONS = [
    {"employee_id": 1, "cash": "400.00", "network": "200.00"},
    {"employee_id": 2, "cash": "250.00", "network": "100.00"},
]


class TestValidateEndpoint:
    def test_matched(self, client):
        response = client.post("/api/revenues/validate", json={
            "cash": "700", "network": "300", "total": "1000", "balance": "300", "employee_total": "1000",
        })

        assert response.status_code == 200
        assert response.json() == {"is_matched": True, "reasons": []}

    def test_unmatched_lists_reasons(self, client):
        response = client.post("/api/revenues/validate", json={
            "cash": "700", "network": "300", "total": "1000", "balance": "300", "employee_total": "950",
        })

        data = response.json()
        assert data["is_matched"] is False
        assert len(data["reasons"]) == 1


class TestCreateDailyRevenue:
    """Test suite for POST /api/revenues/daily."""

    def test_matched_entry_is_stored_and_synced(self, client, employees):
        response = client.post("/api/revenues/daily", json=_payload(), params={"actor_id": 5})

        assert response.status_code == 201
        data = response.json()
        revenue = data["revenue"]
        assert revenue["is_matched"] is True
        assert revenue["total"] == "1000.00"
        assert revenue["balance"] == "300.00"
        assert revenue["employee_total"] == "1000.00"
        assert revenue["unmatch_reason"] is None
        assert revenue["created_by"] == 5
        assert revenue["branch_name"] == "Olaya"
        assert sorted(e["employee_name"] for e in revenue["employee_revenues"]) == ["Ahmed", "Sara"]

        sync = data["sync"]
        assert sync["success"] is True
        assert (sync["year"], sync["month"], sync["week_number"]) == (2025, 3, 2)
        assert sync["data"]["employee_count"] == 2
        assert sync["data"]["total_revenue"] == "1000.00"

    def test_unmatched_entry_without_reason_is_rejected(self, client, employees):
        response = client.post("/api/revenues/daily", json=_payload(employee_revenues=UNMATCHED_CONTRIBUTIONS))

        assert response.status_code == 400
        assert "A mismatch reason is required" in response.json()["detail"]
        assert client.get("/api/revenues/daily", params={"branch_id": 1}).json() == []

    def test_unmatched_entry_with_reason_is_flagged(self, client, employees, notifier):
        response = client.post("/api/revenues/daily", json=_payload(
            employee_revenues=UNMATCHED_CONTRIBUTIONS,
            unmatch_reason="Card terminal double-charged one customer",
        ))

        assert response.status_code == 201
        revenue = response.json()["revenue"]
        assert revenue["is_matched"] is False
        assert revenue["unmatch_reason"] == "Card terminal double-charged one customer"
        assert len(revenue["mismatch_details"]) == 2

        alerts = [m for m in notifier.sent if m["subject"].startswith("Unmatched daily revenue")]
        assert len(alerts) == 1
        assert alerts[0]["recipients"] == ["olaya.manager@example.com"]

    def test_matched_entry_drops_reason(self, client, employees):
        response = client.post("/api/revenues/daily", json=_payload(unmatch_reason="not needed"))

        assert response.json()["revenue"]["unmatch_reason"] is None

    def test_duplicate_day_conflicts(self, client, employees):
        client.post("/api/revenues/daily", json=_payload())

        response = client.post("/api/revenues/daily", json=_payload())

        assert response.status_code == 409
        assert "already recorded" in response.json()["detail"]

    def test_unknown_branch(self, client, employees):
        response = client.post("/api/revenues/daily", json=_payload(branch_id=99))

        assert response.status_code == 404

    def test_employee_from_other_branch(self, client, employees, db_session, second_branch):
        db_session.add(Employee(id=3, branch_id=2, employee_code="M001", name="Omar", is_active=True))
        db_session.commit()

        response = client.post("/api/revenues/daily", json=_payload(employee_revenues=[
            {"employee_id": 3, "cash": "700.00", "network": "300.00"},
        ]))

        assert response.status_code == 400
        assert "do not belong to branch 1" in response.json()["detail"]

    @pytest.mark.parametrize("overrides", [
        {"cash": "-1.00"},
        {"employee_revenues": []},
        {"employee_revenues": [
            {"employee_id": 1, "cash": "350.00", "network": "150.00"},
            {"employee_id": 1, "cash": "350.00", "network": "150.00"},
        ]},
    ])
    def test_malformed_payload(self, client, employees, overrides):
        response = client.post("/api/revenues/daily", json=_payload(**overrides))

        assert response.status_code == 422


class TestListDailyRevenues:
    def test_filters_by_date_range(self, client, employees):
        client.post("/api/revenues/daily", json=_payload(revenue_date="2025-03-10"))
        client.post("/api/revenues/daily", json=_payload(revenue_date="2025-03-11"))
        client.post("/api/revenues/daily", json=_payload(revenue_date="2025-03-20"))

        response = client.get("/api/revenues/daily", params={
            "branch_id": 1, "start_date": "2025-03-10", "end_date": "2025-03-15",
        })

        assert response.status_code == 200
        assert [r["revenue_date"] for r in response.json()] == ["2025-03-11", "2025-03-10"]

    def test_inverted_range(self, client):
        response = client.get("/api/revenues/daily", params={
            "start_date": "2025-03-15", "end_date": "2025-03-10",
        })

        assert response.status_code == 400
