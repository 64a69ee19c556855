"""Tests for alerts API endpoints."""

from datetime import date, timedelta

from app.models.recurring import RecurringPattern


class TestAlertsAPI:
    """Test alerts endpoints."""

    def test_requires_household_header(self, client):
        response = client.get("/api/v1/alerts")
        assert response.status_code == 400

    def test_list_alerts_empty(self, client, headers):
        """Should return empty list."""
        response = client.get("/api/v1/alerts", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"items": [], "total": 0}

    def test_missed_recurring_alert(self, client, headers, db_session, sample_pattern):
        """A confirmed pattern not seen for 45 days produces an alert."""
        sample_pattern.is_confirmed = True
        sample_pattern.last_seen_date = date.today() - timedelta(days=45)
        db_session.commit()

        response = client.get("/api/v1/alerts", headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        alert = data["items"][0]
        assert alert["id"] == f"recurring-{sample_pattern.id}"
        assert alert["type"] == "recurring_missed"
        assert alert["severity"] == "info"
        assert alert["data"] == {"description": "netflix", "days_since": 45}

    def test_unusual_expense_alert(self, client, headers, add_transaction):
        today = date.today()
        add_transaction(today - timedelta(days=30), "-40.00", "Groceries")
        add_transaction(today - timedelta(days=20), "-60.00", "Groceries")
        add_transaction(today - timedelta(days=2), "-900.00", "Laptop")

        data = client.get("/api/v1/alerts", headers=headers).json()

        assert data["total"] == 1
        assert data["items"][0]["type"] == "unusual_expense"
        assert data["items"][0]["data"] == {"amount": 900, "description": "Laptop", "average": 50}

    def test_first_expense_is_not_unusual(self, client, headers, add_transaction):
        """Without a baseline nothing is flagged."""
        add_transaction(date.today() - timedelta(days=1), "-900.00", "Laptop")

        assert client.get("/api/v1/alerts", headers=headers).json()["total"] == 0

    def test_scoped_to_household(self, client, other_household, db_session, sample_pattern):
        sample_pattern.is_confirmed = True
        sample_pattern.last_seen_date = date.today() - timedelta(days=90)
        db_session.commit()

        response = client.get("/api/v1/alerts", headers={"X-Household-ID": other_household.id})
        assert response.json()["total"] == 0
