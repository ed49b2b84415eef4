"""
Tests for household overlap endpoints.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from analyzer.analysis import analyze_household_overlaps
from analyzer.models import Household


NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)

SAME_DAY_PAIR = [
    {"id": "A", "name": "Familie Müller", "move_date": "2025-06-10",
     "new_address": "Main St 1", "household_size": 4},
    {"id": "B", "name": "WG Schmidt", "move_date": "2025-06-10",
     "old_address": "main st 1 ", "household_size": 3},
]


def test_analyze_same_day_pair(client: TestClient):
    """Test the example pair: same day and address hand-off"""
    response = client.post("/api/v1/overlaps/analyze", json={
        "households": SAME_DAY_PAIR,
        "now": NOW.isoformat()
    })

    assert response.status_code == 200
    data = response.json()

    assert data["has_conflicts"] is True
    assert data["household_count"] == 2
    assert data["critical_issues"] == 1
    assert data["warnings"] == 1
    assert [(o["type"], o["severity"]) for o in data["overlaps"]] == [
        ("move_date_conflict", "critical"),
        ("address_overlap", "medium"),
    ]
    assert data["overlaps"][0]["affected_households"] == ["A", "B"]
    assert data["summary"].startswith("⚠️ 1 kritische und 1 Warnungen gefunden:")
    assert len(data["recommendations"]) == 2


def test_analyze_matches_library_call(client: TestClient):
    """API and library return the same analysis"""
    households = SAME_DAY_PAIR + [
        {"id": "C", "name": "Familie Weber", "move_date": "2025-06-12", "household_size": 5,
         "members": [{"name": "Jonas", "email": "jonas@example.com"}]},
    ]

    response = client.post("/api/v1/overlaps/analyze", json={
        "households": households,
        "now": NOW.isoformat()
    })
    expected = analyze_household_overlaps([Household.from_dict(h) for h in households], now=NOW)

    assert response.status_code == 200
    data = response.json()
    assert [o["title"] for o in data["overlaps"]] == [o.title for o in expected.overlaps]
    assert data["critical_issues"] == expected.critical_issues
    assert data["warnings"] == expected.warnings


def test_missing_household_size_matches_library(client: TestClient):
    """A household without household_size counts as one person in both paths"""
    households = [
        {"id": "A", "name": "Familie Müller", "move_date": "2025-06-09", "household_size": 10},
        {"id": "B", "name": "WG Schmidt", "move_date": "2025-06-13"},
    ]

    response = client.post("/api/v1/overlaps/analyze", json={
        "households": households,
        "now": NOW.isoformat()
    })
    expected = analyze_household_overlaps([Household.from_dict(h) for h in households], now=NOW)

    assert response.status_code == 200
    types = [o["type"] for o in response.json()["overlaps"]]
    assert types == [o.type.value for o in expected.overlaps] == ["resource_conflict"]


def test_analyze_selected_households(client: TestClient):
    """Only selected households are analyzed"""
    response = client.post("/api/v1/overlaps/analyze", json={
        "households": SAME_DAY_PAIR,
        "selected_household_ids": ["A"]
    })

    assert response.status_code == 200
    data = response.json()
    assert data["household_count"] == 1
    assert data["has_conflicts"] is False
    assert data["summary"] == "✅ Keine Überlappungen oder Konflikte gefunden"


def test_analyze_malformed_date_does_not_fail(client: TestClient):
    """Malformed dates are skipped rather than rejected"""
    response = client.post("/api/v1/overlaps/analyze", json={
        "households": [
            {"id": "A", "name": "A", "move_date": "irgendwann"},
            {"id": "B", "name": "B", "move_date": "2025-06-10"},
        ]
    })

    assert response.status_code == 200
    assert response.json()["overlaps"] == []


def test_analyze_exceeds_limit(client: TestClient):
    """Test error when exceeding max households per request"""
    households = [
        {"id": str(i), "name": f"H{i}", "move_date": "2025-06-10"} for i in range(11)
    ]

    response = client.post("/api/v1/overlaps/analyze", json={"households": households})

    assert response.status_code == 400
    assert "detail" in response.json()


def test_analyze_validation_errors(client: TestClient):
    """Test request validation"""
    # Missing required field
    response = client.post("/api/v1/overlaps/analyze", json={})
    assert response.status_code == 422

    # Invalid household size
    response = client.post("/api/v1/overlaps/analyze", json={
        "households": [{"id": "A", "name": "A", "household_size": 0}]
    })
    assert response.status_code == 422

    # Duplicate ids
    response = client.post("/api/v1/overlaps/analyze", json={
        "households": [{"id": "A", "name": "A"}, {"id": "A", "name": "B"}]
    })
    assert response.status_code == 422


def test_analyze_stored_households(client: TestClient):
    """Analyze households loaded from the database"""
    response = client.get("/api/v1/overlaps", params={"now": NOW.isoformat()})

    assert response.status_code == 200
    data = response.json()

    assert data["household_count"] == 3
    types = [o["type"] for o in data["overlaps"]]
    assert types == ["move_date_conflict", "address_overlap", "member_duplicate"]


def test_analyze_stored_households_by_id(client: TestClient):
    response = client.get("/api/v1/overlaps", params=[("household_ids", "A"), ("household_ids", "C")])

    assert response.status_code == 200
    data = response.json()
    assert data["household_count"] == 2
    assert data["has_conflicts"] is False


def test_analyze_stored_households_database_down(client: TestClient):
    from api.main import app
    from api.config import Settings, get_settings

    app.dependency_overrides[get_settings] = lambda: Settings(
        database_url="sqlite:////nonexistent-dir/households.db"
    )

    response = client.get("/api/v1/overlaps")

    assert response.status_code == 503


def test_resolve_move_date_conflict(client: TestClient):
    analysis = client.post("/api/v1/overlaps/analyze", json={"households": SAME_DAY_PAIR}).json()

    response = client.post("/api/v1/overlaps/resolve", json={
        "overlap": analysis["overlaps"][0],
        "households": SAME_DAY_PAIR
    })

    assert response.status_code == 200
    data = response.json()
    assert data["resolved"] is True
    assert data["changed_household_id"] == "B"
    assert data["households"][1]["move_date"] == "2025-06-11"


def test_resolve_resource_conflict_is_refused(client: TestClient):
    response = client.post("/api/v1/overlaps/resolve", json={
        "overlap": {
            "type": "resource_conflict",
            "severity": "medium",
            "title": "Hohe Umzugsbelastung",
            "description": "2 Haushalte mit 12 Personen ziehen in der gleichen Woche um",
            "affected_households": ["A", "B"]
        },
        "households": SAME_DAY_PAIR
    })

    assert response.status_code == 200
    assert response.json()["resolved"] is False


def test_resolve_invalid_overlap_type(client: TestClient):
    response = client.post("/api/v1/overlaps/resolve", json={
        "overlap": {
            "type": "weather_conflict",
            "severity": "medium",
            "title": "t",
            "description": "d",
            "affected_households": ["A", "B"]
        },
        "households": SAME_DAY_PAIR
    })

    assert response.status_code == 422


def test_timeline(client: TestClient):
    response = client.post("/api/v1/overlaps/timeline", json={
        "households": SAME_DAY_PAIR,
        "now": NOW.isoformat()
    })

    assert response.status_code == 200
    data = response.json()

    assert [e["type"] for e in data["events"]] == ["move", "move", "overlap", "overlap"]
    assert data["events"][0]["household_id"] == "A"
    assert data["events"][0]["position"] == pytest.approx(50.0)
    assert data["start"].startswith("2025-06-03")
    assert data["end"].startswith("2025-06-17")
