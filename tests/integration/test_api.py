import pytest
from uuid import uuid4

import jwt
from httpx import ASGITransport, AsyncClient

from degree_planner.core.config import Settings, get_settings
from degree_planner.db.session import get_db
from degree_planner.main import app


@pytest.fixture
async def client(test_session):
    """HTTP client bound to the app with the test session injected"""
    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.integration
class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


@pytest.mark.integration
class TestRoadmapEndpoints:
    """Integration tests for roadmap endpoints"""

    @pytest.mark.asyncio
    async def test_generate(self, client, seeded_template, auth_headers):
        response = await client.post(
            "/api/v1/roadmap/generate",
            json={"template_id": str(seeded_template.id)},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["version"] == 1
        assert data["summary"]["totalCredits"] == 24
        assert data["summary"]["upperLevelCredits"] == 6
        assert len(data["steps"]) == 8
        assert data["financials"]["projected_total"] == 11260

    @pytest.mark.asyncio
    async def test_generate_then_read(self, client, seeded_template, auth_headers, expected_codes):
        generated = await client.post(
            "/api/v1/roadmap/generate",
            json={"template_id": str(seeded_template.id), "pace_hours_per_week": 10},
            headers=auth_headers,
        )
        plan_id = generated.json()["plan_id"]

        response = await client.get(f"/api/v1/roadmap/plans/{plan_id}", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["plan"]["id"] == plan_id
        assert [s["ref_code"] for s in data["steps"]] == expected_codes
        assert data["template"]["total_credits"] == 24
        assert data["financials"]["sessions_actual"] == 2

    @pytest.mark.asyncio
    async def test_plan_hidden_from_other_users(self, client, seeded_template, auth_headers):
        generated = await client.post(
            "/api/v1/roadmap/generate",
            json={"template_id": str(seeded_template.id)},
            headers=auth_headers,
        )
        plan_id = generated.json()["plan_id"]

        settings = get_settings()
        other = jwt.encode({"sub": str(uuid4())}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

        response = await client.get(
            f"/api/v1/roadmap/plans/{plan_id}", headers={"Authorization": f"Bearer {other}"}
        )

        assert response.status_code == 404
        assert response.json() == {"detail": "Plan not found"}

    @pytest.mark.asyncio
    async def test_unknown_template_is_404(self, client, seeded_template, auth_headers):
        response = await client.post(
            "/api/v1/roadmap/generate",
            json={"template_id": str(uuid4())},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Degree template not found"

    @pytest.mark.asyncio
    async def test_unsatisfiable_policy_is_422(self, client, unsatisfiable_template, auth_headers):
        response = await client.post(
            "/api/v1/roadmap/generate",
            json={"template_id": str(unsatisfiable_template.id)},
            headers=auth_headers,
        )

        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "Failed to generate plan"
        assert data["upper_level_shortfall"] == 3
        assert data["residency_shortfall"] == 3

    @pytest.mark.asyncio
    async def test_missing_template_id(self, client, auth_headers):
        response = await client.post("/api/v1/roadmap/generate", json={}, headers=auth_headers)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_bad_token(self, client, seeded_template):
        response = await client.post(
            "/api/v1/roadmap/generate",
            json={"template_id": str(seeded_template.id)},
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_token_rejected(self, client, seeded_template):
        response = await client.post(
            "/api/v1/roadmap/generate",
            json={"template_id": str(seeded_template.id)},
        )

        assert response.status_code == 401
        assert response.json() == {"detail": "Not authenticated"}

    @pytest.mark.asyncio
    async def test_token_without_subject_rejected(self, client, seeded_template):
        settings = get_settings()
        token = jwt.encode({"role": "student"}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

        response = await client.post(
            "/api/v1/roadmap/generate",
            json={"template_id": str(seeded_template.id)},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401
        assert response.json() == {"detail": "Could not validate credentials"}

    @pytest.mark.asyncio
    async def test_dev_user_reads_own_plan_without_token(self, client, seeded_template):
        dev_settings = Settings(_env_file=None, DEV_USER_ID=uuid4())
        app.dependency_overrides[get_settings] = lambda: dev_settings

        generated = await client.post(
            "/api/v1/roadmap/generate",
            json={"template_id": str(seeded_template.id)},
        )
        plan_id = generated.json()["plan_id"]
        response = await client.get(f"/api/v1/roadmap/plans/{plan_id}")

        assert generated.status_code == 200
        assert response.status_code == 200
        assert response.json()["plan"]["user_id"] == str(dev_settings.DEV_USER_ID)


@pytest.mark.integration
class TestFlightDeckEndpoints:
    """Integration tests for Flight Deck endpoints"""

    @pytest.mark.asyncio
    async def test_calculate(self, client, flight_deck_payload):
        response = await client.post("/api/v1/flight-deck/calculate", json=flight_deck_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["eta"]["months"] == 9
        assert data["credits"]["isOverTarget"] is False
        assert data["alerts"]["level"] == "green"
        assert len(data["insights"]["milestones"]["celebrations"]) <= 3

    @pytest.mark.asyncio
    async def test_calculate_validation_errors(self, client, flight_deck_payload):
        del flight_deck_payload["financials"]["breakdown"]

        response = await client.post("/api/v1/flight-deck/calculate", json=flight_deck_payload)

        assert response.status_code == 422
        data = response.json()
        assert [e["field"] for e in data["errors"]] == ["financials.breakdown"]

    @pytest.mark.asyncio
    async def test_plan_flight_deck(self, client, seeded_template, auth_headers):
        generated = await client.post(
            "/api/v1/roadmap/generate",
            json={"template_id": str(seeded_template.id)},
            headers=auth_headers,
        )
        plan_id = generated.json()["plan_id"]

        response = await client.post(
            f"/api/v1/flight-deck/plans/{plan_id}",
            json={
                "studentProfile": {"name": "Jordan", "targetHours": 12},
                "progress": {"completedCredits": 100, "inProgressCredits": 0},
                "pace": {"weeklyHoursAvg": 10},
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["cost"]["projectedTotal"] == 11260
        assert data["pace"]["state"] == "yellow"
        assert data["insights"]["smartTip"] == "Increase pace by 2 hrs/week to stay on track."

    @pytest.mark.asyncio
    async def test_plan_flight_deck_unknown_plan(self, client, auth_headers):
        response = await client.post(
            f"/api/v1/flight-deck/plans/{uuid4()}",
            json={
                "studentProfile": {"name": "Jordan"},
                "progress": {"completedCredits": 0, "inProgressCredits": 0},
                "pace": {"weeklyHoursAvg": 10},
            },
            headers=auth_headers,
        )

        assert response.status_code == 404
