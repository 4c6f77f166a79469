# tests for the health check and app configuration

from nutriplan.config import settings


class TestHealthCheck:
    """app health and config"""

    async def test_health_check(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["service"] == "nutriplan-api"

    async def test_openapi_schema(self, client):
        resp = await client.get("/openapi.json")
        assert resp.status_code == 200
        schema = resp.json()
        assert schema["info"]["title"] == "NutriPlan API"
        assert "/reports/monthly" in schema["paths"]
        assert "/meals/{meal_id}" in schema["paths"]

    def test_report_settings(self):
        assert settings.REPORT_TREND_MONTHS == 12
        assert settings.REPORT_EXPIRY_WINDOW_DAYS == 30
