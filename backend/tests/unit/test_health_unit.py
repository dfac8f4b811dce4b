"""
Unit Tests for Health API

Isolated unit tests for health check functionality.
"""
import pytest


class TestHealthCheckUnit:
    """Unit tests for health check endpoint logic."""

    @pytest.mark.asyncio
    async def test_health_check_has_status(self):
        """Health check function should report healthy."""
        from conatus.api.health import health_check

        result = await health_check()

        assert result == {"status": "healthy", "service": "conatus"}


class TestRouterConfiguration:
    """Unit tests for router configuration."""

    def test_health_route(self):
        from conatus.api.health import router

        routes = {route.path: route.methods for route in router.routes}
        assert "GET" in routes["/health"]

    def test_automation_routes(self):
        from conatus.api.automations import router

        routes = {route.path: route.methods for route in router.routes}
        assert "GET" in routes["/conditions/operators"]
        assert "POST" in routes["/conditions/validate"]
        assert "POST" in routes["/conditions/evaluate"]
        assert "POST" in routes["/conditions/preview"]
        assert "POST" in routes["/should-run"]
