"""Tests for the readiness probe."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from pymongo.errors import ServerSelectionTimeoutError

MODULE = "app.api.health"


def _client(ping_error=None):
    client = MagicMock()
    client.admin.command = AsyncMock(side_effect=ping_error)
    return client


class TestReadiness:
    def test_ready_with_cache_down(self):
        from app.api.health import readiness

        with patch(f"{MODULE}.db") as mock_db, patch(f"{MODULE}.cache_service") as mock_cache:
            mock_db.client = _client()
            mock_cache.health_check = AsyncMock(return_value={"available": False})
            result = asyncio.run(readiness())

        assert result == {
            "status": "ready",
            "components": {"database": "connected", "cache": "degraded"},
        }

    def test_unreachable_database(self):
        from app.api.health import readiness

        with patch(f"{MODULE}.db") as mock_db, patch(f"{MODULE}.cache_service") as mock_cache:
            mock_db.client = _client(ServerSelectionTimeoutError("timeout"))
            mock_cache.health_check = AsyncMock(return_value={"available": True})
            response = asyncio.run(readiness())

        assert response.status_code == 503

    def test_not_connected(self):
        from app.api.health import readiness

        with patch(f"{MODULE}.db") as mock_db, patch(f"{MODULE}.cache_service") as mock_cache:
            mock_db.client = None
            mock_cache.health_check = AsyncMock(return_value={"available": True})
            response = asyncio.run(readiness())

        assert response.status_code == 503
