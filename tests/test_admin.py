"""
Tests for admin management, dashboards, client navigation and health
"""

import pytest
from httpx import AsyncClient

from sportsbnb.models.user import User
from sportsbnb.models.venue import Venue

from conftest import next_weekday


def _checkout(venue: Venue, booking_time: str = "10:00"):
    return {
        "venue_id": str(venue.id),
        "booking_date": next_weekday(0).isoformat(),
        "booking_time": booking_time,
    }


@pytest.mark.integration
class TestAdmin:
    """Platform administration"""

    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient, player_headers, owner_headers):
        for headers in (player_headers, owner_headers):
            response = await client.get("/api/v1/admin/stats", headers=headers)
            assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_platform_stats(
        self, client: AsyncClient, admin_headers, player_headers, test_venue: Venue
    ):
        await client.post("/api/v1/bookings/checkout", json=_checkout(test_venue), headers=player_headers)

        response = await client.get("/api/v1/admin/stats", headers=admin_headers)
        assert response.status_code == 200
        stats = response.json()
        assert stats["players"] == 1
        assert stats["owners"] == 1
        assert stats["admins"] == 1
        assert stats["total_users"] == 3
        assert stats["active_venues"] == 1
        assert stats["confirmed_bookings"] == 1
        assert float(stats["gross_volume"]) == 42
        assert float(stats["platform_revenue"]) == 2

    @pytest.mark.asyncio
    async def test_list_users(self, client: AsyncClient, admin_headers, test_player: User, test_owner: User):
        everyone = await client.get("/api/v1/admin/users", headers=admin_headers)
        assert len(everyone.json()) == 3

        owners = await client.get("/api/v1/admin/users", params={"role": "owner"}, headers=admin_headers)
        assert [u["id"] for u in owners.json()] == [str(test_owner.id)]
        assert owners.json()[0]["full_name"] == "Owen Owner"

        by_name = await client.get("/api/v1/admin/users", params={"search": "ani"}, headers=admin_headers)
        assert [u["id"] for u in by_name.json()] == [str(test_player.id)]

    @pytest.mark.asyncio
    async def test_change_role(self, client: AsyncClient, admin_headers, test_player: User):
        response = await client.patch(
            f"/api/v1/admin/users/{test_player.id}/role",
            json={"role": "owner"},
            headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["role"] == "owner"
        assert response.json()["full_name"] == "Ani Player"

    @pytest.mark.asyncio
    async def test_admin_cannot_demote_self(self, client: AsyncClient, admin_headers, test_admin: User):
        response = await client.patch(
            f"/api/v1/admin/users/{test_admin.id}/role",
            json={"role": "player"},
            headers=admin_headers
        )
        assert response.status_code == 422
        assert "role" in response.json()["error"]["details"]["fields"]

    @pytest.mark.asyncio
    async def test_deactivated_user_is_locked_out(
        self, client: AsyncClient, admin_headers, test_player: User, player_headers
    ):
        response = await client.patch(
            f"/api/v1/admin/users/{test_player.id}/active",
            json={"is_active": False},
            headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        me = await client.get("/api/v1/auth/me", headers=player_headers)
        assert me.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_admin_cannot_deactivate_self(self, client: AsyncClient, admin_headers, test_admin: User):
        response = await client.patch(
            f"/api/v1/admin/users/{test_admin.id}/active",
            json={"is_active": False},
            headers=admin_headers
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_user(self, client: AsyncClient, admin_headers):
        response = await client.patch(
            "/api/v1/admin/users/00000000-0000-0000-0000-000000000000/role",
            json={"role": "owner"},
            headers=admin_headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_venue_moderation(self, client: AsyncClient, admin_headers, test_venue: Venue):
        response = await client.patch(
            f"/api/v1/admin/venues/{test_venue.id}/active",
            json={"is_active": False},
            headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        everything = await client.get("/api/v1/admin/venues", headers=admin_headers)
        assert len(everything.json()) == 1

        active_only = await client.get("/api/v1/admin/venues", params={"include_inactive": False}, headers=admin_headers)
        assert active_only.json() == []


@pytest.mark.integration
class TestDashboards:
    """Player and owner dashboards"""

    @pytest.mark.asyncio
    async def test_player_dashboard(self, client: AsyncClient, player_headers, test_venue: Venue):
        await client.post("/api/v1/bookings/checkout", json=_checkout(test_venue), headers=player_headers)

        response = await client.get("/api/v1/dashboard/player", headers=player_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total_bookings"] == 1
        assert len(data["upcoming_bookings"]) == 1
        assert data["games_joined"] == 0

    @pytest.mark.asyncio
    async def test_owner_dashboard_revenue(
        self, client: AsyncClient, player_headers, owner_headers, test_venue: Venue
    ):
        await client.post("/api/v1/bookings/checkout", json=_checkout(test_venue, "10:00"), headers=player_headers)
        await client.post(
            "/api/v1/bookings/manual",
            json={**_checkout(test_venue, "11:00"), "customer_name": "Walk-in"},
            headers=owner_headers
        )

        response = await client.get("/api/v1/dashboard/owner", headers=owner_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["venue_count"] == 1
        assert data["confirmed_bookings"] == 2
        assert float(data["revenue"]) == 80
        assert data["formatted_revenue"] == "֏80"
        assert data["average_rating"] is None
        assert len(data["upcoming_bookings"]) == 2

    @pytest.mark.asyncio
    async def test_player_cannot_open_owner_dashboard(self, client: AsyncClient, player_headers):
        response = await client.get("/api/v1/dashboard/owner", headers=player_headers)
        assert response.status_code == 403


@pytest.mark.integration
class TestNavigationAPI:
    """Route resolution for the signed-in user"""

    @pytest.mark.asyncio
    async def test_anonymous_redirected_to_login(self, client: AsyncClient):
        response = await client.get("/api/v1/navigation/resolve", params={"path": "/owner/bookings"})
        assert response.status_code == 200
        data = response.json()
        assert data["action"] == "redirect"
        assert data["redirect_to"] == "/login"
        assert data["from_path"] == "/owner/bookings"

    @pytest.mark.asyncio
    async def test_owner_renders_owner_page(self, client: AsyncClient, owner_headers):
        response = await client.get(
            "/api/v1/navigation/resolve",
            params={"path": "/venue/42/edit"},
            headers=owner_headers
        )
        data = response.json()
        assert data["action"] == "render"
        assert data["page"] == "EditVenuePage"
        assert data["params"] == {"id": "42"}

    @pytest.mark.asyncio
    async def test_unknown_path(self, client: AsyncClient):
        response = await client.get("/api/v1/navigation/resolve", params={"path": "/nowhere"})
        assert response.json()["action"] == "not_found"


@pytest.mark.integration
class TestServiceEndpoints:
    """Root, liveness and error envelopes"""

    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json()["environment"] == "testing"
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client: AsyncClient):
        response = await client.get("/", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    @pytest.mark.asyncio
    async def test_liveness(self, client: AsyncClient):
        response = await client.get("/api/v1/health/live")
        assert response.json() == {"status": "alive", "service": "sportsbnb-api"}

    @pytest.mark.asyncio
    async def test_unknown_route_envelope(self, client: AsyncClient):
        response = await client.get("/api/v1/does-not-exist")
        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "NOT_FOUND"
