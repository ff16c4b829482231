"""
Tests for reviews and in-app notifications
"""

import pytest
from httpx import AsyncClient

from sportsbnb.models.user import User
from sportsbnb.models.venue import Venue
from sportsbnb.services.notification_service import notification_service


async def _review(client: AsyncClient, headers, venue: Venue, rating: int, comment: str = None):
    return await client.post(
        "/api/v1/reviews/",
        json={"venue_id": str(venue.id), "rating": rating, "comment": comment},
        headers=headers
    )


@pytest.mark.integration
class TestReviews:
    """Reviews and the venue rating they roll up into"""

    @pytest.mark.asyncio
    async def test_create_review_updates_rating(
        self, client: AsyncClient, player_headers, other_player_headers, test_venue: Venue
    ):
        first = await _review(client, player_headers, test_venue, 5, "Great pitch")
        assert first.status_code == 201
        assert first.json()["rating"] == 5

        await _review(client, other_player_headers, test_venue, 4)

        venue = (await client.get(f"/api/v1/venues/{test_venue.id}")).json()
        assert venue["rating"] == 4.5
        assert venue["review_count"] == 2

    @pytest.mark.asyncio
    async def test_list_reviews_with_reviewer(self, client: AsyncClient, player_headers, test_venue: Venue):
        await _review(client, player_headers, test_venue, 3, "Decent lights")

        response = await client.get(f"/api/v1/reviews/venue/{test_venue.id}")
        assert response.status_code == 200
        reviews = response.json()
        assert len(reviews) == 1
        assert reviews[0]["reviewer_name"] == "Ani Player"
        assert reviews[0]["comment"] == "Decent lights"

    @pytest.mark.asyncio
    async def test_reviews_for_unknown_venue(self, client: AsyncClient):
        response = await client.get("/api/v1/reviews/venue/00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_one_review_per_venue(self, client: AsyncClient, player_headers, test_venue: Venue):
        await _review(client, player_headers, test_venue, 5)
        response = await _review(client, player_headers, test_venue, 1)
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_owner_cannot_review_own_venue(self, client: AsyncClient, owner_headers, test_venue: Venue):
        response = await _review(client, owner_headers, test_venue, 5)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_rating_bounds(self, client: AsyncClient, player_headers, test_venue: Venue):
        response = await _review(client, player_headers, test_venue, 6)
        assert response.status_code == 422
        assert "rating" in response.json()["error"]["details"]["fields"]

    @pytest.mark.asyncio
    async def test_update_and_delete(
        self, client: AsyncClient, player_headers, other_player_headers, test_venue: Venue
    ):
        review_id = (await _review(client, player_headers, test_venue, 2)).json()["id"]

        forbidden = await client.patch(f"/api/v1/reviews/{review_id}", json={"rating": 1}, headers=other_player_headers)
        assert forbidden.status_code == 403

        updated = await client.patch(f"/api/v1/reviews/{review_id}", json={"rating": 4}, headers=player_headers)
        assert updated.status_code == 200
        assert updated.json()["rating"] == 4
        assert (await client.get(f"/api/v1/venues/{test_venue.id}")).json()["rating"] == 4.0

        deleted = await client.delete(f"/api/v1/reviews/{review_id}", headers=player_headers)
        assert deleted.json()["message"] == "Review deleted"

        venue = (await client.get(f"/api/v1/venues/{test_venue.id}")).json()
        assert venue["rating"] == 0.0
        assert venue["review_count"] == 0

    @pytest.mark.asyncio
    async def test_owner_is_notified(
        self, client: AsyncClient, player_headers, owner_headers, test_venue: Venue
    ):
        await _review(client, player_headers, test_venue, 5)
        notifications = (await client.get("/api/v1/notifications/", headers=owner_headers)).json()
        assert notifications[0]["type"] == "review"
        assert notifications[0]["message"] == "Republic Arena received a 5-star review."


@pytest.mark.integration
class TestNotifications:
    """Reading and marking notifications"""

    async def _seed(self, db_session, user: User, count: int):
        for n in range(count):
            notification_service.notify(db_session, user.id, "system", f"Notice {n}", "Hello")
        await db_session.commit()

    @pytest.mark.asyncio
    async def test_list_and_count(self, client: AsyncClient, db_session, test_player: User, player_headers):
        await self._seed(db_session, test_player, 3)

        listing = await client.get("/api/v1/notifications/", headers=player_headers)
        assert len(listing.json()) == 3

        count = await client.get("/api/v1/notifications/unread-count", headers=player_headers)
        assert count.json() == {"unread": 3}

        limited = await client.get("/api/v1/notifications/", params={"limit": 2}, headers=player_headers)
        assert len(limited.json()) == 2

    @pytest.mark.asyncio
    async def test_mark_read(self, client: AsyncClient, db_session, test_player: User, player_headers):
        await self._seed(db_session, test_player, 2)
        notification_id = (await client.get("/api/v1/notifications/", headers=player_headers)).json()[0]["id"]

        response = await client.post(f"/api/v1/notifications/{notification_id}/read", headers=player_headers)
        assert response.status_code == 200
        assert response.json()["is_read"] is True

        unread = await client.get("/api/v1/notifications/", params={"unread": True}, headers=player_headers)
        assert len(unread.json()) == 1

    @pytest.mark.asyncio
    async def test_cannot_read_someone_elses_notification(
        self, client: AsyncClient, db_session, test_player: User, player_headers, other_player_headers
    ):
        await self._seed(db_session, test_player, 1)
        notification_id = (await client.get("/api/v1/notifications/", headers=player_headers)).json()[0]["id"]

        response = await client.post(f"/api/v1/notifications/{notification_id}/read", headers=other_player_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_mark_all_read(self, client: AsyncClient, db_session, test_player: User, player_headers):
        await self._seed(db_session, test_player, 3)

        response = await client.post("/api/v1/notifications/read-all", headers=player_headers)
        assert response.json()["message"] == "Marked 3 notifications as read"

        count = await client.get("/api/v1/notifications/unread-count", headers=player_headers)
        assert count.json()["unread"] == 0
