"""
Main API Router
Aggregates all API endpoints for v1
"""

from fastapi import APIRouter
from sportsbnb.api.v1.endpoints import (
    auth,
    profiles,
    venues,
    bookings,
    games,
    reviews,
    notifications,
    dashboard,
    admin,
    navigation,
    health
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(profiles.router, prefix="/profiles", tags=["Profiles"])
api_router.include_router(venues.router, prefix="/venues", tags=["Venues"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])
api_router.include_router(games.router, prefix="/games", tags=["Games"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["Reviews"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(navigation.router, prefix="/navigation", tags=["Navigation"])
api_router.include_router(health.router, prefix="/health", tags=["Health"])
