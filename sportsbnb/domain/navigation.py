"""
Client route table and access guards.

The single-page client asks the API how to handle a path for the current
user: render the page, follow a redirect, or show the not-found page.
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional


class Guard(str, enum.Enum):
    PUBLIC = "public"
    AUTH = "auth"
    OWNER = "owner"
    ADMIN = "admin"


class RouteAction(str, enum.Enum):
    RENDER = "render"
    REDIRECT = "redirect"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Route:
    path: str
    page: str
    guard: Guard = Guard.PUBLIC

    @property
    def segments(self) -> List[str]:
        return _split(self.path)

    def match(self, path: str) -> Optional[Dict[str, str]]:
        parts = _split(path)
        pattern = self.segments
        if len(parts) != len(pattern):
            return None
        params: Dict[str, str] = {}
        for expected, actual in zip(pattern, parts):
            if expected.startswith(":"):
                params[expected[1:]] = actual
            elif expected != actual:
                return None
        return params


@dataclass
class RouteResolution:
    action: RouteAction
    page: Optional[str] = None
    redirect_to: Optional[str] = None
    from_path: Optional[str] = None
    params: Dict[str, str] = field(default_factory=dict)


LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"

REDIRECTS: Dict[str, str] = {
    "/discover": "/venues",
    "/settings": "/profile",
    "/list-venue": "/onboarding/owner",
    "/owner-dashboard": "/owner",
}

ROUTES: List[Route] = [
    # Public pages
    Route("/", "HomePage"),
    Route("/venues", "DiscoverPage"),
    Route("/venue/:id", "VenueDetailsPage"),
    Route("/games", "GamesPage"),
    Route("/game/:id", "GameDetailsPage"),
    Route("/community", "CommunityPage"),
    Route("/teams", "TeamsPage"),
    Route("/team/:id", "TeamDetailsPage"),
    Route("/about", "AboutPage"),
    Route("/contact", "ContactPage"),
    Route("/faq", "FAQPage"),
    Route("/privacy", "PrivacyPolicyPage"),
    Route("/terms", "TermsOfServicePage"),
    Route("/cookies", "CookiePolicyPage"),
    Route("/install", "InstallPage"),
    Route("/embed/:venueId", "EmbedBookingPage"),
    Route("/login", "LoginPage"),
    Route("/signup", "SignupPage"),
    Route("/forgot-password", "ForgotPasswordPage"),
    Route("/reset-password", "ResetPasswordPage"),
    Route("/auth/callback", "AuthCallbackPage"),
    # Signed-in players
    Route("/dashboard", "PlayerDashboard", Guard.AUTH),
    Route("/profile", "ProfilePage", Guard.AUTH),
    Route("/messages", "MessagesPage", Guard.AUTH),
    Route("/create-game", "CreateGamePage", Guard.AUTH),
    Route("/create-team", "CreateTeamPage", Guard.AUTH),
    Route("/join-team/:code", "JoinTeamPage", Guard.AUTH),
    Route("/booking-success", "BookingSuccessPage", Guard.AUTH),
    Route("/game-join-success", "GameJoinSuccessPage", Guard.AUTH),
    Route("/onboarding/player", "PlayerOnboarding", Guard.AUTH),
    Route("/onboarding/owner", "OwnerOnboarding", Guard.AUTH),
    # Venue owners
    Route("/owner", "OwnerOverviewPage", Guard.OWNER),
    Route("/owner/venues", "OwnerVenuesPage", Guard.OWNER),
    Route("/owner/bookings", "OwnerBookingsPage", Guard.OWNER),
    Route("/owner/schedule", "OwnerSchedulePage", Guard.OWNER),
    Route("/owner/hours", "OwnerHoursPage", Guard.OWNER),
    Route("/owner/pricing", "OwnerPricingPage", Guard.OWNER),
    Route("/owner/settings", "OwnerSettingsPage", Guard.OWNER),
    Route("/add-venue", "AddVenuePage", Guard.OWNER),
    Route("/my-venues", "MyVenuesPage", Guard.OWNER),
    Route("/venue/:id/edit", "EditVenuePage", Guard.OWNER),
    Route("/venue/:id/availability", "VenueAvailabilityPage", Guard.OWNER),
    # Platform administration
    Route("/admin", "AdminDashboard", Guard.ADMIN),
    Route("/dev-tools", "DevToolsPage", Guard.ADMIN),
]


def _split(path: str) -> List[str]:
    path = path.split("?", 1)[0].split("#", 1)[0]
    return [part for part in path.strip("/").split("/") if part]


def _normalize(path: str) -> str:
    return "/" + "/".join(_split(path))


def find_route(path: str) -> Optional[tuple]:
    for route in ROUTES:
        params = route.match(path)
        if params is not None:
            return route, params
    return None


def is_allowed(guard: Guard, role: Optional[str]) -> bool:
    if guard == Guard.PUBLIC:
        return True
    if role is None:
        return False
    if guard == Guard.AUTH:
        return True
    if guard == Guard.OWNER:
        return role in ("owner", "admin")
    return role == "admin"


def resolve_route(path: str, role: Optional[str] = None) -> RouteResolution:
    """
    Decide what the client should do with ``path``.

    ``role`` is the signed-in user's role, or None for anonymous visitors.
    Anonymous visitors on a guarded page go to the login page, which sends
    them back afterwards; signed-in users without the right role go to
    their dashboard.
    """
    normalized = _normalize(path)
    if normalized in REDIRECTS:
        return RouteResolution(RouteAction.REDIRECT, redirect_to=REDIRECTS[normalized])

    found = find_route(normalized)
    if found is None:
        return RouteResolution(RouteAction.NOT_FOUND, page="NotFound")

    route, params = found
    if is_allowed(route.guard, role):
        return RouteResolution(RouteAction.RENDER, page=route.page, params=params)
    if role is None:
        return RouteResolution(RouteAction.REDIRECT, redirect_to=LOGIN_PATH, from_path=normalized)
    return RouteResolution(RouteAction.REDIRECT, redirect_to=DASHBOARD_PATH)
