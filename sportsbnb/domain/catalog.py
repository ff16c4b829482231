"""
Fixed catalogues shared by forms and listings
"""

SPORT_TYPES = [
    "Football",
    "Basketball",
    "Tennis",
    "Swimming",
    "Volleyball",
    "Badminton",
    "Cricket",
    "Golf",
    "Boxing",
    "Yoga",
    "Gym",
    "Table Tennis",
    "Squash",
    "Hockey",
    "Baseball",
    "Rugby",
    "Martial Arts",
    "Dance",
    "Climbing",
    "Cycling",
]

SKILL_LEVELS = ["beginner", "intermediate", "advanced", "all"]

# Owner price bands used by the venue price filter
PRICE_BANDS = {
    "low": (None, 40),
    "medium": (40, 55),
    "high": (55, None),
}

DEFAULT_VENUE_IMAGES = {
    "Football": "https://images.unsplash.com/photo-1574629810360-7efbbe195018?w=800&h=600&fit=crop",
    "Basketball": "https://images.unsplash.com/photo-1546519638-68e109498ffc?w=800&h=600&fit=crop",
    "Tennis": "https://images.unsplash.com/photo-1558618666-fcd25c85cd64?w=800&h=600&fit=crop",
    "Swimming": "https://images.unsplash.com/photo-1576013551627-0cc20b96c2a7?w=800&h=600&fit=crop",
    "Volleyball": "https://images.unsplash.com/photo-1593079831268-3381b0db4a77?w=800&h=600&fit=crop",
    "Badminton": "https://images.unsplash.com/photo-1575361204480-aadea25e6e68?w=800&h=600&fit=crop",
    "Rugby": "https://images.unsplash.com/photo-1508098682722-e99c43a406b2?w=800&h=600&fit=crop",
    "Gym": "https://images.unsplash.com/photo-1534438327276-14e5300c3a48?w=800&h=600&fit=crop",
}
FALLBACK_VENUE_IMAGE = "https://images.unsplash.com/photo-1571902943202-507ec2618e8f?w=800&h=600&fit=crop"


def venue_image(image_url, sports) -> str:
    """Uploaded image, else a stock photo for the venue's primary sport"""
    if image_url:
        return image_url
    primary = sports[0] if sports else None
    return DEFAULT_VENUE_IMAGES.get(primary, FALLBACK_VENUE_IMAGE)


def in_price_band(price, band: str) -> bool:
    if band not in PRICE_BANDS:
        raise ValueError(f"Unknown price band: {band}")
    low, high = PRICE_BANDS[band]
    if low is not None and price < low:
        return False
    if high is not None and price >= high:
        return False
    return True
