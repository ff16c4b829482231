"""
Client navigation schemas
"""

from typing import Dict, Optional

from sportsbnb.domain.navigation import RouteAction
from sportsbnb.schemas.base import BaseSchema


class RouteResolutionResponse(BaseSchema):
    path: str
    action: RouteAction
    page: Optional[str] = None
    redirect_to: Optional[str] = None
    from_path: Optional[str] = None
    params: Dict[str, str] = {}
