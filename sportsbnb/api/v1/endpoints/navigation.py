"""
Client route resolution
"""

from typing import Any, Optional
from fastapi import APIRouter, Depends, Query

from sportsbnb.core.security import get_optional_user
from sportsbnb.domain.navigation import resolve_route
from sportsbnb.models.user import User
from sportsbnb.schemas.navigation import RouteResolutionResponse

router = APIRouter()


@router.get("/resolve", response_model=RouteResolutionResponse)
async def resolve(
    path: str = Query(..., min_length=1),
    current_user: Optional[User] = Depends(get_optional_user)
) -> Any:
    """
    Tell the client whether to render, redirect or show the not-found page
    """
    role = current_user.role.value if current_user else None
    resolution = resolve_route(path, role)
    return {
        "path": path,
        "action": resolution.action,
        "page": resolution.page,
        "redirect_to": resolution.redirect_to,
        "from_path": resolution.from_path,
        "params": resolution.params,
    }
