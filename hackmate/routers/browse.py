from fastapi import APIRouter, Depends, Query

from hackmate.gateway import Gateway
from hackmate.routers.dependencies import get_gateway
from hackmate.schemas.browse import BrowseResponse
from hackmate.services.browse_view import BrowseView


router = APIRouter(prefix="/browse", tags=["browse"])


@router.get("", response_model=BrowseResponse, summary="Filtered teammate directory")
async def browse_profiles(
    q: str = Query(default="", description="Matches username, full name or bio"),
    skill: list[str] = Query(default=[], description="Required skill ids (all must match)"),
    category: str | None = Query(default=None),
    gateway: Gateway = Depends(get_gateway),
) -> BrowseResponse:
    view = BrowseView(gateway)
    await view.mount()
    view.set_search(q)
    view.select_skills(skill)
    view.set_category(category)
    return view.snapshot()
