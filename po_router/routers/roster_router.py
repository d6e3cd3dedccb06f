from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from po_router.core.errors import RosterConflictError
from po_router.core.schemas import TeamMember
from po_router.core.security import verify_admin_api_key
from po_router.services.roster_service import RosterService


def build_roster_router(roster_service: RosterService, default_page_size: int = 50) -> APIRouter:
    router = APIRouter(prefix="", tags=["roster"], dependencies=[Depends(verify_admin_api_key)])

    @router.get("/roster", response_model=list[TeamMember])
    def get_roster() -> list[TeamMember]:
        return roster_service.list_roster()

    @router.put("/roster", response_model=list[TeamMember])
    def put_roster(members: list[TeamMember] = Body(...)) -> list[TeamMember]:
        try:
            return roster_service.replace_roster(members)
        except RosterConflictError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    @router.get("/decisions")
    def get_decisions(
        limit: int = Query(default=default_page_size, ge=1, le=500),
        offset: int = Query(default=0, ge=0),
    ) -> dict:
        items = roster_service.recent_decisions(limit=limit, offset=offset)
        return {
            "count": len(items),
            "limit": limit,
            "offset": offset,
            "items": items,
        }

    return router
