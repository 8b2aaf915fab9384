"""Browser tab snapshot API endpoints"""

from fastapi import APIRouter, HTTPException
from typing import List

import requests

from host import TabNotFoundError
from webui.models.schemas import OpenTabRequest, PlayLinkRequest, TabSchema
from webui.services.background_service import get_service

router = APIRouter(prefix="/api/tabs", tags=["tabs"])


def _to_schema(tab) -> TabSchema:
    host = get_service().host
    return TabSchema(id=tab.id, url=tab.url, title=tab.title, detector_installed=host.has_detector(tab.id))


@router.get("", response_model=List[TabSchema])
async def list_tabs():
    """List open tabs"""
    tabs = await get_service().host.query_tabs()
    return [_to_schema(tab) for tab in tabs]


@router.post("", response_model=TabSchema)
def open_tab(request: OpenTabRequest):
    """Open a tab from a page snapshot (fetched when no HTML is given)"""
    try:
        tab = get_service().host.open_tab(
            request.url,
            html=request.html,
            title=request.title,
            referrer=request.referrer,
            detector_installed=request.detector_installed
        )
    except requests.RequestException as e:
        raise HTTPException(status_code=502, detail=f"Failed to fetch page: {str(e)}")
    return _to_schema(tab)


@router.delete("/{tab_id}")
async def close_tab(tab_id: int):
    """Close a tab"""
    if not get_service().host.close_tab(tab_id):
        raise HTTPException(status_code=404, detail="Tab not found")
    return {"success": True}


@router.post("/{tab_id}/play", response_model=TabSchema)
async def play_link(tab_id: int, request: PlayLinkRequest):
    """Open a link from a tab in the player ("Play in StreamWatch" context menu)"""
    service = get_service()
    try:
        source_tab = await service.host.get_tab(tab_id)
    except TabNotFoundError:
        raise HTTPException(status_code=404, detail="Tab not found")
    player_tab = await service.background.open_in_player(request.link_url, source_tab)
    return _to_schema(player_tab)
