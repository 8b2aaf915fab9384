"""Extension message API endpoint"""

from fastapi import APIRouter, HTTPException
from typing import Any, Dict

from host import TabNotFoundError
from webui.models.schemas import MessageRequest
from webui.services.background_service import get_service
import logging

router = APIRouter(prefix="/api/messages", tags=["messages"])
logger = logging.getLogger(__name__)


@router.post("")
async def send_message(request: MessageRequest) -> Dict[str, Any]:
    """Deliver a message to the background service and return its response"""
    service = get_service()

    sender_tab = None
    if request.sender_tab_id is not None:
        try:
            sender_tab = await service.host.get_tab(request.sender_tab_id)
        except TabNotFoundError:
            raise HTTPException(status_code=404, detail=f"Sender tab {request.sender_tab_id} not found")

    try:
        message = {'type': request.type, 'payload': request.payload or {}}
        return await service.background.handle_message(message, sender_tab)
    except Exception as e:
        logger.error(f"Error handling message {request.type}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to handle message: {str(e)}")
