from fastapi import APIRouter, WebSocket, WebSocketDisconnect
import logging

from daycare_api.dependencies import decode_caller
from daycare_api.ws import manager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/notificationHub")
async def notification_hub(websocket: WebSocket):
    """Push channel for message events. Token comes in the ``access_token`` query parameter."""
    await websocket.accept()
    token = websocket.query_params.get("access_token")
    if not token:
        await websocket.close(code=1008)
        return

    try:
        caller = decode_caller(token)
    except ValueError:
        await websocket.close(code=1008)
        return

    user_id = str(caller.id)
    await manager.connect(user_id, websocket)

    try:
        while True:
            # Clients only listen; anything they send is ignored
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("Notification socket for %s failed", user_id)
    finally:
        await manager.disconnect(user_id, websocket)
