import asyncio
import contextlib
import logging
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.notifications.schemas import NotificationResponse, UnreadCountResponse, AdminNotification
from app.modules.notifications.service import NotificationService
from app.modules.auth.service import AuthService
from app.core.dependencies import get_optional_user, require_admin
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


def get_notification_service(supabase: Client = Depends(get_supabase)) -> NotificationService:
    return NotificationService(supabase)


def get_admin_notification_service(supabase: Client = Depends(get_service_supabase)) -> NotificationService:
    return NotificationService(supabase)


def _user_id(user_data: Optional[Dict]) -> Optional[str]:
    return user_data["id"] if user_data else None


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    limit: int = 50,
    offset: int = 0,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: NotificationService = Depends(get_notification_service)
):
    """Active and read notifications of the current user (empty when signed out)"""
    return service.get_active_notifications(_user_id(user_data), limit=limit, offset=offset)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: NotificationService = Depends(get_notification_service)
):
    return UnreadCountResponse(count=service.get_unread_count(_user_id(user_data)))


@router.post("/{notification_id}/read", status_code=204)
async def mark_as_read(
    notification_id: str,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: NotificationService = Depends(get_notification_service)
):
    service.mark_as_read(_user_id(user_data), notification_id)
    return None


@router.post("/{notification_id}/archive", status_code=204)
async def archive_notification(
    notification_id: str,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: NotificationService = Depends(get_notification_service)
):
    service.archive_notification(_user_id(user_data), notification_id)
    return None


@router.post("/admin/send", status_code=201)
async def send_admin_notification(
    payload: AdminNotification,
    debug: bool = False,
    admin: Dict = Depends(require_admin),
    service: NotificationService = Depends(get_admin_notification_service)
):
    """Broadcast when no recipient_email is given, otherwise send to that user"""
    if payload.recipient_email is None:
        service.send_broadcast_notification(admin["id"], payload)
        return {"message": "Broadcast message sent to all users"}

    service.send_user_notification(admin["id"], payload)
    response = {"message": "Message sent to user"}
    if debug:
        last = service.debug_last_notification(payload.recipient_email)
        response["last_notification"] = last
        if last and last[0].get("notification_user_id"):
            response["access"] = service.debug_notification_access(last[0]["notification_user_id"])
    return response


@router.websocket("/stream")
async def notification_stream(websocket: WebSocket, supabase: Client = Depends(get_supabase)):
    """Push insert/update/delete events on the caller's notifications"""
    await websocket.accept()
    token = websocket.query_params.get("token")
    auth_header = websocket.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.removeprefix("Bearer ").strip()

    user_data = AuthService(supabase).get_optional_user(token)
    if not user_data:
        logger.warning("Notification stream rejected: no authenticated user")
        await websocket.close(code=1008)
        return

    subscription = await NotificationService(supabase).subscribe_to_notifications(user_data["id"])

    async def forward():
        async for event in subscription:
            await websocket.send_json(event.to_dict())

    forward_task = asyncio.create_task(forward())
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"Notification stream closed for {user_data['id']}")
    finally:
        forward_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            try:
                await forward_task
            except Exception as e:
                logger.warning(f"Notification stream for {user_data['id']} stopped forwarding: {e}")
        await subscription.cancel()
