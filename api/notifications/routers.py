from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from starlette import status

from api.auth.dependencies import get_optional_user_id, get_current_employee
from api.common.schemas import JSendResponse
from api.employees.schemas import EmployeeInDB
from api.notifications.display import build_notification
from api.notifications.schemas import (
    PushSubscriptionCreate, PushMessage, PushSubscriptionResponse, BroadcastResponse,
    NotificationDisplay, VapidKeyData,
)
from api.notifications.services import subscribe, unsubscribe, broadcast, VAPID_PUBLIC_KEY

router = APIRouter()


@router.get("/vapid-public-key", response_model=JSendResponse[VapidKeyData])
async def get_vapid_public_key():
    """
    The application server key browsers need to subscribe.
    """
    return JSendResponse.success(VapidKeyData(publicKey=VAPID_PUBLIC_KEY))


@router.post("/subscriptions", response_model=PushSubscriptionResponse)
async def create_subscription(
    subscription: PushSubscriptionCreate,
    user_id: Optional[str] = Depends(get_optional_user_id)
):
    """
    Register this browser for offer notifications. Visitors may subscribe too.
    """
    try:
        result = await subscribe(subscription, user_id)
        return PushSubscriptionResponse.success(result)
    except HTTPException as e:
        return PushSubscriptionResponse.error(message=str(e.detail), code=e.status_code)
    except Exception as e:
        return PushSubscriptionResponse.error(message=str(e), code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.delete("/subscriptions", response_model=JSendResponse[dict])
async def delete_subscription(
    endpoint: str = Query(..., description="The push endpoint to forget")
):
    try:
        removed = await unsubscribe(endpoint)
        if not removed:
            return JSendResponse.error(message="Subscription not found", code=status.HTTP_404_NOT_FOUND)
        return JSendResponse.success({"message": "Subscription removed"})
    except HTTPException as e:
        return JSendResponse.error(message=str(e.detail), code=e.status_code)
    except Exception as e:
        return JSendResponse.error(message=str(e), code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.post("/preview", response_model=JSendResponse[NotificationDisplay])
async def preview_notification(
    message: PushMessage,
    employee: EmployeeInDB = Depends(get_current_employee)
):
    """
    Show how devices will render a message before sending it.
    """
    return JSendResponse.success(build_notification(message.model_dump()))


@router.post("/send", response_model=BroadcastResponse)
async def send_notification(
    message: PushMessage,
    employee: EmployeeInDB = Depends(get_current_employee)
):
    """
    Broadcast an offer to every subscribed device.
    """
    try:
        print(f"DEBUG: Employee {employee.id} is broadcasting a push notification")
        result = await broadcast(message)
        return BroadcastResponse.success(result)
    except HTTPException as e:
        return BroadcastResponse.error(message=str(e.detail), code=e.status_code)
    except Exception as e:
        return BroadcastResponse.error(message=str(e), code=status.HTTP_500_INTERNAL_SERVER_ERROR)
