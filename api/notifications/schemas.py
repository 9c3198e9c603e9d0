"""
This module defines the Pydantic models used for web-push notifications.
"""

from typing import Optional, List

from pydantic import BaseModel, Field

from api.common.schemas import TimestampMixin, JSendResponse


class PushSubscriptionKeys(BaseModel):
    p256dh: str = Field(..., min_length=1)
    auth: str = Field(..., min_length=1)


class PushSubscriptionCreate(BaseModel):
    """
    A browser PushSubscription as serialized by `subscription.toJSON()`,
    optionally tied to a signed-in user.
    """
    endpoint: str = Field(..., min_length=1)
    keys: PushSubscriptionKeys
    userId: Optional[str] = None


class PushSubscriptionInDB(BaseModel, TimestampMixin):
    """
    Represents a stored subscription.
    """
    id: str
    userId: Optional[str] = None
    endpoint: str
    p256dh: str
    auth: str

    def to_webpush_info(self) -> dict:
        """The subscription_info shape the web-push sender expects."""
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}


class PushMessage(BaseModel):
    """
    What an employee sends out. Everything is optional; the device shows defaults.
    """
    title: Optional[str] = None
    body: Optional[str] = None
    image: Optional[str] = None
    url: Optional[str] = None


class NotificationAction(BaseModel):
    action: str
    title: str


class NotificationData(BaseModel):
    url: str = "/"


class NotificationOptions(BaseModel):
    body: str
    icon: str
    badge: str
    image: Optional[str] = None
    data: NotificationData
    actions: List[NotificationAction] = []


class NotificationDisplay(BaseModel):
    """
    What a device shows for a push: the title plus the showNotification options.
    """
    title: str
    options: NotificationOptions


class BroadcastResult(BaseModel):
    success: bool = True
    successCount: int = 0
    failureCount: int = 0
    total: int = 0
    removed: int = 0
    message: Optional[str] = None


class VapidKeyData(BaseModel):
    publicKey: str


class PushSubscriptionResponse(JSendResponse[PushSubscriptionInDB]):
    """Response model for subscription registration."""
    pass


class BroadcastResponse(JSendResponse[BroadcastResult]):
    """Response model for a broadcast."""
    pass
