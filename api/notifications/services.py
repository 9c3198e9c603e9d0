"""
Web-push subscription storage and offer broadcasts.
"""
import asyncio
import hashlib
import json
import os
from typing import List, Optional

from fastapi import HTTPException
from firebase_admin import firestore
from pywebpush import webpush, WebPushException

from api.notifications.schemas import (
    PushSubscriptionCreate, PushSubscriptionInDB, PushMessage, BroadcastResult,
)

SUBSCRIPTIONS_COLLECTION = 'pushSubscriptions'
# Push services answer these for subscriptions that no longer exist
GONE_STATUS_CODES = (404, 410)
NO_SUBSCRIBERS_MESSAGE = "Nenhum dispositivo inscrito."

VAPID_PUBLIC_KEY = os.getenv(
    "VAPID_PUBLIC_KEY",
    "BJAwxHs45rDjqTvNLQxPekSBPzS9N3_1gTCTvIk5-sXqHZCO7-lGNrdeWwu0MBbphhDUV5iBiF0dzHUo8yB3qiE"
)
VAPID_CLAIMS_EMAIL = os.getenv("VAPID_CLAIMS_EMAIL", "contato@bvcelular.com.br")


def get_firestore_client():
    return firestore.client()


def get_vapid_private_key() -> str:
    private_key = os.getenv("VAPID_PRIVATE_KEY")
    if not private_key:
        raise HTTPException(
            status_code=500,
            detail="VAPID_PRIVATE_KEY environment variable is not set"
        )
    return private_key


def subscription_id(endpoint: str) -> str:
    """One document per push endpoint."""
    return hashlib.sha256(endpoint.encode("utf-8")).hexdigest()


def _to_subscription(doc_id: str, data: dict) -> PushSubscriptionInDB:
    subscription_data = dict(data or {})
    subscription_data['id'] = doc_id
    return PushSubscriptionInDB(**subscription_data)


async def subscribe(subscription: PushSubscriptionCreate, user_id: Optional[str] = None) -> PushSubscriptionInDB:
    """
    Store a browser subscription. Registering an endpoint twice returns the
    stored record untouched.

    Args:
        subscription: The browser subscription
        user_id: The signed-in user, if any; wins over the body's userId

    Returns:
        The stored subscription
    """
    try:
        db = get_firestore_client()
        doc_ref = db.collection(SUBSCRIPTIONS_COLLECTION).document(subscription_id(subscription.endpoint))
        existing = doc_ref.get()

        if existing.exists:
            print("DEBUG: Push subscription already registered")
            return _to_subscription(existing.id, existing.to_dict())

        doc_ref.set({
            'userId': user_id or subscription.userId,
            'endpoint': subscription.endpoint,
            'p256dh': subscription.keys.p256dh,
            'auth': subscription.keys.auth,
            'createdAt': firestore.firestore.SERVER_TIMESTAMP
        })
        return _to_subscription(doc_ref.id, doc_ref.get().to_dict())

    except Exception as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(exc)}"
        )


async def unsubscribe(endpoint: str) -> bool:
    """Forget a subscription. Returns False when it was not stored."""
    try:
        db = get_firestore_client()
        doc_ref = db.collection(SUBSCRIPTIONS_COLLECTION).document(subscription_id(endpoint))
        if not doc_ref.get().exists:
            return False
        doc_ref.delete()
        return True

    except Exception as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(exc)}"
        )


def list_subscriptions(db) -> List[PushSubscriptionInDB]:
    return [_to_subscription(doc.id, doc.to_dict()) for doc in db.collection(SUBSCRIPTIONS_COLLECTION).stream()]


def send_push(subscription: PushSubscriptionInDB, data: str, private_key: str):
    """Deliver one push. Raises WebPushException on rejection."""
    webpush(
        subscription_info=subscription.to_webpush_info(),
        data=data,
        vapid_private_key=private_key,
        vapid_claims={"sub": f"mailto:{VAPID_CLAIMS_EMAIL}"}
    )


async def broadcast(message: PushMessage) -> BroadcastResult:
    """
    Send a message to every stored subscription at once.

    Each delivery is attempted once. Subscriptions the push service reports
    as gone are deleted so they are not tried again.

    Returns:
        BroadcastResult with the success/failure counts
    """
    private_key = get_vapid_private_key()

    try:
        db = get_firestore_client()
        subscriptions = list_subscriptions(db)
    except Exception as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(exc)}"
        )

    if not subscriptions:
        return BroadcastResult(message=NO_SUBSCRIBERS_MESSAGE)

    data = json.dumps(message.model_dump(exclude_none=True))

    async def deliver(subscription: PushSubscriptionInDB):
        try:
            await asyncio.to_thread(send_push, subscription, data, private_key)
            return True, False
        except WebPushException as e:
            status_code = e.response.status_code if e.response is not None else None
            print(f"Warning: Push to {subscription.id} failed with status {status_code}")
            if status_code in GONE_STATUS_CODES:
                print(f"DEBUG: Removing expired push subscription {subscription.id}")
                await asyncio.to_thread(db.collection(SUBSCRIPTIONS_COLLECTION).document(subscription.id).delete)
                return False, True
            return False, False
        except Exception as e:
            print(f"Warning: Push to {subscription.id} failed: {str(e)}")
            return False, False

    outcomes = await asyncio.gather(*(deliver(subscription) for subscription in subscriptions))

    success_count = sum(1 for sent, _ in outcomes if sent)
    return BroadcastResult(
        successCount=success_count,
        failureCount=len(outcomes) - success_count,
        total=len(subscriptions),
        removed=sum(1 for _, removed in outcomes if removed)
    )
