"""
Client side of offer notifications: registers a browser subscription with
the API and tells the user how it went.
"""
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from api.common.client import API_BASE_URL, HTTP_TIMEOUT, ApiError, unwrap_jsend

SUBSCRIPTIONS_PATH = "/api/notifications/subscriptions"

SUCCESS_TITLE = "Notificações Ativadas!"
SUCCESS_DESCRIPTION = "Você receberá ofertas em primeira mão."
ERROR_TITLE = "Erro"
ERROR_DESCRIPTION = "Não foi possível ativar as notificações."


class SubscribeOutcome(BaseModel):
    """The toast shown after a subscription attempt."""
    ok: bool
    title: str
    description: str
    subscription: Optional[Dict[str, Any]] = None


class PushSubscriber:
    """
    Keeps one browser session's subscription state.

    Once subscribed, further calls return success without another request.
    Failures come back as an error outcome, never as an exception.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: float = HTTP_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self.is_subscribed = False
        self.subscription: Optional[Dict[str, Any]] = None

    async def subscribe(self, browser_subscription: Dict[str, Any], user_id: Optional[str] = None,
                        token: Optional[str] = None) -> SubscribeOutcome:
        """
        Register the browser's PushSubscription JSON ({endpoint, keys}).

        Args:
            browser_subscription: The serialized subscription
            user_id: Signed-in user to attach, if any
            token: Bearer token of the signed-in user, if any
        """
        if self.is_subscribed:
            return self._success()

        body = dict(browser_subscription)
        if user_id:
            body["userId"] = user_id
        headers = {"Authorization": f"Bearer {token}"} if token else None

        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout,
                                         transport=self._transport) as client:
                resp = await client.post(SUBSCRIPTIONS_PATH, json=body, headers=headers)
            self.subscription = unwrap_jsend(resp)
        except (httpx.HTTPError, ApiError, ValueError) as e:
            print(f"Warning: Push subscription failed: {str(e)}")
            return SubscribeOutcome(ok=False, title=ERROR_TITLE, description=ERROR_DESCRIPTION)

        self.is_subscribed = True
        return self._success()

    def _success(self) -> SubscribeOutcome:
        return SubscribeOutcome(
            ok=True,
            title=SUCCESS_TITLE,
            description=SUCCESS_DESCRIPTION,
            subscription=self.subscription
        )
