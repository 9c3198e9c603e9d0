"""
Tests for push display, subscription storage, broadcasts and the client-side subscriber.
"""
import json
from unittest.mock import MagicMock, patch, AsyncMock

import httpx
import pytest
from fastapi import HTTPException
from pywebpush import WebPushException

from api.notifications.display import build_notification, resolve_click_url
from api.notifications.schemas import PushSubscriptionCreate, PushMessage, BroadcastResult
from api.notifications.services import subscribe, broadcast, subscription_id, NO_SUBSCRIBERS_MESSAGE
from api.notifications.subscriber import PushSubscriber, ERROR_DESCRIPTION, SUCCESS_TITLE
from conftest import make_doc

BROWSER_SUBSCRIPTION = {
    "endpoint": "https://fcm.googleapis.com/fcm/send/abc",
    "keys": {"p256dh": "BPUB", "auth": "AUTH"},
}


def stored_subscription(doc_id="sub1", endpoint="https://push.example/1"):
    return make_doc(doc_id, {"endpoint": endpoint, "p256dh": "BPUB", "auth": "AUTH", "userId": None})


class TestDisplay:

    def test_defaults(self):
        display = build_notification({})

        assert display.title == "BV Celular"
        assert display.options.body == "Nova oferta disponível!"
        assert display.options.data.url == "/"
        assert [a.model_dump() for a in display.options.actions] == [{"action": "open", "title": "Ver Oferta"}]
        assert display.options.image is None

    def test_payload_values_win(self):
        display = build_notification({
            "title": "Black Friday", "body": "iPhone com 20% off", "url": "/produto/p1", "image": "https://img/p1.jpg"
        })

        assert display.title == "Black Friday"
        assert display.options.body == "iPhone com 20% off"
        assert display.options.data.url == "/produto/p1"
        assert display.options.image == "https://img/p1.jpg"

    def test_no_payload(self):
        assert build_notification(None).title == "BV Celular"

    def test_click_url(self):
        assert resolve_click_url({"url": "/ofertas"}) == "/ofertas"
        assert resolve_click_url({}) == "/"
        assert resolve_click_url(None) == "/"


class TestSubscribe:

    @pytest.mark.asyncio
    async def test_new_subscription(self, mock_firestore):
        doc_ref = mock_firestore.collection.return_value.document.return_value
        doc_ref.id = "hash"
        doc_ref.get.side_effect = [
            make_doc("hash", None, exists=False),
            make_doc("hash", {"endpoint": BROWSER_SUBSCRIPTION["endpoint"], "p256dh": "BPUB", "auth": "AUTH",
                              "userId": "u1"}),
        ]

        result = await subscribe(PushSubscriptionCreate(**BROWSER_SUBSCRIPTION), user_id="u1")

        assert result.userId == "u1"
        written = doc_ref.set.call_args[0][0]
        assert written["p256dh"] == "BPUB"
        assert written["auth"] == "AUTH"
        mock_firestore.collection.return_value.document.assert_called_with(
            subscription_id(BROWSER_SUBSCRIPTION["endpoint"])
        )

    @pytest.mark.asyncio
    async def test_existing_endpoint_is_returned(self, mock_firestore):
        doc_ref = mock_firestore.collection.return_value.document.return_value
        doc_ref.get.return_value = make_doc("hash", {
            "endpoint": BROWSER_SUBSCRIPTION["endpoint"], "p256dh": "OLD", "auth": "OLD", "userId": None
        })

        result = await subscribe(PushSubscriptionCreate(**BROWSER_SUBSCRIPTION))

        assert result.p256dh == "OLD"
        doc_ref.set.assert_not_called()


class TestBroadcast:

    @pytest.mark.asyncio
    async def test_no_subscribers(self, mock_firestore, monkeypatch):
        monkeypatch.setenv("VAPID_PRIVATE_KEY", "private")
        mock_firestore.collection.return_value.stream.return_value = []

        result = await broadcast(PushMessage(title="Oferta"))

        assert result.successCount == 0
        assert result.total == 0
        assert result.message == NO_SUBSCRIBERS_MESSAGE

    @pytest.mark.asyncio
    async def test_counts_and_prunes_gone_subscriptions(self, mock_firestore, monkeypatch):
        monkeypatch.setenv("VAPID_PRIVATE_KEY", "private")
        mock_firestore.collection.return_value.stream.return_value = [
            stored_subscription("ok", "https://push.example/ok"),
            stored_subscription("gone", "https://push.example/gone"),
            stored_subscription("flaky", "https://push.example/flaky"),
        ]

        def fake_send(subscription, data, private_key):
            assert json.loads(data) == {"title": "Oferta", "url": "/ofertas"}
            assert private_key == "private"
            if subscription.id == "gone":
                raise WebPushException("gone", response=MagicMock(status_code=410))
            if subscription.id == "flaky":
                raise WebPushException("server error", response=MagicMock(status_code=500))

        with patch('api.notifications.services.send_push', side_effect=fake_send):
            result = await broadcast(PushMessage(title="Oferta", url="/ofertas"))

        assert result.success is True
        assert result.successCount == 1
        assert result.failureCount == 2
        assert result.total == 3
        assert result.removed == 1
        mock_firestore.collection.return_value.document.assert_called_once_with("gone")
        mock_firestore.collection.return_value.document.return_value.delete.assert_called_once()

    @pytest.mark.asyncio
    async def test_pruning_runs_off_the_event_loop(self, mock_firestore, monkeypatch):
        monkeypatch.setenv("VAPID_PRIVATE_KEY", "private")
        mock_firestore.collection.return_value.stream.return_value = [stored_subscription("gone")]
        delete = mock_firestore.collection.return_value.document.return_value.delete
        threaded = []

        async def fake_to_thread(func, *args):
            threaded.append(func)
            return func(*args)

        def gone(subscription, data, private_key):
            raise WebPushException("gone", response=MagicMock(status_code=404))

        with patch('api.notifications.services.send_push', side_effect=gone), \
             patch('api.notifications.services.asyncio.to_thread', side_effect=fake_to_thread):
            result = await broadcast(PushMessage(title="Oferta"))

        assert result.removed == 1
        assert delete in threaded
        delete.assert_called_once()

    @pytest.mark.asyncio
    async def test_missing_private_key(self, monkeypatch):
        monkeypatch.delenv("VAPID_PRIVATE_KEY", raising=False)

        with pytest.raises(HTTPException) as exc_info:
            await broadcast(PushMessage())

        assert "VAPID_PRIVATE_KEY" in str(exc_info.value.detail)


class TestPushSubscriber:

    @pytest.mark.asyncio
    async def test_success_then_short_circuit(self):
        calls = []

        def handler(request: httpx.Request):
            calls.append(json.loads(request.content))
            return httpx.Response(200, json={"status": "success", "data": {"id": "hash", **BROWSER_SUBSCRIPTION}})

        subscriber = PushSubscriber(base_url="http://api.test", transport=httpx.MockTransport(handler))

        first = await subscriber.subscribe(BROWSER_SUBSCRIPTION, user_id="u1")
        second = await subscriber.subscribe(BROWSER_SUBSCRIPTION, user_id="u1")

        assert first.ok is True
        assert first.title == SUCCESS_TITLE
        assert second.ok is True
        assert subscriber.is_subscribed is True
        assert len(calls) == 1
        assert calls[0]["userId"] == "u1"

    @pytest.mark.asyncio
    async def test_failure_becomes_message(self):
        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        subscriber = PushSubscriber(base_url="http://api.test", transport=httpx.MockTransport(handler))

        outcome = await subscriber.subscribe(BROWSER_SUBSCRIPTION)

        assert outcome.ok is False
        assert outcome.description == ERROR_DESCRIPTION == "Não foi possível ativar as notificações."
        assert subscriber.is_subscribed is False

    @pytest.mark.asyncio
    async def test_error_envelope_becomes_message(self):
        body = {"status": "error", "message": "Internal server error", "code": 500}
        subscriber = PushSubscriber(
            base_url="http://api.test",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        )

        outcome = await subscriber.subscribe(BROWSER_SUBSCRIPTION)

        assert outcome.ok is False
        assert subscriber.is_subscribed is False


class TestNotificationEndpoints:

    def test_subscribe_as_visitor(self, client):
        stored = {"id": "hash", "endpoint": BROWSER_SUBSCRIPTION["endpoint"], "p256dh": "BPUB", "auth": "AUTH"}

        with patch('api.notifications.routers.subscribe', AsyncMock(return_value=stored)) as mock_subscribe:
            response = client.post("/api/notifications/subscriptions", json=BROWSER_SUBSCRIPTION)

        assert response.json()["status"] == "success"
        assert mock_subscribe.call_args[0][1] is None

    def test_send_requires_employee(self, client, monkeypatch):
        monkeypatch.delenv("ENV", raising=False)

        response = client.post("/api/notifications/send", json={"title": "Oferta"})

        assert response.status_code == 401

    def test_send(self, client, as_employee):
        result = BroadcastResult(successCount=2, failureCount=0, total=2)

        with patch('api.notifications.routers.broadcast', AsyncMock(return_value=result)):
            response = client.post("/api/notifications/send", json={"title": "Oferta", "body": "iPhone 13"})

        data = response.json()
        assert data["status"] == "success"
        assert data["data"]["successCount"] == 2

    def test_preview(self, client, as_employee):
        response = client.post("/api/notifications/preview", json={})

        data = response.json()["data"]
        assert data["title"] == "BV Celular"
        assert data["options"]["data"]["url"] == "/"

    def test_vapid_public_key(self, client):
        response = client.get("/api/notifications/vapid-public-key")

        assert response.json()["data"]["publicKey"]
