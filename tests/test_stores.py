"""
Tests for store services and endpoints.
"""
from unittest.mock import MagicMock, patch, AsyncMock

import pytest
from fastapi import HTTPException

from api.stores.schemas import StoreInsertPayload, StoreUpdatePayload
from api.stores.services import (
    list_stores_service, create_store_service, update_store_service, delete_store_service,
)
from conftest import make_doc


class TestStoreServices:

    def test_list_ordered_by_name(self, mock_firestore):
        mock_firestore.collection.return_value.order_by.return_value.get.return_value = [
            make_doc("s1", {"name": "BV Centro", "whatsapp": "5511999990000"}),
            make_doc("s2", {"name": "BV Norte", "whatsapp": "5511999990001", "deliveryFixedFee": 15}),
        ]

        stores = list_stores_service()

        assert [s.id for s in stores] == ["s1", "s2"]
        assert stores[1].deliveryFixedFee == 15
        mock_firestore.collection.return_value.order_by.assert_called_once_with('name')

    def test_create(self, mock_firestore):
        store_ref = mock_firestore.collection.return_value.document.return_value
        store_ref.id = "s1"
        store_ref.get.return_value = make_doc("s1", {"name": "BV Centro", "whatsapp": "5511999990000"})

        store = create_store_service(StoreInsertPayload(name="BV Centro", whatsapp="5511999990000"))

        assert store.id == "s1"
        written = store_ref.set.call_args[0][0]
        assert written["name"] == "BV Centro"
        assert "createdAt" in written

    @pytest.mark.asyncio
    async def test_empty_update(self):
        with pytest.raises(HTTPException) as exc_info:
            await update_store_service("s1", StoreUpdatePayload())

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_update_invalidates_product_listings(self, mock_firestore):
        store_ref = mock_firestore.collection.return_value.document.return_value
        store_ref.get.return_value = make_doc("s1", {"name": "BV Centro Novo", "whatsapp": "5511999990000"})

        with patch('api.stores.services.invalidate_product_listings', AsyncMock()) as mock_invalidate:
            store = await update_store_service("s1", StoreUpdatePayload(name="BV Centro Novo"))

        assert store.name == "BV Centro Novo"
        store_ref.update.assert_called_once()
        mock_invalidate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_removes_relations(self, mock_firestore):
        store_ref = mock_firestore.collection.return_value.document.return_value
        store_ref.get.return_value = make_doc("s1", {"name": "BV Centro"})
        relation = MagicMock()
        employee = MagicMock()
        mock_firestore.collection.return_value.where.return_value.stream.side_effect = [
            [relation, MagicMock()],
            [employee],
        ]
        batch = mock_firestore.batch.return_value

        with patch('api.stores.services.invalidate_product_listings', AsyncMock()) as mock_invalidate:
            result = await delete_store_service("s1")

        assert result["deletionSummary"] == {"productStores": 2, "employeesUpdated": 1}
        batch.delete.assert_any_call(relation.reference)
        batch.delete.assert_any_call(store_ref)
        batch.update.assert_called_once()
        batch.commit.assert_called_once()
        mock_invalidate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_cache(self, mock_firestore):
        mock_firestore.collection.return_value.document.return_value.get.return_value = make_doc("s1", {"name": "BV"})
        mock_firestore.collection.return_value.where.return_value.stream.return_value = []
        mock_firestore.batch.return_value.commit.side_effect = Exception("unavailable")

        with patch('api.stores.services.invalidate_product_listings', AsyncMock()) as mock_invalidate:
            with pytest.raises(HTTPException) as exc_info:
                await delete_store_service("s1")

        assert exc_info.value.status_code == 500
        mock_invalidate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_not_found(self, mock_firestore):
        mock_firestore.collection.return_value.document.return_value.get.return_value = make_doc("x", None, exists=False)

        with pytest.raises(HTTPException) as exc_info:
            await delete_store_service("x")

        assert exc_info.value.status_code == 404


class TestStoreEndpoints:

    def test_list_is_public(self, client, mock_firestore):
        mock_firestore.collection.return_value.order_by.return_value.get.return_value = [
            make_doc("s1", {"name": "BV Centro", "whatsapp": "5511999990000"}),
        ]

        response = client.get("/api/stores")

        data = response.json()
        assert data["status"] == "success"
        assert data["data"]["items"][0]["name"] == "BV Centro"

    def test_create_requires_permission(self, client, as_read_only_employee):
        response = client.post("/api/stores", json={"name": "BV Sul", "whatsapp": "5511999990002"})

        assert response.status_code == 403

    def test_create(self, client, as_employee, mock_firestore):
        store_ref = mock_firestore.collection.return_value.document.return_value
        store_ref.id = "s3"
        store_ref.get.return_value = make_doc("s3", {"name": "BV Sul", "whatsapp": "5511999990002"})

        response = client.post("/api/stores", json={"name": "BV Sul", "whatsapp": "5511999990002"})

        data = response.json()
        assert data["status"] == "success"
        assert data["data"]["item"]["id"] == "s3"

    def test_delete_wraps_errors(self, client, as_employee):
        with patch('api.stores.routers.delete_store_service',
                   side_effect=HTTPException(status_code=404, detail="Store with ID x not found")):
            response = client.delete("/api/stores/x")

        data = response.json()
        assert data["status"] == "error"
        assert data["code"] == 404
