"""
HTTP client for the product endpoints.

Used by the admin tooling to read and create products against a running API.
Calls are not retried; transport errors and error envelopes reach the caller.
"""
from typing import Any, Dict, Optional

import httpx

from api.common.client import API_BASE_URL, HTTP_TIMEOUT, unwrap_jsend
from api.products.payloads import to_multipart
from api.products.schemas import ProductInsertPayload

PRODUCTS_PATH = "/api/products"


class ProductsClient:
    def __init__(self, base_url: Optional[str] = None, timeout: float = HTTP_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    async def list_products(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        GET the product listing. Filter params are sent as given.

        Returns:
            The paginated `data` of the response
        """
        async with self._client() as client:
            resp = await client.get(PRODUCTS_PATH, params=params or None)
        return unwrap_jsend(resp)

    async def create_product(self, payload: ProductInsertPayload, token: str) -> Dict[str, Any]:
        """
        POST a product as multipart/form-data with the employee's bearer token.

        Image files in the payload may be file objects or
        (filename, content, content_type) tuples.

        Returns:
            The created product
        """
        headers = {"Authorization": f"Bearer {token}"}
        async with self._client() as client:
            resp = await client.post(PRODUCTS_PATH, files=to_multipart(payload), headers=headers)
        return unwrap_jsend(resp)["item"]
