"""Shared fixtures: a fake Shopify Admin GraphQL endpoint."""

from __future__ import annotations

import io
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
from rich.console import Console

from shopify_sync.config import ShopifyConfig, SyncOptions


def variant_node(sku: str, number: int = 1, price: str = "19.99") -> Dict[str, Any]:
    return {
        "id": f"gid://shopify/ProductVariant/{number}",
        "sku": sku,
        "price": price,
        "product": {"id": f"gid://shopify/Product/{number}", "title": f"Product {sku}", "productType": "Tools"},
        "inventoryItem": {"id": f"gid://shopify/InventoryItem/{number}"},
    }


def _operation(query: str) -> str:
    if "inventoryActivate" in query:
        return "activate"
    if "inventorySetOnHandQuantities" in query:
        return "set_on_hand"
    if "productVariantsBulkUpdate" in query:
        return "update_price"
    if "productVariants(" in query:
        return "lookup"
    if "productSet" in query:
        return "create" if "variants(first: 1)" in query else "update_meta"
    return "unknown"


class FakeShopify:
    """Routes GraphQL requests by operation and records every call."""

    def __init__(self, variants: Optional[Dict[str, Dict[str, Any]]] = None):
        self.variants = dict(variants or {})
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.requests: List[httpx.Request] = []
        self.overrides: Dict[str, Callable[[Dict[str, Any]], httpx.Response]] = {}
        self.failing_skus: set = set()

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def ops(self) -> List[str]:
        return [op for op, _ in self.calls]

    def variables(self, op: str) -> List[Dict[str, Any]]:
        return [variables for name, variables in self.calls if name == op]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = json.loads(request.content)
        op = _operation(body["query"])
        variables = body.get("variables") or {}
        self.calls.append((op, variables))

        if op in self.overrides:
            return self.overrides[op](variables)

        if op == "lookup":
            sku = variables["q"].split(":", 1)[1]
            if sku in self.failing_skus:
                return httpx.Response(200, json={"errors": [{"message": f"lookup failed for {sku}"}]})
            edges = [{"node": self.variants[sku]}] if sku in self.variants else []
            return httpx.Response(200, json={"data": {"productVariants": {"edges": edges}}})

        if op == "create":
            sku = variables["input"]["variants"][0]["sku"]
            return httpx.Response(200, json={"data": {"productSet": {
                "product": {
                    "id": "gid://shopify/Product/900",
                    "title": variables["input"]["title"],
                    "productType": variables["input"]["productType"],
                    "variants": {"nodes": [{
                        "id": "gid://shopify/ProductVariant/901",
                        "sku": sku,
                        "price": variables["input"]["variants"][0].get("price", "0.00"),
                        "inventoryItem": {"id": "gid://shopify/InventoryItem/902"},
                    }]},
                },
                "userErrors": [],
            }}})

        payload_key = {
            "update_meta": "productSet",
            "update_price": "productVariantsBulkUpdate",
            "set_on_hand": "inventorySetOnHandQuantities",
            "activate": "inventoryActivate",
        }.get(op)
        if payload_key:
            return httpx.Response(200, json={"data": {payload_key: {"userErrors": []}}})

        return httpx.Response(400, json={"errors": [{"message": "unknown operation"}]})


@pytest.fixture
def shopify_config() -> ShopifyConfig:
    return ShopifyConfig(
        shop_domain="test-shop.myshopify.com",
        access_token="shpat_test",
        api_version="2025-07",
        location_gid="12345",
    )


@pytest.fixture
def fast_options() -> SyncOptions:
    return SyncOptions(pacing_delay=0.0, error_backoff=0.0)


@pytest.fixture
def quiet_console() -> Console:
    return Console(file=io.StringIO(), width=120)
