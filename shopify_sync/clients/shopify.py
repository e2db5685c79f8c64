"""Shopify Admin GraphQL API client."""

from typing import Dict, Any, Optional
import logging

import httpx

from .base import BaseClient, APIError, GraphQLError, RateLimitError, UserErrorsError
from ..config import ShopifyConfig, SourceProduct, VariantMatch, CreatedProduct
from ..pricing import format_price


logger = logging.getLogger(__name__)

NOT_STOCKED_MESSAGE = "not stocked at the location"

FIND_VARIANT_BY_SKU = """
query($q: String!) {
  productVariants(first: 1, query: $q) {
    edges {
      node {
        id
        sku
        price
        product { id title productType }
        inventoryItem { id }
      }
    }
  }
}
"""

PRODUCT_SET_CREATE = """
mutation($input: ProductSetInput!) {
  productSet(input: $input) {
    product {
      id
      title
      productType
      variants(first: 1) {
        nodes {
          id
          sku
          price
          inventoryItem { id }
        }
      }
    }
    userErrors { field message }
  }
}
"""

PRODUCT_SET_META = """
mutation($input: ProductSetInput!) {
  productSet(input: $input) {
    product { id title productType }
    userErrors { field message }
  }
}
"""

VARIANTS_BULK_UPDATE = """
mutation($productId: ID!, $variants: [ProductVariantsBulkInput!]!) {
  productVariantsBulkUpdate(productId: $productId, variants: $variants) {
    product { id }
    userErrors { field message }
  }
}
"""

INVENTORY_SET_ON_HAND = """
mutation($input: InventorySetOnHandQuantitiesInput!) {
  inventorySetOnHandQuantities(input: $input) {
    userErrors { field message }
    inventoryAdjustmentGroup { createdAt }
  }
}
"""

INVENTORY_ACTIVATE = """
mutation($inventoryItemId: ID!, $locationId: ID!, $available: Int) {
  inventoryActivate(inventoryItemId: $inventoryItemId, locationId: $locationId, available: $available) {
    inventoryLevel {
      id
      quantities(names: ["available"]) { name quantity }
    }
    userErrors { field message }
  }
}
"""


class ShopifyClient(BaseClient):
    """GraphQL client for the Shopify Admin API."""

    def __init__(self, config: ShopifyConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(transport=transport)
        self.config = config

    @property
    def base_url(self) -> str:
        return self.config.graphql_url

    def _get_headers(self) -> Dict[str, str]:
        headers = super()._get_headers()
        headers["X-Shopify-Access-Token"] = self.config.access_token
        return headers

    def _handle_response_errors(self, response: httpx.Response) -> None:
        super()._handle_response_errors(response)

        # Shopify reports cost-based throttling as a 200 with a THROTTLED error
        try:
            errors = response.json().get("errors")
        except (ValueError, AttributeError):
            return
        if isinstance(errors, list) and any(
            (e.get("extensions") or {}).get("code") == "THROTTLED" for e in errors if isinstance(e, dict)
        ):
            raise RateLimitError("GraphQL query cost throttled")

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run a query or mutation and return the `data` object."""
        body = await self.post("", json_data={"query": query, "variables": variables or {}})

        if not isinstance(body, dict):
            raise APIError(f"GraphQL invalid JSON: {body!r}")
        if body.get("errors"):
            raise GraphQLError(body["errors"])
        return body.get("data") or {}

    @staticmethod
    def _raise_user_errors(operation: str, payload: Optional[Dict[str, Any]]) -> None:
        errors = (payload or {}).get("userErrors") or []
        if errors:
            raise UserErrorsError(operation, errors)

    async def find_variant_by_sku(self, sku: str) -> Optional[VariantMatch]:
        """Find the first variant with the given SKU."""
        data = await self.execute(FIND_VARIANT_BY_SKU, {"q": f"sku:{sku}"})
        edges = (data.get("productVariants") or {}).get("edges") or []
        if not edges:
            return None

        node = edges[0]["node"]
        return VariantMatch(
            sku=node.get("sku") or sku,
            variant_id=node["id"],
            product_id=node["product"]["id"],
            inventory_item_id=node["inventoryItem"]["id"],
            product_title=node["product"].get("title") or "",
            product_type=node["product"].get("productType") or "",
            current_price=float(node.get("price") or 0),
        )

    async def create_product(
        self,
        product: SourceProduct,
        location_id: str = "",
        price: Optional[float] = None,
        cost: Optional[float] = None,
        image_url: Optional[str] = None,
    ) -> CreatedProduct:
        """Create a draft product with a single default variant."""
        variant_input: Dict[str, Any] = {
            "sku": product.sku,
            "inventoryPolicy": "DENY",
            "inventoryItem": {"tracked": True},
            "optionValues": [{"optionName": "Title", "name": "Default Title"}],
        }

        if price is not None:
            variant_input["price"] = format_price(price)
            if cost is not None:
                variant_input["inventoryItem"]["cost"] = format_price(cost)

        if product.stock is not None and location_id:
            variant_input["inventoryQuantities"] = [{
                "locationId": location_id,
                "name": "on_hand",
                "quantity": product.stock,
            }]

        product_input: Dict[str, Any] = {
            "title": product.title,
            "productType": product.product_type,
            "status": "DRAFT",
            "productOptions": [{"name": "Title", "values": [{"name": "Default Title"}]}],
            "variants": [variant_input],
        }

        if image_url:
            image_file = {"contentType": "IMAGE", "originalSource": image_url}
            product_input["files"] = [image_file]
            variant_input["file"] = image_file

        data = await self.execute(PRODUCT_SET_CREATE, {"input": product_input})
        payload = data.get("productSet") or {}
        self._raise_user_errors("productSet", payload)

        created = payload.get("product") or {}
        nodes = (created.get("variants") or {}).get("nodes") or []
        if not nodes:
            raise APIError("productSet: missing variant")

        variant = nodes[0]
        return CreatedProduct(
            product_id=created["id"],
            variant_id=variant["id"],
            inventory_item_id=variant["inventoryItem"]["id"],
        )

    async def update_product_meta(self, product_id: str, title: str, product_type: str) -> None:
        """Update product title and type."""
        data = await self.execute(PRODUCT_SET_META, {
            "input": {"id": product_id, "title": title, "productType": product_type}
        })
        self._raise_user_errors("productSet update", data.get("productSet"))

    async def update_variant_price(
        self,
        product_id: str,
        variant_id: str,
        price: float,
        cost: Optional[float] = None,
    ) -> None:
        """Update a variant's price, and its unit cost when given."""
        variant_input: Dict[str, Any] = {"id": variant_id, "price": format_price(price)}
        if cost is not None:
            variant_input["inventoryItem"] = {"cost": format_price(cost)}

        data = await self.execute(VARIANTS_BULK_UPDATE, {
            "productId": product_id,
            "variants": [variant_input],
        })
        self._raise_user_errors("productVariantsBulkUpdate", data.get("productVariantsBulkUpdate"))

    async def set_on_hand(self, inventory_item_id: str, location_id: str, quantity: int) -> None:
        """Set the absolute on-hand quantity, activating the item at the location if needed."""
        data = await self.execute(INVENTORY_SET_ON_HAND, {
            "input": {
                "reason": "correction",
                "setQuantities": [{
                    "inventoryItemId": inventory_item_id,
                    "locationId": location_id,
                    "quantity": quantity,
                }],
            }
        })
        payload = data.get("inventorySetOnHandQuantities") or {}
        errors = payload.get("userErrors") or []
        if not errors:
            return

        if not any(NOT_STOCKED_MESSAGE in (e.get("message") or "") for e in errors):
            raise UserErrorsError("inventorySetOnHandQuantities", errors)

        logger.info("Inventory item %s not stocked at %s, activating", inventory_item_id, location_id)
        await self.activate_inventory(inventory_item_id, location_id, quantity)

    async def activate_inventory(self, inventory_item_id: str, location_id: str, available: int) -> None:
        """Start stocking an inventory item at a location."""
        data = await self.execute(INVENTORY_ACTIVATE, {
            "inventoryItemId": inventory_item_id,
            "locationId": location_id,
            "available": available,
        })
        self._raise_user_errors("inventoryActivate", data.get("inventoryActivate"))
