"""Create-or-update of Shopify products from source rows."""

import asyncio
import logging
from typing import Dict, List, Optional

from ..config import SourceProduct, VariantMatch, UpdateResult, SyncOptions
from ..clients import ShopifyClient, VendorClient, APIError
from ..pricing import price_and_cost, format_price
from ..reporting import Reporter


logger = logging.getLogger(__name__)

PRICE_TOLERANCE = 0.0001


class CatalogUpdater:
    """Matches source rows to Shopify variants by SKU and applies changes."""

    def __init__(
        self,
        client: ShopifyClient,
        location_id: str,
        options: SyncOptions,
        net_prices: bool = False,
        vendor: Optional[VendorClient] = None,
    ):
        self.client = client
        self.location_id = location_id
        self.options = options
        self.net_prices = net_prices
        self.vendor = vendor

    async def sync_product(self, product: SourceProduct) -> UpdateResult:
        """Create or update one product. Errors are logged, never raised."""
        result = UpdateResult(sku=product.sku, action="unchanged", success=False)

        try:
            existing = await self.client.find_variant_by_sku(product.sku)

            if existing:
                result.changes_made = await self._update_existing(product, existing)
                result.action = "updated" if result.changes_made else "unchanged"
            elif self.options.create_missing:
                result.changes_made = await self._create(product)
                result.action = "created"
            else:
                result.action = "skipped"

            result.success = True

        except APIError as e:
            self._record_failure(result, str(e))
            await asyncio.sleep(self.options.error_backoff)
        except Exception as e:
            self._record_failure(result, f"Unexpected error: {e}")
            await asyncio.sleep(self.options.error_backoff)

        return result

    def _record_failure(self, result: UpdateResult, message: str) -> None:
        result.action = "failed"
        result.error = message
        logger.error("[SKU %s] Error: %s", result.sku, message)

    async def _update_existing(self, product: SourceProduct, existing: VariantMatch) -> Dict[str, str]:
        changes: Dict[str, str] = {}
        dry_run = self.options.dry_run

        if self.options.update_meta and (
            existing.product_title != product.title or existing.product_type != product.product_type
        ):
            if not dry_run:
                await self.client.update_product_meta(existing.product_id, product.title, product.product_type)
            changes["title"] = product.title
            changes["product_type"] = product.product_type

        if self.options.update_prices:
            price, cost = price_and_cost(product.price, self.net_prices)
            if price is not None and abs(existing.current_price - price) > PRICE_TOLERANCE:
                if not dry_run:
                    await self.client.update_variant_price(existing.product_id, existing.variant_id, price, cost)
                changes["price"] = format_price(price)

        if product.stock is not None:
            if not dry_run:
                await self.client.set_on_hand(existing.inventory_item_id, self.location_id, product.stock)
            changes["stock"] = str(product.stock)

        return changes

    async def _create(self, product: SourceProduct) -> Dict[str, str]:
        price, cost = price_and_cost(product.price, self.net_prices)
        changes = {"title": product.title, "product_type": product.product_type}
        if price is not None:
            changes["price"] = format_price(price)
        if product.stock is not None:
            changes["stock"] = str(product.stock)

        if self.options.dry_run:
            return changes

        image_url = None
        if self.options.fetch_images and self.vendor is not None:
            image_url = await self.vendor.find_product_image_url(product.sku)
            if image_url:
                changes["image"] = image_url

        created = await self.client.create_product(
            product,
            location_id=self.location_id,
            price=price,
            cost=cost,
            image_url=image_url,
        )
        changes["product_id"] = created.product_id
        return changes

    async def run(self, products: List[SourceProduct], reporter: Reporter) -> None:
        """Process every row in order, pacing requests between rows."""
        with reporter.track(len(products)):
            for product in products:
                result = await self.sync_product(product)
                reporter.add_result(result)
                await asyncio.sleep(self.options.pacing_delay)
