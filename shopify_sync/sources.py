"""Source-of-truth feeds: ready2order POS and vendor CSV."""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

import httpx
from rich.console import Console

from .clients import Ready2OrderClient, VendorClient
from .config import CsvFeedConfig, Ready2OrderConfig, R2OProduct, SourceProduct
from .csv_io import CSVProcessor


logger = logging.getLogger(__name__)


class ProductSource(ABC):
    """A feed of products to push into Shopify."""

    name: str = ""
    # Whether source prices are net purchase prices that need a retail markup
    net_prices: bool = False

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    @abstractmethod
    async def fetch(self, limit: Optional[int] = None) -> List[SourceProduct]:
        """Fetch and normalize all products."""
        pass


class Ready2OrderSource(ProductSource):
    """Active ready2order products that carry an item number."""

    name = "ready2order"

    def __init__(
        self,
        config: Ready2OrderConfig,
        console: Optional[Console] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(console)
        self.config = config
        self.transport = transport

    @staticmethod
    def to_source_product(product: R2OProduct) -> Optional[SourceProduct]:
        sku = (product.product_itemnumber or "").strip()
        if not product.product_active or not sku:
            return None

        stock = product.product_stock_value
        return SourceProduct(
            sku=sku,
            title=product.product_name.strip(),
            price=product.product_price,
            stock=int(stock) if stock is not None else None,
        )

    async def fetch(self, limit: Optional[int] = None) -> List[SourceProduct]:
        self.console.print("Downloading JSON products...")
        async with Ready2OrderClient(self.config, transport=self.transport) as client:
            raw_products = await client.fetch_all_products()

        self.console.print("Filtering products...")
        products = [p for p in map(self.to_source_product, raw_products) if p is not None]
        self.console.print(f"[green]Found {len(products)} active products with sku[/green]")

        if limit is not None:
            products = products[:limit]
        return products


class CsvFeedSource(ProductSource):
    """Vendor CSV feed downloaded over HTTP."""

    name = "csv"
    net_prices = True

    def __init__(
        self,
        config: CsvFeedConfig,
        console: Optional[Console] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(console)
        self.config = config
        self.transport = transport
        self.processor = CSVProcessor(self.console)

    async def fetch(self, limit: Optional[int] = None) -> List[SourceProduct]:
        self.console.print("Downloading CSV...")
        async with VendorClient(transport=self.transport) as client:
            content = await client.download(self.config.url)

        self.console.print("Parsing CSV...")
        products = self.processor.parse(content, limit)
        self.console.print(f"[green]Found {len(products)} rows.[/green]")
        return products
