"""Vendor website client: CSV feed download and product image lookup."""

from typing import Optional
from urllib.parse import urljoin
import logging

import httpx
from bs4 import BeautifulSoup

from .base import BaseClient, APIError


logger = logging.getLogger(__name__)

GALLERY_IMAGE_SELECTOR = "a[data-fancybox=gallery] img"


class VendorClient(BaseClient):
    """Plain HTTP GETs against the vendor's site."""

    user_agent = "VendorCSVShopifySync/1.0"

    def __init__(
        self,
        image_page_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(transport=transport)
        self.image_page_url = image_page_url

    @property
    def base_url(self) -> str:
        return ""

    def _get_headers(self):
        return {"User-Agent": self.user_agent}

    async def download(self, url: str) -> bytes:
        """Download a resource, raising APIError on any failure."""
        try:
            response = await self._send("GET", url)
        except httpx.HTTPError as e:
            raise APIError(f"GET failed: {e}")
        return response.content

    async def find_product_image_url(self, sku: str) -> Optional[str]:
        """Scrape the first gallery image from the vendor's product page."""
        if not self.image_page_url:
            return None

        try:
            page_url = self.image_page_url.format(sku=sku)
            html = await self.download(page_url)
            soup = BeautifulSoup(html, "html.parser")
            image = soup.select_one(GALLERY_IMAGE_SELECTOR)
            if image is None or not image.get("src"):
                return None
            return urljoin(page_url, image["src"])
        except Exception as e:
            # A missing image never blocks product creation
            logger.debug("No product image for %s: %s", sku, e)
            return None
