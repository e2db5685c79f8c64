"""ready2order POS API client."""

from typing import Dict, List, Optional
import logging

import httpx

from .base import BaseClient, APIError
from ..config import Ready2OrderConfig, R2OProduct


logger = logging.getLogger(__name__)


class Ready2OrderClient(BaseClient):
    """HTTP client for the ready2order REST API."""

    def __init__(self, config: Ready2OrderConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(transport=transport)
        self.config = config

    @property
    def base_url(self) -> str:
        return self.config.base_url

    def _get_headers(self) -> Dict[str, str]:
        headers = super()._get_headers()
        headers["Authorization"] = f"Bearer {self.config.api_token}"
        return headers

    async def get_products_page(self, page: int) -> List[R2OProduct]:
        """Fetch one page of products."""
        response = await self.get("products", params={"limit": self.config.page_size, "page": page})

        if not isinstance(response, list):
            raise APIError(f"Unexpected products response on page {page}: {str(response)[:200]}")

        return [R2OProduct.model_validate(item) for item in response]

    async def fetch_all_products(self) -> List[R2OProduct]:
        """Fetch every page until a short page comes back."""
        products: List[R2OProduct] = []
        page = 1

        while True:
            batch = await self.get_products_page(page)
            products.extend(batch)
            logger.debug("Fetched ready2order page %d (%d products)", page, len(batch))

            if len(batch) < self.config.page_size:
                break
            page += 1

        return products
