"""Configuration models and settings for the Shopify inventory sync."""

from typing import Dict, Optional, Literal
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_API_VERSION = "2025-07"


def to_gid(resource_type: str, resource_id) -> str:
    """Build a Shopify GID, leaving values that already are GIDs untouched."""
    value = str(resource_id).strip()
    if value.startswith("gid://"):
        return value
    return f"gid://shopify/{resource_type}/{value}"


class ShopifyConfig(BaseSettings):
    """Shopify Admin API configuration loaded from SHOPIFY_* variables."""

    shop_domain: str = Field(..., min_length=1, description="myshopify.com domain of the store")
    access_token: str = Field(..., min_length=1, description="Admin API access token")
    api_version: str = DEFAULT_API_VERSION
    location_gid: str = Field(..., min_length=1, description="Location that receives stock updates")

    model_config = SettingsConfigDict(env_prefix="SHOPIFY_", extra="ignore")

    @field_validator("shop_domain")
    @classmethod
    def _strip_scheme(cls, value: str) -> str:
        return value.strip().removeprefix("https://").removeprefix("http://").rstrip("/")

    @field_validator("location_gid")
    @classmethod
    def _location_as_gid(cls, value: str) -> str:
        return to_gid("Location", value)

    @property
    def graphql_url(self) -> str:
        return f"https://{self.shop_domain}/admin/api/{self.api_version}/graphql.json"


class CsvFeedConfig(BaseSettings):
    """Vendor CSV feed configuration loaded from CSV_* variables."""

    url: str = Field(..., min_length=1)
    image_page_url: Optional[str] = None

    model_config = SettingsConfigDict(env_prefix="CSV_", extra="ignore")


class Ready2OrderConfig(BaseSettings):
    """ready2order POS API configuration loaded from R2O_* variables."""

    api_token: str = Field(..., min_length=1)
    base_url: str = "https://api.ready2order.com/v1"
    page_size: int = Field(default=250, ge=1, le=250)

    model_config = SettingsConfigDict(env_prefix="R2O_", extra="ignore")


class SyncOptions(BaseSettings):
    """Pacing and behaviour switches for a sync run."""

    pacing_delay: float = Field(default=0.12, ge=0.0, le=5.0)
    error_backoff: float = Field(default=0.3, ge=0.0, le=30.0)
    dry_run: bool = False
    create_missing: bool = True
    update_prices: bool = False
    update_meta: bool = False
    fetch_images: bool = False

    model_config = SettingsConfigDict(env_prefix="SYNC_", extra="ignore")


class SourceProduct(BaseModel):
    """A normalized row from either source."""

    sku: str
    title: str
    category: str = ""
    price: Optional[float] = None
    stock: Optional[int] = None

    @property
    def product_type(self) -> str:
        return self.category or "Uncategorized"


class R2OProduct(BaseModel):
    """The ready2order product fields the sync reads."""

    product_id: int
    product_itemnumber: Optional[str] = None
    product_name: str = ""
    product_price: Optional[float] = None
    product_stock_value: Optional[float] = None
    product_active: bool = False

    model_config = {"extra": "ignore"}


class VariantMatch(BaseModel):
    """Existing Shopify variant resolved from a SKU."""

    sku: str
    variant_id: str
    product_id: str
    inventory_item_id: str
    product_title: str = ""
    product_type: str = ""
    current_price: float = 0.0


class CreatedProduct(BaseModel):
    """IDs returned by a productSet create."""

    product_id: str
    variant_id: str
    inventory_item_id: str


class UpdateResult(BaseModel):
    """Result of processing a single source row."""

    sku: str
    action: Literal["created", "updated", "unchanged", "skipped", "failed"]
    success: bool
    error: Optional[str] = None
    changes_made: Dict[str, str] = Field(default_factory=dict)


class ProcessingStats(BaseModel):
    """Running counters for a sync run."""

    total_rows: int = 0
    processed: int = 0
    created: int = 0
    meta_updates: int = 0
    price_updates: int = 0
    stock_updates: int = 0
    skipped: int = 0
    errors: int = 0

    def add_result(self, result: UpdateResult) -> None:
        """Fold a row result into the counters."""
        self.processed += 1
        if not result.success:
            self.errors += 1
            return
        if result.action == "created":
            self.created += 1
            return
        if result.action == "skipped":
            self.skipped += 1
            return
        if "stock" in result.changes_made:
            self.stock_updates += 1
        if "price" in result.changes_made:
            self.price_updates += 1
        if "title" in result.changes_made or "product_type" in result.changes_made:
            self.meta_updates += 1

    @property
    def percentage(self) -> float:
        if not self.total_rows:
            return 100.0
        return round(self.processed / self.total_rows * 100, 1)


class Config(BaseModel):
    """Main application configuration."""

    shopify: ShopifyConfig
    options: SyncOptions = Field(default_factory=SyncOptions)
    csv_feed: Optional[CsvFeedConfig] = None
    ready2order: Optional[Ready2OrderConfig] = None


def load_config_from_env(
    source: Optional[Literal["csv", "pos"]] = None,
    csv_url: Optional[str] = None,
    location: Optional[str] = None,
) -> Config:
    """Load configuration from environment variables.

    Explicit arguments win over the environment. Raises
    pydantic.ValidationError when a required value is missing.
    """
    from dotenv import load_dotenv
    load_dotenv()

    shopify_overrides = {"location_gid": location} if location else {}
    config = Config(shopify=ShopifyConfig(**shopify_overrides), options=SyncOptions())

    if source == "csv":
        config.csv_feed = CsvFeedConfig(**({"url": csv_url} if csv_url else {}))
    elif source == "pos":
        config.ready2order = Ready2OrderConfig()
    return config
