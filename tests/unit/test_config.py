"""Unit tests for environment configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from shopify_sync.config import (
    ProcessingStats,
    ShopifyConfig,
    UpdateResult,
    load_config_from_env,
    to_gid,
)


ENV_VARS = [
    "SHOPIFY_SHOP_DOMAIN",
    "SHOPIFY_ACCESS_TOKEN",
    "SHOPIFY_API_VERSION",
    "SHOPIFY_LOCATION_GID",
    "CSV_URL",
    "CSV_IMAGE_PAGE_URL",
    "R2O_API_TOKEN",
    "SYNC_PACING_DELAY",
    "SYNC_DRY_RUN",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("dotenv.load_dotenv", lambda *args, **kwargs: False)


def _set_shopify_env(monkeypatch) -> None:
    monkeypatch.setenv("SHOPIFY_SHOP_DOMAIN", "https://demo.myshopify.com/")
    monkeypatch.setenv("SHOPIFY_ACCESS_TOKEN", "shpat_abc")
    monkeypatch.setenv("SHOPIFY_LOCATION_GID", "777")


def test_to_gid_builds_and_preserves_gids() -> None:
    assert to_gid("Location", 42) == "gid://shopify/Location/42"
    assert to_gid("Location", "gid://shopify/Location/42") == "gid://shopify/Location/42"


def test_load_config_reads_shopify_settings(monkeypatch) -> None:
    _set_shopify_env(monkeypatch)

    config = load_config_from_env()

    assert config.shopify.shop_domain == "demo.myshopify.com"
    assert config.shopify.api_version == "2025-07"
    assert config.shopify.location_gid == "gid://shopify/Location/777"
    assert config.shopify.graphql_url == "https://demo.myshopify.com/admin/api/2025-07/graphql.json"
    assert config.options.pacing_delay == pytest.approx(0.12)
    assert config.options.error_backoff == pytest.approx(0.3)


def test_load_config_fails_without_access_token(monkeypatch) -> None:
    _set_shopify_env(monkeypatch)
    monkeypatch.delenv("SHOPIFY_ACCESS_TOKEN")

    with pytest.raises(ValidationError):
        load_config_from_env()


def test_load_config_requires_csv_url_for_csv_source(monkeypatch) -> None:
    _set_shopify_env(monkeypatch)

    with pytest.raises(ValidationError):
        load_config_from_env("csv")


def test_load_config_accepts_explicit_overrides(monkeypatch) -> None:
    _set_shopify_env(monkeypatch)

    config = load_config_from_env("csv", csv_url="https://vendor.example/feed.csv", location="9")

    assert config.csv_feed.url == "https://vendor.example/feed.csv"
    assert config.shopify.location_gid == "gid://shopify/Location/9"


def test_load_config_requires_pos_token_for_pos_source(monkeypatch) -> None:
    _set_shopify_env(monkeypatch)
    monkeypatch.setenv("R2O_API_TOKEN", "r2o-token")

    config = load_config_from_env("pos")

    assert config.ready2order.api_token == "r2o-token"
    assert config.ready2order.page_size == 250


def test_sync_options_read_from_env(monkeypatch) -> None:
    _set_shopify_env(monkeypatch)
    monkeypatch.setenv("SYNC_PACING_DELAY", "0.5")
    monkeypatch.setenv("SYNC_DRY_RUN", "true")

    config = load_config_from_env()

    assert config.options.pacing_delay == pytest.approx(0.5)
    assert config.options.dry_run is True


def test_processing_stats_counts_results() -> None:
    stats = ProcessingStats(total_rows=4)
    stats.add_result(UpdateResult(sku="a", action="created", success=True, changes_made={"stock": "3"}))
    stats.add_result(UpdateResult(sku="b", action="updated", success=True, changes_made={"stock": "1", "price": "9.99"}))
    stats.add_result(UpdateResult(sku="c", action="failed", success=False, error="boom"))

    assert stats.processed == 3
    assert stats.created == 1
    assert stats.stock_updates == 1
    assert stats.price_updates == 1
    assert stats.errors == 1
    assert stats.percentage == 75.0


def test_shopify_config_rejects_empty_domain() -> None:
    with pytest.raises(ValidationError):
        ShopifyConfig(shop_domain="", access_token="x", location_gid="1")
