"""Unit tests for the typer CLI wiring."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from shopify_sync import cli


runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "SHOPIFY_SHOP_DOMAIN",
        "SHOPIFY_ACCESS_TOKEN",
        "SHOPIFY_LOCATION_GID",
        "CSV_URL",
        "CSV_IMAGE_PAGE_URL",
        "R2O_API_TOKEN",
        "SYNC_DRY_RUN",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("dotenv.load_dotenv", lambda *args, **kwargs: False)


@pytest.fixture
def captured(monkeypatch):
    calls = []

    async def fake_sync_main(config, source, limit):
        calls.append((config, source, limit))

    monkeypatch.setattr(cli, "_sync_main", fake_sync_main)
    return calls


def _shopify_env(monkeypatch) -> None:
    monkeypatch.setenv("SHOPIFY_SHOP_DOMAIN", "demo.myshopify.com")
    monkeypatch.setenv("SHOPIFY_ACCESS_TOKEN", "shpat_abc")
    monkeypatch.setenv("SHOPIFY_LOCATION_GID", "gid://shopify/Location/1")


def test_missing_configuration_is_fatal(captured) -> None:
    result = runner.invoke(cli.app, ["pos"])

    assert result.exit_code == 1
    assert captured == []


def test_csv_requires_feed_url(monkeypatch, captured) -> None:
    _shopify_env(monkeypatch)

    result = runner.invoke(cli.app, ["csv"])

    assert result.exit_code == 1
    assert captured == []


def test_pos_defaults_to_stock_only(monkeypatch, captured) -> None:
    _shopify_env(monkeypatch)
    monkeypatch.setenv("R2O_API_TOKEN", "r2o")

    result = runner.invoke(cli.app, ["pos", "--limit", "5"])

    assert result.exit_code == 0, result.output
    config, source, limit = captured[0]
    assert source.name == "ready2order"
    assert limit == 5
    assert config.options.create_missing is False
    assert config.options.dry_run is False


def test_csv_flags_reach_sync_options(monkeypatch, captured) -> None:
    _shopify_env(monkeypatch)
    monkeypatch.setenv("CSV_IMAGE_PAGE_URL", "https://vendor.example/p/{sku}")

    result = runner.invoke(cli.app, [
        "csv", "--url", "https://vendor.example/feed.csv", "--dry-run", "--update-prices", "--location", "42",
    ])

    assert result.exit_code == 0, result.output
    config, source, _ = captured[0]
    assert source.name == "csv"
    assert config.csv_feed.url == "https://vendor.example/feed.csv"
    assert config.shopify.location_gid == "gid://shopify/Location/42"
    assert config.options.create_missing is True
    assert config.options.dry_run is True
    assert config.options.update_prices is True
    assert config.options.fetch_images is True


def test_csv_images_off_without_page_template(monkeypatch, captured) -> None:
    _shopify_env(monkeypatch)
    monkeypatch.setenv("CSV_URL", "https://vendor.example/feed.csv")

    result = runner.invoke(cli.app, ["csv", "--no-create"])

    assert result.exit_code == 0, result.output
    config, _, _ = captured[0]
    assert config.options.fetch_images is False
    assert config.options.create_missing is False


def test_sync_failure_exits_nonzero(monkeypatch) -> None:
    _shopify_env(monkeypatch)
    monkeypatch.setenv("R2O_API_TOKEN", "r2o")

    async def failing_sync_main(config, source, limit):
        raise RuntimeError("source unavailable")

    monkeypatch.setattr(cli, "_sync_main", failing_sync_main)

    result = runner.invoke(cli.app, ["pos"])

    assert result.exit_code == 1
