"""Main CLI interface for the Shopify inventory sync tool."""

import asyncio
import logging
from typing import Optional
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from .config import Config, load_config_from_env
from .clients import ShopifyClient, VendorClient
from .reporting import Reporter
from .sources import ProductSource, CsvFeedSource, Ready2OrderSource
from .updaters import CatalogUpdater

app = typer.Typer(
    name="shopify-sync",
    help="One-way product and stock sync from ready2order or a vendor CSV feed into Shopify",
    rich_markup_mode="rich"
)

console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, markup=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _load_config(source: Optional[str], csv_url: Optional[str] = None, location: Optional[str] = None) -> Config:
    try:
        return load_config_from_env(source, csv_url=csv_url, location=location)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        err_console.print(f"[red]Configuration error ({e.title}): {problems}[/red]")
        err_console.print(
            "[red]Please set SHOPIFY_SHOP_DOMAIN, SHOPIFY_ACCESS_TOKEN, SHOPIFY_LOCATION_GID "
            "and the source settings (CSV_URL or R2O_API_TOKEN)[/red]"
        )
        raise typer.Exit(1)


def _apply_flags(
    config: Config,
    dry_run: bool,
    create: Optional[bool],
    update_prices: bool,
    update_meta: bool,
    images: bool = False,
    create_default: bool = True,
) -> None:
    config.options = config.options.model_copy(update={
        "dry_run": dry_run or config.options.dry_run,
        "create_missing": create_default if create is None else create,
        "update_prices": update_prices or config.options.update_prices,
        "update_meta": update_meta or config.options.update_meta,
        "fetch_images": images,
    })


def _run(coro, action: str) -> None:
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        console.print(f"\n[yellow]{action} cancelled by user[/yellow]")
        raise typer.Exit(1)
    except Exception as e:
        err_console.print(f"[red]{action} failed: {e}[/red]")
        raise typer.Exit(1)


@app.command("csv")
def sync_csv(
    url: Optional[str] = typer.Option(None, "--url", help="CSV feed URL (defaults to CSV_URL)"),
    location: Optional[str] = typer.Option(None, "--location", help="Location GID or numeric ID"),
    limit: Optional[int] = typer.Option(None, "--limit", min=0, help="Process only first N rows"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Look up SKUs but make no changes"),
    create: Optional[bool] = typer.Option(None, "--create/--no-create", help="Create missing products (default: on)"),
    update_prices: bool = typer.Option(False, "--update-prices", help="Update prices of existing variants"),
    update_meta: bool = typer.Option(False, "--update-meta", help="Update title and product type of existing products"),
    images: bool = typer.Option(True, "--images/--no-images", help="Attach vendor product images to new products"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Sync the vendor CSV feed into Shopify."""
    setup_logging(verbose)
    config = _load_config("csv", csv_url=url, location=location)
    _apply_flags(
        config, dry_run, create, update_prices, update_meta,
        images=images and bool(config.csv_feed.image_page_url),
        create_default=True,
    )

    source = CsvFeedSource(config.csv_feed, console)
    _run(_sync_main(config, source, limit), "Sync")


@app.command("pos")
def sync_pos(
    location: Optional[str] = typer.Option(None, "--location", help="Location GID or numeric ID"),
    limit: Optional[int] = typer.Option(None, "--limit", min=0, help="Process only first N products"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Look up SKUs but make no changes"),
    create: Optional[bool] = typer.Option(None, "--create/--no-create", help="Create missing products (default: off)"),
    update_prices: bool = typer.Option(False, "--update-prices", help="Update prices of existing variants"),
    update_meta: bool = typer.Option(False, "--update-meta", help="Update title and product type of existing products"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Sync ready2order POS products into Shopify."""
    setup_logging(verbose)
    config = _load_config("pos", location=location)
    _apply_flags(config, dry_run, create, update_prices, update_meta, create_default=False)

    source = Ready2OrderSource(config.ready2order, console)
    _run(_sync_main(config, source, limit), "Sync")


@app.command()
def lookup(
    sku: str = typer.Option(..., "--sku", help="SKU to look up in Shopify"),
):
    """Show the Shopify variant matched by a single SKU."""
    setup_logging()
    config = _load_config(None)
    _run(_lookup_main(config, sku), "Lookup")


async def _lookup_main(config: Config, sku: str) -> None:
    async with ShopifyClient(config.shopify) as client:
        match = await client.find_variant_by_sku(sku)

    if match is None:
        console.print(f"[yellow]No variant found for SKU: {sku}[/yellow]")
        return

    console.print(Panel.fit(
        f"Product: {match.product_title} ({match.product_type or '-'})\n"
        f"Product ID: {match.product_id}\n"
        f"Variant ID: {match.variant_id}\n"
        f"Inventory Item ID: {match.inventory_item_id}\n"
        f"Price: {match.current_price:.2f}",
        title=f"SKU {sku}",
        border_style="blue"
    ))


async def _sync_main(config: Config, source: ProductSource, limit: Optional[int]) -> None:
    """Fetch the source and push every row into Shopify."""
    options = config.options
    reporter = Reporter(console)

    console.print(f"[bold cyan]Shopify Sync ({source.name})[/bold cyan]")
    if options.dry_run:
        console.print("[yellow]Dry run: no changes will be made[/yellow]")

    products = await source.fetch(limit)
    if not products:
        console.print("[yellow]No products to sync[/yellow]")
        return

    image_page_url = config.csv_feed.image_page_url if config.csv_feed else None

    async with ShopifyClient(config.shopify) as client, VendorClient(image_page_url) as vendor:
        updater = CatalogUpdater(
            client,
            config.shopify.location_gid,
            options,
            net_prices=source.net_prices,
            vendor=vendor if options.fetch_images else None,
        )
        await updater.run(products, reporter)

    reporter.print_summary(options.dry_run)


if __name__ == "__main__":
    app()
