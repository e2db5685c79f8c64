"""Updater modules for the Shopify catalog."""

from .catalog import CatalogUpdater

__all__ = ["CatalogUpdater"]
