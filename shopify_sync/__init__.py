"""
Shopify Inventory Sync

A CLI tool that pulls products from a source of truth and pushes them into a
Shopify store through the Admin GraphQL API:
- ready2order POS (paginated REST API)
- Vendor CSV feed (semicolon/comma delimited, German column names)

Products are matched by SKU. Missing products are created as drafts; existing
products get their on-hand stock set at the configured location.
"""

__version__ = "1.0.0"
__author__ = "Shopify Sync Tool"

from .config import Config, ShopifyConfig, SyncOptions, load_config_from_env

__all__ = ["Config", "ShopifyConfig", "SyncOptions", "load_config_from_env"]
