"""Retail price calculation from vendor net prices."""

import math
from typing import Optional, Tuple

RETAIL_MARKUP = 1.3


def suggested_retail_price(net_price: float, markup: float = RETAIL_MARKUP) -> float:
    """Mark up a net price and round it to a .4.99 or .9.99 price point.

    57.10 * 1.3 = 74.23 -> 74.99; 30.00 * 1.3 = 39.00 -> 39.99; 10.00 * 1.3 = 13.00 -> 14.99
    """
    gross = net_price * markup
    base = math.floor(gross / 10) * 10
    if int(gross) % 10 >= 5:
        return round(base + 9.99, 2)
    return round(base + 4.99, 2)


def format_price(amount: float) -> str:
    """Format an amount the way Shopify money inputs expect."""
    return f"{amount:.2f}"


def price_and_cost(net_price: Optional[float], apply_markup: bool) -> Tuple[Optional[float], Optional[float]]:
    """Return (variant price, unit cost) for a source price.

    Net prices from the vendor feed become the cost; the price is marked up.
    Retail prices from the POS are used as-is and carry no cost.
    """
    if net_price is None:
        return None, None
    if apply_markup:
        return suggested_retail_price(net_price), net_price
    return net_price, None
