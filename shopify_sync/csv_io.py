"""Vendor CSV feed decoding, validation and normalization."""

import io
import re
from typing import Dict, List, Any, Optional
import logging
import pandas as pd
from rich.console import Console

from .config import SourceProduct


logger = logging.getLogger(__name__)

FEED_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")
DEFAULT_SEPARATOR = ";"

# Normalized header -> SourceProduct field
COLUMN_MAP = {
    "artnr": "sku",
    "artikel": "title",
    "kategorie": "category",
    "lagerstand": "stock",
    "preisnetto": "price",
}
REQUIRED_COLUMNS = ["artnr", "artikel"]

PRICE_ON_REQUEST = "preis auf anfrage"
STOCK_WORDS = {
    "lagernd": 25,
    "limitiert": 1,
}

_INT_RE = re.compile(r"^-?\d+$")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")
_LINE_BREAK_RE = re.compile(r"\r\n|\n|\r")


class FeedError(ValueError):
    """The CSV feed is malformed or incomplete."""
    pass


def decode_feed(content: bytes) -> str:
    """Decode feed bytes, falling back through common vendor encodings."""
    for encoding in FEED_ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    # latin-1 maps every byte, so this is unreachable in practice
    raise FeedError("CSV: unable to decode feed")


def detect_separator(first_line: str) -> Optional[str]:
    """Read the separator from an Excel-style `sep=` hint line.

    Returns None when the line is not a hint.
    """
    line = first_line.rstrip("\r\n").lstrip("\ufeff ")
    if not line.lower().startswith("sep="):
        return None

    sep = line[4:]
    if sep.rstrip() == "\\t":
        return "\t"
    return sep[0] if sep else DEFAULT_SEPARATOR


def normalize_header(header: Any) -> str:
    """Strip quotes and whitespace and lowercase a header cell."""
    cleaned = str(header).strip().replace('"', "").replace("'", "")
    return _WHITESPACE_RE.sub("", cleaned).lower()


def parse_price_eu(raw: str) -> float:
    """Parse "1.234,56" or "57,10" style prices."""
    s = raw.strip()
    if "," in s:
        s = s.replace(".", "").replace(",", ".")
    s = _NON_NUMERIC_RE.sub("", s)
    if s in ("", ".", "-"):
        return 0.0
    try:
        return float(s)
    except ValueError:
        return 0.0


def parse_stock(raw: str) -> Optional[int]:
    """Parse a stock cell; None means leave inventory alone."""
    s = raw.strip()
    if not s:
        return None

    cleaned = s.lstrip("+").replace("\u2212", "-")
    if _INT_RE.match(cleaned):
        return int(cleaned)

    return STOCK_WORDS.get(s.lower())


class CSVProcessor:
    """Handles feed reading, validation, and normalization."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def read_feed(self, content: bytes, limit: Optional[int] = None) -> pd.DataFrame:
        """Decode and parse a raw feed into a DataFrame with normalized headers."""
        text = decode_feed(content)
        lines = _LINE_BREAK_RE.split(text)
        while lines and not lines[-1]:
            lines.pop()
        if len(lines) < 2:
            raise FeedError("CSV: not enough lines")

        separator = detect_separator(lines[0])
        if separator is None:
            separator = DEFAULT_SEPARATOR
        else:
            lines = lines[1:]

        try:
            df = pd.read_csv(
                io.StringIO("\n".join(lines)),
                sep=separator,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                index_col=False,
                on_bad_lines="warn",
                engine="python",
            )
        except pd.errors.EmptyDataError:
            raise FeedError("CSV: failed to read header row")
        except pd.errors.ParserError as e:
            raise FeedError(f"CSV: {e}")

        df.columns = [normalize_header(col) for col in df.columns]

        if limit is not None:
            df = df.head(limit)
            self.console.print(f"[yellow]Limited to first {limit} rows for processing[/yellow]")

        self.console.print(f"[green]Parsed {len(df)} rows (separator {separator!r})[/green]")
        return df

    def validate_required_columns(self, df: pd.DataFrame, required_columns: List[str] = REQUIRED_COLUMNS) -> None:
        """Validate that required columns exist."""
        missing_columns = [col for col in required_columns if col not in df.columns]

        if missing_columns:
            raise FeedError(
                f"CSV: required columns missing: {missing_columns}. "
                f"Available columns: {list(df.columns)}"
            )

    def extract_products(self, df: pd.DataFrame) -> List[SourceProduct]:
        """Turn feed rows into SourceProducts, skipping unusable rows."""
        products = []
        skipped_count = 0

        for idx, row in df.iterrows():
            cells = self._row_cells(row)
            if not any(cells.values()):
                continue

            sku = cells.get("sku", "")
            title = cells.get("title", "")
            if not sku or not title:
                skipped_count += 1
                logger.debug("Row %s: missing SKU or title - skipped", idx + 2)
                continue

            price_raw = cells.get("price", "")
            if price_raw.lower() == PRICE_ON_REQUEST:
                skipped_count += 1
                logger.debug("Row %s: %s has no fixed price - skipped", idx + 2, sku)
                continue

            products.append(SourceProduct(
                sku=sku,
                title=title,
                category=cells.get("category", ""),
                price=parse_price_eu(price_raw) if price_raw else None,
                stock=parse_stock(cells.get("stock", "")),
            ))

        if skipped_count > 0:
            self.console.print(f"[yellow]Skipped {skipped_count} rows without SKU, title or price[/yellow]")

        return products

    def parse(self, content: bytes, limit: Optional[int] = None) -> List[SourceProduct]:
        """Decode, validate and extract products from a raw feed."""
        df = self.read_feed(content, limit)
        self.validate_required_columns(df)
        return self.extract_products(df)

    def _row_cells(self, row: pd.Series) -> Dict[str, str]:
        cells = {}
        for column, field in COLUMN_MAP.items():
            if column in row.index:
                cells[field] = self._clean_string(row[column])
        return cells

    def _clean_string(self, value: Any) -> str:
        """Clean and normalize string values."""
        if pd.isna(value):
            return ''
        return str(value).strip()
