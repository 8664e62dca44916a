"""
Data pipeline: raw tabular rows -> ordered, typed plot records.

Each chart supplies a field-extraction function that maps a raw row (a dict of
column name -> text) to a Record, or to INVALID when a required field does not
coerce. Invalid rows are dropped; they are never padded with nulls.
"""

import asyncio
import io
import math
import re
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import httpx
import numpy as np
import pandas as pd

from chartkit.errors import DataLoadError
from chartkit.log import get_logger
from chartkit.records import Dataset, EMPTY, Record

logger = get_logger(__name__)


class _Invalid:
    def __repr__(self):
        return "INVALID"


INVALID = _Invalid()

Row = Dict[str, str]
Extractor = Callable[[Row], Union[Record, _Invalid]]

# Plain ASCII decimal, optional sign and exponent. No digit separators.
DECIMAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def coerce_number(raw: Any) -> Optional[float]:
    """
    Parse a decimal number from a raw cell. Returns None when the cell is
    missing, blank, malformed or not finite (NaN / inf).
    """
    if raw is None:
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not DECIMAL.fullmatch(text):
            return None
        value = float(text)
    return value if math.isfinite(value) else None


def average(dataset: Dataset) -> float:
    """Mean of the scalar record values; 0.0 for an empty dataset."""
    if not dataset:
        return 0.0
    return float(np.mean([r.value for r in dataset]))


def parse_rows(text: str, source: str = "<memory>") -> List[Row]:
    """
    Parse CSV text into raw string rows, leaving every cell as text.

    Lines with more fields than the header are cut to the header width and
    lines with fewer get blank cells, so a ragged line only fails its own row.
    """
    try:
        width = len(pd.read_csv(io.StringIO(text), nrows=0).columns)
        frame = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False, engine="python",
                            index_col=False, on_bad_lines=lambda fields: fields[:width])
    except pd.errors.EmptyDataError as e:
        raise DataLoadError(source, "no columns to parse") from e
    except pd.errors.ParserError as e:
        raise DataLoadError(source, f"not tabular data ({e})") from e
    return frame.fillna("").to_dict(orient="records")


class DataPipeline:
    """
    Loads one data source and normalises its rows into a Dataset.

    Args:
        extract: Per-chart field extraction, row -> Record | INVALID.
        sort_key: When given, the result is stably sorted ascending by this
            key after filtering (temporal series).
        client: Optional shared httpx.AsyncClient used for URL sources.
    """

    def __init__(self, extract: Extractor, sort_key: Optional[Callable[[Record], Any]] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.extract = extract
        self.sort_key = sort_key
        self.client = client

    async def load(self, source: Union[str, Path]) -> Dataset:
        source = str(source)
        text = await self._fetch(source)
        rows = parse_rows(text, source)
        dataset = self.normalise(rows)
        logger.info(f"Loaded {len(dataset)} of {len(rows)} rows from {source}")
        return dataset

    def normalise(self, rows: Iterable[Row]) -> Dataset:
        """Run every row through the extractor, drop invalid results, apply ordering."""
        records = []
        dropped = 0
        for row in rows:
            result = self.extract(row)
            if result is INVALID:
                dropped += 1
                continue
            records.append(result)

        if dropped:
            logger.debug(f"Dropped {dropped} rows that failed coercion")

        if self.sort_key is not None:
            # sorted() is stable: equal keys keep their source order
            records = sorted(records, key=self.sort_key)

        return tuple(records) if records else EMPTY

    async def _fetch(self, source: str) -> str:
        if source.startswith(("http://", "https://")):
            return await self._fetch_url(source)

        path = Path(source)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as e:
            raise DataLoadError(source, f"unreachable ({e.strerror or e})") from e
        except UnicodeDecodeError as e:
            raise DataLoadError(source, "not a text file") from e

    async def _fetch_url(self, url: str) -> str:
        client = self.client or httpx.AsyncClient()
        try:
            response = await client.get(url)
            response.raise_for_status()
            return response.text
        except httpx.HTTPStatusError as e:
            raise DataLoadError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise DataLoadError(url, f"unreachable ({e})") from e
        finally:
            if self.client is None:
                await client.aclose()
