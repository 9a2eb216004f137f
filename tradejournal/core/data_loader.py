"""Loading the journal's trade store.

The store is read-only from the analytics side: a JSON document list (as
exported from the journal) or a CSV file with one trade per row.
"""
import json
from pathlib import Path
from typing import Any

import pandas as pd

from tradejournal.core.constants import Paths
from tradejournal.core.logger import get_logger
from tradejournal.journal.frame import prepare_trades


logger = get_logger(__name__)


def resolve_store_path(path: str | Path | None = None) -> Path:
    """Store path; relative paths not found from the working directory resolve against the project root."""
    if path is None:
        return Paths.TRADES_FILE
    path = Path(path)
    if path.is_absolute() or path.exists():
        return path
    return Paths.ROOT / path


def load_trades(path: str | Path | None = None) -> list[dict[str, Any]]:
    """Load raw trade records from the store.

    Args:
        path: JSON (list of trades, or {"trades": [...]}) or CSV file
              (default: data/trades.json)

    Returns:
        List of trade dicts exactly as stored; nothing is validated here

    Raises:
        FileNotFoundError: If the store file does not exist
        ValueError: If a JSON store is neither a list nor holds a "trades" list
    """
    path = resolve_store_path(path)
    if not path.exists():
        raise FileNotFoundError(f"Trade store not found: {path}")

    logger.debug(f"Loading trades from {path}")

    if path.suffix.lower() == '.csv':
        records = pd.read_csv(path).to_dict('records')
    else:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        records = data.get('trades') if isinstance(data, dict) else data
        if not isinstance(records, list):
            raise ValueError(f"Trade store {path} must hold a list of trades")

    logger.info(f"Loaded {len(records)} trade records from {path.name}")

    return records


def load_trade_frame(path: str | Path | None = None) -> pd.DataFrame:
    """Load the store and keep only the records analytics can use."""
    return prepare_trades(load_trades(path))


def ensure_directory(path: Path) -> Path:
    """Ensure directory exists, create if necessary.

    Args:
        path: Directory path to ensure

    Returns:
        The path (for chaining)
    """
    path.mkdir(parents=True, exist_ok=True)
    return path
