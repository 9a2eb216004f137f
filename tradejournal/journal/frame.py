"""Turn raw trade records into the validated frame every analytic works on."""
import math
import numbers
from typing import Any, Iterable, Mapping, Optional

import numpy as np
import pandas as pd

from tradejournal.core.logger import get_logger
from tradejournal.journal.trade import Trade


logger = get_logger(__name__)

TRADE_COLUMNS = [
    'id', 'ticker', 'direction', 'quantity', 'entry_price',
    'exit_price', 'timestamp', 'realized_pl', 'notes',
]

# Stored documents use camelCase
FIELD_ALIASES = {
    'entryPrice': 'entry_price',
    'exitPrice': 'exit_price',
    'realizedPL': 'realized_pl',
    'realizedPl': 'realized_pl',
}

PREPARED_FLAG = 'tradejournal_prepared'


def _to_local(ts: pd.Timestamp) -> pd.Timestamp:
    """Naive local wall time of an aware timestamp, with the offset in force at that instant."""
    return pd.Timestamp(ts.to_pydatetime(warn=False).astimezone()).tz_localize(None)


def coerce_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """
    Parse a trade timestamp into a naive local pd.Timestamp.

    Accepts datetime/date objects, pd.Timestamp, ISO-like strings, and
    numbers (epoch milliseconds, like stored JavaScript dates). Numbers and
    timezone-aware values are instants: they are converted to the local zone
    (DST included) before the zone is dropped, so bucketing uses the local
    calendar. Naive values are already local wall time.

    Returns:
        Naive pd.Timestamp, or None if the value cannot be parsed
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        if isinstance(value, numbers.Real):
            if not math.isfinite(float(value)):
                return None
            ts = pd.Timestamp(int(value), unit='ms', tz='UTC')
        else:
            ts = pd.Timestamp(value)
    except (ValueError, TypeError, OverflowError):
        return None

    if pd.isna(ts):
        return None

    if ts.tzinfo is not None:
        try:
            ts = _to_local(ts)
        except (ValueError, OverflowError, OSError):
            return None

    return ts


def coerce_pl(value: Any) -> Optional[float]:
    """Return a finite float for a numeric realized P&L, else None."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def _record_to_dict(record: Any) -> Optional[dict]:
    if isinstance(record, Trade):
        return record.model_dump()
    if isinstance(record, Mapping):
        return {FIELD_ALIASES.get(key, key): value for key, value in record.items()}
    return None


def empty_trades_frame() -> pd.DataFrame:
    """Empty frame with the prepared column layout and dtypes."""
    frame = pd.DataFrame(columns=TRADE_COLUMNS)
    frame['timestamp'] = pd.to_datetime(frame['timestamp'])
    frame['realized_pl'] = frame['realized_pl'].astype(float)
    frame.attrs[PREPARED_FLAG] = True
    return frame


def prepare_trades(trades: Iterable[Any] | pd.DataFrame | None) -> pd.DataFrame:
    """
    Filter a trade collection down to the records analytics can use.

    Args:
        trades: Iterable of Trade models or mappings (snake_case or camelCase
                keys), or a DataFrame with the same columns

    Returns:
        DataFrame with TRADE_COLUMNS, sorted by timestamp (stable), holding
        only records with a parseable timestamp and a finite numeric
        realized_pl. Tickers are upper-cased.

    Notes:
        - Never raises on malformed records; they are dropped and counted
        - realized_pl is taken as stored and never recomputed from prices
        - Already-prepared frames (and slices of them) are returned as is
          while still in time order; re-sorted ones are prepared again
    """
    if trades is None:
        return empty_trades_frame()

    if isinstance(trades, pd.DataFrame):
        if trades.attrs.get(PREPARED_FLAG) and trades['timestamp'].is_monotonic_increasing:
            return trades
        records = trades.to_dict('records')
    else:
        records = list(trades)

    rows = []
    dropped = 0
    for record in records:
        data = _record_to_dict(record)
        if data is None:
            dropped += 1
            continue

        timestamp = coerce_timestamp(data.get('timestamp'))
        realized_pl = coerce_pl(data.get('realized_pl'))
        if timestamp is None or realized_pl is None:
            dropped += 1
            continue

        ticker = data.get('ticker')
        notes = data.get('notes')
        rows.append({
            'id': None if data.get('id') is None else str(data.get('id')),
            'ticker': '' if ticker is None else str(ticker).strip().upper(),
            'direction': data.get('direction'),
            'quantity': data.get('quantity'),
            'entry_price': data.get('entry_price'),
            'exit_price': data.get('exit_price'),
            'timestamp': timestamp,
            'realized_pl': realized_pl,
            'notes': None if notes is None or (isinstance(notes, float) and np.isnan(notes)) else notes,
        })

    if dropped:
        logger.debug(f"Dropped {dropped} malformed trade records out of {len(records)}")

    if not rows:
        return empty_trades_frame()

    frame = pd.DataFrame(rows, columns=TRADE_COLUMNS)
    frame['timestamp'] = pd.to_datetime(frame['timestamp'])
    frame['realized_pl'] = frame['realized_pl'].astype(float)
    frame = frame.sort_values('timestamp', kind='mergesort').reset_index(drop=True)
    frame.attrs[PREPARED_FLAG] = True

    return frame
