"""Memoization of analytics results keyed by trade content and parameters."""
import copy
import hashlib
from collections import OrderedDict
from typing import Any, Callable, Hashable

import pandas as pd

from tradejournal.core.logger import get_logger
from tradejournal.journal.frame import prepare_trades


logger = get_logger(__name__)


def trades_fingerprint(frame: pd.DataFrame) -> str:
    """
    SHA-1 of the columns analytics read from a prepared frame.

    Two collections with the same ids, tickers, timestamps and realized P&L
    in the same order share a fingerprint, whatever object holds them.
    """
    if frame.empty:
        return hashlib.sha1(b'').hexdigest()

    content = pd.DataFrame({
        'id': frame['id'].fillna('').astype(str),
        'ticker': frame['ticker'].fillna('').astype(str),
        'timestamp': frame['timestamp'],
        'realized_pl': frame['realized_pl'],
    })
    hashed = pd.util.hash_pandas_object(content, index=False).to_numpy()
    return hashlib.sha1(hashed.tobytes()).hexdigest()


def _freeze(value: Any) -> Hashable:
    if isinstance(value, dict):
        return tuple(sorted((key, _freeze(item)) for key, item in value.items()))
    if isinstance(value, (list, tuple, set)):
        return tuple(_freeze(item) for item in value)
    return value


class AnalyticsCache:
    """
    Least-recently-used cache of analytics results.

    Keys are (name, trades fingerprint, frozen params), so a result is reused
    only while both the trade content and the parameters are unchanged.
    Results are deep-copied on the way in and out; a caller mutating what
    it got back never changes what the next caller sees.

    Usage:
        cache = AnalyticsCache(max_entries=128)
        metrics = cache.get_or_compute(
            'metrics', trades, {'initial_capital': 10000},
            lambda frame: compute_metrics(frame, initial_capital=10000),
        )
    """

    def __init__(self, max_entries: int = 128):
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.max_entries = max_entries
        self._entries: OrderedDict[tuple, Any] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_compute(
        self,
        name: str,
        trades,
        params: dict[str, Any] | None,
        compute: Callable[[pd.DataFrame], Any]
    ) -> Any:
        """
        Return the cached result for (name, trades, params) or compute it.

        Args:
            name: Analytic name, part of the key
            trades: Trade collection; prepared once and handed to ``compute``
            params: Parameters of the call, part of the key
            compute: Callable taking the prepared frame

        Returns:
            Deep copy of the result
        """
        frame = prepare_trades(trades)
        key = (name, trades_fingerprint(frame), _freeze(params or {}))

        if key in self._entries:
            self._entries.move_to_end(key)
            self.hits += 1
            logger.debug(f"Cache hit for {name}")
            return copy.deepcopy(self._entries[key])

        self.misses += 1
        result = compute(frame)
        self._entries[key] = copy.deepcopy(result)
        if len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Cache full, evicted {evicted[0]}")

        return result

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0
