"""Tests for the analytics cache."""
import pytest

from tradejournal.analytics.cache import AnalyticsCache, trades_fingerprint
from tradejournal.analytics.metrics import compute_metrics
from tradejournal.journal.frame import prepare_trades


@pytest.fixture
def trades():
    return [
        {'id': '1', 'ticker': 'AAPL', 'timestamp': '2024-03-04T10:00:00', 'realized_pl': 500.0},
        {'id': '2', 'ticker': 'AAPL', 'timestamp': '2024-03-05T10:00:00', 'realized_pl': -250.0},
    ]


class _Counter:
    """Compute function that records how often it ran."""

    def __init__(self, result=None):
        self.calls = 0
        self.result = result

    def __call__(self, frame):
        self.calls += 1
        if self.result is not None:
            return self.result
        return compute_metrics(frame)


class TestAnalyticsCache:
    """Tests for AnalyticsCache."""

    def test_hit_after_miss(self, trades):
        """Second call with the same trades and params is served from cache."""
        cache = AnalyticsCache()
        compute = _Counter()

        first = cache.get_or_compute('metrics', trades, {'capital': 0}, compute)
        second = cache.get_or_compute('metrics', trades, {'capital': 0}, compute)

        assert compute.calls == 1
        assert first == second
        assert (cache.hits, cache.misses) == (1, 1)

    def test_equal_content_new_list(self, trades):
        """A rebuilt collection with the same content hits."""
        cache = AnalyticsCache()
        compute = _Counter()

        cache.get_or_compute('metrics', trades, None, compute)
        cache.get_or_compute('metrics', [dict(t) for t in trades], None, compute)

        assert compute.calls == 1

    def test_changed_trades_miss(self, trades):
        cache = AnalyticsCache()
        compute = _Counter()

        cache.get_or_compute('metrics', trades, None, compute)
        changed = trades + [{'id': '3', 'ticker': 'MSFT', 'timestamp': '2024-03-06T10:00:00', 'realized_pl': 1.0}]
        cache.get_or_compute('metrics', changed, None, compute)

        assert compute.calls == 2

    def test_different_params_miss(self, trades):
        cache = AnalyticsCache()
        compute = _Counter()

        cache.get_or_compute('metrics', trades, {'capital': 0}, compute)
        cache.get_or_compute('metrics', trades, {'capital': 1000}, compute)
        cache.get_or_compute('series', trades, {'capital': 0}, compute)

        assert compute.calls == 3
        assert len(cache) == 3

    def test_param_order_irrelevant(self, trades):
        cache = AnalyticsCache()
        compute = _Counter()

        cache.get_or_compute('series', trades, {'a': 1, 'b': [1, 2]}, compute)
        cache.get_or_compute('series', trades, {'b': [1, 2], 'a': 1}, compute)

        assert compute.calls == 1

    def test_results_isolated(self, trades):
        """Mutating a returned result does not change the cached one."""
        cache = AnalyticsCache()
        compute = _Counter(result={'values': [1, 2]})

        first = cache.get_or_compute('x', trades, None, compute)
        first['values'].append(3)
        second = cache.get_or_compute('x', trades, None, compute)
        second['values'].append(4)
        third = cache.get_or_compute('x', trades, None, compute)

        assert third == {'values': [1, 2]}

    def test_lru_eviction(self, trades):
        """The least recently used entry is evicted first."""
        cache = AnalyticsCache(max_entries=2)
        compute = _Counter()

        cache.get_or_compute('a', trades, None, compute)
        cache.get_or_compute('b', trades, None, compute)
        cache.get_or_compute('a', trades, None, compute)  # refresh 'a'
        cache.get_or_compute('c', trades, None, compute)  # evicts 'b'
        assert compute.calls == 3

        cache.get_or_compute('a', trades, None, compute)
        assert compute.calls == 3, "'a' should still be cached"

        cache.get_or_compute('b', trades, None, compute)
        assert compute.calls == 4, "'b' should have been evicted"
        assert len(cache) == 2

    def test_clear(self, trades):
        cache = AnalyticsCache()
        compute = _Counter()
        cache.get_or_compute('metrics', trades, None, compute)

        cache.clear()

        assert len(cache) == 0
        assert (cache.hits, cache.misses) == (0, 0)
        cache.get_or_compute('metrics', trades, None, compute)
        assert compute.calls == 2

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            AnalyticsCache(max_entries=0)


class TestFingerprint:
    """Tests for trades_fingerprint."""

    def test_stable(self, trades):
        assert trades_fingerprint(prepare_trades(trades)) == trades_fingerprint(prepare_trades(trades))

    def test_pl_change(self, trades):
        changed = [dict(trades[0]), dict(trades[1], realized_pl=-251.0)]
        assert trades_fingerprint(prepare_trades(trades)) != trades_fingerprint(prepare_trades(changed))

    def test_malformed_records_ignored(self, trades):
        """Records the validity filter drops do not change the fingerprint."""
        dirty = trades + [{'id': 'x', 'timestamp': 'never', 'realized_pl': 5.0}]
        assert trades_fingerprint(prepare_trades(dirty)) == trades_fingerprint(prepare_trades(trades))
