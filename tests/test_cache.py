"""Tests for position keys and the position cache."""

from __future__ import annotations

import hashlib
import threading

import pytest

from domino_gto.core.analysis import AnalysisResult, Suggestion
from domino_gto.core.board import Layout
from domino_gto.core.cache import PositionCache, normalize_board, position_key
from domino_gto.core.game_state import Seat, Variant
from domino_gto.core.tiles import Tile

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _result(evaluation: float = 0.0, depth: int = 2) -> AnalysisResult:
    return AnalysisResult(
        best_move=None,
        evaluation=evaluation,
        win_probability=50,
        suggestions=(Suggestion("t", "d", 50.0),),
        depth=depth,
        analysis_time_ms=1.0,
    )


# ---------------------------------------------------------------------------
# position_key
# ---------------------------------------------------------------------------


class TestPositionKey:
    """Tests for canonical position hashing."""

    def test_normalize_board_sorts(self) -> None:
        assert normalize_board([[6, 2], [1, 1], [3, 0]]) == [[0, 3], [1, 1], [2, 6]]

    def test_order_and_pip_order_do_not_matter(self) -> None:
        k1 = position_key([[6, 2], [6, 6]], Seat.PLAYER, Variant.FIVES, 2)
        k2 = position_key([[6, 6], [2, 6]], "player", "fives", 2)
        assert k1 == k2

    def test_layout_and_pairs_agree(self) -> None:
        layout = Layout.from_tiles([[6, 6], [6, 2]])
        assert position_key(layout, Seat.PLAYER, Variant.FIVES, 2) == position_key(
            [[2, 6], [6, 6]], Seat.PLAYER, Variant.FIVES, 2
        )

    def test_components_change_key(self) -> None:
        base = position_key([[1, 2]], Seat.PLAYER, Variant.FIVES, 2)
        assert base != position_key([[1, 3]], Seat.PLAYER, Variant.FIVES, 2)
        assert base != position_key([[1, 2]], Seat.OPPONENT, Variant.FIVES, 2)
        assert base != position_key([[1, 2]], Seat.PLAYER, Variant.BLOCK, 2)
        assert base != position_key([[1, 2]], Seat.PLAYER, Variant.FIVES, 5)

    def test_key_is_fixed_digest(self) -> None:
        payload = b'{"board":[[1,2]],"gameType":"fives","player":"player"}'
        expected = hashlib.sha256(payload).hexdigest() + "_2"
        assert position_key([[2, 1]], Seat.PLAYER, Variant.FIVES, 2) == expected


# ---------------------------------------------------------------------------
# PositionCache
# ---------------------------------------------------------------------------


class TestPositionCache:
    """Tests for storage, expiry and eviction."""

    def test_put_then_get(self) -> None:
        cache = PositionCache()
        result = _result()
        cache.put("k", result)
        assert cache.get("k") is result
        assert cache.entry("k").depth == 2  # type: ignore[union-attr]

    def test_miss(self) -> None:
        assert PositionCache().get("missing") is None

    def test_stale_entry_is_a_miss_but_kept(self) -> None:
        clock = FakeClock()
        cache = PositionCache(ttl_seconds=60, clock=clock)
        cache.put("k", _result())
        clock.now += 59
        assert cache.get("k") is not None
        clock.now += 1
        assert cache.get("k") is None
        assert "k" in cache

    def test_purge_expired(self) -> None:
        clock = FakeClock()
        cache = PositionCache(ttl_seconds=60, clock=clock)
        cache.put("old", _result())
        clock.now += 30
        cache.put("new", _result())
        clock.now += 40
        assert cache.purge_expired() == 1
        assert "old" not in cache
        assert "new" in cache

    def test_evicts_oldest_inserted(self) -> None:
        cache = PositionCache(max_entries=2)
        cache.put("a", _result())
        cache.put("b", _result())
        cache.get("a")  # reads do not refresh insertion order
        cache.put("c", _result())
        assert "a" not in cache
        assert "b" in cache and "c" in cache
        assert cache.evictions == 1

    def test_reinsert_counts_as_newest(self) -> None:
        cache = PositionCache(max_entries=2)
        cache.put("a", _result(1.0))
        cache.put("b", _result())
        cache.put("a", _result(2.0))
        cache.put("c", _result())
        assert "b" not in cache
        assert cache.get("a").evaluation == 2.0  # type: ignore[union-attr]

    def test_overwrite_is_last_write_wins(self) -> None:
        cache = PositionCache()
        cache.put("k", _result(1.0))
        cache.put("k", _result(2.0))
        assert len(cache) == 1
        assert cache.get("k").evaluation == 2.0  # type: ignore[union-attr]

    def test_stats_and_clear(self) -> None:
        cache = PositionCache()
        cache.put("k", _result())
        cache.get("k")
        cache.get("nope")
        stats = cache.stats()
        assert (stats["hits"], stats["misses"], stats["entries"]) == (1, 1, 1)
        assert stats["hit_rate"] == 0.5
        cache.clear()
        assert len(cache) == 0
        assert cache.stats()["hits"] == 0

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError, match="at least 1"):
            PositionCache(max_entries=0)

    def test_concurrent_writers(self) -> None:
        cache = PositionCache(max_entries=50)

        def writer(offset: int) -> None:
            for i in range(200):
                cache.put(f"k{(i + offset) % 80}", _result(float(offset)))
                cache.get(f"k{i % 80}")

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(cache) == 50
