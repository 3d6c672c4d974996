"""Position cache: canonical position keys and a bounded, expiring table."""

from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from domino_gto.core.board import Layout
from domino_gto.core.config import DEFAULT_CACHE_SIZE, DEFAULT_CACHE_TTL_SECONDS
from domino_gto.core.game_state import Seat, Variant
from domino_gto.core.tiles import Tile

if TYPE_CHECKING:
    from domino_gto.core.analysis import AnalysisResult

logger = logging.getLogger(__name__)


def normalize_board(board: Layout | Iterable[Tile | Iterable[int]]) -> list[list[int]]:
    """Return the board's dominoes as sorted ascending pip pairs."""
    tiles = board.tiles() if isinstance(board, Layout) else (Tile.parse(t) for t in board)
    return [list(tile.values()) for tile in sorted(tiles)]


def position_key(
    board: Layout | Iterable[Tile | Iterable[int]],
    mover: Seat | str,
    variant: Variant | str,
    depth: int,
) -> str:
    """Return the cache key of a position searched to ``depth``.

    The board is reduced to its sorted dominoes, so play order and layout
    do not affect the key. The JSON encoding is fixed (sorted keys, no
    whitespace), which makes the SHA-256 digest identical across platforms.

    Returns:
        ``"<hex digest>_<depth>"``.
    """
    payload = {
        "board": normalize_board(board),
        "player": Seat(mover).value,
        "gameType": Variant.parse(variant).value,
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    digest = hashlib.sha256(encoded.encode("utf-8")).hexdigest()
    return f"{digest}_{int(depth)}"


@dataclass(frozen=True)
class CacheEntry:
    """A stored analysis and when it was stored."""

    key: str
    depth: int
    result: AnalysisResult
    created_at: float

    def age(self, now: float) -> float:
        return now - self.created_at


class PositionCache:
    """Bounded, expiring memo of analyses keyed by :func:`position_key`.

    When full, the oldest-inserted entry is evicted. Reads do not refresh
    recency, so this approximates LRU rather than implementing it. Entries
    older than the TTL read as misses but stay resident until evicted or
    purged. All access is serialized by a lock; concurrent writes to the
    same key are last-write-wins.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_CACHE_SIZE,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache.

        Args:
            max_entries: Maximum number of entries before eviction.
            ttl_seconds: Wall-clock age after which an entry is stale.
            clock: Source of the current time in seconds.
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1.")
        self._table: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self._clock = clock
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: str) -> AnalysisResult | None:
        """Return the fresh result stored under ``key``, if any."""
        with self._lock:
            entry = self._table.get(key)
            if entry is None or entry.age(self._clock()) >= self.ttl_seconds:
                self.misses += 1
                return None
            self.hits += 1
            return entry.result

    def put(self, key: str, result: AnalysisResult, depth: int | None = None) -> None:
        """Store ``result`` under ``key``, evicting the oldest entry if full.

        Re-storing an existing key replaces it and counts as a fresh
        insertion for eviction order.
        """
        entry = CacheEntry(
            key=key,
            depth=result.depth if depth is None else depth,
            result=result,
            created_at=self._clock(),
        )
        with self._lock:
            if key in self._table:
                del self._table[key]
            elif len(self._table) >= self.max_entries:
                evicted, _ = self._table.popitem(last=False)
                self.evictions += 1
                logger.debug("Position cache full; evicted %s", evicted)
            self._table[key] = entry

    def entry(self, key: str) -> CacheEntry | None:
        """Return the raw entry under ``key`` regardless of age."""
        with self._lock:
            return self._table.get(key)

    def purge_expired(self) -> int:
        """Drop every stale entry and return how many were removed."""
        with self._lock:
            now = self._clock()
            stale = [k for k, e in self._table.items() if e.age(now) >= self.ttl_seconds]
            for key in stale:
                del self._table[key]
        return len(stale)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._table

    def __len__(self) -> int:
        with self._lock:
            return len(self._table)

    def clear(self) -> None:
        """Clear all entries and reset stats."""
        with self._lock:
            self._table.clear()
            self.hits = 0
            self.misses = 0
            self.evictions = 0

    def stats(self) -> dict[str, float]:
        """Return entries, max_entries, hits, misses, evictions and hit_rate."""
        with self._lock:
            lookups = self.hits + self.misses
            return {
                "entries": len(self._table),
                "max_entries": self.max_entries,
                "hits": self.hits,
                "misses": self.misses,
                "evictions": self.evictions,
                "hit_rate": self.hits / lookups if lookups else 0.0,
            }
