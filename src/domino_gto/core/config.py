"""Runtime configuration for the analysis facade.

Defaults can be overridden through environment variables, read once by
:meth:`AnalysisConfig.from_env`:

- ``DOMINO_GTO_CACHE_SIZE``: maximum cached analyses (default 10000)
- ``DOMINO_GTO_CACHE_TTL``: cache entry lifetime in seconds (default 86400)
- ``DOMINO_GTO_DEPTH_FREE`` / ``_BASIC`` / ``_PRO``: tier search depths
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_CACHE_SIZE = 10_000
DEFAULT_CACHE_TTL_SECONDS = 24 * 60 * 60


def _read_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class AnalysisConfig:
    """Tunable limits for caching and search.

    Attributes:
        cache_max_entries: Capacity of the position cache.
        cache_ttl_seconds: Age after which a cached analysis is stale.
        depth_free: Search depth of the free tier.
        depth_basic: Search depth of the basic tier.
        depth_pro: Search depth of the pro tier.
        win_probability_scale: Divisor applied to the raw score before the
            logistic squashing.
    """

    cache_max_entries: int = DEFAULT_CACHE_SIZE
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    depth_free: int = 2
    depth_basic: int = 5
    depth_pro: int = 10
    win_probability_scale: float = 100.0

    def __post_init__(self) -> None:
        if self.cache_max_entries < 1:
            raise ValueError("cache_max_entries must be at least 1.")
        if self.cache_ttl_seconds <= 0:
            raise ValueError("cache_ttl_seconds must be positive.")
        if min(self.depth_free, self.depth_basic, self.depth_pro) < 0:
            raise ValueError("Tier depths cannot be negative.")
        if self.win_probability_scale <= 0:
            raise ValueError("win_probability_scale must be positive.")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AnalysisConfig:
        """Build a config from ``environ`` (default ``os.environ``).

        Raises:
            ValueError: If a variable is set to a non-integer or the
                resulting limits are out of range.
        """
        env = os.environ if environ is None else environ
        return cls(
            cache_max_entries=_read_int(env, "DOMINO_GTO_CACHE_SIZE", DEFAULT_CACHE_SIZE),
            cache_ttl_seconds=_read_int(env, "DOMINO_GTO_CACHE_TTL", DEFAULT_CACHE_TTL_SECONDS),
            depth_free=_read_int(env, "DOMINO_GTO_DEPTH_FREE", cls.depth_free),
            depth_basic=_read_int(env, "DOMINO_GTO_DEPTH_BASIC", cls.depth_basic),
            depth_pro=_read_int(env, "DOMINO_GTO_DEPTH_PRO", cls.depth_pro),
        )
