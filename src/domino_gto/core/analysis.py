"""Analysis facade: tiering, caching and search behind one call.

``Analyzer.analyze`` is the only entry point embedding applications need.
It never raises: any fault during keying, caching or search degrades to
:func:`default_analysis`.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

import numpy as np

from domino_gto.core.cache import PositionCache, position_key
from domino_gto.core.config import AnalysisConfig
from domino_gto.core.errors import AnalysisFailure
from domino_gto.core.evaluation import evaluate
from domino_gto.core.game_state import GameState, Variant
from domino_gto.core.moves import Move, Pass, Play
from domino_gto.core.search import Evaluator, SearchResult, search

logger = logging.getLogger(__name__)


class Tier(Enum):
    """Search-depth presets, shallow to deep."""

    FREE = "free"
    BASIC = "basic"
    PRO = "pro"

    @classmethod
    def parse(cls, value: Tier | str | None) -> Tier:
        """Coerce a tier or tier name; unknown names fall back to ``FREE``."""
        if isinstance(value, Tier):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.debug("Unknown analysis tier %r; using %s", value, cls.FREE.value)
            return cls.FREE


@dataclass(frozen=True)
class Suggestion:
    """A human-readable piece of advice with a confidence in [0, 100]."""

    title: str
    description: str
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "description": self.description, "confidence": self.confidence}


@dataclass(frozen=True)
class AnalysisResult:
    """What the facade reports for one position.

    Attributes:
        best_move: The recommended move, or None when unavailable.
        evaluation: The backed-up search score.
        win_probability: Estimated win chance, an integer in [0, 100].
        suggestions: Advice ranked by descending confidence.
        depth: The search depth used (0 for the default result).
        analysis_time_ms: Wall-clock time spent searching.
        from_cache: True when served from the position cache.
    """

    best_move: Move | None
    evaluation: float
    win_probability: int
    suggestions: tuple[Suggestion, ...]
    depth: int
    analysis_time_ms: float
    from_cache: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping for display or telemetry storage."""
        move: dict[str, Any] | None
        if isinstance(self.best_move, Play):
            move = {
                "type": "play",
                "domino": list(self.best_move.domino.values()),
                "position": self.best_move.end.value if self.best_move.end else "start",
                "orientation": self.best_move.orientation.value,
            }
        elif isinstance(self.best_move, Pass):
            move = {"type": "pass"}
        else:
            move = None
        return {
            "bestMove": move,
            "evaluation": self.evaluation,
            "winProbability": self.win_probability,
            "suggestions": [s.to_dict() for s in self.suggestions],
            "depth": self.depth,
            "analysisTime": self.analysis_time_ms,
            "fromCache": self.from_cache,
        }


def win_probability(score: float, scale: float = 100.0) -> int:
    """Squash a raw score into a whole-number win percentage.

    Uses the logistic curve ``1 / (1 + exp(-score / scale))``, so a score of
    zero maps to 50.
    """
    x = np.clip(-float(score) / scale, -700.0, 700.0)
    p = 1.0 / (1.0 + np.exp(x))
    return int(np.floor(p * 100.0 + 0.5))


def build_suggestions(state: GameState, result: SearchResult) -> tuple[Suggestion, ...]:
    """Turn a search result into advice ranked by confidence."""
    suggestions: list[Suggestion] = []
    move = result.move

    if isinstance(move, Play):
        a, b = move.domino.values()
        if move.end is None:
            description = f"Best move: Open the line of play with the {a}-{b} domino"
        else:
            description = f"Best move: Place the {a}-{b} domino on the {move.end.value} side"
        suggestions.append(
            Suggestion(
                title=f"Play {a}-{b}",
                description=description,
                confidence=min(95.0, 60.0 + abs(float(result.score)) / 10.0),
            )
        )
        if state.variant.is_scoring():
            points = state.apply_move(move).board.scoring_points()
            if points:
                suggestions.append(
                    Suggestion(
                        title=f"Score {points}",
                        description=f"Playing {a}-{b} makes the open ends total {points}",
                        confidence=90.0,
                    )
                )
    elif isinstance(move, Pass):
        suggestions.append(
            Suggestion(title="Pass", description="No legal moves available - must pass", confidence=100.0)
        )

    if state.variant is Variant.FIVES:
        suggestions.append(
            Suggestion(
                title="Focus on Scoring",
                description="Look for moves that create multiples of 5 on the board ends",
                confidence=75.0,
            )
        )
    else:
        suggestions.append(
            Suggestion(
                title="Empty Your Hand",
                description="Every domino left in hand counts against you; shed heavy tiles early",
                confidence=70.0,
            )
        )

    return tuple(sorted(suggestions, key=lambda s: s.confidence, reverse=True))


def default_analysis() -> AnalysisResult:
    """Return the neutral result reported when analysis is unavailable."""
    return AnalysisResult(
        best_move=None,
        evaluation=0.0,
        win_probability=50,
        suggestions=(
            Suggestion(
                title="Analysis Unavailable",
                description="Unable to analyze position at this time",
                confidence=0.0,
            ),
        ),
        depth=0,
        analysis_time_ms=0.0,
    )


class Analyzer:
    """Tiered, cached position analysis.

    One analyzer (and so one cache) can be shared by concurrent callers;
    searches themselves share no mutable state.
    """

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        cache: PositionCache | None = None,
        evaluator: Evaluator = evaluate,
    ) -> None:
        self.config = config if config is not None else AnalysisConfig()
        self.cache = (
            cache
            if cache is not None
            else PositionCache(
                max_entries=self.config.cache_max_entries,
                ttl_seconds=self.config.cache_ttl_seconds,
            )
        )
        self.evaluator = evaluator

    def depth_for(self, tier: Tier | str | None) -> int:
        """Return the search depth of ``tier`` (unknown tiers map to free)."""
        depths = {
            Tier.FREE: self.config.depth_free,
            Tier.BASIC: self.config.depth_basic,
            Tier.PRO: self.config.depth_pro,
        }
        return depths[Tier.parse(tier)]

    def analyze(self, state: GameState, tier: Tier | str | None = Tier.FREE) -> AnalysisResult:
        """Analyze ``state`` at the depth of ``tier``.

        Returns a fresh cached result marked ``from_cache=True`` when one
        exists and its move is still legal for ``state``; otherwise
        searches, stores and returns the new result.
        Failures are logged and reported as :func:`default_analysis`, which
        is never cached.
        """
        try:
            depth = self.depth_for(tier)
            key = position_key(state.board, state.mover, state.variant, depth)
            cached = self.cache.get(key)
            if cached is not None:
                # Keys ignore the hand, so a cached move may not be playable.
                if self._fits_hand(cached, state):
                    logger.debug("Cache hit for %s", key)
                    return replace(cached, from_cache=True)
                logger.debug("Cached move %s is not legal for this hand; recomputing", cached.best_move)

            result = self.run_lookahead(state, depth)
            self.cache.put(key, result, depth)
            return result
        except AnalysisFailure as exc:
            logger.error("Analysis failed: %s", exc, exc_info=exc.__cause__)
            return default_analysis()
        except Exception:
            logger.exception("Unexpected error while analyzing position")
            return default_analysis()

    @staticmethod
    def _fits_hand(cached: AnalysisResult, state: GameState) -> bool:
        if cached.best_move is None:
            return state.is_game_over()
        return cached.best_move in state.legal_moves()

    def run_lookahead(self, state: GameState, depth: int) -> AnalysisResult:
        """Search ``state`` to ``depth`` and package the result, uncached.

        Raises:
            AnalysisFailure: If the search raises.
        """
        started = time.perf_counter()
        try:
            outcome = search(state, depth, evaluator=self.evaluator)
        except Exception as exc:
            raise AnalysisFailure(f"Search to depth {depth} failed: {exc}") from exc
        elapsed_ms = (time.perf_counter() - started) * 1000.0

        return AnalysisResult(
            best_move=outcome.move,
            evaluation=float(outcome.score),
            win_probability=win_probability(outcome.score, self.config.win_probability_scale),
            suggestions=build_suggestions(state, outcome),
            depth=depth,
            analysis_time_ms=elapsed_ms,
            from_cache=False,
        )

    def cache_stats(self) -> dict[str, float]:
        """Return the position cache's size and hit/miss/eviction counters."""
        return self.cache.stats()
