"""Tests for the analysis facade."""

from __future__ import annotations

import logging

import pytest

from domino_gto.core.analysis import (
    AnalysisResult,
    Analyzer,
    Tier,
    build_suggestions,
    default_analysis,
    win_probability,
)
from domino_gto.core.board import End, Layout
from domino_gto.core.cache import PositionCache
from domino_gto.core.config import AnalysisConfig
from domino_gto.core.game_state import GameState, Variant
from domino_gto.core.moves import MoveOrientation, Pass, Play
from domino_gto.core.search import SearchResult
from domino_gto.core.tiles import Tile

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

STATE = GameState(
    board=Layout().with_first(Tile(6, 6)),
    hand=(Tile(0, 1), Tile(2, 6), Tile(3, 6), Tile(1, 5)),
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class BrokenCache(PositionCache):
    def get(self, key: str) -> AnalysisResult | None:
        raise RuntimeError("cache backend down")


def _explode(state: GameState) -> float:
    raise KeyError("malformed state")


# ---------------------------------------------------------------------------
# Tiers and probabilities
# ---------------------------------------------------------------------------


class TestTier:
    """Tests for tier parsing and depth mapping."""

    def test_parse(self) -> None:
        assert Tier.parse("PRO") is Tier.PRO
        assert Tier.parse(Tier.BASIC) is Tier.BASIC

    @pytest.mark.parametrize("value", ["platinum", None, ""])
    def test_unknown_falls_back_to_free(self, value: str | None) -> None:
        assert Tier.parse(value) is Tier.FREE

    def test_depths(self) -> None:
        analyzer = Analyzer()
        assert [analyzer.depth_for(t) for t in Tier] == [2, 5, 10]
        assert analyzer.depth_for("enterprise") == 2

    def test_depths_follow_config(self) -> None:
        analyzer = Analyzer(AnalysisConfig(depth_basic=3))
        assert analyzer.depth_for("basic") == 3


class TestWinProbability:
    """Tests for logistic squashing."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [(0, 50), (100, 73), (-100, 27), (1000, 100), (-1000, 0), (1e9, 100), (-1e9, 0)],
    )
    def test_values(self, score: float, expected: int) -> None:
        assert win_probability(score) == expected

    def test_scale(self) -> None:
        assert win_probability(100, scale=1e9) == 50

    def test_monotonic(self) -> None:
        values = [win_probability(s) for s in range(-500, 501, 25)]
        assert values == sorted(values)


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


class TestSuggestions:
    """Tests for human-readable advice."""

    def test_play_and_scoring_hint(self) -> None:
        state = GameState(board=Layout().with_first(Tile(1, 2)), hand=(Tile(2, 4),))
        move = Play(Tile(2, 4), End.RIGHT, MoveOrientation.NORMAL)
        suggestions = build_suggestions(state, SearchResult(score=50, move=move))
        assert [s.title for s in suggestions] == ["Score 5", "Focus on Scoring", "Play 2-4"]
        assert suggestions[2].confidence == 65.0
        assert "right side" in suggestions[2].description

    def test_play_confidence_is_capped(self) -> None:
        state = GameState(board=Layout().with_first(Tile(1, 2)), hand=(Tile(2, 4),), variant=Variant.BLOCK)
        move = Play(Tile(2, 4), End.RIGHT, MoveOrientation.NORMAL)
        suggestions = build_suggestions(state, SearchResult(score=1000, move=move))
        assert suggestions[0].title == "Play 2-4"
        assert suggestions[0].confidence == 95.0
        assert suggestions[1].title == "Empty Your Hand"

    def test_opening_play(self) -> None:
        state = GameState(hand=(Tile(3, 4),), variant=Variant.DRAW)
        suggestions = build_suggestions(state, SearchResult(score=0, move=Play(Tile(3, 4), None)))
        play = next(s for s in suggestions if s.title == "Play 3-4")
        assert "Open the line of play" in play.description

    def test_pass_ranks_first(self) -> None:
        suggestions = build_suggestions(STATE, SearchResult(score=0, move=Pass()))
        assert suggestions[0].title == "Pass"
        assert suggestions[0].confidence == 100.0

    def test_ranked_by_confidence(self) -> None:
        suggestions = build_suggestions(STATE, SearchResult(score=300, move=STATE.legal_moves()[0]))
        confidences = [s.confidence for s in suggestions]
        assert confidences == sorted(confidences, reverse=True)


# ---------------------------------------------------------------------------
# Analyzer
# ---------------------------------------------------------------------------


class TestAnalyze:
    """Tests for the end-to-end analyze call."""

    def test_fresh_analysis(self) -> None:
        result = Analyzer().analyze(STATE, "free")
        assert result.from_cache is False
        assert result.depth == 2
        assert result.best_move in STATE.legal_moves()
        assert 0 <= result.win_probability <= 100
        assert result.win_probability == win_probability(result.evaluation)
        assert result.analysis_time_ms >= 0
        assert result.suggestions

    def test_second_call_hits_cache(self) -> None:
        analyzer = Analyzer()
        first = analyzer.analyze(STATE, Tier.FREE)
        second = analyzer.analyze(STATE, Tier.FREE)
        assert second.from_cache is True
        assert second.best_move == first.best_move
        assert second.evaluation == first.evaluation
        assert analyzer.cache_stats()["hits"] == 1

    def test_tiers_cached_separately(self) -> None:
        analyzer = Analyzer(AnalysisConfig(depth_basic=3))
        analyzer.analyze(STATE, Tier.FREE)
        assert analyzer.analyze(STATE, Tier.BASIC).from_cache is False
        assert len(analyzer.cache) == 2

    def test_cached_move_not_in_hand_recomputes(self) -> None:
        analyzer = Analyzer()
        board = Layout().with_first(Tile(6, 6))
        first = GameState(board=board, hand=(Tile(3, 6), Tile(0, 1)))
        second = GameState(board=board, hand=(Tile(2, 6), Tile(0, 4)))
        cached = analyzer.analyze(first).best_move
        assert isinstance(cached, Play) and cached.domino == Tile(3, 6)

        result = analyzer.analyze(second)
        assert result.from_cache is False
        assert result.best_move in second.legal_moves()
        assert analyzer.analyze(second).from_cache is True

    def test_cached_pass_with_playable_hand_recomputes(self) -> None:
        analyzer = Analyzer()
        board = Layout().with_first(Tile(6, 6))
        assert analyzer.analyze(GameState(board=board, hand=(Tile(0, 1),))).best_move == Pass()

        result = analyzer.analyze(GameState(board=board, hand=(Tile(2, 6),)))
        assert result.from_cache is False
        assert isinstance(result.best_move, Play)
        assert result.best_move.domino == Tile(2, 6)

    def test_unknown_tier_uses_free_depth(self) -> None:
        assert Analyzer().analyze(STATE, "gold").depth == 2

    def test_stale_cache_recomputes(self) -> None:
        clock = FakeClock()
        analyzer = Analyzer(cache=PositionCache(ttl_seconds=10, clock=clock))
        analyzer.analyze(STATE)
        clock.now = 11
        assert analyzer.analyze(STATE).from_cache is False

    def test_terminal_state(self) -> None:
        state = GameState(board=Layout().with_first(Tile(1, 2)))
        result = Analyzer().analyze(state)
        assert result.best_move is None
        assert result.evaluation == 1000
        assert result.win_probability == 100

    def test_search_failure_degrades(self, caplog: pytest.LogCaptureFixture) -> None:
        analyzer = Analyzer(evaluator=_explode)
        with caplog.at_level(logging.ERROR, logger="domino_gto.core.analysis"):
            result = analyzer.analyze(STATE)
        assert result == default_analysis()
        assert len(analyzer.cache) == 0
        assert "Analysis failed" in caplog.text

    def test_cache_failure_degrades(self) -> None:
        result = Analyzer(cache=BrokenCache()).analyze(STATE)
        assert result == default_analysis()

    def test_does_not_mutate_state(self) -> None:
        before = STATE.to_snapshot()
        Analyzer().analyze(STATE, Tier.BASIC)
        assert STATE.to_snapshot() == before


class TestResultSerialization:
    """Tests for AnalysisResult.to_dict and the default result."""

    def test_default_analysis(self) -> None:
        result = default_analysis()
        assert result.best_move is None
        assert result.win_probability == 50
        assert result.depth == 0
        assert [s.title for s in result.suggestions] == ["Analysis Unavailable"]

    def test_to_dict_play(self) -> None:
        result = Analyzer().analyze(STATE)
        data = result.to_dict()
        assert data["bestMove"]["type"] == "play"
        assert data["bestMove"]["position"] in {"left", "right", "top", "bottom"}
        assert data["fromCache"] is False
        assert data["depth"] == 2
        assert all(set(s) == {"title", "description", "confidence"} for s in data["suggestions"])

    def test_to_dict_pass_and_none(self) -> None:
        blocked = GameState(board=Layout().with_first(Tile(6, 6)), hand=(Tile(0, 1),))
        assert Analyzer().analyze(blocked).to_dict()["bestMove"] == {"type": "pass"}
        assert default_analysis().to_dict()["bestMove"] is None
