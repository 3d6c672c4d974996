"""Analytical core of the domino strategy tool."""

from domino_gto.core.analysis import (
    AnalysisResult,
    Analyzer,
    Suggestion,
    Tier,
    build_suggestions,
    default_analysis,
    win_probability,
)
from domino_gto.core.board import (
    Board,
    DropZone,
    End,
    Layout,
    LayoutSnapshot,
    OpenEnds,
    Orientation,
    Placement,
)
from domino_gto.core.cache import CacheEntry, PositionCache, position_key
from domino_gto.core.config import AnalysisConfig
from domino_gto.core.errors import AnalysisFailure, DominoError, IllegalMove, InvalidState
from domino_gto.core.evaluation import LOSS_SCORE, WIN_SCORE, evaluate
from domino_gto.core.game_state import GameState, Seat, Variant
from domino_gto.core.moves import Move, MoveOrientation, Pass, Play, legal_moves, opening_moves
from domino_gto.core.search import SearchResult, search
from domino_gto.core.tiles import Tile, generate_full_set

__all__ = [
    "AnalysisConfig",
    "AnalysisFailure",
    "AnalysisResult",
    "Analyzer",
    "Board",
    "CacheEntry",
    "DominoError",
    "DropZone",
    "End",
    "GameState",
    "IllegalMove",
    "InvalidState",
    "LOSS_SCORE",
    "Layout",
    "LayoutSnapshot",
    "Move",
    "MoveOrientation",
    "OpenEnds",
    "Orientation",
    "Pass",
    "Placement",
    "Play",
    "PositionCache",
    "SearchResult",
    "Seat",
    "Suggestion",
    "Tier",
    "Tile",
    "Variant",
    "WIN_SCORE",
    "build_suggestions",
    "default_analysis",
    "evaluate",
    "generate_full_set",
    "legal_moves",
    "opening_moves",
    "position_key",
    "search",
    "win_probability",
]
