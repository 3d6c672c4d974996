"""Fixed-depth minimax search with alpha-beta pruning.

The search maximizes for the advised player at the root and alternates
between maximizing and minimizing plies. It runs synchronously to the
requested depth (or until the hand empties) with no iterative deepening
or time cutoff. Each child position is a fresh immutable ``GameState``,
so branches share nothing mutable.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

from domino_gto.core.evaluation import evaluate
from domino_gto.core.game_state import GameState
from domino_gto.core.moves import Move

Evaluator = Callable[[GameState], float]


@dataclass(frozen=True)
class SearchResult:
    """Outcome of a search: the backed-up score and the move achieving it.

    ``move`` is None at the leaves (depth 0 or game over).
    """

    score: float
    move: Move | None


def search(
    state: GameState,
    depth: int,
    alpha: float = -math.inf,
    beta: float = math.inf,
    maximizing: bool = True,
    *,
    evaluator: Evaluator = evaluate,
) -> SearchResult:
    """Search ``state`` to ``depth`` plies and return the best line's score.

    Children are visited in legal-move order. Only a strictly better score
    replaces the current best, so ties keep the first move seen. Remaining
    siblings are skipped once ``beta <= alpha``.

    Args:
        state: The position to search.
        depth: Plies left to search; 0 evaluates ``state`` directly.
        alpha: Best score the maximizer is already assured of.
        beta: Best score the minimizer is already assured of.
        maximizing: Whether the side to move at this node maximizes.
        evaluator: Leaf scoring function.

    Returns:
        The backed-up score and the best move at this node.

    Raises:
        ValueError: If ``depth`` is negative.
    """
    if depth < 0:
        raise ValueError(f"Search depth must be non-negative, got {depth}.")
    if depth == 0 or state.is_game_over():
        return SearchResult(score=evaluator(state), move=None)

    best_move: Move | None = None
    if maximizing:
        best = -math.inf
        for move in state.legal_moves():
            child = search(state.apply_move(move), depth - 1, alpha, beta, False, evaluator=evaluator)
            if child.score > best:
                best, best_move = child.score, move
            alpha = max(alpha, child.score)
            if beta <= alpha:
                break
    else:
        best = math.inf
        for move in state.legal_moves():
            child = search(state.apply_move(move), depth - 1, alpha, beta, True, evaluator=evaluator)
            if child.score < best:
                best, best_move = child.score, move
            beta = min(beta, child.score)
            if beta <= alpha:
                break

    return SearchResult(score=best, move=best_move)
