"""Hand-authored position evaluation.

Scores are always from the advised player's point of view. The terms are
deliberately simple and deterministic; reproducibility matters more here
than playing strength.
"""

from __future__ import annotations

from collections.abc import Iterable

from domino_gto.core.game_state import GameState, Variant
from domino_gto.core.tiles import Tile

# Terminal scores. An empty hand is a win for its holder.
WIN_SCORE = 1000
LOSS_SCORE = -1000

DOUBLE_BONUS = 2
BOARD_CONTROL_WEIGHT = 5
HAND_SIZE_PENALTY = 10


def hand_strength(hand: Iterable[Tile]) -> int:
    """Return the pip total of ``hand`` plus a bonus per double held."""
    return sum(tile.pip_count() + (DOUBLE_BONUS if tile.is_double() else 0) for tile in hand)


def board_control(state: GameState) -> int:
    """Return a flat reward proportional to the number of dominoes played.

    This is a heuristic with no theoretical grounding and is kept in this
    exact linear form for behavioural compatibility.
    """
    return len(state.board) * BOARD_CONTROL_WEIGHT


def scoring_potential(state: GameState) -> int:
    """Reward a board whose open ends already sum to a multiple of five.

    Only the scoring variant earns this; the reward is the sum itself.
    """
    if not state.variant.is_scoring() or state.board.is_empty():
        return 0
    total = state.board.score()
    return total if total % 5 == 0 else 0


def variant_modifier(state: GameState) -> int:
    """Return the variant-specific adjustment.

    All Fives uses the score differential; block and draw penalise every
    domino still in hand, favouring lines that empty it fastest.
    """
    if state.variant is Variant.FIVES:
        return state.your_score - state.opponent_score
    if state.variant in (Variant.BLOCK, Variant.DRAW):
        return -len(state.hand) * HAND_SIZE_PENALTY
    return 0


def game_over_score(state: GameState) -> int:
    """Return the terminal score for a finished position."""
    return WIN_SCORE if not state.hand else LOSS_SCORE


def evaluate(state: GameState) -> int:
    """Score ``state`` for the advised player.

    Terminal positions return the fixed win/loss constant without falling
    through to the heuristic terms.

    Args:
        state: The position to score.

    Returns:
        The heuristic score; larger is better for the advised player.
    """
    if state.is_game_over():
        return game_over_score(state)

    return (
        hand_strength(state.hand)
        + board_control(state)
        + scoring_potential(state)
        + variant_modifier(state)
    )
