"""Synthetic training positions.

Generates varied but legal positions (random middlegames, openings and
endgames) and pairs them with local analyses. Boards are laid out through
the board state machine, so every generated position could occur in play.
Shipping the samples to a training store is left to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from domino_gto.core.analysis import AnalysisResult, Analyzer, Tier
from domino_gto.core.board import Layout
from domino_gto.core.game_state import GameState, Variant
from domino_gto.core.tiles import Tile, generate_full_set

logger = logging.getLogger(__name__)

VARIANTS: tuple[Variant, ...] = (Variant.FIVES, Variant.DRAW, Variant.BLOCK)
HAND_SIZES: tuple[int, ...] = (7, 6, 5, 4, 3, 2, 1)
OPENING_STARTERS: tuple[Tile, ...] = (
    Tile(6, 6),
    Tile(5, 5),
    Tile(4, 4),
    Tile(5, 6),
    Tile(4, 6),
    Tile(4, 5),
)


@dataclass(frozen=True)
class TrainingSample:
    """A generated position, its kind and (optionally) its analysis."""

    state: GameState
    kind: str
    analysis: AnalysisResult | None = None


def _rng(rng: np.random.Generator | int | None) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def _shuffled(tiles: list[Tile], rng: np.random.Generator) -> list[Tile]:
    order = rng.permutation(len(tiles))
    return [tiles[i] for i in order]


def _lay_out(candidates: list[Tile], size: int) -> tuple[Layout, list[Tile]]:
    """Play candidates in order until ``size`` fit; return board and leftovers.

    Candidates that fit nowhere are retried on later passes, as long as a
    pass still places something.
    """
    layout = Layout()
    pending = list(candidates)
    progress = True
    while pending and progress and len(layout) < size:
        progress = False
        leftovers: list[Tile] = []
        for tile in pending:
            if len(layout) < size and (layout.is_empty() or layout.first_matching_end(tile) is not None):
                layout = layout.with_tile(tile)
                progress = True
            else:
                leftovers.append(tile)
        pending = leftovers
    return layout, pending


def random_position(
    rng: np.random.Generator | int | None = None,
    *,
    board_size: int | None = None,
    hand_size: int | None = None,
    variant: Variant | None = None,
) -> GameState:
    """Generate a random legal position.

    Args:
        rng: A numpy Generator, or a seed for a new one.
        board_size: Dominoes to lay out (default 1-10). Fewer may fit.
        hand_size: Dominoes to deal to the hand (default 1-7).
        variant: Variant to use (default random).

    Returns:
        A GameState whose hand and board are disjoint.
    """
    gen = _rng(rng)
    if variant is None:
        variant = VARIANTS[int(gen.integers(len(VARIANTS)))]
    if hand_size is None:
        hand_size = HAND_SIZES[int(gen.integers(len(HAND_SIZES)))]
    if board_size is None:
        board_size = int(gen.integers(1, 11))

    deck = _shuffled(sorted(generate_full_set()), gen)
    board, rest = _lay_out(deck, board_size)
    return GameState(
        board=board,
        hand=tuple(rest[:hand_size]),
        variant=variant,
        your_score=int(gen.integers(100)),
        opponent_score=int(gen.integers(100)),
        pass_count=int(gen.integers(3)),
        draw_count=int(gen.integers(5)),
    )


def opening_positions(
    rng: np.random.Generator | int | None = None,
    variations: int = 5,
) -> list[GameState]:
    """Generate All Fives openings: one common starter and a fresh hand of 7."""
    gen = _rng(rng)
    positions: list[GameState] = []
    for starter in OPENING_STARTERS:
        available = sorted(generate_full_set() - {starter})
        for _ in range(variations):
            hand = _shuffled(available, gen)[:7]
            positions.append(
                GameState(board=Layout().with_first(starter), hand=tuple(hand), variant=Variant.FIVES)
            )
    return positions


def endgame_positions(
    rng: np.random.Generator | int | None = None,
    variations: int = 10,
) -> list[GameState]:
    """Generate late positions: a long board, 1-3 dominoes in hand, scores in 20-99."""
    gen = _rng(rng)
    positions: list[GameState] = []
    for hand_size in (1, 2, 3):
        for _ in range(variations):
            base = random_position(gen, board_size=int(gen.integers(5, 20)), hand_size=hand_size)
            positions.append(
                GameState(
                    board=base.board,
                    hand=base.hand,
                    variant=base.variant,
                    your_score=int(gen.integers(20, 100)),
                    opponent_score=int(gen.integers(20, 100)),
                    pass_count=base.pass_count,
                    draw_count=base.draw_count,
                )
            )
    return positions


def generate_training_batch(
    analyzer: Analyzer,
    size: int = 50,
    rng: np.random.Generator | int | None = None,
    tier: Tier | str = Tier.PRO,
) -> list[TrainingSample]:
    """Generate ``size`` random positions, each with its analysis at ``tier``."""
    gen = _rng(rng)
    batch: list[TrainingSample] = []
    for _ in range(size):
        state = random_position(gen)
        batch.append(TrainingSample(state=state, kind="random", analysis=analyzer.analyze(state, tier)))
    logger.info("Generated %d synthetic training positions", len(batch))
    return batch
