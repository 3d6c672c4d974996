"""Immutable game-state snapshots for analysis.

A ``GameState`` holds everything the search needs about one position: the
line of play, the hand of the player being advised, the variant and the
running counters. Applying a move never mutates the snapshot; it returns a
new one, so every search branch owns its own copy.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from domino_gto.core.board import End, Layout, OpenEnds
from domino_gto.core.errors import IllegalMove, InvalidState
from domino_gto.core.moves import Move, Pass, Play, legal_moves, opening_moves
from domino_gto.core.tiles import Tile


class Variant(Enum):
    """Game variants the evaluator knows about.

    ``FIVES`` (All Fives) scores whenever the open ends sum to a multiple
    of five; ``DRAW`` and ``BLOCK`` are won by emptying the hand first.
    """

    FIVES = "fives"
    DRAW = "draw"
    BLOCK = "block"

    @classmethod
    def parse(cls, value: Variant | str) -> Variant:
        """Coerce a ``Variant`` or its name.

        Raises:
            ValueError: If ``value`` names no known variant.
        """
        if isinstance(value, Variant):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown game variant: {value!r}") from None

    def is_scoring(self) -> bool:
        """Return True for variants that award points for open-end sums."""
        return self is Variant.FIVES


class Seat(Enum):
    """Who is to move: the advised player or the opponent."""

    PLAYER = "player"
    OPPONENT = "opponent"

    def other(self) -> Seat:
        """Return the seat that moves next."""
        return Seat.OPPONENT if self is Seat.PLAYER else Seat.PLAYER


def _pairs(raw: Iterable[Any]) -> tuple[Tile, ...]:
    return tuple(Tile.parse(item) for item in raw)


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of a position.

    Only the advised player's hand is known; opponent hands are not
    modelled, so the minimizing plies of the search choose among the same
    hand's continuations.

    Attributes:
        board: The line of play.
        hand: The advised player's dominoes, kept sorted.
        variant: The game variant being played.
        your_score: Points scored by the advised player.
        opponent_score: Points scored by the opponent.
        pass_count: Number of passes so far.
        draw_count: Number of dominoes drawn from the boneyard so far.
        mover: Whose turn it is.
    """

    board: Layout = field(default_factory=Layout)
    hand: tuple[Tile, ...] = ()
    variant: Variant = Variant.FIVES
    your_score: int = 0
    opponent_score: int = 0
    pass_count: int = 0
    draw_count: int = 0
    mover: Seat = Seat.PLAYER

    def __post_init__(self) -> None:
        object.__setattr__(self, "hand", tuple(sorted(self.hand)))
        on_board = set(self.board.tiles()).intersection(self.hand)
        if on_board:
            listed = ", ".join(str(t) for t in sorted(on_board))
            raise InvalidState(f"Dominoes cannot be both in hand and on the board: {listed}")
        if self.pass_count < 0 or self.draw_count < 0:
            raise InvalidState("Pass and draw counts cannot be negative.")

    @classmethod
    def from_snapshot(cls, snapshot: Mapping[str, Any]) -> GameState:
        """Build a state from the plain mapping an embedding app holds.

        Recognised keys: ``board`` (pip pairs in play order, or mappings
        with ``domino`` and ``end``), ``hand``, ``gameType`` or
        ``variant``, ``yourScore``, ``opponentScore``, ``passes``,
        ``draws`` and ``mover``. Missing keys take their defaults.

        Args:
            snapshot: The mapping to read.

        Returns:
            The equivalent GameState.

        Raises:
            IllegalMove: If the board sequence cannot be laid out legally.
            InvalidState: If a domino is both in hand and on the board.
            ValueError: If a domino or the variant is malformed.
        """
        raw_board = list(snapshot.get("board") or [])
        if raw_board and isinstance(raw_board[0], Mapping):
            board = Layout.replay(
                (Tile.parse(entry["domino"]), entry.get("end")) for entry in raw_board
            )
        else:
            board = Layout.from_tiles(raw_board)

        variant = snapshot.get("variant", snapshot.get("gameType", Variant.FIVES.value))
        return cls(
            board=board,
            hand=_pairs(snapshot.get("hand") or []),
            variant=Variant.parse(variant),
            your_score=int(snapshot.get("yourScore", 0)),
            opponent_score=int(snapshot.get("opponentScore", 0)),
            pass_count=int(snapshot.get("passes", 0)),
            draw_count=int(snapshot.get("draws", 0)),
            mover=Seat(snapshot.get("mover", Seat.PLAYER.value)),
        )

    def to_snapshot(self) -> dict[str, Any]:
        """Return the mapping form accepted by :meth:`from_snapshot`."""
        return {
            "board": [
                {"domino": list(tile.values()), "end": end.value if end else None}
                for tile, end in self.board.history
            ],
            "hand": [list(tile.values()) for tile in self.hand],
            "gameType": self.variant.value,
            "yourScore": self.your_score,
            "opponentScore": self.opponent_score,
            "passes": self.pass_count,
            "draws": self.draw_count,
            "mover": self.mover.value,
        }

    def open_ends(self) -> OpenEnds:
        """Return the open ends of the board."""
        return self.board.open_ends()

    def is_game_over(self) -> bool:
        """The game is over for analysis purposes once the hand is empty."""
        return not self.hand

    def legal_moves(self) -> list[Move]:
        """Return the legal moves for the hand against the current board.

        On an empty board every domino may seed the line of play.
        """
        if self.board.is_empty():
            return opening_moves(self.hand)
        return legal_moves(self.hand, self.board.drop_zones())

    def apply_move(self, move: Move) -> GameState:
        """Apply ``move`` and return the resulting state.

        A play moves its domino from the hand onto the board; a pass bumps
        the pass count. Either way the turn passes to the other seat.

        Raises:
            IllegalMove: If the domino is not in hand, the end does not
                accept it, or the orientation disagrees with the end value.
        """
        if isinstance(move, Pass):
            return replace(self, pass_count=self.pass_count + 1, mover=self.mover.other())
        return self._apply_play(move)

    def _apply_play(self, play: Play) -> GameState:
        tile = play.domino
        if tile not in self.hand:
            raise IllegalMove(f"{tile} is not in hand.")

        if play.end is None:
            if not self.board.is_empty():
                raise IllegalMove(f"{tile} needs a target end: the board is not empty.")
            board = self.board.with_first(tile)
        else:
            end = End.parse(play.end)
            value = self.board.open_ends().get(end)
            if value is not None and value != play.connecting:
                raise IllegalMove(
                    f"{tile} played {play.orientation.value} connects {play.connecting}, "
                    f"but the {end.value} end is {value}."
                )
            board = self.board.with_placement(tile, end)

        hand = list(self.hand)
        hand.remove(tile)
        return replace(self, board=board, hand=tuple(hand), mover=self.mover.other())
