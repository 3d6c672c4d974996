"""Move types and legal-move generation.

Generation is deterministic: moves come out in hand order, then drop-zone
order (left, right, top, bottom), then normal before flipped. Search relies
on that order to break ties reproducibly.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from domino_gto.core.board import DropZone, End
from domino_gto.core.tiles import Tile


class MoveOrientation(Enum):
    """Which pip of the (canonical) domino meets the open end.

    ``NORMAL`` connects through the lower pip ``a``; ``FLIPPED`` through the
    higher pip ``b``.
    """

    NORMAL = "normal"
    FLIPPED = "flipped"


@dataclass(frozen=True)
class Play:
    """Place a domino from hand on the board.

    Attributes:
        domino: The domino being played.
        end: The end it goes on, or None when it seeds an empty board.
        orientation: Which pip connects to the open end.
    """

    domino: Tile
    end: End | None
    orientation: MoveOrientation = MoveOrientation.NORMAL

    @property
    def connecting(self) -> int:
        """The pip that meets the open end."""
        if self.orientation is MoveOrientation.FLIPPED:
            return self.domino.b
        return self.domino.a

    @property
    def exposed(self) -> int:
        """The pip left facing outward after the play."""
        return self.domino.other_value(self.connecting)

    def __str__(self) -> str:
        where = self.end.value if self.end is not None else "start"
        return f"{self.domino} on {where}"


@dataclass(frozen=True)
class Pass:
    """The player to move cannot (or does not) place a domino."""

    def __str__(self) -> str:
        return "pass"


Move = Play | Pass


def _distinct(hand: Iterable[Tile]) -> list[Tile]:
    seen: set[Tile] = set()
    ordered: list[Tile] = []
    for tile in hand:
        if tile not in seen:
            seen.add(tile)
            ordered.append(tile)
    return ordered


def legal_moves(hand: Iterable[Tile], drop_zones: Iterable[DropZone]) -> list[Move]:
    """Enumerate every legal play of ``hand`` against ``drop_zones``.

    One ``Play`` is produced per (domino, zone, matching pip). A non-double
    whose lower pip matches a zone plays ``NORMAL``; one whose higher pip
    matches plays ``FLIPPED``, since the two expose different values
    downstream. A double matching a zone yields a single ``NORMAL`` play.

    Args:
        hand: The dominoes held by the player to move.
        drop_zones: The board's current drop zones.

    Returns:
        The plays in deterministic order, or ``[Pass()]`` when the hand is
        empty or nothing in it matches any zone.
    """
    zones = list(drop_zones)
    moves: list[Move] = []
    for tile in _distinct(hand):
        for zone in zones:
            if tile.a == zone.value:
                moves.append(Play(tile, zone.position, MoveOrientation.NORMAL))
            if tile.b == zone.value and not tile.is_double():
                moves.append(Play(tile, zone.position, MoveOrientation.FLIPPED))

    if not moves:
        moves.append(Pass())
    return moves


def opening_moves(hand: Iterable[Tile]) -> list[Move]:
    """Enumerate the plays available on an empty board.

    Any domino may seed the board, so there is one play per distinct
    domino in hand, with ``end=None``.

    Returns:
        The opening plays in hand order, or ``[Pass()]`` for an empty hand.
    """
    moves: list[Move] = [Play(tile, None) for tile in _distinct(hand)]
    if not moves:
        moves.append(Pass())
    return moves
