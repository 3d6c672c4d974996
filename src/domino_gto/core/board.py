"""Board state machine: main chain, spinner and spinner arms.

The line of play is kept as an immutable :class:`Layout` value holding the
main chain, the optional spinner (the first double played) and the two
perpendicular arms that grow from it. Open ends are never stored; they are
re-derived from the chain contents on every query, so they cannot drift
away from the placements that produce them.

:class:`Board` is the mutable state machine wrapped around a layout. Every
operation builds a new layout and swaps it in only when it succeeds, which
means a rejected placement leaves the board exactly as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import Enum

from domino_gto.core.errors import IllegalMove, InvalidState
from domino_gto.core.tiles import Tile

logger = logging.getLogger(__name__)


class End(Enum):
    """The four places a domino can be attached to the line of play."""

    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"

    @classmethod
    def parse(cls, value: End | str) -> End:
        """Coerce an ``End`` or its name (``"left"``, ``"TOP"``...).

        Raises:
            IllegalMove: If ``value`` names no end.
        """
        if isinstance(value, End):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise IllegalMove(f"Unknown board end: {value!r}") from None

    def is_arm(self) -> bool:
        """Return True for the spinner arms (top and bottom)."""
        return self in (End.TOP, End.BOTTOM)


class Orientation(Enum):
    """How a placed domino lies on the table."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


def _orientation_for(tile: Tile, end: End | None) -> Orientation:
    # Dominoes run along their chain; doubles lie across it.
    on_arm = end is not None and end.is_arm()
    along = Orientation.VERTICAL if on_arm else Orientation.HORIZONTAL
    across = Orientation.HORIZONTAL if on_arm else Orientation.VERTICAL
    return across if tile.is_double() else along


@dataclass(frozen=True)
class Placement:
    """A domino as it sits in one of the chains.

    Attributes:
        tile: The placed domino.
        side: The end it was attached through, or None for the seed domino.
        orientation: How the domino lies on the table.
        connecting: The pip touching the neighbouring domino (None for the
            seed).
        exposed: The pip facing outward, available to the next placement
            (None for the seed, whose raw pips are used instead).
        is_spinner: True if this record is the board's spinner.
    """

    tile: Tile
    side: End | None
    orientation: Orientation
    connecting: int | None = None
    exposed: int | None = None
    is_spinner: bool = False

    @property
    def flipped(self) -> bool:
        """True when the domino connects through its higher pip."""
        return self.connecting is not None and self.connecting != self.tile.a


@dataclass(frozen=True)
class DropZone:
    """An open end a domino can currently be dropped on."""

    position: End
    value: int


@dataclass(frozen=True)
class OpenEnds:
    """Pip values exposed at each end; None means absent.

    ``top`` and ``bottom`` are only ever set once a spinner exists.
    """

    left: int | None = None
    right: int | None = None
    top: int | None = None
    bottom: int | None = None

    def get(self, end: End) -> int | None:
        """Return the value exposed at ``end``."""
        return getattr(self, end.value)

    def as_dict(self) -> dict[str, int | None]:
        """Return the ends keyed by name (``left``, ``right``, ...)."""
        return {end.value: self.get(end) for end in End}

    def values(self) -> tuple[int, ...]:
        """Return the non-absent values in left, right, top, bottom order."""
        return tuple(v for v in (self.left, self.right, self.top, self.bottom) if v is not None)

    def total(self) -> int:
        """Return the sum of all non-absent end values."""
        return sum(self.values())


@dataclass(frozen=True)
class Layout:
    """Immutable snapshot of the line of play.

    The main chain is ordered left to right; the arms are ordered outward
    from the spinner. ``history`` keeps the order in which dominoes reached
    the board together with the end each was attached to, which is what
    :meth:`replay` feeds back through the transitions.

    Attributes:
        main: Placement records of the main chain, left to right.
        top: Placement records of the top arm, spinner outward.
        bottom: Placement records of the bottom arm, spinner outward.
        spinner_index: Index of the spinner in ``main``, or None.
        history: (tile, end) pairs in play order; the seed has end None.
    """

    main: tuple[Placement, ...] = ()
    top: tuple[Placement, ...] = ()
    bottom: tuple[Placement, ...] = ()
    spinner_index: int | None = None
    history: tuple[tuple[Tile, End | None], ...] = ()

    def __post_init__(self) -> None:
        if self.spinner_index is None:
            if self.top or self.bottom:
                raise InvalidState("Spinner arms cannot hold dominoes before a spinner is set.")
        elif not (0 <= self.spinner_index < len(self.main)):
            raise InvalidState(f"Spinner index {self.spinner_index} is outside the main chain.")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.main) + len(self.top) + len(self.bottom)

    def is_empty(self) -> bool:
        """Return True if no domino has been played."""
        return not self.main

    @property
    def spinner(self) -> Tile | None:
        """The spinner domino, or None before the first double is played."""
        if self.spinner_index is None:
            return None
        return self.main[self.spinner_index].tile

    def tiles(self) -> tuple[Tile, ...]:
        """Return all dominoes on the board in play order."""
        return tuple(tile for tile, _ in self.history)

    def open_ends(self) -> OpenEnds:
        """Derive the open ends from the chain contents.

        The right end is the exposed pip of the last main-chain record (its
        raw higher pip for the seed); the left end mirrors that on the
        first record. Arm ends are the exposed pip of the outermost arm
        record, or the spinner's own pip while the arm is empty.

        Returns:
            The current open ends. All absent on an empty board.
        """
        if not self.main:
            return OpenEnds()

        first, last = self.main[0], self.main[-1]
        if len(self.main) == 1:
            left, right = first.tile.a, first.tile.b
        else:
            left = first.exposed if first.exposed is not None else first.tile.a
            right = last.exposed if last.exposed is not None else last.tile.b

        spinner = self.spinner
        if spinner is None:
            return OpenEnds(left=left, right=right)

        top = self.top[-1].exposed if self.top else spinner.a
        bottom = self.bottom[-1].exposed if self.bottom else spinner.a
        return OpenEnds(left=left, right=right, top=top, bottom=bottom)

    def drop_zones(self) -> tuple[DropZone, ...]:
        """Return one drop zone per non-absent open end.

        Zones come in left, right, top, bottom order; top and bottom appear
        only when a spinner exists.
        """
        ends = self.open_ends()
        return tuple(
            DropZone(position=end, value=value)
            for end in End
            if (value := ends.get(end)) is not None
        )

    def score(self) -> int:
        """Return the sum of all current open-end values."""
        return self.open_ends().total()

    def scoring_points(self) -> int:
        """Return the All Fives award for the current ends.

        Returns:
            The open-end sum when it is a nonzero multiple of five, else 0.
        """
        total = self.score()
        return total if total > 0 and total % 5 == 0 else 0

    def first_matching_end(self, tile: Tile) -> End | None:
        """Return the first drop zone ``tile`` can be placed on, if any."""
        for zone in self.drop_zones():
            if tile.contains_value(zone.value):
                return zone.position
        return None

    # ------------------------------------------------------------------
    # Transitions (each returns a new Layout)
    # ------------------------------------------------------------------

    def with_first(self, tile: Tile) -> Layout:
        """Seed an empty layout with ``tile``.

        A double seed becomes the spinner immediately and opens the top and
        bottom ends at its pip value.

        Raises:
            InvalidState: If the layout already holds dominoes.
        """
        if not self.is_empty():
            raise InvalidState(f"Cannot seed {tile}: the board already holds {len(self)} dominoes.")

        is_spinner = tile.is_double()
        seed = Placement(
            tile=tile,
            side=None,
            orientation=_orientation_for(tile, None),
            is_spinner=is_spinner,
        )
        return Layout(
            main=(seed,),
            spinner_index=0 if is_spinner else None,
            history=((tile, None),),
        )

    def with_placement(self, tile: Tile, end: End | str) -> Layout:
        """Attach ``tile`` at ``end`` and return the resulting layout.

        The pip matching the open end becomes the connecting pip and the
        other one is exposed. Left placements prepend the main chain, right
        placements append it, top and bottom placements extend their arm.
        The first double to reach the main chain becomes the spinner.

        Args:
            tile: The domino to place.
            end: The end to attach it to.

        Returns:
            A new Layout including the placement.

        Raises:
            IllegalMove: If the end has no open value, targets an arm while
                no spinner exists, does not match either pip of ``tile``, or
                ``tile`` is already on the board.
        """
        end = End.parse(end)
        if end.is_arm() and self.spinner_index is None:
            raise IllegalMove(f"Cannot place {tile} on {end.value}: no spinner has been played.")

        value = self.open_ends().get(end)
        if value is None:
            raise IllegalMove(f"Cannot place {tile} on {end.value}: that end is not open.")
        if not tile.contains_value(value):
            raise IllegalMove(f"Cannot place {tile} on {end.value} end (value: {value}).")
        if tile in self.tiles():
            raise IllegalMove(f"{tile} is already on the board.")

        connecting = value
        exposed = tile.other_value(value)
        placement = Placement(
            tile=tile,
            side=end,
            orientation=_orientation_for(tile, end),
            connecting=connecting,
            exposed=exposed,
        )
        logger.debug(
            "Placing %s on %s (open %d): connecting=%d exposed=%d flipped=%s",
            tile, end.value, value, connecting, exposed, placement.flipped,
        )

        history = self.history + ((tile, end),)
        if end is End.TOP:
            return replace(self, top=self.top + (placement,), history=history)
        if end is End.BOTTOM:
            return replace(self, bottom=self.bottom + (placement,), history=history)

        becomes_spinner = tile.is_double() and self.spinner_index is None
        if becomes_spinner:
            placement = replace(placement, is_spinner=True)

        if end is End.LEFT:
            main = (placement,) + self.main
            if becomes_spinner:
                spinner_index: int | None = 0
            elif self.spinner_index is not None:
                spinner_index = self.spinner_index + 1
            else:
                spinner_index = None
        else:
            main = self.main + (placement,)
            spinner_index = len(main) - 1 if becomes_spinner else self.spinner_index

        if becomes_spinner:
            logger.debug("%s becomes the spinner at index %d", tile, spinner_index)
        return Layout(
            main=main,
            top=self.top,
            bottom=self.bottom,
            spinner_index=spinner_index,
            history=history,
        )

    def with_tile(self, tile: Tile, end: End | str | None = None) -> Layout:
        """Seed or place ``tile``, picking the first matching end if none given.

        Raises:
            IllegalMove: If ``tile`` fits no open end.
        """
        if self.is_empty():
            return self.with_first(tile)
        if end is None:
            end = self.first_matching_end(tile)
            if end is None:
                ends = ", ".join(f"{z.position.value}={z.value}" for z in self.drop_zones())
                raise IllegalMove(f"Cannot place {tile}: no matching ends ({ends}).")
        return self.with_placement(tile, end)

    @classmethod
    def from_tiles(cls, tiles: Iterable[Tile | Iterable[int]]) -> Layout:
        """Rebuild a layout from dominoes in play order.

        Each domino after the first goes on the first drop zone it matches.

        Raises:
            IllegalMove: If a domino in the sequence fits nowhere.
        """
        layout = cls()
        for raw in tiles:
            layout = layout.with_tile(Tile.parse(raw))
        return layout

    @classmethod
    def replay(cls, history: Iterable[tuple[Tile, End | str | None]]) -> Layout:
        """Rebuild a layout from recorded (tile, end) pairs.

        A pair with end None seeds the board, or goes on the first matching
        end when the board is not empty.

        Raises:
            IllegalMove: If a recorded placement is no longer legal.
        """
        layout = cls()
        for tile, end in history:
            layout = layout.with_tile(tile, end)
        return layout


# The value handed back by every board-mutating operation.
LayoutSnapshot = Layout


class Board:
    """Mutable line of play for an interactive game.

    Wraps a :class:`Layout` and replaces it wholesale on every successful
    operation. Failed operations raise before anything is swapped in.

    Example:
        >>> board = Board()
        >>> board.add_first(Tile(6, 6)).open_ends()
        OpenEnds(left=6, right=6, top=6, bottom=6)
    """

    def __init__(self, layout: Layout | None = None) -> None:
        self._layout = layout if layout is not None else Layout()

    @property
    def layout(self) -> Layout:
        """The current immutable snapshot of the board."""
        return self._layout

    @property
    def spinner(self) -> Tile | None:
        """The spinner domino, or None before the first double."""
        return self._layout.spinner

    @property
    def spinner_index(self) -> int | None:
        """Index of the spinner in the main chain, or None."""
        return self._layout.spinner_index

    def __len__(self) -> int:
        return len(self._layout)

    def add_first(self, domino: Tile | Iterable[int]) -> LayoutSnapshot:
        """Seed the empty board with ``domino``.

        Raises:
            InvalidState: If the board is not empty.
        """
        self._layout = self._layout.with_first(Tile.parse(domino))
        return self._layout

    def place(self, domino: Tile | Iterable[int], target_end: End | str) -> LayoutSnapshot:
        """Place ``domino`` at ``target_end``.

        Raises:
            IllegalMove: If the placement does not match the open end, or
                targets an arm before a spinner exists.
        """
        self._layout = self._layout.with_placement(Tile.parse(domino), target_end)
        return self._layout

    def play(
        self,
        domino: Tile | Iterable[int],
        target_end: End | str | None = None,
    ) -> LayoutSnapshot:
        """Seed or place ``domino``, choosing the first matching end if needed.

        Raises:
            IllegalMove: If ``domino`` fits no open end.
        """
        self._layout = self._layout.with_tile(Tile.parse(domino), target_end)
        return self._layout

    def open_ends(self) -> OpenEnds:
        """Return the open ends of the current layout."""
        return self._layout.open_ends()

    def drop_zones(self) -> tuple[DropZone, ...]:
        """Return one drop zone per open end."""
        return self._layout.drop_zones()

    def score(self) -> int:
        """Return the sum of all open ends."""
        return self._layout.score()

    def scoring_points(self) -> int:
        """Return the All Fives points the open ends are worth now."""
        return self._layout.scoring_points()

    def remove(self, domino: Tile | Iterable[int]) -> LayoutSnapshot:
        """Take ``domino`` back off the board and rebuild the layout.

        The remaining dominoes are replayed in their original order with
        first-match placement, so the rebuilt arms may differ from the
        hand-placed ones. The spinner is never handed to another double:
        taking it off is only allowed while no later double would take
        its place.

        Raises:
            InvalidState: If ``domino`` is not on the board, or removing it
                would promote a different double to spinner.
            IllegalMove: If the remaining sequence cannot be replayed.
        """
        tile = Tile.parse(domino)
        played = list(self._layout.tiles())
        if tile not in played:
            raise InvalidState(f"{tile} is not on the board.")
        played.remove(tile)
        rebuilt = Layout.from_tiles(played)

        spinner = self._layout.spinner
        expected = None if spinner == tile else spinner
        if rebuilt.spinner != expected:
            raise InvalidState(
                f"Cannot remove {tile}: {rebuilt.spinner} would replace {spinner} as the spinner."
            )
        self._layout = rebuilt
        return self._layout

    def undo(self) -> LayoutSnapshot:
        """Remove the most recently played domino.

        Every earlier placement is replayed on the end it was made on, so
        the rest of the layout is restored exactly.

        Raises:
            InvalidState: If the board is empty.
        """
        if self._layout.is_empty():
            raise InvalidState("Nothing to undo: the board is empty.")
        self._layout = Layout.replay(self._layout.history[:-1])
        return self._layout

    def clear(self) -> None:
        """Reset to the empty board."""
        self._layout = Layout()
