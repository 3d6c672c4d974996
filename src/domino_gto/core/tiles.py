"""Domino tile representation and double-six set generation."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Tile:
    """A domino as a canonical unordered pair (a <= b).

    Tiles are immutable and ordered. The canonical form ensures ``a <= b``
    so the same physical domino always has one representation; use
    :meth:`Tile.of` to build a tile from pips given in either order.

    Attributes:
        a: The lower (or equal) pip value, 0-6.
        b: The higher (or equal) pip value, 0-6.

    Raises:
        ValueError: If the tile values are outside [0, 6] or not in
            canonical order (a <= b).
    """

    a: int
    b: int

    def __post_init__(self) -> None:
        if not (0 <= self.a <= self.b <= 6):
            raise ValueError(f"Invalid tile: ({self.a}, {self.b})")

    @classmethod
    def of(cls, x: int, y: int) -> Tile:
        """Build a tile from two pips in any order.

        Args:
            x: One pip value, 0-6.
            y: The other pip value, 0-6.

        Returns:
            The canonical tile ``Tile(min(x, y), max(x, y))``.

        Raises:
            ValueError: If either value is outside [0, 6].
        """
        x, y = int(x), int(y)
        return cls(min(x, y), max(x, y))

    @classmethod
    def parse(cls, value: Tile | Iterable[int]) -> Tile:
        """Coerce a tile or a two-element pip sequence such as ``[6, 2]``.

        Raises:
            ValueError: If ``value`` does not hold exactly two pips.
        """
        if isinstance(value, Tile):
            return value
        pips = list(value)
        if len(pips) != 2:
            raise ValueError(f"A domino needs exactly two pips, got {pips!r}")
        return cls.of(pips[0], pips[1])

    def is_double(self) -> bool:
        """Return True if the tile is a double (both ends equal)."""
        return self.a == self.b

    def values(self) -> tuple[int, int]:
        """Return the two pip values as a tuple ``(a, b)``."""
        return (self.a, self.b)

    def contains_value(self, v: int) -> bool:
        """Return True if the tile contains the given pip value."""
        return self.a == v or self.b == v

    def other_value(self, v: int) -> int:
        """Given one end value, return the other end.

        For doubles, returns the same value.

        Args:
            v: One of the tile's pip values.

        Returns:
            The other pip value on the tile.

        Raises:
            ValueError: If ``v`` is not one of the tile's values.
        """
        if v == self.a:
            return self.b
        if v == self.b:
            return self.a
        raise ValueError(f"Value {v} not in tile {self}")

    def pip_count(self) -> int:
        """Return the total pip count (sum of both ends)."""
        return self.a + self.b

    def __str__(self) -> str:
        """Return a human-readable string like ``[a|b]``."""
        return f"[{self.a}|{self.b}]"

    def __repr__(self) -> str:
        """Return a developer-readable representation like ``Tile(a, b)``."""
        return f"Tile({self.a}, {self.b})"


def generate_full_set() -> frozenset[Tile]:
    """Generate the complete double-six domino set (28 tiles).

    Returns:
        A frozenset containing all 28 tiles where ``0 <= a <= b <= 6``.
    """
    return frozenset(Tile(a, b) for a in range(7) for b in range(a, 7))

