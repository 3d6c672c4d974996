"""Exception hierarchy for the analysis core.

Board and move errors are raised synchronously to the caller, who treats
them as input-validation failures. ``AnalysisFailure`` never escapes
:meth:`domino_gto.core.analysis.Analyzer.analyze`; it is converted into the
default "analysis unavailable" result there.
"""

from __future__ import annotations

__all__ = [
    "AnalysisFailure",
    "DominoError",
    "IllegalMove",
    "InvalidState",
]


class DominoError(Exception):
    """Base class for all errors raised by ``domino_gto``."""


class InvalidState(DominoError, ValueError):
    """An operation was attempted when the board is not in the required state.

    Example: seeding the first domino on a board that already has tiles.
    """


class IllegalMove(DominoError, ValueError):
    """A placement matches no open end, or targets an arm with no spinner."""


class AnalysisFailure(DominoError):
    """An unexpected fault occurred while searching a position."""
