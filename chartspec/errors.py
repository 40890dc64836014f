"""Errors raised while building or compiling chart specifications.

All errors are programmer errors: they are raised synchronously by the call
that detected them and are never retried or recovered internally.
"""

from __future__ import annotations


class ChartSpecError(ValueError):
    """Base class for chart specification errors."""


class InvalidKindError(ChartSpecError):
    """Raised when a node is constructed with an unknown kind."""

    def __init__(self, kind: object) -> None:
        """Initialize the error.

        Args:
            kind: The rejected kind value.
        """

        super().__init__(f"Invalid node kind: {kind!r}.")
        self.kind = kind


class InvalidContextError(ChartSpecError):
    """Raised when an operation is not supported by the node's kind."""


class InvalidValueError(ChartSpecError):
    """Raised when a value fails its declared type constraint."""


class InvalidChildError(ChartSpecError):
    """Raised when a child node is incompatible with its parent's kind."""


class UnsupportedNestingError(ChartSpecError):
    """Raised when a facet is found inside another facet during compilation."""


class InvalidRepeatChildError(ChartSpecError):
    """Raised when a repeat node's child is neither a unit nor a facet."""


class InvalidFacetChannelError(ChartSpecError):
    """Raised when a repeat over a facet binds a channel other than row/column."""
