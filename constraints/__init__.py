"""Gate evaluation contexts.

The same gate callable is evaluated over the whole trace by
TraceConstraintContext (arrays) and at one row by RowConstraintContext
(scalars, with the queried cells recorded for failure reports).
"""

from .base import (
    ConstraintContext,
    RowConstraintContext,
    TraceConstraintContext,
)

__all__ = [
    "ConstraintContext",
    "TraceConstraintContext",
    "RowConstraintContext",
]
