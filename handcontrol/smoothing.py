"""
Exponential moving average helpers shared by the pipeline stages.

The factor is the weight given to the new sample: 1.0 passes the raw value
through unchanged, smaller values smooth more.
"""
from typing import Optional

from .types import Position2D


def ema(current: float, previous: float, factor: float) -> float:
    return previous + (current - previous) * factor


def ema_position(current: Position2D, previous: Position2D, factor: float) -> Position2D:
    return Position2D(
        x=ema(current.x, previous.x, factor),
        y=ema(current.y, previous.y, factor),
    )


def ema_optional(current: Optional[float], previous: Optional[float], factor: float) -> Optional[float]:
    """Smooth a value that may be missing; a value that just appeared is passed through."""
    if current is None:
        return None
    if previous is None:
        return current
    return ema(current, previous, factor)
