"""Vesting Curve - Linear fraction vested, clamped at full vesting.

Returns a fixed-point fraction in [0, SCALE]. Reaching the deadline exactly
counts as fully vested, and timestamps before the start count as zero elapsed.
"""

from .units import SCALE


def vested_fraction(now: int, start: int, length: int, scale: int = SCALE) -> int:
    """
    Compute the fraction of a schedule vested at `now`.

    Args:
        now: Current timestamp (seconds)
        start: Schedule start timestamp
        length: Schedule length in seconds
        scale: Fixed-point scale for the result

    Returns:
        Fraction vested, scaled so that `scale` means 100%
    """
    if length <= 0:
        return scale if now >= start else 0
    if now >= start + length:
        return scale
    elapsed = max(0, now - start)
    return scale * elapsed // length


def vested_fraction_until(now: int, start: int, full_vest: int, scale: int = SCALE) -> int:
    """Fraction vested for a shared window expressed as start and deadline."""
    return vested_fraction(now, start, full_vest - start, scale)
