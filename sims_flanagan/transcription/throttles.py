"""
Throttle sequence helpers.

Optimizers usually carry throttles as a flat decision vector
[x1, y1, z1, ..., xn, yn, zn] over an equally spaced time grid;
uniform_throttles builds the matching segments. validate_throttle_coverage
is an opt-in check that a segment list partitions [t_i, t_f]; the shooting
evaluators never call it.
"""

from __future__ import annotations

import numpy as np
from typing import Sequence

from ..core.types import Epoch, ThrottleSegment
from ..core.errors import ConfigurationError


def uniform_throttles(t_i: Epoch, t_f: Epoch, values) -> list[ThrottleSegment]:
    """Contiguous, equal-length segments spanning [t_i, t_f].

    Args:
        t_i: Leg start epoch.
        t_f: Leg end epoch, after t_i.
        values: Flat throttle vector, length 3n.

    Returns:
        n throttle segments in time order.
    """
    values = np.asarray(values, dtype=np.float64).reshape(-1)
    if values.size % 3 != 0:
        raise ConfigurationError(
            f"Throttle vector length must be a multiple of 3, got {values.size}"
        )
    if t_f.mjd2000 <= t_i.mjd2000:
        raise ConfigurationError(
            f"Final epoch ({t_f}) must be after the initial epoch ({t_i})"
        )

    n_seg = values.size // 3
    grid = np.linspace(t_i.mjd2000, t_f.mjd2000, n_seg + 1)

    return [
        ThrottleSegment(Epoch(float(grid[k])), Epoch(float(grid[k + 1])),
                        values[3 * k:3 * k + 3])
        for k in range(n_seg)
    ]


def throttle_vector(throttles: Sequence[ThrottleSegment]) -> np.ndarray:
    """Flatten segment values back into [x1, y1, z1, ..., xn, yn, zn]."""
    if not throttles:
        return np.zeros(0)
    return np.concatenate([seg.value for seg in throttles])


def validate_throttle_coverage(throttles: Sequence[ThrottleSegment],
                               t_i: Epoch, t_f: Epoch,
                               tol_days: float = 1e-9) -> None:
    """Check that the segments partition [t_i, t_f].

    An empty list is accepted (a purely ballistic leg).

    Args:
        throttles: Segments in the order the leg holds them.
        t_i: Leg start epoch.
        t_f: Leg end epoch.
        tol_days: Allowed mismatch between adjacent boundaries [days].

    Raises:
        ConfigurationError: On a reversed segment, a gap, an overlap, or a
            first/last boundary that does not meet t_i/t_f.
    """
    if not throttles:
        return

    for k, seg in enumerate(throttles):
        if seg.end.mjd2000 < seg.start.mjd2000 - tol_days:
            raise ConfigurationError(
                f"Segment {k} ends ({seg.end}) before it starts ({seg.start})"
            )

    if abs(throttles[0].start.mjd2000 - t_i.mjd2000) > tol_days:
        raise ConfigurationError(
            f"First segment starts at {throttles[0].start}, leg starts at {t_i}"
        )
    if abs(throttles[-1].end.mjd2000 - t_f.mjd2000) > tol_days:
        raise ConfigurationError(
            f"Last segment ends at {throttles[-1].end}, leg ends at {t_f}"
        )

    for k in range(1, len(throttles)):
        gap = throttles[k].start.mjd2000 - throttles[k - 1].end.mjd2000
        if gap > tol_days:
            raise ConfigurationError(
                f"Gap of {gap:.6g} days between segments {k - 1} and {k}"
            )
        if gap < -tol_days:
            raise ConfigurationError(
                f"Overlap of {-gap:.6g} days between segments {k - 1} and {k}"
            )
