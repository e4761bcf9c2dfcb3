"""
Leg diagnostics.

Quantities here are for reporting only and never enter the feasibility
evaluation in .shooting.
"""

from __future__ import annotations

from ..core.constants import KM_PER_M
from ..core.errors import ConfigurationError


def approximate_delta_v(leg) -> float:
    """Rough total ΔV of a leg [km/s].

    Sums duration * |throttle| * T_max / m over all segments with m held at
    the spacecraft reference mass, i.e. without mass depletion. It is a
    quick estimate for reports, not the ΔV flown by the shooting model.

    Args:
        leg: A Leg or LegData with throttles and a spacecraft.
    """
    sc = leg.spacecraft
    if sc is None:
        raise ConfigurationError("Leg has no spacecraft")

    total = 0.0
    for seg in leg.throttles:
        total += seg.duration * seg.norm * sc.thrust / sc.mass     # m/s
    return total * KM_PER_M
