"""
Human-readable leg report.

Purely presentational: reads the leg, never feeds back into evaluation.
"""

from __future__ import annotations

import numpy as np

from ..core.constants import DAY2SEC
from ..core.errors import SimsFlanaganError


def _vec(v) -> str:
    return "[" + ", ".join(f"{x:.10g}" for x in v) + "]"


def format_leg(leg) -> str:
    """Multi-line description of a leg.

    Mismatch and throttle constraints are appended when the leg can be
    evaluated; otherwise the report notes why not.

    Args:
        leg: A Leg, possibly only partially configured.
    """
    lines = [f"High fidelity: {leg.high_fidelity}",
             f"Number of segments: {len(leg.throttles)}", ""]

    sc = leg.spacecraft
    if sc is not None:
        lines += [f"Spacecraft mass: {sc.mass:.10g} kg",
                  f"Spacecraft thrust: {sc.thrust:.10g} N",
                  f"Spacecraft isp: {sc.isp:.10g} s"]
    else:
        lines.append("Spacecraft: not set")
    lines.append(f"Central body gravitational parameter: "
                 f"{'not set' if leg.mu is None else f'{leg.mu:.12g} km^3/s^2'}")
    lines.append("")

    lines.append(f"Departure date: {leg.t_i if leg.t_i is not None else 'not set'}")
    if leg.x_i is not None:
        lines.append(f"Departure state: r={_vec(leg.x_i.position)} km, "
                     f"v={_vec(leg.x_i.velocity)} km/s, m={leg.x_i.mass:.10g} kg")
    lines.append(f"Arrival date: {leg.t_f if leg.t_f is not None else 'not set'}")
    if leg.x_f is not None:
        lines.append(f"Arrival state: r={_vec(leg.x_f.position)} km, "
                     f"v={_vec(leg.x_f.velocity)} km/s, m={leg.x_f.mass:.10g} kg")
    if leg.t_i is not None and leg.t_f is not None:
        lines.append(f"Time of flight: {leg.t_f - leg.t_i:.10g} days "
                     f"({(leg.t_f - leg.t_i) * DAY2SEC:.10g} s)")
    lines.append("")

    lines.append("Throttles values:")
    for k, seg in enumerate(leg.throttles):
        lines.append(f"  {k:3d}: {seg.start} -> {seg.end}  {_vec(seg.value)}  |t|={seg.norm:.6g}")
    lines.append("")

    try:
        mismatch = leg.evaluate_mismatch()
    except SimsFlanaganError as exc:
        lines.append(f"Mismatch constraints: unavailable ({exc})")
    else:
        lines.append(f"Mismatch constraints: {_vec(mismatch)}")
        lines.append(f"  |dr| = {np.linalg.norm(mismatch[0:3]):.6g} km, "
                     f"|dv| = {np.linalg.norm(mismatch[3:6]):.6g} km/s, "
                     f"dm = {mismatch[6]:.6g} kg")
    lines.append(f"Throttle magnitude constraints: "
                 f"{_vec(leg.evaluate_throttle_constraints())}")

    return "\n".join(lines)
