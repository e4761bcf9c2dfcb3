"""
Sims-Flanagan shooting evaluators.

Pure functions over an immutable LegData snapshot:

    mismatch_constraints   forward/backward propagation to a matching
                           point, returns [dr, dv, dm] (7 values)
    throttle_constraints   |throttle_i|^2 - 1 for every segment

The leg is feasible when the mismatch is all zeros and every throttle
constraint is <= 0.

Forward half: the first ceil(n/2) segments are flown from x_i at t_i. Each
segment is a Kepler coast to its midpoint followed by an impulse

    dv = T_max / m * duration * throttle

and a rocket-equation mass update m <- m * exp(-|dv| / (Isp g0)).

Backward half: the last floor(n/2) segments are flown from x_f at t_f
toward the middle with negative time steps, a negated impulse and a mass
that grows (exp(+|dv| / (Isp g0))).

A final ballistic arc carries the forward state to the backward clock,
which differs from the forward clock whenever n is odd.

Degenerate inputs (zero mass, zero Isp, zero-duration segments) are not
trapped: they surface as inf/NaN in the outputs, which the optimizer is
expected to read as a rejected candidate.
"""

from __future__ import annotations

import numpy as np

from ..core.types import LegData, ScState
from ..core.constants import G0, KM_PER_M
from ..core.errors import ConfigurationError
from ..astrodynamics.kepler import propagate_lagrangian
from ..astrodynamics.propagator import Propagator

MISMATCH_SIZE = 7


def _check_destination(out, size: int, what: str) -> None:
    """Reject a caller-supplied destination of the wrong length."""
    if out is not None and len(out) != size:
        raise ConfigurationError(
            f"{what} destination has length {len(out)}, expected {size}"
        )


def _deliver(result: np.ndarray, out):
    """Write a finished result into the destination in one step."""
    if out is None:
        return result
    out[:] = result
    return out


# ---------------------------------------------------------------------------
# Mismatch
# ---------------------------------------------------------------------------

def _shoot_impulsive(leg: LegData):
    """Midpoint-impulse propagation of both halves of the leg.

    Returns:
        (r_fwd, v_fwd, m_fwd, r_back, v_back, m_back) at the matching point.
    """
    throttles = leg.throttles
    n_seg = len(throttles)
    n_seg_fwd = leg.n_seg_fwd
    n_seg_back = leg.n_seg_back

    mu = leg.mu
    kepler_cfg = leg.config.kepler
    max_thrust = np.float64(leg.spacecraft.thrust)
    ve = np.float64(leg.spacecraft.isp) * G0       # exhaust velocity [m/s]

    # Forward propagation
    r_fwd = leg.x_i.position
    v_fwd = leg.x_i.velocity
    m_fwd = np.float64(leg.x_i.mass)
    t_fwd = leg.t_i.seconds

    for i in range(n_seg_fwd):
        seg = throttles[i]
        t_man = seg.midpoint
        r_fwd, v_fwd = propagate_lagrangian(r_fwd, v_fwd, t_man - t_fwd, mu, kepler_cfg)
        t_fwd = t_man

        dv = max_thrust / m_fwd * seg.duration * seg.value     # m/s
        v_fwd = v_fwd + dv * KM_PER_M
        m_fwd = m_fwd * np.exp(-np.linalg.norm(dv) / ve)

    # Backward propagation
    r_back = leg.x_f.position
    v_back = leg.x_f.velocity
    m_back = np.float64(leg.x_f.mass)
    t_back = leg.t_f.seconds

    for i in range(n_seg_back):
        seg = throttles[n_seg - i - 1]
        t_man = seg.midpoint
        # t_man - t_back is negative: this propagates backward
        r_back, v_back = propagate_lagrangian(r_back, v_back, t_man - t_back, mu, kepler_cfg)
        t_back = t_man

        dv = -max_thrust / m_back * seg.duration * seg.value    # m/s
        v_back = v_back + dv * KM_PER_M
        m_back = m_back * np.exp(np.linalg.norm(dv) / ve)

    # Ballistic arc from the forward clock to the backward clock
    r_fwd, v_fwd = propagate_lagrangian(r_fwd, v_fwd, t_back - t_fwd, mu, kepler_cfg)

    return r_fwd, v_fwd, m_fwd, r_back, v_back, m_back


def _shoot_high_fidelity(leg: LegData):
    """Continuous-thrust propagation of both halves of the leg.

    Every segment is a constant-thrust arc over its whole duration. Gaps
    between segments, if any, are flown as Kepler coasts.
    """
    throttles = leg.throttles
    n_seg = len(throttles)
    mu = leg.mu
    kepler_cfg = leg.config.kepler
    sc = leg.spacecraft
    propagator = Propagator(mu, leg.config)

    # Forward propagation
    state = leg.x_i
    t_fwd = leg.t_i.seconds
    for i in range(leg.n_seg_fwd):
        seg = throttles[i]
        r, v = propagate_lagrangian(state.position, state.velocity,
                                    seg.start.seconds - t_fwd, mu, kepler_cfg)
        state = ScState(r, v, state.mass)
        state = propagator.propagate_thrust_arc(
            state, seg.duration, sc.thrust * seg.value, sc.isp
        )
        t_fwd = seg.end.seconds
    fwd = state

    # Backward propagation
    state = leg.x_f
    t_back = leg.t_f.seconds
    for i in range(leg.n_seg_back):
        seg = throttles[n_seg - i - 1]
        r, v = propagate_lagrangian(state.position, state.velocity,
                                    seg.end.seconds - t_back, mu, kepler_cfg)
        state = ScState(r, v, state.mass)
        state = propagator.propagate_thrust_arc(
            state, -seg.duration, sc.thrust * seg.value, sc.isp
        )
        t_back = seg.start.seconds
    back = state

    r_fwd, v_fwd = propagate_lagrangian(fwd.position, fwd.velocity,
                                        t_back - t_fwd, mu, kepler_cfg)

    return r_fwd, v_fwd, fwd.mass, back.position, back.velocity, back.mass


def mismatch_constraints(leg: LegData, out=None):
    """Evaluate the state mismatch at the matching point.

    Args:
        leg: Fully configured leg snapshot.
        out: Optional destination of length 7. Written only once the full
            result is available.

    Returns:
        The destination (or a new array, shape (7,)) holding
        [drx, dry, drz, dvx, dvy, dvz, dm] = forward - backward, in
        km, km/s and kg.

    Raises:
        ConfigurationError: If out does not have length 7.
    """
    _check_destination(out, MISMATCH_SIZE, "Mismatch")

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        if leg.high_fidelity:
            r_fwd, v_fwd, m_fwd, r_back, v_back, m_back = _shoot_high_fidelity(leg)
        else:
            r_fwd, v_fwd, m_fwd, r_back, v_back, m_back = _shoot_impulsive(leg)

        result = np.empty(MISMATCH_SIZE)
        result[0:3] = r_fwd - r_back
        result[3:6] = v_fwd - v_back
        result[6] = m_fwd - m_back

    return _deliver(result, out)


# ---------------------------------------------------------------------------
# Throttle magnitude
# ---------------------------------------------------------------------------

def throttle_constraints(leg: LegData, out=None):
    """Evaluate the throttle magnitude constraints.

    Args:
        leg: Leg snapshot, or any object with a throttles sequence such as
            the Leg itself. Only the throttles are read.
        out: Optional destination with one slot per segment.

    Returns:
        The destination (or a new array, shape (n,)) holding
        x_i^2 + y_i^2 + z_i^2 - 1 in segment order. Values > 0 are
        infeasible.

    Raises:
        ConfigurationError: If out does not have one slot per segment.
    """
    n_seg = len(leg.throttles)
    _check_destination(out, n_seg, "Throttle constraint")

    result = np.empty(n_seg)
    for i, seg in enumerate(leg.throttles):
        t = seg.value
        result[i] = t @ t - 1.0

    return _deliver(result, out)
