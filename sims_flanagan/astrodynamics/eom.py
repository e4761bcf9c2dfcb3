"""
Equations of motion assembler.

Constructs the state derivative vector for numerical integration:
    y = [x, y, z, vx, vy, vz, mass]  (7 elements)

Dynamics are point-mass two-body gravity about the central body. During
thrust arcs, thrust acceleration and mass depletion are included.
"""

from __future__ import annotations

import numpy as np
from ..core.constants import G0, KM_PER_M


def two_body(r: np.ndarray, mu: float) -> np.ndarray:
    """Central body point-mass gravitational acceleration.

    Args:
        r: Position vector [km], shape (3,).
        mu: Gravitational parameter [km^3/s^2].

    Returns:
        a: Acceleration vector [km/s^2], shape (3,).
    """
    r_mag = np.linalg.norm(r)
    return -mu * r / r_mag ** 3


def eom_two_body(t: float, y: np.ndarray, mu: float,
                 thrust_func=None) -> np.ndarray:
    """Two-body equations of motion with mass.

    Args:
        t: Integration time [seconds since the arc reference].
        y: State vector, shape (7,).
            y[0:3] = position [km]
            y[3:6] = velocity [km/s]
            y[6]   = mass [kg]
        mu: Gravitational parameter [km^3/s^2].
        thrust_func: Optional callable(t, y) -> (thrust_accel_km_s2, mass_flow_kg_s).
            None during coast arcs.

    Returns:
        dy_dt: Time derivative of the state, shape (7,).
    """
    r = y[0:3]
    v = y[3:6]

    a_total = two_body(r, mu)

    dm_dt = 0.0
    if thrust_func is not None:
        a_thrust, mdot = thrust_func(t, y)
        a_total = a_total + a_thrust
        dm_dt = mdot  # negative value (mass decreasing)

    dy_dt = np.empty(7)
    dy_dt[0:3] = v                  # dr/dt = v
    dy_dt[3:6] = a_total            # dv/dt = a
    dy_dt[6] = dm_dt                # dm/dt
    return dy_dt


def make_thrust_func(thrust_vector_n: np.ndarray, isp_s: float):
    """Create a constant-thrust function for use in eom_two_body.

    Args:
        thrust_vector_n: Inertial thrust vector [Newtons], shape (3,).
        isp_s: Specific impulse [seconds].

    Returns:
        Callable(t, y) -> (a_thrust_km_s2, mdot_kg_s).
    """
    thrust_vector_n = np.asarray(thrust_vector_n, dtype=np.float64)
    mdot = -np.linalg.norm(thrust_vector_n) / (isp_s * G0)  # kg/s (negative)

    def thrust_func(t, y):
        """Compute thrust acceleration and mass flow rate.

        Args:
            t: Time since the arc reference [seconds].
            y: State vector.

        Returns:
            a_thrust: Thrust acceleration [km/s^2], shape (3,).
            mdot: Mass flow rate [kg/s] (negative).
        """
        # T/m is N/kg = m/s², converted to km/s²
        a_thrust = thrust_vector_n / y[6] * KM_PER_M
        return a_thrust, mdot

    return thrust_func
