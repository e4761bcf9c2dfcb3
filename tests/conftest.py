"""
===============================================================================
SIMS-FLANAGAN - Shared test fixtures
===============================================================================
Heliocentric Earth-to-Mars scenario used across the suite: circular coplanar
orbits at 1 AU and at the Mars mean radius, a small electric-propulsion
spacecraft, and helpers to build legs from flat throttle vectors.
===============================================================================
"""

import numpy as np
import pytest

from sims_flanagan.core.constants import MU_SUN, AU_KM, MARS_SMA_KM, DAY2SEC
from sims_flanagan.core.types import Epoch, ScState, Spacecraft
from sims_flanagan.transcription.leg import Leg
from sims_flanagan.transcription.throttles import uniform_throttles


# =============================================================================
# Helper functions
# =============================================================================

def circular_state(radius_km, phase_rad, mass_kg, mu=MU_SUN):
    """Planar circular-orbit state at the given phase angle."""
    v_circ = np.sqrt(mu / radius_km)
    return ScState(
        position=radius_km * np.array([np.cos(phase_rad), np.sin(phase_rad), 0.0]),
        velocity=v_circ * np.array([-np.sin(phase_rad), np.cos(phase_rad), 0.0]),
        mass=mass_kg,
    )


def circular_phase(radius_km, phase0_rad, dt_s, mu=MU_SUN):
    """Phase angle after dt_s seconds on a circular orbit."""
    return phase0_rad + np.sqrt(mu / radius_km ** 3) * dt_s


def make_leg(t_i, x_i, t_f, x_f, spacecraft, values, mu=MU_SUN, high_fidelity=False):
    """Leg with uniform throttles built from a flat [x1, y1, z1, ...] vector."""
    leg = Leg()
    leg.set_leg(t_i, x_i, uniform_throttles(t_i, t_f, values), t_f, x_f, mu,
                spacecraft=spacecraft, high_fidelity=high_fidelity)
    return leg


# =============================================================================
# Fixtures
# =============================================================================

MARS_PHASE_RAD = 2.0


@pytest.fixture
def spacecraft():
    """1000 kg spacecraft with a 0.3 N, 3000 s ion engine."""
    return Spacecraft(mass=1000.0, thrust=0.3, isp=3000.0)


@pytest.fixture
def t_i():
    return Epoch(1000.0)


@pytest.fixture
def t_f():
    """200 days after t_i."""
    return Epoch(1200.0)


@pytest.fixture
def earth_state():
    """1 AU circular orbit at zero phase, 1000 kg."""
    return circular_state(AU_KM, 0.0, 1000.0)


@pytest.fixture
def mars_state():
    """Mars-radius circular orbit, 1000 kg."""
    return circular_state(MARS_SMA_KM, MARS_PHASE_RAD, 1000.0)


@pytest.fixture
def earth_mars_leg(t_i, t_f, earth_state, mars_state, spacecraft):
    """Two-segment, zero-throttle Earth-Mars leg over 200 days."""
    return make_leg(t_i, earth_state, t_f, mars_state, spacecraft, np.zeros(6))


@pytest.fixture
def tof_s(t_i, t_f):
    return (t_f - t_i) * DAY2SEC
