"""
===============================================================================
SIMS-FLANAGAN - High-Fidelity Leg Test Suite
===============================================================================
Tests for legs whose segments are flown as continuous constant-thrust arcs:
agreement with the impulsive model without thrust, agreement with the
numerical propagator for a single arc, and linear mass flow.
===============================================================================
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from sims_flanagan.astrodynamics.propagator import Propagator
from sims_flanagan.core.constants import MU_SUN, AU_KM, G0

from conftest import make_leg, circular_state, circular_phase


class TestHighFidelity:

    def test_single_ballistic_segment_matches_impulsive(self, t_i, t_f, earth_state,
                                                        mars_state, spacecraft):
        """Both models meet at t_f when there is one unpowered segment."""
        impulsive = make_leg(t_i, earth_state, t_f, mars_state, spacecraft, np.zeros(3))
        continuous = make_leg(t_i, earth_state, t_f, mars_state, spacecraft, np.zeros(3),
                              high_fidelity=True)

        expected = impulsive.evaluate_mismatch()
        mismatch = continuous.evaluate_mismatch()

        assert_allclose(mismatch[0:3], expected[0:3], rtol=0, atol=1.0)
        assert_allclose(mismatch[3:6], expected[3:6], rtol=0, atol=1e-7)
        assert mismatch[6] == 0.0

    @pytest.mark.parametrize("n_seg", [2, 3])
    def test_ballistic_leg_is_feasible(self, t_i, t_f, earth_state, spacecraft,
                                       tof_s, n_seg):
        arrival = circular_state(AU_KM, circular_phase(AU_KM, 0.0, tof_s), 1000.0)
        leg = make_leg(t_i, earth_state, t_f, arrival, spacecraft, np.zeros(3 * n_seg),
                       high_fidelity=True)

        mismatch = leg.evaluate_mismatch()

        assert_allclose(mismatch[0:3], 0.0, atol=1.0)
        assert_allclose(mismatch[3:6], 0.0, atol=1e-7)

    def test_single_arc_matches_propagator(self, t_i, t_f, earth_state, mars_state,
                                           spacecraft, tof_s):
        value = np.array([0.2, 0.7, -0.1])
        leg = make_leg(t_i, earth_state, t_f, mars_state, spacecraft, value,
                       high_fidelity=True)

        final = Propagator(MU_SUN).propagate_thrust_arc(
            earth_state, tof_s, spacecraft.thrust * value, spacecraft.isp)
        expected = final.state_vector - mars_state.state_vector

        assert_allclose(leg.evaluate_mismatch(), expected, rtol=1e-12, atol=1e-9)

    def test_linear_mass_flow(self, t_i, t_f, earth_state, mars_state, spacecraft, tof_s):
        first = np.array([0.6, 0.8, 0.0])
        second = np.array([0.0, 0.0, -0.5])
        leg = make_leg(t_i, earth_state, t_f, mars_state, spacecraft,
                       np.concatenate([first, second]), high_fidelity=True)

        duration = tof_s / 2.0
        q = spacecraft.thrust / (spacecraft.isp * G0)
        m_fwd = earth_state.mass - q * np.linalg.norm(first) * duration
        m_back = mars_state.mass + q * np.linalg.norm(second) * duration

        assert_allclose(leg.evaluate_mismatch()[6], m_fwd - m_back, rtol=1e-10)

