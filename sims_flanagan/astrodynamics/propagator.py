"""
Numerical orbit propagator.

Wraps scipy.integrate.solve_ivp (DOP853) with:
    - Two-body state + mass integration
    - Maneuver handling (impulsive: stop/apply/restart)
    - Constant-thrust arcs, forward or backward in time

This is the independent reference against which the analytical shooting
evaluator is checked, and the integrator behind high-fidelity legs.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.integrate import solve_ivp
from typing import Optional

from ..core.types import Epoch, ScState, PropagationResult, Maneuver
from ..core.config import PropagationConfig
from ..core.constants import SEC2DAY, DAY2SEC, G0, KM_PER_M
from ..core.errors import ConfigurationError, PropagationError
from .eom import eom_two_body, make_thrust_func

logger = logging.getLogger(__name__)


class Propagator:
    """Numerical two-body propagator with mass.

    Integrates the 7-element state vector (position, velocity, mass)
    using an adaptive 8th-order Dormand-Prince method.

    Attributes:
        mu: Central body gravitational parameter [km^3/s^2].
        config: Propagation configuration.
    """

    def __init__(self, mu: float, config: Optional[PropagationConfig] = None):
        """Initialize the propagator.

        Args:
            mu: Central body gravitational parameter [km^3/s^2].
            config: Propagation configuration with integrator settings.
        """
        if not mu > 0:
            raise ConfigurationError(f"Gravitational parameter must be positive, got {mu}")
        self.mu = mu
        self.config = config if config is not None else PropagationConfig()

    def propagate(self,
                  state: ScState,
                  epoch: Epoch,
                  duration_s: float,
                  maneuvers: Optional[list[Maneuver]] = None,
                  output_step_s: Optional[float] = None
                  ) -> PropagationResult:
        """Propagate a state forward in time.

        Handles impulsive maneuvers by stopping integration, applying the
        delta-V and the rocket-equation mass depletion, and restarting.

        Args:
            state: Initial spacecraft state.
            epoch: Epoch of the initial state.
            duration_s: Total propagation duration [seconds], positive.
            maneuvers: Optional list of maneuvers to apply during propagation.
            output_step_s: Output cadence [seconds]. Defaults to segment
                boundaries only.

        Returns:
            PropagationResult with time-tagged states and masses.
        """
        if not duration_s > 0:
            raise ConfigurationError(f"Propagation duration must be positive, got {duration_s}")

        if maneuvers:
            maneuvers = sorted(maneuvers, key=lambda m: m.epoch.mjd2000)

        segments = self._build_segments(0.0, duration_s, maneuvers, epoch)
        logger.debug("Propagating %.6g s from %s across %d segment(s)",
                     duration_s, epoch, len(segments))

        all_epochs = []
        all_states = []
        all_masses = []

        current_y = state.state_vector

        for segment in segments:
            seg_t_start = segment['t_start']
            seg_t_end = segment['t_end']

            if seg_t_end > seg_t_start:
                if output_step_s is None:
                    t_eval = np.array([seg_t_start, seg_t_end])
                else:
                    t_eval = np.arange(seg_t_start, seg_t_end, output_step_s)
                    if len(t_eval) == 0 or t_eval[-1] < seg_t_end:
                        t_eval = np.append(t_eval, seg_t_end)

                result = self._integrate_segment(
                    current_y, seg_t_start, seg_t_end, t_eval=t_eval
                )

                for j in range(len(result.t)):
                    all_epochs.append(epoch.mjd2000 + result.t[j] * SEC2DAY)
                    all_states.append(result.y[0:6, j])
                    all_masses.append(result.y[6, j])

                current_y = result.y[:, -1].copy()

            # Apply the impulsive maneuver closing this segment
            man = segment.get('maneuver')
            if man is not None:
                current_y[3:6] += man.dv_vector
                if man.isp is not None:
                    current_y[6] *= np.exp(-man.dv_magnitude / (man.isp * G0 * KM_PER_M))

        return PropagationResult(
            epochs=np.array(all_epochs),
            states=np.array(all_states),
            masses=np.array(all_masses),
        )

    def propagate_coast(self, state: ScState, dt_s: float) -> ScState:
        """Integrate a ballistic arc over a signed interval.

        Args:
            state: Initial spacecraft state.
            dt_s: Arc duration [seconds]; negative integrates backward.

        Returns:
            Spacecraft state at the end of the arc (mass unchanged).
        """
        if dt_s == 0.0:
            return state
        result = self._integrate_segment(state.state_vector, 0.0, dt_s)
        return ScState.from_vector(result.y[:, -1])

    def propagate_thrust_arc(self, state: ScState, dt_s: float,
                             thrust_vector_n: np.ndarray,
                             isp_s: float) -> ScState:
        """Integrate a constant-thrust arc over a signed interval.

        Integrating backward (dt_s < 0) with the same thrust vector recovers
        the state that, flown forward, arrives at the given state; the mass
        grows accordingly.

        Args:
            state: Initial spacecraft state.
            dt_s: Arc duration [seconds]; negative integrates backward.
            thrust_vector_n: Inertial thrust vector [Newtons], shape (3,).
            isp_s: Specific impulse [seconds].

        Returns:
            Spacecraft state at the end of the arc.
        """
        if dt_s == 0.0:
            return state
        thrust_func = make_thrust_func(thrust_vector_n, isp_s)
        result = self._integrate_segment(
            state.state_vector, 0.0, dt_s, thrust_func=thrust_func
        )
        return ScState.from_vector(result.y[:, -1])

    def _integrate_segment(self, y0, t_start, t_end,
                           t_eval=None, thrust_func=None):
        """Core integration call wrapping scipy.integrate.solve_ivp.

        Args:
            y0: Initial state vector (7,).
            t_start, t_end: Time span [seconds]; t_end may precede t_start.
            t_eval: Specific output times.
            thrust_func: Thrust callable or None.

        Returns:
            scipy OdeResult.
        """
        cfg = self.config.integrator
        mu = self.mu

        def rhs(t, y):
            return eom_two_body(t, y, mu, thrust_func=thrust_func)

        result = solve_ivp(
            rhs,
            t_span=(t_start, t_end),
            y0=y0,
            method=cfg.method,
            rtol=cfg.rtol,
            atol=cfg.atol,
            max_step=cfg.max_step_s,
            t_eval=t_eval,
        )

        if not result.success:
            raise PropagationError(
                f"Integration failed: {result.message} "
                f"(t_start={t_start:.1f}, t_end={t_end:.1f})"
            )

        return result

    def _build_segments(self, t_start, t_end, maneuvers, epoch_ref):
        """Build integration segments separated by maneuver events.

        Each segment is a dict with t_start, t_end, and an optional maneuver
        to apply at its end.

        Args:
            t_start, t_end: Overall propagation time span [seconds].
            maneuvers: Sorted list of Maneuver objects.
            epoch_ref: Reference epoch.

        Returns:
            List of segment dicts.
        """
        segments = []
        current_t = t_start

        if maneuvers is None:
            maneuvers = []

        for man in maneuvers:
            t_man = (man.epoch.mjd2000 - epoch_ref.mjd2000) * DAY2SEC

            if t_man < t_start or t_man > t_end:
                logger.debug("Skipping maneuver at %s outside the propagation span", man.epoch)
                continue

            # Coast to maneuver epoch
            segments.append({
                't_start': current_t,
                't_end': t_man,
                'maneuver': man
            })
            current_t = t_man

        # Final coast to end
        segments.append({
            't_start': current_t,
            't_end': t_end,
        })

        return segments
