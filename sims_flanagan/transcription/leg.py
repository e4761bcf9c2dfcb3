"""
Sims-Flanagan low-thrust trajectory leg.

A leg transfers a spacecraft from an initial state x_i at epoch t_i to a
final state x_f at epoch t_f through a sequence of throttle segments, each
modelled as an impulse of bounded magnitude at the segment midpoint. The
leg is feasible when evaluate_mismatch() returns all zeros and every value
of evaluate_throttle_constraints() is <= 0.

The Leg object is the mutable configuration an optimizer overwrites on
every fitness call. Mismatch evaluation goes through an immutable LegData
snapshot and the pure functions in .shooting, so evaluating never changes
the leg. Throttle constraints read only the throttle tuple, which is
already an immutable copy, so they are taken from the leg directly and
work on a partially configured leg.

Throttle segments are expected to be time ordered and to cover [t_i, t_f]
without gaps or overlaps. This is not checked here;
throttles.validate_throttle_coverage does it on request.
"""

from __future__ import annotations

import logging

import numpy as np
from typing import Iterable, Optional, Union

from ..core.types import Epoch, ScState, Spacecraft, ThrottleSegment, LegData
from ..core.config import PropagationConfig
from ..core.errors import ConfigurationError
from .shooting import mismatch_constraints, throttle_constraints

logger = logging.getLogger(__name__)


def _check_epochs(t_i: Optional[Epoch], t_f: Optional[Epoch]) -> None:
    if t_i is not None and t_f is not None and t_f.mjd2000 <= t_i.mjd2000:
        raise ConfigurationError(
            f"Final epoch ({t_f}) must be after the initial epoch ({t_i})"
        )


def _check_mu(mu: float) -> None:
    if not mu > 0:
        raise ConfigurationError(
            f"Gravitational parameter must be positive, got {mu}"
        )


class Leg:
    """A Sims-Flanagan low-thrust leg.

    Constructed empty; configure it with set_leg() (plus the spacecraft) or
    through the individual setters before evaluating.

    Attributes:
        config: Propagation settings used during evaluation.
    """

    def __init__(self, config: Optional[PropagationConfig] = None):
        self.config = config if config is not None else PropagationConfig()
        self._t_i: Optional[Epoch] = None
        self._x_i: Optional[ScState] = None
        self._throttles: list[ThrottleSegment] = []
        self._t_f: Optional[Epoch] = None
        self._x_f: Optional[ScState] = None
        self._spacecraft: Optional[Spacecraft] = None
        self._mu: Optional[float] = None
        self._high_fidelity = False

    # ------------------------------------------------------------------
    # Bulk configuration
    # ------------------------------------------------------------------

    def set_leg(self,
                t_i: Epoch,
                x_i: ScState,
                throttles: Iterable[ThrottleSegment],
                t_f: Epoch,
                x_f: ScState,
                mu: float,
                spacecraft: Optional[Spacecraft] = None,
                high_fidelity: Optional[bool] = None) -> None:
        """Set boundary conditions, throttles and mu in one call.

        Args:
            t_i: Departure epoch.
            x_i: Departure state.
            throttles: Throttle segments, in time order.
            t_f: Arrival epoch, strictly after t_i.
            x_f: Arrival state.
            mu: Central body gravitational parameter [km^3/s^2], > 0.
            spacecraft: Optional spacecraft; the current one is kept if None.
            high_fidelity: Optional evaluation mode; unchanged if None.

        Raises:
            ConfigurationError: If t_f <= t_i or mu <= 0. The leg is left
                unchanged, as it is when iterating throttles raises.
        """
        _check_epochs(t_i, t_f)
        _check_mu(mu)

        throttles = list(throttles)

        self._t_i = t_i
        self._x_i = x_i
        self._t_f = t_f
        self._x_f = x_f
        self._throttles = throttles
        self._mu = mu
        if spacecraft is not None:
            self._spacecraft = spacecraft
        if high_fidelity is not None:
            self._high_fidelity = bool(high_fidelity)

        logger.debug("Leg set: %d segment(s), %.6g days, mu=%.6g",
                     len(self._throttles), t_f - t_i, mu)

    # ------------------------------------------------------------------
    # Individual fields
    # ------------------------------------------------------------------

    @property
    def spacecraft(self) -> Optional[Spacecraft]:
        return self._spacecraft

    @spacecraft.setter
    def spacecraft(self, sc: Spacecraft) -> None:
        self._spacecraft = sc

    @property
    def mu(self) -> Optional[float]:
        """Central body gravitational parameter [km^3/s^2]."""
        return self._mu

    @mu.setter
    def mu(self, mu: float) -> None:
        _check_mu(mu)
        self._mu = mu

    @property
    def high_fidelity(self) -> bool:
        """Fly segments as continuous thrust arcs instead of midpoint impulses."""
        return self._high_fidelity

    @high_fidelity.setter
    def high_fidelity(self, flag: bool) -> None:
        self._high_fidelity = bool(flag)

    @property
    def t_i(self) -> Optional[Epoch]:
        return self._t_i

    @t_i.setter
    def t_i(self, epoch: Epoch) -> None:
        _check_epochs(epoch, self._t_f)
        self._t_i = epoch

    @property
    def t_f(self) -> Optional[Epoch]:
        return self._t_f

    @t_f.setter
    def t_f(self, epoch: Epoch) -> None:
        _check_epochs(self._t_i, epoch)
        self._t_f = epoch

    @property
    def x_i(self) -> Optional[ScState]:
        return self._x_i

    @x_i.setter
    def x_i(self, state: ScState) -> None:
        self._x_i = state

    @property
    def x_f(self) -> Optional[ScState]:
        return self._x_f

    @x_f.setter
    def x_f(self, state: ScState) -> None:
        self._x_f = state

    # ------------------------------------------------------------------
    # Throttles
    # ------------------------------------------------------------------

    @property
    def throttles(self) -> tuple[ThrottleSegment, ...]:
        return tuple(self._throttles)

    @throttles.setter
    def throttles(self, throttles: Iterable[ThrottleSegment]) -> None:
        self._throttles = list(throttles)

    @property
    def throttles_size(self) -> int:
        return len(self._throttles)

    def __len__(self) -> int:
        return len(self._throttles)

    def set_throttles_size(self, size: int) -> None:
        """Resize the throttle list.

        Growing pads with zero throttles spanning the MJD2000 origin; these
        are placeholders to be overwritten with set_throttle().
        """
        if size < 0:
            raise ConfigurationError(f"Throttle list size must be >= 0, got {size}")
        current = len(self._throttles)
        if size <= current:
            del self._throttles[size:]
            return
        origin = Epoch(0.0)
        self._throttles.extend(
            ThrottleSegment(origin, origin, np.zeros(3)) for _ in range(size - current)
        )

    def set_throttle(self, index: int, throttle: ThrottleSegment) -> None:
        self._throttles[index] = throttle

    def get_throttle(self, index: int) -> ThrottleSegment:
        return self._throttles[index]

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def snapshot(self) -> LegData:
        """Freeze the current configuration for evaluation.

        Raises:
            ConfigurationError: If any field has not been set yet.
        """
        missing = [name for name, value in (
            ("t_i", self._t_i), ("x_i", self._x_i), ("t_f", self._t_f),
            ("x_f", self._x_f), ("spacecraft", self._spacecraft), ("mu", self._mu),
        ) if value is None]
        if missing:
            raise ConfigurationError(
                f"Leg is not fully configured, missing: {', '.join(missing)}"
            )
        return LegData(
            t_i=self._t_i, x_i=self._x_i, throttles=tuple(self._throttles),
            t_f=self._t_f, x_f=self._x_f, spacecraft=self._spacecraft,
            mu=self._mu, high_fidelity=self._high_fidelity, config=self.config,
        )

    def evaluate_mismatch(self, out=None):
        """State mismatch [dr, dv, dm] at the matching point, see shooting.mismatch_constraints."""
        return mismatch_constraints(self.snapshot(), out)

    def evaluate_throttle_constraints(self, out=None):
        """Throttle magnitude constraints |t_i|^2 - 1, see shooting.throttle_constraints.

        Needs only the throttles, so no snapshot is taken and the epochs,
        states and spacecraft may still be unset.
        """
        return throttle_constraints(self, out)

    def mismatch_state(self) -> ScState:
        """The mismatch packed as an ScState (dr, dv, dm)."""
        return ScState.from_vector(self.evaluate_mismatch())

    def is_feasible(self, tol: Union[float, np.ndarray] = 1e-8) -> bool:
        """Whether both the mismatch and the throttle constraints are satisfied.

        Args:
            tol: Absolute tolerance on each mismatch component, scalar or
                shape (7,).
        """
        mismatch = self.evaluate_mismatch()
        if not np.all(np.abs(mismatch) <= tol):
            return False
        return bool(np.all(self.evaluate_throttle_constraints() <= 0.0))

    def __str__(self) -> str:
        from ..export.formatting import format_leg
        return format_leg(self)
