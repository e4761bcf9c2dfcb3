"""
Foundational data types for the Sims-Flanagan leg model.

All state and configuration data flows through these dataclasses.
Convention:
    - Distances: km
    - Time: seconds (propagation), days since MJD2000 (epochs)
    - Velocity: km/s
    - Mass: kg
    - Thrust: Newtons
    - Specific impulse: seconds
"""

from __future__ import annotations

import numpy as np
from dataclasses import dataclass, field
from typing import Optional

from .config import PropagationConfig
from .constants import DAY2SEC, MJD_2000, G0, KM_PER_M
from .errors import ConfigurationError


def _frozen_array(values, size: int, name: str) -> np.ndarray:
    """Copy values into a read-only float64 array of the given size."""
    arr = np.array(values, dtype=np.float64).reshape(-1)
    if arr.size != size:
        raise ConfigurationError(f"{name} must have {size} components, got {arr.size}")
    arr.flags.writeable = False
    return arr


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------

@dataclass(frozen=True, order=True)
class Epoch:
    """A point in time, stored as days since MJD2000 (2000-01-01 00:00).

    Subtracting two epochs yields the elapsed time in days.

    Attributes:
        mjd2000: Days since the MJD2000 origin.
    """
    mjd2000: float

    @classmethod
    def from_mjd(cls, mjd: float) -> Epoch:
        """Build an epoch from a Modified Julian Date."""
        return cls(mjd - MJD_2000)

    @property
    def mjd(self) -> float:
        return self.mjd2000 + MJD_2000

    @property
    def seconds(self) -> float:
        """Seconds since the MJD2000 origin."""
        return self.mjd2000 * DAY2SEC

    def seconds_since(self, other: Epoch) -> float:
        """Elapsed seconds from other to self (negative if other is later)."""
        return (self.mjd2000 - other.mjd2000) * DAY2SEC

    def __sub__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return self.mjd2000 - other.mjd2000

    def __str__(self) -> str:
        return f"{self.mjd2000:.10g} MJD2000"


# ---------------------------------------------------------------------------
# Spacecraft and state
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ScState:
    """Spacecraft position, velocity and mass.

    Attributes:
        position: Position vector [km], shape (3,).
        velocity: Velocity vector [km/s], shape (3,).
        mass: Spacecraft mass [kg].
    """
    position: np.ndarray        # (3,) km
    velocity: np.ndarray        # (3,) km/s
    mass: float                 # kg

    def __post_init__(self):
        object.__setattr__(self, "position", _frozen_array(self.position, 3, "position"))
        object.__setattr__(self, "velocity", _frozen_array(self.velocity, 3, "velocity"))
        object.__setattr__(self, "mass", float(self.mass))

    @property
    def state_vector(self) -> np.ndarray:
        """Combined [r, v, m] vector, shape (7,)."""
        return np.concatenate([self.position, self.velocity, [self.mass]])

    @classmethod
    def from_vector(cls, y) -> ScState:
        """Unpack a 7-element [r, v, m] sequence."""
        y = np.asarray(y, dtype=np.float64)
        if y.shape != (7,):
            raise ConfigurationError(f"state vector must have 7 components, got shape {y.shape}")
        return cls(position=y[0:3], velocity=y[3:6], mass=y[6])

    def __eq__(self, other):
        if not isinstance(other, ScState):
            return NotImplemented
        return bool(np.array_equal(self.state_vector, other.state_vector))

    __hash__ = None

    def __repr__(self) -> str:
        return (f"ScState(position={self.position.tolist()}, "
                f"velocity={self.velocity.tolist()}, mass={self.mass!r})")


@dataclass(frozen=True)
class Spacecraft:
    """Low-thrust spacecraft propulsion model.

    Attributes:
        mass: Reference (wet) mass [kg].
        thrust: Maximum thrust [Newtons].
        isp: Specific impulse [seconds].
    """
    mass: float
    thrust: float
    isp: float

    @property
    def exhaust_velocity(self) -> float:
        """Effective exhaust velocity isp * g0 [km/s]."""
        return self.isp * G0 * KM_PER_M

    @property
    def mass_flow_rate(self) -> float:
        """Propellant mass flow rate at full thrust [kg/s]."""
        return self.thrust / (self.isp * G0)


# ---------------------------------------------------------------------------
# Throttles and maneuvers
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ThrottleSegment:
    """One Sims-Flanagan segment: an impulse standing in for thrust over [start, end].

    The value is the Cartesian throttle (x, y, z), the impulse expressed as a
    fraction of the maximum Δv the spacecraft can deliver over the segment.
    It is physically meaningful only inside the unit ball; nothing is
    validated here.

    Attributes:
        start: Segment start epoch.
        end: Segment end epoch.
        value: Throttle vector, shape (3,), read-only.
    """
    start: Epoch
    end: Epoch
    value: np.ndarray           # (3,) dimensionless

    def __post_init__(self):
        object.__setattr__(self, "value", _frozen_array(self.value, 3, "throttle value"))

    @property
    def norm(self) -> float:
        """Euclidean norm of the throttle vector."""
        return float(np.linalg.norm(self.value))

    @property
    def duration(self) -> float:
        """Segment duration [seconds]."""
        return (self.end.mjd2000 - self.start.mjd2000) * DAY2SEC

    @property
    def midpoint(self) -> float:
        """Impulse time [seconds since MJD2000]."""
        return (self.start.mjd2000 + self.end.mjd2000) / 2.0 * DAY2SEC

    def __eq__(self, other):
        if not isinstance(other, ThrottleSegment):
            return NotImplemented
        return (self.start == other.start and self.end == other.end
                and bool(np.array_equal(self.value, other.value)))

    __hash__ = None

    def __repr__(self) -> str:
        return (f"ThrottleSegment(start={self.start.mjd2000!r}, "
                f"end={self.end.mjd2000!r}, value={self.value.tolist()})")


@dataclass
class Maneuver:
    """An impulsive maneuver for the numerical propagator.

    Attributes:
        epoch: Maneuver epoch.
        dv_vector: ΔV vector [km/s], shape (3,).
        isp: Specific impulse used to deplete mass [seconds]. None leaves
            the mass unchanged.
    """
    epoch: Epoch
    dv_vector: np.ndarray       # (3,) km/s
    isp: Optional[float] = None

    @property
    def dv_magnitude(self) -> float:
        return float(np.linalg.norm(self.dv_vector))


# ---------------------------------------------------------------------------
# Propagation results
# ---------------------------------------------------------------------------

@dataclass
class PropagationResult:
    """Output of a numerical propagation.

    Attributes:
        epochs: Time history of epochs [days since MJD2000], shape (N,).
        states: State vectors [x,y,z,vx,vy,vz] over time, shape (N, 6).
        masses: Mass history [kg], shape (N,).
    """
    epochs: np.ndarray              # (N,)
    states: np.ndarray              # (N, 6)
    masses: np.ndarray              # (N,)

    @property
    def positions(self) -> np.ndarray:
        """Position history, shape (N, 3)."""
        return self.states[:, :3]

    @property
    def velocities(self) -> np.ndarray:
        """Velocity history, shape (N, 3)."""
        return self.states[:, 3:6]

    @property
    def final_state(self) -> ScState:
        return ScState(self.states[-1, 0:3], self.states[-1, 3:6], self.masses[-1])


# ---------------------------------------------------------------------------
# Leg snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LegData:
    """Immutable snapshot of a fully configured leg.

    The shooting evaluators only ever see this snapshot, so nothing set on a
    Leg between optimizer iterations can leak into an evaluation in flight.
    """
    t_i: Epoch
    x_i: ScState
    throttles: tuple[ThrottleSegment, ...]
    t_f: Epoch
    x_f: ScState
    spacecraft: Spacecraft
    mu: float
    high_fidelity: bool = False
    config: PropagationConfig = field(default_factory=PropagationConfig)

    @property
    def n_seg(self) -> int:
        return len(self.throttles)

    @property
    def n_seg_fwd(self) -> int:
        return (len(self.throttles) + 1) // 2

    @property
    def n_seg_back(self) -> int:
        return len(self.throttles) // 2
