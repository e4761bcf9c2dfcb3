"""
Propagation configuration.

Central configuration objects for the Kepler solver and the numerical
integrator used by the reference and high-fidelity propagators.
"""

from dataclasses import dataclass, field

import numpy as np


@dataclass
class KeplerConfig:
    """Universal-variable Kepler solver settings.

    Attributes:
        tol: Relative convergence tolerance on the universal anomaly. Steps
            that stall below sqrt(tol) are also accepted.
        max_iter: Iteration cap before PropagationError is raised.
    """
    tol: float = 1e-13
    max_iter: int = 100


@dataclass
class IntegratorConfig:
    """Numerical integrator configuration.

    Uses scipy's DOP853 (8th-order Dormand-Prince) by default.
    Tight tolerances are required when the result is compared against the
    analytical Kepler propagation.
    """
    method: str = "DOP853"
    rtol: float = 1e-12
    atol: float = 1e-12
    max_step_s: float = np.inf      # Maximum step size [seconds]


@dataclass
class PropagationConfig:
    """Top-level propagation configuration."""
    kepler: KeplerConfig = field(default_factory=KeplerConfig)
    integrator: IntegratorConfig = field(default_factory=IntegratorConfig)

    def describe(self) -> str:
        """Human-readable description of the active settings."""
        return (f"Kepler(tol={self.kepler.tol:g}, max_iter={self.kepler.max_iter}) + "
                f"{self.integrator.method}(rtol={self.integrator.rtol:g}, "
                f"atol={self.integrator.atol:g})")
