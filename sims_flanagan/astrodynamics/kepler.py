"""
Analytical two-body (Keplerian) propagation.

Universal-variable formulation with Lagrange f and g coefficients. A single
code path handles elliptic, parabolic and hyperbolic orbits, and a negative
time of flight propagates backward.

References:
    Vallado, "Fundamentals of Astrodynamics and Applications", Alg. 8 (KEPLER)
    Curtis, "Orbital Mechanics for Engineering Students", Sec. 3.7
"""

from __future__ import annotations

import numpy as np
from typing import Optional

from ..core.config import KeplerConfig
from ..core.errors import ConfigurationError, PropagationError

# Below this |psi| the Stumpff functions switch to their series expansions
_STUMPFF_SERIES = 1e-3
# Laguerre-Conway order
_LAGUERRE_N = 5

_DEFAULT_CONFIG = KeplerConfig()


def stumpff_c2(psi: float) -> float:
    """Stumpff function C(psi) = (1 - cos(sqrt(psi))) / psi."""
    if abs(psi) < _STUMPFF_SERIES:
        return 0.5 + psi * (-1.0 / 24.0 + psi * (1.0 / 720.0 + psi * (
            -1.0 / 40320.0 + psi / 3628800.0)))
    if psi > 0:
        s = np.sqrt(psi)
        return (1.0 - np.cos(s)) / psi
    s = np.sqrt(-psi)
    return (np.cosh(s) - 1.0) / (-psi)


def stumpff_c3(psi: float) -> float:
    """Stumpff function S(psi) = (sqrt(psi) - sin(sqrt(psi))) / sqrt(psi)^3."""
    if abs(psi) < _STUMPFF_SERIES:
        return 1.0 / 6.0 + psi * (-1.0 / 120.0 + psi * (1.0 / 5040.0 + psi * (
            -1.0 / 362880.0 + psi / 39916800.0)))
    if psi > 0:
        s = np.sqrt(psi)
        return (s - np.sin(s)) / (s ** 3)
    s = np.sqrt(-psi)
    return (np.sinh(s) - s) / (s ** 3)


def _initial_guess(r0_mag: float, rdotv: float, alpha: float,
                   dt: float, mu: float) -> float:
    """Starting universal anomaly for the iteration [sqrt(km)]."""
    sqrt_mu = np.sqrt(mu)

    if alpha > 0.0:
        # Ellipse: exact for circular orbits
        return sqrt_mu * dt * alpha

    if alpha < 0.0:
        # Hyperbola (Vallado), valid once the log argument exceeds one
        a = 1.0 / alpha
        sign = np.sign(dt)
        arg = (-2.0 * mu * alpha * dt) / (
            rdotv + sign * np.sqrt(-mu * a) * (1.0 - r0_mag * alpha))
        if arg > 1.0:
            return sign * np.sqrt(-a) * np.log(arg)

    # Short-arc approximation
    return sqrt_mu * dt / r0_mag


def propagate_lagrangian(r0: np.ndarray, v0: np.ndarray, dt: float, mu: float,
                         config: Optional[KeplerConfig] = None
                         ) -> tuple[np.ndarray, np.ndarray]:
    """Propagate a two-body state over a signed time interval.

    The universal Kepler equation F(chi) = 0 is solved with the
    Laguerre-Conway iteration, which converges from poor starting points
    for every conic type. Iteration stops when the relative step drops
    below config.tol, or when it stops shrinking while already below
    sqrt(config.tol).

    Args:
        r0: Initial position [km], shape (3,).
        v0: Initial velocity [km/s], shape (3,).
        dt: Time of flight [seconds]; negative propagates backward.
        mu: Central body gravitational parameter [km^3/s^2].
        config: Solver tolerance and iteration cap.

    Returns:
        r: Final position [km], shape (3,).
        v: Final velocity [km/s], shape (3,).

    Raises:
        ConfigurationError: If mu is not strictly positive.
        PropagationError: If the iteration does not converge on finite
            inputs. Non-finite inputs yield non-finite outputs.
    """
    if not mu > 0:
        raise ConfigurationError(f"Gravitational parameter must be positive, got {mu}")
    cfg = config if config is not None else _DEFAULT_CONFIG

    r0 = np.asarray(r0, dtype=np.float64)
    v0 = np.asarray(v0, dtype=np.float64)

    if dt == 0.0:
        return r0.copy(), v0.copy()

    sqrt_mu = np.sqrt(mu)
    r0_mag = np.sqrt(r0 @ r0)
    rdotv = r0 @ v0
    alpha = 2.0 / r0_mag - (v0 @ v0) / mu      # 1/a

    if not (np.isfinite(alpha) and np.isfinite(rdotv) and np.isfinite(dt)):
        nan = np.full(3, np.nan)
        return nan, nan.copy()

    chi = _initial_guess(r0_mag, rdotv, alpha, dt, mu)
    sigma0 = rdotv / sqrt_mu
    n = _LAGUERRE_N
    step = np.inf
    # Below this relative step a step that fails to shrink is rounding noise
    stall_tol = np.sqrt(cfg.tol)

    for _ in range(cfg.max_iter):
        prev_step = step
        chi2 = chi * chi
        psi = chi2 * alpha
        c2 = stumpff_c2(psi)
        c3 = stumpff_c3(psi)

        # F(chi), F'(chi) = r, F''(chi)
        F = (chi2 * chi * c3 + sigma0 * chi2 * c2
             + r0_mag * chi * (1.0 - psi * c3) - sqrt_mu * dt)
        dF = chi2 * c2 + sigma0 * chi * (1.0 - psi * c3) + r0_mag * (1.0 - psi * c2)
        d2F = sigma0 * (1.0 - psi * c2) + (1.0 - alpha * r0_mag) * chi * (1.0 - psi * c3)

        disc = np.sqrt(abs((n - 1) ** 2 * dF * dF - n * (n - 1) * F * d2F))
        step = n * F / (dF + disc)
        chi -= step

        if not np.isfinite(chi):
            nan = np.full(3, np.nan)
            return nan, nan.copy()
        chi_scale = max(1.0, abs(chi))
        if abs(step) <= cfg.tol * chi_scale:
            break
        # Long hyperbolic arcs bottom out above tol: F is a difference of
        # large terms, so the iterate jitters at the float64 noise floor
        if abs(step) >= abs(prev_step) and abs(step) <= stall_tol * chi_scale:
            break
    else:
        raise PropagationError(
            f"Kepler solver did not converge in {cfg.max_iter} iterations "
            f"(dt={dt:.6g} s, alpha={alpha:.6g} 1/km, last step={step:.3g})"
        )

    # Lagrange coefficients at the converged anomaly
    chi2 = chi * chi
    psi = chi2 * alpha
    c2 = stumpff_c2(psi)
    c3 = stumpff_c3(psi)

    f = 1.0 - chi2 / r0_mag * c2
    g = dt - chi2 * chi / sqrt_mu * c3
    r = f * r0 + g * v0
    r_mag = np.sqrt(r @ r)

    g_dot = 1.0 - chi2 / r_mag * c2
    f_dot = sqrt_mu / (r_mag * r0_mag) * chi * (psi * c3 - 1.0)
    v = f_dot * r0 + g_dot * v0

    return r, v


def orbital_energy(r: np.ndarray, v: np.ndarray, mu: float) -> float:
    """Specific mechanical energy v^2/2 - mu/r [km^2/s^2]."""
    return 0.5 * float(v @ v) - mu / float(np.linalg.norm(r))
