"""
Sims-Flanagan Low-Thrust Leg Model
==================================
Discretized low-thrust trajectory legs for global trajectory optimization.

Architecture:
    - Throttle segments approximating continuous thrust by midpoint impulses
    - Forward/backward shooting to a matching point with rocket-equation
      mass depletion
    - Universal-variable Kepler propagation between impulses
    - Numerical (DOP853) reference propagator and high-fidelity thrust arcs
    - Versioned export/import and text reports of leg configurations
"""

__version__ = "0.1.0"
