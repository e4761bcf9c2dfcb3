"""
Physical and mathematical constants.

Sources:
    - IAU 2012 for astronomical constants
    - JPL planetary mean elements for planetary orbit radii
"""

import numpy as np

# ---------------------------------------------------------------------------
# Mathematical constants
# ---------------------------------------------------------------------------
TWO_PI = 2.0 * np.pi

# ---------------------------------------------------------------------------
# Time constants
# ---------------------------------------------------------------------------
MJD_2000 = 51544.0                      # MJD of 2000-01-01 00:00 (MJD2000 origin)
DAY2SEC = 86400.0
SEC2DAY = 1.0 / DAY2SEC

# ---------------------------------------------------------------------------
# Unit conversions
# ---------------------------------------------------------------------------
KM_PER_M = 1.0e-3

# ---------------------------------------------------------------------------
# Solar parameters
# ---------------------------------------------------------------------------
MU_SUN = 1.32712440018e11              # Sun gravitational parameter [km³/s²]
AU_KM = 149597870.7                     # Astronomical unit [km]

# ---------------------------------------------------------------------------
# Planetary parameters
# ---------------------------------------------------------------------------
MU_EARTH = 398600.4418                  # Gravitational parameter [km³/s²]
MARS_SMA_KM = 1.52371034 * AU_KM        # Mars mean orbit radius [km]

# ---------------------------------------------------------------------------
# General
# ---------------------------------------------------------------------------
G0 = 9.80665                            # Standard gravitational acceleration [m/s²]
