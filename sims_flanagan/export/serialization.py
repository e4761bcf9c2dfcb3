"""
Versioned leg export/import.

A leg is exported as a plain dict (JSON compatible) holding every field
plus a format version. Import rebuilds the leg through Leg.set_leg, so a
reloaded leg satisfies the same invariants as a freshly configured one
(t_f > t_i, mu > 0).

Layout (version 1):
    {
        "version": 1,
        "t_i": <mjd2000>, "t_f": <mjd2000>,
        "x_i": [rx, ry, rz, vx, vy, vz, m], "x_f": [...],
        "throttles": [{"start": <mjd2000>, "end": <mjd2000>, "value": [x, y, z]}, ...],
        "spacecraft": {"mass": m, "thrust": T, "isp": Isp},
        "mu": mu,
        "high_fidelity": false
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Union

from ..core.types import Epoch, ScState, Spacecraft, ThrottleSegment
from ..core.config import PropagationConfig
from ..core.errors import ConfigurationError
from ..transcription.leg import Leg

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def leg_to_dict(leg: Leg) -> dict:
    """Export every field of a fully configured leg."""
    data = leg.snapshot()
    return {
        "version": FORMAT_VERSION,
        "t_i": data.t_i.mjd2000,
        "x_i": data.x_i.state_vector.tolist(),
        "throttles": [
            {"start": seg.start.mjd2000, "end": seg.end.mjd2000,
             "value": seg.value.tolist()}
            for seg in data.throttles
        ],
        "t_f": data.t_f.mjd2000,
        "x_f": data.x_f.state_vector.tolist(),
        "spacecraft": {
            "mass": data.spacecraft.mass,
            "thrust": data.spacecraft.thrust,
            "isp": data.spacecraft.isp,
        },
        "mu": data.mu,
        "high_fidelity": data.high_fidelity,
    }


def leg_from_dict(payload: dict,
                  config: Optional[PropagationConfig] = None) -> Leg:
    """Rebuild a leg from leg_to_dict output.

    Raises:
        ConfigurationError: On an unsupported version, a missing field, or
            a payload violating the leg invariants. A payload that is not a
            dict, or holds fields of the wrong shape, is rejected the same way.
    """
    if not isinstance(payload, dict):
        raise ConfigurationError(
            f"Leg payload must be a JSON object, got {type(payload).__name__}"
        )
    version = payload.get("version")
    if not isinstance(version, int) or not 1 <= version <= FORMAT_VERSION:
        raise ConfigurationError(
            f"Unsupported leg format version {version!r} (supported: 1..{FORMAT_VERSION})"
        )

    try:
        throttles = [
            ThrottleSegment(Epoch(float(seg["start"])), Epoch(float(seg["end"])),
                            seg["value"])
            for seg in payload["throttles"]
        ]
        sc = payload["spacecraft"]
        spacecraft = Spacecraft(mass=float(sc["mass"]), thrust=float(sc["thrust"]),
                                isp=float(sc["isp"]))
        t_i = Epoch(float(payload["t_i"]))
        t_f = Epoch(float(payload["t_f"]))
        x_i = ScState.from_vector(payload["x_i"])
        x_f = ScState.from_vector(payload["x_f"])
        mu = float(payload["mu"])
        high_fidelity = payload.get("high_fidelity", False)
    except ConfigurationError:
        raise
    except KeyError as exc:
        raise ConfigurationError(f"Leg payload is missing field {exc}") from exc
    except (TypeError, AttributeError, ValueError) as exc:
        raise ConfigurationError(f"Malformed leg payload: {exc}") from exc

    leg = Leg(config)
    leg.set_leg(t_i, x_i, throttles, t_f, x_f, mu,
                spacecraft=spacecraft, high_fidelity=high_fidelity)
    logger.debug("Imported leg (format version %d, %d segment(s))",
                 version, len(throttles))
    return leg


def dumps(leg: Leg, **json_kwargs) -> str:
    """Serialize a leg to a JSON string."""
    return json.dumps(leg_to_dict(leg), **json_kwargs)


def loads(text: str, config: Optional[PropagationConfig] = None) -> Leg:
    """Deserialize a leg from a JSON string."""
    return leg_from_dict(json.loads(text), config)


def save(leg: Leg, path: Union[str, Path]) -> None:
    """Write a leg to a JSON file."""
    path = Path(path)
    path.write_text(dumps(leg, indent=2))
    logger.info("Saved leg to %s", path)


def load(path: Union[str, Path],
         config: Optional[PropagationConfig] = None) -> Leg:
    """Read a leg from a JSON file."""
    path = Path(path)
    leg = loads(path.read_text(), config)
    logger.info("Loaded leg from %s", path)
    return leg
