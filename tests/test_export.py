"""
===============================================================================
SIMS-FLANAGAN - Export and Report Test Suite
===============================================================================
Tests for versioned dict/JSON export and import of legs, file round trips,
rejection of malformed payloads, and the human-readable leg report.
===============================================================================
"""

import json

import numpy as np
import pytest

from sims_flanagan.core.config import PropagationConfig, KeplerConfig
from sims_flanagan.core.constants import MU_SUN
from sims_flanagan.core.errors import ConfigurationError
from sims_flanagan.export.formatting import format_leg
from sims_flanagan.export.serialization import (
    FORMAT_VERSION, leg_to_dict, leg_from_dict, dumps, loads, save, load,
)
from sims_flanagan.transcription.leg import Leg

from conftest import make_leg


@pytest.fixture
def powered_leg(t_i, t_f, earth_state, mars_state, spacecraft):
    return make_leg(t_i, earth_state, t_f, mars_state, spacecraft,
                    [0.1, 0.2, 0.3, -0.4, 0.5, 0.0, 0.0, 0.0, 0.9],
                    high_fidelity=True)


def assert_same_leg(a, b):
    assert a.t_i == b.t_i
    assert a.t_f == b.t_f
    assert a.x_i == b.x_i
    assert a.x_f == b.x_f
    assert a.throttles == b.throttles
    assert a.spacecraft == b.spacecraft
    assert a.mu == b.mu
    assert a.high_fidelity == b.high_fidelity


# =============================================================================
# Test: Dict and JSON export
# =============================================================================

class TestSerialization:

    def test_dict_layout(self, powered_leg):
        payload = leg_to_dict(powered_leg)

        assert payload["version"] == FORMAT_VERSION
        assert payload["t_i"] == 1000.0
        assert len(payload["x_i"]) == 7
        assert len(payload["throttles"]) == 3
        assert payload["throttles"][2]["value"] == [0.0, 0.0, 0.9]
        assert payload["spacecraft"] == {"mass": 1000.0, "thrust": 0.3, "isp": 3000.0}
        assert payload["high_fidelity"] is True

    def test_dict_round_trip(self, powered_leg):
        assert_same_leg(leg_from_dict(leg_to_dict(powered_leg)), powered_leg)

    def test_json_round_trip(self, powered_leg):
        text = dumps(powered_leg)
        json.loads(text)
        assert_same_leg(loads(text), powered_leg)

    def test_file_round_trip(self, earth_mars_leg, tmp_path):
        path = tmp_path / "leg.json"
        save(earth_mars_leg, path)
        restored = load(str(path))

        assert_same_leg(restored, earth_mars_leg)
        assert np.array_equal(restored.evaluate_mismatch(),
                              earth_mars_leg.evaluate_mismatch())

    def test_config_passed_through(self, earth_mars_leg):
        config = PropagationConfig(kepler=KeplerConfig(tol=1e-10))
        restored = leg_from_dict(leg_to_dict(earth_mars_leg), config)
        assert restored.config is config

    def test_missing_high_fidelity_defaults_to_false(self, powered_leg):
        payload = leg_to_dict(powered_leg)
        del payload["high_fidelity"]
        assert leg_from_dict(payload).high_fidelity is False

    def test_unconfigured_leg_cannot_be_exported(self):
        with pytest.raises(ConfigurationError):
            leg_to_dict(Leg())


# =============================================================================
# Test: Malformed payloads
# =============================================================================

class TestMalformedPayloads:

    @pytest.mark.parametrize("version", [None, 0, FORMAT_VERSION + 1, "1"])
    def test_unsupported_version(self, earth_mars_leg, version):
        payload = leg_to_dict(earth_mars_leg)
        payload["version"] = version
        with pytest.raises(ConfigurationError, match="version"):
            leg_from_dict(payload)

    @pytest.mark.parametrize("field", ["t_i", "x_f", "throttles", "spacecraft", "mu"])
    def test_missing_field(self, earth_mars_leg, field):
        payload = leg_to_dict(earth_mars_leg)
        del payload[field]
        with pytest.raises(ConfigurationError, match=field):
            leg_from_dict(payload)

    def test_reversed_epochs(self, earth_mars_leg):
        payload = leg_to_dict(earth_mars_leg)
        payload["t_i"], payload["t_f"] = payload["t_f"], payload["t_i"]
        with pytest.raises(ConfigurationError):
            leg_from_dict(payload)

    def test_non_positive_mu(self, earth_mars_leg):
        payload = leg_to_dict(earth_mars_leg)
        payload["mu"] = -1.0
        with pytest.raises(ConfigurationError):
            leg_from_dict(payload)

    def test_bad_state_length(self, earth_mars_leg):
        payload = leg_to_dict(earth_mars_leg)
        payload["x_i"] = payload["x_i"][:6]
        with pytest.raises(ConfigurationError):
            leg_from_dict(payload)

    @pytest.mark.parametrize("payload", [[], "leg", None, 3.0])
    def test_payload_not_a_dict(self, payload):
        with pytest.raises(ConfigurationError, match="JSON object"):
            leg_from_dict(payload)

    def test_throttle_entry_is_a_list(self, earth_mars_leg):
        payload = leg_to_dict(earth_mars_leg)
        payload["throttles"][0] = [1000.0, 1100.0, [0.0, 0.0, 0.0]]
        with pytest.raises(ConfigurationError, match="Malformed"):
            leg_from_dict(payload)

    @pytest.mark.parametrize("field, value", [
        ("spacecraft", [1000.0, 0.3, 3000.0]),
        ("throttles", 5),
        ("t_i", None),
        ("mu", "sun"),
        ("x_i", ["a"] * 7),
    ])
    def test_field_of_wrong_type(self, earth_mars_leg, field, value):
        payload = leg_to_dict(earth_mars_leg)
        payload[field] = value
        with pytest.raises(ConfigurationError):
            leg_from_dict(payload)

    def test_malformed_json_document(self):
        with pytest.raises(ConfigurationError):
            loads("[1, 2, 3]")


# =============================================================================
# Test: Text report
# =============================================================================

class TestFormatting:

    def test_full_report(self, powered_leg):
        text = format_leg(powered_leg)

        assert "High fidelity: True" in text
        assert "Number of segments: 3" in text
        assert "Spacecraft thrust: 0.3 N" in text
        assert "Departure date: 1000 MJD2000" in text
        assert "Time of flight: 200 days" in text
        assert "Throttles values:" in text
        assert "Mismatch constraints: [" in text
        assert "Throttle magnitude constraints: [" in text

    def test_report_matches_str(self, earth_mars_leg):
        assert str(earth_mars_leg) == format_leg(earth_mars_leg)

    def test_partial_leg(self, t_i, t_f, earth_state, mars_state):
        leg = Leg()
        leg.set_leg(t_i, earth_state, [], t_f, mars_state, MU_SUN)

        text = format_leg(leg)

        assert "Spacecraft: not set" in text
        assert "Mismatch constraints: unavailable" in text
        assert "spacecraft" in text.split("unavailable", 1)[1]

    def test_constraint_values_in_report(self, t_i, t_f, earth_state, mars_state,
                                         spacecraft):
        leg = make_leg(t_i, earth_state, t_f, mars_state, spacecraft, [0.0, 0.0, 0.0])
        assert "Throttle magnitude constraints: [-1]" in format_leg(leg)
