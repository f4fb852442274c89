"""Country and region table tests."""
import pytest

from config.locations import (
    COUNTRIES, DEFAULT_COUNTRY, HN_DEPARTMENT_CENTROIDS, get_country_config,
    get_location_fallback, is_supported_country, match_department, normalize_country_code,
)


class TestCountries:
    """Tests for the country table."""

    def test_default_country(self):
        assert DEFAULT_COUNTRY == "HN"
        assert get_country_config("HN")["currency"] == "HNL"

    def test_every_country_is_complete(self):
        for code, cfg in COUNTRIES.items():
            assert cfg["code"] == code
            assert {"name", "currency", "phone_prefix", "coordinates", "states"} <= set(cfg)
            assert cfg["states"]

    def test_unknown_code_falls_back(self):
        assert get_country_config("ZZ")["code"] == "HN"
        assert get_country_config(None)["code"] == "HN"

    def test_is_supported_country(self):
        assert is_supported_country("gt") is True
        assert is_supported_country("ZZ") is False
        assert is_supported_country("") is False

    @pytest.mark.parametrize("value, expected", [
        ("HN", "HN"),
        ("gt", "GT"),
        ("Honduras", "HN"),
        ("México", "MX"),
        ("republica dominicana", "DO"),
        ("USA", "US"),
        ("Narnia", "HN"),
        (None, "HN"),
    ])
    def test_normalize_country_code(self, value, expected):
        assert normalize_country_code(value) == expected

    def test_normalize_custom_default(self):
        assert normalize_country_code("Narnia", default="GT") == "GT"


class TestDepartments:
    """Tests for Honduran department matching and fallback coordinates."""

    def test_eighteen_departments(self):
        assert len(HN_DEPARTMENT_CENTROIDS) == 18

    @pytest.mark.parametrize("value, expected", [
        ("Cortés", "Cortés"),
        ("cortes", "Cortés"),
        ("Francisco", "Francisco Morazán"),
        ("Depto. de Atlántida", "Atlántida"),
        ("", None),
        ("Narnia", None),
    ])
    def test_match_department(self, value, expected):
        assert match_department(value) == expected

    def test_fallback_uses_department(self):
        assert get_location_fallback("San Pedro Sula", "Cortés", "HN") == {"lat": 15.5042, "lng": -88.0250}

    def test_fallback_uses_country_centroid(self):
        assert get_location_fallback("Antigua", "Sacatepéquez", "GT") == {"lat": 14.6349, "lng": -90.5069}

    def test_fallback_unknown_department_and_country(self):
        assert get_location_fallback(None, "Narnia", "HN") == {"lat": 14.0818, "lng": -87.2068}
        assert get_location_fallback(None, None, "ZZ") == {"lat": 14.0818, "lng": -87.2068}
