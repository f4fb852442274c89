"""Geocoding tests.

Tests for:
- Geocoder.build_queries (most to least specific)
- Geocoder.geocode / resolve against httpx.MockTransport
- fallback to department / country centroids
- has_valid_coordinates, haversine_km, format_distance
"""
import httpx
import pytest

from business.geocoding import (
    Geocoder, format_distance, has_valid_coordinates, haversine_km,
)


def _geocoder(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return Geocoder(base_url="https://geo.test", user_agent="tests", client=client)


class TestBuildQueries:
    """Tests for Geocoder.build_queries."""

    def test_full_chain(self):
        queries = Geocoder.build_queries("San Pedro Sula", "Cortés", "HN", "Barrio Guamilito")
        assert queries == [
            "Barrio Guamilito, San Pedro Sula, Cortés, Honduras",
            "San Pedro Sula, Cortés, Honduras",
            "San Pedro Sula, Honduras",
            "Cortés, Honduras",
        ]

    def test_skips_empty_parts(self):
        assert Geocoder.build_queries("", "Cortés", "HN") == ["Cortés, Honduras"]

    def test_country_name_from_code(self):
        assert Geocoder.build_queries("Antigua", None, "GT") == ["Antigua, Guatemala"]


class TestResolve:
    """Tests for Geocoder.geocode and resolve."""

    def test_first_hit_wins(self):
        seen = []

        def handler(request):
            seen.append(request.url.params["q"])
            assert request.headers["User-Agent"] == "tests"
            assert request.url.params["format"] == "json"
            if request.url.params["q"].startswith("San Pedro Sula, Cortés"):
                return httpx.Response(200, json=[{"lat": "15.50", "lon": "-88.02"}])
            return httpx.Response(200, json=[])

        result = _geocoder(handler).resolve("San Pedro Sula", "Cortés", "HN", "Calle 1")
        assert result == {"lat": 15.50, "lng": -88.02, "source": "nominatim"}
        assert len(seen) == 2

    def test_fallback_to_department_centroid(self):
        result = _geocoder(lambda request: httpx.Response(200, json=[])).resolve(
            "Pueblo Desconocido", "Cortés", "HN",
        )
        assert result["source"] == "fallback"
        assert result["lat"] == pytest.approx(15.5042)
        assert result["lng"] == pytest.approx(-88.0250)

    def test_http_errors_fall_back(self):
        result = _geocoder(lambda request: httpx.Response(503, text="busy")).resolve(
            "Tegucigalpa", None, "HN",
        )
        assert result["source"] == "fallback"

    def test_transport_errors_fall_back(self):
        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        assert _geocoder(handler).geocode("Tegucigalpa, Honduras") is None

    def test_malformed_result(self):
        geocoder = _geocoder(lambda request: httpx.Response(200, json=[{"lat": "x"}]))
        assert geocoder.geocode("Tegucigalpa, Honduras") is None

    def test_zero_coordinates_rejected(self):
        geocoder = _geocoder(lambda request: httpx.Response(200, json=[{"lat": "0", "lon": "0"}]))
        assert geocoder.geocode("Nowhere") is None


class TestCoordinateHelpers:
    """Tests for coordinate validation and distance helpers."""

    @pytest.mark.parametrize("lat, lng, expected", [
        (14.08, -87.2, True),
        (0, 0, False),
        (None, -87.2, False),
        ("abc", 1, False),
        (91, 0, False),
        (float("nan"), 1, False),
        ("14.08", "-87.2", True),
    ])
    def test_has_valid_coordinates(self, lat, lng, expected):
        assert has_valid_coordinates(lat, lng) is expected

    def test_haversine(self):
        # Tegucigalpa → San Pedro Sula, roughly 180 km
        km = haversine_km(14.0818, -87.2068, 15.5042, -88.0250)
        assert 170 < km < 190
        assert haversine_km(14.0, -87.0, 14.0, -87.0) == 0

    def test_format_distance(self):
        assert format_distance(0.85) == "850 m"
        assert format_distance(0.0004) == "0 m"
        assert format_distance(2.44) == "2.4 km"
