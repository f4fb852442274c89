"""Shared fixtures for the marketplace test suite.

Provides a fresh temp-file SQLite DatabaseManager for each test, plus
helpers to create business profiles without network access.
"""
import os
import shutil
import tempfile
from datetime import datetime

import pytest

from business.notifications import AdminNotifier
from business.profile_service import BusinessProfileService
from config.locations import get_location_fallback
from database import DatabaseManager


class FakeGeocoder:
    """Geocoder stand-in that records queries and returns a fixed point or the fallback."""

    def __init__(self, point=None):
        self.point = point
        self.calls = []

    def resolve(self, city, department, country, address=None):
        self.calls.append((city, department, country, address))
        if self.point:
            return {"lat": self.point[0], "lng": self.point[1], "source": "nominatim"}
        return {**get_location_fallback(city, department, country), "source": "fallback"}


@pytest.fixture
def temp_db():
    """Yield a fresh DatabaseManager bound to a temp SQLite database."""
    temp_dir = tempfile.mkdtemp(prefix="db-tests-")
    db_path = os.path.join(temp_dir, "test.db")
    manager = DatabaseManager(database_url=f"sqlite:///{db_path}")
    manager.create_tables()

    try:
        yield manager
    finally:
        manager.close()
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def fake_geocoder():
    return FakeGeocoder()


@pytest.fixture
def profile_service(temp_db, fake_geocoder):
    """BusinessProfileService with offline geocoding and notifications disabled."""
    return BusinessProfileService(
        temp_db, geocoder=fake_geocoder, notifier=AdminNotifier(url=""),
    )


@pytest.fixture
def sample_datetime():
    """Stable datetime value for deterministic tests."""
    return datetime(2024, 1, 28, 10, 0, 0)


def make_profile_input(**overrides):
    """Helper: minimal valid business profile payload."""
    data = {
        "business_name": "Barbería El Centro",
        "category": "beauty_wellness",
        "subcategory": "hair",
        "subcategories": ["hair"],
        "specialties": ["Corte de Caballero (Barbería)"],
        "modality": "local",
        "country": "HN",
        "department": "Cortés",
        "city": "San Pedro Sula",
        "description": "Cortes clásicos y modernos.",
        "email": "owner@example.com",
        "phone": "+504 9999-0000",
    }
    data.update(overrides)
    return data


def make_business(db, business_id="biz-1", **public_overrides):
    """Helper: write a business directly through the repository and return its ID."""
    public = {
        "business_name": "Plomería Rápida",
        "category": "general_services",
        "subcategory": "plumbing",
        "city": "Tegucigalpa",
        "department": "Francisco Morazán",
        "country": "HN",
        "country_code": "HN",
        "lat": 14.0818,
        "lng": -87.2068,
        "modality": "home",
        "status": "active",
        "rating": 0.0,
        "review_count": 0,
    }
    public.update(public_overrides)
    db.profiles.create(
        business_id, public, {"description": "Servicio 24/7", "images": []},
        {"plan": "free", "plan_status": "trial"}, owner_email=f"{business_id}@example.com",
    )
    return business_id
