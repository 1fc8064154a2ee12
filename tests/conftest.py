"""Pytest fixtures and configuration."""

import os
import sys
from datetime import datetime

import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

from weather_generation.climate_profile import resolve_profile  # noqa: E402


START = datetime(2024, 4, 10, 0, 0)


@pytest.fixture
def start():
    return START


@pytest.fixture
def scenario_profile():
    """Warm, strongly maritime region with moderate storm frequency."""
    return resolve_profile("temperate-deciduous", {
        "base_temp": 70,
        "temp_variation": 15,
        "latitude": 30,
        "elevation": 0,
        "maritime_influence": 0.8,
        "storm_frequency": 0.5,
    })


@pytest.fixture
def calm_profile():
    """Region where weather systems never form."""
    return resolve_profile("temperate-grassland", {"storm_frequency": 0.0})


@pytest.fixture
def stormy_profile():
    return resolve_profile("temperate-rainforest", {
        "storm_frequency": 1.0,
        "storm_intensity": 1.0,
    })


@pytest.fixture
def flat_profile():
    """Profile with no terrain, coast or special factors getting in the way."""
    return resolve_profile("custom", {
        "base_temp": 60,
        "temp_variation": 20,
        "latitude": 45,
        "elevation": 0,
        "maritime_influence": 0.0,
        "terrain_roughness": 0.0,
        "humidity": 0.5,
        "precipitation": 0.5,
    })
