"""Tests for extreme weather and hazard detection."""

from dataclasses import replace
from datetime import datetime

from weather_generation.climate_profile import SpecialFactors
from weather_generation.extreme_weather import Hazard, detect_hazards
from weather_generation.weather_systems import SystemType, WeatherSystem
from weather_utils.config import Configuration


SUMMER = datetime(2024, 7, 15, 15, 0)
WINTER = datetime(2024, 1, 15, 15, 0)
DRY_DAY = (0.0,) * 24


def hazards(profile, systems=(), when=SUMMER, temperature=65.0, feels_like=None, humidity=50.0,
            wind_speed=5.0, instability=3.0, amounts=(0.0,), config=None):
    return detect_hazards(
        profile,
        systems,
        when,
        temperature,
        temperature if feels_like is None else feels_like,
        humidity,
        wind_speed,
        instability,
        amounts,
        config,
    )


def cold_front(position=0.5, age=2):
    return WeatherSystem(id=1, type=SystemType.COLD_FRONT, intensity=0.8, age=age, position=position)


def test_quiet_hour_has_no_hazards(flat_profile):
    assert hazards(flat_profile) == ()


def test_tornado_needs_a_front_overhead(flat_profile):
    stormy_air = dict(temperature=82.0, humidity=75.0, instability=8.0)

    assert Hazard.TORNADO in hazards(flat_profile, (cold_front(),), **stormy_air)
    assert Hazard.TORNADO not in hazards(flat_profile, (), **stormy_air)
    assert Hazard.TORNADO not in hazards(flat_profile, (cold_front(position=0.05),), **stormy_air)
    assert Hazard.TORNADO not in hazards(flat_profile, (cold_front(age=30),), **stormy_air)


def test_tornado_from_extreme_instability_alone(flat_profile):
    assert Hazard.TORNADO in hazards(flat_profile, temperature=82.0, humidity=75.0, instability=9.5)


def test_no_tornado_in_cold_air(flat_profile):
    assert Hazard.TORNADO not in hazards(flat_profile, (cold_front(),), temperature=50.0,
                                         humidity=75.0, instability=9.5)


def test_hurricane_on_subtropical_coast_in_season(flat_profile):
    coast = replace(flat_profile, latitude=20.0, maritime_influence=0.9)
    low = WeatherSystem(id=2, type=SystemType.LOW_PRESSURE, intensity=0.9, position=0.5)
    tropical_air = dict(temperature=86.0, humidity=90.0)

    assert Hazard.HURRICANE in hazards(coast, (low,), **tropical_air)
    assert Hazard.HURRICANE not in hazards(coast, (low,), when=WINTER, **tropical_air)
    assert Hazard.HURRICANE not in hazards(coast, (replace(low, intensity=0.4),), **tropical_air)
    assert Hazard.HURRICANE not in hazards(flat_profile, (low,), **tropical_air)


def test_heatwave_from_temperature_or_feels_like(flat_profile):
    assert Hazard.HEATWAVE in hazards(flat_profile, temperature=97.0)
    assert Hazard.HEATWAVE in hazards(flat_profile, temperature=92.0, feels_like=108.0)
    assert Hazard.HEATWAVE not in hazards(flat_profile, temperature=88.0, feels_like=90.0)


def test_wildfire_needs_hot_dry_windy_weather(flat_profile):
    fire_weather = dict(temperature=96.0, humidity=15.0, wind_speed=20.0)

    assert Hazard.WILDFIRE in hazards(flat_profile, amounts=DRY_DAY, **fire_weather)
    assert Hazard.WILDFIRE not in hazards(flat_profile, amounts=DRY_DAY[:-1] + (0.3,), **fire_weather)
    assert Hazard.WILDFIRE not in hazards(flat_profile, amounts=DRY_DAY, temperature=96.0,
                                          humidity=15.0, wind_speed=3.0)
    assert Hazard.WILDFIRE not in hazards(flat_profile, amounts=DRY_DAY, temperature=96.0,
                                          humidity=55.0, wind_speed=20.0)


def test_drought_and_flood_from_precipitation_record(flat_profile):
    assert Hazard.DROUGHT in hazards(flat_profile, amounts=DRY_DAY)
    assert Hazard.DROUGHT not in hazards(flat_profile, amounts=DRY_DAY[:12])

    downpour = (0.0,) * 18 + (0.3,) * 6
    assert Hazard.FLOOD in hazards(flat_profile, amounts=downpour)
    assert Hazard.FLOOD not in hazards(flat_profile, amounts=(0.05,) * 24)


def test_precipitation_thresholds_come_from_configuration(flat_profile):
    config = Configuration(flood_burst_threshold=0.2, drought_threshold=0.0)

    assert Hazard.FLOOD in hazards(flat_profile, amounts=(0.05,) * 6, config=config)
    assert Hazard.DROUGHT not in hazards(flat_profile, amounts=DRY_DAY, config=config)


def test_geological_hazards_follow_special_factors(flat_profile):
    shaky = replace(flat_profile, special_factors=SpecialFactors(tectonic=True))
    smoking = replace(flat_profile, special_factors=SpecialFactors(volcanic=True))

    assert hazards(shaky) == (Hazard.SEISMIC_ACTIVITY,)
    assert hazards(smoking) == (Hazard.VOLCANIC_ACTIVITY,)
    assert Hazard.SEISMIC_ACTIVITY not in hazards(flat_profile)


def test_hazards_keep_declaration_order(flat_profile):
    profile = replace(flat_profile, special_factors=SpecialFactors(tectonic=True, volcanic=True))

    flagged = hazards(profile, temperature=99.0, humidity=10.0, wind_speed=25.0, amounts=DRY_DAY)

    assert flagged == (
        Hazard.WILDFIRE,
        Hazard.DROUGHT,
        Hazard.HEATWAVE,
        Hazard.SEISMIC_ACTIVITY,
        Hazard.VOLCANIC_ACTIVITY,
    )
