"""Extreme weather and hazard detection for the region weather engine.

Hazards are raised from thresholds on one hour of weather, the systems
crossing the observation point and the recent precipitation record. There
is no dice roll involved: an hour that meets the conditions always raises
the same flags, so a seed and a profile replay the same hazards.

Geological hazards depend only on the region. A region with tectonic or
volcanic activity carries the matching flag in every snapshot so that the
game master always sees the standing risk.
"""

from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from weather_utils.config import Configuration, DEFAULT_CONFIGURATION
from .climate_profile import ClimateProfile
from .trends import drought_conditions, flood_conditions
from .weather_systems import SystemType, WeatherSystem

# June through November
HURRICANE_MONTHS = frozenset(range(6, 12))

# Cold fronts older than this have spent the shear that spins up tornadoes
TORNADO_FRONT_MAX_AGE = 12


class Hazard(Enum):
    """Extreme weather and geological hazards a snapshot can flag."""
    TORNADO = 'tornado'
    HURRICANE = 'hurricane'
    FLOOD = 'flood'
    WILDFIRE = 'wildfire'
    DROUGHT = 'drought'
    HEATWAVE = 'heatwave'
    SEISMIC_ACTIVITY = 'seismic-activity'
    VOLCANIC_ACTIVITY = 'volcanic-activity'


def _overlapping(systems: Iterable[WeatherSystem], system_type: SystemType,
                 config: Configuration) -> List[WeatherSystem]:
    return [
        system for system in systems
        if system.type == system_type
        and system.distance(config.observation_point) <= config.overlap_radius
    ]


def tornado_conditions(
        systems: Iterable[WeatherSystem],
        temperature: float,
        humidity: float,
        instability: float,
        config: Configuration
) -> bool:
    """Warm, humid, unstable air with a young cold front passing overhead.

    Extreme instability is enough on its own.
    """
    if temperature <= config.tornado_min_temperature or humidity <= config.tornado_min_humidity:
        return False
    if instability >= config.severe_instability:
        return True
    if instability < config.tornado_instability:
        return False
    return any(front.age < TORNADO_FRONT_MAX_AGE
               for front in _overlapping(systems, SystemType.COLD_FRONT, config))


def hurricane_conditions(
        profile: ClimateProfile,
        systems: Iterable[WeatherSystem],
        timestamp: datetime,
        temperature: float,
        humidity: float,
        config: Configuration
) -> bool:
    """A strong low over a warm, humid, subtropical coast in hurricane season."""
    if profile.maritime_influence < config.hurricane_maritime_influence:
        return False
    if not config.hurricane_min_latitude <= profile.latitude <= config.hurricane_max_latitude:
        return False
    if timestamp.month not in HURRICANE_MONTHS:
        return False
    if temperature < config.hurricane_min_temperature or humidity < config.hurricane_min_humidity:
        return False
    return any(low.intensity >= config.hurricane_intensity
               for low in _overlapping(systems, SystemType.LOW_PRESSURE, config))


def wildfire_conditions(
        temperature: float,
        humidity: float,
        wind_speed: float,
        precipitation_amounts: Sequence[float],
        config: Configuration
) -> bool:
    """Hot, dry and windy weather after a spell without meaningful rain."""
    return (temperature >= config.wildfire_temperature
            and humidity <= config.wildfire_max_humidity
            and wind_speed >= config.wildfire_wind
            and sum(precipitation_amounts) < config.drought_threshold)


def heatwave_conditions(temperature: float, feels_like: float, config: Configuration) -> bool:
    return temperature >= config.heatwave_temperature or feels_like >= config.heatwave_feels_like


def detect_hazards(
        profile: ClimateProfile,
        systems: Iterable[WeatherSystem],
        timestamp: datetime,
        temperature: float,
        feels_like: float,
        humidity: float,
        wind_speed: float,
        instability: float,
        precipitation_amounts: Sequence[float],
        config: Optional[Configuration] = None
) -> Tuple[Hazard, ...]:
    """Flag the hazards present during one hour.

    Args:
        profile: Climate profile of the region
        systems: Weather systems currently crossing the region
        timestamp: Moment being checked
        temperature: Air temperature in °F
        feels_like: Apparent temperature in °F
        humidity: Relative humidity in percent
        wind_speed: Sustained wind in mph
        instability: Instability index (0-10)
        precipitation_amounts: Hourly precipitation in inches over the
            tracked window, oldest first, ending with this hour
        config: Engine tuning parameters

    Returns:
        Hazards in declaration order of ``Hazard``; empty on a quiet hour
    """
    config = config or DEFAULT_CONFIGURATION
    systems = tuple(systems)
    factors = profile.special_factors

    flags = {
        Hazard.TORNADO: tornado_conditions(systems, temperature, humidity, instability, config),
        Hazard.HURRICANE: hurricane_conditions(profile, systems, timestamp, temperature, humidity, config),
        Hazard.FLOOD: flood_conditions(
            precipitation_amounts, config.flood_day_threshold, config.flood_burst_threshold),
        Hazard.WILDFIRE: wildfire_conditions(
            temperature, humidity, wind_speed, precipitation_amounts, config),
        Hazard.DROUGHT: drought_conditions(
            precipitation_amounts, config.trend_window, config.drought_threshold),
        Hazard.HEATWAVE: heatwave_conditions(temperature, feels_like, config),
        Hazard.SEISMIC_ACTIVITY: factors.tectonic,
        Hazard.VOLCANIC_ACTIVITY: factors.volcanic,
    }
    return tuple(hazard for hazard in Hazard if flags[hazard])
