"""Field synthesis for the region weather engine.

``synthesize_snapshot`` blends a region's climate profile with the weather
systems currently crossing it to produce one hour of weather. It is a pure
function: identical inputs always give an identical snapshot, and nothing
in here draws random numbers.

Every system acts on the region through a proximity weight that is 1 when
the system sits on the observation point and falls off with distance:

    w = 1 / (1 + (d / falloff)^2)
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import numpy as np
import metpy.calc as mpcalc
from metpy.units import units

from weather_utils.config import Configuration, DEFAULT_CONFIGURATION
from .celestial import CelestialReading, get_celestial
from .climate_profile import ClimateProfile
from .conditions import WeatherCondition, classify_condition
from .exceptions import SimulationInvariantError
from .extreme_weather import Hazard, detect_hazards
from .trends import TrendContext, classify_tendency, instability_index, pressure_trend
from .weather_systems import SystemType, WeatherSystem

logger = logging.getLogger(__name__)


# Direction the wind usually blows from in each latitude band (degrees)
PREVAILING_WIND = {
    'equatorial': 90.0,
    'tropical': 45.0,
    'temperate': 250.0,
    'subarctic': 270.0,
    'polar': 80.0,
}

COMPASS_POINTS = (
    'N', 'NNE', 'NE', 'ENE', 'E', 'ESE', 'SE', 'SSE',
    'S', 'SSW', 'SW', 'WSW', 'W', 'WNW', 'NW', 'NNW',
)


class PrecipitationType(Enum):
    NONE = 'none'
    RAIN = 'rain'
    SNOW = 'snow'
    HAIL = 'hail'


@dataclass(frozen=True)
class Precipitation:
    """Precipitation for one hour.

    Attributes:
        potential: Combined chance-like potential in [0, 1]
        amount: Inches per hour, zero unless potential exceeds the threshold
        type: What is falling
    """
    potential: float = 0.0
    amount: float = 0.0
    type: PrecipitationType = PrecipitationType.NONE


@dataclass(frozen=True)
class WeatherSnapshot:
    """One hour of weather in one region. Never modified after creation."""
    timestamp: datetime
    temperature: float
    feels_like: float
    dew_point: float
    humidity: float
    pressure: float
    pressure_trend: float
    pressure_tendency: str
    cloud_cover: float
    precipitation: Precipitation
    wind_speed: float
    wind_gust: float
    wind_direction: float
    instability: float
    recent_precipitation: float
    condition: WeatherCondition
    celestial: CelestialReading
    systems: Tuple[WeatherSystem, ...] = field(default_factory=tuple)
    hazards: Tuple[Hazard, ...] = field(default_factory=tuple)

    @property
    def wind_compass(self) -> str:
        return compass_point(self.wind_direction)

    @property
    def drought(self) -> bool:
        return Hazard.DROUGHT in self.hazards

    @property
    def flood_risk(self) -> bool:
        return Hazard.FLOOD in self.hazards

    def to_dict(self) -> Dict[str, Any]:
        """Return the snapshot as a JSON-ready dictionary."""
        return {
            'timestamp': self.timestamp.isoformat(),
            'temperature': self.temperature,
            'feels_like': self.feels_like,
            'dew_point': self.dew_point,
            'humidity': self.humidity,
            'pressure': self.pressure,
            'pressure_trend': self.pressure_trend,
            'pressure_tendency': self.pressure_tendency,
            'cloud_cover': self.cloud_cover,
            'precipitation': {
                'potential': self.precipitation.potential,
                'amount': self.precipitation.amount,
                'type': self.precipitation.type.value,
            },
            'wind_speed': self.wind_speed,
            'wind_gust': self.wind_gust,
            'wind_direction': self.wind_direction,
            'wind_compass': self.wind_compass,
            'instability': self.instability,
            'recent_precipitation': self.recent_precipitation,
            'condition': self.condition.value,
            'celestial': self.celestial.to_dict(),
            'systems': [system.to_dict() for system in self.systems],
            'hazards': [hazard.value for hazard in self.hazards],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'WeatherSnapshot':
        precipitation = data['precipitation']
        return cls(
            timestamp=datetime.fromisoformat(data['timestamp']),
            temperature=data['temperature'],
            feels_like=data['feels_like'],
            dew_point=data['dew_point'],
            humidity=data['humidity'],
            pressure=data['pressure'],
            pressure_trend=data['pressure_trend'],
            pressure_tendency=data['pressure_tendency'],
            cloud_cover=data['cloud_cover'],
            precipitation=Precipitation(
                potential=precipitation['potential'],
                amount=precipitation['amount'],
                type=PrecipitationType(precipitation['type']),
            ),
            wind_speed=data['wind_speed'],
            wind_gust=data['wind_gust'],
            wind_direction=data['wind_direction'],
            instability=data['instability'],
            recent_precipitation=data['recent_precipitation'],
            condition=WeatherCondition(data['condition']),
            celestial=CelestialReading.from_dict(data['celestial']),
            systems=tuple(WeatherSystem.from_dict(system) for system in data['systems']),
            hazards=tuple(Hazard(value) for value in data['hazards']),
        )


def compass_point(degrees: float) -> str:
    """16-point compass label for a wind direction."""
    return COMPASS_POINTS[int((degrees % 360.0) / 22.5 + 0.5) % 16]


def proximity_weight(system: WeatherSystem, config: Configuration) -> float:
    """Influence of a system on the observation point, 1 when on top of it."""
    distance = system.distance(config.observation_point)
    return 1.0 / (1.0 + (distance / config.influence_falloff) ** 2)


def diurnal_factor(hour: float) -> float:
    """Daily temperature curve in [-1, 1]: trough at 05:00, peak at 15:00.

    Warming takes ten hours and cooling the remaining fourteen.
    """
    if 5.0 <= hour < 15.0:
        return -math.cos(math.pi * (hour - 5.0) / 10.0)
    return math.cos(math.pi * ((hour - 15.0) % 24.0) / 14.0)


def seasonal_factor(day_of_year: int) -> float:
    """Yearly temperature curve in [-1, 1], warmest in mid July."""
    return math.sin(2.0 * math.pi * (day_of_year - 105) / 365.25)


def _front_pressure(system: WeatherSystem, config: Configuration) -> float:
    """Sharp pressure change while a front passes the observation point."""
    s = (system.position - config.observation_point) / config.front_passage_width
    if system.type == SystemType.COLD_FRONT:
        # Drop ahead of the front, recovery behind it
        return system.intensity * (-8.0 * math.exp(-s ** 2) + 6.0 * math.exp(-(s - 1.5) ** 2))
    return -6.0 * system.intensity * math.exp(-(s + 0.5) ** 2)


def _pressure(systems, weights, hour: float, config: Configuration) -> float:
    pressure = config.standard_pressure
    for system, weight in zip(systems, weights):
        if system.type == SystemType.HIGH_PRESSURE:
            pressure += 12.0 * system.intensity * weight
        elif system.type == SystemType.LOW_PRESSURE:
            pressure -= 14.0 * system.intensity * weight
        else:
            pressure += _front_pressure(system, config)

    # Semidiurnal atmospheric tide
    pressure += 0.5 * math.sin(4.0 * math.pi * hour / 24.0)
    return pressure


def _moisture_effects(systems, weights) -> Tuple[float, float, float]:
    """Humidity, cloud cover and potential changes from nearby systems."""
    humidity = cloud = potential = 0.0
    for system, weight in zip(systems, weights):
        effect = system.intensity * weight
        if system.type == SystemType.HIGH_PRESSURE:
            humidity -= 15.0 * effect
            cloud -= 40.0 * effect
            potential -= 0.3 * effect
        elif system.type == SystemType.LOW_PRESSURE:
            humidity += 20.0 * effect
            cloud += 40.0 * effect
            potential += 0.35 * effect
        elif system.type == SystemType.WARM_FRONT:
            humidity += 25.0 * effect
            cloud += 60.0 * effect
            potential += 0.35 * effect
        elif system.age < 10:
            # Young cold fronts bring a band of cloud and showers
            humidity += 15.0 * effect
            cloud += 50.0 * effect
            potential += 0.45 * effect
        else:
            humidity -= 10.0 * effect
            cloud -= 30.0 * effect
    return humidity, cloud, potential


def _special_factor_effects(profile: ClimateProfile, hour: float, season: float) -> Tuple[float, float, float]:
    """Humidity, cloud cover and potential shifts from special factors."""
    factors = profile.special_factors
    wet_season = max(0.0, season)
    dry_season = max(0.0, -season)
    humidity = cloud = potential = 0.0

    if factors.monsoon:
        humidity += 15.0 * wet_season
        cloud += 15.0 * wet_season
        potential += 0.2 * wet_season
    if factors.high_rainfall:
        humidity += 8.0
        cloud += 10.0
        potential += 0.1
    if factors.dry_season:
        humidity -= 15.0 * dry_season
        cloud -= 15.0 * dry_season
        potential -= 0.2 * dry_season
    if factors.fog and 3.0 <= hour < 9.0:
        # Early morning fog: saturated air and low cloud, no extra rain
        humidity += 12.0
        cloud += 10.0
    if factors.orographic:
        cloud += 10.0 * profile.terrain_roughness
        potential += 0.1 * profile.terrain_roughness
    if factors.volcanic:
        cloud += 5.0
    return humidity, cloud, potential


def _wind(profile, systems, weights, hour: float, trend: float, config: Configuration):
    """Sustained speed, gust and direction of the wind."""
    roughness = profile.terrain_roughness

    sustained = (5.0 + 20.0 * profile.windiness) * (1.0 - 0.3 * roughness)
    # Daytime mixing makes afternoons windier
    sustained *= 0.85 + 0.3 * max(0.0, math.sin(math.pi * (hour - 6.0) / 12.0))

    boost = 0.0
    turn = 0.0
    for system, weight in zip(systems, weights):
        effect = system.intensity * weight
        overlapping = system.distance(config.observation_point) <= config.overlap_radius
        if system.type == SystemType.HIGH_PRESSURE:
            boost += 5.0 * system.intensity if overlapping else 0.0
            turn -= 40.0 * effect
        elif system.type == SystemType.LOW_PRESSURE:
            boost += 10.0 * system.intensity if overlapping else 0.0
            turn += 50.0 * effect
        elif system.type == SystemType.COLD_FRONT:
            boost += 15.0 * system.intensity if overlapping else 0.0
            # Wind veers once the front has passed
            turn += (80.0 if system.position > config.observation_point else 30.0) * effect
        else:
            boost += 15.0 * system.intensity if overlapping else 0.0
            turn -= 50.0 * effect

    sustained += boost + 3.0 * abs(trend)
    gust = sustained * (1.2 + 0.6 * roughness)
    direction = (PREVAILING_WIND[profile.latitude_band] + turn) % 360.0
    return sustained, gust, direction


def _feels_like(temperature: float, humidity: float, wind_speed: float) -> float:
    value = mpcalc.apparent_temperature(
        units.Quantity(temperature, 'degF'),
        units.Quantity(humidity, 'percent'),
        units.Quantity(wind_speed, 'mph'),
        mask_undefined=False,
    )
    return float(np.squeeze(value.m_as('degF')))


def _dew_point(temperature: float, humidity: float) -> float:
    value = mpcalc.dewpoint_from_relative_humidity(
        units.Quantity(temperature, 'degF'),
        units.Quantity(max(humidity, 1.0), 'percent'),
    )
    return float(np.squeeze(value.m_as('degF')))


def _check_finite(values: Mapping[str, float]) -> None:
    bad = [name for name, value in values.items() if not math.isfinite(value)]
    if bad:
        logger.error("Non-finite weather fields: %s", ", ".join(bad))
        raise SimulationInvariantError(f"Non-finite values computed for: {', '.join(bad)}")


def synthesize_snapshot(
        profile: ClimateProfile,
        systems: Iterable[WeatherSystem],
        timestamp: datetime,
        context: Optional[TrendContext] = None,
        config: Optional[Configuration] = None
) -> WeatherSnapshot:
    """Produce the weather for one hour.

    Args:
        profile: Climate profile of the region
        systems: Weather systems currently crossing the region
        timestamp: Moment to synthesize (local solar time)
        context: Previous pressure and recent precipitation from the trend
            tracker; an empty context means this is the first hour
        config: Engine tuning parameters

    Returns:
        WeatherSnapshot

    Raises:
        SimulationInvariantError: If any computed field is not finite
    """
    config = config or DEFAULT_CONFIGURATION
    context = context or TrendContext()
    systems = tuple(systems)

    for system in systems:
        _check_finite({
            f"system {system.id} intensity": system.intensity,
            f"system {system.id} position": system.position,
        })

    hour = timestamp.hour + timestamp.minute / 60.0
    season = seasonal_factor(timestamp.timetuple().tm_yday)
    weights = [proximity_weight(system, config) for system in systems]
    moisture_scale = 0.5 + 0.5 * profile.maritime_influence
    recent = context.recent_precipitation

    # Pressure and its trend
    pressure = _pressure(systems, weights, hour, config)
    trend = pressure_trend(pressure, context.previous_pressure)

    # Moisture fields
    system_humidity, system_cloud, system_potential = _moisture_effects(systems, weights)
    special_humidity, special_cloud, special_potential = _special_factor_effects(profile, hour, season)

    humidity = (30.0 + 50.0 * profile.humidity + 10.0 * profile.maritime_influence
                + 8.0 * math.cos(2.0 * math.pi * (hour - 5.0) / 24.0)
                + system_humidity * moisture_scale
                + special_humidity
                + min(15.0, recent * 15.0))
    humidity = float(np.clip(humidity, 0.0, 100.0))

    cloud_cover = (20.0 + 50.0 * profile.humidity
                   + system_cloud * moisture_scale
                   + special_cloud
                   + float(np.clip(-10.0 * trend, -10.0, 20.0))
                   + 5.0 * math.cos(2.0 * math.pi * (hour - 14.0) / 24.0))
    cloud_cover = float(np.clip(cloud_cover, 0.0, 100.0))

    # Temperature
    tv = profile.temp_variation
    maritime_damping = 1.0 - 0.5 * profile.maritime_influence
    latitude_scale = 0.3 + 0.7 * min(1.0, profile.latitude / 60.0)

    diurnal_amplitude = 0.5 * tv * maritime_damping
    if profile.special_factors.high_diurnal_variation:
        diurnal_amplitude *= 1.5
    if profile.special_factors.valley:
        diurnal_amplitude *= 1.2
    diurnal_amplitude *= 1.0 - 0.4 * cloud_cover / 100.0

    seasonal_amplitude = 0.5 * tv * profile.seasonal_extremes * latitude_scale * maritime_damping
    baseline = (profile.base_temp + seasonal_amplitude * season
                - config.lapse_rate * profile.elevation / 1000.0)

    front_delta = 0.0
    for system, weight in zip(systems, weights):
        if system.type == SystemType.COLD_FRONT:
            front_delta -= 0.4 * tv * system.intensity * weight
        elif system.type == SystemType.WARM_FRONT:
            front_delta += 0.3 * tv * system.intensity * weight
    front_delta = float(np.clip(front_delta, -0.4 * tv, 0.4 * tv))

    temperature = baseline + diurnal_amplitude * diurnal_factor(hour) + front_delta

    instability = instability_index(
        pressure,
        temperature,
        baseline,
        tv,
        trend=trend,
        humidity=humidity,
        recent_precipitation=recent,
        standard_pressure=config.standard_pressure,
    )

    # Precipitation
    potential = (0.15 * profile.precipitation
                 + 0.25 * max(0.0, (humidity - 60.0) / 40.0)
                 + 0.2 * cloud_cover / 100.0
                 + system_potential * moisture_scale
                 + special_potential)
    potential *= 1.0 - min(0.5, config.saturation_damping * recent)
    potential = float(np.clip(potential, 0.0, 1.0))

    amount = 0.0
    precipitation_type = PrecipitationType.NONE
    if potential > config.precipitation_threshold:
        amount = (config.max_precipitation_rate
                  * (potential - config.precipitation_threshold)
                  / (1.0 - config.precipitation_threshold))
        if temperature < config.freezing_point:
            precipitation_type = PrecipitationType.SNOW
        elif instability >= config.hail_instability and temperature < config.hail_max_temperature:
            precipitation_type = PrecipitationType.HAIL
        else:
            precipitation_type = PrecipitationType.RAIN

    wind_speed, wind_gust, wind_direction = _wind(profile, systems, weights, hour, trend, config)

    _check_finite({
        'temperature': temperature,
        'pressure': pressure,
        'pressure_trend': trend,
        'humidity': humidity,
        'cloud_cover': cloud_cover,
        'precipitation': amount,
        'wind_speed': wind_speed,
        'wind_direction': wind_direction,
        'instability': instability,
    })

    feels_like = _feels_like(temperature, humidity, wind_speed)
    dew_point = _dew_point(temperature, humidity)

    # Hazards see the tracked window plus this hour
    precipitation_amounts = (context.precipitation_history + (amount,))[-config.trend_window:]
    hazards = detect_hazards(
        profile,
        systems,
        timestamp,
        temperature,
        feels_like,
        humidity,
        wind_speed,
        instability,
        precipitation_amounts,
        config,
    )

    condition = classify_condition(
        temperature,
        humidity,
        cloud_cover,
        potential,
        amount,
        precipitation_type.value,
        wind_speed,
        instability,
    )

    celestial = get_celestial(
        timestamp,
        profile.latitude_band,
        polar_day=profile.special_factors.polar_day,
        polar_night=profile.special_factors.polar_night,
        config=config,
    )

    return WeatherSnapshot(
        timestamp=timestamp,
        temperature=temperature,
        feels_like=feels_like,
        dew_point=dew_point,
        humidity=humidity,
        pressure=pressure,
        pressure_trend=trend,
        pressure_tendency=classify_tendency(trend, config.tendency_threshold),
        cloud_cover=cloud_cover,
        precipitation=Precipitation(potential=potential, amount=amount, type=precipitation_type),
        wind_speed=wind_speed,
        wind_gust=wind_gust,
        wind_direction=wind_direction,
        instability=instability,
        recent_precipitation=recent,
        condition=condition,
        celestial=celestial,
        systems=systems,
        hazards=hazards,
    )
