"""Tunable constants for the weather engine.

Every threshold the engine relies on (system lifetimes, spawn odds,
precipitation cutoffs, window sizes) lives here instead of being scattered
through the code as magic numbers. A Configuration is immutable; derive a
variant with ``replace`` or build one from a plain mapping with
``from_dict``.
"""

import math
from dataclasses import dataclass, fields, replace as dataclass_replace
from typing import Any, Dict, Mapping


class ConfigurationError(ValueError):
    """Raised for bad tunable constants or an unavailable service variant."""


# Fields that must stay inside [0, 1]
_FRACTION_FIELDS = (
    'base_spawn_rate',
    'decay_rate',
    'min_intensity',
    'speed_jitter',
    'observation_point',
    'precipitation_threshold',
    'precipitation_decay',
    'saturation_damping',
    'hurricane_maritime_influence',
    'hurricane_intensity',
)

# Fields that must be whole numbers of at least one
_COUNT_FIELDS = ('max_systems', 'trend_window')


@dataclass(frozen=True)
class Configuration:
    """Engine tuning parameters with game-friendly defaults.

    Attributes:
        max_systems: Maximum number of concurrently active weather systems
        base_spawn_rate: Hourly spawn chance at storm_frequency 1.0 with no
            active systems
        decay_start_age: Age in hours after which system intensity decays
        decay_rate: Fractional intensity loss per hour past decay_start_age
        min_intensity: Systems at or below this intensity are retired
        high_pressure_speed: Hourly position change of a high over flat terrain
        low_pressure_speed: Hourly position change of a low over flat terrain
        cold_front_speed: Hourly position change of a cold front
        warm_front_speed: Hourly position change of a warm front
        speed_jitter: Maximum relative speed change from coherent noise
        front_generation_distance: A high and a low closer than this spawn a
            front between them
        standard_pressure: Baseline sea-level pressure in hPa
        observation_point: Position (0-1) at which the region is observed
        influence_falloff: Distance at which a system's influence halves
        front_passage_width: Half-width of the zone of sharp frontal change
        overlap_radius: Distance inside which a system overlaps the
            observation point for wind purposes
        lapse_rate: Temperature drop in °F per 1000 ft of elevation
        precipitation_threshold: Potential above which precipitation falls
        max_precipitation_rate: Precipitation amount (in/hr) at potential 1.0
        hail_instability: Instability at or above which hail is possible
        freezing_point: Temperature (°F) below which precipitation is snow
        hail_max_temperature: Warmest temperature (°F) that still yields hail
        trend_window: Number of hourly snapshots kept by the trend tracker
        tendency_threshold: hPa/hr change separating Rising/Falling from Stable
        precipitation_decay: Per-hour weight decay of the precipitation history
        saturation_damping: Potential reduction per unit of recent precipitation
        drought_threshold: Precipitation (in) below which a full window is a drought
        flood_day_threshold: 24 hour precipitation (in) above which floods threaten
        flood_burst_threshold: 6 hour precipitation (in) above which floods threaten
        tornado_instability: Instability needed for a tornado alongside a cold front
        severe_instability: Instability at which a tornado needs no front
        tornado_min_temperature: Coolest temperature (°F) that supports tornadoes
        tornado_min_humidity: Driest humidity (%) that supports tornadoes
        hurricane_min_latitude: Lowest latitude (degrees) hurricanes reach
        hurricane_max_latitude: Highest latitude (degrees) hurricanes reach
        hurricane_maritime_influence: Maritime influence a hurricane coast needs
        hurricane_intensity: Intensity a low needs to become a hurricane
        hurricane_min_temperature: Coolest temperature (°F) that feeds a hurricane
        hurricane_min_humidity: Driest humidity (%) that feeds a hurricane
        heatwave_temperature: Temperature (°F) at which a heatwave is declared
        heatwave_feels_like: Feels-like temperature (°F) that also counts as one
        wildfire_temperature: Coolest temperature (°F) with wildfire danger
        wildfire_max_humidity: Wettest humidity (%) with wildfire danger
        wildfire_wind: Slowest wind (mph) that spreads a wildfire
        lunar_cycle_days: Length of the synodic month in days
    """

    # Weather system lifecycle
    max_systems: int = 4
    base_spawn_rate: float = 0.2
    decay_start_age: int = 24
    decay_rate: float = 0.02
    min_intensity: float = 0.05
    high_pressure_speed: float = 0.03
    low_pressure_speed: float = 0.04
    cold_front_speed: float = 0.07
    warm_front_speed: float = 0.05
    speed_jitter: float = 0.2
    front_generation_distance: float = 0.3

    # Field synthesis
    standard_pressure: float = 1013.25
    observation_point: float = 0.5
    influence_falloff: float = 0.2
    front_passage_width: float = 0.1
    overlap_radius: float = 0.15
    lapse_rate: float = 3.5
    precipitation_threshold: float = 0.5
    max_precipitation_rate: float = 0.4
    hail_instability: float = 7.0
    freezing_point: float = 32.0
    hail_max_temperature: float = 45.0

    # Trend tracking
    trend_window: int = 24
    tendency_threshold: float = 0.5
    precipitation_decay: float = 0.85
    saturation_damping: float = 0.15
    drought_threshold: float = 0.1
    flood_day_threshold: float = 2.0
    flood_burst_threshold: float = 1.0

    # Hazards
    tornado_instability: float = 7.0
    severe_instability: float = 9.0
    tornado_min_temperature: float = 70.0
    tornado_min_humidity: float = 60.0
    hurricane_min_latitude: float = 8.0
    hurricane_max_latitude: float = 35.0
    hurricane_maritime_influence: float = 0.7
    hurricane_intensity: float = 0.75
    hurricane_min_temperature: float = 80.0
    hurricane_min_humidity: float = 80.0
    heatwave_temperature: float = 95.0
    heatwave_feels_like: float = 105.0
    wildfire_temperature: float = 85.0
    wildfire_max_humidity: float = 30.0
    wildfire_wind: float = 10.0

    # Celestial
    lunar_cycle_days: float = 29.53059

    def __post_init__(self):
        problems = []
        for field in fields(self):
            value = getattr(self, field.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                problems.append(f"{field.name} must be a number, got {value!r}")
            elif not math.isfinite(value):
                problems.append(f"{field.name} must be finite")
            elif field.name in _COUNT_FIELDS:
                if int(value) != value or value < 1:
                    problems.append(f"{field.name} must be a whole number >= 1")
            elif field.name in _FRACTION_FIELDS:
                if not 0.0 <= value <= 1.0:
                    problems.append(f"{field.name} must be within [0, 1]")
            elif value < 0:
                problems.append(f"{field.name} must not be negative")

        if problems:
            raise ConfigurationError("; ".join(problems))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Configuration':
        """Build a configuration from a mapping of overrides.

        Args:
            data: Field names mapped to values; missing fields keep defaults

        Returns:
            New Configuration

        Raises:
            ConfigurationError: If a key is not a known field or a value is bad
        """
        known = {field.name for field in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**dict(data))

    def to_dict(self) -> Dict[str, Any]:
        """Return the configuration as a plain dictionary."""
        return {field.name: getattr(self, field.name) for field in fields(self)}

    def replace(self, **changes: Any) -> 'Configuration':
        """Return a copy with the given fields changed."""
        return dataclass_replace(self, **changes)


DEFAULT_CONFIGURATION = Configuration()
