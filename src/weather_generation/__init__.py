"""
Weather generation package for region weather.

This package contains modules for climate profiles, weather system
lifecycles, field synthesis, trend tracking, hazard detection and sun/moon
timing, composed into hour-by-hour region simulations.
"""

from .climate_profile import ClimateProfile, SpecialFactors, resolve_profile
from .weather_systems import SystemScheduler, SystemType, WeatherSystem
from .synthesizer import Precipitation, PrecipitationType, WeatherSnapshot, synthesize_snapshot
from .trends import TrendContext, TrendTracker
from .extreme_weather import Hazard, detect_hazards
from .celestial import CelestialReading, MoonPhase, TwilightLevel
from .conditions import WeatherCondition
from .simulation import (
    WeatherSimulation,
    advance_hours,
    advance_regions,
    create_simulation,
    get_active_systems,
    get_celestial,
    get_current_snapshot,
    get_hazards,
)
from .service import WeatherModel, WeatherService, create_weather_service
from .forecast import forecast_to_dataset
from .exceptions import (
    ConfigurationError,
    InvalidArgumentError,
    ProfileValidationError,
    SimulationInvariantError,
    WeatherEngineError,
)

__all__ = [
    'ClimateProfile', 'SpecialFactors', 'resolve_profile',
    'SystemScheduler', 'SystemType', 'WeatherSystem',
    'Precipitation', 'PrecipitationType', 'WeatherSnapshot', 'synthesize_snapshot',
    'TrendContext', 'TrendTracker',
    'Hazard', 'detect_hazards',
    'CelestialReading', 'MoonPhase', 'TwilightLevel',
    'WeatherCondition',
    'WeatherSimulation', 'advance_hours', 'advance_regions', 'create_simulation',
    'get_active_systems', 'get_celestial', 'get_current_snapshot', 'get_hazards',
    'WeatherModel', 'WeatherService', 'create_weather_service',
    'forecast_to_dataset',
    'ConfigurationError', 'InvalidArgumentError', 'ProfileValidationError',
    'SimulationInvariantError', 'WeatherEngineError',
]
