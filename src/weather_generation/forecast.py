"""Forecast export for the region weather engine.

Converts a run of hourly snapshots into an ``xarray.Dataset`` indexed by
time, with a units attribute on every field, so forecasts can be sliced,
resampled, plotted or written out with the usual xarray tools.
"""

from typing import Sequence

import numpy as np
import xarray as xr

from weather_utils import conversions
from .exceptions import InvalidArgumentError
from .synthesizer import WeatherSnapshot


def forecast_to_dataset(snapshots: Sequence[WeatherSnapshot], metric: bool = False) -> xr.Dataset:
    """Build a dataset from consecutive snapshots.

    Args:
        snapshots: Snapshots in chronological order
        metric: Report °C, km/h and mm instead of °F, mph and inches

    Returns:
        Dataset with a ``time`` coordinate

    Raises:
        InvalidArgumentError: If no snapshots are given
    """
    snapshots = list(snapshots)
    if not snapshots:
        raise InvalidArgumentError("Cannot build a forecast from zero snapshots")

    def series(getter):
        return np.array([getter(snapshot) for snapshot in snapshots], dtype=float)

    temperature = series(lambda s: s.temperature)
    feels_like = series(lambda s: s.feels_like)
    dew_point = series(lambda s: s.dew_point)
    precipitation = series(lambda s: s.precipitation.amount)
    wind_speed = series(lambda s: s.wind_speed)
    wind_gust = series(lambda s: s.wind_gust)

    if metric:
        to_celsius = np.vectorize(conversions.fahrenheit_to_celsius)
        to_kph = np.vectorize(conversions.mph_to_kph)
        temperature = to_celsius(temperature)
        feels_like = to_celsius(feels_like)
        dew_point = to_celsius(dew_point)
        precipitation = np.vectorize(conversions.inches_to_mm)(precipitation)
        wind_speed = to_kph(wind_speed)
        wind_gust = to_kph(wind_gust)
        temperature_units, precipitation_units, speed_units = "degC", "mm/hr", "km/h"
    else:
        temperature_units, precipitation_units, speed_units = "degF", "in/hr", "mph"

    time = np.array([snapshot.timestamp for snapshot in snapshots], dtype='datetime64[ns]')

    dataset = xr.Dataset(
        data_vars={
            "temperature": (["time"], temperature),
            "feels_like": (["time"], feels_like),
            "dew_point": (["time"], dew_point),
            "humidity": (["time"], series(lambda s: s.humidity)),
            "pressure": (["time"], series(lambda s: s.pressure)),
            "pressure_trend": (["time"], series(lambda s: s.pressure_trend)),
            "cloud_cover": (["time"], series(lambda s: s.cloud_cover)),
            "precipitation_potential": (["time"], series(lambda s: s.precipitation.potential)),
            "precipitation": (["time"], precipitation),
            "precipitation_type": (["time"], [s.precipitation.type.value for s in snapshots]),
            "wind_speed": (["time"], wind_speed),
            "wind_gust": (["time"], wind_gust),
            "wind_direction": (["time"], series(lambda s: s.wind_direction)),
            "instability": (["time"], series(lambda s: s.instability)),
            "condition": (["time"], [s.condition.value for s in snapshots]),
            "drought": (["time"], np.array([s.drought for s in snapshots], dtype=bool)),
            "flood_risk": (["time"], np.array([s.flood_risk for s in snapshots], dtype=bool)),
            "moon_illumination": (["time"], series(lambda s: s.celestial.moon_illumination)),
            "active_systems": (["time"], np.array([len(s.systems) for s in snapshots])),
        },
        coords={"time": time},
    )

    dataset.temperature.attrs["units"] = temperature_units
    dataset.feels_like.attrs["units"] = temperature_units
    dataset.dew_point.attrs["units"] = temperature_units
    dataset.humidity.attrs["units"] = "percent"
    dataset.pressure.attrs["units"] = "hPa"
    dataset.pressure_trend.attrs["units"] = "hPa/hr"
    dataset.cloud_cover.attrs["units"] = "percent"
    dataset.precipitation_potential.attrs["units"] = "fraction"
    dataset.precipitation.attrs["units"] = precipitation_units
    dataset.wind_speed.attrs["units"] = speed_units
    dataset.wind_gust.attrs["units"] = speed_units
    dataset.wind_direction.attrs["units"] = "degrees"
    dataset.instability.attrs["units"] = "index (0-10)"
    dataset.moon_illumination.attrs["units"] = "percent"

    return dataset
