"""Tests for forecast export."""

import numpy as np
import pytest

from weather_generation.exceptions import InvalidArgumentError
from weather_generation.forecast import forecast_to_dataset
from weather_generation.simulation import advance_hours, create_simulation


@pytest.fixture
def snapshots(stormy_profile, start):
    return advance_hours(create_simulation(stormy_profile, seed=4, start=start), 48)


def test_dataset_is_indexed_by_time(snapshots):
    dataset = forecast_to_dataset(snapshots)

    assert dataset.sizes["time"] == 48
    assert dataset.time.values[0] == np.datetime64(snapshots[0].timestamp)
    np.testing.assert_allclose(dataset.pressure.values, [s.pressure for s in snapshots])
    assert list(dataset.condition.values) == [s.condition.value for s in snapshots]


def test_units_are_recorded(snapshots):
    dataset = forecast_to_dataset(snapshots)

    assert dataset.temperature.attrs["units"] == "degF"
    assert dataset.precipitation.attrs["units"] == "in/hr"
    assert dataset.wind_speed.attrs["units"] == "mph"
    assert dataset.pressure.attrs["units"] == "hPa"


def test_metric_conversion(snapshots):
    imperial = forecast_to_dataset(snapshots)
    metric = forecast_to_dataset(snapshots, metric=True)

    np.testing.assert_allclose(metric.temperature.values, (imperial.temperature.values - 32.0) * 5.0 / 9.0)
    np.testing.assert_allclose(metric.wind_speed.values, imperial.wind_speed.values * 1.609344)
    np.testing.assert_allclose(metric.precipitation.values, imperial.precipitation.values * 25.4)
    assert metric.temperature.attrs["units"] == "degC"
    np.testing.assert_allclose(metric.pressure.values, imperial.pressure.values)


def test_empty_forecast_is_rejected():
    with pytest.raises(InvalidArgumentError):
        forecast_to_dataset([])


def test_hazard_flags_are_exported(snapshots):
    dataset = forecast_to_dataset(snapshots)

    assert dataset.drought.dtype == bool
    assert list(dataset.flood_risk.values) == [s.flood_risk for s in snapshots]
