"""Tests for weather condition names."""

from weather_generation.conditions import WeatherCondition, classify_condition


def classify(temperature=65.0, humidity=50.0, cloud_cover=20.0, potential=0.2,
             amount=0.0, kind="none", wind_speed=8.0, instability=3.0):
    return classify_condition(temperature, humidity, cloud_cover, potential, amount, kind, wind_speed, instability)


def test_sky_conditions_follow_cloud_cover():
    assert classify(cloud_cover=10.0) == WeatherCondition.CLEAR_SKIES
    assert classify(cloud_cover=50.0) == WeatherCondition.LIGHT_CLOUDS
    assert classify(cloud_cover=90.0) == WeatherCondition.HEAVY_CLOUDS


def test_precipitation_conditions():
    assert classify(amount=0.1, kind="rain", potential=0.7) == WeatherCondition.RAIN
    assert classify(amount=0.3, kind="rain", potential=0.95) == WeatherCondition.HEAVY_RAIN
    assert classify(amount=0.1, kind="snow", temperature=20.0) == WeatherCondition.SNOW
    assert classify(amount=0.1, kind="snow", temperature=20.0, wind_speed=25.0) == WeatherCondition.BLIZZARD
    assert classify(amount=0.1, kind="hail", temperature=40.0) == WeatherCondition.HAIL
    assert classify(amount=0.1, kind="rain", temperature=75.0, instability=8.0) == WeatherCondition.THUNDERSTORM


def test_precipitation_is_never_hidden_by_extremes():
    condition = classify(amount=0.1, kind="snow", temperature=5.0, humidity=98.0, wind_speed=2.0)

    assert condition.is_precipitating


def test_extremes_and_fog():
    assert classify(temperature=100.0) == WeatherCondition.SCORCHING_HEAT
    assert classify(temperature=10.0) == WeatherCondition.FREEZING_COLD
    assert classify(temperature=35.0, wind_speed=35.0) == WeatherCondition.COLD_WINDS
    assert classify(temperature=50.0, humidity=93.0, cloud_cover=30.0, wind_speed=4.0) == WeatherCondition.FOG
    assert classify(temperature=40.0, humidity=97.0, cloud_cover=50.0, wind_speed=3.0) == WeatherCondition.HEAVY_FOG
    assert not WeatherCondition.FOG.is_precipitating
