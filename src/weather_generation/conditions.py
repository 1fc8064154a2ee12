"""Named weather conditions shown to players.

Turns the numeric fields of a snapshot into one of a fixed set of
condition names, the label a GM reads out at the table.
"""

from enum import Enum


class WeatherCondition(Enum):
    CLEAR_SKIES = 'Clear Skies'
    LIGHT_CLOUDS = 'Light Clouds'
    HEAVY_CLOUDS = 'Heavy Clouds'
    RAIN = 'Rain'
    HEAVY_RAIN = 'Heavy Rain'
    THUNDERSTORM = 'Thunderstorm'
    SNOW = 'Snow'
    BLIZZARD = 'Blizzard'
    HAIL = 'Hail'
    FOG = 'Fog'
    HEAVY_FOG = 'Heavy Fog'
    SCORCHING_HEAT = 'Scorching Heat'
    FREEZING_COLD = 'Freezing Cold'
    COLD_WINDS = 'Cold Winds'
    HIGH_HUMIDITY_HAZE = 'High Humidity Haze'

    @property
    def is_precipitating(self) -> bool:
        return self in _PRECIPITATING


_PRECIPITATING = frozenset({
    WeatherCondition.RAIN,
    WeatherCondition.HEAVY_RAIN,
    WeatherCondition.THUNDERSTORM,
    WeatherCondition.SNOW,
    WeatherCondition.BLIZZARD,
    WeatherCondition.HAIL,
})


def classify_condition(
        temperature: float,
        humidity: float,
        cloud_cover: float,
        precipitation_potential: float,
        precipitation_amount: float,
        precipitation_type: str,
        wind_speed: float,
        instability: float
) -> WeatherCondition:
    """Pick the condition name for one hour of weather.

    Falling precipitation always yields a precipitating condition so the
    label never contradicts the amount. Otherwise the sky condition from
    cloud cover may be replaced by temperature, wind or fog extremes.

    Args:
        temperature: Temperature in °F
        humidity: Relative humidity in percent
        cloud_cover: Cloud cover in percent
        precipitation_potential: Potential in [0, 1]
        precipitation_amount: Amount in inches per hour
        precipitation_type: One of none, rain, snow, hail
        wind_speed: Sustained wind in mph
        instability: Instability index 0-10

    Returns:
        WeatherCondition
    """
    if precipitation_amount > 0:
        if precipitation_type == 'snow':
            return WeatherCondition.BLIZZARD if wind_speed > 20 else WeatherCondition.SNOW
        if precipitation_type == 'hail':
            return WeatherCondition.HAIL
        if temperature > 60 and instability > 7:
            return WeatherCondition.THUNDERSTORM
        if precipitation_potential > 0.9:
            return WeatherCondition.HEAVY_RAIN
        return WeatherCondition.RAIN

    if cloud_cover > 80:
        condition = WeatherCondition.HEAVY_CLOUDS
    elif cloud_cover > 30:
        condition = WeatherCondition.LIGHT_CLOUDS
    else:
        condition = WeatherCondition.CLEAR_SKIES

    if temperature > 95 and cloud_cover < 40:
        condition = WeatherCondition.SCORCHING_HEAT
    elif temperature < 20:
        condition = WeatherCondition.FREEZING_COLD

    if wind_speed > 30 and temperature < 40:
        condition = WeatherCondition.COLD_WINDS
    elif temperature > 80 and humidity > 85 and cloud_cover < 40:
        condition = WeatherCondition.HIGH_HUMIDITY_HAZE

    # Heavy fog is the stricter case, check it first
    if humidity > 95 and cloud_cover > 40 and temperature < 45 and wind_speed < 5:
        condition = WeatherCondition.HEAVY_FOG
    elif humidity > 90 and cloud_cover > 20 and temperature < 60 and wind_speed < 8:
        condition = WeatherCondition.FOG

    return condition
