"""Tests for sun and moon timing."""

from datetime import date, datetime, timedelta

import pytest

from weather_generation.celestial import (
    NO_TIME,
    PHASE_ORDER,
    MoonPhase,
    TwilightLevel,
    format_clock,
    get_celestial,
    reference_new_moon,
)
from weather_generation.exceptions import InvalidArgumentError


def test_polar_december_is_permanent_night():
    reading = get_celestial(date(2024, 12, 15), "polar")

    assert reading.is_permanent_night
    assert reading.sunrise_time == NO_TIME
    assert reading.sunset_time == NO_TIME
    assert reading.sunrise is None
    assert reading.day_length == timedelta(0)
    assert reading.twilight_level == TwilightLevel.NIGHT


def test_moon_keeps_moving_during_polar_night():
    early = get_celestial(date(2024, 12, 1), "polar")
    late = get_celestial(date(2024, 12, 16), "polar")

    assert early.is_permanent_night and late.is_permanent_night
    assert early.moon_phase != late.moon_phase
    assert early.moonrise is not None


def test_polar_june_is_permanent_day():
    reading = get_celestial(date(2024, 6, 15), "polar")

    assert reading.is_permanent_day
    assert reading.day_length == timedelta(hours=24)
    assert reading.twilight_level == TwilightLevel.DAYLIGHT


def test_polar_night_flag_forces_darkness():
    plain = get_celestial(date(2024, 12, 15), "subarctic")
    forced = get_celestial(date(2024, 12, 15), "subarctic", polar_night=True)

    assert not plain.is_permanent_night
    assert forced.is_permanent_night


def test_temperate_sun_times_are_symmetric_about_noon():
    reading = get_celestial(date(2024, 3, 20), "temperate")
    noon = datetime(2024, 3, 20, 12)

    assert reading.sunrise < noon < reading.sunset
    assert abs((noon - reading.sunrise) - (reading.sunset - noon)) <= timedelta(minutes=1)
    assert reading.day_length == reading.sunset - reading.sunrise


def test_summer_days_are_longer():
    summer = get_celestial(date(2024, 6, 20), "temperate")
    winter = get_celestial(date(2024, 12, 20), "temperate")

    assert summer.day_length > timedelta(hours=14)
    assert winter.day_length < timedelta(hours=10)


def test_higher_latitudes_have_more_extreme_days():
    tropical = get_celestial(date(2024, 6, 20), "tropical")
    subarctic = get_celestial(date(2024, 6, 20), "subarctic")

    assert subarctic.day_length > tropical.day_length


def test_twilight_levels_through_the_evening():
    day = date(2024, 3, 20)
    sunset = get_celestial(day, "temperate").sunset

    assert get_celestial(sunset - timedelta(hours=1), "temperate").twilight_level == TwilightLevel.DAYLIGHT
    assert get_celestial(sunset + timedelta(minutes=10), "temperate").twilight_level == TwilightLevel.CIVIL
    assert get_celestial(datetime(2024, 3, 20, 23, 30), "temperate").twilight_level == TwilightLevel.NIGHT


def test_moon_passes_through_every_phase_once_per_cycle():
    start = reference_new_moon() + timedelta(hours=1)
    phases = []
    for hour in range(0, int(29.6 * 24) + 1):
        phase = get_celestial(start + timedelta(hours=hour), "temperate").moon_phase
        if not phases or phases[-1] != phase:
            phases.append(phase)

    assert phases == list(PHASE_ORDER) + [MoonPhase.NEW_MOON]


def test_moon_illumination_peaks_at_full():
    new_moon = reference_new_moon()

    assert get_celestial(new_moon + timedelta(hours=1), "temperate").moon_illumination < 1.0
    assert get_celestial(new_moon + timedelta(days=14.765), "temperate").moon_illumination > 99.0


def test_moonrise_is_about_fifty_minutes_later_each_day():
    first_day = (reference_new_moon() + timedelta(days=5)).date()
    first = get_celestial(first_day, "temperate")
    second = get_celestial(first_day + timedelta(days=1), "temperate")

    shift = (second.moonrise - first.moonrise) - timedelta(days=1)

    assert timedelta(minutes=47) <= shift <= timedelta(minutes=51)


def test_readings_are_repeatable():
    when = datetime(2031, 7, 4, 21, 15)

    assert get_celestial(when, "tropical") == get_celestial(when, "tropical")


def test_clock_format():
    assert format_clock(datetime(2024, 1, 1, 6, 42)) == "6:42 AM"
    assert format_clock(datetime(2024, 1, 1, 18, 5)) == "6:05 PM"
    assert format_clock(None) == NO_TIME


def test_unknown_band_is_rejected():
    with pytest.raises(InvalidArgumentError):
        get_celestial(date(2024, 1, 1), "mid-latitude")
