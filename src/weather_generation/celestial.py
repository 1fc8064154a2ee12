"""Sun and moon timing for the region weather engine.

Everything here is a pure function of the date and the region's latitude
band: there is no hidden state, so readings can be computed repeatedly or
from several threads with identical results.

Daylight hours come from a small seasonal table (one entry per month and
latitude band). The table is computed once with PyEphem at each band's
representative latitude, the same sunrise/sunset approach the planetary
model uses for day length, and then cached. Times are local solar time with
noon at 12:00.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import ephem

from weather_utils.config import Configuration, DEFAULT_CONFIGURATION
from .climate_profile import BAND_LATITUDES, LATITUDE_BANDS
from .exceptions import InvalidArgumentError


NO_TIME = '--'

# Year used to sample the seasonal daylight table
_TABLE_YEAR = 2001

# Twilight gets longer the further the sun's path is from vertical
_TWILIGHT_WIDENING = {
    'equatorial': 1.0,
    'tropical': 1.1,
    'temperate': 1.3,
    'subarctic': 1.8,
    'polar': 2.5,
}

# Hours past sunset (or before sunrise) at equatorial latitudes
_CIVIL_HOURS = 0.4
_NAUTICAL_HOURS = 0.8
_ASTRONOMICAL_HOURS = 1.2

# Daylight beyond which the polar flags force the extreme
_POLAR_DAY_HOURS = 20.0
_POLAR_NIGHT_HOURS = 4.0


class TwilightLevel(Enum):
    DAYLIGHT = 'Daylight'
    CIVIL = 'Civil Twilight'
    NAUTICAL = 'Nautical Twilight'
    ASTRONOMICAL = 'Astronomical Twilight'
    NIGHT = 'Night'


class MoonPhase(Enum):
    NEW_MOON = 'New Moon'
    WAXING_CRESCENT = 'Waxing Crescent'
    FIRST_QUARTER = 'First Quarter'
    WAXING_GIBBOUS = 'Waxing Gibbous'
    FULL_MOON = 'Full Moon'
    WANING_GIBBOUS = 'Waning Gibbous'
    LAST_QUARTER = 'Last Quarter'
    WANING_CRESCENT = 'Waning Crescent'


# Phases in cycle order, starting from new moon
PHASE_ORDER = tuple(MoonPhase)


@dataclass(frozen=True)
class CelestialReading:
    """Sun and moon data for one moment in one latitude band."""
    timestamp: datetime
    latitude_band: str
    sunrise: Optional[datetime]
    sunset: Optional[datetime]
    sunrise_time: str
    sunset_time: str
    day_length: timedelta
    twilight_level: TwilightLevel
    moon_phase: MoonPhase
    moon_illumination: float
    moon_age: float
    moonrise: datetime
    moonset: datetime
    is_permanent_night: bool = False
    is_permanent_day: bool = False

    @property
    def moonrise_time(self) -> str:
        return format_clock(self.moonrise)

    @property
    def moonset_time(self) -> str:
        return format_clock(self.moonset)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp.isoformat(),
            'latitude_band': self.latitude_band,
            'sunrise': self.sunrise.isoformat() if self.sunrise else None,
            'sunset': self.sunset.isoformat() if self.sunset else None,
            'sunrise_time': self.sunrise_time,
            'sunset_time': self.sunset_time,
            'day_length_hours': self.day_length.total_seconds() / 3600.0,
            'twilight_level': self.twilight_level.value,
            'moon_phase': self.moon_phase.value,
            'moon_illumination': self.moon_illumination,
            'moon_age': self.moon_age,
            'moonrise': self.moonrise.isoformat(),
            'moonset': self.moonset.isoformat(),
            'moonrise_time': self.moonrise_time,
            'moonset_time': self.moonset_time,
            'is_permanent_night': self.is_permanent_night,
            'is_permanent_day': self.is_permanent_day,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'CelestialReading':
        def parse(value):
            return datetime.fromisoformat(value) if value else None

        return cls(
            timestamp=parse(data['timestamp']),
            latitude_band=data['latitude_band'],
            sunrise=parse(data['sunrise']),
            sunset=parse(data['sunset']),
            sunrise_time=data['sunrise_time'],
            sunset_time=data['sunset_time'],
            day_length=timedelta(hours=data['day_length_hours']),
            twilight_level=TwilightLevel(data['twilight_level']),
            moon_phase=MoonPhase(data['moon_phase']),
            moon_illumination=data['moon_illumination'],
            moon_age=data['moon_age'],
            moonrise=parse(data['moonrise']),
            moonset=parse(data['moonset']),
            is_permanent_night=data['is_permanent_night'],
            is_permanent_day=data['is_permanent_day'],
        )


def format_clock(moment: Optional[datetime]) -> str:
    """Format a time as ``6:42 AM``; ``--`` for a missing time."""
    if moment is None:
        return NO_TIME
    return moment.strftime('%I:%M %p').lstrip('0')


def _round_to_minute(moment: datetime) -> datetime:
    return (moment + timedelta(seconds=30)).replace(second=0, microsecond=0)


def _daylight_hours_at(latitude: float, when: datetime) -> float:
    """Hours between sunrise and sunset around local noon.

    Args:
        latitude: Latitude in degrees
        when: Day to evaluate (UTC, noon is used)

    Returns:
        Day length in hours, 0 for polar night and 24 for polar day
    """
    observer = ephem.Observer()
    observer.lat = str(latitude)
    observer.lon = '0'
    observer.pressure = 0
    observer.date = ephem.Date(datetime(when.year, when.month, when.day, 12))

    try:
        sunrise = observer.previous_rising(ephem.Sun())
        sunset = observer.next_setting(ephem.Sun())
        return (sunset.datetime() - sunrise.datetime()).total_seconds() / 3600.0
    except (ephem.AlwaysUpError, ephem.NeverUpError):
        sun = ephem.Sun()
        sun.compute(observer)
        return 24.0 if float(sun.alt) > 0 else 0.0


@lru_cache(maxsize=None)
def daylight_table(latitude_band: str) -> Tuple[float, ...]:
    """Daylight hours for each month (mid-month) in a latitude band."""
    latitude = BAND_LATITUDES[latitude_band]
    return tuple(
        _daylight_hours_at(latitude, datetime(_TABLE_YEAR, month, 15))
        for month in range(1, 13)
    )


@lru_cache(maxsize=1)
def reference_new_moon() -> datetime:
    """A known new moon (January 2000) that moon ages are counted from."""
    return ephem.previous_new_moon('2000/1/7').datetime()


def moon_age(moment: datetime, cycle_days: float = 29.53059) -> float:
    """Days since the last new moon."""
    elapsed = (moment - reference_new_moon()).total_seconds() / 86400.0
    return elapsed % cycle_days


def moon_phase(age: float, cycle_days: float = 29.53059) -> MoonPhase:
    """Bucket a moon age into one of eight equal phases."""
    return PHASE_ORDER[int(age / cycle_days * 8) % 8]


def moon_illumination(age: float, cycle_days: float = 29.53059) -> float:
    """Illuminated percentage: 0 at new moon, 100 at full."""
    fraction = age / cycle_days
    return round(50.0 * (1.0 - math.cos(2.0 * math.pi * fraction)), 1)


def _twilight(moment: datetime, sunrise: datetime, sunset: datetime, band: str) -> TwilightLevel:
    if sunrise <= moment <= sunset:
        return TwilightLevel.DAYLIGHT

    if moment < sunrise:
        hours = (sunrise - moment).total_seconds() / 3600.0
    else:
        hours = (moment - sunset).total_seconds() / 3600.0

    widening = _TWILIGHT_WIDENING[band]
    if hours <= _CIVIL_HOURS * widening:
        return TwilightLevel.CIVIL
    if hours <= _NAUTICAL_HOURS * widening:
        return TwilightLevel.NAUTICAL
    if hours <= _ASTRONOMICAL_HOURS * widening:
        return TwilightLevel.ASTRONOMICAL
    return TwilightLevel.NIGHT


def get_celestial(
        when: Union[date, datetime],
        latitude_band: str,
        *,
        polar_day: bool = False,
        polar_night: bool = False,
        config: Optional[Configuration] = None
) -> CelestialReading:
    """Compute sun and moon data for a date or moment in a latitude band.

    Args:
        when: Date (evaluated at noon) or datetime in local solar time
        latitude_band: One of equatorial, tropical, temperate, subarctic, polar
        polar_day: Region has midnight sun; near-24h days become 24h
        polar_night: Region has polar night; near-0h days become 0h
        config: Engine tuning parameters (lunar cycle length)

    Returns:
        CelestialReading

    Raises:
        InvalidArgumentError: For an unknown latitude band or a bad date
    """
    if latitude_band not in LATITUDE_BANDS:
        raise InvalidArgumentError(f"Unknown latitude band {latitude_band!r}")
    if isinstance(when, datetime):
        moment = when.replace(tzinfo=None)
    elif isinstance(when, date):
        moment = datetime.combine(when, time(12))
    else:
        raise InvalidArgumentError(f"Expected a date or datetime, got {type(when).__name__}")

    config = config or DEFAULT_CONFIGURATION
    cycle = config.lunar_cycle_days

    daylight = daylight_table(latitude_band)[moment.month - 1]
    if polar_day and daylight >= _POLAR_DAY_HOURS:
        daylight = 24.0
    if polar_night and daylight <= _POLAR_NIGHT_HOURS:
        daylight = 0.0

    midnight = datetime.combine(moment.date(), time(0))
    noon = midnight + timedelta(hours=12)

    is_permanent_night = daylight <= 0.0
    is_permanent_day = daylight >= 24.0
    if is_permanent_night or is_permanent_day:
        sunrise = sunset = None
        day_length = timedelta(hours=24) if is_permanent_day else timedelta(0)
        twilight = TwilightLevel.DAYLIGHT if is_permanent_day else TwilightLevel.NIGHT
    else:
        half = timedelta(hours=daylight / 2.0)
        sunrise = _round_to_minute(noon - half)
        sunset = _round_to_minute(noon + half)
        day_length = sunset - sunrise
        twilight = _twilight(moment, sunrise, sunset, latitude_band)

    # The moon rises about 49 minutes later each day of its cycle
    age = moon_age(moment, cycle)
    lag = timedelta(days=age / cycle)
    day = timedelta(hours=24)
    rise_anchor = sunrise or midnight + timedelta(hours=6)
    set_anchor = sunset or midnight + timedelta(hours=18)
    moonrise = _round_to_minute(midnight + (rise_anchor - midnight + lag) % day)
    moonset = _round_to_minute(midnight + (set_anchor - midnight + lag) % day)

    return CelestialReading(
        timestamp=moment,
        latitude_band=latitude_band,
        sunrise=sunrise,
        sunset=sunset,
        sunrise_time=format_clock(sunrise),
        sunset_time=format_clock(sunset),
        day_length=day_length,
        twilight_level=twilight,
        moon_phase=moon_phase(age, cycle),
        moon_illumination=moon_illumination(age, cycle),
        moon_age=age,
        moonrise=moonrise,
        moonset=moonset,
        is_permanent_night=is_permanent_night,
        is_permanent_day=is_permanent_day,
    )
