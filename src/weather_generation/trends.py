"""Trend tracking for the region weather engine.

Keeps a short, bounded window of recent snapshots per region and derives
from it the values a single snapshot cannot know by itself: how fast
pressure is changing, how unstable the air is and how much it has rained
lately.
"""

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Deque, Dict, List, Mapping, Optional, Sequence, Tuple

from weather_utils.config import Configuration, DEFAULT_CONFIGURATION

if TYPE_CHECKING:
    from .synthesizer import WeatherSnapshot


RISING = 'Rising'
FALLING = 'Falling'
STABLE = 'Stable'


@dataclass(frozen=True)
class TrendContext:
    """What the synthesizer needs to know about the previous hours.

    Attributes:
        previous_pressure: Pressure of the previous snapshot (hPa), None
            before the first snapshot
        recent_precipitation: Decayed sum of recent precipitation (inches)
        precipitation_history: Hourly precipitation amounts (inches) of the
            tracked window, oldest first
    """
    previous_pressure: Optional[float] = None
    recent_precipitation: float = 0.0
    precipitation_history: Tuple[float, ...] = ()


def pressure_trend(pressure: float, previous_pressure: Optional[float]) -> float:
    """Hourly pressure change in hPa; zero when there is no previous value."""
    if previous_pressure is None:
        return 0.0
    return pressure - previous_pressure


def classify_tendency(trend: float, threshold: float = 0.5) -> str:
    """Name the pressure tendency for a trend in hPa/hr."""
    if trend > threshold:
        return RISING
    if trend < -threshold:
        return FALLING
    return STABLE


def instability_index(
        pressure: float,
        temperature: float,
        baseline_temperature: float,
        temp_variation: float,
        trend: float = 0.0,
        humidity: float = 50.0,
        recent_precipitation: float = 0.0,
        standard_pressure: float = 1013.25
) -> float:
    """Convective instability score on a 0-10 scale.

    Low pressure, air warmer than the climate baseline, falling pressure
    and moist air all add to the score. Recent precipitation has already
    released some of the energy and lowers it.

    Args:
        pressure: Current pressure in hPa
        temperature: Current temperature in °F
        baseline_temperature: Temperature the climate alone would give, °F
        temp_variation: Typical temperature swing of the region, °F
        trend: Pressure trend in hPa/hr
        humidity: Relative humidity in percent
        recent_precipitation: Decayed recent precipitation in inches
        standard_pressure: Reference pressure in hPa

    Returns:
        Instability index clamped to [0, 10]
    """
    score = 2.0
    score += max(0.0, standard_pressure - pressure) * 0.25
    score += max(0.0, temperature - baseline_temperature) / max(temp_variation, 1.0) * 3.0
    score += max(0.0, -trend)
    score += max(0.0, humidity - 60.0) / 40.0 * 2.0
    score -= min(2.0, recent_precipitation * 2.0)
    return min(10.0, max(0.0, score))


def drought_conditions(amounts: Sequence[float], window: int, threshold: float) -> bool:
    """True when a full window of hourly amounts adds up to almost nothing."""
    if len(amounts) < window:
        return False
    return sum(amounts[-window:]) < threshold


def flood_conditions(amounts: Sequence[float], day_threshold: float, burst_threshold: float) -> bool:
    """True after heavy rain over the last day or a downpour over six hours."""
    return sum(amounts[-24:]) > day_threshold or sum(amounts[-6:]) > burst_threshold


class TrendTracker:
    """Rolling window of a region's most recent snapshots."""

    def __init__(self, window: Optional[int] = None, config: Optional[Configuration] = None):
        """Initialize an empty tracker.

        Args:
            window: Number of snapshots to keep, defaults to config.trend_window
            config: Engine tuning parameters
        """
        self.config = config or DEFAULT_CONFIGURATION
        self.window = int(window or self.config.trend_window)
        self.history: Deque['WeatherSnapshot'] = deque(maxlen=self.window)

    def __len__(self) -> int:
        return len(self.history)

    @property
    def latest(self) -> Optional['WeatherSnapshot']:
        return self.history[-1] if self.history else None

    def record(self, snapshot: 'WeatherSnapshot') -> None:
        """Append a snapshot; the oldest one is dropped once the window is full."""
        self.history.append(snapshot)

    def context(self) -> TrendContext:
        """Context for synthesizing the next hour."""
        latest = self.latest
        return TrendContext(
            previous_pressure=latest.pressure if latest is not None else None,
            recent_precipitation=self.recent_precipitation(),
            precipitation_history=self.precipitation_amounts(),
        )

    def recent_precipitation(self) -> float:
        """Decayed sum of precipitation amounts, newest hour weighted 1."""
        total = 0.0
        weight = 1.0
        for snapshot in reversed(self.history):
            total += snapshot.precipitation.amount * weight
            weight *= self.config.precipitation_decay
        return total

    def total_precipitation(self, hours: Optional[int] = None) -> float:
        """Plain sum of precipitation over the last ``hours`` snapshots."""
        snapshots = list(self.history)
        if hours is not None:
            snapshots = snapshots[-hours:] if hours > 0 else []
        return sum(snapshot.precipitation.amount for snapshot in snapshots)

    def precipitation_amounts(self) -> Tuple[float, ...]:
        return tuple(snapshot.precipitation.amount for snapshot in self.history)

    def is_drought(self) -> bool:
        """True when a full window has passed with almost no precipitation."""
        return drought_conditions(self.precipitation_amounts(), self.window, self.config.drought_threshold)

    def flood_risk(self) -> bool:
        """True after heavy sustained or concentrated precipitation."""
        return flood_conditions(
            self.precipitation_amounts(),
            self.config.flood_day_threshold,
            self.config.flood_burst_threshold,
        )

    def pressure_series(self) -> List[float]:
        return [snapshot.pressure for snapshot in self.history]

    def get_state(self) -> Dict[str, Any]:
        """Export the window as JSON-ready snapshot dictionaries."""
        return {
            'window': self.window,
            'history': [snapshot.to_dict() for snapshot in self.history],
        }

    def set_state(self, state: Mapping[str, Any]) -> None:
        """Restore a window exported by get_state."""
        from .synthesizer import WeatherSnapshot

        self.window = int(state['window'])
        self.history = deque(
            (WeatherSnapshot.from_dict(data) for data in state['history']),
            maxlen=self.window,
        )
