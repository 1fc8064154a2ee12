"""Simulation facade for the region weather engine.

A ``WeatherSimulation`` ties together one region's climate profile, its
system scheduler and its trend tracker and advances them hour by hour:

    scheduler.step() -> synthesize_snapshot() -> tracker.record()

The module level functions are the operations consumers call. Separate
simulations share no mutable state, so different regions can be advanced
in parallel with ``advance_regions``.
"""

import logging
import numbers
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from weather_utils.config import Configuration, DEFAULT_CONFIGURATION
from .celestial import CelestialReading, get_celestial as _celestial_reading
from .climate_profile import ClimateProfile
from .exceptions import InvalidArgumentError, ProfileValidationError, SimulationInvariantError
from .extreme_weather import Hazard
from .synthesizer import WeatherSnapshot, synthesize_snapshot
from .trends import TrendTracker
from .weather_systems import SystemScheduler, WeatherSystem

logger = logging.getLogger(__name__)

STATE_VERSION = 1

# Simulations start here unless told otherwise, so runs never depend on the clock
DEFAULT_START = datetime(2000, 1, 1, 0, 0)

ProfileLike = Union[ClimateProfile, Mapping[str, Any]]


def _coerce_profile(profile: ProfileLike) -> ClimateProfile:
    if isinstance(profile, ClimateProfile):
        return profile
    if isinstance(profile, Mapping):
        return ClimateProfile.from_dict(profile)
    raise ProfileValidationError(
        [f"expected a ClimateProfile or mapping, got {type(profile).__name__}"]
    )


def _coerce_start(start: Optional[Union[date, datetime]]) -> datetime:
    if start is None:
        return DEFAULT_START
    if isinstance(start, datetime):
        return start.replace(tzinfo=None, second=0, microsecond=0)
    if isinstance(start, date):
        return datetime(start.year, start.month, start.day)
    raise InvalidArgumentError(f"start must be a date or datetime, got {type(start).__name__}")


def _check_hours(hours) -> int:
    if isinstance(hours, bool) or not isinstance(hours, numbers.Integral):
        raise InvalidArgumentError(f"hours must be an integer, got {hours!r}")
    if hours <= 0:
        raise InvalidArgumentError(f"hours must be positive, got {hours}")
    return int(hours)


class WeatherSimulation:
    """Hour-by-hour weather for one region.

    The profile is validated before anything else is built, so a bad
    profile never leaves a half-constructed simulation behind. Once an
    invariant violation has been raised the simulation is marked failed and
    refuses to advance.
    """

    def __init__(
            self,
            profile: ProfileLike,
            seed: int,
            start: Optional[Union[date, datetime]] = None,
            config: Optional[Configuration] = None
    ):
        """Initialize the simulation and synthesize the starting hour.

        Args:
            profile: ClimateProfile, or a mapping strictly validated into one
            seed: Random seed for the weather system scheduler
            start: Moment of the initial snapshot
            config: Engine tuning parameters

        Raises:
            ProfileValidationError: If the profile is malformed
            InvalidArgumentError: If seed or start is unusable
        """
        self.profile = _coerce_profile(profile)
        self.config = config or DEFAULT_CONFIGURATION
        self.current_time = _coerce_start(start)

        self.scheduler = SystemScheduler(self.profile, seed, self.config)
        self.tracker = TrendTracker(config=self.config)
        self.failed = False

        self.current = self._synthesize()
        self.tracker.record(self.current)

        logger.info("Created %s simulation (seed %d) at %s",
                    self.profile.name or self.profile.biome, self.scheduler.seed,
                    self.current_time.isoformat())

    @property
    def seed(self) -> int:
        return self.scheduler.seed

    @property
    def active_systems(self) -> Tuple[WeatherSystem, ...]:
        return self.scheduler.systems

    def _synthesize(self) -> WeatherSnapshot:
        return synthesize_snapshot(
            self.profile,
            self.scheduler.systems,
            self.current_time,
            self.tracker.context(),
            self.config,
        )

    def step(self) -> WeatherSnapshot:
        """Advance exactly one hour and return its snapshot."""
        if self.failed:
            raise SimulationInvariantError("Simulation hit an invariant violation and cannot advance")

        try:
            self.current_time += timedelta(hours=1)
            self.scheduler.step()
            snapshot = self._synthesize()
        except SimulationInvariantError:
            self.failed = True
            raise

        self.tracker.record(snapshot)
        self.current = snapshot
        return snapshot

    def advance(self, hours: int) -> List[WeatherSnapshot]:
        """Advance several hours.

        Args:
            hours: Number of hours, a positive integer

        Returns:
            Exactly ``hours`` snapshots in chronological order

        Raises:
            InvalidArgumentError: If hours is not a positive integer
            SimulationInvariantError: If a non-finite value was produced
        """
        return [self.step() for _ in range(_check_hours(hours))]

    def export_state(self) -> Dict[str, Any]:
        """Export everything needed to resume this simulation later.

        The result only contains JSON types; a persistence layer can store
        it as is.
        """
        return {
            'version': STATE_VERSION,
            'profile': self.profile.to_dict(),
            'config': self.config.to_dict(),
            'current_time': self.current_time.isoformat(),
            'failed': self.failed,
            'scheduler': self.scheduler.get_state(),
            'tracker': self.tracker.get_state(),
        }

    @classmethod
    def from_state(cls, state: Mapping[str, Any]) -> 'WeatherSimulation':
        """Restore a simulation exported by export_state.

        The restored simulation continues exactly as the exported one would
        have. Nothing is synthesized while restoring; the current snapshot is
        the newest one in the stored trend window.

        Raises:
            InvalidArgumentError: If the state has an unsupported version or
                holds no snapshots
            ProfileValidationError: If the stored profile is malformed
        """
        if state.get('version') != STATE_VERSION:
            raise InvalidArgumentError(f"Unsupported simulation state version {state.get('version')!r}")

        simulation = cls.__new__(cls)
        simulation.profile = _coerce_profile(state['profile'])
        simulation.config = Configuration.from_dict(state['config'])
        simulation.current_time = _coerce_start(datetime.fromisoformat(state['current_time']))

        simulation.scheduler = SystemScheduler(
            simulation.profile, state['scheduler']['seed'], simulation.config)
        simulation.scheduler.set_state(state['scheduler'])
        simulation.tracker = TrendTracker(config=simulation.config)
        simulation.tracker.set_state(state['tracker'])
        simulation.failed = bool(state['failed'])

        simulation.current = simulation.tracker.latest
        if simulation.current is None:
            raise InvalidArgumentError("Simulation state holds no snapshots")

        logger.info("Restored %s simulation at %s",
                    simulation.profile.name or simulation.profile.biome,
                    simulation.current_time.isoformat())
        return simulation


def create_simulation(
        profile: ProfileLike,
        seed: int,
        start: Optional[Union[date, datetime]] = None,
        config: Optional[Configuration] = None
) -> WeatherSimulation:
    """Create a simulation handle for one region."""
    return WeatherSimulation(profile, seed, start=start, config=config)


def advance_hours(simulation: WeatherSimulation, hours: int) -> List[WeatherSnapshot]:
    """Advance a simulation and return the new snapshots in order."""
    return simulation.advance(hours)


def get_current_snapshot(simulation: WeatherSimulation) -> WeatherSnapshot:
    return simulation.current


def get_active_systems(simulation: WeatherSimulation) -> Tuple[WeatherSystem, ...]:
    """Weather systems currently crossing the region, as an immutable tuple."""
    return simulation.active_systems


def get_hazards(simulation: WeatherSimulation) -> Tuple[Hazard, ...]:
    """Hazards flagged for the current hour, such as drought or flood risk."""
    return simulation.current.hazards


def get_celestial(when: Union[date, datetime], latitude_band: str) -> CelestialReading:
    """Sun and moon data for a date and latitude band; needs no simulation."""
    return _celestial_reading(when, latitude_band)


def advance_regions(
        simulations: Mapping[str, WeatherSimulation],
        hours: int,
        max_workers: Optional[int] = None
) -> Dict[str, List[WeatherSnapshot]]:
    """Advance several independent regions concurrently.

    Hours within one region still run in order; only different regions
    overlap.

    Args:
        simulations: Region name mapped to its simulation
        hours: Hours to advance every region
        max_workers: Thread pool size, defaults to the executor's choice

    Returns:
        Region name mapped to that region's new snapshots
    """
    hours = _check_hours(hours)
    if len({id(simulation) for simulation in simulations.values()}) != len(simulations):
        raise InvalidArgumentError("each region needs its own simulation instance")

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            name: executor.submit(simulation.advance, hours)
            for name, simulation in simulations.items()
        }
        return {name: future.result() for name, future in futures.items()}
