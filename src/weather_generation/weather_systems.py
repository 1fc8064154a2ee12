"""Weather system lifecycle for the region weather engine.

A region's weather is driven by a small population of pressure cells and
fronts that drift across it. Each simulated hour the scheduler ages and
moves the active systems, retires the ones that have crossed the region or
faded away, and may spawn a new one.

All randomness in the engine lives in this module: a seeded
``numpy.random.RandomState`` decides spawns and a seeded OpenSimplex field
jitters system speeds, so a seed and a profile always replay the same
sequence of events. Fronts also form deterministically where a high and a
low meet.
"""

import logging
import math
import numbers
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

import numpy as np
from opensimplex import OpenSimplex

from weather_utils.config import Configuration, DEFAULT_CONFIGURATION
from .climate_profile import ClimateProfile
from .exceptions import InvalidArgumentError, ProfileValidationError, SimulationInvariantError

logger = logging.getLogger(__name__)


class SystemType(Enum):
    """Kinds of weather system that can cross a region."""
    HIGH_PRESSURE = 'high-pressure'
    LOW_PRESSURE = 'low-pressure'
    COLD_FRONT = 'cold-front'
    WARM_FRONT = 'warm-front'

    @property
    def is_front(self) -> bool:
        return self in (SystemType.COLD_FRONT, SystemType.WARM_FRONT)


# Order matters: spawn draws index into this tuple
SPAWN_ORDER = (
    SystemType.HIGH_PRESSURE,
    SystemType.LOW_PRESSURE,
    SystemType.COLD_FRONT,
    SystemType.WARM_FRONT,
)


@dataclass(frozen=True)
class WeatherSystem:
    """One pressure cell or front moving across a region.

    Attributes:
        id: Identifier, unique within one simulation
        type: Kind of system
        intensity: Strength in [0, 1]
        age: Hours since the system spawned
        position: Progress across the region, 0 at entry and 1 at exit
    """
    id: int
    type: SystemType
    intensity: float
    age: int = 0
    position: float = 0.0

    def distance(self, point: float) -> float:
        """Distance between the system and a position in the region."""
        return abs(self.position - point)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type.value,
            'intensity': self.intensity,
            'age': self.age,
            'position': self.position,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'WeatherSystem':
        return cls(
            id=int(data['id']),
            type=SystemType(data['type']),
            intensity=float(data['intensity']),
            age=int(data['age']),
            position=float(data['position']),
        )


class SystemScheduler:
    """Owns the active weather systems of one region.

    The scheduler is the only mutable, random part of the engine. It keeps
    its systems as an immutable tuple and replaces it wholesale every hour,
    so tuples handed to callers are never changed afterwards.
    """

    def __init__(
            self,
            profile: ClimateProfile,
            seed: int,
            config: Optional[Configuration] = None
    ):
        """Initialize the scheduler for one region.

        Args:
            profile: Validated climate profile of the region
            seed: Random seed (0 to 2**32 - 1)
            config: Engine tuning parameters

        Raises:
            ProfileValidationError: If profile is not a ClimateProfile
            InvalidArgumentError: If seed is not a usable integer
        """
        if not isinstance(profile, ClimateProfile):
            raise ProfileValidationError(
                [f"expected a ClimateProfile, got {type(profile).__name__}"]
            )
        if isinstance(seed, bool) or not isinstance(seed, numbers.Integral):
            raise InvalidArgumentError(f"seed must be an integer, got {seed!r}")
        if not 0 <= seed < 2 ** 32:
            raise InvalidArgumentError(f"seed must be within [0, 2**32), got {seed}")

        self.profile = profile
        self.seed = int(seed)
        self.config = config or DEFAULT_CONFIGURATION

        self.rng = np.random.RandomState(self.seed)
        self.noise_gen = OpenSimplex(seed=self.seed)

        self.systems: Tuple[WeatherSystem, ...] = ()
        self.next_id = 1
        self.spawn_count = 0
        # (high id, low id) pairs that have already produced a front
        self.front_pairs: Set[Tuple[int, int]] = set()

    def _speed(self, system: WeatherSystem) -> float:
        """Hourly position change of a system.

        Fronts cross flat terrain fastest and are slowed most by rough
        terrain. A smooth noise term varies each system's speed over its
        lifetime.
        """
        config = self.config
        roughness = self.profile.terrain_roughness

        base = {
            SystemType.HIGH_PRESSURE: config.high_pressure_speed,
            SystemType.LOW_PRESSURE: config.low_pressure_speed,
            SystemType.COLD_FRONT: config.cold_front_speed,
            SystemType.WARM_FRONT: config.warm_front_speed,
        }[system.type]

        if system.type.is_front:
            base *= 1.0 - 0.5 * roughness
        else:
            base *= 1.0 - 0.25 * roughness

        jitter = self.noise_gen.noise2(float(system.id), system.age * 0.1)
        return base * (1.0 + config.speed_jitter * jitter)

    def advance(self) -> Tuple[WeatherSystem, ...]:
        """Advance every active system by one hour.

        Returns:
            The new tuple of active systems

        Raises:
            SimulationInvariantError: If a system ends up with a non-finite
                position or intensity
        """
        config = self.config
        survivors: List[WeatherSystem] = []

        for system in self.systems:
            aged = replace(system, age=system.age + 1)
            position = aged.position + self._speed(aged)
            intensity = aged.intensity
            if aged.age > config.decay_start_age:
                intensity *= 1.0 - config.decay_rate

            if not (math.isfinite(position) and math.isfinite(intensity)):
                logger.error("System %d became non-finite (position=%r, intensity=%r)",
                             system.id, position, intensity)
                raise SimulationInvariantError(
                    f"weather system {system.id} has a non-finite position or intensity"
                )

            if position >= 1.0 or intensity <= config.min_intensity:
                logger.debug("Retired %s %d at age %d", aged.type.value, aged.id, aged.age)
                continue

            survivors.append(replace(aged, position=position, intensity=intensity))

        self.systems = tuple(survivors)
        return self.systems

    def spawn_probability(self, profile: Optional[ClimateProfile] = None) -> float:
        """Chance that a new system spawns this hour.

        Grows with storm frequency and shrinks as the active set fills up;
        zero once the cap is reached.
        """
        profile = profile or self.profile
        active = len(self.systems)
        if active >= self.config.max_systems:
            return 0.0
        crowding = 1.0 - active / self.config.max_systems
        return self.config.base_spawn_rate * profile.storm_frequency * crowding

    def _type_weights(self, profile: ClimateProfile) -> np.ndarray:
        """Spawn weights in SPAWN_ORDER; calm climates favour pressure cells."""
        calm = 1.0 - profile.storm_intensity
        storm = profile.storm_intensity
        weights = np.array([
            0.15 + 0.45 * calm,
            0.15 + 0.25 * storm,
            0.05 + 0.35 * storm,
            0.05 + 0.25 * storm,
        ])
        return weights / weights.sum()

    def maybe_spawn(self, profile: Optional[ClimateProfile] = None) -> Optional[WeatherSystem]:
        """Possibly add a new system at the region's entry edge.

        Exactly one spawn roll is drawn per call whether or not a system is
        created, which keeps the random sequence aligned across runs.

        Args:
            profile: Profile to use, defaults to the scheduler's own

        Returns:
            The new system, or None if nothing spawned
        """
        profile = profile or self.profile
        roll = self.rng.random_sample()
        if roll >= self.spawn_probability(profile):
            return None

        system_type = SPAWN_ORDER[self.rng.choice(len(SPAWN_ORDER), p=self._type_weights(profile))]
        strength = 0.5 + 0.5 * profile.storm_intensity
        intensity = float(np.clip(0.2 + 0.8 * self.rng.random_sample() * strength, 0.0, 1.0))

        system = WeatherSystem(id=self.next_id, type=system_type, intensity=intensity)
        self.next_id += 1
        self.spawn_count += 1
        self.systems = self.systems + (system,)

        logger.debug("Spawned %s %d with intensity %.2f", system_type.value, system.id, intensity)
        return system

    def generate_fronts(self) -> Tuple[WeatherSystem, ...]:
        """Form fronts where a high and a low have drifted close together.

        The front appears midway between the pair with their mean intensity.
        It is cold when the high is further across the region than the low
        and warm otherwise.
        Each pair produces at most one front, and none form once the
        active set is full.

        Returns:
            The fronts created this hour
        """
        active_ids = {system.id for system in self.systems}
        self.front_pairs = {pair for pair in self.front_pairs if set(pair) <= active_ids}

        highs = [s for s in self.systems if s.type == SystemType.HIGH_PRESSURE]
        lows = [s for s in self.systems if s.type == SystemType.LOW_PRESSURE]

        created = []
        for high in highs:
            for low in lows:
                if len(self.systems) >= self.config.max_systems:
                    return tuple(created)
                pair = (high.id, low.id)
                if pair in self.front_pairs:
                    continue
                if abs(high.position - low.position) >= self.config.front_generation_distance:
                    continue

                front_type = SystemType.COLD_FRONT if high.position > low.position else SystemType.WARM_FRONT
                front = WeatherSystem(
                    id=self.next_id,
                    type=front_type,
                    intensity=(high.intensity + low.intensity) / 2.0,
                    position=(high.position + low.position) / 2.0,
                )
                self.next_id += 1
                self.front_pairs.add(pair)
                self.systems = self.systems + (front,)
                created.append(front)

                logger.debug("Generated %s %d between high %d and low %d",
                             front_type.value, front.id, high.id, low.id)

        return tuple(created)

    def step(self, profile: Optional[ClimateProfile] = None) -> Tuple[WeatherSystem, ...]:
        """Run one simulated hour: advance, form fronts, then maybe spawn."""
        self.advance()
        self.generate_fronts()
        self.maybe_spawn(profile)
        return self.systems

    def get_state(self) -> Dict[str, Any]:
        """Export the scheduler state as JSON-ready data."""
        name, keys, pos, has_gauss, cached_gaussian = self.rng.get_state()
        return {
            'seed': self.seed,
            'rng_state': [name, keys.tolist(), int(pos), int(has_gauss), float(cached_gaussian)],
            'next_id': self.next_id,
            'spawn_count': self.spawn_count,
            'front_pairs': sorted([high, low] for high, low in self.front_pairs),
            'systems': [system.to_dict() for system in self.systems],
        }

    def set_state(self, state: Mapping[str, Any]) -> None:
        """Restore a state produced by get_state."""
        name, keys, pos, has_gauss, cached_gaussian = state['rng_state']
        self.rng.set_state((name, np.array(keys, dtype=np.uint32), pos, has_gauss, cached_gaussian))
        self.next_id = int(state['next_id'])
        self.spawn_count = int(state['spawn_count'])
        self.front_pairs = {(int(high), int(low)) for high, low in state['front_pairs']}
        self.systems = tuple(WeatherSystem.from_dict(data) for data in state['systems'])
