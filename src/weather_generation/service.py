"""Weather service selection.

A region uses one of two weather generators: the simple dice-table
generator, which lives outside this package, or the meteorological engine
in this package. The choice is stored as a ``WeatherModel`` value and every
operation dispatches on it explicitly.

The dice-table generator is supplied by the caller as a factory taking
``(profile, seed)`` and returning an object with ``generate(hours)`` and
``current()`` methods.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, List, Optional, Union

from weather_utils.config import Configuration, ConfigurationError
from .climate_profile import ClimateProfile
from .simulation import ProfileLike, create_simulation

DiceTableFactory = Callable[[ClimateProfile, int], Any]


class WeatherModel(Enum):
    DICE_TABLE = 'diceTable'
    METEOROLOGICAL = 'meteorological'

    @classmethod
    def parse(cls, value: Union['WeatherModel', str]) -> 'WeatherModel':
        """Accept a WeatherModel or its stored name.

        Raises:
            ConfigurationError: For an unknown model name
        """
        if isinstance(value, cls):
            return value
        for model in cls:
            if value in (model.value, model.name, model.name.lower()):
                return model
        raise ConfigurationError(f"Unknown weather model {value!r}")


@dataclass
class WeatherService:
    """One region's weather generator and which kind it is."""
    model: WeatherModel
    backend: Any

    @property
    def is_meteorological(self) -> bool:
        return self.model is WeatherModel.METEOROLOGICAL

    def advance(self, hours: int) -> List[Any]:
        """Generate the next ``hours`` hours of weather."""
        if self.model is WeatherModel.METEOROLOGICAL:
            return self.backend.advance(hours)
        elif self.model is WeatherModel.DICE_TABLE:
            return self.backend.generate(hours)
        raise ConfigurationError(f"Unhandled weather model {self.model!r}")

    def current(self) -> Any:
        """Weather for the current hour."""
        if self.model is WeatherModel.METEOROLOGICAL:
            return self.backend.current
        elif self.model is WeatherModel.DICE_TABLE:
            return self.backend.current()
        raise ConfigurationError(f"Unhandled weather model {self.model!r}")


def create_weather_service(
        model: Union[WeatherModel, str],
        profile: ProfileLike,
        seed: int,
        *,
        dice_table_factory: Optional[DiceTableFactory] = None,
        start: Optional[Union[date, datetime]] = None,
        config: Optional[Configuration] = None
) -> WeatherService:
    """Create the weather service for a region.

    Args:
        model: Which generator to use
        profile: Region climate profile (or mapping for the engine)
        seed: Random seed
        dice_table_factory: Builds the dice-table generator; required for
            WeatherModel.DICE_TABLE
        start: Start moment for the meteorological engine
        config: Engine tuning parameters

    Returns:
        WeatherService tagged with its model

    Raises:
        ConfigurationError: For an unknown model or a missing dice-table factory
        ProfileValidationError: If the engine rejects the profile
    """
    model = WeatherModel.parse(model)

    if model is WeatherModel.METEOROLOGICAL:
        backend: Any = create_simulation(profile, seed, start=start, config=config)
    elif model is WeatherModel.DICE_TABLE:
        if dice_table_factory is None:
            raise ConfigurationError("The dice-table weather model needs a dice_table_factory")
        backend = dice_table_factory(profile, seed)
    else:
        raise ConfigurationError(f"Unhandled weather model {model!r}")

    return WeatherService(model=model, backend=backend)
