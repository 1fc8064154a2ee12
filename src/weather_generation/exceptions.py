"""Error types raised by the weather engine."""

from typing import Iterable, List

# Defined in weather_utils, which must not import this package.
from weather_utils.config import ConfigurationError

__all__ = [
    'WeatherEngineError',
    'ProfileValidationError',
    'InvalidArgumentError',
    'ConfigurationError',
    'SimulationInvariantError',
]


class WeatherEngineError(Exception):
    """Base class for every error raised by the weather engine."""


class ProfileValidationError(WeatherEngineError, ValueError):
    """Raised when a climate profile is missing fields or holds bad values.

    Attributes:
        problems: One human-readable message per rejected field
    """

    def __init__(self, problems: Iterable[str]):
        self.problems: List[str] = list(problems)
        super().__init__("Invalid climate profile: " + "; ".join(self.problems))


class InvalidArgumentError(WeatherEngineError, ValueError):
    """Raised when an engine operation is called with a bad argument."""


class SimulationInvariantError(WeatherEngineError, RuntimeError):
    """Raised when a simulation produces a non-finite value.

    The simulation that raised it is considered corrupted and refuses to
    advance any further.
    """
