"""
Utility functions and classes for the region weather engine.
"""

from .config import Configuration, ConfigurationError, DEFAULT_CONFIGURATION
from . import conversions

__all__ = ['Configuration', 'ConfigurationError', 'DEFAULT_CONFIGURATION', 'conversions']
