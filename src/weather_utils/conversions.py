"""Unit conversions between the engine's imperial units and metric.

The engine works in °F, mph, inches and feet because that is what the GM
tool displays by default. These helpers go through MetPy's unit registry so
the conversion factors come from one place.
"""

from metpy.units import units


def fahrenheit_to_celsius(value: float) -> float:
    """Convert a temperature from °F to °C."""
    return float(units.Quantity(value, 'degF').m_as('degC'))


def celsius_to_fahrenheit(value: float) -> float:
    """Convert a temperature from °C to °F."""
    return float(units.Quantity(value, 'degC').m_as('degF'))


def mph_to_kph(value: float) -> float:
    """Convert a speed from miles per hour to kilometres per hour."""
    return float(units.Quantity(value, 'mph').m_as('km/h'))


def inches_to_mm(value: float) -> float:
    """Convert a length (precipitation depth) from inches to millimetres."""
    return float(units.Quantity(value, 'inch').m_as('mm'))


def feet_to_meters(value: float) -> float:
    """Convert an elevation from feet to metres."""
    return float(units.Quantity(value, 'ft').m_as('m'))
