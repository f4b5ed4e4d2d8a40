'''units.py: Contains the conversion of speed, length and temperature fields into the selected units.'''

from enum import Enum
from typing import NamedTuple

from .options import DEFAULT_OPTIONS, DecodeOptions


class UnitCategory(Enum):
    SPEED = 'speed'
    LENGTH = 'length'
    TEMPERATURE = 'temperature'


class Conversion(NamedTuple):
    multiplier: float
    offset: float = 0


SPEED_FIELDS = frozenset([
    'speed', 'enhanced_speed', 'vertical_speed', 'avg_speed', 'max_speed',
    'speed_1s', 'ball_speed', 'enhanced_avg_speed', 'enhanced_max_speed',
    'avg_pos_vertical_speed', 'max_pos_vertical_speed',
    'avg_neg_vertical_speed', 'max_neg_vertical_speed',
])

LENGTH_FIELDS = frozenset([
    'distance', 'total_distance', 'enhanced_avg_altitude', 'enhanced_min_altitude',
    'enhanced_max_altitude', 'enhanced_altitude', 'height', 'odometer',
    'avg_stroke_distance', 'min_altitude', 'avg_altitude', 'max_altitude',
    'total_ascent', 'total_descent', 'altitude', 'cycle_length',
    'auto_wheelsize', 'custom_wheelsize', 'gps_accuracy',
])

TEMPERATURE_FIELDS = frozenset(['temperature', 'avg_temperature', 'max_temperature'])

CONVERSIONS = {
    UnitCategory.SPEED: {
        'm/s': Conversion(1),
        'km/h': Conversion(3.6),
        'mph': Conversion(3.6 / 1.609344),
    },
    UnitCategory.LENGTH: {
        'm': Conversion(1),
        'cm': Conversion(100),
        'km': Conversion(1 / 1000),
        'mi': Conversion(1 / 1609.344),
    },
    UnitCategory.TEMPERATURE: {
        'celsius': Conversion(1),
        'kelvin': Conversion(1, 273.15),
        'fahrenheit': Conversion(9 / 5, 32),
    },
}


def field_category(field_name: str):
    '''Returns the UnitCategory of a field name, or None for fields that are never converted.'''
    if field_name in SPEED_FIELDS:
        return UnitCategory.SPEED
    if field_name in LENGTH_FIELDS:
        return UnitCategory.LENGTH
    if field_name in TEMPERATURE_FIELDS:
        return UnitCategory.TEMPERATURE
    return None


def selected_unit(category: UnitCategory, options: DecodeOptions) -> str:
    if category is UnitCategory.SPEED:
        return options.speed_unit
    if category is UnitCategory.LENGTH:
        return options.length_unit
    return options.temperature_unit


def convert_units(value, field_name: str, options: DecodeOptions = DEFAULT_OPTIONS):
    '''Rescales value into the unit chosen for its field's category; other values pass through.'''
    category = field_category(field_name)
    if category is None:
        return value

    conversion = CONVERSIONS[category].get(selected_unit(category, options))
    if conversion is None:
        return value

    if isinstance(value, list):
        return [_convert(item, conversion) for item in value]
    return _convert(value, conversion)


def _convert(value, conversion: Conversion):
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return value
    if conversion.multiplier == 1 and conversion.offset == 0:
        return value
    return value * conversion.multiplier + conversion.offset
