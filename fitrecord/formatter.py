'''formatter.py: Contains the conversion of raw field values into their semantic representation.'''

from enum import Enum

from . import util
from .profile import SEMICIRCLES_TO_DEGREES, TYPE_TABLES


class SemanticCategory(Enum):
    DATE_TIME = 'date_time'
    SEMICIRCLES = 'semicircles'
    SCALED = 'scaled'
    SCALED_ARRAY = 'scaled_array'
    TYPED = 'typed'
    PASSTHROUGH = 'passthrough'


_CATEGORIES = {
    'date_time': SemanticCategory.DATE_TIME,
    'local_date_time': SemanticCategory.DATE_TIME,
    'sint32': SemanticCategory.SEMICIRCLES,
    'uint8': SemanticCategory.SCALED,
    'sint16': SemanticCategory.SCALED,
    'uint32': SemanticCategory.SCALED,
    'uint16': SemanticCategory.SCALED,
    'uint32_array': SemanticCategory.SCALED_ARRAY,
    'uint16_array': SemanticCategory.SCALED_ARRAY,
}


def categorize(type_name, types=TYPE_TABLES) -> SemanticCategory:
    if type_name in _CATEGORIES:
        return _CATEGORIES[type_name]
    if type_name and type_name in types:
        return SemanticCategory.TYPED
    return SemanticCategory.PASSTHROUGH


def format_value(data, type_name=None, scale=None, offset=None, types=TYPE_TABLES):
    '''
    Converts a raw value using the semantic type, scale and offset of its field.

    Args:
        data: The raw value returned by the field reader.
        type_name: Semantic type from the message dictionary.
        scale: Divisor applied to scaled numeric types, if any.
        offset: Added after scaling, defaults to 0.
        types: Type name -> EnumMap or BitmaskMap.
    '''
    category = categorize(type_name, types)

    if category is SemanticCategory.DATE_TIME:
        if not _is_scalar(data):
            return data
        return util.convert_timestamp_to_datetime(data)

    if category is SemanticCategory.SEMICIRCLES:
        if not _is_scalar(data):
            return data
        return data * SEMICIRCLES_TO_DEGREES

    if category is SemanticCategory.SCALED:
        # Single-byte types wider than one byte arrive as bytes
        if isinstance(data, (list, bytes)):
            return [_apply_scale_and_offset(item, scale, offset) for item in data]
        return _apply_scale_and_offset(data, scale, offset)

    if category is SemanticCategory.SCALED_ARRAY:
        items = data if isinstance(data, (list, bytes)) else [data]
        return [_apply_scale_and_offset(item, scale, offset) for item in items]

    if category is SemanticCategory.TYPED and isinstance(data, int):
        return types[type_name].decode(data)

    return data


def _is_scalar(data) -> bool:
    return isinstance(data, (int, float))


def _apply_scale_and_offset(value, scale, offset):
    if not scale:
        return value
    if scale == 1 and not offset:
        return value
    return value / scale + (offset or 0)
