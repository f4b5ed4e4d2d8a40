'''field_reader.py: Contains the primitive field reader and the invalid value classifier.'''

import logging
import math
import struct

from . import util
from .definitions import FieldDefinition
from .exceptions import FitDecodeError, TruncatedRecordError, UnsupportedBaseTypeError
from .fit import BASE_TYPE_DEFINITIONS, PrimitiveType
from .options import DEFAULT_OPTIONS, DecodeOptions

_logger = logging.getLogger("fitrecord.field_reader")

_NUMERIC_FORMATS = {
    PrimitiveType.SINT16: 'h',
    PrimitiveType.UINT16: 'H',
    PrimitiveType.UINT16Z: 'H',
    PrimitiveType.SINT32: 'i',
    PrimitiveType.UINT32: 'I',
    PrimitiveType.UINT32Z: 'I',
    PrimitiveType.FLOAT32: 'f',
    PrimitiveType.FLOAT64: 'd',
    PrimitiveType.SINT64: 'q',
    PrimitiveType.UINT64: 'Q',
    PrimitiveType.UINT64Z: 'Q',
}

_ARRAY_FORMATS = {
    PrimitiveType.UINT16_ARRAY: 'H',
    PrimitiveType.UINT32_ARRAY: 'I',
}

_FLOAT_TYPES = (PrimitiveType.FLOAT32, PrimitiveType.FLOAT64)

INVALID_VALUES = {definition['type']: definition['invalid'] for definition in BASE_TYPE_DEFINITIONS.values()}
INVALID_VALUES[PrimitiveType.UINT16_ARRAY] = INVALID_VALUES[PrimitiveType.UINT16]
INVALID_VALUES[PrimitiveType.UINT32_ARRAY] = INVALID_VALUES[PrimitiveType.UINT32]
INVALID_VALUES[PrimitiveType.BYTE_ARRAY] = INVALID_VALUES[PrimitiveType.BYTE]


def read_field(buffer, field_definition: FieldDefinition, start: int,
               options: DecodeOptions = DEFAULT_OPTIONS):
    '''
    Reads the raw value of one field from buffer at start.

    Returns an int or float for numeric fields, a list for packed arrays,
    a str for strings and bytes for byte arrays and other multi-byte fields
    without endianness. Raises UnsupportedBaseTypeError for multi-byte types
    it cannot unpack unless options.force is set, in which case the bytes are
    assembled into an unsigned integer instead.
    '''
    end = start + field_definition.size
    if end > len(buffer):
        raise TruncatedRecordError(
            f"Field {field_definition.field_definition_number} needs bytes {start}-{end} "
            f"but the buffer holds {len(buffer)}")

    data = bytes(buffer[start:end])

    if field_definition.endian_ability:
        value = _unpack_numeric(data, field_definition)
        if value is not None:
            return value

        if not options.force:
            raise UnsupportedBaseTypeError(
                f"Cannot decode field {field_definition.field_definition_number} of type "
                f"{field_definition.primitive_type.value} with size {field_definition.size}")

        _logger.warning("Assembling field %d of type %s from raw bytes",
                        field_definition.field_definition_number, field_definition.primitive_type.value)
        return util.add_endian(field_definition.little_endian, data)

    if field_definition.primitive_type is PrimitiveType.STRING:
        return _read_string(data, field_definition, options)

    if field_definition.size == 1 and field_definition.primitive_type is not PrimitiveType.BYTE_ARRAY:
        if field_definition.primitive_type is PrimitiveType.SINT8:
            return struct.unpack('b', data)[0]
        return data[0]

    return data


def _read_string(data: bytes, field_definition: FieldDefinition, options: DecodeOptions) -> str:
    text = bytes(byte for byte in data if byte != 0)
    try:
        return text.decode('utf-8')
    except UnicodeDecodeError as error:
        if not options.force:
            raise FitDecodeError(
                f"Field {field_definition.field_definition_number} is not valid UTF-8") from error
        _logger.warning("Replacing malformed UTF-8 in field %d", field_definition.field_definition_number)
        return text.decode('utf-8', errors='replace')


def _unpack_numeric(data: bytes, field_definition: FieldDefinition):
    endian = '<' if field_definition.little_endian else '>'
    primitive_type = field_definition.primitive_type

    if primitive_type in _ARRAY_FORMATS:
        element_format = _ARRAY_FORMATS[primitive_type]
        count = len(data) // struct.calcsize(element_format)
        return list(struct.unpack(f"{endian}{count}{element_format}", data))

    value_format = _NUMERIC_FORMATS.get(primitive_type)
    if value_format is None or struct.calcsize(value_format) != len(data):
        return None

    return struct.unpack(endian + value_format, data)[0]


def is_invalid_value(value, primitive_type: PrimitiveType) -> bool:
    '''
    Returns True when value is the "field not present" sentinel of primitive_type.

    Arrays and byte sequences are invalid when every element is the sentinel.
    Floats are also invalid when NaN, which is what all 0xFF bytes decode to.
    '''
    if primitive_type not in INVALID_VALUES:
        return False

    invalid = INVALID_VALUES[primitive_type]

    if isinstance(value, (list, bytes)):
        return len(value) > 0 and all(element == invalid for element in value)

    if primitive_type is PrimitiveType.STRING:
        return value == invalid or value == ''

    if primitive_type in _FLOAT_TYPES and isinstance(value, float) and math.isnan(value):
        return True

    return value == invalid
