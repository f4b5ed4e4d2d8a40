'''fit.py: Contains base type definitions and record header constants of the FIT protocol.'''

from enum import Enum


HEADER_WITH_CRC_SIZE = 14
HEADER_WITHOUT_CRC_SIZE = 12
CRC_SIZE = 2
DATA_TYPE = b'.FIT'

# Record header bits
COMPRESSED_HEADER_MASK = 0x80
COMPRESSED_TIME_MASK = 0x1F
COMPRESSED_LOCAL_MESG_NUM_MASK = 0x60
MESG_DEFINITION_MASK = 0x40
DEV_DATA_MASK = 0x20
LOCAL_MESG_NUM_MASK = 0x0F

# Base type byte bits
ENDIAN_FLAG_MASK = 0x80
BASE_TYPE_NUM_MASK = 0x1F

MESG_DEFINITION_HEADER_SIZE = 6
FIELD_DEFINITION_SIZE = 3

BASE_TYPE = {
    'ENUM': 0x00,
    'SINT8': 0x01,
    'UINT8': 0x02,
    'SINT16': 0x83,
    'UINT16': 0x84,
    'SINT32': 0x85,
    'UINT32': 0x86,
    'STRING': 0x07,
    'FLOAT32': 0x88,
    'FLOAT64': 0x89,
    'UINT8Z': 0x0A,
    'UINT16Z': 0x8B,
    'UINT32Z': 0x8C,
    'BYTE': 0x0D,
    'SINT64': 0x8E,
    'UINT64': 0x8F,
    'UINT64Z': 0x90,
}


class PrimitiveType(Enum):
    '''Primitive (wire level) type of a field, resolved once from its base type byte.'''

    ENUM = 'enum'
    SINT8 = 'sint8'
    UINT8 = 'uint8'
    SINT16 = 'sint16'
    UINT16 = 'uint16'
    SINT32 = 'sint32'
    UINT32 = 'uint32'
    STRING = 'string'
    FLOAT32 = 'float32'
    FLOAT64 = 'float64'
    UINT8Z = 'uint8z'
    UINT16Z = 'uint16z'
    UINT32Z = 'uint32z'
    BYTE = 'byte'
    SINT64 = 'sint64'
    UINT64 = 'uint64'
    UINT64Z = 'uint64z'
    UINT16_ARRAY = 'uint16_array'
    UINT32_ARRAY = 'uint32_array'
    BYTE_ARRAY = 'byte_array'
    UNKNOWN = 'unknown'


BASE_TYPE_DEFINITIONS = {
    0x00: {'size': 1, 'type': PrimitiveType.ENUM, 'invalid': 0xFF},
    0x01: {'size': 1, 'type': PrimitiveType.SINT8, 'invalid': 0x7F},
    0x02: {'size': 1, 'type': PrimitiveType.UINT8, 'invalid': 0xFF},
    0x83: {'size': 2, 'type': PrimitiveType.SINT16, 'invalid': 0x7FFF},
    0x84: {'size': 2, 'type': PrimitiveType.UINT16, 'invalid': 0xFFFF},
    0x85: {'size': 4, 'type': PrimitiveType.SINT32, 'invalid': 0x7FFFFFFF},
    0x86: {'size': 4, 'type': PrimitiveType.UINT32, 'invalid': 0xFFFFFFFF},
    0x07: {'size': 1, 'type': PrimitiveType.STRING, 'invalid': 0x00},
    0x88: {'size': 4, 'type': PrimitiveType.FLOAT32, 'invalid': 0xFFFFFFFF},
    0x89: {'size': 8, 'type': PrimitiveType.FLOAT64, 'invalid': 0xFFFFFFFFFFFFFFFF},
    0x0A: {'size': 1, 'type': PrimitiveType.UINT8Z, 'invalid': 0x00},
    0x8B: {'size': 2, 'type': PrimitiveType.UINT16Z, 'invalid': 0x0000},
    0x8C: {'size': 4, 'type': PrimitiveType.UINT32Z, 'invalid': 0x00000000},
    0x0D: {'size': 1, 'type': PrimitiveType.BYTE, 'invalid': 0xFF},
    0x8E: {'size': 8, 'type': PrimitiveType.SINT64, 'invalid': 0x7FFFFFFFFFFFFFFF},
    0x8F: {'size': 8, 'type': PrimitiveType.UINT64, 'invalid': 0xFFFFFFFFFFFFFFFF},
    0x90: {'size': 8, 'type': PrimitiveType.UINT64Z, 'invalid': 0x0000000000000000},
}

# Base type number (low bits of the base type byte) -> full base type byte
_BASE_TYPE_BY_NUM = {code & BASE_TYPE_NUM_MASK: code for code in BASE_TYPE_DEFINITIONS}


def resolve_base_type(code: int) -> PrimitiveType:
    '''Resolve a base type byte (or bare base type number) to its primitive type.'''
    definition = BASE_TYPE_DEFINITIONS.get(code)
    if definition is None:
        full_code = _BASE_TYPE_BY_NUM.get(code & BASE_TYPE_NUM_MASK)
        if full_code is None:
            return PrimitiveType.UNKNOWN
        definition = BASE_TYPE_DEFINITIONS[full_code]
    return definition['type']


def base_type_size(primitive_type: PrimitiveType) -> int:
    for definition in BASE_TYPE_DEFINITIONS.values():
        if definition['type'] is primitive_type:
            return definition['size']
    return 1
