'''definitions.py: Contains the immutable definitions produced by definition records.'''

from dataclasses import dataclass
from typing import Optional, Tuple

from . import fit as FIT
from .fit import PrimitiveType


_ARRAY_TYPES = {
    PrimitiveType.UINT16: PrimitiveType.UINT16_ARRAY,
    PrimitiveType.UINT32: PrimitiveType.UINT32_ARRAY,
}


def resolve_primitive_type(base_type: int, size: int) -> PrimitiveType:
    '''Resolves the wire type of a field from its base type byte and declared size.'''
    primitive_type = FIT.resolve_base_type(base_type)

    if primitive_type in _ARRAY_TYPES:
        element_size = FIT.base_type_size(primitive_type)
        if size > element_size and size % element_size == 0:
            return _ARRAY_TYPES[primitive_type]
    elif primitive_type is PrimitiveType.BYTE and size > 1:
        return PrimitiveType.BYTE_ARRAY

    return primitive_type


@dataclass(frozen=True)
class FieldDefinition:
    '''
    One field declared by a definition record.

    The semantic attributes (name, type, scale, offset) come from the message
    dictionary for core fields and from a field_description record for
    developer fields.
    '''

    field_definition_number: int
    size: int
    base_type: int
    endian_ability: bool
    little_endian: bool
    primitive_type: PrimitiveType
    name: Optional[str] = None
    type: Optional[str] = None
    scale: Optional[float] = None
    offset: Optional[float] = None
    developer_data_index: Optional[int] = None

    @property
    def is_developer_field(self) -> bool:
        return self.developer_data_index is not None


@dataclass(frozen=True)
class MessageDefinition:
    '''The decoded contents of one definition record.'''

    global_message_number: int
    little_endian: bool
    field_definitions: Tuple[FieldDefinition, ...]
    name: str = ''

    @property
    def data_size(self) -> int:
        return sum(field_definition.size for field_definition in self.field_definitions)


@dataclass(frozen=True)
class DeveloperFieldDescriptor:
    '''Interpretation of a developer field, as declared by a field_description message.'''

    developer_data_index: int
    field_definition_number: int
    fit_base_type_id: Optional[int]
    field_name: Optional[str] = None
    scale: Optional[float] = None
    offset: Optional[float] = None
    units: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: dict) -> 'DeveloperFieldDescriptor':
        return cls(
            developer_data_index=fields['developer_data_index'],
            field_definition_number=fields['field_definition_number'],
            fit_base_type_id=fields.get('fit_base_type_id'),
            field_name=fields.get('field_name'),
            scale=fields.get('scale'),
            offset=fields.get('offset'),
            units=fields.get('units'),
        )
