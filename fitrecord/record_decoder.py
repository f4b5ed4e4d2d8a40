'''record_decoder.py: Contains the record decoder, which reads one definition or data record at a time.'''

import logging
from typing import NamedTuple, Optional

from . import fit as FIT
from . import util
from .definitions import DeveloperFieldDescriptor, FieldDefinition, MessageDefinition, resolve_primitive_type
from .exceptions import DeveloperFieldLookupError, FitDecodeError, MissingDefinitionError, TruncatedRecordError
from .field_reader import is_invalid_value, read_field
from .fit import PrimitiveType
from .formatter import format_value
from .options import DEFAULT_OPTIONS, DecodeOptions
from .profile import UNKNOWN_FIELD, FieldAttributes, MessageProfile, resolve_message
from .session import SessionState
from .units import convert_units

_logger = logging.getLogger("fitrecord.record_decoder")

DEFINITION = 'definition'
TIMESTAMP_FIELD = 'timestamp'


class RecordResult(NamedTuple):
    '''
    Outcome of reading one record.

    Attributes:
        message_type: "definition", or the name of the decoded message.
        next_index: Offset of the record that follows.
        message: Field name -> formatted value, for data records only.
        global_message_number: Global message number the record refers to.
    '''
    message_type: str
    next_index: int
    message: Optional[dict] = None
    global_message_number: Optional[int] = None


def read_record(buffer, session: SessionState, start: int,
                options: DecodeOptions = DEFAULT_OPTIONS,
                session_start=None, paused_time: float = 0) -> RecordResult:
    '''
    Reads the record whose header byte is at buffer[start].

    Definition records update session.local_mesg_defs. Data records are
    decoded against the definition of their local message type and may
    update the developer field table and the running timestamps.

    Args:
        buffer: The bytes of the whole FIT file.
        session: State of the file being decoded.
        start: Offset of the record header.
        options: Decoding policy.
        session_start: Datetime of the first record, used for elapsed_time.
        paused_time: Seconds the timer was stopped, subtracted from timer_time.

    Raises:
        FitDecodeError: The record cannot be decoded under the given options.
    '''
    _require(buffer, start, 1)
    header = buffer[start]

    if header & FIT.COMPRESSED_HEADER_MASK == FIT.COMPRESSED_HEADER_MASK:
        record_kind = 'compressed_timestamp'
        local_mesg_num = (header & FIT.COMPRESSED_LOCAL_MESG_NUM_MASK) >> 5
        _advance_compressed_timestamp(session, header & FIT.COMPRESSED_TIME_MASK)
    elif header & FIT.MESG_DEFINITION_MASK == FIT.MESG_DEFINITION_MASK:
        try:
            return _read_definition(buffer, session, start, header, options)
        except FitDecodeError as error:
            error.with_context(start, DEFINITION)
            raise
    else:
        record_kind = 'data'
        local_mesg_num = header & FIT.LOCAL_MESG_NUM_MASK

    try:
        return _read_data(buffer, session, start, local_mesg_num, options,
                          compressed=record_kind == 'compressed_timestamp',
                          session_start=session_start, paused_time=paused_time)
    except FitDecodeError as error:
        error.with_context(start, record_kind)
        raise


def _require(buffer, start: int, count: int):
    if start + count > len(buffer):
        raise TruncatedRecordError(f"Record needs {count} byte(s) at offset {start} "
                                   f"but the buffer holds {len(buffer)}")


def _advance_compressed_timestamp(session: SessionState, time_offset: int):
    session.timestamp += (time_offset - session.last_time_offset) & FIT.COMPRESSED_TIME_MASK
    session.last_time_offset = time_offset


def _read_definition(buffer, session: SessionState, start: int, header: int,
                     options: DecodeOptions) -> RecordResult:
    _require(buffer, start, FIT.MESG_DEFINITION_HEADER_SIZE)

    has_developer_data = header & FIT.DEV_DATA_MASK == FIT.DEV_DATA_MASK
    little_endian = buffer[start + 2] == 0
    global_message_number = util.add_endian(little_endian, buffer[start + 3:start + 5])
    num_fields = buffer[start + 5]
    message = resolve_message(global_message_number)

    index = start + FIT.MESG_DEFINITION_HEADER_SIZE
    _require(buffer, index, num_fields * FIT.FIELD_DEFINITION_SIZE)

    field_definitions = []
    for _ in range(num_fields):
        field_num, size, base_type = buffer[index], buffer[index + 1], buffer[index + 2]
        attributes = message.get_attributes(field_num)
        field_definitions.append(FieldDefinition(
            field_definition_number=field_num,
            size=size,
            base_type=base_type,
            endian_ability=base_type & FIT.ENDIAN_FLAG_MASK == FIT.ENDIAN_FLAG_MASK,
            little_endian=little_endian,
            primitive_type=resolve_primitive_type(base_type, size),
            name=attributes.field,
            type=attributes.type,
            scale=attributes.scale,
            offset=attributes.offset,
        ))
        index += FIT.FIELD_DEFINITION_SIZE

    if has_developer_data:
        _require(buffer, index, 1)
        num_developer_fields = buffer[index]
        index += 1
        _require(buffer, index, num_developer_fields * FIT.FIELD_DEFINITION_SIZE)

        for _ in range(num_developer_fields):
            field_num, size, developer_data_index = buffer[index], buffer[index + 1], buffer[index + 2]
            field_definitions.append(
                _developer_field_definition(session, field_num, size, developer_data_index,
                                            little_endian, options))
            index += FIT.FIELD_DEFINITION_SIZE

    local_mesg_num = header & FIT.LOCAL_MESG_NUM_MASK
    session.local_mesg_defs[local_mesg_num] = MessageDefinition(
        global_message_number=global_message_number,
        little_endian=little_endian,
        field_definitions=tuple(field_definitions),
        name=message.name,
    )

    _logger.debug("Definition of %s (%d) for local message type %d with %d field(s) at offset %d",
                  message.name, global_message_number, local_mesg_num, len(field_definitions), start)

    return RecordResult(DEFINITION, index, global_message_number=global_message_number)


def _developer_field_definition(session: SessionState, field_num: int, size: int,
                                developer_data_index: int, little_endian: bool,
                                options: DecodeOptions) -> FieldDefinition:
    descriptor = session.get_developer_field(developer_data_index, field_num)

    if descriptor is None:
        if not options.force:
            raise DeveloperFieldLookupError(
                f"No field_description for developer field {field_num} "
                f"of developer data index {developer_data_index}")

        # Unnamed placeholder: its bytes are still consumed by data records
        _logger.warning("Skipping undescribed developer field %d of developer data index %d",
                        field_num, developer_data_index)
        return FieldDefinition(
            field_definition_number=field_num,
            size=size,
            base_type=FIT.BASE_TYPE['BYTE'],
            endian_ability=False,
            little_endian=little_endian,
            primitive_type=PrimitiveType.BYTE_ARRAY,
            developer_data_index=developer_data_index,
        )

    base_type = descriptor.fit_base_type_id
    if base_type is None:
        base_type = FIT.BASE_TYPE['BYTE']

    return FieldDefinition(
        field_definition_number=field_num,
        size=size,
        base_type=base_type,
        endian_ability=base_type & FIT.ENDIAN_FLAG_MASK == FIT.ENDIAN_FLAG_MASK,
        little_endian=little_endian,
        primitive_type=resolve_primitive_type(base_type, size),
        name=descriptor.field_name,
        type=FIT.resolve_base_type(base_type).value,
        scale=descriptor.scale or 1,
        offset=descriptor.offset or 0,
        developer_data_index=developer_data_index,
    )


def _read_data(buffer, session: SessionState, start: int, local_mesg_num: int,
               options: DecodeOptions, compressed: bool, session_start, paused_time) -> RecordResult:
    definition = session.local_mesg_defs.get(local_mesg_num)
    if definition is None:
        definition = session.local_mesg_defs.get(0)
        if definition is None:
            raise MissingDefinitionError(f"No definition for local message type {local_mesg_num}")
        _logger.warning("No definition for local message type %d at offset %d, using local message type 0",
                        local_mesg_num, start)

    message = resolve_message(definition.global_message_number)
    fields = {}
    raw_values = {}

    index = start + 1
    for field_definition in definition.field_definitions:
        raw = read_field(buffer, field_definition, index, options)

        if not is_invalid_value(raw, field_definition.primitive_type):
            attributes = _field_attributes(message, field_definition)
            if attributes.field and attributes.field != UNKNOWN_FIELD:
                raw_values[attributes.field] = raw
                fields[attributes.field] = convert_units(
                    format_value(raw, attributes.type, attributes.scale, attributes.offset),
                    attributes.field, options)

        index += field_definition.size

    _anchor_timestamp(session, fields, raw_values, compressed)

    if message.name == 'record':
        _add_elapsed_fields(fields, options, session_start, paused_time)
    elif message.name == 'field_description':
        _register_developer_field(session, fields)
    elif message.name == 'monitoring':
        _resolve_monitoring_timestamp(session, fields, raw_values)

    _logger.debug("Data message %s for local message type %d at offset %d",
                  message.name, local_mesg_num, start)

    return RecordResult(message.name, start + 1 + definition.data_size, fields,
                        definition.global_message_number)


def _field_attributes(message: MessageProfile, field_definition: FieldDefinition) -> FieldAttributes:
    if field_definition.is_developer_field:
        return FieldAttributes(field_definition.name, field_definition.type,
                               field_definition.scale, field_definition.offset)
    return message.get_attributes(field_definition.field_definition_number)


def _anchor_timestamp(session: SessionState, fields: dict, raw_values: dict, compressed: bool):
    raw_timestamp = raw_values.get(TIMESTAMP_FIELD)
    if isinstance(raw_timestamp, int):
        session.timestamp = raw_timestamp
        session.last_time_offset = raw_timestamp & FIT.COMPRESSED_TIME_MASK
    elif compressed:
        fields[TIMESTAMP_FIELD] = util.convert_timestamp_to_datetime(session.timestamp)


def _add_elapsed_fields(fields: dict, options: DecodeOptions, session_start, paused_time):
    if not options.elapsed_record_field or session_start is None:
        return
    if TIMESTAMP_FIELD not in fields:
        return

    fields['elapsed_time'] = (fields[TIMESTAMP_FIELD] - session_start).total_seconds()
    fields['timer_time'] = fields['elapsed_time'] - paused_time


def _register_developer_field(session: SessionState, fields: dict):
    if 'field_definition_number' in fields and 'developer_data_index' in fields:
        session.add_developer_field(DeveloperFieldDescriptor.from_fields(fields))


def _resolve_monitoring_timestamp(session: SessionState, fields: dict, raw_values: dict):
    if TIMESTAMP_FIELD in raw_values:
        session.monitoring_timestamp = raw_values[TIMESTAMP_FIELD]
        fields[TIMESTAMP_FIELD] = util.convert_timestamp_to_datetime(session.monitoring_timestamp)
    elif 'timestamp16' in fields:
        session.monitoring_timestamp += (
            fields['timestamp16'] - (session.monitoring_timestamp & 0xFFFF)) & 0xFFFF
        fields[TIMESTAMP_FIELD] = util.convert_timestamp_to_datetime(session.monitoring_timestamp)
