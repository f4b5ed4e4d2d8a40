'''test_record_decoder.py: Tests for reading individual definition and data records'''

import logging
import struct

import pytest
from fit_builder import compressed_record, data_record, definition_record, field_description
from fitrecord import util
from fitrecord.exceptions import (DeveloperFieldLookupError, MissingDefinitionError, TruncatedRecordError,
                                  UnsupportedBaseTypeError)
from fitrecord.options import DecodeOptions
from fitrecord.record_decoder import read_record
from fitrecord.session import SessionState

RECORD = 20
STRICT = DecodeOptions(force=False)


def decode_all(buffer, session=None, options=DecodeOptions()):
    '''Reads every record in buffer, the way a file driver would.'''
    session = session if session is not None else SessionState()
    results = []
    position = 0
    while position < len(buffer):
        result = read_record(buffer, session, position, options)
        results.append(result)
        position = result.next_index
    return results, session


class TestDefinitionRecords:
    def test_next_index_and_slot(self):
        record = definition_record(3, RECORD, [(253, 4, 0x86), (3, 1, 0x02)])
        session = SessionState()

        result = read_record(record, session, 0)

        assert result.message_type == 'definition'
        assert result.message is None
        assert result.next_index == 6 + 3 * 2 == len(record)
        definition = session.local_mesg_defs[3]
        assert definition.global_message_number == RECORD
        assert definition.name == 'record'
        assert definition.little_endian
        assert [f.field_definition_number for f in definition.field_definitions] == [253, 3]
        assert [f.name for f in definition.field_definitions] == ['timestamp', 'heart_rate']

    def test_next_index_is_relative_to_start(self):
        record = definition_record(0, RECORD, [(7, 2, 0x84)])
        result = read_record(b'\x00\x00' + record, SessionState(), 2)
        assert result.next_index == 2 + 9

    def test_big_endian_definition(self):
        buffer = (definition_record(0, RECORD, [(7, 2, 0x84)], big_endian=True)
                  + data_record(0, b'\x01\x2C'))
        results, session = decode_all(buffer)

        assert session.local_mesg_defs[0].global_message_number == RECORD
        assert not session.local_mesg_defs[0].little_endian
        assert results[1].message == {'power': 300}

    def test_redefinition_overwrites_slot(self):
        buffer = (definition_record(0, RECORD, [(7, 2, 0x84)])
                  + definition_record(0, 21, [(3, 4, 0x86)])
                  + data_record(0, struct.pack('<I', 9)))
        results, _ = decode_all(buffer)
        assert results[2].message_type == 'event'
        assert results[2].message == {'data': 9}

    def test_truncated_definition(self):
        record = definition_record(0, RECORD, [(7, 2, 0x84)])
        with pytest.raises(TruncatedRecordError):
            read_record(record[:7], SessionState(), 0)


class TestDataRecords:
    def test_definition_then_data(self):
        definition = definition_record(0, RECORD, [(7, 2, 0x84)])
        buffer = definition + data_record(0, b'\x2C\x01')
        results, _ = decode_all(buffer)

        assert results[1].message_type == 'record'
        assert results[1].message == {'power': 300}
        assert results[1].next_index == len(definition) + 3
        assert results[1].global_message_number == RECORD

    def test_scaled_field(self):
        buffer = definition_record(0, RECORD, [(39, 2, 0x84)]) + data_record(0, b'\x2C\x01')
        results, _ = decode_all(buffer)
        assert results[1].message == {'vertical_oscillation': 30}

    def test_invalid_field_is_absent(self):
        buffer = (definition_record(0, RECORD, [(3, 1, 0x02), (7, 2, 0x84)])
                  + data_record(0, b'\xFF' + struct.pack('<H', 250)))
        results, _ = decode_all(buffer)
        assert results[1].message == {'power': 250}
        assert 'heart_rate' not in results[1].message

    def test_unknown_fields_still_consume_bytes(self):
        buffer = (definition_record(0, RECORD, [(200, 2, 0x84), (7, 2, 0x84)])
                  + data_record(0, struct.pack('<HH', 5, 250)))
        results, _ = decode_all(buffer)
        assert results[1].message == {'power': 250}
        assert results[1].next_index == len(buffer)

    def test_declared_size_is_authoritative(self):
        buffer = (definition_record(0, 0, [(8, 8, 0x07), (2, 2, 0x84)])
                  + data_record(0, b'Edge\x00\x00\x00\x00' + struct.pack('<H', 3843)))
        results, _ = decode_all(buffer)
        assert results[1].message == {'product_name': 'Edge', 'product': 3843}

    def test_empty_string_is_absent(self):
        buffer = definition_record(0, 0, [(8, 4, 0x07)]) + data_record(0, b'\x00' * 4)
        results, _ = decode_all(buffer)
        assert results[1].message == {}

    def test_enumerations(self):
        buffer = (definition_record(0, 0, [(0, 1, 0x00), (1, 2, 0x84)])
                  + data_record(0, b'\x04' + struct.pack('<H', 1)))
        results, _ = decode_all(buffer)
        assert results[1].message_type == 'file_id'
        assert results[1].message == {'type': 'activity', 'manufacturer': 'garmin'}

    def test_position_in_degrees(self):
        buffer = definition_record(0, RECORD, [(0, 4, 0x85)]) + data_record(0, struct.pack('<i', 2 ** 30))
        results, _ = decode_all(buffer)
        assert results[1].message == {'position_lat': 90.0}

    def test_packed_array(self):
        buffer = definition_record(0, 78, [(0, 4, 0x84)]) + data_record(0, struct.pack('<2H', 1000, 500))
        results, _ = decode_all(buffer)
        assert results[1].message_type == 'hrv'
        assert results[1].message == {'time': [1.0, 0.5]}

    def test_multi_byte_uint8_field_is_scaled_elementwise(self):
        buffer = definition_record(0, RECORD, [(53, 2, 0x02)]) + data_record(0, bytes([64, 32]))
        results, _ = decode_all(buffer)
        assert results[1].message == {'fractional_cadence': [0.5, 0.25]}

    def test_unit_options(self):
        buffer = definition_record(0, RECORD, [(6, 2, 0x84)]) + data_record(0, struct.pack('<H', 10000))
        results, _ = decode_all(buffer, options=DecodeOptions(speed_unit='km/h'))
        assert results[1].message['speed'] == pytest.approx(36.0)

    def test_unknown_message(self):
        buffer = definition_record(0, 0xFF00, [(1, 1, 0x02)]) + data_record(0, b'\x01')
        results, _ = decode_all(buffer)
        assert results[1].message_type == str(0xFF00)
        assert results[1].message == {}
        assert results[1].global_message_number == 0xFF00

    def test_falls_back_to_slot_zero(self, caplog):
        buffer = definition_record(0, RECORD, [(7, 2, 0x84)]) + data_record(5, struct.pack('<H', 42))
        with caplog.at_level(logging.WARNING, logger="fitrecord.record_decoder"):
            results, _ = decode_all(buffer)
        assert results[1].message == {'power': 42}
        assert "local message type 5" in caplog.text

    def test_missing_definition(self):
        with pytest.raises(MissingDefinitionError) as excinfo:
            read_record(data_record(2, b'\x01'), SessionState(), 0)
        assert excinfo.value.offset == 0
        assert excinfo.value.record_kind == 'data'
        assert 'offset 0' in str(excinfo.value)

    def test_unsupported_type_strict(self):
        definition = definition_record(0, RECORD, [(0, 3, 0x85)])
        buffer = definition + data_record(0, b'\x01\x02\x03')
        with pytest.raises(UnsupportedBaseTypeError) as excinfo:
            decode_all(buffer, options=STRICT)
        assert excinfo.value.offset == len(definition)
        assert excinfo.value.record_kind == 'data'

    def test_unsupported_type_tolerant(self):
        buffer = definition_record(0, RECORD, [(0, 3, 0x85)]) + data_record(0, b'\x01\x02\x03')
        results, _ = decode_all(buffer)
        assert results[1].message['position_lat'] == pytest.approx(0x030201 * 180.0 / 2 ** 31)

    def test_truncated_data(self):
        buffer = definition_record(0, RECORD, [(7, 2, 0x84)]) + data_record(0, b'\x01')
        with pytest.raises(TruncatedRecordError):
            decode_all(buffer)


class TestCompressedTimestamps:
    def test_offset_delta_wraps_modulo_32(self):
        session = SessionState()
        session.timestamp = 100
        session.last_time_offset = 5
        buffer = definition_record(0, RECORD, [(7, 2, 0x84)]) + compressed_record(0, 2, struct.pack('<H', 10))

        results, _ = decode_all(buffer, session)

        assert session.timestamp == 100 + 29
        assert session.last_time_offset == 2
        assert results[1].message == {'power': 10, 'timestamp': util.convert_timestamp_to_datetime(129)}

    def test_anchored_by_full_timestamp(self):
        buffer = (definition_record(0, RECORD, [(253, 4, 0x86), (7, 2, 0x84)])
                  + data_record(0, struct.pack('<IH', 1000, 10))
                  + definition_record(1, RECORD, [(7, 2, 0x84)])
                  + compressed_record(1, 10, struct.pack('<H', 11))
                  + compressed_record(1, 1, struct.pack('<H', 12)))
        results, session = decode_all(buffer)

        assert results[3].message['timestamp'] == util.convert_timestamp_to_datetime(1002)
        assert results[3].message['power'] == 11
        assert results[4].message['timestamp'] == util.convert_timestamp_to_datetime(1002 + 23)
        assert session.last_time_offset == 1

    def test_local_message_type_from_bits_five_and_six(self):
        buffer = (definition_record(0, RECORD, [(7, 2, 0x84)])
                  + definition_record(3, RECORD, [(3, 1, 0x02)])
                  + compressed_record(3, 4, b'\x8C'))
        results, _ = decode_all(buffer)
        assert results[2].message['heart_rate'] == 140

    def test_fresh_session_starts_at_epoch(self):
        first = SessionState()
        first.timestamp = 5000
        first.last_time_offset = 8
        buffer = definition_record(0, RECORD, [(7, 2, 0x84)]) + compressed_record(0, 3, struct.pack('<H', 1))
        decode_all(buffer, first)

        results, second = decode_all(buffer)

        assert second.timestamp == 3
        assert results[1].message['timestamp'] == util.convert_timestamp_to_datetime(3)


class TestDeveloperFields:
    def test_described_developer_field(self):
        definition = definition_record(1, RECORD, [(7, 2, 0x84)], developer_fields=[(0, 2, 0)])
        buffer = (field_description(0, 0, 0, 0x84, 'doughnuts_earned')
                  + definition
                  + data_record(1, struct.pack('<HH', 200, 7)))
        results, session = decode_all(buffer)

        assert results[1].message_type == 'field_description'
        assert results[1].message['developer_data_index'] == 0
        assert session.developer_fields[0][0].field_name == 'doughnuts_earned'
        assert session.developer_fields[0][0].fit_base_type_id == 0x84

        assert results[2].next_index - (results[1].next_index) == 6 + 3 + 1 + 3 == len(definition)
        assert results[3].message == {'power': 200, 'doughnuts_earned': 7}

    def test_developer_field_scale(self):
        buffer = (field_description(0, 1, 5, 0x84, 'cadence_x', scale=10)
                  + definition_record(1, RECORD, [], developer_fields=[(5, 2, 1)])
                  + data_record(1, struct.pack('<H', 75)))
        results, _ = decode_all(buffer)
        assert results[3].message == {'cadence_x': 7.5}

    def test_developer_uint8_array_scale(self):
        buffer = (field_description(0, 0, 0, 0x02, 'cadence_arr', scale=10)
                  + definition_record(1, RECORD, [], developer_fields=[(0, 3, 0)])
                  + data_record(1, bytes([10, 20, 30])))
        results, _ = decode_all(buffer)
        assert results[3].message == {'cadence_arr': [1.0, 2.0, 3.0]}

    def test_developer_string_field(self):
        buffer = (field_description(0, 0, 1, 0x07, 'note')
                  + definition_record(1, RECORD, [], developer_fields=[(1, 4, 0)])
                  + data_record(1, b'hi\x00\x00'))
        results, _ = decode_all(buffer)
        assert results[3].message == {'note': 'hi'}

    def test_description_overwrites_previous(self):
        buffer = (field_description(0, 0, 0, 0x84, 'first')
                  + field_description(0, 0, 0, 0x84, 'second')
                  + definition_record(1, RECORD, [], developer_fields=[(0, 2, 0)])
                  + data_record(1, struct.pack('<H', 1)))
        results, _ = decode_all(buffer)
        assert results[-1].message == {'second': 1}

    def test_undescribed_field_strict(self):
        buffer = definition_record(1, RECORD, [(7, 2, 0x84)], developer_fields=[(0, 2, 0)])
        with pytest.raises(DeveloperFieldLookupError) as excinfo:
            read_record(buffer, SessionState(), 0, STRICT)
        assert excinfo.value.offset == 0
        assert excinfo.value.record_kind == 'definition'

    def test_description_after_definition_is_too_late(self):
        buffer = (definition_record(1, RECORD, [(7, 2, 0x84)], developer_fields=[(0, 2, 0)])
                  + field_description(0, 0, 0, 0x84, 'doughnuts_earned'))
        with pytest.raises(DeveloperFieldLookupError):
            decode_all(buffer, options=STRICT)

    def test_undescribed_field_tolerant(self, caplog):
        definition = definition_record(1, RECORD, [(7, 2, 0x84)], developer_fields=[(0, 2, 0)])
        buffer = definition + data_record(1, struct.pack('<HH', 200, 7)) + data_record(1, struct.pack('<HH', 201, 8))

        with caplog.at_level(logging.WARNING, logger="fitrecord.record_decoder"):
            results, _ = decode_all(buffer)

        assert results[0].next_index == len(definition)
        assert results[1].message == {'power': 200}
        assert results[2].message == {'power': 201}
        assert "Skipping undescribed developer field" in caplog.text


class TestMessageHooks:
    def test_record_elapsed_fields(self):
        buffer = definition_record(0, RECORD, [(253, 4, 0x86)]) + data_record(0, struct.pack('<I', 1100))
        options = DecodeOptions(elapsed_record_field=True)
        session = SessionState()
        read_record(buffer, session, 0, options)

        result = read_record(buffer, session, 9, options,
                             session_start=util.convert_timestamp_to_datetime(1000), paused_time=30)

        assert result.message['elapsed_time'] == 100
        assert result.message['timer_time'] == 70

    def test_record_elapsed_fields_disabled(self):
        buffer = definition_record(0, RECORD, [(253, 4, 0x86)]) + data_record(0, struct.pack('<I', 1100))
        session = SessionState()
        read_record(buffer, session, 0)

        result = read_record(buffer, session, 9,
                             session_start=util.convert_timestamp_to_datetime(1000), paused_time=30)

        assert 'elapsed_time' not in result.message
        assert 'timer_time' not in result.message

    def test_monitoring_timestamps(self):
        buffer = (definition_record(0, 55, [(253, 4, 0x86), (1, 2, 0x84)])
                  + data_record(0, struct.pack('<IH', 0x12345, 5))
                  + definition_record(1, 55, [(26, 2, 0x84)])
                  + data_record(1, struct.pack('<H', 0x2350)))
        results, session = decode_all(buffer)

        assert results[1].message['timestamp'] == util.convert_timestamp_to_datetime(0x12345)
        assert results[3].message['timestamp'] == util.convert_timestamp_to_datetime(0x12345 + 11)
        assert session.monitoring_timestamp == 0x12345 + 11

    def test_monitoring_timestamp16_rolls_over(self):
        session = SessionState()
        session.monitoring_timestamp = 0x1FFF0
        buffer = definition_record(1, 55, [(26, 2, 0x84)]) + data_record(1, struct.pack('<H', 0x0002))
        results, _ = decode_all(buffer, session)

        assert session.monitoring_timestamp == 0x20002
        assert results[1].message['timestamp'] == util.convert_timestamp_to_datetime(0x20002)
        assert results[1].message['timestamp16'] == 2
