'''test_util.py: Tests for byte assembly and timestamp helpers'''

from datetime import datetime, timezone

from fitrecord import util


class TestAddEndian:
    def test_little_endian(self):
        assert util.add_endian(True, [0x01, 0x02]) == 0x0201

    def test_big_endian(self):
        assert util.add_endian(False, [0x01, 0x02]) == 0x0102

    def test_does_not_modify_input(self):
        data = [0x01, 0x02, 0x03]
        util.add_endian(False, data)
        assert data == [0x01, 0x02, 0x03]

    def test_truncates_to_32_bits(self):
        assert util.add_endian(True, [0xFF, 0xFF, 0xFF, 0xFF, 0x01]) == 0xFFFFFFFF

    def test_accepts_bytes(self):
        assert util.add_endian(True, b'\x2C\x01') == 300

    def test_empty(self):
        assert util.add_endian(True, []) == 0


class TestTimestamps:
    def test_epoch(self):
        assert util.convert_timestamp_to_datetime(0) == datetime(1989, 12, 31, tzinfo=timezone.utc)

    def test_epoch_matches_unix_offset(self):
        assert util.FIT_EPOCH.timestamp() == util.FIT_EPOCH_S
        assert util.FIT_EPOCH_MS == 631065600000

    def test_known_timestamp(self):
        assert util.convert_timestamp_to_datetime(1000000000).timestamp() == 1631065600
