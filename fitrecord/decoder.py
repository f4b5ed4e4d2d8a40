'''decoder.py: Contains the decoder class which is used to decode FIT files.'''

import logging
import struct
from typing import NamedTuple, Optional

from . import fit as FIT
from .crc_calculator import CrcCalculator
from .exceptions import FitError, FitHeaderError, FitIntegrityError
from .options import DecodeOptions
from .record_decoder import read_record
from .session import SessionState
from .stream import Stream

_logger = logging.getLogger("fitrecord.decoder")


class FileHeader(NamedTuple):
    header_size: int
    protocol_version: int
    profile_version: int
    data_size: int
    data_type: bytes
    header_crc: Optional[int]


def read_file_header(stream: Stream) -> FileHeader:
    '''Parses the 12 or 14 byte FIT file header at the stream position, advancing past it.'''
    start = stream.position
    if stream.length - start < FIT.HEADER_WITHOUT_CRC_SIZE:
        raise FitHeaderError(f"FIT header needs {FIT.HEADER_WITHOUT_CRC_SIZE} bytes at offset {start}")

    header_size = stream.peek_byte()
    if header_size not in (FIT.HEADER_WITH_CRC_SIZE, FIT.HEADER_WITHOUT_CRC_SIZE):
        raise FitHeaderError(f"Invalid FIT header size {header_size} at offset {start}")
    if stream.length - start < header_size:
        raise FitHeaderError(f"FIT header at offset {start} is truncated")

    stream.read_byte()
    protocol_version = stream.read_byte()
    profile_version = stream.read_uint16()
    data_size = stream.read_uint32()
    data_type = stream.read_bytes(4)
    if data_type != FIT.DATA_TYPE:
        raise FitHeaderError(f"Missing '.FIT' signature at offset {start + 8}")

    header_crc = None
    if header_size == FIT.HEADER_WITH_CRC_SIZE:
        header_crc = stream.read_uint16()

    return FileHeader(header_size, protocol_version, profile_version, data_size, data_type, header_crc)


def verify_file_crc(buffer, start: int, header: FileHeader):
    '''Raises FitIntegrityError unless the header CRC and the trailing file CRC match.'''
    if header.header_crc:
        header_crc = CrcCalculator.calculate_crc(buffer, start, start + FIT.HEADER_WITHOUT_CRC_SIZE)
        if header_crc != header.header_crc:
            raise FitIntegrityError(
                f"Header CRC 0x{header.header_crc:04X} does not match calculated 0x{header_crc:04X}")

    end = start + header.header_size + header.data_size
    if end + FIT.CRC_SIZE > len(buffer):
        raise FitIntegrityError(f"File at offset {start} is shorter than its declared data size")

    file_crc = struct.unpack('<H', bytes(buffer[end:end + FIT.CRC_SIZE]))[0]
    calculated_crc = CrcCalculator.calculate_crc(buffer, start, end)
    if file_crc != calculated_crc:
        raise FitIntegrityError(f"File CRC 0x{file_crc:04X} does not match calculated 0x{calculated_crc:04X}")


class _ElapsedTime:
    '''Tracks the session start and the time the timer was stopped, for record elapsed fields.'''

    def __init__(self):
        self.session_start = None
        self.paused_time = 0
        self._last_stop = None

    def update(self, message_type: str, message: dict):
        timestamp = message.get('timestamp')
        if timestamp is None:
            return

        if message_type == 'record' and self.session_start is None:
            self.session_start = timestamp
            message['elapsed_time'] = 0
            message['timer_time'] = 0
        elif message_type == 'event' and message.get('event') == 'timer':
            if message.get('event_type') == 'stop_all':
                self._last_stop = timestamp
            elif message.get('event_type') == 'start' and self._last_stop is not None:
                self.paused_time += (timestamp - self._last_stop).total_seconds()
                self._last_stop = None


class Decoder:
    '''
    A class for decoding FIT files into messages.

    Attributes:
        _stream: The stream the FIT data is read from.
    '''

    def __init__(self, stream: Stream):
        if stream is None:
            raise RuntimeError("FIT Runtime Error stream parameter is None.")

        self._stream = stream

    def is_fit(self) -> bool:
        '''Returns True when the stream holds a FIT file header at its current position.'''
        start = self._stream.position
        try:
            read_file_header(self._stream)
        except FitHeaderError:
            return False
        finally:
            self._stream.seek(start)
        return True

    def check_integrity(self) -> bool:
        '''Returns True when the header and file CRCs of the FIT file at the current position match.'''
        start = self._stream.position
        try:
            header = read_file_header(self._stream)
            verify_file_crc(self._stream.buffer, start, header)
        except FitError as error:
            _logger.info("Integrity check failed: %s", error)
            return False
        finally:
            self._stream.seek(start)
        return True

    def read(self, **kwargs):
        '''
        Reads every FIT file in the stream, starting at its current position.

        Keyword arguments are the fields of DecodeOptions.

        Returns:
            tuple: (messages, errors) where messages maps "<name>_mesgs" to the
            decoded messages in stream order and errors lists the FitError that
            stopped decoding, if any.
        '''
        options = DecodeOptions.from_kwargs(**kwargs)
        buffer = self._stream.buffer
        position = self._stream.position

        messages = {}
        errors = []

        try:
            while position < len(buffer):
                position = self._read_file(buffer, position, options, messages)
        except FitError as error:
            _logger.error("Decoding stopped: %s", error)
            errors.append(error)

        self._stream.seek(min(position, len(buffer)))
        return messages, errors

    def _read_file(self, buffer, start: int, options: DecodeOptions, messages: dict) -> int:
        self._stream.seek(start)
        header = read_file_header(self._stream)
        if options.enable_crc_check:
            verify_file_crc(buffer, start, header)

        # Definitions and running timestamps never outlive one file
        session = SessionState()
        elapsed = _ElapsedTime()

        position = self._stream.position
        end = position + header.data_size
        _logger.debug("Reading FIT file at offset %d with %d data byte(s)", start, header.data_size)

        while position < end:
            result = read_record(buffer, session, position, options,
                                 elapsed.session_start, elapsed.paused_time)

            if result.message is not None:
                if options.elapsed_record_field:
                    elapsed.update(result.message_type, result.message)

                messages.setdefault(f"{result.message_type}_mesgs", []).append(result.message)

                if options.mesg_listener is not None:
                    options.mesg_listener(result.message_type, result.message)

            position = result.next_index

        return end + FIT.CRC_SIZE
