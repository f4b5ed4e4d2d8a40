'''stream.py: Contains the stream class, a seekable byte source for FIT data.'''

import io
import struct


class Stream:
    '''A byte source that FIT data is read from.'''

    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._position = 0

    @classmethod
    def from_file(cls, filename: str) -> 'Stream':
        with open(filename, 'rb') as file:
            return cls(file.read())

    @classmethod
    def from_bytes_io(cls, bytes_io: io.BytesIO) -> 'Stream':
        return cls(bytes_io.getvalue())

    @classmethod
    def from_byte_array(cls, byte_array) -> 'Stream':
        return cls(byte_array)

    @property
    def position(self) -> int:
        return self._position

    @property
    def length(self) -> int:
        return len(self._data)

    @property
    def buffer(self) -> bytes:
        return self._data

    def reset(self):
        self.seek(0)

    def seek(self, position: int):
        if position < 0 or position > len(self._data):
            raise IndexError(f"FIT Runtime Error position {position} is outside the stream")
        self._position = position

    def peek_byte(self) -> int:
        if self._position >= len(self._data):
            raise IndexError("FIT Runtime Error end of stream")
        return self._data[self._position]

    def read_byte(self) -> int:
        value = self.peek_byte()
        self._position += 1
        return value

    def read_bytes(self, size: int) -> bytes:
        if self._position + size > len(self._data):
            raise IndexError(f"FIT Runtime Error end of stream at {self._position}, "
                             f"{size} byte(s) requested")
        data = self._data[self._position:self._position + size]
        self._position += size
        return data

    def read_uint16(self) -> int:
        return struct.unpack('<H', self.read_bytes(2))[0]

    def read_uint32(self) -> int:
        return struct.unpack('<I', self.read_bytes(4))[0]
