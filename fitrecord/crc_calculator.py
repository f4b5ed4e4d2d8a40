'''crc_calculator.py: Contains the CRC-16 calculator used by FIT headers and files.'''


_CRC_TABLE = [
    0x0000, 0xCC01, 0xD801, 0x1400, 0xF001, 0x3C00, 0x2800, 0xE401,
    0xA001, 0x6C00, 0x7800, 0xB401, 0x5000, 0x9C01, 0x8801, 0x4400,
]


class CrcCalculator:
    '''Incremental FIT CRC-16, processed one nibble at a time.'''

    def __init__(self):
        self._crc = 0
        self._bytes_seen = 0

    def get_crc(self) -> int:
        return self._crc

    def get_bytes_seen(self) -> int:
        return self._bytes_seen

    def add_bytes(self, buffer, start: int, end: int) -> int:
        '''Folds buffer[start:end] into the running CRC and returns it.'''
        for i in range(start, end):
            self._crc = CrcCalculator._update_crc(self._crc, buffer[i])
            self._bytes_seen += 1
        return self._crc

    @staticmethod
    def _update_crc(crc: int, byte: int) -> int:
        # low nibble
        tmp = _CRC_TABLE[crc & 0xF]
        crc = (crc >> 4) & 0x0FFF
        crc = crc ^ tmp ^ _CRC_TABLE[byte & 0xF]

        # high nibble
        tmp = _CRC_TABLE[crc & 0xF]
        crc = (crc >> 4) & 0x0FFF
        crc = crc ^ tmp ^ _CRC_TABLE[(byte >> 4) & 0xF]

        return crc

    @staticmethod
    def calculate_crc(buffer, start: int, end: int) -> int:
        '''Returns the CRC-16 of buffer[start:end].'''
        crc_calculator = CrcCalculator()
        return crc_calculator.add_bytes(buffer, start, end)
