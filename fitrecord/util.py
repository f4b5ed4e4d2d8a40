'''util.py: Contains byte assembly and FIT timestamp helpers.'''

from datetime import datetime, timedelta, timezone


FIT_EPOCH_S = 631065600
FIT_EPOCH_MS = FIT_EPOCH_S * 1000
FIT_EPOCH = datetime(1989, 12, 31, tzinfo=timezone.utc)

UINT32_MASK = 0xFFFFFFFF


def add_endian(little_endian: bool, data) -> int:
    '''
    Assembles an unsigned integer from a sequence of bytes.

    Byte i is placed at bit offset 8 * i after reversing big endian input.
    The result is truncated to 32 bits. The input is not modified.
    '''
    ordered = list(data)
    if not little_endian:
        ordered.reverse()

    result = 0
    for i, byte in enumerate(ordered):
        result = (result + (byte << (i << 3))) & UINT32_MASK
    return result


def convert_timestamp_to_datetime(timestamp) -> datetime:
    '''Converts seconds since the FIT epoch (1989-12-31T00:00:00Z) to an aware datetime.'''
    return FIT_EPOCH + timedelta(milliseconds=timestamp * 1000)
