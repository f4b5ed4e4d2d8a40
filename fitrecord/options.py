'''options.py: Contains the options that control how records are decoded.'''

from dataclasses import dataclass, fields
from typing import Callable, Optional


@dataclass(frozen=True)
class DecodeOptions:
    '''
    Decoding policy shared by every record of a session.

    Attributes:
        force: Tolerate malformed fields instead of aborting the session.
        speed_unit: Unit for speed-like fields ("m/s", "km/h", "mph").
        length_unit: Unit for distance-like fields ("m", "cm", "km", "mi").
        temperature_unit: Unit for temperatures ("celsius", "kelvin", "fahrenheit").
        elapsed_record_field: Add elapsed_time and timer_time to record messages.
        enable_crc_check: Validate header and file CRCs before decoding.
        mesg_listener: Called with (message name, fields) for every data message.
    '''

    force: bool = True
    speed_unit: str = 'm/s'
    length_unit: str = 'm'
    temperature_unit: str = 'celsius'
    elapsed_record_field: bool = False
    enable_crc_check: bool = True
    mesg_listener: Optional[Callable[[str, dict], None]] = None

    @classmethod
    def from_kwargs(cls, **kwargs) -> 'DecodeOptions':
        known = {field.name for field in fields(cls)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise TypeError(f"Unknown decode option(s): {', '.join(unknown)}")
        return cls(**kwargs)


DEFAULT_OPTIONS = DecodeOptions()
