'''fitrecord: Decodes FIT activity files record by record.'''

from .crc_calculator import CrcCalculator
from .decoder import Decoder, FileHeader, read_file_header
from .definitions import DeveloperFieldDescriptor, FieldDefinition, MessageDefinition
from .exceptions import (DeveloperFieldLookupError, FitDecodeError, FitError, FitHeaderError,
                         FitIntegrityError, MissingDefinitionError, TruncatedRecordError,
                         UnsupportedBaseTypeError)
from .fit import BASE_TYPE, BASE_TYPE_DEFINITIONS, PrimitiveType
from .options import DecodeOptions
from .profile import Profile
from .record_decoder import RecordResult, read_record
from .session import SessionState
from .stream import Stream

__version__ = '0.1.0'
