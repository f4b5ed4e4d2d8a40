'''exceptions.py: Contains the errors raised while reading FIT data.'''


class FitError(Exception):
    '''Base class for all FIT decoding errors.'''


class FitHeaderError(FitError):
    '''The stream does not start with a valid FIT file header.'''


class FitIntegrityError(FitError):
    '''A header or file CRC does not match the data.'''


class FitDecodeError(FitError):
    '''
    A single record could not be decoded.

    Attributes:
        offset: Byte offset of the record header within the buffer, if known.
        record_kind: "definition", "data" or "compressed_timestamp", if known.
    '''

    def __init__(self, message: str, offset: int = None, record_kind: str = None):
        self.offset = offset
        self.record_kind = record_kind
        self.detail = message
        super().__init__(self._describe())

    def with_context(self, offset: int, record_kind: str):
        '''Fills in the record location when the raising code did not know it.'''
        if self.offset is None:
            self.offset = offset
        if self.record_kind is None:
            self.record_kind = record_kind
        self.args = (self._describe(),)
        return self

    def _describe(self) -> str:
        context = []
        if self.record_kind is not None:
            context.append(f"{self.record_kind} record")
        if self.offset is not None:
            context.append(f"offset {self.offset}")
        if not context:
            return self.detail
        return f"{self.detail} ({', '.join(context)})"


class UnsupportedBaseTypeError(FitDecodeError):
    '''A multi-byte field has a primitive type the reader cannot decode.'''


class DeveloperFieldLookupError(FitDecodeError):
    '''A definition references a developer field that was never described.'''


class MissingDefinitionError(FitDecodeError):
    '''A data record references a local message type with no definition.'''


class TruncatedRecordError(FitDecodeError):
    '''A record extends past the end of the buffer.'''
