'''session.py: Contains the mutable state owned by one decode session.'''

from typing import Dict, Optional

from .definitions import DeveloperFieldDescriptor, MessageDefinition


class SessionState:
    '''
    State that lives for exactly one FIT file.

    A new instance must be created for every file so that definitions and
    running timestamps never leak between independent decodes.

    Attributes:
        local_mesg_defs: Local message type (0-15) -> most recent MessageDefinition.
        developer_fields: developer_data_index -> field_definition_number -> descriptor.
        timestamp: Compressed-timestamp accumulator, seconds since the FIT epoch.
        last_time_offset: Last 5-bit time offset seen in a compressed header.
        monitoring_timestamp: Accumulator for monitoring timestamp16 fields.
    '''

    def __init__(self):
        self.local_mesg_defs: Dict[int, MessageDefinition] = {}
        self.developer_fields: Dict[int, Dict[int, DeveloperFieldDescriptor]] = {}
        self.timestamp = 0
        self.last_time_offset = 0
        self.monitoring_timestamp = 0

    def get_developer_field(self, developer_data_index: int,
                            field_definition_number: int) -> Optional[DeveloperFieldDescriptor]:
        return self.developer_fields.get(developer_data_index, {}).get(field_definition_number)

    def add_developer_field(self, descriptor: DeveloperFieldDescriptor):
        fields = self.developer_fields.setdefault(descriptor.developer_data_index, {})
        fields[descriptor.field_definition_number] = descriptor
