'''profile.py: Contains the FIT message dictionary and the enumeration tables it references.'''

from typing import NamedTuple, Optional


def _field(num: int, name: str, field_type: str, scale=None, offset=None, units: str = '') -> tuple:
    return num, {'num': num, 'name': name, 'type': field_type, 'scale': scale, 'offset': offset, 'units': units}


def _message(num: int, name: str, *field_entries) -> tuple:
    return num, {'num': num, 'name': name, 'fields': dict(field_entries)}


_TIMESTAMP = _field(253, 'timestamp', 'date_time', units='s')
_MESSAGE_INDEX = _field(254, 'message_index', 'uint16')

# Offsets follow the decoded = raw / scale + offset convention.
Profile = {
    'version': {'major': 21, 'minor': 94},
    'messages': dict([
        _message(
            0, 'file_id',
            _field(0, 'type', 'file'),
            _field(1, 'manufacturer', 'manufacturer'),
            _field(2, 'product', 'uint16'),
            _field(3, 'serial_number', 'uint32z'),
            _field(4, 'time_created', 'date_time'),
            _field(5, 'number', 'uint16'),
            _field(8, 'product_name', 'string'),
        ),
        _message(
            18, 'session',
            _TIMESTAMP,
            _MESSAGE_INDEX,
            _field(0, 'event', 'event'),
            _field(1, 'event_type', 'event_type'),
            _field(2, 'start_time', 'date_time'),
            _field(3, 'start_position_lat', 'sint32', units='deg'),
            _field(4, 'start_position_long', 'sint32', units='deg'),
            _field(5, 'sport', 'sport'),
            _field(6, 'sub_sport', 'sub_sport'),
            _field(7, 'total_elapsed_time', 'uint32', 1000, units='s'),
            _field(8, 'total_timer_time', 'uint32', 1000, units='s'),
            _field(9, 'total_distance', 'uint32', 100, units='m'),
            _field(11, 'total_calories', 'uint16', units='kcal'),
            _field(14, 'avg_speed', 'uint16', 1000, units='m/s'),
            _field(15, 'max_speed', 'uint16', 1000, units='m/s'),
            _field(16, 'avg_heart_rate', 'uint8', units='bpm'),
            _field(17, 'max_heart_rate', 'uint8', units='bpm'),
            _field(22, 'total_ascent', 'uint16', units='m'),
            _field(23, 'total_descent', 'uint16', units='m'),
            _field(25, 'first_lap_index', 'uint16'),
            _field(26, 'num_laps', 'uint16'),
            _field(37, 'left_right_balance', 'left_right_balance_100'),
            _field(57, 'avg_temperature', 'sint8', units='C'),
            _field(58, 'max_temperature', 'sint8', units='C'),
        ),
        _message(
            19, 'lap',
            _TIMESTAMP,
            _MESSAGE_INDEX,
            _field(0, 'event', 'event'),
            _field(1, 'event_type', 'event_type'),
            _field(2, 'start_time', 'date_time'),
            _field(3, 'start_position_lat', 'sint32', units='deg'),
            _field(4, 'start_position_long', 'sint32', units='deg'),
            _field(5, 'end_position_lat', 'sint32', units='deg'),
            _field(6, 'end_position_long', 'sint32', units='deg'),
            _field(7, 'total_elapsed_time', 'uint32', 1000, units='s'),
            _field(8, 'total_timer_time', 'uint32', 1000, units='s'),
            _field(9, 'total_distance', 'uint32', 100, units='m'),
            _field(11, 'total_calories', 'uint16', units='kcal'),
            _field(13, 'avg_speed', 'uint16', 1000, units='m/s'),
            _field(14, 'max_speed', 'uint16', 1000, units='m/s'),
            _field(15, 'avg_heart_rate', 'uint8', units='bpm'),
            _field(16, 'max_heart_rate', 'uint8', units='bpm'),
            _field(21, 'total_ascent', 'uint16', units='m'),
            _field(22, 'total_descent', 'uint16', units='m'),
            _field(25, 'sport', 'sport'),
        ),
        _message(
            20, 'record',
            _TIMESTAMP,
            _field(0, 'position_lat', 'sint32', units='deg'),
            _field(1, 'position_long', 'sint32', units='deg'),
            _field(2, 'altitude', 'uint16', 5, -500, units='m'),
            _field(3, 'heart_rate', 'uint8', units='bpm'),
            _field(4, 'cadence', 'uint8', units='rpm'),
            _field(5, 'distance', 'uint32', 100, units='m'),
            _field(6, 'speed', 'uint16', 1000, units='m/s'),
            _field(7, 'power', 'uint16', units='watts'),
            _field(13, 'temperature', 'sint8', units='C'),
            _field(30, 'left_right_balance', 'left_right_balance'),
            _field(32, 'vertical_speed', 'sint16', 1000, units='m/s'),
            _field(39, 'vertical_oscillation', 'uint16', 10, units='mm'),
            _field(53, 'fractional_cadence', 'uint8', 128, units='rpm'),
            _field(73, 'enhanced_speed', 'uint32', 1000, units='m/s'),
            _field(78, 'enhanced_altitude', 'uint32', 5, -500, units='m'),
        ),
        _message(
            21, 'event',
            _TIMESTAMP,
            _field(0, 'event', 'event'),
            _field(1, 'event_type', 'event_type'),
            _field(3, 'data', 'uint32'),
            _field(4, 'event_group', 'uint8'),
        ),
        _message(
            23, 'device_info',
            _TIMESTAMP,
            _field(0, 'device_index', 'uint8'),
            _field(1, 'device_type', 'uint8'),
            _field(2, 'manufacturer', 'manufacturer'),
            _field(3, 'serial_number', 'uint32z'),
            _field(4, 'product', 'uint16'),
            _field(5, 'software_version', 'uint16', 100),
            _field(6, 'hardware_version', 'uint8'),
            _field(10, 'battery_voltage', 'uint16', 256, units='V'),
            _field(11, 'battery_status', 'battery_status'),
            _field(27, 'product_name', 'string'),
        ),
        _message(
            34, 'activity',
            _TIMESTAMP,
            _field(0, 'total_timer_time', 'uint32', 1000, units='s'),
            _field(1, 'num_sessions', 'uint16'),
            _field(2, 'type', 'activity'),
            _field(3, 'event', 'event'),
            _field(4, 'event_type', 'event_type'),
            _field(5, 'local_timestamp', 'local_date_time'),
        ),
        _message(
            49, 'file_creator',
            _field(0, 'software_version', 'uint16'),
            _field(1, 'hardware_version', 'uint8'),
        ),
        _message(
            55, 'monitoring',
            _TIMESTAMP,
            _field(0, 'device_index', 'uint8'),
            _field(1, 'calories', 'uint16', units='kcal'),
            _field(2, 'distance', 'uint32', 100, units='m'),
            _field(3, 'cycles', 'uint32', 2, units='cycles'),
            _field(4, 'active_time', 'uint32', 1000, units='s'),
            _field(5, 'activity_type', 'activity_type'),
            _field(19, 'active_calories', 'uint16', units='kcal'),
            _field(26, 'timestamp16', 'uint16', units='s'),
            _field(27, 'heart_rate', 'uint8', units='bpm'),
        ),
        _message(
            78, 'hrv',
            _field(0, 'time', 'uint16_array', 1000, units='s'),
        ),
        _message(
            206, 'field_description',
            _field(0, 'developer_data_index', 'uint8'),
            _field(1, 'field_definition_number', 'uint8'),
            _field(2, 'fit_base_type_id', 'uint8'),
            _field(3, 'field_name', 'string'),
            _field(4, 'array', 'uint8'),
            _field(5, 'components', 'string'),
            _field(6, 'scale', 'uint8'),
            _field(7, 'offset', 'sint8'),
            _field(8, 'units', 'string'),
            _field(13, 'native_mesg_num', 'uint16'),
            _field(14, 'native_field_num', 'uint8'),
        ),
        _message(
            207, 'developer_data_id',
            _field(0, 'developer_id', 'byte'),
            _field(1, 'application_id', 'byte'),
            _field(2, 'manufacturer_id', 'manufacturer'),
            _field(3, 'developer_data_index', 'uint8'),
            _field(4, 'application_version', 'uint32'),
        ),
    ]),
    'types': {
        'file': {
            1: 'device', 2: 'settings', 3: 'sport', 4: 'activity', 5: 'workout',
            6: 'course', 7: 'schedules', 9: 'weight', 10: 'totals', 11: 'goals',
            14: 'blood_pressure', 15: 'monitoring_a', 20: 'activity_summary',
            28: 'monitoring_daily', 32: 'monitoring_b', 34: 'segment', 35: 'segment_list',
        },
        'manufacturer': {
            1: 'garmin', 13: 'dynastream_oem', 15: 'dynastream', 23: 'suunto',
            32: 'wahoo_fitness', 255: 'development', 260: 'zwift', 294: 'coros',
        },
        'sport': {
            0: 'generic', 1: 'running', 2: 'cycling', 3: 'transition',
            4: 'fitness_equipment', 5: 'swimming', 6: 'basketball', 7: 'soccer',
            8: 'tennis', 10: 'training', 11: 'walking', 12: 'cross_country_skiing',
            13: 'alpine_skiing', 14: 'snowboarding', 15: 'rowing', 16: 'mountaineering',
            17: 'hiking', 18: 'multisport', 19: 'paddling', 254: 'all',
        },
        'sub_sport': {
            0: 'generic', 1: 'treadmill', 2: 'street', 3: 'trail', 4: 'track',
            5: 'spin', 6: 'indoor_cycling', 7: 'road', 8: 'mountain', 9: 'downhill',
            10: 'recumbent', 11: 'cyclocross', 12: 'hand_cycling', 13: 'track_cycling',
            14: 'indoor_rowing', 15: 'elliptical', 16: 'stair_climbing',
            17: 'lap_swimming', 18: 'open_water', 254: 'all',
        },
        'event': {
            0: 'timer', 3: 'workout', 4: 'workout_step', 5: 'power_down', 6: 'power_up',
            7: 'off_course', 8: 'session', 9: 'lap', 10: 'course_point', 11: 'battery',
            12: 'virtual_partner_pace', 13: 'hr_high_alert', 14: 'hr_low_alert',
            15: 'speed_high_alert', 16: 'speed_low_alert', 17: 'cad_high_alert',
            18: 'cad_low_alert', 19: 'power_high_alert', 20: 'power_low_alert',
            21: 'recovery_hr', 22: 'battery_low', 23: 'time_duration_alert',
            24: 'distance_duration_alert', 25: 'calorie_duration_alert', 26: 'activity',
            27: 'fitness_equipment', 28: 'length', 32: 'user_marker', 33: 'sport_point',
            36: 'calibration', 42: 'front_gear_change', 43: 'rear_gear_change',
            44: 'rider_position_change', 45: 'elev_high_alert', 46: 'elev_low_alert',
            47: 'comm_timeout',
        },
        'event_type': {
            0: 'start', 1: 'stop', 2: 'consecutive_depreciated', 3: 'marker',
            4: 'stop_all', 5: 'begin_depreciated', 6: 'end_depreciated',
            7: 'end_all_depreciated', 8: 'stop_disable', 9: 'stop_disable_all',
        },
        'activity': {0: 'manual', 1: 'auto_multi_sport'},
        'activity_type': {
            0: 'generic', 1: 'running', 2: 'cycling', 3: 'transition',
            4: 'fitness_equipment', 5: 'swimming', 6: 'walking', 8: 'sedentary', 254: 'all',
        },
        'battery_status': {
            1: 'new', 2: 'good', 3: 'ok', 4: 'low', 5: 'critical', 6: 'charging', 7: 'unknown',
        },
        'left_right_balance': {0x7F: 'mask', 0x80: 'right'},
        'left_right_balance_100': {0x3FFF: 'mask', 0x8000: 'right'},
        'fit_base_type': {
            0x00: 'enum', 0x01: 'sint8', 0x02: 'uint8', 0x83: 'sint16', 0x84: 'uint16',
            0x85: 'sint32', 0x86: 'uint32', 0x07: 'string', 0x88: 'float32',
            0x89: 'float64', 0x0A: 'uint8z', 0x8B: 'uint16z', 0x8C: 'uint32z',
            0x0D: 'byte', 0x8E: 'sint64', 0x8F: 'uint64', 0x90: 'uint64z',
        },
    },
}

# 180 / 2^31: semicircles to degrees
SEMICIRCLES_TO_DEGREES = 180.0 / 2 ** 31

MASK_MARKER = 'mask'
UNKNOWN_FIELD = 'unknown'


class FieldAttributes(NamedTuple):
    '''Semantic attributes of one field: name, semantic type, scale and offset.'''
    field: str
    type: Optional[str]
    scale: Optional[float] = None
    offset: Optional[float] = None


_UNKNOWN_ATTRIBUTES = FieldAttributes(UNKNOWN_FIELD, None)


class MessageProfile:
    '''Dictionary entry for one global message number.'''

    def __init__(self, num: int, name: str, fields: dict):
        self.num = num
        self.name = name
        self._fields = fields

    def get_attributes(self, field_num: int) -> FieldAttributes:
        field = self._fields.get(field_num)
        if field is None:
            return _UNKNOWN_ATTRIBUTES
        return FieldAttributes(field['name'], field['type'], field['scale'], field['offset'])

    def __repr__(self):
        return f"MessageProfile({self.num}, {self.name!r})"


def resolve_message(global_message_number: int) -> MessageProfile:
    '''Returns the dictionary entry for a global message number.

    Messages missing from the profile are named after their number and have no known fields.
    '''
    message = Profile['messages'].get(global_message_number)
    if message is None:
        return MessageProfile(global_message_number, str(global_message_number), {})
    return MessageProfile(message['num'], message['name'], message['fields'])


class EnumMap:
    '''Maps raw values of an enumerated type to their names.'''

    def __init__(self, values: dict):
        self.values = dict(values)

    def decode(self, raw):
        return self.values.get(raw, raw)


class BitmaskMap:
    '''
    Expands raw values of a masked type into named flags.

    Every named entry becomes a boolean computed as ((raw & key) >> 7) != 0,
    and the entry named "mask" contributes a "value" entry of raw & key.
    '''

    def __init__(self, values: dict):
        self.values = dict(values)
        self.mask_key = next(key for key, name in self.values.items() if name == MASK_MARKER)

    def decode(self, raw) -> dict:
        decoded = {}
        for key, name in self.values.items():
            if name == MASK_MARKER:
                decoded['value'] = raw & key
            else:
                # Only isolates the flag when key sits at bit 7 or above
                decoded[name] = ((raw & key) >> 7) != 0
        return decoded


def build_type_table(values: dict):
    '''Resolves a raw {value: name} type entry into an EnumMap or BitmaskMap.'''
    if MASK_MARKER in values.values():
        return BitmaskMap(values)
    return EnumMap(values)


TYPE_TABLES = {name: build_type_table(values) for name, values in Profile['types'].items()}
