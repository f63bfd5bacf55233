# devhabit to json encoding

import datetime
import decimal
import enum
from dataclasses import is_dataclass
from flask.json.provider import DefaultJSONProvider
from uuid import UUID
import devhabit
from .config import is_debug
from .shaping import field_shaper


class DevHabitJSONProvider(DefaultJSONProvider):
    """
    Flask JSON encoding:
    - the key order of the shaped records is preserved
    - DTO dataclasses are encoded with their public (camelCase) field names
    - datetimes are encoded in ISO 8601
    """

    sort_keys = False

    # pylint: disable=too-many-return-statements
    def default(self, obj):
        """
        override the default json encoding
        :param obj: object to be encoded
        :return: encoded/serialized object
        """
        if isinstance(obj, enum.Enum):
            return obj.value
        if isinstance(obj, datetime.datetime):
            if obj.tzinfo is None:
                # the database returns naive UTC timestamps
                obj = obj.replace(tzinfo=datetime.timezone.utc)
            return obj.isoformat()
        if isinstance(obj, (datetime.date, datetime.time)):
            return obj.isoformat()
        if isinstance(obj, datetime.timedelta):
            return str(obj)
        if is_dataclass(obj) and not isinstance(obj, type):
            return field_shaper.shape_data(obj)
        if isinstance(obj, set):
            return list(obj)
        if isinstance(obj, UUID):  # pragma: no cover
            return str(obj)
        if isinstance(obj, decimal.Decimal):  # pragma: no cover
            return float(obj)

        # We shouldn't get here in a normal setup
        if not is_debug():  # pragma: no cover
            devhabit.log.warning(f'JSON Encoding Error: Unknown object type "{type(obj)}" for {obj}')
            return {"error": "DevHabitJSONProvider invalid object"}

        return super().default(obj)
