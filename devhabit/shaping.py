# Data shaping: fields=name,status
#
# A shape is a DTO dataclass, its public field names are the camelCased attribute names
# (or the "name" field metadata). The field table of a shape is built on first use and cached.
#
# Field names in the query string are matched case insensitively,
# the shaped records use the canonical casing in the requested order.
#
import threading
from collections import namedtuple
from dataclasses import fields as dataclass_fields, is_dataclass
from operator import attrgetter
from types import MappingProxyType
from .errors import InvalidField, ConfigurationError
from .util import camelize

# name: canonical public name, accessor: callable returning the field value of an instance
ShapeField = namedtuple("ShapeField", ["name", "accessor"])


def parse_fields(fields_raw):
    """
    :param fields_raw: csv field names, e.g. "name, Status"
    :return: list of stripped field names, empty if all fields are requested
    """
    return [field.strip() for field in (fields_raw or "").split(",") if field.strip()]


class FieldShaper:
    """
    Shapes DTO instances into ordered dicts with the requested fields
    """

    def __init__(self):
        self._field_tables = {}
        self._lock = threading.Lock()

    def field_table(self, shape):
        """
        :param shape: DTO class
        :return: read-only mapping of lowercase field name -> ShapeField, in declaration order
        """
        table = self._field_tables.get(shape)
        if table is None:
            with self._lock:
                table = self._field_tables.get(shape)
                if table is None:
                    table = self._build_field_table(shape)
                    self._field_tables[shape] = table
        return table

    @staticmethod
    def _build_field_table(shape):
        if not (isinstance(shape, type) and is_dataclass(shape)):
            raise ConfigurationError(f"{shape!r} is not a dataclass")
        table = {}
        for field in dataclass_fields(shape):
            if field.metadata.get("shape", True) is False:
                continue
            name = field.metadata.get("name", camelize(field.name))
            table[name.lower()] = ShapeField(name, attrgetter(field.name))
        return MappingProxyType(table)

    def resolve_fields(self, fields_raw, shape):
        """
        :param fields_raw: csv field names
        :param shape: DTO class
        :return: list of ShapeField in requested order
        :raises InvalidField: listing all unknown field names
        """
        table = self.field_table(shape)
        requested = parse_fields(fields_raw)
        if not requested:
            return list(table.values())

        result = []
        invalid = []
        for field_name in requested:
            field = table.get(field_name.lower())
            if field is None:
                invalid.append((field_name, f"The field '{field_name}' does not exist"))
            elif field not in result:
                result.append(field)
        if invalid:
            raise InvalidField(invalid)
        return result

    def validate_fields(self, fields_raw, shape):
        """
        :raises InvalidField: if one of the requested fields doesn't exist on the shape
        """
        self.resolve_fields(fields_raw, shape)

    def has_fields(self, fields_raw, shape):
        try:
            self.resolve_fields(fields_raw, shape)
        except InvalidField:
            return False
        return True

    def shape_data(self, item, fields_raw="", shape=None):
        """
        :param item: DTO instance
        :param fields_raw: csv field names, all fields if empty
        :param shape: DTO class, defaults to the class of item
        :return: dict with the requested fields
        """
        shape = type(item) if shape is None else shape
        return {field.name: field.accessor(item) for field in self.resolve_fields(fields_raw, shape)}

    def shape_fields(self, items, fields_raw, shape):
        """
        :param items: iterable of DTO instances
        :param fields_raw: csv field names, all fields if empty
        :param shape: DTO class
        :return: list of dicts with the requested fields, in the order of items
        """
        items = list(items)
        if not items:
            return []
        fields = self.resolve_fields(fields_raw, shape)
        return [{field.name: field.accessor(item) for field in fields} for item in items]


field_shaper = FieldShaper()

shape_data = field_shaper.shape_data
shape_fields = field_shaper.shape_fields
validate_fields = field_shaper.validate_fields
