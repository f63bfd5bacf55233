# Sorting of the collection endpoints
#
# sort=name asc,createdAtUtc desc,frequency.type
#
# The public sort fields of a resource are mapped to one or more entity attributes.
# A mapping may be reversed: "age asc" orders by created_at_utc desc.
# A public field that maps to several attributes orders by all of them, in declaration order.
#
# Sorting follows parse -> apply, the ordering is applied to the query before paging.
# The primary key is always appended as last ordering instruction, so the result order is total:
# items that compare equal on every requested field are returned in ascending id order.
#
from collections import namedtuple
from dataclasses import dataclass
from enum import Enum
from operator import attrgetter
from types import MappingProxyType
import devhabit
from .errors import ConfigurationError, InvalidSortField

SORT_DIRECTIONS = {"asc": False, "desc": True}

# target_expression: entity attribute name, descending: effective direction
OrderingInstruction = namedtuple("OrderingInstruction", ["target_expression", "descending"])


@dataclass(frozen=True)
class SortMapping:
    """
    Maps a public, client-facing sort field to an entity attribute
    """

    sort_field: str
    target_expression: str
    reverse: bool = False


@dataclass(frozen=True)
class ParsedSortClause:
    field_name: str
    descending: bool = False


class SortMappingDefinition:
    """
    The sort mappings of one resource type (a DTO class)

    :param resource: the resource tag used to look up this definition
    :param model: the SQLAlchemy model holding the mapped attributes
    :param mappings: iterable of SortMapping, entries sharing a sort_field are applied in this order
    :param default_sort: sort expression used when the client doesn't specify one
    :param tie_breaker: attribute that makes the order total, appended ascending
    """

    def __init__(self, resource, model, mappings, default_sort="", tie_breaker="id"):
        self._resource = resource
        self._model = model
        self._mappings = tuple(mappings)
        self._default_sort = default_sort
        self._tie_breaker = tie_breaker

        lookup = {}
        for mapping in self._mappings:
            key = mapping.sort_field.lower()
            expansion = lookup.setdefault(key, [])
            if expansion and expansion[0].sort_field != mapping.sort_field:
                raise ConfigurationError(f"{resource.__name__}: sort fields {expansion[0].sort_field} and {mapping.sort_field} differ only in case")
            if any(existing.target_expression == mapping.target_expression for existing in expansion):
                raise ConfigurationError(f"{resource.__name__}: duplicate sort mapping {mapping}")
            expansion.append(mapping)
        self._lookup = MappingProxyType({key: tuple(expansion) for key, expansion in lookup.items()})

    @property
    def resource(self):
        return self._resource

    @property
    def model(self):
        return self._model

    @property
    def mappings(self):
        return self._mappings

    @property
    def default_sort(self):
        return self._default_sort

    @property
    def tie_breaker(self):
        return self._tie_breaker

    @property
    def sort_fields(self):
        """
        :return: the public sort field names, in declaration order
        """
        return [expansion[0].sort_field for expansion in self._lookup.values()]

    def resolve(self, field_name):
        """
        :param field_name: public sort field name, case insensitive
        :return: tuple of SortMapping or None if the field can't be sorted on
        """
        return self._lookup.get(field_name.lower())

    def instructions(self, clauses):
        """
        :param clauses: sequence of ParsedSortClause
        :return: list of OrderingInstruction, ending with the tie breaker
        """
        result = []
        for clause in clauses:
            expansion = self.resolve(clause.field_name)
            if expansion is None:
                raise ConfigurationError(f"{self._resource.__name__} has no sort mapping for {clause.field_name}")
            for mapping in expansion:
                result.append(OrderingInstruction(mapping.target_expression, clause.descending != mapping.reverse))
        if self._tie_breaker and not any(instr.target_expression == self._tie_breaker for instr in result):
            result.append(OrderingInstruction(self._tie_breaker, False))
        return result

    def __repr__(self):
        return f"<SortMappingDefinition {self._resource.__name__}: {', '.join(self.sort_fields)}>"


class SortMappingRegistry:
    """
    Process wide, read-only table of SortMappingDefinitions.
    It's created when the api is initialized and never modified afterwards.
    """

    def __init__(self, *definitions):
        registered = {}
        for definition in definitions:
            if definition.resource in registered:
                raise ConfigurationError(f"Duplicate sort mapping definition for {definition.resource.__name__}")
            registered[definition.resource] = definition
        self._definitions = MappingProxyType(registered)

    def __contains__(self, resource):
        return resource in self._definitions

    def get_definition(self, resource):
        """
        :param resource: resource tag (DTO class)
        :return: SortMappingDefinition
        """
        try:
            return self._definitions[resource]
        except KeyError:
            devhabit.log.error(f"No sort mapping definition registered for {resource!r}, registered: {list(self._definitions)}")
            raise ConfigurationError(f"No sort mapping definition for {resource!r}")

    def get_mappings(self, resource):
        """
        :param resource: resource tag (DTO class)
        :return: tuple of SortMapping
        """
        return self.get_definition(resource).mappings

    def parse_sort(self, raw, resource):
        """
        Parse the sort= query parameter

        :param raw: sort expression, e.g. "name asc,createdAtUtc desc,priority"
        :param resource: resource tag (DTO class)
        :return: list of ParsedSortClause, the first clause is the primary sort key.
                 An empty list means the default ordering should be used.
        :raises InvalidSortField: listing every unknown field and invalid direction
        """
        definition = self.get_definition(resource)
        clauses = []
        invalid = []

        for clause in (raw or "").split(","):
            clause = clause.strip()
            if not clause:
                continue
            tokens = clause.split(None, 1)
            field_name = tokens[0]
            direction = tokens[1].strip() if len(tokens) > 1 else "asc"

            valid = True
            if definition.resolve(field_name) is None:
                invalid.append((field_name, f"The sort field '{field_name}' is not supported"))
                valid = False
            if direction.lower() not in SORT_DIRECTIONS:
                invalid.append((direction, f"Invalid sort direction '{direction}' for '{field_name}', expected 'asc' or 'desc'"))
                valid = False
            if valid:
                clauses.append(ParsedSortClause(field_name, SORT_DIRECTIONS[direction.lower()]))

        if invalid:
            raise InvalidSortField(invalid)
        return clauses

    def validate(self, raw, resource):
        """
        :return: True if the sort expression can be applied to the resource
        """
        try:
            self.parse_sort(raw, resource)
        except InvalidSortField:
            return False
        return True

    def apply_ordering(self, query, clauses, resource, default=None):
        """
        Apply the ordering to a query or list, before paging

        :param query: sqla query object (anything with order_by) or a list of entities
        :param clauses: sequence of ParsedSortClause
        :param resource: resource tag (DTO class)
        :param default: sort expression or clauses used when `clauses` is empty,
                        the definition default_sort is used if not provided
        :return: ordered query object or a new sorted list
        """
        definition = self.get_definition(resource)
        if not clauses:
            if default is None:
                default = definition.default_sort
            if isinstance(default, str):
                try:
                    default = self.parse_sort(default, resource)
                except InvalidSortField as exc:
                    raise ConfigurationError(f"Invalid default sort for {resource.__name__}: {exc.tokens}")
            clauses = default

        instructions = definition.instructions(clauses)
        if isinstance(query, (list, tuple)):
            return order_list(query, instructions)
        if not hasattr(query, "order_by"):
            raise TypeError(f"Can't order {type(query)}")

        order_by = []
        for instruction in instructions:
            column = getattr(definition.model, instruction.target_expression, None)
            if column is None or not hasattr(column, "desc"):
                raise ConfigurationError(f"{definition.model.__name__} has no orderable attribute {instruction.target_expression}")
            order_by.append(column.desc() if instruction.descending else column.asc())
        return query.order_by(*order_by)


def _sort_key(target_expression):
    getter = attrgetter(target_expression)

    def key(item):
        value = getter(item)
        if isinstance(value, Enum):
            # enums are stored (and thus sorted by the database) by their value
            value = value.value
        # None sorts before any value
        return value is not None, value

    return key


def order_list(items, instructions):
    """
    In-memory equivalent of the ordering that's applied to sqla queries

    :param items: list of objects
    :param instructions: list of OrderingInstruction, primary key first
    :return: new sorted list
    """
    result = list(items)
    # sorted() is stable: sort on the least significant key first
    for instruction in reversed(instructions):
        result = sorted(result, key=_sort_key(instruction.target_expression), reverse=instruction.descending)
    return result
