# flake8: noqa: F401
#
# DevHabit: habit tracking REST API
#
from .app_init import DB, log, DevHabit
from .errors import DevHabitError, ValidationError, GenericError, NotFoundError, ConflictError
from .errors import ConfigurationError, PreconditionError, InvalidSortField, InvalidField
from .config import get_config, is_debug
from .sorting import SortMapping, SortMappingDefinition, SortMappingRegistry, ParsedSortClause, OrderingInstruction
from .shaping import FieldShaper, field_shaper, shape_data, shape_fields, validate_fields
from .links import LinkDescriptor, create_link, attach_links
from .pagination import PaginationMetadata, build_page, paginate
from .api import DevHabitAPI
from .app import create_app
from .__about__ import __version__, __description__

__all__ = (
    "__version__",
    "__description__",
    #
    "DevHabit",
    "DevHabitAPI",
    "create_app",
    "DB",
    "log",
    # sorting:
    "SortMapping",
    "SortMappingDefinition",
    "SortMappingRegistry",
    "ParsedSortClause",
    "OrderingInstruction",
    # shaping:
    "FieldShaper",
    "field_shaper",
    "shape_data",
    "shape_fields",
    "validate_fields",
    # hypermedia & paging:
    "LinkDescriptor",
    "create_link",
    "attach_links",
    "PaginationMetadata",
    "build_page",
    "paginate",
    # Errors:
    "DevHabitError",
    "ValidationError",
    "GenericError",
    "NotFoundError",
    "ConflictError",
    "ConfigurationError",
    "PreconditionError",
    "InvalidSortField",
    "InvalidField",
)
