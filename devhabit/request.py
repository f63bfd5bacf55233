"""
Request argument binding for the collection endpoints

Query string grammar:
- sort=fieldName [asc|desc],... (parsed by the SortMappingRegistry)
- fields=fieldName,... (parsed by the FieldShaper)
- page, pageSize : positive integers, defaults 1 and DEFAULT_PAGE_SIZE
- q, type, status : habit filters

Content negotiation:
Clients that send "Accept: application/vnd.dev-habit.hateoas+json" (HATEOAS_MEDIA_TYPE)
receive hypermedia "links" in the response documents.
"""

from flask import Request
from .config import get_config, get_int_config
from .errors import ValidationError


# pylint: disable=too-many-ancestors
class DevHabitRequest(Request):
    """
    Parse the collection request arguments:
    - header: Accept may ask for the hypermedia media type
    - query args: page, pageSize, sort, fields
    - body: valid json
    """

    @property
    def wants_hypermedia(self) -> bool:
        """
        :return: True if one of the Accept header media types is the hypermedia media type
        """
        media_type = get_config("HATEOAS_MEDIA_TYPE").lower()
        return any(value.lower() == media_type for value, _quality in self.accept_mimetypes)

    @property
    def page(self) -> int:
        return self._positive_int_arg("page", 1)

    @property
    def page_size(self) -> int:
        """
        :return: requested page size, capped at MAX_PAGE_SIZE
        """
        page_size = self._positive_int_arg("pageSize", get_int_config("DEFAULT_PAGE_SIZE"))
        return min(page_size, get_int_config("MAX_PAGE_SIZE"))

    @property
    def sort(self) -> str:
        return self.args.get("sort", "")

    @property
    def fields(self) -> str:
        return self.args.get("fields", "")

    def _positive_int_arg(self, name, default):
        raw = self.args.get(name, "").strip()
        if not raw:
            return default
        try:
            value = int(raw)
        except ValueError:
            raise ValidationError(f"'{name}' must be a positive integer, got '{raw}'")
        if value < 1:
            raise ValidationError(f"'{name}' must be a positive integer, got '{raw}'")
        return value

    def get_json_payload(self) -> dict:
        """
        :return: json request payload
        """
        result = self.get_json(silent=True)
        if not isinstance(result, dict):
            raise ValidationError(f"Invalid JSON Payload : {result}")
        return result
