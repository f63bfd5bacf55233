# Pagination: page & pageSize query arguments
#
# The query must be ordered before it's paginated (cfr. SortMappingRegistry.apply_ordering),
# paging an unordered result set may skip or repeat items.
#
import math
from dataclasses import dataclass
from sqlalchemy.exc import SQLAlchemyError
from .errors import PreconditionError, GenericError, ValidationError


@dataclass(frozen=True)
class PaginationMetadata:
    """
    page and page_size are validated by the request binding (DevHabitRequest),
    invalid values here are a programming error
    """

    page: int
    page_size: int
    total_count: int

    def __post_init__(self):
        if self.page < 1:
            raise PreconditionError(f"page must be >= 1, got {self.page}")
        if self.page_size < 1:
            raise PreconditionError(f"page_size must be >= 1, got {self.page_size}")
        if self.total_count < 0:
            raise PreconditionError(f"total_count must be >= 0, got {self.total_count}")

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_previous_page(self) -> bool:
        return self.total_count > 0 and self.page > 1

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    def to_dict(self) -> dict:
        return {
            "page": self.page,
            "pageSize": self.page_size,
            "totalCount": self.total_count,
            "totalPages": self.total_pages,
            "hasPreviousPage": self.has_previous_page,
            "hasNextPage": self.has_next_page,
        }


def build_page(items, page, page_size, total_count):
    """
    :param items: shaped records of the current page
    :return: the collection envelope: {"items": [...], "page": .., "pageSize": .., "totalCount": .., ...}
    """
    metadata = PaginationMetadata(page, page_size, total_count)
    result = {"items": list(items)}
    result.update(metadata.to_dict())
    return result


def paginate(object_query, page, page_size):
    """
    this is where the query is executed

    :param object_query: ordered sqla query object or list
    :param page: 1-based page number
    :param page_size: number of items per page
    :return: instances on the page, total count
    """
    PaginationMetadata(page, page_size, 0)
    offset = (page - 1) * page_size

    if isinstance(object_query, (list, tuple)):
        return list(object_query[offset : offset + page_size]), len(object_query)

    try:
        count = object_query.count()
        instances = object_query.offset(offset).limit(page_size).all()
    except OverflowError:
        raise ValidationError("Pagination Overflow Error")
    except SQLAlchemyError as exc:
        raise GenericError(f"{exc}")
    return instances, count
