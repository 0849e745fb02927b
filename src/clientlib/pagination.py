# Pagination envelope and query parameters.
# Created: 2026-10-04

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from clientlib.utils.common import to_param_string

T = TypeVar("T")


class Sort(BaseModel):
    sorted: bool
    unsorted: bool
    empty: bool


class Page(BaseModel, Generic[T]):
    """One page of a paginated query."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)

    content: list[T]
    total_elements: int
    last: bool
    total_pages: int
    sort: Sort
    number_of_elements: int
    first: bool
    size: int
    number: int
    empty: bool

    @classmethod
    def of(cls, content: list[T]) -> Page[T]:
        """Wrap a plain list as a single page."""
        return cls(
            content=content,
            total_elements=0,
            last=True,
            total_pages=0,
            sort=Sort(sorted=False, unsorted=True, empty=False),
            number_of_elements=0,
            first=True,
            size=10,
            number=0,
            empty=False,
        )

    def merge(self, new_page: Page[T]) -> Page[T]:
        """Append *new_page* to this one.

        Content is concatenated and element counts summed; every other
        field comes from *new_page*.
        """
        return new_page.model_copy(
            update={
                "content": self.content + new_page.content,
                "number_of_elements": self.number_of_elements + new_page.number_of_elements,
            }
        )


def merge(a: Page[T], b: Page[T]) -> Page[T]:
    return a.merge(b)


class SortByFields(Enum):
    ID = "id"
    CREATED_AT = "created_at"
    SERIAL = "serial"


class SortDirections(Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class PageableParams:
    query: str | None = None
    page: int = 0
    size: int = 10
    sort_by: SortByFields = SortByFields.ID
    direction: SortDirections = SortDirections.DESC

    def to_param_string(self) -> str:
        # The backend takes enum names for id/created_at and column names otherwise
        if self.sort_by in (SortByFields.ID, SortByFields.CREATED_AT):
            sort_by = self.sort_by.name
        else:
            sort_by = self.sort_by.value
        return to_param_string(
            {
                "q": self.query or "",
                "page": self.page,
                "size": self.size,
                "sort_by": sort_by,
                "sort_direction": self.direction.name,
            }
        )
