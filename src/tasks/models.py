from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple, Union

from .schemas import Task
from .settings import DEFAULT_PAGE_SIZE


# PUBLIC_INTERFACE
class Category(str, Enum):
    """
    Category tab selector for the task list.

    Fields:
    - ALL: every task
    - PENDING / COMPLETED: only tasks whose status has the same value
    """

    ALL = "All"
    PENDING = "Pending"
    COMPLETED = "Completed"

    def matches(self, task: Task) -> bool:
        if self is Category.ALL:
            return True
        return task.status.value == self.value


# PUBLIC_INTERFACE
class NotFound(Enum):
    """Sentinel returned by single-task lookups when the service has no such task."""

    NOT_FOUND = "NOT_FOUND"

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = NotFound.NOT_FOUND


@dataclass(frozen=True)
class ViewState:
    """
    Parameters selecting the visible subset of tasks.

    Changing the search text or the page size goes back to the first page;
    changing the category or the page keeps the other fields as they are.
    """

    search: str = ""
    category: Category = Category.ALL
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", Category(self.category))
        if self.page_size < 1:
            raise ValueError("page_size must be a positive integer")

    def with_search(self, search: str) -> "ViewState":
        return replace(self, search=search, page=1)

    def with_category(self, category: Union[Category, str]) -> "ViewState":
        return replace(self, category=Category(category))

    def with_page(self, page: int) -> "ViewState":
        return replace(self, page=int(page))

    def with_page_size(self, page_size: Union[int, str]) -> "ViewState":
        return replace(self, page_size=int(page_size), page=1)

    def clamped(self, total_pages: int) -> "ViewState":
        """Return a copy whose page lies within [1, total_pages]."""
        page = min(max(self.page, 1), max(total_pages, 1))
        return self if page == self.page else replace(self, page=page)


@dataclass(frozen=True)
class PageView:
    """
    One rendered page of the derived view.

    `page` is the requested page, never clamped; `total_items` is the size of
    the filtered set the page was cut from, and `page_size` the size used to
    cut it.
    """

    items: Tuple[Task, ...]
    page: int
    total_pages: int
    total_items: int
    page_size: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


@dataclass(frozen=True)
class Notification:
    """A one-shot message for the presentation layer."""

    message: str
    is_error: bool = False
