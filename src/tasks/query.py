"""
View derivation over an in-memory task collection.

Everything here is a pure function of its arguments: the same collection and
view state always produce the same page. Filtering runs in a fixed order
(category, then search, then pagination) but the two filters commute, so only
the intermediate lists depend on that order.
"""
from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar, Union

from .models import Category, PageView, ViewState
from .schemas import Task
from .settings import DEFAULT_PAGE_SIZE, PAGE_SIZE_OPTIONS

T = TypeVar("T")

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "PAGE_SIZE_OPTIONS",
    "category_counts",
    "count_pages",
    "derive_view",
    "filter_by_category",
    "filter_by_search",
    "filter_tasks",
    "page_range",
    "paginate",
]


# PUBLIC_INTERFACE
def filter_by_category(tasks: Iterable[Task], category: Union[Category, str]) -> List[Task]:
    """Keep every task for Category.ALL, otherwise only tasks with a matching status."""
    selected = Category(category)
    return [t for t in tasks if selected.matches(t)]


# PUBLIC_INTERFACE
def filter_by_search(tasks: Iterable[Task], search: Optional[str]) -> List[Task]:
    """
    Case-insensitive substring search across name and description.

    Blank search text (after trimming) keeps every task.
    """
    s = (search or "").strip().lower()
    if not s:
        return list(tasks)

    def matches(t: Task) -> bool:
        name_ok = s in t.name.lower()
        desc_ok = s in t.description.lower() if t.description else False
        return name_ok or desc_ok

    return [t for t in tasks if matches(t)]


# PUBLIC_INTERFACE
def filter_tasks(tasks: Iterable[Task], view_state: ViewState) -> List[Task]:
    """Apply the category and search filters of a view state, without paginating."""
    return filter_by_search(filter_by_category(tasks, view_state.category), view_state.search)


# PUBLIC_INTERFACE
def count_pages(total: int, page_size: int) -> int:
    """Number of pages needed for `total` items; an empty set still has one page."""
    if page_size < 1:
        raise ValueError("page_size must be a positive integer")
    return max(1, math.ceil(total / page_size))


# PUBLIC_INTERFACE
def paginate(items: Sequence[T], page: int, page_size: int) -> Tuple[T, ...]:
    """
    Return the items of a 1-based page.

    Pages outside [1, count_pages(...)] are not corrected and yield no items.
    """
    if page_size < 1:
        raise ValueError("page_size must be a positive integer")
    if page < 1:
        return ()
    start = (page - 1) * page_size
    end = min(page * page_size, len(items))
    return tuple(items[start:end])


# PUBLIC_INTERFACE
def derive_view(tasks: Sequence[Task], view_state: ViewState) -> PageView:
    """
    Compute the visible page for a task collection.

    Args:
        tasks: The full collection, in service order.
        view_state: Search text, category, requested page and page size.

    Returns:
        PageView with the sliced items, the requested (unclamped) page, the
        total page count and the filtered item count.
    """
    filtered = filter_tasks(tasks, view_state)
    return PageView(
        items=paginate(filtered, view_state.page, view_state.page_size),
        page=view_state.page,
        total_pages=count_pages(len(filtered), view_state.page_size),
        total_items=len(filtered),
        page_size=view_state.page_size,
    )


# PUBLIC_INTERFACE
def category_counts(tasks: Sequence[Task], search: Optional[str] = None) -> Dict[Category, int]:
    """Number of tasks per category tab under the given search text."""
    matching = filter_by_search(tasks, search)
    return {c: len(filter_by_category(matching, c)) for c in Category}


# PUBLIC_INTERFACE
def page_range(view: PageView) -> Tuple[int, int]:
    """
    1-based numbers of the first and last item on a page, as shown in
    "Showing X - Y of Z". An empty page gives (0, 0).
    """
    if not view.items:
        return (0, 0)
    first = (view.page - 1) * view.page_size + 1
    return (first, first + len(view.items) - 1)
