from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, List, Optional, Tuple, Union

from . import query
from .models import NOT_FOUND, Category, Notification, NotFound, PageView, ViewState
from .notifications import NotificationSlot
from .remote import RemoteFailure, RemoteTaskService
from .schemas import Task, TaskDraft, TaskId
from .settings import RECONCILE_STRATEGIES, Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_ROUTE = "/"

TASK_CREATED = "Task created successfully"
TASK_UPDATED = "Task updated successfully"
TASK_DELETED = "Task deleted successfully"

Navigate = Callable[[str], None]


# PUBLIC_INTERFACE
class TaskStore:
    """
    Owner of the task collection and the only caller of the remote service.

    State exposed to the presentation layer (read-only):
    - tasks: immutable snapshot of the collection, in service order
    - loading: True while any network operation is in flight
    - error: message of the last failure, cleared by a successful fetch
    - notification: the single pending notification, if any

    Network operations never raise RemoteFailure to the caller; the failure is
    recorded in `error` and posted as an error notification instead. The
    collection only ever changes after the service confirms a change.

    Reconciliation after create/update follows `reconcile`:
    - 'patch': apply the record returned by the service in place
    - 'refetch': reload the whole collection
    A response without a usable record always falls back to a reload.
    """

    def __init__(
        self,
        service: RemoteTaskService,
        *,
        reconcile: str = "patch",
        page_size: Optional[int] = None,
        navigate: Optional[Navigate] = None,
    ) -> None:
        if reconcile not in RECONCILE_STRATEGIES:
            raise ValueError(f"reconcile must be one of {', '.join(RECONCILE_STRATEGIES)}")
        self._service = service
        self._reconcile = reconcile
        self._navigate = navigate
        self._tasks: Tuple[Task, ...] = ()
        self._in_flight = 0
        self._error: Optional[str] = None
        self._notifications = NotificationSlot()
        self._closed = False
        self._released = False
        self.view_state = ViewState(page_size=page_size or query.DEFAULT_PAGE_SIZE)

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None, *, navigate: Optional[Navigate] = None
    ) -> "TaskStore":
        s = settings or get_settings()
        return cls(
            RemoteTaskService.from_settings(s),
            reconcile=s.reconcile,
            page_size=s.page_size,
            navigate=navigate,
        )

    async def __aenter__(self) -> "TaskStore":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        """
        Discard the store. Operations still in flight run to completion but
        their results are dropped; the HTTP client is released once the last
        of them finishes.
        """
        self._closed = True
        if self._in_flight == 0:
            await self._release()

    async def _release(self) -> None:
        if not self._released:
            self._released = True
            await self._service.aclose()

    # ---- read-only state ----

    @property
    def tasks(self) -> Tuple[Task, ...]:
        return self._tasks

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def notification(self) -> Optional[Notification]:
        return self._notifications.peek()

    def consume_notification(self) -> Optional[Notification]:
        """Return the pending notification and clear it."""
        return self._notifications.consume()

    def dismiss_notification(self) -> None:
        self._notifications.dismiss()

    # ---- helpers ----

    @asynccontextmanager
    async def _busy(self) -> AsyncIterator[None]:
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1
            if self._closed and self._in_flight == 0:
                await self._release()

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("TaskStore has been closed")

    def _fail(self, exc: RemoteFailure) -> None:
        if self._closed:
            logger.debug("Ignoring failure after close: %s", exc.message)
            return
        logger.warning("Remote operation failed: %s", exc.message)
        self._error = exc.message
        self._notifications.post(exc.message, is_error=True)

    def _succeed(self, message: str) -> None:
        self._notifications.post(message)

    def _go_home(self) -> None:
        if self._navigate is not None and not self._closed:
            self._navigate(DEFAULT_ROUTE)

    def _patch(self, task: Task) -> None:
        items: List[Task] = list(self._tasks)
        for i, existing in enumerate(items):
            if str(existing.id) == str(task.id):
                items[i] = task
                break
        else:
            items.append(task)
        self._tasks = tuple(items)

    async def _reload(self) -> None:
        tasks = await self._service.list_tasks()
        if self._closed:
            logger.debug("Ignoring task list received after close")
            return
        self._tasks = tuple(tasks)
        self._error = None

    async def _finish_write(self, saved: Optional[Task], message: str) -> None:
        # The write is confirmed at this point; a failed reload is reported on
        # its own and supersedes the success message.
        self._succeed(message)
        if saved is None or self._reconcile == "refetch":
            try:
                await self._reload()
            except RemoteFailure as exc:
                self._fail(exc)
        else:
            self._patch(saved)
        self._go_home()

    # ---- network operations ----

    # PUBLIC_INTERFACE
    async def fetch_all(self) -> None:
        """Replace the collection with the service's current list."""
        self._ensure_open()
        async with self._busy():
            try:
                await self._reload()
            except RemoteFailure as exc:
                self._fail(exc)
                return
        logger.debug("Fetched %d tasks", len(self._tasks))

    # PUBLIC_INTERFACE
    async def create(self, draft: TaskDraft) -> None:
        """Create a task, then navigate back to the default view."""
        self._ensure_open()
        async with self._busy():
            try:
                created = await self._service.create_task(draft)
            except RemoteFailure as exc:
                self._fail(exc)
                return
            if self._closed:
                logger.debug("Ignoring created task received after close")
                return
            logger.debug("Created task %s", created.id if created else "(reloading)")
            await self._finish_write(created, TASK_CREATED)

    # PUBLIC_INTERFACE
    async def get(self, task_id: TaskId) -> Union[Task, NotFound]:
        """
        Fetch one task from the service.

        Returns NOT_FOUND when the service does not know the id; this is not
        reported as an error. Other failures are reported as usual and also
        yield NOT_FOUND.
        """
        self._ensure_open()
        async with self._busy():
            try:
                result = await self._service.get_task(task_id)
            except RemoteFailure as exc:
                self._fail(exc)
                return NOT_FOUND
        if result is NOT_FOUND:
            logger.debug("Task %s not found", task_id)
        return result

    # PUBLIC_INTERFACE
    async def update(self, task_id: TaskId, draft: TaskDraft) -> None:
        """Replace an existing task, then navigate back to the default view."""
        self._ensure_open()
        async with self._busy():
            try:
                updated = await self._service.update_task(task_id, draft)
            except RemoteFailure as exc:
                self._fail(exc)
                return
            if self._closed:
                logger.debug("Ignoring updated task %s received after close", task_id)
                return
            logger.debug("Updated task %s", task_id)
            await self._finish_write(updated, TASK_UPDATED)

    # PUBLIC_INTERFACE
    async def delete(self, task_id: TaskId) -> None:
        """Delete a task; it leaves the collection only once the service confirms."""
        self._ensure_open()
        async with self._busy():
            try:
                await self._service.delete_task(task_id)
            except RemoteFailure as exc:
                self._fail(exc)
                return
            if self._closed:
                logger.debug("Ignoring delete confirmation for %s after close", task_id)
                return
            self._tasks = tuple(t for t in self._tasks if str(t.id) != str(task_id))
            logger.debug("Deleted task %s", task_id)
            self._succeed(TASK_DELETED)

    # ---- derived views ----

    # PUBLIC_INTERFACE
    def derive_view(self, view_state: ViewState) -> PageView:
        """Filter and paginate the current collection. Does not modify the store."""
        return query.derive_view(self._tasks, view_state)

    def current_view(self) -> PageView:
        return self.derive_view(self.view_state)

    def category_counts(self) -> Dict[Category, int]:
        """Task count per category tab under the active search text."""
        return query.category_counts(self._tasks, self.view_state.search)

    def set_search(self, search: str) -> PageView:
        self.view_state = self.view_state.with_search(search)
        return self.current_view()

    def set_category(self, category: Union[Category, str]) -> PageView:
        self.view_state = self.view_state.with_category(category)
        return self.current_view()

    def set_page(self, page: int) -> PageView:
        self.view_state = self.view_state.with_page(page)
        return self.current_view()

    def set_page_size(self, page_size: Union[int, str]) -> PageView:
        self.view_state = self.view_state.with_page_size(page_size)
        return self.current_view()
