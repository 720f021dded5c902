"""
Task tracker client core.

This package owns the client-side task collection, keeps it in sync with the
remote task service and derives the filtered, paginated views the
presentation layer renders.
"""

from .logging_setup import setup_logging
from .models import NOT_FOUND, Category, Notification, NotFound, PageView, ViewState
from .remote import RemoteFailure, RemoteTaskService
from .schemas import Task, TaskDraft, TaskPriority, TaskStatus
from .store import TaskStore

__all__ = [
    "NOT_FOUND",
    "Category",
    "Notification",
    "NotFound",
    "PageView",
    "RemoteFailure",
    "RemoteTaskService",
    "Task",
    "TaskDraft",
    "TaskPriority",
    "TaskStatus",
    "TaskStore",
    "ViewState",
    "setup_logging",
]
