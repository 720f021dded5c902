from __future__ import annotations

import logging
from typing import Any, List, Optional, Union

import httpx
from pydantic import ValidationError

from .models import NOT_FOUND, NotFound
from .schemas import Task, TaskDraft, TaskId
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

FETCH_TASKS_FAILED = "Failed to fetch tasks"
FETCH_TASK_FAILED = "Failed to fetch task"
CREATE_TASK_FAILED = "Failed to create task"
UPDATE_TASK_FAILED = "Failed to update task"
DELETE_TASK_FAILED = "Failed to delete task"


# PUBLIC_INTERFACE
class RemoteFailure(Exception):
    """
    Any failure talking to the remote task service.

    The message is the one supplied by the service when it sent one, otherwise
    a generic description of the operation that failed. Callers must treat it
    as opaque text.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return fallback


def _unwrap(body: Any) -> Any:
    """Accept both `{data: ...}` envelopes and bare payloads."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


# PUBLIC_INTERFACE
class RemoteTaskService:
    """
    Async client for the remote task service JSON API.

    Endpoints (relative to the configured base URL):
    - GET /tasks -> {data: Task[]}
    - GET /tasks/{id} -> {data: Task}, non-2xx when unknown
    - POST /tasks, PUT /tasks/{id} -> the saved Task; non-2xx carries {message}
    - DELETE /tasks/{id} -> 2xx; non-2xx carries {message}

    Every method raises RemoteFailure and nothing else for network, HTTP or
    payload problems.
    """

    def __init__(self, client: httpx.AsyncClient, *, owns_client: bool = False) -> None:
        self._client = client
        self._owns_client = owns_client

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "RemoteTaskService":
        """Build a service with its own HTTP client configured from settings."""
        s = settings or get_settings()
        client = httpx.AsyncClient(
            base_url=s.api_url,
            timeout=s.timeout,
            auth=s.basic_auth,
            headers={"Accept": "application/json"},
        )
        return cls(client, owns_client=True)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _send(self, method: str, url: str, fallback: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise RemoteFailure(fallback) from exc
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response

    async def _request(self, method: str, url: str, fallback: str, **kwargs: Any) -> httpx.Response:
        response = await self._send(method, url, fallback, **kwargs)
        if not response.is_success:
            raise RemoteFailure(_error_message(response, fallback))
        return response

    @staticmethod
    def _json(response: httpx.Response, fallback: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteFailure(fallback) from exc

    @staticmethod
    def _optional_task(response: httpx.Response) -> Optional[Task]:
        if not response.content:
            return None
        try:
            return Task.model_validate(_unwrap(response.json()))
        except (ValueError, ValidationError):
            logger.debug("Response to %s carried no task record", response.request.url)
            return None

    # PUBLIC_INTERFACE
    async def list_tasks(self) -> List[Task]:
        response = await self._request("GET", "/tasks", FETCH_TASKS_FAILED)
        data = _unwrap(self._json(response, FETCH_TASKS_FAILED))
        if not isinstance(data, list):
            raise RemoteFailure(FETCH_TASKS_FAILED)
        try:
            return [Task.model_validate(item) for item in data]
        except ValidationError as exc:
            logger.warning("Service returned malformed tasks: %s", exc)
            raise RemoteFailure(FETCH_TASKS_FAILED) from exc

    # PUBLIC_INTERFACE
    async def get_task(self, task_id: TaskId) -> Union[Task, NotFound]:
        """Return the task, or NOT_FOUND when the service answers with a non-2xx status."""
        response = await self._send("GET", f"/tasks/{task_id}", FETCH_TASK_FAILED)
        if not response.is_success:
            return NOT_FOUND
        try:
            return Task.model_validate(_unwrap(self._json(response, FETCH_TASK_FAILED)))
        except ValidationError as exc:
            raise RemoteFailure(FETCH_TASK_FAILED) from exc

    # PUBLIC_INTERFACE
    async def create_task(self, draft: TaskDraft) -> Optional[Task]:
        """Create a task. Returns the created record, or None if the response carried none."""
        response = await self._request("POST", "/tasks", CREATE_TASK_FAILED, json=draft.to_payload())
        return self._optional_task(response)

    # PUBLIC_INTERFACE
    async def update_task(self, task_id: TaskId, draft: TaskDraft) -> Optional[Task]:
        """Replace a task. Returns the updated record, or None if the response carried none."""
        response = await self._request(
            "PUT", f"/tasks/{task_id}", UPDATE_TASK_FAILED, json=draft.to_payload()
        )
        return self._optional_task(response)

    # PUBLIC_INTERFACE
    async def delete_task(self, task_id: TaskId) -> None:
        await self._request("DELETE", f"/tasks/{task_id}", DELETE_TASK_FAILED)
