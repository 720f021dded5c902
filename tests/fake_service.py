"""
In-process stand-in for the remote task service.

Implements the JSON contract the client expects (`/tasks` CRUD with `{data}`
envelopes and `{message}` error bodies) on an in-memory dict, plus hooks the
tests use to inject failures, drop response bodies and hold requests open.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from src.tasks.remote import RemoteTaskService
from src.tasks.schemas import TaskDraft

BASE_URL = "http://tasks.test/api"


class FakeTaskService:
    def __init__(self) -> None:
        self._items: Dict[int, Dict[str, Any]] = {}
        self._next_id = 1
        self.failures: Dict[str, Tuple[int, Optional[Dict[str, Any]]]] = {}
        self.requests: List[Tuple[str, str]] = []
        # Respond to POST/PUT with {data: task} (True), a bare task (False), or nothing (None)
        self.write_envelope: Optional[bool] = True
        self.gate: Optional[asyncio.Event] = None
        self.app = self._build_app()

    # ---- test hooks ----

    def seed(self, *names: str, **fields: Any) -> List[Dict[str, Any]]:
        return [self._insert(TaskDraft(name=n, **fields)) for n in names]

    def add(self, draft: TaskDraft) -> Dict[str, Any]:
        return self._insert(draft)

    def fail(self, method: str, status_code: int = 500, message: Optional[str] = "Internal error") -> None:
        body = {"message": message} if message is not None else None
        self.failures[method.upper()] = (status_code, body)

    def clear_failures(self) -> None:
        self.failures.clear()

    def hold(self) -> asyncio.Event:
        """Block every request until the returned event is set."""
        self.gate = asyncio.Event()
        return self.gate

    @property
    def items(self) -> List[Dict[str, Any]]:
        return list(self._items.values())

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.ASGITransport(app=self.app), base_url=BASE_URL)

    def remote(self) -> RemoteTaskService:
        return RemoteTaskService(self.client(), owns_client=True)

    # ---- internals ----

    def _insert(self, draft: TaskDraft) -> Dict[str, Any]:
        task = {"id": self._next_id, **draft.to_payload()}
        self._items[self._next_id] = task
        self._next_id += 1
        return task

    def _lookup(self, task_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self._items.get(int(task_id))
        except ValueError:
            return None

    async def _enter(self, method: str, path: str) -> Optional[Response]:
        self.requests.append((method, path))
        if self.gate is not None:
            await self.gate.wait()
        failure = self.failures.get(method)
        if failure is None:
            return None
        status_code, body = failure
        if body is None:
            return Response(status_code=status_code)
        return JSONResponse(status_code=status_code, content=body)

    def _written(self, task: Dict[str, Any], status_code: int) -> Response:
        if self.write_envelope is None:
            return Response(status_code=status_code)
        content = {"data": task} if self.write_envelope else task
        return JSONResponse(status_code=status_code, content=content)

    def _build_app(self) -> FastAPI:
        app = FastAPI(title="Fake Task Service")

        @app.exception_handler(RequestValidationError)
        async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
            return JSONResponse(status_code=400, content={"message": "Validation failed"})

        @app.get("/api/tasks")
        async def list_tasks() -> Response:
            failed = await self._enter("GET", "/tasks")
            if failed is not None:
                return failed
            return JSONResponse(content={"data": self.items})

        @app.get("/api/tasks/{task_id}")
        async def get_task(task_id: str) -> Response:
            failed = await self._enter("GET", f"/tasks/{task_id}")
            if failed is not None:
                return failed
            task = self._lookup(task_id)
            if task is None:
                return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": "Task not found"})
            return JSONResponse(content={"data": task})

        @app.post("/api/tasks")
        async def create_task(payload: TaskDraft) -> Response:
            failed = await self._enter("POST", "/tasks")
            if failed is not None:
                return failed
            return self._written(self._insert(payload), status.HTTP_201_CREATED)

        @app.put("/api/tasks/{task_id}")
        async def put_task(task_id: str, payload: TaskDraft) -> Response:
            failed = await self._enter("PUT", f"/tasks/{task_id}")
            if failed is not None:
                return failed
            task = self._lookup(task_id)
            if task is None:
                return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": "Task not found"})
            task.update(payload.to_payload())
            return self._written(task, status.HTTP_200_OK)

        @app.delete("/api/tasks/{task_id}")
        async def delete_task(task_id: str) -> Response:
            failed = await self._enter("DELETE", f"/tasks/{task_id}")
            if failed is not None:
                return failed
            task = self._lookup(task_id)
            if task is None:
                return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": "Task not found"})
            del self._items[task["id"]]
            return Response(status_code=status.HTTP_204_NO_CONTENT)

        return app


async def wait_for_requests(service: FakeTaskService, count: int = 1) -> None:
    """Yield to the event loop until the fake service has seen `count` requests."""
    for _ in range(1000):
        if len(service.requests) >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"expected {count} request(s), saw {service.requests}")
