from typing import AsyncIterator, List

import pytest
import pytest_asyncio

from src.tasks.store import TaskStore
from tests.fake_service import FakeTaskService


@pytest.fixture
def service() -> FakeTaskService:
    return FakeTaskService()


@pytest.fixture
def routes() -> List[str]:
    """Records every route the store asks to navigate to."""
    return []


@pytest_asyncio.fixture
async def store(service: FakeTaskService, routes: List[str]) -> AsyncIterator[TaskStore]:
    s = TaskStore(service.remote(), navigate=routes.append)
    yield s
    if not s.closed:
        await s.close()

