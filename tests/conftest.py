from datetime import datetime, timezone

import pytest

from taskflow.services import ProjectService, TaskService
from taskflow.state import BoardState, NotificationQueue

from .fakes import FakeRecordClient


class FixedClock:
    """Clock the tests can move by hand."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def fake_client() -> FakeRecordClient:
    return FakeRecordClient()


@pytest.fixture()
def task_service(fake_client: FakeRecordClient) -> TaskService:
    return TaskService(fake_client, page_size=100)


@pytest.fixture()
def project_service(fake_client: FakeRecordClient) -> ProjectService:
    return ProjectService(fake_client, page_size=50)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture()
def notifications() -> NotificationQueue:
    return NotificationQueue()


@pytest.fixture()
def board(
    task_service: TaskService,
    project_service: ProjectService,
    notifications: NotificationQueue,
    clock: FixedClock,
) -> BoardState:
    return BoardState(task_service, project_service, notifier=notifications, clock=clock)


@pytest.fixture()
def seeded(fake_client: FakeRecordClient) -> FakeRecordClient:
    """
    Two projects and three tasks:

    - project 1 "Website Redesign": task 3 (in-progress, overdue), task 4 (todo)
    - project 2 "Mobile App": task 5 (completed, past due but not overdue)
    """
    fake_client.seed("project", Name="Website Redesign", color="#6366f1", Tags="web")
    fake_client.seed("project", Name="Mobile App", color="#10b981")
    fake_client.seed(
        "task",
        Name="Design new landing page",
        title="Design new landing page",
        priority="high",
        status="in-progress",
        due_date="2024-06-10",
        project_id=1,
        Tags="design,ui/ux",
    )
    fake_client.seed(
        "task",
        Name="Review pull requests",
        title="Review pull requests",
        priority="medium",
        status="todo",
        due_date="2024-06-16",
        project_id=1,
        Tags="development,review",
    )
    fake_client.seed(
        "task",
        Name="Ship beta",
        title="Ship beta",
        priority="urgent",
        status="completed",
        due_date="2024-06-01",
        project_id={"Id": 2, "Name": "Mobile App"},
    )
    fake_client.calls.clear()
    return fake_client
