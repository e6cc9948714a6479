import asyncio
from datetime import date

import pytest

from taskflow.db import RecordClientError
from taskflow.models import ProjectForm, TaskForm, TaskStats, TaskStatus
from taskflow.state import (
    ALL_PROJECTS,
    TITLE_REQUIRED,
    BoardView,
    FormMode,
    NotificationLevel,
    TaskValidationError,
)


def _snapshot(board):
    return [task.model_dump() for task in board.tasks]


def _levels(notifications):
    return [item.level for item in notifications.drain()]


@pytest.mark.asyncio
async def test_load_builds_collections_and_stats(board, seeded) -> None:
    assert await board.load() is True

    assert [task.id for task in board.tasks] == ["5", "4", "3"]
    assert [project.name for project in board.projects] == ["Mobile App", "Website Redesign"]
    assert board.stats == TaskStats(total=3, completed=1, in_progress=1, overdue=1)
    assert board.loading is False


@pytest.mark.asyncio
async def test_load_tolerates_unreadable_due_date(board, seeded) -> None:
    seeded.seed("task", title="Someday", status="todo", due_date="someday")

    assert await board.load() is True

    assert board.tasks[0].title == "Someday"
    assert board.tasks[0].due_date is None


@pytest.mark.asyncio
async def test_load_failure_keeps_previous_state(board, seeded, notifications) -> None:
    await board.load()
    before = _snapshot(board)
    notifications.drain()
    seeded.fail_with = RecordClientError("down")

    assert await board.load() is False

    assert _snapshot(board) == before
    assert _levels(notifications) == [NotificationLevel.ERROR]


@pytest.mark.asyncio
async def test_select_project_filters_tasks(board, seeded) -> None:
    await board.load()

    board.select_project("1")
    assert {task.id for task in board.filtered_tasks} == {"3", "4"}

    board.select_project("2")
    assert [task.id for task in board.filtered_tasks] == ["5"]

    board.select_project(ALL_PROJECTS)
    assert board.filtered_tasks == board.tasks


@pytest.mark.asyncio
async def test_board_columns_group_by_status(board, seeded) -> None:
    await board.load()
    board.set_view("board")

    columns = board.board_columns()

    assert board.view is BoardView.BOARD
    assert [task.id for task in columns[TaskStatus.TODO]] == ["4"]
    assert [task.id for task in columns[TaskStatus.IN_PROGRESS]] == ["3"]
    assert [task.id for task in columns[TaskStatus.COMPLETED]] == ["5"]


@pytest.mark.asyncio
async def test_project_summaries_count_live_tasks(board, seeded) -> None:
    await board.load()
    await board.toggle_status("4")

    counts = {s.project.id: (s.task_count, s.completed_count) for s in board.project_summaries()}

    assert counts == {"1": (2, 1), "2": (1, 1)}


@pytest.mark.asyncio
async def test_create_task_from_form(board, seeded, clock, notifications) -> None:
    await board.load()
    board.open_create_form()

    task = await board.submit_form(
        TaskForm(
            title="Write release notes",
            priority="high",
            due_date=clock.now.date().isoformat(),
            project_id="1",
            tags="draft, urgent",
        )
    )

    assert task is not None
    assert task.tags == ["draft", "urgent"]
    assert task.status is TaskStatus.TODO
    assert task.project_id == "1"
    assert board.tasks[-1] == task
    assert board.stats.total == 4
    assert board.form.mode is FormMode.IDLE

    sent = seeded.calls_of("create")[0]["records"][0]
    assert sent["status"] == "todo"
    assert sent["Tags"] == "draft,urgent"
    assert sent["project_id"] == 1
    assert NotificationLevel.SUCCESS in _levels(notifications)


@pytest.mark.asyncio
async def test_create_form_defaults_to_active_project(board, seeded) -> None:
    await board.load()
    board.select_project("2")

    form = board.open_create_form()

    assert form.project_id == "2"
    assert board.form.mode is FormMode.CREATE


@pytest.mark.asyncio
@pytest.mark.parametrize("title", ["", "   "])
async def test_blank_title_never_reaches_the_service(board, seeded, notifications, title) -> None:
    await board.load()
    before = _snapshot(board)
    board.open_create_form()

    with pytest.raises(TaskValidationError, match=TITLE_REQUIRED):
        await board.submit_form(TaskForm(title=title))

    assert seeded.calls_of("create") == []
    assert _snapshot(board) == before
    assert board.form.mode is FormMode.CREATE
    assert board.form.error == TITLE_REQUIRED
    assert notifications.pending()[-1].message == TITLE_REQUIRED


@pytest.mark.asyncio
async def test_failed_create_leaves_tasks_unchanged(board, seeded, notifications) -> None:
    await board.load()
    before = _snapshot(board)
    notifications.drain()
    seeded.fail_with = RecordClientError("timeout")
    board.open_create_form()

    assert await board.submit_form(TaskForm(title="Doomed")) is None

    assert _snapshot(board) == before
    assert board.busy is False
    assert board.form.mode is FormMode.CREATE
    assert board.form.error is None
    assert _levels(notifications) == [NotificationLevel.ERROR]


@pytest.mark.asyncio
async def test_update_task_from_edit_form(board, seeded) -> None:
    await board.load()
    form = board.open_edit_form("4")
    form = form.model_copy(update={"title": "Review all pull requests", "tags": "review"})

    task = await board.submit_form(form)

    assert task.title == "Review all pull requests"
    assert task.tags == ["review"]
    assert task.status is TaskStatus.TODO
    assert board.get_task("4") == task
    assert board.form.mode is FormMode.IDLE
    assert seeded.calls_of("update")[0]["records"][0]["Id"] == 4


@pytest.mark.asyncio
async def test_failed_update_keeps_form_open_and_tasks_unchanged(board, seeded) -> None:
    await board.load()
    before = _snapshot(board)
    form = board.open_edit_form("4")
    seeded.fail_with = RecordClientError("timeout")

    assert await board.submit_form(form.model_copy(update={"title": "Changed"})) is None

    assert _snapshot(board) == before
    assert board.form.mode is FormMode.EDIT
    assert board.form.editing_id == "4"


@pytest.mark.asyncio
async def test_submit_without_open_form_is_an_error(board) -> None:
    with pytest.raises(RuntimeError):
        await board.submit_form(TaskForm(title="x"))


@pytest.mark.asyncio
async def test_open_edit_form_for_unknown_task(board, seeded) -> None:
    await board.load()

    assert board.open_edit_form("404") is None
    assert board.form.mode is FormMode.IDLE


@pytest.mark.asyncio
async def test_toggle_sends_only_status_and_refreshes_timestamp(board, seeded, clock) -> None:
    await board.load()

    task = await board.toggle_status("4")

    assert task.status is TaskStatus.COMPLETED
    assert task.updated_at == clock.now.isoformat()
    assert board.get_task("4").status is TaskStatus.COMPLETED
    assert seeded.calls_of("update") == [{"records": [{"Id": 4, "status": "completed"}]}]
    assert board.stats.completed == 2


@pytest.mark.asyncio
async def test_toggling_twice_restores_status(board, seeded) -> None:
    await board.load()
    original = board.get_task("4")

    await board.toggle_status("4")
    restored = await board.toggle_status("4")

    assert restored.status is original.status
    assert restored.model_dump(exclude={"updated_at"}) == original.model_dump(exclude={"updated_at"})


@pytest.mark.asyncio
async def test_failed_toggle_leaves_tasks_unchanged(board, seeded, notifications) -> None:
    await board.load()
    before = _snapshot(board)
    notifications.drain()
    seeded.fail_with = RecordClientError("timeout")

    assert await board.toggle_status("4") is None

    assert _snapshot(board) == before
    assert board.busy is False
    assert _levels(notifications) == [NotificationLevel.ERROR]


@pytest.mark.asyncio
async def test_delete_task(board, seeded) -> None:
    await board.load()

    assert await board.delete_task("3") is True

    assert board.get_task("3") is None
    assert board.stats.total == 2
    assert board.stats.overdue == 0


@pytest.mark.asyncio
async def test_failed_delete_leaves_tasks_unchanged(board, seeded) -> None:
    await board.load()
    before = _snapshot(board)
    seeded.batch_success = False

    assert await board.delete_task("3") is False

    assert _snapshot(board) == before


@pytest.mark.asyncio
async def test_deleting_edited_task_closes_form(board, seeded) -> None:
    await board.load()
    board.open_edit_form("3")

    await board.delete_task("3")

    assert board.form.mode is FormMode.IDLE


@pytest.mark.asyncio
async def test_delete_tasks_removes_only_confirmed_ids(board, seeded, notifications) -> None:
    await board.load()
    del seeded.tables["task"][5]
    notifications.drain()

    result = await board.delete_tasks(["3", "5"])

    assert result.count == 1
    assert [task.id for task in board.tasks] == ["5", "4"]
    assert _levels(notifications) == [NotificationLevel.WARNING]


@pytest.mark.asyncio
async def test_busy_while_request_in_flight(board, seeded) -> None:
    await board.load()
    observed = []

    async def record_busy(op, table, params):
        observed.append(board.busy)

    seeded.before_call = record_busy

    await board.toggle_status("4")

    assert observed == [True]
    assert board.busy is False


@pytest.mark.asyncio
async def test_superseded_update_returns_current_task(board, seeded) -> None:
    await board.load()
    entered = asyncio.Event()
    release = asyncio.Event()

    async def hold_first_update(op, table, params):
        if op == "update" and params["records"][0].get("title") == "First edit":
            entered.set()
            await release.wait()

    seeded.before_call = hold_first_update

    form = board.open_edit_form("4")
    first = asyncio.create_task(board.submit_form(form.model_copy(update={"title": "First edit"})))
    await entered.wait()

    form = board.open_edit_form("4")
    second = await board.submit_form(form.model_copy(update={"title": "Second edit"}))
    release.set()

    assert (await first).title == "Second edit"
    assert second.title == "Second edit"
    assert board.get_task("4").title == "Second edit"
    assert board.busy is False


@pytest.mark.asyncio
async def test_overdue_follows_the_clock(board, seeded, clock) -> None:
    clock.now = clock.now.replace(year=2024, month=6, day=20)

    await board.load()

    assert board.today == date(2024, 6, 20)
    assert board.stats.overdue == 2


@pytest.mark.asyncio
async def test_create_and_delete_project(board, seeded) -> None:
    await board.load()

    project = await board.create_project(ProjectForm(name="Marketing Campaign", color="#f59e0b"))
    assert project.name == "Marketing Campaign"
    assert project.color == "#f59e0b"
    assert board.get_project(project.id) == project

    board.select_project(project.id)
    assert await board.delete_project(project.id) is True
    assert board.get_project(project.id) is None
    assert board.active_project == ALL_PROJECTS


@pytest.mark.asyncio
async def test_failed_project_create_leaves_projects_unchanged(board, seeded) -> None:
    await board.load()
    before = list(board.projects)
    seeded.fail_with = RecordClientError("down")

    assert await board.create_project(ProjectForm(name="Nope")) is None
    assert board.projects == before
