"""In-memory board state kept in step with the record service.

The board owns the task and project collections, the derived stats and the
task form. Local collections change only after the record service confirms a
mutation, so a failed request never leaves the board half-updated.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from ulid import ULID

from ..models import (
    Project,
    ProjectForm,
    ProjectSummary,
    Task,
    TaskForm,
    TaskStats,
    TaskStatus,
)
from ..services import DeleteResult, ProjectService, TaskService
from .notifications import NotificationQueue, Notifier

logger = logging.getLogger(__name__)

ALL_PROJECTS = "all"
TITLE_REQUIRED = "Task title is required"


class TaskValidationError(ValueError):
    """Raised when a submitted task form is rejected before any request."""


class FormMode(str, Enum):
    IDLE = "idle"
    CREATE = "create"
    EDIT = "edit"


class BoardView(str, Enum):
    LIST = "list"
    BOARD = "board"


@dataclass(slots=True)
class FormState:
    mode: FormMode = FormMode.IDLE
    editing_id: str | None = None
    error: str | None = None

    @property
    def is_open(self) -> bool:
        return self.mode is not FormMode.IDLE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _merge_record(record: Mapping[str, Any] | None, fallback: Mapping[str, Any]) -> Task:
    """Build a task from a server record, filling fields it left out from ``fallback``."""
    merged = dict(fallback)
    merged.update({key: value for key, value in (record or {}).items() if value is not None})
    return Task.from_record(merged)


class BoardState:
    """Task board state and the user actions that change it."""

    def __init__(
        self,
        task_service: TaskService,
        project_service: ProjectService,
        *,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.task_service = task_service
        self.project_service = project_service
        self.notifier = notifier if notifier is not None else NotificationQueue()
        self._clock = clock

        self.tasks: list[Task] = []
        self.projects: list[Project] = []
        self.stats = TaskStats()
        self.active_project = ALL_PROJECTS
        self.view = BoardView.LIST
        self.form = FormState()
        self.loading = False

        self._pending = 0
        # task id -> token of the newest request touching that task
        self._inflight: dict[str, str] = {}

    # =========================================================================
    # Derived views
    # =========================================================================

    @property
    def busy(self) -> bool:
        """True while any mutation request is in flight."""
        return self._pending > 0

    @property
    def today(self) -> date:
        return self._clock().date()

    @property
    def filtered_tasks(self) -> list[Task]:
        if self.active_project == ALL_PROJECTS:
            return list(self.tasks)
        return [task for task in self.tasks if task.project_id == self.active_project]

    def get_task(self, task_id: str) -> Task | None:
        return next((task for task in self.tasks if task.id == task_id), None)

    def get_project(self, project_id: str) -> Project | None:
        return next((project for project in self.projects if project.id == project_id), None)

    def board_columns(self) -> dict[TaskStatus, list[Task]]:
        """Filtered tasks grouped by status, one column per status."""
        columns: dict[TaskStatus, list[Task]] = {status: [] for status in TaskStatus}
        for task in self.filtered_tasks:
            columns[task.status].append(task)
        return columns

    def project_summaries(self) -> list[ProjectSummary]:
        summaries = []
        for project in self.projects:
            owned = [task for task in self.tasks if task.project_id == project.id]
            summaries.append(
                ProjectSummary(
                    project=project,
                    task_count=len(owned),
                    completed_count=sum(1 for t in owned if t.status is TaskStatus.COMPLETED),
                )
            )
        return summaries

    def select_project(self, project_id: str) -> None:
        """Show all tasks (``"all"``) or only those of one project."""
        self.active_project = project_id or ALL_PROJECTS

    def set_view(self, view: BoardView | str) -> None:
        self.view = BoardView(view)

    # =========================================================================
    # Loading
    # =========================================================================

    async def load(self) -> bool:
        """Replace projects and tasks with the record service's current data."""
        self.loading = True
        try:
            project_records, task_records = await asyncio.gather(
                self.project_service.fetch_all(),
                self.task_service.fetch_all(),
            )
            projects = [Project.from_record(record) for record in project_records]
            tasks = [Task.from_record(record) for record in task_records]
        except Exception:
            logger.exception("Failed to load board")
            self.notifier.error("Failed to load tasks")
            return False
        finally:
            self.loading = False

        self.projects = projects
        self._set_tasks(tasks)
        if self.active_project != ALL_PROJECTS and self.get_project(self.active_project) is None:
            self.active_project = ALL_PROJECTS
        logger.info("Loaded %d projects and %d tasks", len(projects), len(tasks))
        return True

    # =========================================================================
    # Task form
    # =========================================================================

    def open_create_form(self) -> TaskForm:
        self.form = FormState(mode=FormMode.CREATE)
        if self.active_project != ALL_PROJECTS:
            project_id = self.active_project
        else:
            project_id = self.projects[0].id if self.projects else None
        return TaskForm(project_id=project_id)

    def open_edit_form(self, task_id: str) -> TaskForm | None:
        task = self.get_task(task_id)
        if task is None:
            self.notifier.error("Task not found")
            return None
        self.form = FormState(mode=FormMode.EDIT, editing_id=task_id)
        return TaskForm.from_task(task)

    def close_form(self) -> None:
        self.form = FormState()

    async def submit_form(self, form: TaskForm) -> Task | None:
        """Create or update a task from the open form.

        Returns the saved task, or ``None`` when the request failed. A blank
        title raises :class:`TaskValidationError` without sending anything.
        The form stays open in both cases.

        An update overtaken by a newer request for the same task returns the
        task as the board now holds it.
        """
        if not self.form.is_open:
            raise RuntimeError("No task form is open")

        if not form.title.strip():
            self.form.error = TITLE_REQUIRED
            self.notifier.error(TITLE_REQUIRED)
            raise TaskValidationError(TITLE_REQUIRED)
        self.form.error = None

        if self.form.mode is FormMode.CREATE:
            return await self._create_task(form)
        return await self._update_task(self.form.editing_id, form)

    async def _create_task(self, form: TaskForm) -> Task | None:
        fields = form.to_record(status=TaskStatus.TODO)
        self._pending += 1
        try:
            record = await self.task_service.create(fields)
            if record is None:
                raise LookupError("record service returned no created task")
            task = _merge_record(record, fields)
        except Exception:
            logger.exception("Failed to create task %r", form.title)
            self.notifier.error("Failed to create task")
            return None
        finally:
            self._pending -= 1

        self._set_tasks([*self.tasks, task])
        self.close_form()
        self.notifier.success("Task created successfully!")
        return task

    async def _update_task(self, task_id: str, form: TaskForm) -> Task | None:
        fields = form.to_record()
        token = self._claim(task_id)
        self._pending += 1
        try:
            record = await self.task_service.update(task_id, fields)
        except Exception:
            logger.exception("Failed to update task %s", task_id)
            self.notifier.error("Failed to update task")
            return None
        finally:
            self._pending -= 1
            fresh = self._release(task_id, token)

        current = self.get_task(task_id)
        if current is None:
            logger.info("Task %s was removed while its update was in flight", task_id)
            return None
        if not fresh:
            logger.info("Discarding superseded update response for task %s", task_id)
            return current

        fallback = {**current.to_record(), **fields, "ModifiedOn": self._now_iso()}
        task = _merge_record(record, fallback)
        self._replace(task)
        self.close_form()
        self.notifier.success("Task updated successfully!")
        return task

    # =========================================================================
    # Row actions
    # =========================================================================

    async def toggle_status(self, task_id: str) -> Task | None:
        """Flip a task between completed and todo, sending only the status.

        A toggle overtaken by a newer request returns the current local task.
        """
        task = self.get_task(task_id)
        if task is None:
            self.notifier.error("Task not found")
            return None

        new_status = task.status.toggled()
        token = self._claim(task_id)
        self._pending += 1
        try:
            await self.task_service.update(task_id, {"status": new_status.value})
        except Exception:
            logger.exception("Failed to toggle status of task %s", task_id)
            self.notifier.error("Failed to update task status")
            return None
        finally:
            self._pending -= 1
            fresh = self._release(task_id, token)

        current = self.get_task(task_id)
        if current is None:
            return None
        if not fresh:
            logger.info("Discarding superseded status response for task %s", task_id)
            return current
        toggled = current.model_copy(update={"status": new_status, "updated_at": self._now_iso()})
        self._replace(toggled)
        return toggled

    async def delete_task(self, task_id: str) -> bool:
        if self.get_task(task_id) is None:
            self.notifier.error("Task not found")
            return False

        token = self._claim(task_id)
        self._pending += 1
        try:
            deleted = await self.task_service.delete(task_id)
        except Exception:
            logger.exception("Failed to delete task %s", task_id)
            self.notifier.error("Failed to delete task")
            return False
        finally:
            self._pending -= 1
            self._release(task_id, token)

        if not deleted:
            self.notifier.error("Failed to delete task")
            return False

        self._forget(task_id)
        self._set_tasks([task for task in self.tasks if task.id != task_id])
        if self.form.editing_id == task_id:
            self.close_form()
        self.notifier.success("Task deleted successfully!")
        return True

    async def delete_tasks(self, task_ids: Iterable[str]) -> DeleteResult | None:
        """Bulk delete; ids the service deleted are removed, failures reported."""
        ids = list(task_ids)
        if not ids:
            return DeleteResult()

        self._pending += 1
        try:
            result = await self.task_service.delete_many(ids)
        except Exception:
            logger.exception("Failed to delete %d tasks", len(ids))
            self.notifier.error("Failed to delete tasks")
            return None
        finally:
            self._pending -= 1

        removed = set(result.succeeded)
        for task_id in removed:
            self._forget(task_id)
        self._set_tasks([task for task in self.tasks if task.id not in removed])
        if self.form.editing_id in removed:
            self.close_form()

        if result.failed:
            self.notifier.warning(f"Deleted {result.count} tasks, {len(result.failed)} failed")
        else:
            self.notifier.success(f"Deleted {result.count} tasks")
        return result

    # =========================================================================
    # Projects
    # =========================================================================

    async def create_project(self, form: ProjectForm) -> Project | None:
        fields = form.to_record()
        self._pending += 1
        try:
            record = await self.project_service.create(fields)
            if record is None:
                raise LookupError("record service returned no created project")
            project = Project.from_record({**fields, **record})
        except Exception:
            logger.exception("Failed to create project %r", form.name)
            self.notifier.error("Failed to create project")
            return None
        finally:
            self._pending -= 1

        self.projects = [*self.projects, project]
        self.notifier.success("Project created successfully!")
        return project

    async def delete_project(self, project_id: str) -> bool:
        if self.get_project(project_id) is None:
            self.notifier.error("Project not found")
            return False

        self._pending += 1
        try:
            deleted = await self.project_service.delete(project_id)
        except Exception:
            logger.exception("Failed to delete project %s", project_id)
            self.notifier.error("Failed to delete project")
            return False
        finally:
            self._pending -= 1

        if not deleted:
            self.notifier.error("Failed to delete project")
            return False

        self.projects = [project for project in self.projects if project.id != project_id]
        if self.active_project == project_id:
            self.active_project = ALL_PROJECTS
        self.notifier.success("Project deleted successfully!")
        return True

    # =========================================================================
    # Internals
    # =========================================================================

    def _now_iso(self) -> str:
        return self._clock().isoformat()

    def _set_tasks(self, tasks: list[Task]) -> None:
        self.tasks = tasks
        self.stats = TaskStats.from_tasks(tasks, self.today)

    def _replace(self, updated: Task) -> None:
        self._set_tasks([updated if task.id == updated.id else task for task in self.tasks])

    def _claim(self, task_id: str) -> str:
        token = str(ULID())
        self._inflight[task_id] = token
        return token

    def _release(self, task_id: str, token: str) -> bool:
        """Drop ``token`` if it is still the newest for ``task_id``; report whether it was."""
        if self._inflight.get(task_id) != token:
            return False
        del self._inflight[task_id]
        return True

    def _forget(self, task_id: str) -> None:
        self._inflight.pop(task_id, None)
