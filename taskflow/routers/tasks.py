"""Task API router."""

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel

from ..models import Task, TaskForm, TaskListResponse, TaskStats, TaskStatus
from ..state import BoardState, TaskValidationError
from .deps import BoardDep

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


class BulkDeleteRequest(BaseModel):
    """Request model for deleting several tasks."""

    ids: list[str]


class BulkDeleteResponse(BaseModel):
    """Response model for a bulk delete."""

    count: int
    succeeded: list[str]
    failed: list[str]


# =============================================================================
# Helper Functions
# =============================================================================


def _remote_failure(board: BoardState, task_id: str | None, message: str) -> HTTPException:
    if task_id is not None and board.get_task(task_id) is None:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found",
        )
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=message)


async def _submit(board: BoardState, form: TaskForm) -> Task | None:
    try:
        return await board.submit_form(form)
    except TaskValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


def _require_task(board: BoardState, task_id: str) -> Task:
    task = board.get_task(task_id)
    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found",
        )
    return task


# =============================================================================
# Read Endpoints - Must be defined BEFORE /{task_id} routes
# =============================================================================


@router.get("", response_model=TaskListResponse)
def list_tasks(board: BoardDep):
    """Get the tasks of the selected project (or all tasks)."""
    tasks = board.filtered_tasks
    return TaskListResponse(tasks=tasks, count=len(tasks))


@router.get("/stats", response_model=TaskStats)
def get_stats(board: BoardDep):
    """Get counts over every task on the board."""
    return board.stats


@router.get("/columns", response_model=dict[TaskStatus, list[Task]])
def get_columns(board: BoardDep):
    """Get the selected tasks grouped by status."""
    return board.board_columns()


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete_tasks(payload: BulkDeleteRequest, board: BoardDep):
    """Delete several tasks, reporting which ones failed."""
    result = await board.delete_tasks(payload.ids)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to delete tasks",
        )
    return BulkDeleteResponse(
        count=result.count,
        succeeded=result.succeeded,
        failed=[str(failure.record_id) for failure in result.failed],
    )


# =============================================================================
# REST API Endpoints (JSON)
# =============================================================================


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(form: TaskForm, board: BoardDep):
    """Create a new task."""
    board.open_create_form()
    task = await _submit(board, form)
    if not task:
        raise _remote_failure(board, None, "Failed to create task")
    return task


@router.get("/{task_id}", response_model=Task)
def get_task(task_id: str, board: BoardDep):
    """Get a task by ID."""
    return _require_task(board, task_id)


@router.patch("/{task_id}", response_model=Task)
async def update_task(task_id: str, changes: TaskForm, board: BoardDep):
    """Update the fields sent in the request body."""
    _require_task(board, task_id)
    current = board.open_edit_form(task_id)
    form = current.model_copy(update=changes.model_dump(exclude_unset=True))
    task = await _submit(board, form)
    if not task:
        raise _remote_failure(board, task_id, "Failed to update task")
    return task


@router.post("/{task_id}/toggle", response_model=Task)
async def toggle_task(task_id: str, board: BoardDep):
    """Mark a task completed, or back to todo if it already is."""
    _require_task(board, task_id)
    task = await board.toggle_status(task_id)
    if not task:
        raise _remote_failure(board, task_id, "Failed to update task status")
    return task


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, board: BoardDep):
    """Delete a task."""
    _require_task(board, task_id)
    if not await board.delete_task(task_id):
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to delete task",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
