"""Board selection, refresh and notification endpoints."""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from ..models import TaskStats
from ..state import ALL_PROJECTS, BoardView, FormMode
from .deps import BoardDep, NotificationsDep

router = APIRouter(prefix="/api/board", tags=["board"])


class BoardSnapshot(BaseModel):
    """Response model for the board's UI state."""

    active_project: str
    view: BoardView
    form_mode: FormMode
    form_error: str | None
    busy: bool
    loading: bool
    stats: TaskStats


class ProjectSelection(BaseModel):
    project_id: str = ALL_PROJECTS


class ViewSelection(BaseModel):
    view: BoardView


class NotificationResponse(BaseModel):
    level: str
    message: str


def _snapshot(board) -> BoardSnapshot:
    return BoardSnapshot(
        active_project=board.active_project,
        view=board.view,
        form_mode=board.form.mode,
        form_error=board.form.error,
        busy=board.busy,
        loading=board.loading,
        stats=board.stats,
    )


@router.get("", response_model=BoardSnapshot)
def get_board_state(board: BoardDep):
    return _snapshot(board)


@router.put("/project", response_model=BoardSnapshot)
def select_project(selection: ProjectSelection, board: BoardDep):
    """Choose which project's tasks are listed."""
    if selection.project_id != ALL_PROJECTS and not board.get_project(selection.project_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    board.select_project(selection.project_id)
    return _snapshot(board)


@router.put("/view", response_model=BoardSnapshot)
def select_view(selection: ViewSelection, board: BoardDep):
    board.set_view(selection.view)
    return _snapshot(board)


@router.post("/refresh", response_model=BoardSnapshot)
async def refresh_board(board: BoardDep):
    """Reload projects and tasks from the record service."""
    if not await board.load():
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load tasks",
        )
    return _snapshot(board)


@router.get("/notifications", response_model=list[NotificationResponse])
def drain_notifications(notifications: NotificationsDep):
    """Return pending notifications and clear them."""
    return [
        NotificationResponse(level=item.level.value, message=item.message)
        for item in notifications.drain()
    ]
