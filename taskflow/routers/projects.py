"""Project API router."""

from fastapi import APIRouter, HTTPException, Response, status

from ..models import Project, ProjectForm, ProjectSummary, Task
from .deps import BoardDep

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.get("", response_model=list[ProjectSummary])
def list_projects(board: BoardDep):
    """Get every project with its live task counts."""
    return board.project_summaries()


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(form: ProjectForm, board: BoardDep):
    """Create a new project."""
    project = await board.create_project(form)
    if not project:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to create project",
        )
    return project


@router.get("/{project_id}/tasks", response_model=list[Task])
async def list_project_tasks(project_id: str, board: BoardDep):
    """Query the record service for the tasks of one project."""
    if not board.get_project(project_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    try:
        records = await board.task_service.list_by_project(project_id)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to fetch project tasks",
        ) from exc
    return [Task.from_record(record) for record in records]


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, board: BoardDep):
    """Delete a project."""
    if not board.get_project(project_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    if not await board.delete_project(project_id):
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to delete project",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
