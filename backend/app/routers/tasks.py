from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_user
from app.models.task import Task
from app.schemas.task import TaskCreate, TaskResponse, TaskReturn
from app.services import task_service

router = APIRouter(prefix="/project/tasks", tags=["tasks"])


def _task_to_response(task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        project_id=task.project_id,
        developer_id=task.developer_id,
        title=task.title,
        description=task.description,
        note=task.note,
        status=task.status,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


@router.get("", response_model=list[TaskResponse])
async def list_tasks(user_id: str = Depends(require_user), db: Session = Depends(get_db)):
    return [_task_to_response(t) for t in task_service.list_tasks(db, user_id)]


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(req: TaskCreate, user_id: str = Depends(require_user), db: Session = Depends(get_db)):
    if not req.title.strip():
        raise HTTPException(status_code=400, detail="title is required")
    if not req.description.strip():
        raise HTTPException(status_code=400, detail="description is required")
    task = task_service.create_task(db, user_id, req.developer_id, req.title.strip(), req.description)
    return _task_to_response(task)


@router.put("/{task_id}/advance", response_model=TaskResponse)
async def advance_task(task_id: str, user_id: str = Depends(require_user), db: Session = Depends(get_db)):
    return _task_to_response(task_service.advance_task(db, user_id, task_id))


@router.put("/{task_id}/return", response_model=TaskResponse)
async def return_task(
    task_id: str,
    req: TaskReturn,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    if not req.note.strip():
        raise HTTPException(status_code=400, detail="note is required")
    return _task_to_response(task_service.return_task(db, user_id, task_id, req.note))


@router.put("/{task_id}/close", response_model=TaskResponse)
async def close_task(task_id: str, user_id: str = Depends(require_user), db: Session = Depends(get_db)):
    return _task_to_response(task_service.close_task(db, user_id, task_id))
