import logging
import uuid

from sqlalchemy.orm import Session

from app.database import atomic
from app.errors import ConflictError, NotFoundError, UnauthorizedError
from app.models.project import Project
from app.models.task import Task
from app.services import vacancy
from app.services.membership_service import get_profile, owned_project
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)

TODO = "TODO"
DOING = "DOING"
DONE = "DONE"
COMPLETE = "COMPLETE"

# (current status, action) -> next status
TASK_TRANSITIONS = {
    (TODO, "advance"): DOING,
    (DOING, "advance"): DONE,
    (DONE, "return"): DOING,
    (DONE, "close"): COMPLETE,
}


def _next_status(task: Task, action: str) -> str:
    try:
        return TASK_TRANSITIONS[(task.status, action)]
    except KeyError:
        raise ConflictError(f"cannot {action} a task that is {task.status}") from None


def _member_project(db: Session, user_id: str) -> Project:
    profile = get_profile(db, user_id)
    if profile.current_job is None:
        raise UnauthorizedError("user not part of project")
    return profile.current_job


def _find_task(project: Project, task_id: str) -> Task:
    for task in project.tasks:
        if task.id == task_id:
            return task
    raise NotFoundError("Task not found")


def list_tasks(db: Session, user_id: str) -> list[Task]:
    return list(_member_project(db, user_id).tasks)


def create_task(db: Session, owner_id: str, developer_id: str, title: str, description: str) -> Task:
    with atomic(db):
        project = owned_project(db, owner_id)
        if vacancy.member_slot(project.members, developer_id) is None:
            raise NotFoundError("user is not a member of this project")
        now = utcnow()
        task = Task(
            id=str(uuid.uuid4()),
            developer_id=developer_id,
            title=title,
            description=description,
            status=TODO,
            created_at=now,
            updated_at=now,
        )
        project.tasks.append(task)
    logger.info("Task %s assigned to %s on project %s", task.id, developer_id, project.id)
    return task


def advance_task(db: Session, developer_id: str, task_id: str) -> Task:
    with atomic(db):
        task = _find_task(_member_project(db, developer_id), task_id)
        if task.developer_id != developer_id:
            raise UnauthorizedError("only the assignee may advance a task")
        task.status = _next_status(task, "advance")
        task.updated_at = utcnow()
    return task


def return_task(db: Session, owner_id: str, task_id: str, note: str) -> Task:
    with atomic(db):
        task = _find_task(owned_project(db, owner_id), task_id)
        task.status = _next_status(task, "return")
        task.note = note
        task.updated_at = utcnow()
    return task


def close_task(db: Session, owner_id: str, task_id: str) -> Task:
    with atomic(db):
        task = _find_task(owned_project(db, owner_id), task_id)
        task.status = _next_status(task, "close")
        task.updated_at = utcnow()
    return task
