from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_user
from app.models.project import Project
from app.schemas.project import (
    ApplyRequest,
    MemberResponse,
    PendingClaimResponse,
    ProjectCreate,
    ProjectResponse,
    RoleCreate,
)
from app.services import membership_service, vacancy

router = APIRouter(prefix="/project", tags=["projects"])


def _claim_to_response(claim) -> PendingClaimResponse:
    return PendingClaimResponse(
        developer_id=claim.developer_id,
        developer_name=claim.developer.name if claim.developer else None,
        role=claim.role,
        created_at=claim.created_at,
    )


def project_to_response(project: Project) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        owner_id=project.owner_id,
        title=project.title,
        description=project.description,
        status=project.status,
        members=[
            MemberResponse(
                id=m.id,
                role=m.role,
                vacancy=m.vacancy,
                developer_id=m.developer_id,
                developer_name=m.developer.name if m.developer else None,
            )
            for m in project.members
        ],
        open_roles=vacancy.open_roles(project.members),
        applicants=[_claim_to_response(c) for c in project.applicants],
        offered=[_claim_to_response(c) for c in project.offered],
        task_count=len(project.tasks),
        post_count=len(project.posts),
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


def _clean_role(role: str) -> str:
    role = role.strip()
    if not role:
        raise HTTPException(status_code=400, detail="role is required")
    if role == vacancy.LEADER_ROLE:
        raise HTTPException(status_code=400, detail=f"{vacancy.LEADER_ROLE} is a reserved role")
    return role


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    req: ProjectCreate,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    if not req.title.strip():
        raise HTTPException(status_code=400, detail="title is required")
    if not req.description.strip():
        raise HTTPException(status_code=400, detail="description is required")
    roles = [_clean_role(r) for r in req.roles if r.strip()]
    if not roles:
        raise HTTPException(status_code=400, detail="team roles are required")
    project = membership_service.create_project(
        db, user_id, req.title.strip(), req.description.strip(), roles
    )
    return project_to_response(project)


@router.post("/leave")
async def leave_project(user_id: str = Depends(require_user), db: Session = Depends(get_db)):
    membership_service.leave(db, user_id)
    return {"message": "Left project"}


@router.post("/close", response_model=ProjectResponse)
async def close_project(user_id: str = Depends(require_user), db: Session = Depends(get_db)):
    return project_to_response(membership_service.close_project(db, user_id))


@router.post("/roles", response_model=ProjectResponse, status_code=201)
async def add_role(req: RoleCreate, user_id: str = Depends(require_user), db: Session = Depends(get_db)):
    return project_to_response(membership_service.add_role(db, user_id, _clean_role(req.role)))


@router.put("/applicants/{developer_id}/accept", response_model=ProjectResponse)
async def accept_application(
    developer_id: str,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    return project_to_response(membership_service.accept_application(db, user_id, developer_id))


@router.delete("/applicants/{developer_id}/reject", response_model=ProjectResponse)
async def reject_applicant(
    developer_id: str,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    return project_to_response(membership_service.reject_applicant(db, user_id, developer_id))


@router.delete("/offered/{developer_id}/cancel", response_model=ProjectResponse)
async def cancel_offer(
    developer_id: str,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    return project_to_response(membership_service.cancel_offer(db, user_id, developer_id))


@router.delete("/members/{developer_id}", response_model=ProjectResponse)
async def remove_member(
    developer_id: str,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    return project_to_response(membership_service.remove_member(db, user_id, developer_id))


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: str, _user: str = Depends(require_user), db: Session = Depends(get_db)):
    return project_to_response(membership_service.get_project(db, project_id))


@router.put("/{project_id}/apply", response_model=ProjectResponse)
async def apply_to_project(
    project_id: str,
    req: ApplyRequest,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    project = membership_service.apply(db, user_id, project_id, _clean_role(req.role))
    return project_to_response(project)
