from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.dependencies import require_user
from app.routers.profile import public_fields
from app.routers.projects import project_to_response
from app.schemas.profile import ProfileListResponse, PublicProfileResponse
from app.schemas.project import ProjectListResponse
from app.services import find_service

router = APIRouter(prefix="/find", tags=["find"])


@router.get("/user", response_model=ProfileListResponse)
async def find_developers(
    role: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    per_page = settings.find_page_size
    profiles, total = find_service.find_developers(db, user_id, role.strip(), page, per_page)
    return ProfileListResponse(
        profiles=[PublicProfileResponse(**public_fields(p)) for p in profiles],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/projects", response_model=ProjectListResponse)
async def find_projects(
    skills: str = Query(...),
    page: int = Query(1, ge=1),
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    wanted = [s.strip() for s in skills.split(",") if s.strip()]
    if not wanted:
        raise HTTPException(status_code=400, detail="skills are required")
    per_page = settings.find_page_size
    projects, total = find_service.find_projects(db, user_id, wanted, page, per_page)
    return ProjectListResponse(
        projects=[project_to_response(p) for p in projects],
        total=total,
        page=page,
        per_page=per_page,
    )
