
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_user
from app.models.profile import Profile
from app.routers.projects import project_to_response
from app.schemas.profile import (
    ClaimResponse,
    EducationCreate,
    EducationResponse,
    HistoryResponse,
    ProfileResponse,
    ProfileUpsert,
    PublicProfileResponse,
    SocialLinks,
)
from app.schemas.project import ProjectResponse
from app.services import github_service, membership_service, profile_service

router = APIRouter(prefix="/profile", tags=["profile"])

_SOCIAL_FIELDS = ("youtube", "twitter", "facebook", "linkedin", "instagram")
_PROFILE_FIELDS = ("website", "location", "bio", "githubusername") + _SOCIAL_FIELDS


def _claim_to_response(claim) -> ClaimResponse:
    return ClaimResponse(
        project_id=claim.project_id,
        project_title=claim.project.title,
        role=claim.role,
        created_at=claim.created_at,
    )


def public_fields(profile: Profile) -> dict:
    return dict(
        id=profile.id,
        user_id=profile.user_id,
        name=profile.user.name,
        avatar=profile.user.avatar,
        skills=profile.skills,
        current_job=profile.current_job_id,
        website=profile.website,
        location=profile.location,
        bio=profile.bio,
        githubusername=profile.githubusername,
        social=SocialLinks(**{f: getattr(profile, f) for f in _SOCIAL_FIELDS}),
        education=[
            EducationResponse(
                id=e.id,
                school=e.school,
                degree=e.degree,
                fieldofstudy=e.fieldofstudy,
                from_date=e.from_date,
                to_date=e.to_date,
                current=e.current,
                description=e.description,
            )
            for e in profile.education
        ],
        projects=[
            HistoryResponse(project_id=h.project_id, title=h.title, role=h.role, joined_at=h.joined_at)
            for h in profile.history
        ],
    )


def profile_to_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        **public_fields(profile),
        offers=[_claim_to_response(c) for c in profile.offers],
        applied=[_claim_to_response(c) for c in profile.applied],
    )


def _parse_skills(raw: str) -> list[str]:
    skills: list[str] = []
    for skill in raw.split(","):
        skill = skill.strip()
        if skill and skill not in skills:
            skills.append(skill)
    return skills


@router.get("/me", response_model=ProfileResponse)
async def my_profile(user_id: str = Depends(require_user), db: Session = Depends(get_db)):
    return profile_to_response(membership_service.get_profile(db, user_id))


@router.post("", response_model=ProfileResponse)
async def upsert_profile(
    req: ProfileUpsert,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    skills = _parse_skills(req.skills)
    if not skills:
        raise HTTPException(status_code=400, detail="Skills is required")

    fields = {field: getattr(req, field) for field in _PROFILE_FIELDS}
    profile = profile_service.upsert_profile(db, user_id, skills, fields)
    return profile_to_response(profile)


@router.delete("")
async def delete_account(user_id: str = Depends(require_user), db: Session = Depends(get_db)):
    membership_service.delete_account(db, user_id)
    return {"message": "User deleted"}


@router.get("/skills", response_model=list[str])
async def my_skills(user_id: str = Depends(require_user), db: Session = Depends(get_db)):
    return membership_service.get_profile(db, user_id).skills


@router.get("/job")
async def my_job(user_id: str = Depends(require_user), db: Session = Depends(get_db)):
    return {"current_job": membership_service.get_profile(db, user_id).current_job_id}


@router.get("/user/{profile_user_id}", response_model=PublicProfileResponse)
async def get_profile_by_user(
    profile_user_id: str,
    _user: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    profile = db.query(Profile).filter(Profile.user_id == profile_user_id).first()
    if not profile:
        raise HTTPException(status_code=404, detail="profile not found")
    return PublicProfileResponse(**public_fields(profile))


@router.put("/education", response_model=ProfileResponse)
async def add_education(
    req: EducationCreate,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    for field in ("school", "degree", "fieldofstudy", "from_date"):
        if not getattr(req, field).strip():
            raise HTTPException(status_code=400, detail=f"{field} is required")
    return profile_to_response(profile_service.add_education(db, user_id, req.model_dump()))


@router.delete("/education/{education_id}", response_model=ProfileResponse)
async def delete_education(
    education_id: str,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    return profile_to_response(profile_service.delete_education(db, user_id, education_id))


@router.get("/github/{username}")
def github_repos(username: str):
    return github_service.fetch_repos(username)


# --- membership: the developer's side -------------------------------------


@router.put("/user/{developer_id}/offer", response_model=ProjectResponse)
async def offer_position(
    developer_id: str,
    role: str = Query(..., min_length=1),
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    project = membership_service.offer(db, user_id, developer_id, role.strip())
    return project_to_response(project)


@router.put("/offers/{project_id}/accept", response_model=ProjectResponse)
async def accept_offer(
    project_id: str,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    return project_to_response(membership_service.accept_offer(db, user_id, project_id))


@router.delete("/offers/{project_id}/reject", response_model=ProfileResponse)
async def reject_offer(
    project_id: str,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    return profile_to_response(membership_service.reject_offer(db, user_id, project_id))


@router.delete("/applied/{project_id}/cancel", response_model=ProfileResponse)
async def withdraw_application(
    project_id: str,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    return profile_to_response(membership_service.withdraw_application(db, user_id, project_id))
