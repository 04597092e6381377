from sqlalchemy.orm import Session

from app.errors import ConflictError
from app.models.profile import Profile, ProfileSkill
from app.models.project import Project, ProjectMember
from app.services import vacancy
from app.services.membership_service import get_profile, owned_project


def find_developers(db: Session, owner_id: str, role: str, page: int, per_page: int):
    """Unemployed developers with skill `role` and no open claim on the owner's project."""
    project = owned_project(db, owner_id)
    if not vacancy.has_vacancy(project.members, role):
        raise ConflictError("role does not exist in project")

    claimed = [c.developer_id for c in project.applicants + project.offered]
    query = (
        db.query(Profile)
        .filter(Profile.current_job_id.is_(None))
        .filter(Profile.skill_rows.any(ProfileSkill.name == role))
    )
    if claimed:
        query = query.filter(Profile.user_id.notin_(claimed))

    total = query.count()
    profiles = query.order_by(Profile.created_at.asc()).offset((page - 1) * per_page).limit(per_page).all()
    return profiles, total


def find_projects(db: Session, developer_id: str, skills: list[str], page: int, per_page: int):
    """Hiring projects with an open slot in one of `skills` the developer has not claimed yet."""
    profile = get_profile(db, developer_id)
    if profile.current_job_id is not None:
        raise ConflictError("user already in project")
    if not all(skill in profile.skills for skill in skills):
        raise ConflictError("user does not have skill")

    claimed = [c.project_id for c in profile.pending_claims if c.role in skills]
    query = (
        db.query(Project)
        .filter(Project.status == vacancy.HIRING)
        .filter(Project.members.any((ProjectMember.vacancy.is_(True)) & (ProjectMember.role.in_(skills))))
    )
    if claimed:
        query = query.filter(Project.id.notin_(claimed))

    total = query.count()
    projects = query.order_by(Project.created_at.desc()).offset((page - 1) * per_page).limit(per_page).all()
    return projects, total
