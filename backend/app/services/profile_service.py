import logging
import uuid

from sqlalchemy.orm import Session

from app.database import atomic
from app.errors import NotFoundError
from app.models.profile import Education, Profile, ProfileSkill
from app.services.membership_service import get_profile
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)


def upsert_profile(db: Session, user_id: str, skills: list[str], fields: dict) -> Profile:
    """Create or update the caller's profile; `None` values in `fields` are left alone."""
    with atomic(db):
        now = utcnow()
        profile = db.query(Profile).filter(Profile.user_id == user_id).first()
        if not profile:
            profile = Profile(id=str(uuid.uuid4()), user_id=user_id, version=1, created_at=now)
            db.add(profile)
            logger.info("Created profile for user %s", user_id)
        else:
            profile.version += 1

        for field, value in fields.items():
            if value is not None:
                setattr(profile, field, value)

        for row in [s for s in profile.skill_rows if s.name not in skills]:
            profile.skill_rows.remove(row)
        existing = set(profile.skills)
        for skill in skills:
            if skill not in existing:
                profile.skill_rows.append(ProfileSkill(name=skill))
        profile.updated_at = now
    return profile


def add_education(db: Session, user_id: str, entry: dict) -> Profile:
    with atomic(db):
        profile = get_profile(db, user_id)
        profile.education.append(Education(id=str(uuid.uuid4()), created_at=utcnow(), **entry))
    return profile


def delete_education(db: Session, user_id: str, education_id: str) -> Profile:
    with atomic(db):
        profile = get_profile(db, user_id)
        entry = next((e for e in profile.education if e.id == education_id), None)
        if not entry:
            raise NotFoundError("Education not found")
        profile.education.remove(entry)
    return profile
