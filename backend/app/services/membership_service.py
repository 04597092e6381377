"""Transitions of the profile/project membership relationship.

Every public function runs as one `atomic()` unit of work. Each Profile and
Project whose slots, claims or current job change gets its version bumped,
so two requests racing over the same documents cannot both commit: the
loser's flush fails the version check and the whole unit is rolled back.
"""

import logging
import uuid

from sqlalchemy.orm import Session

from app.config import settings
from app.database import atomic
from app.errors import ConflictError, NotFoundError, TransactionAbortedError, UnauthorizedError
from app.models.claim import MembershipClaim
from app.models.profile import Profile, ProjectHistory
from app.models.project import Project, ProjectMember
from app.models.user import User
from app.services import vacancy
from app.services.membership import (
    RESOLUTIONS,
    ClaimKind,
    ClaimState,
    MembershipEvent,
    MembershipState,
    claim_state,
    latest_claim,
    membership_state,
    pending_claim,
    transition,
)
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)

_MISSING_CLAIM = {
    ClaimKind.OFFER: "offer does not exist",
    ClaimKind.APPLICATION: "application does not exist",
}

_STALE_CLAIM = {
    (ClaimKind.OFFER, ClaimState.REVOKED): "project has revoked its offer",
    (ClaimKind.OFFER, ClaimState.REJECTED): "offer was already rejected",
    (ClaimKind.OFFER, ClaimState.ACCEPTED): "offer was already accepted",
    (ClaimKind.APPLICATION, ClaimState.WITHDRAWN): "application has been withdrawn",
    (ClaimKind.APPLICATION, ClaimState.REJECTED): "application was rejected",
    (ClaimKind.APPLICATION, ClaimState.ACCEPTED): "application was already accepted",
    (ClaimKind.OFFER, ClaimState.SUPERSEDED): "offer is no longer pending",
    (ClaimKind.APPLICATION, ClaimState.SUPERSEDED): "application is no longer pending",
}


# --- lookups -------------------------------------------------------------


def get_profile(db: Session, user_id: str) -> Profile:
    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    if not profile:
        raise NotFoundError("There is no profile for this user")
    return profile


def get_project(db: Session, project_id: str) -> Project:
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise NotFoundError("Project not found")
    return project


def active_project_of(db: Session, owner_id: str) -> Project | None:
    return (
        db.query(Project)
        .filter(Project.owner_id == owner_id, Project.status != vacancy.COMPLETE)
        .first()
    )


def owned_project(db: Session, owner_id: str) -> Project:
    project = active_project_of(db, owner_id)
    if not project:
        raise UnauthorizedError("you are not a project owner")
    return project


def _profile_of(db: Session, user_id: str) -> Profile | None:
    return db.query(Profile).filter(Profile.user_id == user_id).first()


# --- bookkeeping ---------------------------------------------------------


def _touch(doc, now: str):
    doc.version += 1
    doc.updated_at = now


def _resolve(claim: MembershipClaim, event: MembershipEvent, now: str):
    transition(claim_state(claim), event)
    claim.state = RESOLUTIONS[event].value
    claim.resolved_at = now


def _new_claim(project: Project, developer_id: str, role: str, kind: ClaimKind, now: str):
    claim = MembershipClaim(
        id=str(uuid.uuid4()),
        developer_id=developer_id,
        role=role,
        kind=kind.value,
        state=ClaimState.PENDING.value,
        created_at=now,
    )
    project.claims.append(claim)
    return claim


def _supersede_pending(db: Session, profile: Profile, now: str):
    """Drop every claim the developer still has open, on any project."""
    claims = (
        db.query(MembershipClaim)
        .filter(
            MembershipClaim.developer_id == profile.user_id,
            MembershipClaim.state == ClaimState.PENDING.value,
        )
        .all()
    )
    for claim in claims:
        # the identity map may hold a state resolved earlier in this unit of work
        if claim.state != ClaimState.PENDING.value:
            continue
        _resolve(claim, MembershipEvent.SUPERSEDE, now)
        _touch(claim.project, now)


def _check_fill_preconditions(project: Project, profile: Profile, claim: MembershipClaim):
    if not vacancy.has_vacancy(project.members, claim.role):
        raise ConflictError("no more vacancies left")
    if claim.state != ClaimState.PENDING.value:
        kind = ClaimKind(claim.kind)
        state = ClaimState(claim.state)
        if state == ClaimState.SUPERSEDED and profile.current_job_id is not None:
            raise ConflictError("user already employed")
        if state == ClaimState.CLOSED:
            raise ConflictError("project is complete")
        raise ConflictError(_STALE_CLAIM.get((kind, state), f"{kind.value.lower()} is no longer pending"))
    if profile.current_job_id is not None:
        raise ConflictError("user already employed")


def _fill(db: Session, project: Project, profile: Profile, claim: MembershipClaim):
    _check_fill_preconditions(project, profile, claim)
    transition(membership_state(project, profile.user_id), MembershipEvent.ACCEPT)
    now = utcnow()

    slot = vacancy.open_slots(project.members, claim.role)[0]
    slot.developer_id = profile.user_id
    slot.vacancy = False
    _resolve(claim, MembershipEvent.ACCEPT, now)

    if not vacancy.has_vacancy(project.members, claim.role):
        # Collect first, then resolve: the peers are settled as one batch.
        displaced = [
            c for c in project.claims
            if c.state == ClaimState.PENDING.value and c.role == claim.role
        ]
        for peer in displaced:
            _resolve(peer, MembershipEvent.DISPLACE, now)
            peer_profile = _profile_of(db, peer.developer_id)
            if peer_profile is not None:
                _touch(peer_profile, now)
        if displaced:
            logger.info(
                "Role %s on project %s is filled; displaced %d pending claim(s)",
                claim.role, project.id, len(displaced),
            )

    project.status = vacancy.derive_status(project.members, project.status)

    _supersede_pending(db, profile, now)
    profile.current_job = project
    profile.history.append(
        ProjectHistory(
            id=str(uuid.uuid4()),
            project=project,
            title=project.title,
            role=claim.role,
            joined_at=now,
        )
    )
    _touch(profile, now)
    _touch(project, now)


def _vacate(project: Project, profile: Profile, now: str):
    if membership_state(project, profile.user_id) != MembershipState.FILLED:
        raise NotFoundError("user is not a member of this project")

    slot = vacancy.member_slot(project.members, profile.user_id)
    slot.developer_id = None
    slot.vacancy = True
    for task in [t for t in project.tasks if t.developer_id == profile.user_id]:
        project.tasks.remove(task)
    profile.current_job = None
    for entry in [h for h in profile.history if h.project_id == project.id]:
        profile.history.remove(entry)

    project.status = vacancy.derive_status(project.members, project.status)
    _touch(profile, now)
    _touch(project, now)


def _explain_abort(db: Session, project_id: str, developer_id: str, kind: ClaimKind):
    """After a lost race, raise the precondition that fails on fresh state, if any."""
    project = db.query(Project).filter(Project.id == project_id).first()
    profile = _profile_of(db, developer_id)
    if project is None or profile is None:
        return
    claim = latest_claim(project, developer_id, kind)
    if claim is None:
        return
    _check_fill_preconditions(project, profile, claim)


def _accept(db: Session, project_id: str, developer_id: str, kind: ClaimKind) -> Project:
    try:
        with atomic(db):
            project = get_project(db, project_id)
            profile = get_profile(db, developer_id)
            claim = latest_claim(project, developer_id, kind)
            if claim is None:
                raise NotFoundError(_MISSING_CLAIM[kind])
            role = claim.role
            _fill(db, project, profile, claim)
    except TransactionAbortedError:
        _explain_abort(db, project_id, developer_id, kind)
        raise
    logger.info(
        "Developer %s joined project %s as %s (%s accepted)",
        developer_id, project_id, role, kind.value.lower(),
    )
    return project


def _resolve_pending(
    db: Session,
    project: Project,
    developer_id: str,
    kind: ClaimKind,
    event: MembershipEvent,
) -> MembershipClaim:
    claim = pending_claim(project, developer_id)
    if claim is None or claim.kind != kind.value:
        raise NotFoundError(_MISSING_CLAIM[kind])
    now = utcnow()
    _resolve(claim, event, now)
    _touch(project, now)
    developer = _profile_of(db, developer_id)
    if developer is not None:
        _touch(developer, now)
    logger.info(
        "%s of developer %s on project %s resolved as %s",
        kind.value.capitalize(), developer_id, project.id, claim.state,
    )
    return claim


# --- operations ----------------------------------------------------------


def create_project(
    db: Session, owner_id: str, title: str, description: str, roles: list[str]
) -> Project:
    with atomic(db):
        profile = get_profile(db, owner_id)
        if active_project_of(db, owner_id):
            raise ConflictError("user already has project")
        if profile.current_job_id is not None:
            raise ConflictError("user already part of a project")

        now = utcnow()
        project = Project(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            title=title,
            description=description,
            status=vacancy.HIRING,
            version=1,
            created_at=now,
            updated_at=now,
        )
        project.members.append(
            ProjectMember(id=str(uuid.uuid4()), developer_id=owner_id, role=vacancy.LEADER_ROLE, vacancy=False)
        )
        for role in roles:
            project.members.append(ProjectMember(id=str(uuid.uuid4()), role=role, vacancy=True))
        project.status = vacancy.derive_status(project.members)
        db.add(project)

        _supersede_pending(db, profile, now)
        profile.current_job = project
        profile.history.append(
            ProjectHistory(
                id=str(uuid.uuid4()),
                project=project,
                title=title,
                role=vacancy.LEADER_ROLE,
                joined_at=now,
            )
        )
        _touch(profile, now)
    logger.info("User %s created project %s with roles %s", owner_id, project.id, roles)
    return project


def apply(db: Session, developer_id: str, project_id: str, role: str) -> Project:
    with atomic(db):
        profile = get_profile(db, developer_id)
        project = get_project(db, project_id)
        transition(membership_state(project, developer_id), MembershipEvent.APPLY)
        if not vacancy.has_role(project.members, role):
            raise NotFoundError("role does not exist in project")
        if profile.current_job_id is not None:
            raise ConflictError("user already part of a project")
        if not vacancy.has_vacancy(project.members, role):
            raise ConflictError("no vacancy for role")

        now = utcnow()
        _new_claim(project, developer_id, role, ClaimKind.APPLICATION, now)
        _touch(project, now)
        _touch(profile, now)
    logger.info("Developer %s applied to project %s as %s", developer_id, project_id, role)
    return project


def offer(db: Session, owner_id: str, developer_id: str, role: str) -> Project:
    with atomic(db):
        project = owned_project(db, owner_id)
        profile = get_profile(db, developer_id)
        if role not in profile.skills:
            raise ConflictError("user does not have this skill")
        if not vacancy.has_role(project.members, role):
            raise NotFoundError("role does not exist in project")
        transition(membership_state(project, developer_id), MembershipEvent.OFFER)
        if not vacancy.has_vacancy(project.members, role):
            raise ConflictError("no vacancy")
        if profile.current_job_id is not None:
            raise ConflictError("user already employed")

        now = utcnow()
        _new_claim(project, developer_id, role, ClaimKind.OFFER, now)
        _touch(project, now)
        _touch(profile, now)
    logger.info("Project %s offered %s to developer %s", project.id, role, developer_id)
    return project


def accept_offer(db: Session, developer_id: str, project_id: str) -> Project:
    return _accept(db, project_id, developer_id, ClaimKind.OFFER)


def accept_application(db: Session, owner_id: str, developer_id: str) -> Project:
    project = owned_project(db, owner_id)
    return _accept(db, project.id, developer_id, ClaimKind.APPLICATION)


def reject_offer(db: Session, developer_id: str, project_id: str) -> Profile:
    with atomic(db):
        profile = get_profile(db, developer_id)
        project = get_project(db, project_id)
        _resolve_pending(db, project, developer_id, ClaimKind.OFFER, MembershipEvent.REJECT)
    return profile


def withdraw_application(db: Session, developer_id: str, project_id: str) -> Profile:
    with atomic(db):
        profile = get_profile(db, developer_id)
        project = get_project(db, project_id)
        _resolve_pending(db, project, developer_id, ClaimKind.APPLICATION, MembershipEvent.WITHDRAW)
    return profile


def reject_applicant(db: Session, owner_id: str, developer_id: str) -> Project:
    with atomic(db):
        project = owned_project(db, owner_id)
        _resolve_pending(db, project, developer_id, ClaimKind.APPLICATION, MembershipEvent.REJECT)
    return project


def cancel_offer(db: Session, owner_id: str, developer_id: str) -> Project:
    with atomic(db):
        project = owned_project(db, owner_id)
        _resolve_pending(db, project, developer_id, ClaimKind.OFFER, MembershipEvent.REVOKE)
    return project


def remove_member(db: Session, owner_id: str, developer_id: str) -> Project:
    with atomic(db):
        project = owned_project(db, owner_id)
        if developer_id == owner_id:
            raise ConflictError("project owner cannot be removed; close the project instead")
        profile = get_profile(db, developer_id)
        _vacate(project, profile, utcnow())
    logger.info("Developer %s removed from project %s", developer_id, project.id)
    return project


def leave(db: Session, developer_id: str) -> Profile:
    with atomic(db):
        profile = get_profile(db, developer_id)
        project = profile.current_job
        if project is None:
            raise ConflictError("user is not part of a project")
        if project.owner_id == developer_id:
            raise ConflictError("project owner cannot leave; close the project instead")
        project_id = project.id
        _vacate(project, profile, utcnow())
    logger.info("Developer %s left project %s", developer_id, project_id)
    return profile


def close_project(db: Session, owner_id: str) -> Project:
    with atomic(db):
        project = owned_project(db, owner_id)
        now = utcnow()

        evicted = []
        for slot in vacancy.filled_slots(project.members):
            member = _profile_of(db, slot.developer_id)
            slot.developer_id = None
            slot.vacancy = True
            if member is not None:
                member.current_job = None
                _touch(member, now)
                evicted.append(member.user_id)

        for claim in project.applicants + project.offered:
            _resolve(claim, MembershipEvent.CLOSE, now)
            claimant = _profile_of(db, claim.developer_id)
            if claimant is not None:
                _touch(claimant, now)

        project.tasks.clear()
        project.posts.clear()
        project.status = vacancy.COMPLETE
        _touch(project, now)
    logger.info("Project %s closed; evicted %s", project.id, evicted)
    return project


def add_role(db: Session, owner_id: str, role: str) -> Project:
    with atomic(db):
        project = owned_project(db, owner_id)
        project.members.append(ProjectMember(id=str(uuid.uuid4()), role=role, vacancy=True))
        project.status = vacancy.derive_status(project.members, project.status)
        _touch(project, utcnow())
    logger.info("Role %s added to project %s", role, project.id)
    return project


def delete_account(db: Session, user_id: str):
    """Remove a profile and anonymise its user; refused while employed."""
    with atomic(db):
        profile = get_profile(db, user_id)
        if profile.current_job_id is not None:
            raise ConflictError("cannot delete account while in project")

        now = utcnow()
        for claim in profile.pending_claims:
            event = (
                MembershipEvent.WITHDRAW
                if claim.kind == ClaimKind.APPLICATION.value
                else MembershipEvent.REJECT
            )
            _resolve(claim, event, now)
            _touch(claim.project, now)
        db.delete(profile)

        user = db.query(User).filter(User.id == user_id).first()
        user.name = "[deleted]"
        user.email = None
        user.avatar = settings.default_avatar
    logger.info("Account %s deleted", user_id)
