"""Named states for one (developer, project, role) relationship.

The service layer derives the current state from the project's slots and
claims, then asks `transition()` whether an event is legal before touching
any row.
"""

from enum import Enum

from app.errors import ConflictError
from app.services import vacancy


class MembershipState(str, Enum):
    OPEN = "OPEN"
    APPLIED = "APPLIED"
    OFFERED = "OFFERED"
    FILLED = "FILLED"
    COMPLETE = "COMPLETE"


class MembershipEvent(str, Enum):
    APPLY = "APPLY"
    OFFER = "OFFER"
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    WITHDRAW = "WITHDRAW"
    REVOKE = "REVOKE"
    DISPLACE = "DISPLACE"
    SUPERSEDE = "SUPERSEDE"
    VACATE = "VACATE"
    CLOSE = "CLOSE"


class ClaimKind(str, Enum):
    APPLICATION = "APPLICATION"
    OFFER = "OFFER"


class ClaimState(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"
    REVOKED = "REVOKED"
    # the role's last vacancy went to someone else
    DISPLACED = "DISPLACED"
    # the developer took a position elsewhere
    SUPERSEDED = "SUPERSEDED"
    CLOSED = "CLOSED"


S = MembershipState
E = MembershipEvent

TRANSITIONS: dict[tuple[MembershipState, MembershipEvent], MembershipState] = {
    (S.OPEN, E.APPLY): S.APPLIED,
    (S.OPEN, E.OFFER): S.OFFERED,
    (S.APPLIED, E.ACCEPT): S.FILLED,
    (S.APPLIED, E.REJECT): S.OPEN,
    (S.APPLIED, E.WITHDRAW): S.OPEN,
    (S.APPLIED, E.DISPLACE): S.OPEN,
    (S.APPLIED, E.SUPERSEDE): S.OPEN,
    (S.APPLIED, E.CLOSE): S.COMPLETE,
    (S.OFFERED, E.ACCEPT): S.FILLED,
    (S.OFFERED, E.REJECT): S.OPEN,
    (S.OFFERED, E.REVOKE): S.OPEN,
    (S.OFFERED, E.DISPLACE): S.OPEN,
    (S.OFFERED, E.SUPERSEDE): S.OPEN,
    (S.OFFERED, E.CLOSE): S.COMPLETE,
    (S.FILLED, E.VACATE): S.OPEN,
    (S.FILLED, E.CLOSE): S.COMPLETE,
    (S.OPEN, E.CLOSE): S.COMPLETE,
}

# What a pending claim becomes when an event resolves it.
RESOLUTIONS: dict[MembershipEvent, ClaimState] = {
    E.ACCEPT: ClaimState.ACCEPTED,
    E.REJECT: ClaimState.REJECTED,
    E.WITHDRAW: ClaimState.WITHDRAWN,
    E.REVOKE: ClaimState.REVOKED,
    E.DISPLACE: ClaimState.DISPLACED,
    E.SUPERSEDE: ClaimState.SUPERSEDED,
    E.CLOSE: ClaimState.CLOSED,
}


def claim_state(claim) -> MembershipState:
    """The membership state a pending claim stands for."""
    return S.APPLIED if claim.kind == ClaimKind.APPLICATION.value else S.OFFERED


_CONFLICT_MESSAGES = {
    (S.APPLIED, E.APPLY): "you have already applied",
    (S.APPLIED, E.OFFER): "developer has already applied to this project",
    (S.OFFERED, E.APPLY): "project has already offered you a position",
    (S.OFFERED, E.OFFER): "you have already offered this developer a job",
    (S.FILLED, E.APPLY): "user already part of project",
    (S.FILLED, E.OFFER): "user already part of project",
    (S.COMPLETE, E.APPLY): "project is complete",
    (S.COMPLETE, E.OFFER): "project is complete",
}


def transition(state: MembershipState, event: MembershipEvent) -> MembershipState:
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        message = _CONFLICT_MESSAGES.get(
            (state, event), f"cannot {event.value.lower()} from state {state.value}"
        )
        raise ConflictError(message) from None


def membership_state(project, developer_id: str) -> MembershipState:
    """Where `developer_id` stands with `project`.

    A developer holds at most one slot or one pending claim per project, so
    the state is per project; the role is carried by that slot or claim.
    """
    if project.status == vacancy.COMPLETE:
        return S.COMPLETE
    if vacancy.member_slot(project.members, developer_id) is not None:
        return S.FILLED
    claim = pending_claim(project, developer_id)
    if claim is None:
        return S.OPEN
    return claim_state(claim)


def pending_claim(project, developer_id: str):
    for claim in project.claims:
        if claim.developer_id == developer_id and claim.state == ClaimState.PENDING.value:
            return claim
    return None


def latest_claim(project, developer_id: str, kind: ClaimKind):
    """Most recent claim of `kind`, resolved or not."""
    found = None
    for claim in project.claims:
        if claim.developer_id == developer_id and claim.kind == kind.value:
            found = claim
    return found
