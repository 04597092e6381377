"""Read-only queries over a project's member slots.

Works on any sequence of objects exposing `role`, `vacancy` and
`developer_id`, so the membership service can ask the same questions of
ORM rows that it will then mutate.
"""

LEADER_ROLE = "LEADER"

HIRING = "HIRING"
FULL = "FULL"
COMPLETE = "COMPLETE"


def open_slots(members, role: str) -> list:
    return [m for m in members if m.role == role and m.vacancy]


def has_vacancy(members, role: str) -> bool:
    return any(m.role == role and m.vacancy for m in members)


def has_role(members, role: str) -> bool:
    return any(m.role == role for m in members)


def is_fully_staffed(members) -> bool:
    return not any(m.vacancy for m in members)


def member_slot(members, developer_id: str):
    """The filled slot held by `developer_id`, or None."""
    for m in members:
        if not m.vacancy and m.developer_id == developer_id:
            return m
    return None


def filled_slots(members) -> list:
    return [m for m in members if not m.vacancy]


def open_roles(members) -> list[str]:
    seen: list[str] = []
    for m in members:
        if m.vacancy and m.role not in seen:
            seen.append(m.role)
    return seen


def derive_status(members, current: str = HIRING) -> str:
    if current == COMPLETE:
        return COMPLETE
    return FULL if is_fully_staffed(members) else HIRING
