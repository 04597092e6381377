from pydantic import BaseModel


class ProjectCreate(BaseModel):
    title: str
    description: str
    roles: list[str]


class ApplyRequest(BaseModel):
    role: str


class RoleCreate(BaseModel):
    role: str


class MemberResponse(BaseModel):
    id: str
    role: str
    vacancy: bool
    developer_id: str | None
    developer_name: str | None = None


class PendingClaimResponse(BaseModel):
    developer_id: str
    developer_name: str | None
    role: str
    created_at: str


class ProjectResponse(BaseModel):
    id: str
    owner_id: str
    title: str
    description: str
    status: str
    members: list[MemberResponse]
    open_roles: list[str] = []
    applicants: list[PendingClaimResponse] = []
    offered: list[PendingClaimResponse] = []
    task_count: int = 0
    post_count: int = 0
    created_at: str
    updated_at: str


class ProjectListResponse(BaseModel):
    projects: list[ProjectResponse]
    total: int
    page: int
    per_page: int
