from pydantic import BaseModel


class TaskCreate(BaseModel):
    developer_id: str
    title: str
    description: str


class TaskReturn(BaseModel):
    note: str


class TaskResponse(BaseModel):
    id: str
    project_id: str
    developer_id: str
    title: str
    description: str
    note: str | None
    status: str
    created_at: str
    updated_at: str
