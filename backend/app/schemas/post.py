from pydantic import BaseModel


class PostCreate(BaseModel):
    title: str
    text: str


class CommentCreate(BaseModel):
    text: str


class CommentResponse(BaseModel):
    id: str
    user_id: str
    name: str | None
    avatar: str | None
    text: str
    created_at: str


class PostResponse(BaseModel):
    id: str
    project_id: str
    user_id: str
    name: str | None
    avatar: str | None
    title: str
    text: str
    created_at: str
    comments: list[CommentResponse] = []
