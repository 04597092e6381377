from pydantic import BaseModel


class UserCreate(BaseModel):
    name: str
    email: str
    password: str
    avatar: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    token: str


class UserResponse(BaseModel):
    id: str
    name: str
    email: str | None
    avatar: str | None
    created_at: str
