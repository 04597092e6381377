from pydantic import BaseModel


class ProfileUpsert(BaseModel):
    skills: str  # comma separated, e.g. "python, react"
    website: str | None = None
    location: str | None = None
    bio: str | None = None
    githubusername: str | None = None
    youtube: str | None = None
    twitter: str | None = None
    facebook: str | None = None
    linkedin: str | None = None
    instagram: str | None = None


class EducationCreate(BaseModel):
    school: str
    degree: str
    fieldofstudy: str
    from_date: str
    to_date: str | None = None
    current: bool = False
    description: str | None = None


class EducationResponse(BaseModel):
    id: str
    school: str
    degree: str
    fieldofstudy: str
    from_date: str
    to_date: str | None
    current: bool
    description: str | None


class ClaimResponse(BaseModel):
    project_id: str
    project_title: str
    role: str
    created_at: str


class HistoryResponse(BaseModel):
    project_id: str | None
    title: str
    role: str
    joined_at: str


class SocialLinks(BaseModel):
    youtube: str | None = None
    twitter: str | None = None
    facebook: str | None = None
    linkedin: str | None = None
    instagram: str | None = None


class PublicProfileResponse(BaseModel):
    id: str
    user_id: str
    name: str
    avatar: str | None
    skills: list[str]
    current_job: str | None
    website: str | None
    location: str | None
    bio: str | None
    githubusername: str | None
    social: SocialLinks
    education: list[EducationResponse] = []
    projects: list[HistoryResponse] = []


class ProfileResponse(PublicProfileResponse):
    offers: list[ClaimResponse] = []
    applied: list[ClaimResponse] = []


class ProfileListResponse(BaseModel):
    profiles: list[PublicProfileResponse]
    total: int
    page: int
    per_page: int
