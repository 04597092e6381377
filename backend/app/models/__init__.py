from app.models.user import User
from app.models.profile import Profile, ProfileSkill, Education, ProjectHistory
from app.models.project import Project, ProjectMember
from app.models.claim import MembershipClaim
from app.models.task import Task
from app.models.post import Post, Comment

__all__ = [
    "User",
    "Profile",
    "ProfileSkill",
    "Education",
    "ProjectHistory",
    "Project",
    "ProjectMember",
    "MembershipClaim",
    "Task",
    "Post",
    "Comment",
]
