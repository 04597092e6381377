from sqlalchemy import Column, ForeignKey, Text
from sqlalchemy.orm import relationship
from app.database import Base


class MembershipClaim(Base):
    """An application or offer for one role, shared by the profile and the project.

    `state` stays PENDING until the claim is resolved; resolved rows are kept
    so a late accept can tell a revoked offer from one that never existed.
    """

    __tablename__ = "membership_claims"

    id = Column(Text, primary_key=True)
    project_id = Column(Text, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    developer_id = Column(Text, ForeignKey("users.id"), nullable=False)
    role = Column(Text, nullable=False)
    kind = Column(Text, nullable=False)
    state = Column(Text, nullable=False, default="PENDING")
    created_at = Column(Text, nullable=False)
    resolved_at = Column(Text)

    project = relationship("Project", back_populates="claims")
    developer = relationship("User")
