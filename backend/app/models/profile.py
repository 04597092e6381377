from sqlalchemy import Boolean, Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from app.database import Base


class ProfileSkill(Base):
    __tablename__ = "profile_skills"

    profile_id = Column(Text, ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)
    name = Column(Text, primary_key=True)


class Education(Base):
    __tablename__ = "education"

    id = Column(Text, primary_key=True)
    profile_id = Column(Text, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    school = Column(Text, nullable=False)
    degree = Column(Text, nullable=False)
    fieldofstudy = Column(Text, nullable=False)
    from_date = Column(Text, nullable=False)
    to_date = Column(Text)
    current = Column(Boolean, nullable=False, default=False)
    description = Column(Text)
    created_at = Column(Text, nullable=False)


class ProjectHistory(Base):
    __tablename__ = "project_history"

    id = Column(Text, primary_key=True)
    profile_id = Column(Text, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    project_id = Column(Text, ForeignKey("projects.id", ondelete="SET NULL"))
    title = Column(Text, nullable=False)
    role = Column(Text, nullable=False)
    joined_at = Column(Text, nullable=False)

    project = relationship("Project")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Text, primary_key=True)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    current_job_id = Column(Text, ForeignKey("projects.id", ondelete="SET NULL"))
    website = Column(Text)
    location = Column(Text)
    bio = Column(Text)
    githubusername = Column(Text)
    youtube = Column(Text)
    twitter = Column(Text)
    facebook = Column(Text)
    linkedin = Column(Text)
    instagram = Column(Text)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    # Versions are bumped explicitly by the service layer on every membership change.
    __mapper_args__ = {"version_id_col": version, "version_id_generator": False}

    user = relationship("User", back_populates="profile")
    current_job = relationship("Project", foreign_keys=[current_job_id])
    skill_rows = relationship(
        "ProfileSkill", cascade="all, delete-orphan", order_by="ProfileSkill.name"
    )
    education = relationship(
        "Education", cascade="all, delete-orphan", order_by="Education.created_at.desc()"
    )
    history = relationship(
        "ProjectHistory", cascade="all, delete-orphan", order_by="ProjectHistory.joined_at.desc()"
    )
    pending_claims = relationship(
        "MembershipClaim",
        primaryjoin="and_(foreign(MembershipClaim.developer_id) == Profile.user_id, "
        "MembershipClaim.state == 'PENDING')",
        order_by="MembershipClaim.created_at",
        viewonly=True,
    )

    @property
    def skills(self) -> list[str]:
        return [s.name for s in self.skill_rows]

    @property
    def offers(self):
        return [c for c in self.pending_claims if c.kind == "OFFER"]

    @property
    def applied(self):
        return [c for c in self.pending_claims if c.kind == "APPLICATION"]
