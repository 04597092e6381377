from sqlalchemy import Boolean, Column, ForeignKey, Integer, Text
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship
from app.database import Base


class ProjectMember(Base):
    """One role slot in a project's roster, open while `vacancy` is true."""

    __tablename__ = "project_members"

    id = Column(Text, primary_key=True)
    project_id = Column(Text, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    developer_id = Column(Text, ForeignKey("users.id"))
    role = Column(Text, nullable=False)
    vacancy = Column(Boolean, nullable=False, default=True)
    position = Column(Integer, nullable=False)

    project = relationship("Project", back_populates="members")
    developer = relationship("User")


class Project(Base):
    __tablename__ = "projects"

    id = Column(Text, primary_key=True)
    owner_id = Column(Text, ForeignKey("users.id"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="HIRING")
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    __mapper_args__ = {"version_id_col": version, "version_id_generator": False}

    owner = relationship("User")
    members = relationship(
        "ProjectMember",
        back_populates="project",
        order_by="ProjectMember.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )
    claims = relationship(
        "MembershipClaim",
        back_populates="project",
        order_by="MembershipClaim.created_at",
        cascade="all, delete-orphan",
    )
    tasks = relationship(
        "Task",
        back_populates="project",
        order_by="Task.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )
    posts = relationship(
        "Post",
        back_populates="project",
        order_by="Post.created_at.desc()",
        cascade="all, delete-orphan",
    )

    @property
    def applicants(self):
        return [c for c in self.claims if c.state == "PENDING" and c.kind == "APPLICATION"]

    @property
    def offered(self):
        return [c for c in self.claims if c.state == "PENDING" and c.kind == "OFFER"]
