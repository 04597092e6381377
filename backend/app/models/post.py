from sqlalchemy import Column, ForeignKey, Text
from sqlalchemy.orm import relationship
from app.database import Base


class Post(Base):
    __tablename__ = "posts"

    id = Column(Text, primary_key=True)
    project_id = Column(Text, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Text, ForeignKey("users.id"), nullable=False)
    title = Column(Text, nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)

    project = relationship("Project", back_populates="posts")
    author = relationship("User")
    comments = relationship(
        "Comment", back_populates="post", order_by="Comment.created_at", cascade="all, delete-orphan"
    )


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Text, primary_key=True)
    post_id = Column(Text, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Text, ForeignKey("users.id"), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)

    post = relationship("Post", back_populates="comments")
    author = relationship("User")
