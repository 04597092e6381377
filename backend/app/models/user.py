from sqlalchemy import Column, Text
from sqlalchemy.orm import relationship
from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    email = Column(Text, unique=True)
    password_hash = Column(Text, nullable=False)
    avatar = Column(Text)
    created_at = Column(Text, nullable=False)

    profile = relationship("Profile", back_populates="user", uselist=False)
