"""
Database models for accounts and blog posts.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from wordnest.database import Base


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value):
    return value.isoformat() if value else None


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    profile_picture_url = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    posts = relationship("Post", back_populates="author", passive_deletes=True)

    def to_dict(self, include_created=True):
        """Public representation; the password hash is never included."""
        data = {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "profile_picture_url": self.profile_picture_url,
            "bio": self.bio,
        }
        if include_created:
            data["created_at"] = isoformat(self.created_at)
        return data


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    image_url = Column(String(255), nullable=True)
    author_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    author = relationship("User", back_populates="posts")

    def to_dict(self, author_name=None):
        if author_name is None and self.author is not None:
            author_name = self.author.username
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "image_url": self.image_url,
            "author_id": self.author_id,
            "author_name": author_name,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
