from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String, nullable=False)


class PostRow(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # ISO-8601 UTC, so lexical order is chronological order
    created_date: Mapped[Optional[str]] = mapped_column("createdDate", Text)
    title: Mapped[str] = mapped_column(String, nullable=False)
    content: Mapped[str] = mapped_column(String, nullable=False)
    author_id: Mapped[int] = mapped_column("authorid", Integer, ForeignKey("users.id"), nullable=False)


class LikeRow(Base):
    __tablename__ = "likes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[int] = mapped_column("authorid", Integer, ForeignKey("users.id"), nullable=False)
    post_id: Mapped[int] = mapped_column("postid", Integer, ForeignKey("posts.id"), nullable=False)


class CommentRow(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[int] = mapped_column("authorid", Integer, ForeignKey("users.id"), nullable=False)
    post_id: Mapped[int] = mapped_column("postid", Integer, ForeignKey("posts.id"), nullable=False)
    content: Mapped[str] = mapped_column(String, nullable=False)
