"""
Database models for blogql (authoritative ORM definitions).

This module defines the SQLAlchemy Base with a naming convention for stable
Alembic autogenerate diffs, and exposes `target_metadata` for Alembic.
"""

import threading
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

from sqlalchemy import (
    DateTime,
    ForeignKeyConstraint,
    Index,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Naming convention for deterministic constraint/index names in Alembic diffs
naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

DEFAULT_STATUS = "I am new!"


def utcnow() -> datetime:
    return datetime.now(UTC)


_last_created_at: datetime | None = None
_created_at_lock = threading.Lock()


def next_created_at() -> datetime:
    """Current UTC time, strictly later than any value previously returned in this process.

    Used as the creation timestamp of posts, which are listed in creation order.
    """
    global _last_created_at
    with _created_at_lock:
        now = utcnow()
        if _last_created_at is not None and now <= _last_created_at:
            now = _last_created_at + timedelta(microseconds=1)
        _last_created_at = now
        return now


class Base(DeclarativeBase):
    """Base class for all database models with type checking support."""

    metadata = MetaData(naming_convention=naming_convention)


class Users(Base):
    __tablename__ = "users"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="users_pkey"),
        UniqueConstraint("email", name="users_email_key"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, default=uuid4)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=DEFAULT_STATUS)
    created_at: Mapped[datetime] = mapped_column(DateTime(True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), nullable=False, default=utcnow, onupdate=utcnow
    )

    posts: Mapped[list["Posts"]] = relationship(
        "Posts",
        uselist=True,
        back_populates="creator",
        cascade="all, delete-orphan",
        order_by="Posts.created_at",
    )


class Posts(Base):
    __tablename__ = "posts"
    __table_args__ = (
        ForeignKeyConstraint(
            ["creator_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="posts_creator_id_fkey",
        ),
        PrimaryKeyConstraint("id", name="posts_pkey"),
        Index("idx_posts_creator", "creator_id"),
        Index("idx_posts_created", "created_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, default=uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    creator_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), nullable=False, default=next_created_at
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), nullable=False, default=utcnow, onupdate=utcnow
    )

    creator: Mapped["Users"] = relationship("Users", back_populates="posts")


target_metadata = Base.metadata

__all__ = [
    "Base",
    "Users",
    "Posts",
    "target_metadata",
    "DEFAULT_STATUS",
    "utcnow",
    "next_created_at",
]
