from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db.base import Base

if TYPE_CHECKING:
    from .auth import User
    from .records import Cover, Flashcard


class Bookmark(Base):
    """A user's bookmark of either a cover or a single flashcard."""

    __tablename__ = "bookmarks"
    __table_args__ = (
        UniqueConstraint("user_id", "cover_id", name="uq_bookmark_user_cover"),
        UniqueConstraint("user_id", "flashcard_id", name="uq_bookmark_user_flashcard"),
        CheckConstraint(
            "(cover_id IS NULL) <> (flashcard_id IS NULL)",
            name="ck_bookmark_single_target",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    cover_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("covers.id", ondelete="CASCADE"), nullable=True, index=True
    )
    flashcard_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("flashcards.id", ondelete="CASCADE"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    user: Mapped["User"] = relationship("User", back_populates="bookmarks")
    cover: Mapped[Optional["Cover"]] = relationship("Cover", back_populates="bookmarks")
    flashcard: Mapped[Optional["Flashcard"]] = relationship(
        "Flashcard", back_populates="bookmarks"
    )


__all__ = ["Bookmark"]
