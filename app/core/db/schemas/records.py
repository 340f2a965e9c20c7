from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
    Enum,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
import enum

from app.core.db.base import Base

if TYPE_CHECKING:
    from .auth import User
    from .bookmarks import Bookmark
    from .ratings import Rating


class RecordStatus(enum.Enum):
    PRIVATE = "Private"
    PUBLIC = "Public"


class Record(Base):
    """A user-owned study set."""

    __tablename__ = "records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[RecordStatus] = mapped_column(
        Enum(RecordStatus), default=RecordStatus.PRIVATE, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="records")
    cover: Mapped[Optional["Cover"]] = relationship(
        "Cover",
        back_populates="record",
        cascade="all, delete-orphan",
        uselist=False,
    )
    flashcards: Mapped[list["Flashcard"]] = relationship(
        "Flashcard",
        back_populates="record",
        cascade="all, delete-orphan",
        order_by="Flashcard.sequence_number",
    )
    ratings: Mapped[list["Rating"]] = relationship(
        "Rating", back_populates="record", cascade="all, delete-orphan"
    )


class Cover(Base):
    """Display metadata of a record. Title and description may be null after a full overwrite."""

    __tablename__ = "covers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    record_id: Mapped[int] = mapped_column(
        ForeignKey("records.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    title: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    record: Mapped["Record"] = relationship("Record", back_populates="cover")
    bookmarks: Mapped[list["Bookmark"]] = relationship(
        "Bookmark",
        back_populates="cover",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Flashcard(Base):
    __tablename__ = "flashcards"
    __table_args__ = (
        UniqueConstraint(
            "record_id",
            "sequence_number",
            name="uq_flashcard_record_sequence",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    record_id: Mapped[int] = mapped_column(
        ForeignKey("records.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Starts at 1 within each record
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    hint: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    record: Mapped["Record"] = relationship("Record", back_populates="flashcards")
    bookmarks: Mapped[list["Bookmark"]] = relationship(
        "Bookmark",
        back_populates="flashcard",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


__all__ = ["RecordStatus", "Record", "Cover", "Flashcard"]
