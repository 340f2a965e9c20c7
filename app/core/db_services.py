"""Database service classes for records, covers, flashcards, bookmarks and ratings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from sqlalchemy import delete, func, insert, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from app.core.db.schemas.auth import User
from app.core.db.schemas.bookmarks import Bookmark
from app.core.db.schemas.ratings import Rating
from app.core.db.schemas.records import Cover, Flashcard, Record, RecordStatus
from app.core.errors import (
    CardlyError,
    CompositeWriteError,
    InvalidRequestError,
    NotFoundError,
    store_error_message,
)
from app.core.logging import get_logger


logger = get_logger(__name__)

# Attempts for a flashcard insert that loses a numbering race
SEQUENCE_RETRIES = 3

_BULK = {"synchronize_session": False}


def contains_pattern(term: str) -> str:
    """LIKE pattern matching ``term`` anywhere, with wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def dialect_insert(session: AsyncSession, table: Any):
    """Dialect-specific INSERT supporting ``on_conflict_do_update``."""
    dialect = session.bind.dialect.name
    if dialect == "postgresql":
        return pg_insert(table)
    if dialect == "sqlite":
        return sqlite_insert(table)
    raise CardlyError(f"Upsert is not supported on the {dialect} dialect")


async def _require_user(session: AsyncSession, user_id: int) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


async def _require_record(session: AsyncSession, record_id: int) -> Record:
    record = await session.get(Record, record_id)
    if record is None:
        raise NotFoundError(f"Record {record_id} not found")
    return record


@dataclass
class FullRecord:
    record: Record
    cover: Cover
    flashcards: list[Flashcard]


@dataclass
class RatingSummary:
    record_id: int
    average: Optional[float]
    count: int


@dataclass
class TopRatedRecord:
    record_id: int
    category: str
    status: RecordStatus
    title: Optional[str]
    average: float
    count: int


class RecordService:
    """Records and the composite record + cover + flashcards aggregate."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_record(
        self, *, user_id: int, category: str, status: RecordStatus
    ) -> Record:
        await _require_user(self.session, user_id)
        record = Record(user_id=user_id, category=category, status=status)
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        logger.info(f"Record {record.id} created for user {user_id}")
        return record

    async def list_records(self, user_id: int) -> Sequence[Record]:
        result = await self.session.execute(
            select(Record).where(Record.user_id == user_id).order_by(Record.id)
        )
        return result.scalars().all()

    async def create_full(
        self,
        *,
        user_id: int,
        status: RecordStatus,
        category: str,
        title: str,
        description: str,
        questions: Sequence[dict[str, Any]],
    ) -> FullRecord:
        """Create a record, its cover and its flashcards in one transaction.

        Flashcards are numbered from 1 in the order given. On any database
        error everything is rolled back and ``CompositeWriteError`` names the
        stage that failed.
        """
        await _require_user(self.session, user_id)

        stage = "record"
        try:
            record = Record(user_id=user_id, category=category, status=status)
            self.session.add(record)
            await self.session.flush()

            stage = "cover"
            cover = Cover(record_id=record.id, title=title, description=description)
            self.session.add(cover)
            await self.session.flush()

            stage = "flashcards"
            flashcards = [
                Flashcard(
                    record_id=record.id,
                    sequence_number=number,
                    question=q["question"],
                    answer=q["answer"],
                    hint=q.get("hint"),
                )
                for number, q in enumerate(questions, start=1)
            ]
            self.session.add_all(flashcards)
            await self.session.flush()

            stage = "commit"
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Full record create for user {user_id} failed at {stage}: {e}")
            raise CompositeWriteError(stage, store_error_message(e)) from e

        await self.session.refresh(record)
        await self.session.refresh(cover)
        for card in flashcards:
            await self.session.refresh(card)
        logger.info(
            f"Record {record.id} created with cover and {len(flashcards)} flashcards"
        )
        return FullRecord(record=record, cover=cover, flashcards=flashcards)

    async def update_full(
        self,
        record_id: int,
        *,
        record_updates: dict[str, Any],
        cover_updates: dict[str, Any],
        flashcard_updates: Sequence[tuple[int, dict[str, Any]]],
    ) -> list[Flashcard]:
        """Patch a record, its cover and numbered flashcards in one transaction.

        Only keys present in each mapping are written. A missing cover is
        created when cover fields are supplied.
        """
        record = await _require_record(self.session, record_id)

        stage = "record"
        try:
            for field, value in record_updates.items():
                setattr(record, field, value)
            await self.session.flush()

            stage = "cover"
            if cover_updates:
                result = await self.session.execute(
                    select(Cover).where(Cover.record_id == record_id)
                )
                cover = result.scalar_one_or_none()
                if cover is None:
                    cover = Cover(record_id=record_id)
                    self.session.add(cover)
                for field, value in cover_updates.items():
                    setattr(cover, field, value)

            stage = "flashcards"
            updated: list[Flashcard] = []
            for number, changes in flashcard_updates:
                result = await self.session.execute(
                    select(Flashcard).where(
                        Flashcard.record_id == record_id,
                        Flashcard.sequence_number == number,
                    )
                )
                card = result.scalar_one_or_none()
                if card is None:
                    raise NotFoundError(
                        f"Flashcard {number} not found in record {record_id}"
                    )
                for field, value in changes.items():
                    setattr(card, field, value)
                updated.append(card)

            stage = "commit"
            await self.session.flush()
            await self.session.commit()
        except NotFoundError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Full record update of {record_id} failed at {stage}: {e}")
            raise CompositeWriteError(stage, store_error_message(e)) from e

        for card in updated:
            await self.session.refresh(card)
        logger.info(f"Record {record_id} updated ({len(updated)} flashcards)")
        return updated

    async def delete_record(self, record_id: int) -> None:
        await _require_record(self.session, record_id)

        card_ids = select(Flashcard.id).where(Flashcard.record_id == record_id)
        cover_ids = select(Cover.id).where(Cover.record_id == record_id)
        await self.session.execute(
            delete(Bookmark).where(
                or_(
                    Bookmark.flashcard_id.in_(card_ids),
                    Bookmark.cover_id.in_(cover_ids),
                )
            ),
            execution_options=_BULK,
        )
        for model in (Flashcard, Cover, Rating):
            await self.session.execute(
                delete(model).where(model.record_id == record_id),
                execution_options=_BULK,
            )
        await self.session.execute(
            delete(Record).where(Record.id == record_id), execution_options=_BULK
        )
        await self.session.commit()
        logger.info(f"Record {record_id} deleted")


class CoverService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_covers(
        self, *, record_id: Optional[int] = None, query: Optional[str] = None
    ) -> Sequence[Cover]:
        stmt = select(Cover)
        if record_id is not None:
            stmt = stmt.where(Cover.record_id == record_id)
        if query:
            stmt = stmt.where(Cover.title.ilike(contains_pattern(query), escape="\\"))
        result = await self.session.execute(stmt.order_by(Cover.id))
        return result.scalars().all()

    async def get_cover(self, record_id: int) -> Optional[Cover]:
        result = await self.session.execute(
            select(Cover).where(Cover.record_id == record_id)
        )
        return result.scalar_one_or_none()

    async def create_cover(
        self, *, record_id: int, title: str, description: Optional[str]
    ) -> Cover:
        await _require_record(self.session, record_id)
        if await self.get_cover(record_id) is not None:
            raise InvalidRequestError(f"Record {record_id} already has a cover")

        cover = Cover(record_id=record_id, title=title, description=description)
        self.session.add(cover)
        await self.session.commit()
        await self.session.refresh(cover)
        logger.info(f"Cover {cover.id} created for record {record_id}")
        return cover

    async def replace_cover(
        self, record_id: int, *, title: Optional[str], description: Optional[str]
    ) -> Cover:
        """Overwrite every cover field; absent values are stored as null."""
        cover = await self.get_cover(record_id)
        if cover is None:
            raise NotFoundError(f"Cover for record {record_id} not found")
        cover.title = title
        cover.description = description
        await self.session.commit()
        await self.session.refresh(cover)
        return cover

    async def delete_cover(self, record_id: int) -> None:
        cover_ids = select(Cover.id).where(Cover.record_id == record_id)
        await self.session.execute(
            delete(Bookmark).where(Bookmark.cover_id.in_(cover_ids)),
            execution_options=_BULK,
        )
        result = await self.session.execute(
            delete(Cover).where(Cover.record_id == record_id), execution_options=_BULK
        )
        if result.rowcount == 0:
            await self.session.rollback()
            raise NotFoundError(f"Cover for record {record_id} not found")
        await self.session.commit()
        logger.info(f"Cover of record {record_id} deleted")


class FlashcardService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_flashcards(
        self, *, record_id: Optional[int] = None, query: Optional[str] = None
    ) -> Sequence[Flashcard]:
        stmt = select(Flashcard)
        if record_id is not None:
            stmt = stmt.where(Flashcard.record_id == record_id)
        if query:
            pattern = contains_pattern(query)
            stmt = stmt.where(
                or_(
                    Flashcard.question.ilike(pattern, escape="\\"),
                    Flashcard.answer.ilike(pattern, escape="\\"),
                    Flashcard.hint.ilike(pattern, escape="\\"),
                )
            )
        result = await self.session.execute(
            stmt.order_by(Flashcard.record_id, Flashcard.sequence_number)
        )
        return result.scalars().all()

    async def review(self, record_id: int) -> Sequence[Flashcard]:
        await _require_record(self.session, record_id)
        return await self.list_flashcards(record_id=record_id)

    async def create_flashcard(
        self,
        *,
        record_id: int,
        question: str,
        answer: str,
        hint: Optional[str] = None,
    ) -> Flashcard:
        """Append a flashcard numbered max + 1 within its record.

        The number is computed inside the INSERT; a concurrent insert that
        claims the same number violates the unique constraint and is retried.
        """
        await _require_record(self.session, record_id)

        for attempt in range(1, SEQUENCE_RETRIES + 1):
            existing = aliased(Flashcard)
            next_number = (
                select(func.coalesce(func.max(existing.sequence_number), 0) + 1)
                .where(existing.record_id == record_id)
                .scalar_subquery()
            )
            stmt = (
                insert(Flashcard)
                .values(
                    record_id=record_id,
                    sequence_number=next_number,
                    question=question,
                    answer=answer,
                    hint=hint,
                )
                .returning(Flashcard)
            )
            try:
                card = (await self.session.scalars(stmt)).one()
                await self.session.commit()
            except IntegrityError:
                await self.session.rollback()
                if attempt == SEQUENCE_RETRIES:
                    raise
                logger.warning(
                    f"Flashcard number collision on record {record_id}, retry {attempt}"
                )
                continue
            logger.info(
                f"Flashcard {card.sequence_number} created for record {record_id}"
            )
            return card

        raise CardlyError(f"Could not number flashcard for record {record_id}")

    async def _get(self, record_id: int, sequence_number: int) -> Flashcard:
        result = await self.session.execute(
            select(Flashcard).where(
                Flashcard.record_id == record_id,
                Flashcard.sequence_number == sequence_number,
            )
        )
        card = result.scalar_one_or_none()
        if card is None:
            raise NotFoundError(
                f"Flashcard {sequence_number} not found in record {record_id}"
            )
        return card

    async def update_flashcard(
        self, record_id: int, sequence_number: int, changes: dict[str, Any]
    ) -> Flashcard:
        card = await self._get(record_id, sequence_number)
        for field, value in changes.items():
            setattr(card, field, value)
        await self.session.commit()
        await self.session.refresh(card)
        return card

    async def delete_flashcard(self, record_id: int, sequence_number: int) -> None:
        card = await self._get(record_id, sequence_number)
        await self.session.execute(
            delete(Bookmark).where(Bookmark.flashcard_id == card.id),
            execution_options=_BULK,
        )
        await self.session.execute(
            delete(Flashcard).where(Flashcard.id == card.id), execution_options=_BULK
        )
        await self.session.commit()
        logger.info(f"Flashcard {sequence_number} of record {record_id} deleted")


class BookmarkService:
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _target_clause(cover_id: Optional[int], flashcard_id: Optional[int]):
        if cover_id is not None:
            return Bookmark.cover_id == cover_id
        return Bookmark.flashcard_id == flashcard_id

    async def create_bookmark(
        self,
        *,
        user_id: int,
        cover_id: Optional[int] = None,
        flashcard_id: Optional[int] = None,
    ) -> tuple[Bookmark, bool]:
        """Return the bookmark and whether it was newly created."""
        await _require_user(self.session, user_id)
        if cover_id is not None:
            if await self.session.get(Cover, cover_id) is None:
                raise NotFoundError(f"Cover {cover_id} not found")
        elif await self.session.get(Flashcard, flashcard_id) is None:
            raise NotFoundError(f"Flashcard {flashcard_id} not found")

        # Concurrent duplicates collapse onto the per-target unique constraint
        target = "cover_id" if cover_id is not None else "flashcard_id"
        stmt = (
            dialect_insert(self.session, Bookmark)
            .values(user_id=user_id, cover_id=cover_id, flashcard_id=flashcard_id)
            .on_conflict_do_nothing(index_elements=["user_id", target])
            .returning(Bookmark.id)
        )
        inserted_id = (await self.session.execute(stmt)).scalar_one_or_none()

        result = await self.session.execute(
            select(Bookmark).where(
                Bookmark.user_id == user_id,
                self._target_clause(cover_id, flashcard_id),
            )
        )
        bookmark = result.scalar_one()
        await self.session.commit()

        created = inserted_id is not None
        if created:
            logger.info(f"Bookmark {bookmark.id} created for user {user_id}")
        return bookmark, created

    async def list_bookmarks(self, user_id: int) -> Sequence[Bookmark]:
        result = await self.session.execute(
            select(Bookmark)
            .options(selectinload(Bookmark.cover), selectinload(Bookmark.flashcard))
            .where(Bookmark.user_id == user_id)
            .order_by(Bookmark.id)
        )
        return result.scalars().all()

    async def delete_bookmark(
        self,
        *,
        user_id: int,
        cover_id: Optional[int] = None,
        flashcard_id: Optional[int] = None,
    ) -> None:
        result = await self.session.execute(
            delete(Bookmark).where(
                Bookmark.user_id == user_id,
                self._target_clause(cover_id, flashcard_id),
            ),
            execution_options=_BULK,
        )
        if result.rowcount == 0:
            await self.session.rollback()
            raise NotFoundError("Bookmark not found")
        await self.session.commit()
        logger.info(f"Bookmark removed for user {user_id}")


class RatingService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert_rating(self, *, user_id: int, record_id: int, value: int) -> Rating:
        """Insert or overwrite the single rating of ``user_id`` for ``record_id``."""
        await _require_user(self.session, user_id)
        await _require_record(self.session, record_id)

        stmt = dialect_insert(self.session, Rating).values(
            user_id=user_id, record_id=record_id, value=value
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "record_id"],
            set_={"value": stmt.excluded.value, "updated_at": func.now()},
        )
        result = await self.session.scalars(
            stmt.returning(Rating), execution_options={"populate_existing": True}
        )
        rating = result.one()
        await self.session.commit()
        logger.info(f"Rating {value} stored for record {record_id} by user {user_id}")
        return rating

    async def summarize(self, record_id: int) -> RatingSummary:
        result = await self.session.execute(
            select(func.avg(Rating.value), func.count(Rating.id)).where(
                Rating.record_id == record_id
            )
        )
        average, count = result.one()
        return RatingSummary(
            record_id=record_id,
            average=float(average) if average is not None else None,
            count=int(count),
        )

    async def delete_rating(self, *, user_id: int, record_id: int) -> None:
        result = await self.session.execute(
            delete(Rating).where(
                Rating.user_id == user_id, Rating.record_id == record_id
            ),
            execution_options=_BULK,
        )
        if result.rowcount == 0:
            await self.session.rollback()
            raise NotFoundError(
                f"Rating for record {record_id} by user {user_id} not found"
            )
        await self.session.commit()

    async def top_rated(self, limit: int = 10) -> list[TopRatedRecord]:
        """Public records with ratings, best average first."""
        average = func.avg(Rating.value).label("average_rating")
        count = func.count(Rating.id).label("rating_count")
        stmt = (
            select(Record.id, Record.category, Record.status, Cover.title, average, count)
            .join(Rating, Rating.record_id == Record.id)
            .outerjoin(Cover, Cover.record_id == Record.id)
            .where(Record.status == RecordStatus.PUBLIC)
            .group_by(Record.id, Record.category, Record.status, Cover.title)
            .order_by(average.desc(), count.desc(), Record.id)
            .limit(limit)
        )
        rows = (await self.session.execute(stmt)).all()
        return [
            TopRatedRecord(
                record_id=row.id,
                category=row.category,
                status=row.status,
                title=row.title,
                average=float(row.average_rating),
                count=int(row.rating_count),
            )
            for row in rows
        ]
