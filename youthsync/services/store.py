from typing import List, Protocol, Sequence

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from youthsync.models.attendance import Attendance
from youthsync.schemas.attendance import AttendanceEvent
from youthsync.services.errors import StorageError
from youthsync.utils.logging import get_logger

logger = get_logger(__name__)

# Dialects with INSERT ... ON CONFLICT DO UPDATE.
UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class AttendanceStore(Protocol):
    async def upsert(self, event: AttendanceEvent) -> None: ...

    async def list_events(self) -> Sequence[AttendanceEvent]: ...


class SqlAttendanceStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return UPSERT_INSERTS[dialect]
        except KeyError:
            raise StorageError(f"Upsert is not supported on the '{dialect}' dialect") from None

    async def upsert(self, event: AttendanceEvent) -> None:
        """
        Insert the event or overwrite the status already stored for its (person, date).

        A single INSERT ... ON CONFLICT statement, so the database's unique
        constraint serializes concurrent writers for the same key.
        """
        insert = self._insert()
        stmt = insert(Attendance).values(
            person_id=event.person_id,
            date=event.date,
            status=event.status,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["person_id", "date"],
            set_={"status": stmt.excluded.status, "updated_at": func.now()},
        )

        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except (SQLAlchemyError, OSError) as exc:
            await self._rollback()
            logger.exception("Upsert failed for person %s on %s", event.person_id, event.date)
            raise StorageError(f"Could not store attendance: {exc}") from exc

    async def list_events(self) -> List[AttendanceEvent]:
        query = select(Attendance.person_id, Attendance.date, Attendance.status).order_by(
            Attendance.date, Attendance.person_id
        )
        try:
            result = await self.db.execute(query)
            rows = result.all()
        except (SQLAlchemyError, OSError) as exc:
            await self._rollback()
            logger.exception("Reading attendance events failed")
            raise StorageError(f"Could not read attendance: {exc}") from exc

        return [
            AttendanceEvent(person_id=person_id, date=day, status=status)
            for person_id, day, status in rows
        ]

    async def _rollback(self) -> None:
        try:
            await self.db.rollback()
        except (SQLAlchemyError, OSError):
            logger.warning("Rollback failed after a storage error", exc_info=True)
