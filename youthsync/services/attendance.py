from typing import Any, List

from youthsync.schemas.attendance import AttendanceEvent, DailyReportRow
from youthsync.services.aggregator import aggregate_daily
from youthsync.services.export import export_order, write_export
from youthsync.services.store import AttendanceStore
from youthsync.services.validation import parse_event
from youthsync.utils.logging import get_logger

logger = get_logger(__name__)


class ReportService:
    def __init__(self, store: AttendanceStore):
        self.store = store

    async def submit(self, payload: Any) -> AttendanceEvent:
        """
        Validate a submission and upsert it keyed by (personId, date).

        Raises ValidationError before touching the store when any field is bad,
        and StorageError when the store cannot complete the write.
        """
        event = parse_event(payload)
        await self.store.upsert(event)
        logger.info(
            "Recorded %s for person %s on %s",
            event.status.value,
            event.person_id,
            event.date.isoformat(),
        )
        return event

    async def get_report(self) -> List[DailyReportRow]:
        events = await self.store.list_events()
        return aggregate_daily(events)

    async def export_raw(self) -> str:
        events = await self.store.list_events()
        return write_export(sorted(events, key=export_order))
