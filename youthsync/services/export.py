import csv
import io
from typing import Iterable, List

from youthsync.schemas.attendance import ISO_DATE_FORMAT, AttendanceEvent
from youthsync.services.errors import ValidationError
from youthsync.services.validation import parse_event

EXPORT_HEADER = ["personId", "date", "status"]
EXPORT_MEDIA_TYPE = "text/csv"
EXPORT_FILENAME = "attendance.csv"


def export_order(event: AttendanceEvent):
    return event.date, event.person_id


def write_export(events: Iterable[AttendanceEvent]) -> str:
    """Serialize events as CSV with a header row, one event per row, in the given order."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_HEADER)
    for event in events:
        writer.writerow(
            [event.person_id, event.date.strftime(ISO_DATE_FORMAT), event.status.value]
        )
    return buffer.getvalue()


def parse_export(text: str) -> List[AttendanceEvent]:
    """Read a payload produced by write_export back into events."""
    reader = csv.reader(io.StringIO(text, newline=""))
    header = next(reader, None)
    if header != EXPORT_HEADER:
        raise ValidationError(
            {"header": f"expected {','.join(EXPORT_HEADER)}, got {header!r}"}
        )

    events: List[AttendanceEvent] = []
    for line_no, row in enumerate(reader, start=2):
        if not row:
            continue
        if len(row) != len(EXPORT_HEADER):
            raise ValidationError(
                {f"row {line_no}": f"expected {len(EXPORT_HEADER)} fields, got {len(row)}"}
            )
        try:
            events.append(parse_event(dict(zip(EXPORT_HEADER, row))))
        except ValidationError as exc:
            raise ValidationError(
                {f"row {line_no}.{name}": reason for name, reason in exc.fields.items()}
            ) from exc
    return events
