from collections import Counter
from typing import Iterable, List

from youthsync.models.attendance import AttendanceStatus
from youthsync.schemas.attendance import AttendanceEvent, DailyReportRow


def aggregate_daily(events: Iterable[AttendanceEvent]) -> List[DailyReportRow]:
    """
    Collapse attendance events into one row per active date.

    Rows are sorted by the date objects themselves, never their string form.
    Dates without events do not appear; an empty input gives an empty report.
    """
    present: Counter = Counter()
    absent: Counter = Counter()

    for event in events:
        if event.status is AttendanceStatus.PRESENT:
            present[event.date] += 1
        else:
            absent[event.date] += 1

    return [
        DailyReportRow(
            date=day,
            present_count=present[day],
            absent_count=absent[day],
        )
        for day in sorted(present.keys() | absent.keys())
    ]
