from .attendance import ISO_DATE_FORMAT, AttendanceEvent, DailyReportRow

__all__ = [
    "ISO_DATE_FORMAT",
    "AttendanceEvent",
    "DailyReportRow",
]
