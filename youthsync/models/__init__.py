from .base import Base
from .attendance import Attendance, AttendanceStatus

# for wildcard imports
__all__ = ["Base", "Attendance", "AttendanceStatus"]
