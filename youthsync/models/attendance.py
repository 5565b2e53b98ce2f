import enum
import datetime

from sqlalchemy import Date, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class AttendanceStatus(str, enum.Enum):
    PRESENT = "Present"
    ABSENT = "Absent"


class Attendance(Base, TimestampMixin):
    __tablename__ = "attendance"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    person_id: Mapped[int] = mapped_column(nullable=False, index=True)

    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)

    # Stored by value ("Present"/"Absent") so exports and raw SQL read the same.
    status: Mapped[AttendanceStatus] = mapped_column(
        Enum(
            AttendanceStatus,
            name="attendance_status",
            native_enum=False,
            length=16,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
    )

    # one record per person per day.
    __table_args__ = (
        UniqueConstraint("person_id", "date", name="uq_person_attendance_daily"),
    )

    def __repr__(self):
        return (
            f"<Attendance(person_id={self.person_id}, date='{self.date}', "
            f"status='{self.status.value}')>"
        )
