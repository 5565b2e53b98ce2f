import datetime  # Import module to avoid name collision with the field 'date'
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from youthsync.models.attendance import AttendanceStatus

ISO_DATE_FORMAT = "%Y-%m-%d"
ISO_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")

# Upper bound of the 32-bit INTEGER person_id column.
MAX_PERSON_ID = 2**31 - 1


# --- Event Schema (validated submission, stored row, export row) ---
class AttendanceEvent(BaseModel):
    person_id: int = Field(..., alias="personId", examples=[1])
    date: datetime.date = Field(..., examples=["2025-07-08"])
    status: AttendanceStatus = Field(..., examples=["Present", "Absent"])

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    # Form fields arrive as strings, so coercion is explicit rather than pydantic's lax mode.
    @field_validator("person_id", mode="before")
    @classmethod
    def _positive_int(cls, v):
        if isinstance(v, str) and v.strip().isdigit():
            v = int(v.strip())
        if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
            raise ValueError("must be a positive integer")
        if v > MAX_PERSON_ID:
            raise ValueError(f"must not exceed {MAX_PERSON_ID}")
        return v

    @field_validator("date", mode="before")
    @classmethod
    def _calendar_date(cls, v):
        if isinstance(v, datetime.datetime):
            raise ValueError("must be a calendar date in YYYY-MM-DD form")
        if isinstance(v, datetime.date):
            return v
        if isinstance(v, str) and ISO_DATE_PATTERN.fullmatch(v.strip()):
            try:
                return datetime.datetime.strptime(v.strip(), ISO_DATE_FORMAT).date()
            except ValueError:
                pass
        raise ValueError("must be a calendar date in YYYY-MM-DD form")

    @field_validator("status", mode="before")
    @classmethod
    def _known_status(cls, v):
        if isinstance(v, AttendanceStatus):
            return v
        allowed = [s.value for s in AttendanceStatus]
        if isinstance(v, str) and v in allowed:
            return AttendanceStatus(v)
        raise ValueError(f"must be one of: {', '.join(allowed)}")

    @property
    def key(self) -> tuple[int, datetime.date]:
        return self.person_id, self.date

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# --- Report Schema (Output) ---
class DailyReportRow(BaseModel):
    date: datetime.date
    present_count: int = Field(0, ge=0, alias="presentCount")
    absent_count: int = Field(0, ge=0, alias="absentCount")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def total(self) -> int:
        return self.present_count + self.absent_count
