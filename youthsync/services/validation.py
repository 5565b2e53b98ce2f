from typing import Any, Dict

import pydantic

from youthsync.schemas.attendance import AttendanceEvent
from youthsync.services.errors import ValidationError

# pydantic reports locations by field name or alias depending on the input; normalize to the wire names.
WIRE_FIELDS = {
    "person_id": "personId",
    "personId": "personId",
    "date": "date",
    "status": "status",
}


def parse_event(payload: Any) -> AttendanceEvent:
    """Turn loosely typed input into an AttendanceEvent or raise ValidationError."""
    if isinstance(payload, AttendanceEvent):
        return payload

    try:
        return AttendanceEvent.model_validate(payload)
    except pydantic.ValidationError as exc:
        fields: Dict[str, str] = {}
        for error in exc.errors():
            loc = error.get("loc") or ("body",)
            name = WIRE_FIELDS.get(str(loc[0]), str(loc[0]))
            reason = error["msg"].removeprefix("Value error, ")
            fields.setdefault(name, reason)
        raise ValidationError(fields) from exc
