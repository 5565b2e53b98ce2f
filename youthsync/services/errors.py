from typing import Dict, Optional


class AttendanceError(Exception):
    """Base class for failures surfaced by the attendance pipeline."""


class ValidationError(AttendanceError):
    """Caller input was rejected. `fields` maps each bad field to a reason."""

    def __init__(self, fields: Dict[str, str], message: Optional[str] = None):
        self.fields = dict(fields)
        if message is None:
            message = "Invalid " + ", ".join(
                f"{name}: {reason}" for name, reason in self.fields.items()
            )
        super().__init__(message)


class StorageError(AttendanceError):
    """The record store could not complete the operation."""
