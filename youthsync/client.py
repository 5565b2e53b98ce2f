import asyncio
import enum
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import httpx

from youthsync.config import settings
from youthsync.schemas.attendance import AttendanceEvent, DailyReportRow
from youthsync.utils.logging import get_logger

logger = get_logger(__name__)

# InvalidURL and StreamError do not derive from httpx.HTTPError.
REQUEST_ERRORS = (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, TypeError, ValueError)


class SyncState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"
    SUBMITTING = "submitting"
    SUBMIT_FAILED = "submit_failed"


@dataclass(frozen=True)
class SyncSnapshot:
    state: SyncState
    report: Optional[Tuple[DailyReportRow, ...]]
    message: Optional[str]


def _error_message(response: httpx.Response) -> str:
    """Best-effort human message from an API error body."""
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text or response.reason_phrase}"

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        fields = error.get("fields")
        if isinstance(fields, dict) and fields:
            return "; ".join(f"{name}: {reason}" for name, reason in fields.items())
        if error.get("message"):
            return str(error["message"])
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return f"HTTP {response.status_code}"


class ReportSyncClient:
    """
    Keeps the last DailyReport fetched from the API plus one user-facing message.

    Every mutation goes through _transition. A failed load or submit keeps the
    previous report. Nothing here raises to the caller, retries, or polls.
    """

    def __init__(self, http: httpx.AsyncClient):
        self.http = http
        self._lock = asyncio.Lock()
        self._snapshot = SyncSnapshot(state=SyncState.IDLE, report=None, message=None)

    @classmethod
    def from_settings(cls, base_url: Optional[str] = None) -> "ReportSyncClient":
        http = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=settings.CLIENT_TIMEOUT_SECONDS,
        )
        return cls(http)

    @property
    def snapshot(self) -> SyncSnapshot:
        return self._snapshot

    @property
    def state(self) -> SyncState:
        return self._snapshot.state

    @property
    def report(self) -> Optional[Tuple[DailyReportRow, ...]]:
        return self._snapshot.report

    @property
    def message(self) -> Optional[str]:
        return self._snapshot.message

    def _transition(self, state: SyncState, *, report=None, message=None) -> None:
        previous = self._snapshot
        self._snapshot = SyncSnapshot(
            state=state,
            report=previous.report if report is None else report,
            message=message,
        )
        logger.debug("Sync state %s -> %s", previous.state.value, state.value)

    async def mount(self) -> SyncState:
        """Initial load. Only runs once, from Idle."""
        async with self._lock:
            if self.state is SyncState.IDLE:
                await self._load()
            return self.state

    async def refresh(self) -> SyncState:
        async with self._lock:
            await self._load()
            return self.state

    async def submit(self, payload: Any) -> SyncState:
        """
        Post one attendance event; on success re-fetch the report exactly once.
        """
        async with self._lock:
            if isinstance(payload, AttendanceEvent):
                payload = payload.to_wire()

            self._transition(SyncState.SUBMITTING, message=self.message)
            try:
                response = await self.http.post("/attendance", json=payload)
            except REQUEST_ERRORS as exc:
                self._transition(
                    SyncState.SUBMIT_FAILED, message=f"Could not submit attendance: {exc}"
                )
                return self.state

            if response.is_error:
                self._transition(
                    SyncState.SUBMIT_FAILED,
                    message=f"Could not submit attendance: {_error_message(response)}",
                )
                return self.state

            await self._load(success_message="Attendance recorded")
            return self.state

    async def _load(self, success_message: Optional[str] = None) -> None:
        self._transition(SyncState.LOADING, message=self.message)
        try:
            response = await self.http.get("/report")
            if response.is_error:
                reason = _error_message(response)
                self._transition(
                    SyncState.LOAD_FAILED, message=f"Could not load report: {reason}"
                )
                return
            rows = tuple(DailyReportRow.model_validate(item) for item in response.json())
        except REQUEST_ERRORS as exc:
            self._transition(SyncState.LOAD_FAILED, message=f"Could not load report: {exc}")
            return

        self._transition(SyncState.LOADED, report=rows, message=success_message)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "ReportSyncClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
