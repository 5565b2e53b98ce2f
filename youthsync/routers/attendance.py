from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from youthsync.database import get_db
from youthsync.schemas.attendance import DailyReportRow
from youthsync.services.attendance import ReportService
from youthsync.services.export import EXPORT_FILENAME, EXPORT_MEDIA_TYPE
from youthsync.services.store import SqlAttendanceStore

router = APIRouter(tags=["attendance"])


def get_report_service(db: AsyncSession = Depends(get_db)) -> ReportService:
    return ReportService(SqlAttendanceStore(db))


@router.post("/attendance", status_code=status.HTTP_201_CREATED)
async def record_attendance(
    payload: Dict[str, Any] = Body(
        ...,
        examples=[{"personId": 1, "date": "2025-07-08", "status": "Present"}],
    ),
    service: ReportService = Depends(get_report_service),
):
    """
    Record one person's status for one date.

    Resubmitting the same person and date overwrites the stored status.
    """
    event = await service.submit(payload)
    return {"status": "recorded", "event": event.to_wire()}


@router.get("/report", response_model=List[DailyReportRow])
async def get_report(service: ReportService = Depends(get_report_service)):
    """Present/absent counts per date, ascending by date."""
    return await service.get_report()


@router.get("/export")
async def export_csv(service: ReportService = Depends(get_report_service)):
    """Every stored event as CSV, ordered by date then person."""
    content = await service.export_raw()
    return Response(
        content=content,
        media_type=EXPORT_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )
