import asyncio
from datetime import date

import pytest

from conftest import BrokenStore, InMemoryStore
from youthsync.models.attendance import AttendanceStatus
from youthsync.schemas.attendance import AttendanceEvent, DailyReportRow
from youthsync.services.attendance import ReportService
from youthsync.services.errors import StorageError, ValidationError
from youthsync.services.export import parse_export

DAY = "2025-07-08"


async def test_submit_returns_stored_event(service, store):
    event = await service.submit({"personId": 1, "date": DAY, "status": "Present"})

    assert event == AttendanceEvent(person_id=1, date=date(2025, 7, 8), status=AttendanceStatus.PRESENT)
    assert await store.list_events() == [event]


async def test_get_report_on_empty_store_is_empty(service):
    assert await service.get_report() == []


async def test_resubmitting_same_event_is_idempotent(service):
    await service.submit({"personId": 2, "date": DAY, "status": "Absent"})
    once = await service.get_report()

    await service.submit({"personId": 2, "date": DAY, "status": "Absent"})

    assert await service.get_report() == once


async def test_later_submission_overrides_status(service, store):
    await service.submit({"personId": 2, "date": DAY, "status": "Present"})
    baseline = await service.get_report()

    await service.submit({"personId": 1, "date": DAY, "status": "Present"})
    await service.submit({"personId": 1, "date": DAY, "status": "Absent"})

    events = [e for e in await store.list_events() if e.person_id == 1]
    assert [e.status for e in events] == [AttendanceStatus.ABSENT]

    report = await service.get_report()
    assert report[0].present_count == baseline[0].present_count
    assert report[0].absent_count == baseline[0].absent_count + 1


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"personId": -1, "date": DAY, "status": "Present"}, "personId"),
        ({"personId": 1, "date": "not-a-date", "status": "Present"}, "date"),
        ({"personId": 1, "date": DAY, "status": "Tardy"}, "status"),
    ],
)
async def test_invalid_submission_leaves_store_unchanged(service, store, payload, field):
    await service.submit({"personId": 9, "date": DAY, "status": "Present"})
    before = await store.list_events()

    with pytest.raises(ValidationError) as exc:
        await service.submit(payload)

    assert field in exc.value.fields
    assert store.writes == 1
    assert await store.list_events() == before


async def test_export_is_ordered_by_date_then_person(service):
    for person_id, day in [(3, "2025-07-09"), (10, DAY), (2, DAY), (1, "2025-07-09")]:
        await service.submit({"personId": person_id, "date": day, "status": "Present"})

    lines = (await service.export_raw()).splitlines()

    assert lines == [
        "personId,date,status",
        "2,2025-07-08,Present",
        "10,2025-07-08,Present",
        "1,2025-07-09,Present",
        "3,2025-07-09,Present",
    ]


async def test_export_round_trips_the_stored_set():
    events = [
        AttendanceEvent(person_id=p, date=date(2025, 7, d), status=s)
        for p in range(1, 5)
        for d in (7, 8)
        for s in [AttendanceStatus.PRESENT if (p + d) % 2 else AttendanceStatus.ABSENT]
    ]
    store = InMemoryStore(events)
    service = ReportService(store)

    exported = parse_export(await service.export_raw())

    assert set(exported) == set(events)
    assert len(exported) == len(events)


async def test_report_keeps_every_date_the_export_has(service):
    await service.submit({"personId": 1, "date": "2025-07-10", "status": "Absent"})
    await service.submit({"personId": 1, "date": DAY, "status": "Present"})

    assert await service.get_report() == [
        DailyReportRow(date=date(2025, 7, 8), present_count=1, absent_count=0),
        DailyReportRow(date=date(2025, 7, 10), present_count=0, absent_count=1),
    ]


async def test_concurrent_submissions_for_one_key_leave_one_event(service, store):
    await asyncio.gather(
        *(
            service.submit({"personId": 4, "date": DAY, "status": status})
            for status in ["Present", "Absent"] * 5
        )
    )

    assert len(await store.list_events()) == 1


async def test_storage_failures_are_not_validation_errors():
    service = ReportService(BrokenStore())

    with pytest.raises(StorageError):
        await service.submit({"personId": 1, "date": DAY, "status": "Present"})
    with pytest.raises(StorageError):
        await service.get_report()
    with pytest.raises(StorageError):
        await service.export_raw()


async def test_validation_runs_before_storage():
    service = ReportService(BrokenStore())

    with pytest.raises(ValidationError):
        await service.submit({"personId": 0, "date": DAY, "status": "Present"})
