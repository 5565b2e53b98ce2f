import pytest
from httpx import ASGITransport, AsyncClient

from youthsync.services.export import parse_export

DAY = "2025-07-08"


async def post(api, person_id, day, status):
    return await api.post(
        "/attendance", json={"personId": person_id, "date": day, "status": status}
    )


async def test_root_describes_the_api(api):
    response = await api.get("/")

    assert response.status_code == 200
    assert "/report" in response.json()["usage"]


async def test_health_probes(api):
    assert (await api.get("/health")).json()["status"] == "ok"
    assert (await api.get("/health/db")).json() == {"status": "up", "database": "connected"}


async def test_record_attendance(api):
    response = await post(api, 1, DAY, "Present")

    assert response.status_code == 201
    assert response.json() == {
        "status": "recorded",
        "event": {"personId": 1, "date": DAY, "status": "Present"},
    }
    assert "X-Latency-Ms" in response.headers


@pytest.mark.parametrize(
    "person_id, day, status, field",
    [
        (-1, DAY, "Present", "personId"),
        (2**31, DAY, "Present", "personId"),
        (2**63, DAY, "Present", "personId"),
        (1, "2025-7-8", "Present", "date"),
        (1, "not-a-date", "Present", "date"),
        (1, DAY, "Tardy", "status"),
    ],
)
async def test_invalid_submission_is_422_and_not_stored(api, person_id, day, status, field):
    response = await post(api, person_id, day, status)

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert list(error["fields"]) == [field]
    assert (await api.get("/report")).json() == []


@pytest.mark.parametrize(
    "body, reason",
    [
        (b"{not json", "is not valid JSON"),
        (b'[1, "2025-07-08", "Present"]', "must be a JSON object"),
        (b'"Present"', "must be a JSON object"),
    ],
)
async def test_unusable_body_gets_the_error_envelope(api, body, reason):
    response = await api.post(
        "/attendance", content=body, headers={"content-type": "application/json"}
    )

    assert response.status_code == 422
    payload = response.json()
    assert "detail" not in payload
    assert payload["error"]["code"] == "VALIDATION_ERROR"
    assert payload["error"]["fields"] == {"body": reason}
    assert payload["generated_at"].endswith("Z")
    assert (await api.get("/report")).json() == []


async def test_empty_report_and_export(api):
    report = await api.get("/report")
    export = await api.get("/export")

    assert report.status_code == 200
    assert report.json() == []
    assert export.status_code == 200
    assert export.text == "personId,date,status\r\n"


async def test_report_counts_and_orders_dates(api):
    await post(api, 1, "2025-07-09", "Present")
    await post(api, 1, DAY, "Present")
    await post(api, 2, DAY, "Absent")
    await post(api, 3, DAY, "Present")

    response = await api.get("/report")

    assert response.json() == [
        {"date": DAY, "presentCount": 2, "absentCount": 1},
        {"date": "2025-07-09", "presentCount": 1, "absentCount": 0},
    ]


async def test_resubmission_overrides_status(api):
    await post(api, 1, DAY, "Present")
    await post(api, 1, DAY, "Absent")

    assert (await api.get("/report")).json() == [
        {"date": DAY, "presentCount": 0, "absentCount": 1}
    ]
    assert (await api.get("/export")).text.splitlines()[1:] == ["1,2025-07-08,Absent"]


async def test_export_is_a_csv_download_that_round_trips(api):
    submitted = [(4, DAY, "Absent"), (2, "2025-07-10", "Present"), (1, DAY, "Present")]
    for row in submitted:
        await post(api, *row)

    response = await api.get("/export")

    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == 'attachment; filename="attendance.csv"'
    events = parse_export(response.text)
    assert [e.to_wire() for e in events] == [
        {"personId": 1, "date": DAY, "status": "Present"},
        {"personId": 4, "date": DAY, "status": "Absent"},
        {"personId": 2, "date": "2025-07-10", "status": "Present"},
    ]


async def test_storage_failure_is_503(broken_app):
    async with AsyncClient(
        transport=ASGITransport(app=broken_app), base_url="http://testserver"
    ) as api:
        submit = await post(api, 1, DAY, "Present")
        report = await api.get("/report")
        export = await api.get("/export")

    for response in (submit, report, export):
        assert response.status_code == 503
        assert response.json()["error"]["code"] == "STORAGE_ERROR"


async def test_bad_input_beats_storage_failure(broken_app):
    async with AsyncClient(
        transport=ASGITransport(app=broken_app), base_url="http://testserver"
    ) as api:
        response = await post(api, 1, DAY, "Tardy")

    assert response.status_code == 422
