import asyncio
import os
import random
import sys
from datetime import date, timedelta

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv  # noqa: E402

load_dotenv()

from sqlalchemy import func, select  # noqa: E402

from youthsync.database import AsyncSessionLocal  # noqa: E402
from youthsync.models.attendance import Attendance, AttendanceStatus  # noqa: E402
from youthsync.services.attendance import ReportService  # noqa: E402
from youthsync.services.store import SqlAttendanceStore  # noqa: E402

PEOPLE = range(1, 13)
DAYS = 10


async def seed():
    async with AsyncSessionLocal() as session:
        # Check if DB is already seeded
        result = await session.execute(select(func.count(Attendance.id)))
        if result.scalar_one():
            print("Database already contains attendance. Skipping seed.")
            return

        print("Seeding database with sample attendance...")
        service = ReportService(SqlAttendanceStore(session))
        start = date.today() - timedelta(days=DAYS - 1)

        count = 0
        for offset in range(DAYS):
            day = start + timedelta(days=offset)
            if day.weekday() >= 5:
                continue
            for person_id in PEOPLE:
                status = (
                    AttendanceStatus.PRESENT
                    if random.random() < 0.8
                    else AttendanceStatus.ABSENT
                )
                await service.submit(
                    {"personId": person_id, "date": day.isoformat(), "status": status.value}
                )
                count += 1

        print(f"Added {count} attendance events for {len(PEOPLE)} people.")


if __name__ == "__main__":
    asyncio.run(seed())
