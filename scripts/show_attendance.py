import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

script_dir = os.path.dirname(os.path.abspath(__file__))
if os.path.basename(script_dir) == "scripts":
    project_root = os.path.dirname(script_dir)
else:
    project_root = script_dir

sys.path.append(project_root)
env_path = os.path.join(project_root, ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)

# Keep SQL chatter out of the table
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)

from youthsync.database import AsyncSessionLocal  # noqa: E402
from youthsync.services.attendance import ReportService  # noqa: E402
from youthsync.services.errors import StorageError  # noqa: E402
from youthsync.services.store import SqlAttendanceStore  # noqa: E402


async def show_attendance(export: bool = False):
    async with AsyncSessionLocal() as session:
        service = ReportService(SqlAttendanceStore(session))
        try:
            if export:
                print(await service.export_raw(), end="")
                return
            report = await service.get_report()
        except StorageError as e:
            print(f"\n[!] Error fetching data: {e}")
            if "DATABASE_URL" in str(e) or "unable to open" in str(e):
                print("    Hint: Check DATABASE_URL in your .env file.")
            return

    print("\n" + "=" * 48)
    print(f" {'Date':<12} | {'Present':>8} | {'Absent':>8} | {'Total':>8}")
    print("=" * 48)

    if not report:
        print(f" {'No records found.':<46}")
    else:
        for row in report:
            print(
                f" {row.date.isoformat():<12} | {row.present_count:>8} | "
                f"{row.absent_count:>8} | {row.total:>8}"
            )

    print("=" * 48 + "\n")


if __name__ == "__main__":
    try:
        asyncio.run(show_attendance(export="--csv" in sys.argv[1:]))
    except KeyboardInterrupt:
        pass
