"""Mark attendance against a running YouthSync API and print the refreshed report.

    python scripts/mark_attendance.py 7 2025-07-08 Present
    python scripts/mark_attendance.py --report
"""
import argparse
import asyncio
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv  # noqa: E402

load_dotenv()

from youthsync.client import ReportSyncClient, SyncState  # noqa: E402


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("person_id", nargs="?", help="positive integer id")
    parser.add_argument("date", nargs="?", help="YYYY-MM-DD")
    parser.add_argument("status", nargs="?", choices=["Present", "Absent"])
    parser.add_argument("--report", action="store_true", help="only fetch the report")
    parser.add_argument("--url", default=None, help="API base URL (defaults to API_BASE_URL)")
    args = parser.parse_args(argv)
    if not args.report and not (args.person_id and args.date and args.status):
        parser.error("person_id, date and status are required unless --report is given")
    return args


def print_report(sync: ReportSyncClient) -> None:
    if sync.message:
        print(sync.message)
    if sync.report is None:
        return
    if not sync.report:
        print("No attendance recorded yet.")
    for row in sync.report:
        print(f"{row.date.isoformat()}  present={row.present_count:<4} absent={row.absent_count}")


async def main(argv=None) -> int:
    args = parse_args(argv)
    async with ReportSyncClient.from_settings(args.url) as sync:
        if args.report:
            state = await sync.mount()
        else:
            state = await sync.submit(
                {"personId": args.person_id, "date": args.date, "status": args.status}
            )
        print_report(sync)
    return 0 if state is SyncState.LOADED else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
