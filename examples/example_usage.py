"""Example: call the service layer directly, without Flask.

Controllers are thin; the rules live in the services, so a script can reuse
them the same way the HTTP layer does.
"""

import importlib
import sys

from config import get_settings_module

from src.campustrack.campustrack.common.datetime_utils import now_local
from src.campustrack.campustrack.container import build_container
from src.campustrack.campustrack.periods import resolver


def main(student_id: str) -> None:
    now = now_local()
    day = resolver.day_of(now.date())
    for period, display in enumerate(resolver.all_period_times_for_day(day), start=1):
        verdict = resolver.is_markable(day, period, now)
        print(f"P{period} {display}: {verdict.reason}")

    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    student = container.students_repo.get_by_id(student_id)
    if not student:
        print("Student not found")
        return

    result = container.report_service.semester_summary(student.student_id, student.semester_id)
    if not result.success:
        print(result.message)
        return
    summary = result.data
    print(f"Overall: {summary.overall.present}/{summary.overall.total} ({summary.overall.percentage}%)")
    for s in summary.subjects:
        print(f"  {s.subject_name or s.subject_id}: {s.present}/{s.total} ({s.percentage}%)")


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else "s0000000-0000-0000-0000-000000000001")
