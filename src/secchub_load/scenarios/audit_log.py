"""Log domain: audit log queries, streamed back as NDJSON."""

from datetime import datetime, timedelta, timezone
from urllib.parse import quote

from ..checks import Predicate, content_type_includes, status_is
from ..client import NDJSON
from ..steps import StepRunner
from ._registry import Domain, operation

AUDIT_EMAILS = ["admin@secchub.com", "teacher1@secchub.com", "student1@secchub.com"]
AUDIT_ACTIONS = ["CREATE", "UPDATE", "DELETE", "READ"]
AUDIT_METHODS = [
    "createCourse", "updateCourse", "deleteCourse",
    "getAllTeachers", "updateTeacher", "registerStudent",
]


def _ndjson_checks(label: str) -> dict[str, Predicate]:
    return {
        f"{label} (200)": status_is(200),
        f"{label} is ndjson": content_type_includes(NDJSON),
        f"{label} has records": lambda r: r.ndjson_lines() > 0,
    }


def _query(steps: StepRunner, path: str, *, trend: str, operation: str, label: str,
           params: dict | None = None) -> None:
    steps.call(
        "GET", path, params=params, accept=NDJSON,
        trend=trend, operation=operation, checks=_ndjson_checks(label),
    )


def _iso(moment: datetime) -> str:
    """ISO-8601 without fractional seconds, e.g. 2025-03-01T12:00:00."""
    return moment.replace(microsecond=0, tzinfo=None).isoformat()


@operation(Domain.LOG, "all", weight=25)
def all_logs(steps: StepRunner) -> None:
    _query(steps, "/audit-logs", trend="log_audit_query_duration_ms",
           operation="audit_get_all", label="get all audit logs")


@operation(Domain.LOG, "by_email", weight=20)
def logs_by_email(steps: StepRunner) -> None:
    email = steps.pick(AUDIT_EMAILS)
    _query(steps, f"/audit-logs/email/{quote(email)}",
           trend="log_audit_by_email_duration_ms",
           operation="audit_get_by_email", label="get audit logs by email")


@operation(Domain.LOG, "by_action", weight=20)
def logs_by_action(steps: StepRunner) -> None:
    action = steps.pick(AUDIT_ACTIONS)
    _query(steps, f"/audit-logs/action/{action}",
           trend="log_audit_by_action_duration_ms",
           operation="audit_get_by_action", label="get audit logs by action")


@operation(Domain.LOG, "by_date_range", weight=15)
def logs_by_date_range(steps: StepRunner) -> None:
    end = datetime.now(timezone.utc)
    start = end - timedelta(hours=24)
    _query(steps, "/audit-logs/date-range",
           params={"start": _iso(start), "end": _iso(end)},
           trend="log_audit_by_date_range_duration_ms",
           operation="audit_get_by_date_range", label="get audit logs by date range")


@operation(Domain.LOG, "by_method", weight=10)
def logs_by_method(steps: StepRunner) -> None:
    method = steps.pick(AUDIT_METHODS)
    _query(steps, f"/audit-logs/method/{method}",
           trend="log_audit_by_method_duration_ms",
           operation="audit_get_by_method", label="get audit logs by method")


@operation(Domain.LOG, "combined", weight=10)
def logs_by_email_and_action(steps: StepRunner) -> None:
    action = steps.pick(AUDIT_ACTIONS[:3])
    _query(steps, f"/audit-logs/email/{quote('admin@secchub.com')}/action/{action}",
           trend="log_audit_combined_duration_ms",
           operation="audit_get_combined", label="get audit logs by email and action")
