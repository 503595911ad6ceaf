"""Cache keys and helpers for report reads."""

from django.conf import settings
from django.core.cache import cache


def report_key(report_id) -> str:
    return f"reports:{report_id}"


def edit_log_key(report_id) -> str:
    return f"reports:{report_id}:edits"


def timeout() -> int:
    return settings.REPORTS_CACHE_TIMEOUT


def invalidate_report(report_id) -> None:
    cache.delete_many([report_key(report_id), edit_log_key(report_id)])


def invalidate_edit_log(report_id) -> None:
    cache.delete(edit_log_key(report_id))
