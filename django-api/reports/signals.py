"""Django signals for cache invalidation."""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from reports import cache as report_cache
from reports.models import AttractionReport, DailyReport, ReportEditLog


@receiver([post_save, post_delete], sender=DailyReport)
def invalidate_report_cache(sender, instance, **kwargs):
    """Invalidate caches when a report is saved or deleted."""
    report_cache.invalidate_report(instance.pk)


@receiver([post_save, post_delete], sender=AttractionReport)
def invalidate_attraction_report_cache(sender, instance, **kwargs):
    """Invalidate the parent report when one of its sub-reports changes."""
    report_cache.invalidate_report(instance.report_id)


@receiver(post_save, sender=ReportEditLog)
def invalidate_edit_log_cache(sender, instance, **kwargs):
    """Invalidate a report's edit history when an entry is appended."""
    report_cache.invalidate_edit_log(instance.report_id)
