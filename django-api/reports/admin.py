from django.contrib import admin

from reports.models import (
    ActivityLog,
    Attraction,
    AttractionReport,
    DailyReport,
    ReportEditLog,
    Site,
    Staff,
)


class ReadOnlyAdminMixin:
    """Rows that only change through the report services."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class AttractionInline(admin.TabularInline):
    model = Attraction
    extra = 1


class AttractionReportInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = AttractionReport
    extra = 0


@admin.register(Site)
class SiteAdmin(admin.ModelAdmin):
    list_display = ["code", "name", "location", "is_active"]
    search_fields = ["code", "name", "location"]
    inlines = [AttractionInline]

    def get_readonly_fields(self, request, obj=None):
        # A site's code is fixed once created.
        return ["code"] if obj else []


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ["name", "role", "site", "is_active"]
    list_filter = ["role", "is_active"]


@admin.register(Attraction)
class AttractionAdmin(admin.ModelAdmin):
    list_display = ["name", "site", "price", "requires_ticket_block", "is_active"]
    list_filter = ["site", "is_active"]


class AppendOnlyAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    pass


# Edits and deletes go through the API so they are logged and revenue is rederived.
@admin.register(DailyReport)
class DailyReportAdmin(AppendOnlyAdmin):
    list_display = ["site", "report_date", "status", "cash_amount", "qris_amount"]
    list_filter = ["status", "site"]
    date_hierarchy = "report_date"
    inlines = [AttractionReportInline]


@admin.register(ReportEditLog)
class ReportEditLogAdmin(AppendOnlyAdmin):
    list_display = ["report_id", "edited_by", "edited_at", "reason"]


@admin.register(ActivityLog)
class ActivityLogAdmin(AppendOnlyAdmin):
    list_display = ["action", "user_id", "site_id", "created_at"]
    list_filter = ["action"]
