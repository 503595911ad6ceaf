"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.db import models

ROLE_CHOICES = [
    ("petugas", "Petugas"),
    ("koordinator", "Koordinator"),
    ("admin", "Admin"),
]

STATUS_CHOICES = [
    ("draft", "Draft"),
    ("submitted", "Submitted"),
]


class AppendOnlyError(Exception):
    """Raised when code tries to change or remove an audit row."""


class Site(models.Model):
    """Persistence model for tourism sites."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=255)
    location = models.CharField(max_length=255, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.code} - {self.name}"


class Staff(models.Model):
    """Staff account as seen by identity resolution."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    role = models.CharField(max_length=16, choices=ROLE_CHOICES)
    site = models.ForeignKey(
        Site, on_delete=models.SET_NULL, null=True, blank=True, related_name="staff"
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "staff"

    def __str__(self) -> str:
        return f"{self.name} ({self.role})"


class Attraction(models.Model):
    """Persistence model for optional paid add-ons at a site."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    site = models.ForeignKey(Site, on_delete=models.CASCADE, related_name="attractions")
    name = models.CharField(max_length=255)
    price = models.PositiveIntegerField()
    requires_ticket_block = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "name"]
        indexes = [
            models.Index(fields=["site", "sort_order"], name="reports_att_site_id_8a1e4b_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} - {self.price}"


class DailyReport(models.Model):
    """Persistence model for one site's report for one day."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    site = models.ForeignKey(Site, on_delete=models.PROTECT, related_name="reports")
    report_date = models.DateField()

    anak_count = models.PositiveIntegerField(default=0)
    dewasa_count = models.PositiveIntegerField(default=0)
    wna_count = models.PositiveIntegerField(default=0)
    dewasa_male = models.PositiveIntegerField(default=0)
    dewasa_female = models.PositiveIntegerField(default=0)
    anak_male = models.PositiveIntegerField(null=True, blank=True)
    anak_female = models.PositiveIntegerField(null=True, blank=True)
    wna_countries = models.JSONField(default=dict, blank=True)

    anak_revenue = models.PositiveBigIntegerField(default=0)
    dewasa_revenue = models.PositiveBigIntegerField(default=0)
    wna_revenue = models.PositiveBigIntegerField(default=0)
    attraction_revenue = models.PositiveBigIntegerField(default=0)
    cash_amount = models.PositiveBigIntegerField(default=0)
    qris_amount = models.PositiveBigIntegerField(default=0)

    notes = models.TextField(blank=True, null=True)
    ticket_blocks = models.JSONField(default=list, blank=True)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default="draft")
    created_by = models.ForeignKey(
        Staff, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    submitted_by = models.ForeignKey(
        Staff, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    submitted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-report_date"]
        constraints = [
            models.UniqueConstraint(
                fields=["site", "report_date"], name="uniq_report_site_date"
            ),
        ]
        indexes = [
            models.Index(fields=["-report_date"], name="reports_dai_report__5b0e7c_idx"),
            models.Index(fields=["status", "report_date"], name="reports_dai_status_9d3f2a_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.site.code} {self.report_date} ({self.status})"


class AttractionReport(models.Model):
    """Persistence model for an attraction's results within a daily report."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    report = models.ForeignKey(
        DailyReport, on_delete=models.CASCADE, related_name="attraction_reports"
    )
    attraction = models.ForeignKey(
        Attraction, on_delete=models.PROTECT, related_name="reports"
    )
    visitor_count = models.PositiveIntegerField(default=0)
    ticket_blocks = models.JSONField(default=list, blank=True)
    revenue = models.PositiveBigIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["report", "attraction"], name="uniq_attraction_per_report"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.attraction.name}: {self.visitor_count}"


class AppendOnlyModel(models.Model):
    """Rows are written once and never changed or removed through the ORM."""

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AppendOnlyError(f"{type(self).__name__} entries are append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AppendOnlyError(f"{type(self).__name__} entries cannot be deleted")


class ReportEditLog(AppendOnlyModel):
    """Field-level audit trail of privileged report edits."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    report_id = models.UUIDField(db_index=True)
    edited_by = models.UUIDField()
    edited_at = models.DateTimeField()
    changes = models.JSONField()
    reason = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-edited_at"]

    def __str__(self) -> str:
        return f"edit {self.report_id} at {self.edited_at}"


class ActivityLog(AppendOnlyModel):
    """Lifecycle activity on reports (creation, submission, deletion)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField(null=True, blank=True)
    site_id = models.UUIDField(null=True, blank=True)
    action = models.CharField(max_length=64)
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["action", "created_at"], name="reports_act_action_2f6c1d_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.action} at {self.created_at}"
