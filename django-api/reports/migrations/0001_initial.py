import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ActivityLog",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("user_id", models.UUIDField(blank=True, null=True)),
                ("site_id", models.UUIDField(blank=True, null=True)),
                ("action", models.CharField(max_length=64)),
                ("details", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["action", "created_at"], name="reports_act_action_2f6c1d_idx")],
            },
        ),
        migrations.CreateModel(
            name="ReportEditLog",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("report_id", models.UUIDField(db_index=True)),
                ("edited_by", models.UUIDField()),
                ("edited_at", models.DateTimeField()),
                ("changes", models.JSONField()),
                ("reason", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-edited_at"],
            },
        ),
        migrations.CreateModel(
            name="Site",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=32, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("location", models.CharField(blank=True, max_length=255, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Attraction",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("price", models.PositiveIntegerField()),
                ("requires_ticket_block", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("sort_order", models.IntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "site",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="attractions",
                        to="reports.site",
                    ),
                ),
            ],
            options={
                "ordering": ["sort_order", "name"],
                "indexes": [models.Index(fields=["site", "sort_order"], name="reports_att_site_id_8a1e4b_idx")],
            },
        ),
        migrations.CreateModel(
            name="Staff",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                (
                    "role",
                    models.CharField(
                        choices=[("petugas", "Petugas"), ("koordinator", "Koordinator"), ("admin", "Admin")],
                        max_length=16,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "site",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="staff",
                        to="reports.site",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "staff",
            },
        ),
        migrations.CreateModel(
            name="DailyReport",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("report_date", models.DateField()),
                ("anak_count", models.PositiveIntegerField(default=0)),
                ("dewasa_count", models.PositiveIntegerField(default=0)),
                ("wna_count", models.PositiveIntegerField(default=0)),
                ("dewasa_male", models.PositiveIntegerField(default=0)),
                ("dewasa_female", models.PositiveIntegerField(default=0)),
                ("anak_male", models.PositiveIntegerField(blank=True, null=True)),
                ("anak_female", models.PositiveIntegerField(blank=True, null=True)),
                ("wna_countries", models.JSONField(blank=True, default=dict)),
                ("anak_revenue", models.PositiveBigIntegerField(default=0)),
                ("dewasa_revenue", models.PositiveBigIntegerField(default=0)),
                ("wna_revenue", models.PositiveBigIntegerField(default=0)),
                ("attraction_revenue", models.PositiveBigIntegerField(default=0)),
                ("cash_amount", models.PositiveBigIntegerField(default=0)),
                ("qris_amount", models.PositiveBigIntegerField(default=0)),
                ("notes", models.TextField(blank=True, null=True)),
                ("ticket_blocks", models.JSONField(blank=True, default=list)),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("submitted", "Submitted")],
                        default="draft",
                        max_length=16,
                    ),
                ),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField()),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="reports.staff",
                    ),
                ),
                (
                    "site",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reports",
                        to="reports.site",
                    ),
                ),
                (
                    "submitted_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="reports.staff",
                    ),
                ),
            ],
            options={
                "ordering": ["-report_date"],
                "indexes": [
                    models.Index(fields=["-report_date"], name="reports_dai_report__5b0e7c_idx"),
                    models.Index(fields=["status", "report_date"], name="reports_dai_status_9d3f2a_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("site", "report_date"), name="uniq_report_site_date"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AttractionReport",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("visitor_count", models.PositiveIntegerField(default=0)),
                ("ticket_blocks", models.JSONField(blank=True, default=list)),
                ("revenue", models.PositiveBigIntegerField(default=0)),
                (
                    "attraction",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reports",
                        to="reports.attraction",
                    ),
                ),
                (
                    "report",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="attraction_reports",
                        to="reports.dailyreport",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("report", "attraction"), name="uniq_attraction_per_report"),
                ],
            },
        ),
    ]
