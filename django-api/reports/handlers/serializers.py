"""Serializers for parsing report input and rendering domain models."""

from django.conf import settings
from rest_framework import serializers

from reports.domain import AttractionId, SiteId, TicketBlock, TicketCategory
from reports.domain import ticket_blocks
from reports.domain.attractions import AttractionInput
from reports.domain.audit import EDITABLE_FIELDS
from reports.services.report_service import ReportInput

CATEGORY_CHOICES = [category.value for category in TicketCategory]


def _max_visitors() -> int:
    return settings.REPORTS_MAX_VISITORS_PER_DAY


def _max_notes() -> int:
    return settings.REPORTS_MAX_NOTES_LENGTH


class CountField(serializers.IntegerField):
    """Non-negative visitor count bounded by the daily maximum.

    The maximum is read from settings on every validation.
    """

    def __init__(self, **kwargs):
        kwargs.setdefault("min_value", 0)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        limit = _max_visitors()
        if value > limit:
            raise serializers.ValidationError(
                f"Ensure this value is less than or equal to {limit}."
            )
        return value


class NotesField(serializers.CharField):
    """Free-text notes bounded by the configured length."""

    def __init__(self, **kwargs):
        kwargs.setdefault("required", False)
        kwargs.setdefault("allow_blank", True)
        kwargs.setdefault("allow_null", True)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        limit = _max_notes()
        if len(value) > limit:
            raise serializers.ValidationError(
                f"Ensure this field has no more than {limit} characters."
            )
        return value


class AmountField(serializers.IntegerField):
    def __init__(self, **kwargs):
        kwargs.setdefault("min_value", 0)
        super().__init__(**kwargs)


class CountryCountsField(serializers.DictField):
    """Nationality breakdown keyed by two-letter country code."""

    def __init__(self, **kwargs):
        super().__init__(child=serializers.IntegerField(min_value=0), **kwargs)

    def to_internal_value(self, data):
        counts = super().to_internal_value(data)
        normalized = {}
        for code, count in counts.items():
            code = str(code).strip().upper()
            if len(code) != 2 or not code.isalpha():
                raise serializers.ValidationError(f"Invalid country code: {code}")
            normalized[code] = normalized.get(code, 0) + count
        return normalized


class TicketBlockInputSerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=CATEGORY_CHOICES, required=False)
    block_no = serializers.CharField(allow_blank=True, required=False, default="", max_length=32)
    start_no = serializers.CharField(allow_blank=True, max_length=32)
    end_no = serializers.CharField(allow_blank=True, max_length=32)


class AttractionInputSerializer(serializers.Serializer):
    attraction_id = serializers.UUIDField()
    visitor_count = CountField(required=False, default=0)
    ticket_blocks = TicketBlockInputSerializer(many=True, required=False, default=list)

    def to_input(self, data: dict) -> AttractionInput:
        return AttractionInput(
            attraction_id=AttractionId(data["attraction_id"]),
            visitor_count=data["visitor_count"],
            ticket_blocks=tuple(
                TicketBlock(b.get("block_no", ""), b["start_no"], b["end_no"])
                for b in data["ticket_blocks"]
            ),
        )


def _group_blocks(rows: list[dict]) -> dict[TicketCategory, list[TicketBlock]]:
    grouped: dict[TicketCategory, list[TicketBlock]] = {}
    for row in rows:
        category = TicketCategory(row.get("category") or TicketCategory.DEWASA.value)
        grouped.setdefault(category, []).append(
            TicketBlock(row.get("block_no", ""), row["start_no"], row["end_no"])
        )
    return grouped


class ReportInputSerializer(serializers.Serializer):
    """Full report form as submitted by an operator or an admin."""

    site_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    report_date = serializers.DateField()
    anak_count = CountField(default=0)
    dewasa_count = CountField(default=0)
    wna_count = CountField(default=0)
    dewasa_male = CountField(default=0)
    dewasa_female = CountField(default=0)
    anak_male = CountField(required=False, allow_null=True, default=None)
    anak_female = CountField(required=False, allow_null=True, default=None)
    wna_countries = CountryCountsField(required=False, default=dict)
    cash_amount = AmountField(default=0)
    qris_amount = AmountField(default=0)
    notes = NotesField(default=None)
    ticket_blocks = TicketBlockInputSerializer(many=True, required=False, default=list)
    attractions = AttractionInputSerializer(many=True, required=False, default=list)

    def to_input(self) -> ReportInput:
        data = self.validated_data
        site_id = data.get("site_id")
        attraction_serializer = AttractionInputSerializer()
        return ReportInput(
            site_id=SiteId(site_id) if site_id else None,
            report_date=data["report_date"],
            anak_count=data["anak_count"],
            dewasa_count=data["dewasa_count"],
            wna_count=data["wna_count"],
            dewasa_male=data["dewasa_male"],
            dewasa_female=data["dewasa_female"],
            anak_male=data.get("anak_male"),
            anak_female=data.get("anak_female"),
            wna_countries=data["wna_countries"],
            cash_amount=data["cash_amount"],
            qris_amount=data["qris_amount"],
            notes=data.get("notes"),
            ticket_blocks=_group_blocks(data["ticket_blocks"]),
            attractions=[attraction_serializer.to_input(item) for item in data["attractions"]],
        )


class ReportEditSerializer(serializers.Serializer):
    """Partial update for the privileged edit path. Revenue is never accepted."""

    anak_count = CountField(required=False)
    dewasa_count = CountField(required=False)
    wna_count = CountField(required=False)
    dewasa_male = CountField(required=False)
    dewasa_female = CountField(required=False)
    anak_male = CountField(required=False, allow_null=True)
    anak_female = CountField(required=False, allow_null=True)
    wna_countries = CountryCountsField(required=False)
    cash_amount = AmountField(required=False)
    qris_amount = AmountField(required=False)
    notes = NotesField()
    ticket_blocks = TicketBlockInputSerializer(many=True, required=False)
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        unknown = set(self.initial_data) - set(self.fields)
        if unknown:
            raise serializers.ValidationError(
                f"Fields cannot be edited: {', '.join(sorted(unknown))}"
            )
        return attrs

    def updates(self) -> dict:
        updates = {k: v for k, v in self.validated_data.items() if k in EDITABLE_FIELDS}
        if "ticket_blocks" in updates:
            updates["ticket_blocks"] = _group_blocks(updates["ticket_blocks"])
        return updates


class ReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ReportFilterSerializer(serializers.Serializer):
    site_id = serializers.UUIDField(required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=["draft", "submitted"], required=False)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=100)


class SiteInputSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=32)
    name = serializers.CharField(max_length=255)
    location = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class SiteUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, max_length=255)
    location = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    is_active = serializers.BooleanField(required=False)


class AttractionInputDefinitionSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    unit_price = AmountField()
    requires_ticket_block = serializers.BooleanField(required=False, default=False)
    sort_order = serializers.IntegerField(required=False, default=0)


class AttractionUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, max_length=255)
    unit_price = AmountField(required=False)
    requires_ticket_block = serializers.BooleanField(required=False)
    is_active = serializers.BooleanField(required=False)
    sort_order = serializers.IntegerField(required=False)


class AttractionSubReportSerializer(serializers.Serializer):
    """Serializer for AttractionSubReport domain model."""

    attraction_id = serializers.CharField()
    visitor_count = serializers.IntegerField()
    revenue = serializers.IntegerField()
    ticket_blocks = serializers.SerializerMethodField()

    def get_ticket_blocks(self, obj) -> list[dict]:
        return [ticket_blocks.block_to_dict(block) for block in obj.ticket_blocks]


class DailyReportSerializer(serializers.Serializer):
    """Serializer for DailyReport domain model."""

    id = serializers.CharField()
    site_id = serializers.CharField()
    report_date = serializers.DateField()
    anak_count = serializers.IntegerField()
    dewasa_count = serializers.IntegerField()
    wna_count = serializers.IntegerField()
    dewasa_male = serializers.IntegerField()
    dewasa_female = serializers.IntegerField()
    anak_male = serializers.IntegerField(allow_null=True)
    anak_female = serializers.IntegerField(allow_null=True)
    wna_countries = serializers.DictField(child=serializers.IntegerField())
    anak_revenue = serializers.IntegerField()
    dewasa_revenue = serializers.IntegerField()
    wna_revenue = serializers.IntegerField()
    attraction_revenue = serializers.IntegerField()
    cash_amount = serializers.IntegerField()
    qris_amount = serializers.IntegerField()
    total_visitors = serializers.IntegerField()
    total_revenue = serializers.IntegerField()
    notes = serializers.CharField(allow_null=True)
    ticket_blocks = serializers.SerializerMethodField()
    attractions = AttractionSubReportSerializer(many=True)
    status = serializers.CharField(source="status.value")
    created_by = serializers.CharField(allow_null=True)
    submitted_by = serializers.CharField(allow_null=True)
    submitted_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()

    def get_ticket_blocks(self, obj) -> list[dict]:
        return ticket_blocks.flatten_category_blocks(obj.ticket_blocks)


class EditLogEntrySerializer(serializers.Serializer):
    """Serializer for EditLogEntry domain model."""

    report_id = serializers.CharField()
    edited_by = serializers.CharField()
    edited_at = serializers.DateTimeField()
    changes = serializers.DictField()
    reason = serializers.CharField(allow_null=True)


class SiteSerializer(serializers.Serializer):
    """Serializer for Site domain model."""

    id = serializers.CharField()
    code = serializers.CharField()
    name = serializers.CharField()
    location = serializers.CharField(allow_null=True)
    is_active = serializers.BooleanField()


class AttractionSerializer(serializers.Serializer):
    """Serializer for AttractionDefinition domain model."""

    id = serializers.CharField()
    site_id = serializers.CharField()
    name = serializers.CharField()
    unit_price = serializers.IntegerField()
    requires_ticket_block = serializers.BooleanField()
    is_active = serializers.BooleanField()
    sort_order = serializers.IntegerField()


class SiteDayStatusSerializer(serializers.Serializer):
    site_id = serializers.CharField()
    code = serializers.CharField()
    name = serializers.CharField()
    report_date = serializers.DateField()
    daily_status = serializers.CharField(source="daily_status.value")
    report_id = serializers.CharField(allow_null=True)
    total_visitors = serializers.IntegerField(allow_null=True)
    total_revenue = serializers.IntegerField(allow_null=True)
    submitted_at = serializers.DateTimeField(allow_null=True)


class TicketUsageSerializer(serializers.Serializer):
    report_id = serializers.CharField()
    report_date = serializers.DateField()
    site_id = serializers.CharField()
    category = serializers.CharField(source="category.value")
    block_no = serializers.CharField()
    start_no = serializers.CharField()
    end_no = serializers.CharField()
    count = serializers.IntegerField()
