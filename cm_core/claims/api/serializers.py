# cm_core/claims/api/serializers.py
from decimal import Decimal

from rest_framework import serializers

from cm_core.claims.constants import SORTABLE_FIELDS, CareType, ClaimStatus
from cm_core.claims.models import Claim, ClaimHistory, ClaimInvoice
from cm_core.common.api.serializers import PatchSerializer, SearchQuerySerializer
from cm_core.policies.models import Policy


def _amount(**kwargs):
    return serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"), **kwargs)


def _optional_amount():
    return _amount(required=False, allow_null=True)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

class ClaimCreateSerializer(serializers.Serializer):
    client_id = serializers.UUIDField()
    affiliate_id = serializers.UUIDField()
    patient_id = serializers.UUIDField()
    # CharField already rejects NUL characters
    description = serializers.CharField(min_length=1, max_length=5000)


class ClaimUpdateSerializer(PatchSerializer):
    # core
    policy_id = serializers.UUIDField(required=False, allow_null=True)
    care_type = serializers.ChoiceField(choices=CareType.choices, required=False, allow_null=True)
    diagnosis = serializers.CharField(required=False, allow_null=True, max_length=1000)
    incident_date = serializers.DateField(required=False, allow_null=True)
    description = serializers.CharField(required=False, min_length=1, max_length=5000)

    # submission
    amount_submitted = _optional_amount()
    submitted_date = serializers.DateField(required=False, allow_null=True)

    # settlement
    amount_approved = _optional_amount()
    amount_denied = _optional_amount()
    amount_unprocessed = _optional_amount()
    deductible_applied = _optional_amount()
    copay_applied = _optional_amount()
    settlement_date = serializers.DateField(required=False, allow_null=True)
    settlement_number = serializers.CharField(required=False, allow_null=True, max_length=64)
    settlement_notes = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=5000)
    business_days = serializers.IntegerField(required=False, allow_null=True, min_value=0)


class TransitionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ClaimStatus.choices)
    reason = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=1000)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=5000)


class ClaimInvoiceCreateSerializer(serializers.Serializer):
    invoice_number = serializers.CharField(min_length=1, max_length=64)
    provider_name = serializers.CharField(min_length=1, max_length=255)
    amount_submitted = _amount()


class ClaimInvoiceUpdateSerializer(PatchSerializer):
    invoice_number = serializers.CharField(required=False, min_length=1, max_length=64)
    provider_name = serializers.CharField(required=False, min_length=1, max_length=255)
    amount_submitted = _amount(required=False)


class ClaimListQuerySerializer(SearchQuerySerializer):
    status = serializers.ListField(child=serializers.ChoiceField(choices=ClaimStatus.choices), required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    sort_by = serializers.ChoiceField(choices=SORTABLE_FIELDS, required=False, default="created_at")
    sort_order = serializers.ChoiceField(choices=("asc", "desc"), required=False, default="desc")

    def validate(self, attrs):
        date_from = attrs.get("date_from")
        date_to = attrs.get("date_to")
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({"date_from": "date_from must not be after date_to."})
        return attrs


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

class ClaimListItemSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source="client.name", read_only=True)
    affiliate_first_name = serializers.CharField(source="affiliate.first_name", read_only=True)
    affiliate_last_name = serializers.CharField(source="affiliate.last_name", read_only=True)
    patient_first_name = serializers.CharField(source="patient.first_name", read_only=True)
    patient_last_name = serializers.CharField(source="patient.last_name", read_only=True)

    class Meta:
        model = Claim
        fields = [
            "id",
            "claim_number",
            "status",
            "client_id",
            "client_name",
            "affiliate_id",
            "affiliate_first_name",
            "affiliate_last_name",
            "patient_id",
            "patient_first_name",
            "patient_last_name",
            "description",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ClaimDetailSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source="client.name", read_only=True)
    affiliate_name = serializers.CharField(source="affiliate.full_name", read_only=True)
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)
    policy_number = serializers.CharField(source="policy.policy_number", read_only=True, allow_null=True, default=None)

    class Meta:
        model = Claim
        fields = [
            "id",
            "claim_number",
            "status",
            "client_id",
            "client_name",
            "affiliate_id",
            "affiliate_name",
            "patient_id",
            "patient_name",
            "policy_id",
            "policy_number",
            "description",
            "care_type",
            "diagnosis",
            "incident_date",
            "amount_submitted",
            "submitted_date",
            "amount_approved",
            "amount_denied",
            "amount_unprocessed",
            "deductible_applied",
            "copay_applied",
            "settlement_date",
            "settlement_number",
            "settlement_notes",
            "business_days",
            "created_by_id",
            "updated_by_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ClaimHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = ClaimHistory
        fields = ["id", "claim_id", "from_status", "to_status", "reason", "notes", "created_by_id", "created_at"]
        read_only_fields = fields


class ClaimInvoiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = ClaimInvoice
        fields = ["id", "claim_id", "invoice_number", "provider_name", "amount_submitted", "created_by_id", "created_at"]
        read_only_fields = fields


class ClientPolicyLookupSerializer(serializers.ModelSerializer):
    insurer_name = serializers.CharField(source="insurer.name", read_only=True)

    class Meta:
        model = Policy
        fields = ["id", "policy_number", "type", "status", "start_date", "end_date", "insurer_name"]
        read_only_fields = fields
