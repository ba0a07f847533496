# cm_core/policies/api/serializers.py
from decimal import Decimal

from rest_framework import serializers

from cm_core.common.api.serializers import PatchSerializer, SearchQuerySerializer
from cm_core.policies.constants import SORTABLE_FIELDS, PolicyStatus, PolicyType
from cm_core.policies.models import Policy, PolicyHistory


def _amount():
    return serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0"), required=False, allow_null=True
    )


def _pct():
    return serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal("0"),
        max_value=Decimal("100"),
        required=False,
        allow_null=True,
    )


class _PolicyFinancialFields(serializers.Serializer):
    ambulatory_coinsurance_pct = _pct()
    hospitalary_coinsurance_pct = _pct()
    maternity_cost = _amount()
    t_premium = _amount()
    tplus1_premium = _amount()
    tplusf_premium = _amount()
    benefits_cost_per_person = _amount()
    max_coverage = _amount()
    deductible = _amount()


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

class PolicyCreateSerializer(_PolicyFinancialFields):
    client_id = serializers.UUIDField()
    insurer_id = serializers.UUIDField()
    policy_number = serializers.CharField(min_length=1, max_length=64)
    type = serializers.ChoiceField(choices=PolicyType.choices, required=False, allow_null=True)
    plan_name = serializers.CharField(required=False, allow_null=True, max_length=255)
    employee_class = serializers.CharField(required=False, allow_null=True, max_length=255)
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError({"start_date": "start_date must not be after end_date."})
        return attrs


class PolicyUpdateSerializer(PatchSerializer, _PolicyFinancialFields):
    client_id = serializers.UUIDField(required=False)
    insurer_id = serializers.UUIDField(required=False)
    policy_number = serializers.CharField(required=False, min_length=1, max_length=64)
    type = serializers.ChoiceField(choices=PolicyType.choices, required=False, allow_null=True)
    plan_name = serializers.CharField(required=False, allow_null=True, max_length=255)
    employee_class = serializers.CharField(required=False, allow_null=True, max_length=255)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)


class PolicyTransitionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PolicyStatus.choices)
    reason = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=1000)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=5000)


class PolicyListQuerySerializer(SearchQuerySerializer):
    status = serializers.ListField(child=serializers.ChoiceField(choices=PolicyStatus.choices), required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    sort_by = serializers.ChoiceField(choices=SORTABLE_FIELDS, required=False, default="created_at")
    sort_order = serializers.ChoiceField(choices=("asc", "desc"), required=False, default="desc")

    def validate(self, attrs):
        if attrs.get("date_from") and attrs.get("date_to") and attrs["date_from"] > attrs["date_to"]:
            raise serializers.ValidationError({"date_from": "date_from must not be after date_to."})
        return attrs


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

class PolicyListItemSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source="client.name", read_only=True)
    insurer_name = serializers.CharField(source="insurer.name", read_only=True)

    class Meta:
        model = Policy
        fields = [
            "id",
            "policy_number",
            "status",
            "type",
            "client_id",
            "client_name",
            "insurer_id",
            "insurer_name",
            "plan_name",
            "employee_class",
            "start_date",
            "end_date",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PolicyDetailSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source="client.name", read_only=True)
    insurer_name = serializers.CharField(source="insurer.name", read_only=True)

    class Meta:
        model = Policy
        fields = [
            "id",
            "policy_number",
            "status",
            "type",
            "client_id",
            "client_name",
            "insurer_id",
            "insurer_name",
            "plan_name",
            "employee_class",
            "start_date",
            "end_date",
            "ambulatory_coinsurance_pct",
            "hospitalary_coinsurance_pct",
            "maternity_cost",
            "t_premium",
            "tplus1_premium",
            "tplusf_premium",
            "benefits_cost_per_person",
            "max_coverage",
            "deductible",
            "cancellation_reason",
            "cancelled_at",
            "created_by_id",
            "updated_by_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PolicyHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = PolicyHistory
        fields = ["id", "policy_id", "from_status", "to_status", "reason", "notes", "created_by_id", "created_at"]
        read_only_fields = fields
