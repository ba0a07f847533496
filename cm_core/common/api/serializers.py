# cm_core/common/api/serializers.py
from __future__ import annotations

from rest_framework import serializers


class PatchSerializer(serializers.Serializer):
    """
    Partial-update input.
    Unknown keys are rejected instead of silently dropped, and at least one
    field must be present. validated_data holds exactly the supplied keys.
    """

    def validate(self, attrs):
        unknown = sorted(set(getattr(self, "initial_data", {}) or {}) - set(self.fields))
        if unknown:
            raise serializers.ValidationError({name: "Unknown field." for name in unknown})
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class SearchQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=200, trim_whitespace=True)


def split_multi(values) -> list[str]:
    """
    ?status=A&status=B and ?status=A,B both become ["A", "B"].
    """
    out: list[str] = []
    for raw in values or []:
        out.extend(part.strip() for part in str(raw).split(",") if part.strip())
    return out
