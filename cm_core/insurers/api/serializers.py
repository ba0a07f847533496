# cm_core/insurers/api/serializers.py
from rest_framework import serializers

from cm_core.insurers.models import Insurer


class InsurerLookupSerializer(serializers.ModelSerializer):
    class Meta:
        model = Insurer
        fields = ["id", "name", "code"]
        read_only_fields = fields
