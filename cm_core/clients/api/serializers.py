# cm_core/clients/api/serializers.py
from rest_framework import serializers

from cm_core.clients.models import Affiliate, Client


class ClientLookupSerializer(serializers.ModelSerializer):
    class Meta:
        model = Client
        fields = ["id", "name"]
        read_only_fields = fields


class AffiliateLookupSerializer(serializers.ModelSerializer):
    class Meta:
        model = Affiliate
        fields = ["id", "first_name", "last_name", "document_type", "document_number"]
        read_only_fields = fields


class PatientLookupSerializer(serializers.ModelSerializer):
    class Meta:
        model = Affiliate
        fields = ["id", "first_name", "last_name", "relationship", "document_type", "document_number"]
        read_only_fields = fields
