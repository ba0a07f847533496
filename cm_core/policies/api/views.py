# cm_core/policies/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from cm_core.audit.api.serializers import AuditLogSerializer
from cm_core.clients.api.serializers import ClientLookupSerializer
from cm_core.clients.selectors import ClientSelectors
from cm_core.common.api.pagination import paginate
from cm_core.common.api.params import (
    LIST_PARAMETERS,
    PAGE_PARAMETERS,
    SEARCH_PARAMETERS,
    list_query_data,
    search_param,
)
from cm_core.common.permissions import PolicyPermission
from cm_core.common.scope import actor_from_request, parse_uuid_or_400
from cm_core.insurers.api.serializers import InsurerLookupSerializer
from cm_core.insurers.selectors import InsurerSelectors
from cm_core.lifecycle.uow import UnitOfWork
from cm_core.policies.api.serializers import (
    PolicyCreateSerializer,
    PolicyDetailSerializer,
    PolicyHistorySerializer,
    PolicyListItemSerializer,
    PolicyListQuerySerializer,
    PolicyTransitionSerializer,
    PolicyUpdateSerializer,
)
from cm_core.policies.models import Policy
from cm_core.policies.selectors import PolicySelectors
from cm_core.policies.services import PolicyService


class PolicyViewSet(viewsets.ViewSet):
    permission_classes = [PolicyPermission]
    serializer_class = PolicyDetailSerializer
    queryset = Policy.objects.none()

    @extend_schema(tags=["Policies"], parameters=LIST_PARAMETERS, responses={200: PolicyListItemSerializer(many=True)})
    def list(self, request):
        ser = PolicyListQuerySerializer(data=list_query_data(request))
        ser.is_valid(raise_exception=True)
        q = ser.validated_data

        qs = PolicySelectors.list_policies(
            UnitOfWork(),
            actor=actor_from_request(request),
            statuses=q.get("status", []),
            search=q.get("search") or None,
            date_from=q.get("date_from"),
            date_to=q.get("date_to"),
            sort_by=q["sort_by"],
            sort_order=q["sort_order"],
        )
        return paginate(request, qs, PolicyListItemSerializer)

    @extend_schema(tags=["Policies"], request=PolicyCreateSerializer, responses={201: PolicyDetailSerializer})
    def create(self, request):
        ser = PolicyCreateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        policy = PolicyService.create(UnitOfWork(), actor=actor_from_request(request), fields=dict(ser.validated_data))
        return Response(PolicyDetailSerializer(policy).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Policies"], responses={200: PolicyDetailSerializer})
    def retrieve(self, request, pk=None):
        policy = PolicySelectors.get_policy(
            UnitOfWork(),
            actor=actor_from_request(request),
            policy_id=parse_uuid_or_400(pk),
        )
        return Response(PolicyDetailSerializer(policy).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Policies"], request=PolicyUpdateSerializer, responses={200: PolicyDetailSerializer})
    def partial_update(self, request, pk=None):
        policy_id = parse_uuid_or_400(pk)
        ser = PolicyUpdateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        policy = PolicyService.update(
            UnitOfWork(),
            actor=actor_from_request(request),
            policy_id=policy_id,
            changes=dict(ser.validated_data),
        )
        return Response(PolicyDetailSerializer(policy).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Policies"], responses={200: OpenApiTypes.OBJECT})
    def destroy(self, request, pk=None):
        result = PolicyService.delete(UnitOfWork(), actor=actor_from_request(request), policy_id=parse_uuid_or_400(pk))
        return Response(result, status=status.HTTP_200_OK)

    @extend_schema(tags=["Policies"], request=PolicyTransitionSerializer, responses={200: PolicyDetailSerializer})
    @action(detail=True, methods=["post"], url_path="transition")
    def transition(self, request, pk=None):
        policy_id = parse_uuid_or_400(pk)
        ser = PolicyTransitionSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        policy = PolicyService.transition(
            UnitOfWork(),
            actor=actor_from_request(request),
            policy_id=policy_id,
            status=ser.validated_data["status"],
            reason=ser.validated_data.get("reason"),
            notes=ser.validated_data.get("notes"),
        )
        return Response(PolicyDetailSerializer(policy).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Policies"], parameters=PAGE_PARAMETERS, responses={200: PolicyHistorySerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="history")
    def history(self, request, pk=None):
        qs = PolicySelectors.history(UnitOfWork(), actor=actor_from_request(request), policy_id=parse_uuid_or_400(pk))
        return paginate(request, qs, PolicyHistorySerializer)

    @extend_schema(tags=["Policies"], parameters=PAGE_PARAMETERS, responses={200: AuditLogSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="timeline")
    def timeline(self, request, pk=None):
        qs = PolicySelectors.timeline(UnitOfWork(), actor=actor_from_request(request), policy_id=parse_uuid_or_400(pk))
        return paginate(request, qs, AuditLogSerializer)


class PolicyLookupViewSet(viewsets.ViewSet):
    permission_classes = [PolicyPermission]
    serializer_class = InsurerLookupSerializer
    queryset = Policy.objects.none()

    @extend_schema(tags=["Policies"], parameters=SEARCH_PARAMETERS, responses={200: ClientLookupSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="clients")
    def lookup_clients(self, request):
        qs = ClientSelectors.lookup_clients(UnitOfWork(), actor_from_request(request), search=search_param(request))
        return paginate(request, qs, ClientLookupSerializer)

    @extend_schema(tags=["Policies"], parameters=SEARCH_PARAMETERS, responses={200: InsurerLookupSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="insurers")
    def lookup_insurers(self, request):
        qs = InsurerSelectors.lookup_insurers(UnitOfWork(), actor_from_request(request), search=search_param(request))
        return paginate(request, qs, InsurerLookupSerializer)
