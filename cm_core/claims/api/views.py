# cm_core/claims/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from cm_core.audit.api.serializers import AuditLogSerializer
from cm_core.claims.api.serializers import (
    ClaimCreateSerializer,
    ClaimDetailSerializer,
    ClaimHistorySerializer,
    ClaimInvoiceCreateSerializer,
    ClaimInvoiceSerializer,
    ClaimInvoiceUpdateSerializer,
    ClaimListItemSerializer,
    ClaimListQuerySerializer,
    ClaimUpdateSerializer,
    ClientPolicyLookupSerializer,
    TransitionSerializer,
)
from cm_core.claims.models import Claim
from cm_core.claims.selectors import ClaimSelectors
from cm_core.claims.services import ClaimService
from cm_core.clients.api.serializers import (
    AffiliateLookupSerializer,
    ClientLookupSerializer,
    PatientLookupSerializer,
)
from cm_core.clients.selectors import ClientSelectors
from cm_core.common.api.pagination import paginate
from cm_core.common.api.params import (
    LIST_PARAMETERS,
    PAGE_PARAMETERS,
    SEARCH_PARAMETERS,
    list_query_data,
    search_param,
)
from cm_core.common.permissions import ClaimPermission
from cm_core.common.scope import actor_from_request, parse_uuid_or_400
from cm_core.lifecycle.uow import UnitOfWork


class ClaimViewSet(viewsets.ViewSet):
    permission_classes = [ClaimPermission]
    serializer_class = ClaimDetailSerializer
    queryset = Claim.objects.none()

    # ------------------------------------------------------------
    # Claims
    # ------------------------------------------------------------
    @extend_schema(tags=["Claims"], parameters=LIST_PARAMETERS, responses={200: ClaimListItemSerializer(many=True)})
    def list(self, request):
        ser = ClaimListQuerySerializer(data=list_query_data(request))
        ser.is_valid(raise_exception=True)
        q = ser.validated_data

        qs = ClaimSelectors.list_claims(
            UnitOfWork(),
            actor=actor_from_request(request),
            statuses=q.get("status", []),
            search=q.get("search") or None,
            date_from=q.get("date_from"),
            date_to=q.get("date_to"),
            sort_by=q["sort_by"],
            sort_order=q["sort_order"],
        )
        return paginate(request, qs, ClaimListItemSerializer)

    @extend_schema(tags=["Claims"], request=ClaimCreateSerializer, responses={201: ClaimDetailSerializer})
    def create(self, request):
        ser = ClaimCreateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        claim = ClaimService.create(UnitOfWork(), actor=actor_from_request(request), **ser.validated_data)
        return Response(ClaimDetailSerializer(claim).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Claims"], responses={200: ClaimDetailSerializer})
    def retrieve(self, request, pk=None):
        claim = ClaimSelectors.get_claim(
            UnitOfWork(),
            actor=actor_from_request(request),
            claim_id=parse_uuid_or_400(pk),
        )
        return Response(ClaimDetailSerializer(claim).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Claims"], request=ClaimUpdateSerializer, responses={200: ClaimDetailSerializer})
    def partial_update(self, request, pk=None):
        claim_id = parse_uuid_or_400(pk)
        ser = ClaimUpdateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        claim = ClaimService.update(
            UnitOfWork(),
            actor=actor_from_request(request),
            claim_id=claim_id,
            changes=dict(ser.validated_data),
        )
        return Response(ClaimDetailSerializer(claim).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Claims"], responses={200: OpenApiTypes.OBJECT})
    def destroy(self, request, pk=None):
        result = ClaimService.delete(UnitOfWork(), actor=actor_from_request(request), claim_id=parse_uuid_or_400(pk))
        return Response(result, status=status.HTTP_200_OK)

    @extend_schema(tags=["Claims"], request=TransitionSerializer, responses={200: ClaimDetailSerializer})
    @action(detail=True, methods=["post"], url_path="transition")
    def transition(self, request, pk=None):
        claim_id = parse_uuid_or_400(pk)
        ser = TransitionSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        claim = ClaimService.transition(
            UnitOfWork(),
            actor=actor_from_request(request),
            claim_id=claim_id,
            status=ser.validated_data["status"],
            reason=ser.validated_data.get("reason"),
            notes=ser.validated_data.get("notes"),
        )
        return Response(ClaimDetailSerializer(claim).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Claims"], parameters=PAGE_PARAMETERS, responses={200: ClaimHistorySerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="history")
    def history(self, request, pk=None):
        qs = ClaimSelectors.history(UnitOfWork(), actor=actor_from_request(request), claim_id=parse_uuid_or_400(pk))
        return paginate(request, qs, ClaimHistorySerializer)

    @extend_schema(tags=["Claims"], parameters=PAGE_PARAMETERS, responses={200: AuditLogSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="timeline")
    def timeline(self, request, pk=None):
        qs = ClaimSelectors.timeline(UnitOfWork(), actor=actor_from_request(request), claim_id=parse_uuid_or_400(pk))
        return paginate(request, qs, AuditLogSerializer)

    # ------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------
    @extend_schema(
        tags=["Claims"],
        methods=["GET"],
        parameters=PAGE_PARAMETERS,
        responses={200: ClaimInvoiceSerializer(many=True)},
    )
    @extend_schema(
        tags=["Claims"],
        methods=["POST"],
        request=ClaimInvoiceCreateSerializer,
        responses={201: ClaimInvoiceSerializer},
    )
    @action(detail=True, methods=["get", "post"], url_path="invoices")
    def invoices(self, request, pk=None):
        claim_id = parse_uuid_or_400(pk)
        actor = actor_from_request(request)
        uow = UnitOfWork()

        if request.method == "GET":
            qs = ClaimSelectors.list_invoices(uow, actor=actor, claim_id=claim_id)
            return paginate(request, qs, ClaimInvoiceSerializer)

        ser = ClaimInvoiceCreateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        invoice = ClaimService.create_invoice(uow, actor=actor, claim_id=claim_id, values=dict(ser.validated_data))
        return Response(ClaimInvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Claims"], methods=["GET"], responses={200: ClaimInvoiceSerializer})
    @extend_schema(
        tags=["Claims"],
        methods=["PATCH"],
        request=ClaimInvoiceUpdateSerializer,
        responses={200: ClaimInvoiceSerializer},
    )
    @extend_schema(tags=["Claims"], methods=["DELETE"], responses={200: OpenApiTypes.OBJECT})
    @action(detail=True, methods=["get", "patch", "delete"], url_path=r"invoices/(?P<invoice_id>[^/.]+)")
    def invoice_detail(self, request, pk=None, invoice_id=None):
        claim_id = parse_uuid_or_400(pk)
        invoice_uuid = parse_uuid_or_400(invoice_id, field="invoice_id")
        actor = actor_from_request(request)
        uow = UnitOfWork()

        if request.method == "GET":
            invoice = ClaimSelectors.get_invoice(uow, actor=actor, claim_id=claim_id, invoice_id=invoice_uuid)
            return Response(ClaimInvoiceSerializer(invoice).data, status=status.HTTP_200_OK)

        if request.method == "DELETE":
            result = ClaimService.delete_invoice(uow, actor=actor, claim_id=claim_id, invoice_id=invoice_uuid)
            return Response(result, status=status.HTTP_200_OK)

        ser = ClaimInvoiceUpdateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        invoice = ClaimService.update_invoice(
            uow,
            actor=actor,
            claim_id=claim_id,
            invoice_id=invoice_uuid,
            changes=dict(ser.validated_data),
        )
        return Response(ClaimInvoiceSerializer(invoice).data, status=status.HTTP_200_OK)


class ClaimLookupViewSet(viewsets.ViewSet):
    """
    Small read endpoints feeding the dependent selectors of the claim form.
    """
    permission_classes = [ClaimPermission]
    serializer_class = ClientLookupSerializer
    queryset = Claim.objects.none()

    @extend_schema(tags=["Claims"], parameters=SEARCH_PARAMETERS, responses={200: ClientLookupSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="clients")
    def lookup_clients(self, request):
        qs = ClientSelectors.lookup_clients(UnitOfWork(), actor_from_request(request), search=search_param(request))
        return paginate(request, qs, ClientLookupSerializer)

    @extend_schema(tags=["Claims"], parameters=SEARCH_PARAMETERS, responses={200: AffiliateLookupSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path=r"clients/(?P<client_id>[^/.]+)/affiliates")
    def lookup_client_affiliates(self, request, client_id=None):
        qs = ClientSelectors.lookup_client_affiliates(
            UnitOfWork(),
            actor_from_request(request),
            parse_uuid_or_400(client_id, field="client_id"),
            search=search_param(request),
        )
        return paginate(request, qs, AffiliateLookupSerializer)

    @extend_schema(tags=["Claims"], responses={200: PatientLookupSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path=r"affiliates/(?P<affiliate_id>[^/.]+)/patients")
    def lookup_affiliate_patients(self, request, affiliate_id=None):
        rows = ClientSelectors.lookup_affiliate_patients(
            UnitOfWork(),
            actor_from_request(request),
            parse_uuid_or_400(affiliate_id, field="affiliate_id"),
        )
        return Response({"data": PatientLookupSerializer(rows, many=True).data}, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Claims"],
        parameters=SEARCH_PARAMETERS,
        responses={200: ClientPolicyLookupSerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path=r"clients/(?P<client_id>[^/.]+)/policies")
    def lookup_client_policies(self, request, client_id=None):
        qs = ClaimSelectors.lookup_client_policies(
            UnitOfWork(),
            actor=actor_from_request(request),
            client_id=parse_uuid_or_400(client_id, field="client_id"),
            search=search_param(request),
        )
        return paginate(request, qs, ClientPolicyLookupSerializer)
