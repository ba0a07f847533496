# cm_core/common/api/params.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter

from cm_core.common.api.serializers import SearchQuerySerializer, split_multi


def _query(name: str, kind=OpenApiTypes.STR, **kwargs) -> OpenApiParameter:
    return OpenApiParameter(name=name, type=kind, location=OpenApiParameter.QUERY, required=False, **kwargs)


PAGE_PARAMETERS = [_query("page", OpenApiTypes.INT), _query("limit", OpenApiTypes.INT)]

SEARCH_PARAMETERS = [_query("search"), *PAGE_PARAMETERS]

LIST_PARAMETERS = [
    _query("status", many=True, description="Repeat or comma-separate to filter by several statuses."),
    _query("search"),
    _query("date_from", OpenApiTypes.DATE),
    _query("date_to", OpenApiTypes.DATE),
    _query("sort_by"),
    _query("sort_order"),
    *PAGE_PARAMETERS,
]

LIST_KEYS = ("search", "date_from", "date_to", "sort_by", "sort_order")


def list_query_data(request) -> dict:
    """
    Raw list-filter input for a list query serializer.
    Empty params are dropped so serializer defaults apply.
    """
    params = request.query_params
    data = {k: params.get(k) for k in LIST_KEYS if params.get(k)}
    statuses = split_multi(params.getlist("status"))
    if statuses:
        data["status"] = statuses
    return data


def search_param(request) -> str | None:
    ser = SearchQuerySerializer(data=request.query_params)
    ser.is_valid(raise_exception=True)
    return ser.validated_data.get("search") or None
