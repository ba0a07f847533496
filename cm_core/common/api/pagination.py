from __future__ import annotations

import math

from rest_framework import serializers
from rest_framework.pagination import BasePagination
from rest_framework.response import Response


class PageQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, default=1, min_value=1, max_value=1000)
    limit = serializers.IntegerField(required=False, default=20, min_value=1, max_value=100)


def page_meta(*, page: int, limit: int, total_count: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "totalCount": total_count,
        "totalPages": math.ceil(total_count / limit) if limit else 0,
    }


class DefaultPagination(BasePagination):
    """
    Offset pagination driven by ?page=&limit=.
    Pages past the end return an empty data list instead of 404.
    """

    def paginate_queryset(self, queryset, request, view=None):
        params = PageQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        self.page = params.validated_data["page"]
        self.limit = params.validated_data["limit"]
        self.total_count = queryset.count()

        offset = (self.page - 1) * self.limit
        return list(queryset[offset:offset + self.limit])

    def get_paginated_response(self, data):
        return Response(
            {
                "data": data,
                "meta": page_meta(page=self.page, limit=self.limit, total_count=self.total_count),
            }
        )

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "required": ["data", "meta"],
            "properties": {
                "data": schema,
                "meta": {
                    "type": "object",
                    "properties": {
                        "page": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "totalCount": {"type": "integer"},
                        "totalPages": {"type": "integer"},
                    },
                },
            },
        }


def paginate(request, queryset, serializer_class, *, paginator: BasePagination | None = None) -> Response:
    """
    Shared pagination helper to enforce a stable contract:
      { data, meta: { page, limit, totalCount, totalPages } }
    """
    p = paginator or DefaultPagination()
    page = p.paginate_queryset(queryset, request)
    ser = serializer_class(page, many=True)
    return p.get_paginated_response(ser.data)
