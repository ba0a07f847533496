# cm_core/common/scope.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from rest_framework.exceptions import ValidationError

HDR_ORG = "X-Org-Id"

MISSING_ORG_MSG = "Missing organization header. Provide X-Org-Id."
INVALID_ORG_MSG = "Invalid organization header (UUID expected)."


@dataclass(frozen=True)
class RequestActor:
    """
    Who is acting, in which organization, under which authorization scope.
    Built once per request and passed explicitly into services and selectors.
    """
    user_id: int
    org_id: UUID
    scope: str
    ip_address: str = ""
    user_agent: str = ""


def _parse_uuid(value) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


def _get_header(request, name: str) -> str | None:
    """
    Prefer request.headers (case-insensitive), fallback to META (pytest uses HTTP_*).
    """
    v = request.headers.get(name)
    if v:
        return v
    meta_key = "HTTP_" + name.upper().replace("-", "_")
    return request.META.get(meta_key)


def resolve_org_id(request) -> UUID:
    """
    Returns the org UUID for this request.
    Raises 400 ValidationError if the header is missing or malformed.
    """
    existing = getattr(request, "org_id", None)
    if existing:
        return existing

    raw = _get_header(request, HDR_ORG)
    if not raw:
        raise ValidationError(MISSING_ORG_MSG)

    org_id = _parse_uuid(raw)
    if org_id is None:
        raise ValidationError(INVALID_ORG_MSG)

    request.org_id = org_id
    return org_id


def client_ip(request) -> str:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR") or ""


def actor_from_request(request) -> RequestActor:
    """
    Requires the permission layer to have run (it attaches org_id + permission_scope).
    """
    return RequestActor(
        user_id=request.user.id,
        org_id=resolve_org_id(request),
        scope=request.permission_scope,
        ip_address=client_ip(request),
        user_agent=request.META.get("HTTP_USER_AGENT", ""),
    )


def parse_uuid_or_400(value, field: str = "id") -> UUID:
    parsed = _parse_uuid(value)
    if parsed is None:
        raise ValidationError({field: ["Must be a valid UUID."]})
    return parsed
