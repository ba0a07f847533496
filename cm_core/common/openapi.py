# cm_core/common/openapi.py
from __future__ import annotations

from drf_spectacular.openapi import AutoSchema
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter

from cm_core.common.scope import HDR_ORG


class OrgScopedAutoSchema(AutoSchema):
    """
    Adds the X-Org-Id header to every org-scoped operation.
    Schema/docs views stay unscoped.
    """

    ORG_HEADER = OpenApiParameter(
        name=HDR_ORG,
        type=OpenApiTypes.UUID,
        location=OpenApiParameter.HEADER,
        required=True,
        description="Organization UUID (required for org-scoped endpoints).",
    )

    def _is_unscoped_endpoint(self) -> bool:
        view = getattr(self, "view", None)
        if view is None:
            return False
        return view.__class__.__name__ in {"SpectacularAPIView", "SpectacularSwaggerView"}

    def get_override_parameters(self):
        params = list(super().get_override_parameters() or [])

        if not self._is_unscoped_endpoint():
            if not any(p.name.lower() == HDR_ORG.lower() for p in params):
                params.append(self.ORG_HEADER)

        return params
