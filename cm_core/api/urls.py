# cm_core/api/urls.py
from rest_framework.routers import DefaultRouter

from cm_core.claims.api.views import ClaimLookupViewSet, ClaimViewSet
from cm_core.policies.api.views import PolicyLookupViewSet, PolicyViewSet

router = DefaultRouter()

# Lookups first so "lookup/..." is never read as a record id
router.register(r"claims/lookup", ClaimLookupViewSet, basename="claim-lookup")
router.register(r"claims", ClaimViewSet, basename="claim")
router.register(r"policies/lookup", PolicyLookupViewSet, basename="policy-lookup")
router.register(r"policies", PolicyViewSet, basename="policy")

urlpatterns = router.urls
