# sales/api/urls.py

"""
SALES API URLS (CANONICAL)

Rules:
- Explicit non-PK routes MUST be registered BEFORE router URLs,
  otherwise the router will treat them as a <pk> and you'll get 405.

Provides:
- Exchanges:
    POST /api/sales/exchanges/             (execute)
    POST /api/sales/exchanges/calculate/   (preview, no writes)
    GET  /api/sales/exchanges/             (history; ?status=&original_sale=&exchange_sale=)
    GET  /api/sales/exchanges/<uuid>/      (detail)

- Return reason catalog:
    GET /api/sales/return-reason-codes/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.views.exchange import ExchangeViewSet, ReturnReasonCodeListView

router = DefaultRouter()
router.register(r"exchanges", ExchangeViewSet, basename="exchanges")

urlpatterns = [
    path(
        "return-reason-codes/",
        ReturnReasonCodeListView.as_view(),
        name="sales-return-reason-codes",
    ),
    path("", include(router.urls)),
]
