# sales/api/urls.py

"""
SALES API URLS

Rules:
- Explicit non-PK routes MUST be registered BEFORE router URLs,
  otherwise the router treats them as a <pk>.

Provides:
    GET  /api/sales/fee-preview/?total=
    POST /api/sales/kitchen/ready/
    GET  /api/sales/orders/            (?store=&status=&parent=)
    GET  /api/sales/orders/<id>/
    POST /api/sales/orders/<id>/pay/
    POST /api/sales/orders/<id>/cancel/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.views import FeePreviewView, KitchenReadyView, OrderViewSet

router = DefaultRouter()
router.register(r"orders", OrderViewSet, basename="orders")

urlpatterns = [
    path("fee-preview/", FeePreviewView.as_view(), name="sales-fee-preview"),
    path("kitchen/ready/", KitchenReadyView.as_view(), name="sales-kitchen-ready"),
    path("", include(router.urls)),
]
