# store/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from store.views import CustomerViewSet, TableViewSet, TopUpRequestViewSet

router = DefaultRouter()
router.register(r"tables", TableViewSet, basename="tables")
router.register(r"customers", CustomerViewSet, basename="customers")
router.register(r"top-ups", TopUpRequestViewSet, basename="top-ups")

urlpatterns = [
    path("", include(router.urls)),
]
