# jobs/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from jobs.views import QueueEntryViewSet

router = SimpleRouter()
router.register(r"", QueueEntryViewSet, basename="jobs")

urlpatterns = [
    path("", include(router.urls)),
]
