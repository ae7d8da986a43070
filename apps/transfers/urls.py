from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import MedicationRequestViewSet

router = DefaultRouter()
router.register(r"requests", MedicationRequestViewSet, basename="medication-request")

urlpatterns = [path("", include(router.urls))]
