from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import HealthView, StoreViewSet, DriverViewSet

router = DefaultRouter()
router.register(r'stores', StoreViewSet, basename='store')
router.register(r'drivers', DriverViewSet, basename='driver')

urlpatterns = [
    path('', HealthView.as_view(), name='stores-root'),
    path('', include(router.urls)),
]
