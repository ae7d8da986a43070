from django.urls import path
from .views import (
    HealthView,
    InventoryItemsView,
    DuplicatesView,
    AgingAnalyticsView,
    AgingMatchesView,
)


urlpatterns = [
    path('', HealthView.as_view(), name='inventory-root'),
    path('items/', InventoryItemsView.as_view(), name='inventory-items'),
    path('duplicates/', DuplicatesView.as_view(), name='inventory-duplicates'),
    path('aging-analytics/', AgingAnalyticsView.as_view(), name='inventory-aging-analytics'),
    path('aging-matches/', AgingMatchesView.as_view(), name='inventory-aging-matches'),
]
