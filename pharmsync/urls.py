from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenRefreshView
from core.views import HealthCheckView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('core.urls')),
    path("api/health/", HealthCheckView.as_view(), name="api_health"),
    path("api/v1/auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path('api/v1/accounts/', include('apps.accounts.urls')),
    path('api/v1/stores/', include('apps.stores.urls')),
    path('api/v1/inventory/', include('apps.inventory.urls')),
    path("api/v1/transfers/", include("apps.transfers.urls")),
    path("api/v1/notifications/", include("apps.notifications.urls")),
    path('api/v1/governance/', include('apps.governance.urls')),
    path('api/v1/dashboard/', include('apps.dashboard.urls')),
    # OpenAPI schema + Swagger UI
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/schema/swagger/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
