from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework import viewsets, permissions

from apps.accounts.permissions import IsManagerOrReadOnly
from .models import Store, Driver
from .serializers import StoreSerializer, DriverSerializer


class HealthView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response({"ok": True})


class StoreViewSet(viewsets.ModelViewSet):
    queryset = Store.objects.all()
    serializer_class = StoreSerializer
    permission_classes = [permissions.IsAuthenticated, IsManagerOrReadOnly]
    search_fields = ["name", "code"]


class DriverViewSet(viewsets.ModelViewSet):
    serializer_class = DriverSerializer
    permission_classes = [permissions.IsAuthenticated, IsManagerOrReadOnly]

    def get_queryset(self):
        qs = Driver.objects.select_related("store").all()
        store_id = self.request.query_params.get("store_id")
        if store_id:
            qs = qs.filter(store_id=store_id)
        return qs
