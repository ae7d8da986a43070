from django.http import JsonResponse
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import permissions


def home(request):
    return JsonResponse({"message": "PharmSync inventory API", "docs": "/api/schema/swagger/"})


def health(request):
    return JsonResponse({"ok": True})


class HealthCheckView(APIView):
    """Liveness probe for the load balancer."""
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        return Response({"status": "ok"})
