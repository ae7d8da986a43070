from rest_framework import serializers
from rest_framework import status
from rest_framework.exceptions import APIException


class InventoryUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Could not load inventory, try again"
    default_code = "inventory_unavailable"


class AgingMatchesQuerySerializer(serializers.Serializer):
    min_aging_days = serializers.IntegerField(required=False, min_value=0, default=180)
    max_transfer_quantity = serializers.IntegerField(required=False, min_value=1, default=100)
