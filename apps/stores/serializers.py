from rest_framework import serializers

from .models import Store, Driver


class StoreSerializer(serializers.ModelSerializer):
    class Meta:
        model = Store
        fields = ("id", "name", "code", "address", "phone", "created_at", "updated_at")
        read_only_fields = ("created_at", "updated_at")

    def validate_code(self, v):
        return (v or "").strip().upper()


class DriverSerializer(serializers.ModelSerializer):
    store_name = serializers.CharField(source="store.name", read_only=True)

    class Meta:
        model = Driver
        fields = (
            "id", "user", "store", "store_name", "name", "phone",
            "is_available", "shift_status", "created_at", "updated_at",
        )
        read_only_fields = ("created_at", "updated_at")

    def validate_phone(self, v):
        phone = (v or "").strip()
        if not phone:
            raise serializers.ValidationError("phone is required")
        return phone
