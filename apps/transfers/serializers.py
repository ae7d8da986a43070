from rest_framework import serializers
from .models import MedicationRequest


class MedicationRequestSerializer(serializers.ModelSerializer):
    from_store_name = serializers.CharField(source="from_store.name", read_only=True)
    to_store_name = serializers.CharField(source="to_store.name", read_only=True)
    driver_name = serializers.CharField(source="driver.name", read_only=True, default=None)

    class Meta:
        model = MedicationRequest
        fields = "__all__"
        read_only_fields = [f.name for f in MedicationRequest._meta.fields]


class MedicationRequestCreateSerializer(serializers.Serializer):
    from_store_id = serializers.IntegerField(required=False, allow_null=True)
    to_store_id = serializers.IntegerField()
    din_number = serializers.CharField(max_length=32)
    upc = serializers.CharField(max_length=32, required=False, allow_blank=True, allow_null=True)
    medication_name = serializers.CharField(max_length=512)
    requested_quantity = serializers.IntegerField()
    urgency = serializers.ChoiceField(choices=MedicationRequest.Urgency.choices, default=MedicationRequest.Urgency.MEDIUM)
    message = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_requested_quantity(self, v):
        if v <= 0:
            raise serializers.ValidationError("requested_quantity must be greater than zero")
        return v

    def validate(self, data):
        if data.get("from_store_id") and data["from_store_id"] == data["to_store_id"]:
            raise serializers.ValidationError("From and To stores cannot be the same.")
        return data


class RespondSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=["accept", "decline", "counter"])
    counter_quantity = serializers.IntegerField(required=False, allow_null=True)
    response_message = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, data):
        if data["action"] == "counter" and not (data.get("counter_quantity") or 0) > 0:
            raise serializers.ValidationError({"counter_quantity": "A positive counter quantity is required."})
        return data
