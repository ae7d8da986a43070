from rest_framework import serializers
from django.contrib.auth import get_user_model

from .models import Profile
from .roles import get_profile, get_role

User = get_user_model()


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True, required=False, allow_blank=True)
    new_password = serializers.CharField(min_length=8, write_only=True)


class UserCreateSerializer(serializers.Serializer):
    email = serializers.EmailField()
    full_name = serializers.CharField()
    role = serializers.ChoiceField(choices=Profile.Role.choices)
    store_id = serializers.IntegerField(required=False, allow_null=True)


def serialize_user(user) -> dict:
    profile = get_profile(user)
    store = profile.store if profile else None
    return {
        "id": user.id,
        "email": user.email,
        "full_name": (profile.full_name if profile else "") or f"{user.first_name} {user.last_name}".strip(),
        "phone": profile.phone if profile else None,
        "role": get_role(user),
        "store_id": store.id if store else None,
        "store": {"id": store.id, "name": store.name, "code": store.code} if store else None,
        "notification_preference": profile.notification_preference if profile else Profile.NotificationMethod.POPUP.value,
        "must_change_password": profile.must_change_password if profile else False,
        "is_active": user.is_active,
        "created_at": user.date_joined,
    }
