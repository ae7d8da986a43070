from django.contrib.auth import authenticate, get_user_model
from django.db.models import Q
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.exceptions import TokenError

from .permissions import IsManager
from .roles import get_profile
from .serializers import (
    LoginSerializer,
    ChangePasswordSerializer,
    UserCreateSerializer,
    serialize_user,
)
from . import services

User = get_user_model()


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        # accept either username or email
        identifier = serializer.validated_data["username"].strip()
        password = serializer.validated_data["password"]

        user_obj = User.objects.filter(Q(username__iexact=identifier) | Q(email__iexact=identifier)).first()
        if not user_obj:
            return Response({"detail": "Invalid username or password."}, status=status.HTTP_401_UNAUTHORIZED)

        user = authenticate(request=request, username=user_obj.get_username(), password=password)
        if not user:
            return Response({"detail": "Invalid username or password."}, status=status.HTTP_401_UNAUTHORIZED)

        refresh = RefreshToken.for_user(user)
        payload = {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
            "user": serialize_user(user),
        }
        return Response(payload, status=status.HTTP_200_OK)


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        refresh = request.data.get("refresh")
        if not refresh:
            return Response({"detail": "refresh token is required."}, status=status.HTTP_400_BAD_REQUEST)

        try:
            RefreshToken(refresh).blacklist()
        except TokenError:
            return Response({"detail": "Invalid refresh token."}, status=status.HTTP_400_BAD_REQUEST)

        return Response({"detail": "Logged out."}, status=status.HTTP_200_OK)


class CurrentUserView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(serialize_user(request.user))


class ChangePasswordView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = request.user
        current = serializer.validated_data.get("current_password")

        profile = get_profile(user)
        forced = bool(profile and profile.must_change_password)
        # a forced change after provisioning skips the current-password check
        if not forced and not user.check_password(current or ""):
            return Response({"detail": "Current password is incorrect."}, status=status.HTTP_400_BAD_REQUEST)

        user.set_password(serializer.validated_data["new_password"])
        user.save(update_fields=["password"])
        if profile and profile.must_change_password:
            profile.must_change_password = False
            profile.save(update_fields=["must_change_password", "updated_at"])
        return Response({"detail": "Password updated."}, status=status.HTTP_200_OK)


class UsersListCreateView(APIView):
    permission_classes = [IsAuthenticated, IsManager]

    def get(self, request):
        users = User.objects.select_related("profile", "profile__store").order_by("id")
        role = request.query_params.get("role")
        store_id = request.query_params.get("store_id")
        if role:
            users = users.filter(profile__role=role)
        if store_id:
            users = users.filter(profile__store_id=store_id)
        return Response([serialize_user(u) for u in users])

    def post(self, request):
        """Create a login user with a temporary password; the password is returned once."""
        serializer = UserCreateSerializer(data=request.data)
        if not serializer.is_valid():
            errors = serializer.errors
            if "role" in errors and set(errors) == {"role"}:
                return Response({"detail": "Invalid role"}, status=status.HTTP_400_BAD_REQUEST)
            return Response(
                {"detail": "Email, name, and role are required", "errors": errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        data = serializer.validated_data
        user, temp_password = services.provision_user(
            request.user,
            email=data["email"],
            full_name=data["full_name"],
            role=data["role"],
            store_id=data.get("store_id"),
        )
        return Response(
            {"success": True, "user": serialize_user(user), "temp_password": temp_password},
            status=status.HTTP_201_CREATED,
        )


class HealthView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({"ok": True})
