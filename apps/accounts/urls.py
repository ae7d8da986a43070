from django.urls import path

from .views import (
    HealthView,
    LoginView,
    LogoutView,
    CurrentUserView,
    ChangePasswordView,
    UsersListCreateView,
)

urlpatterns = [
    path("", HealthView.as_view()),
    path("login/", LoginView.as_view(), name="accounts-login"),
    path("logout/", LogoutView.as_view(), name="accounts-logout"),
    path("users/", UsersListCreateView.as_view(), name="accounts-users"),
    path("users/me/", CurrentUserView.as_view(), name="accounts-me"),
    path("change-password/", ChangePasswordView.as_view(), name="accounts-change-password"),
]
