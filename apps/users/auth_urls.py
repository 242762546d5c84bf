"""URL routing for authentication endpoints (namespace: auth)."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .auth_views import (
    LoginView,
    LogoutView,
    RefreshView,
    RegisterView,
    TokenInvalidView,
)

app_name = "auth"

urlpatterns = [
    path("token_invalid", TokenInvalidView.as_view(), name="token_invalid"),
    path("login", LoginView.as_view(), name="login"),
    path("register", RegisterView.as_view(), name="register"),
    path("logout", LogoutView.as_view(), name="logout"),
    path("refresh", RefreshView.as_view(), name="refresh"),
]
