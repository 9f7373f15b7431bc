# accounts/urls.py
"""
URL configuration for accounts/auth API.

Endpoints:
- /login/, /refresh/, /logout/ - JWT session handling
- /me/ - Current user with effective permissions
- /accept-invite/ - Portal users set their password
- /resend-invite/ - Staff re-issue a contact's portal invite
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    AcceptInviteView,
    LoginView,
    LogoutView,
    MeView,
    ResendInviteView,
)

app_name = "accounts"

urlpatterns = [
    path("login/", LoginView.as_view(), name="login"),
    path("refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),
    path("accept-invite/", AcceptInviteView.as_view(), name="accept-invite"),
    path("resend-invite/", ResendInviteView.as_view(), name="resend-invite"),
]
