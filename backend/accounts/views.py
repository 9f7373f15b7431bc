from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from core.api import error_response
from .authz import resolve_actor
from .commands import accept_invite, resend_invite
from .serializers import (
    AcceptInviteSerializer,
    EmailTokenObtainPairSerializer,
    MeSerializer,
    ResendInviteSerializer,
    UserSerializer,
    tokens_for,
)
from .throttles import AcceptInviteThrottle, LoginThrottle


class LoginView(generics.GenericAPIView):
    serializer_class = EmailTokenObtainPairSerializer
    permission_classes = [permissions.AllowAny]
    throttle_classes = [LoginThrottle]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(serializer.validated_data, status=status.HTTP_200_OK)


class LogoutView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        refresh_token = request.data.get("refresh")
        if not refresh_token:
            return Response({"detail": "Refresh token required"}, status=status.HTTP_400_BAD_REQUEST)
        try:
            token = RefreshToken(refresh_token)
            token.blacklist()
        except TokenError:
            return Response({"detail": "Invalid token"}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, *args, **kwargs):
        return Response(MeSerializer.from_user(request.user).data)


class AcceptInviteView(APIView):
    """
    POST /api/auth/accept-invite/ {"token", "password", "name"?}

    Sets the portal user's password and logs them in.
    """
    permission_classes = [permissions.AllowAny]
    throttle_classes = [AcceptInviteThrottle]

    def post(self, request, *args, **kwargs):
        serializer = AcceptInviteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = accept_invite(**serializer.validated_data)
        if not result.success:
            return error_response(result)

        user = result.data
        return Response(
            {"user": UserSerializer(user).data, **tokens_for(user)},
            status=status.HTTP_200_OK,
        )


class ResendInviteView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, *args, **kwargs):
        actor = resolve_actor(request)

        serializer = ResendInviteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = resend_invite(actor, serializer.validated_data["contact_id"])
        if not result.success:
            return error_response(result)
        return Response(UserSerializer(result.data).data, status=status.HTTP_200_OK)
