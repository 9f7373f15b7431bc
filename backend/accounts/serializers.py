from django.contrib.auth import authenticate
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User
from .permission_defaults import permissions_for_role


class UserSerializer(serializers.ModelSerializer):
    contact_name = serializers.CharField(source="contact.name", read_only=True, default=None)

    class Meta:
        model = User
        fields = ("id", "public_id", "email", "name", "role", "contact", "contact_name", "is_active")
        read_only_fields = fields


def tokens_for(user: User) -> dict:
    refresh = RefreshToken.for_user(user)
    refresh["role"] = user.role
    return {"access": str(refresh.access_token), "refresh": str(refresh)}


class EmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    username_field = User.EMAIL_FIELD

    def validate(self, attrs):
        authenticate_kwargs = {
            self.username_field: attrs.get("email"),
            "password": attrs.get("password"),
        }
        user = authenticate(request=self.context.get("request"), **authenticate_kwargs)
        if not user:
            raise AuthenticationFailed("Invalid credentials")
        return tokens_for(user)


class MeSerializer(serializers.Serializer):
    user = UserSerializer()
    permissions = serializers.ListField(child=serializers.CharField())

    @classmethod
    def from_user(cls, user: User):
        return cls(instance={
            "user": user,
            "permissions": sorted(permissions_for_role(user.role)),
        })


class AcceptInviteSerializer(serializers.Serializer):
    token = serializers.CharField()
    password = serializers.CharField(write_only=True)
    name = serializers.CharField(max_length=150, required=False, allow_blank=True)


class ResendInviteSerializer(serializers.Serializer):
    contact_id = serializers.IntegerField()
