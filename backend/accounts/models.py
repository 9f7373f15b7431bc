# accounts/models.py
"""
Users of the system.

Internal staff log in with role ADMIN or INVOICING. Portal users (VENDOR,
CUSTOMER) are linked to exactly one Contact and only see documents where
that contact is the counterparty.
"""

import hashlib
import secrets
import uuid
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils import timezone


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The given email must be set")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.Role.ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):

    class Role(models.TextChoices):
        ADMIN = "ADMIN", "Administrator"
        INVOICING = "INVOICING", "Invoicing user"
        VENDOR = "VENDOR", "Vendor (portal)"
        CUSTOMER = "CUSTOMER", "Customer (portal)"

    username = None
    public_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    email = models.EmailField("email address", unique=True)
    name = models.CharField(max_length=150, blank=True, default="")
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.INVOICING)

    # Portal users only
    contact = models.OneToOneField(
        "masterdata.Contact",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="portal_user",
    )
    invite_token_hash = models.CharField(max_length=64, blank=True, default="", db_index=True)
    invite_expires_at = models.DateTimeField(null=True, blank=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    objects = UserManager()

    def __str__(self):
        return self.email

    @property
    def is_portal_user(self) -> bool:
        return self.role in (self.Role.VENDOR, self.Role.CUSTOMER)

    def issue_invite_token(self) -> str:
        """
        Generate a fresh invite token. Only the SHA-256 hash is stored;
        the raw token goes into the invite e-mail. Caller saves.
        """
        token = secrets.token_urlsafe(32)
        self.invite_token_hash = hash_token(token)
        self.invite_expires_at = timezone.now() + timedelta(
            days=settings.PORTAL_INVITE_EXPIRY_DAYS
        )
        return token

    def invite_is_valid(self) -> bool:
        return bool(
            self.invite_token_hash
            and self.invite_expires_at
            and self.invite_expires_at > timezone.now()
        )


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()
