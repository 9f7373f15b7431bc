# accounts/authz.py
"""
Authorization utilities.

Provides:
- ActorContext: Immutable context for the current request
- resolve_actor: Extract actor context from request
- require: Check permissions and raise if not granted
- require_counterparty: Portal ownership check

Permissions are checked:
1. ADMIN: implicit allow
2. everyone else: role default permission codes only
"""

from dataclasses import dataclass
from typing import FrozenSet

from django.core.exceptions import PermissionDenied
from rest_framework.exceptions import NotAuthenticated

from accounts.models import User
from accounts.permission_defaults import permissions_for_role


@dataclass(frozen=True)
class ActorContext:
    """
    Immutable context for the current actor.

    This is passed to commands and policies to provide context
    about who is performing an action.

    Attributes:
        user: The authenticated user (None for system jobs)
        perms: Set of permission codes the user has
    """
    user: object  # User model
    perms: FrozenSet[str]

    def has(self, code: str) -> bool:
        if self.user is None:
            # System actor (Celery beat, management commands)
            return True
        if not self.user.is_active:
            return False
        if self.user.role == User.Role.ADMIN:
            return True
        return code in self.perms

    @property
    def role(self) -> str | None:
        return getattr(self.user, "role", None)

    @property
    def contact_id(self) -> int | None:
        return getattr(self.user, "contact_id", None)

    @property
    def is_admin(self) -> bool:
        return self.role == User.Role.ADMIN

    @property
    def is_portal(self) -> bool:
        return self.role in (User.Role.VENDOR, User.Role.CUSTOMER)


def actor_for(user) -> ActorContext:
    """Build an ActorContext from a user, with fresh role permissions."""
    return ActorContext(user=user, perms=permissions_for_role(user.role))


def system_actor() -> ActorContext:
    """Actor used by background jobs and management commands."""
    return ActorContext(user=None, perms=frozenset())


def resolve_actor(request) -> ActorContext:
    """
    Extract ActorContext from the current request.

    Raises:
        NotAuthenticated: If user is not authenticated
        PermissionDenied: If a portal user has no linked contact
    """
    user = getattr(request, "user", None)

    if not user or not user.is_authenticated:
        raise NotAuthenticated("Authentication required.")

    if user.role in (User.Role.VENDOR, User.Role.CUSTOMER) and not user.contact_id:
        raise PermissionDenied("Portal account is not linked to a contact.")

    return actor_for(user)


def require(actor: ActorContext, code: str) -> None:
    """
    Require that the actor has a specific permission.

    Raises PermissionDenied if the permission is not granted.

    Example:
        require(actor, "orders.send")
        # If we get here, permission is granted
    """
    if not actor.has(code):
        raise PermissionDenied(f"Permission denied: {code}")


def require_any(actor: ActorContext, *codes: str) -> None:
    """Require that the actor has AT LEAST ONE of the specified permissions."""
    for code in codes:
        if actor.has(code):
            return

    raise PermissionDenied(f"Permission denied: requires one of {', '.join(codes)}")


def require_counterparty(actor: ActorContext, staff_code: str, counterparty_id: int) -> None:
    """
    Staff need staff_code. Portal users need portal.confirm_own and must be
    the counterparty of the record they act on.
    """
    if actor.has(staff_code):
        return
    if actor.is_portal and actor.has("portal.confirm_own") and actor.contact_id == counterparty_id:
        return
    raise PermissionDenied(f"Permission denied: {staff_code}")
