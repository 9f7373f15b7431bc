# accounts/commands.py
"""
Command layer for user accounts.

Portal users (vendors, customers) are never created directly: they are
invited when a contact with an e-mail address is created, and activate
their account by accepting the invite with a password.
"""

import logging

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.db import transaction

from accounts.authz import ActorContext, require
from accounts.models import User, hash_token
from core.commands import CommandResult, ErrorKind, not_found
from masterdata.models import Contact
from notifications.email_service import render_portal_invite
from notifications.tasks import schedule_notification

logger = logging.getLogger(__name__)


def _portal_role_for(contact: Contact) -> str:
    if contact.type == Contact.ContactType.VENDOR:
        return User.Role.VENDOR
    return User.Role.CUSTOMER


def invite_portal_user(contact: Contact) -> User | None:
    """
    Create (or link) the portal user of a contact and schedule the invite
    e-mail after commit.

    Runs inside the caller's transaction. Returns None when the address
    already belongs to a staff user or to another contact's portal user.
    """
    if not contact.email:
        return None

    email = User.objects.normalize_email(contact.email)
    user = User.objects.filter(email__iexact=email).first()

    if user is None:
        user = User.objects.create_user(
            email=email,
            password=None,
            name=contact.name,
            role=_portal_role_for(contact),
            contact=contact,
        )
    elif not user.is_portal_user:
        logger.warning(
            f"Portal invite for contact {contact.code} skipped: {email} is a staff account",
        )
        return None
    elif user.contact_id and user.contact_id != contact.pk:
        logger.warning(
            f"Portal invite for contact {contact.code} skipped: {email} is linked to another contact",
        )
        return None
    else:
        user.contact = contact
        user.role = _portal_role_for(contact)

    token = user.issue_invite_token()
    user.save()

    subject, content = render_portal_invite(user, token)
    schedule_notification(user.email, subject, content, kind="portal_invite")
    logger.info(f"Portal invite issued for contact {contact.code}", extra={"contact": contact.code})
    return user


@transaction.atomic
def resend_invite(actor: ActorContext, contact_id: int) -> CommandResult:
    """Issue a fresh invite token for a contact's portal user."""
    require(actor, "users.invite")

    try:
        contact = Contact.objects.get(pk=contact_id)
    except Contact.DoesNotExist:
        return not_found("Contact not found.")

    if not contact.email:
        return CommandResult.fail("Contact has no e-mail address.")

    user = invite_portal_user(contact)
    if user is None:
        return CommandResult.fail(
            "E-mail address already belongs to another account.",
            kind=ErrorKind.CONFLICT,
        )
    return CommandResult.ok(user)


@transaction.atomic
def accept_invite(token: str, password: str, name: str = "") -> CommandResult:
    """
    Activate a portal account.

    Args:
        token: Raw token from the invite e-mail
        password: New password (Django password validators apply)
        name: Optional display name

    Returns:
        CommandResult with the activated User or error
    """
    if not token:
        return CommandResult.fail("Invite token is required.")

    try:
        user = User.objects.select_for_update().get(invite_token_hash=hash_token(token))
    except User.DoesNotExist:
        return not_found("Invite not found or already used.")

    if not user.invite_is_valid():
        return CommandResult.fail("Invite has expired. Ask for a new invitation.")

    try:
        validate_password(password, user=user)
    except ValidationError as e:
        return CommandResult.fail(" ".join(e.messages))

    user.set_password(password)
    if name:
        user.name = name
    user.invite_token_hash = ""
    user.invite_expires_at = None
    user.save()

    logger.info(f"Portal invite accepted by {user.email}")
    return CommandResult.ok(user)


@transaction.atomic
def create_admin_user(email: str, password: str, name: str = "Administrator") -> CommandResult:
    """Create the initial ADMIN user if no user with that e-mail exists."""
    if User.objects.filter(email__iexact=email).exists():
        return CommandResult.fail(f"User {email} already exists.", kind=ErrorKind.CONFLICT)

    user = User.objects.create_superuser(email=email, password=password, name=name)
    logger.info(f"Admin user {email} created")
    return CommandResult.ok(user)
