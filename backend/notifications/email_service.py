# notifications/email_service.py
"""
E-mail notifications to counterparties.

Handles:
- Order sent to a customer/vendor
- Portal invitations for new contacts

All emails are sent from DEFAULT_FROM_EMAIL. Every function here is
best-effort: failures are logged and reported as False, never raised.
"""

import logging

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils.html import strip_tags

logger = logging.getLogger(__name__)


def notify(recipient_email: str, subject: str, rendered_content: str) -> bool:
    """
    Send one HTML e-mail.

    Returns:
        True if email was sent successfully, False otherwise
    """
    if not recipient_email:
        logger.warning(f"Notification '{subject}' skipped: no recipient address")
        return False

    try:
        send_mail(
            subject=subject,
            message=strip_tags(rendered_content),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=rendered_content,
            fail_silently=False,
        )
        logger.info(f"Notification '{subject}' sent to {recipient_email}")
        return True
    except Exception as e:
        logger.error(f"Failed to send notification '{subject}' to {recipient_email}: {e}")
        return False


def render_order_sent(order) -> tuple[str, str]:
    """Subject and HTML body for an order that was just sent."""
    company = settings.COMPANY_NAME
    if order.is_purchase:
        subject = f"Purchase Order {order.number} from {company} - Action Required"
        portal_url = f"{settings.FRONTEND_URL}/portal/orders/{order.public_id}"
    else:
        subject = f"Sales Order {order.number} from {company}"
        portal_url = f"{settings.FRONTEND_URL}/portal/orders/{order.public_id}"

    context = {
        "company_name": company,
        "order": order,
        "lines": list(order.lines.select_related("product").order_by("line_no")),
        "counterparty": order.counterparty,
        "portal_url": portal_url,
    }
    return subject, render_to_string("emails/order_sent.html", context)


def render_portal_invite(user, token: str) -> tuple[str, str]:
    """Subject and HTML body for a portal invitation."""
    company = settings.COMPANY_NAME
    context = {
        "company_name": company,
        "user_name": user.name or user.email.split("@")[0],
        "invite_url": f"{settings.FRONTEND_URL}/accept-invite?token={token}",
        "expiry_days": settings.PORTAL_INVITE_EXPIRY_DAYS,
        "role": user.get_role_display(),
    }
    subject = f"Welcome to {company} - Set Up Your Account"
    return subject, render_to_string("emails/portal_invite.html", context)
