# accounts/throttles.py
"""
Rate limiting classes for anonymous authentication endpoints.

These throttles protect against:
- Brute force attacks (login)
- Invite token guessing (accept invite)
"""

from rest_framework.throttling import AnonRateThrottle


class LoginThrottle(AnonRateThrottle):
    """
    Rate limit login attempts.

    Configured via settings.REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['login']
    """
    scope = 'login'


class AcceptInviteThrottle(AnonRateThrottle):
    """
    Rate limit invite acceptance attempts.

    Configured via settings.REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['accept_invite']
    """
    scope = 'accept_invite'
