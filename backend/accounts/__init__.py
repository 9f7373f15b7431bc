# accounts/__init__.py
"""
Accounts app - Authentication and authorization for Shiv Furniture.

This app provides:
- User: E-mail login, role, optional link to a portal contact
- ActorContext: Authorization context utilities
- Portal invites: token issue and acceptance

Permission checks are enforced in every command through the ActorContext pattern.
"""
