# core/commands.py
"""
Shared pieces of the command layer.

Commands are the single point where business operations happen.
Views call commands; commands enforce rules and persist state.

Pattern:
1. Validate permissions (require)
2. Apply business policies (can_*)
3. Perform the operation inside transaction.atomic()
4. Return CommandResult

A command never leaves partial writes behind. When a rule can only be
checked after a write (e.g. a conditional UPDATE that matched no rows),
the command raises CommandError inside the atomic block so the whole unit
rolls back, then converts it into a failed CommandResult.
"""

from django.db import models


class ErrorKind(models.TextChoices):
    VALIDATION = "validation", "Validation error"
    NOT_FOUND = "not_found", "Not found"
    CONFLICT = "conflict", "Conflict"
    STATE = "state", "Invalid state transition"


class CommandResult:
    """
    Wrapper for command results with success/failure info.

    Usage:
        result = confirm_order(actor, order_id)
        if result.success:
            order = result.data
            for warning in result.warnings:
                ...
        else:
            error_message = result.error
            kind = result.kind
    """

    def __init__(self, success: bool, data=None, error: str = None, kind: str = None, warnings=None):
        self.success = success
        self.data = data
        self.error = error
        self.kind = kind
        self.warnings = list(warnings or [])

    @classmethod
    def ok(cls, data=None, warnings=None):
        return cls(success=True, data=data, warnings=warnings)

    @classmethod
    def fail(cls, error: str, kind: str = ErrorKind.VALIDATION):
        return cls(success=False, error=error, kind=kind)

    def __repr__(self):
        if self.success:
            return f"<CommandResult ok data={self.data!r}>"
        return f"<CommandResult fail {self.kind}: {self.error}>"


class CommandError(Exception):
    """Raised inside an atomic block to abort a command and roll back."""

    def __init__(self, message: str, kind: str = ErrorKind.VALIDATION):
        super().__init__(message)
        self.message = message
        self.kind = kind

    def as_result(self) -> CommandResult:
        return CommandResult.fail(self.message, kind=self.kind)


def not_found(message: str) -> CommandResult:
    return CommandResult.fail(message, kind=ErrorKind.NOT_FOUND)


def conflict(message: str) -> CommandResult:
    return CommandResult.fail(message, kind=ErrorKind.CONFLICT)


def invalid_state(message: str) -> CommandResult:
    return CommandResult.fail(message, kind=ErrorKind.STATE)
