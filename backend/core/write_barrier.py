# core/write_barrier.py
"""
Write barrier for command-owned models.

Sequences, financial documents and payments change only through commands.
Their save() calls guard_command_write(), which refuses the write unless
the current thread is inside command_writes_allowed(). With
settings.TESTING set, fixtures may build rows directly.
"""

from contextlib import contextmanager
import threading

from django.conf import settings


_state = threading.local()


def _depth() -> int:
    return getattr(_state, "command_depth", 0)


def in_command_write() -> bool:
    return _depth() > 0


@contextmanager
def command_writes_allowed():
    """Command write scope. Scopes nest: a command may call another."""
    _state.command_depth = _depth() + 1
    try:
        yield
    finally:
        _state.command_depth -= 1


def guard_command_write(model_name: str) -> None:
    if in_command_write() or getattr(settings, "TESTING", False):
        return
    raise RuntimeError(
        f"{model_name} is a command-owned write model. "
        "Direct saves are only allowed inside command_writes_allowed()."
    )
