"""Request lifecycle hooks for observability."""

from .observability import EventLogger, HookEvent

__all__ = ["EventLogger", "HookEvent"]
