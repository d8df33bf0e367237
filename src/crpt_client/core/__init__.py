"""Core: domain types, ports and the throttled invocation service."""

from .services.throttled_invoker import ThrottledInvoker

__all__ = ["ThrottledInvoker"]
