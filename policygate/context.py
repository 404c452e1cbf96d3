"""
Request-scoped principal storage.

Binds the current user (and, for multi-tenant applications, the current
tenant) to a ``contextvars`` context so a Gate's user resolver can read
them without a global.

Example:
    >>> gate = Gate(get_current_user)
    >>> with user_context(alice):
    ...     gate.allows("update", post)
"""

from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

_current_user: contextvars.ContextVar[Any] = contextvars.ContextVar(
    "policygate_user", default=None
)

_current_tenant: contextvars.ContextVar[Any] = contextvars.ContextVar(
    "policygate_tenant", default=None
)


def get_current_user() -> Any:
    """Get the current user from context."""
    return _current_user.get()


def get_current_tenant() -> Any:
    """Get the current tenant from context."""
    return _current_tenant.get()


@contextmanager
def user_context(user: Any, tenant: Any = None) -> Iterator[Any]:
    """
    Context manager to set the current user (and tenant) for authorization.

    Args:
        user: The user to authorize as.
        tenant: Optional tenant object exposing ``get_user()``.

    Yields:
        The user.
    """
    user_token = _current_user.set(user)
    tenant_token = _current_tenant.set(tenant) if tenant is not None else None
    try:
        yield user
    finally:
        _current_user.reset(user_token)
        if tenant_token:
            _current_tenant.reset(tenant_token)


class ContextGuard:
    """
    Auth guard reading the user and tenant bound by ``user_context``.

    Satisfies the ``Guard`` protocol used by ``GateProvider``.
    """

    def get_user(self) -> Any:
        return get_current_user()

    def tenant(self) -> Any:
        return get_current_tenant()
