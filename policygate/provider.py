"""
Bootstrap helper that builds a Gate and registers an application's policies.

Example:
    >>> class AppGateProvider(GateProvider):
    ...     policies = {
    ...         Post: PostPolicy,
    ...         "app.models.Comment": "app.policies.CommentPolicy",
    ...     }
    >>>
    >>> gate = AppGateProvider(ContextGuard(), GateConfig.from_env()).boot()
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Protocol, runtime_checkable

from policygate.config import GateConfig
from policygate.gate import Gate
from policygate.types import PolicyFactory, UserResolver

logger = logging.getLogger(__name__)


@runtime_checkable
class Guard(Protocol):
    """
    Protocol for the authentication layer the provider reads users from.

    ``tenant()`` returns the active tenant, an object exposing
    ``get_user()``, or None when no tenant is active.
    """

    def get_user(self) -> Any: ...

    def tenant(self) -> Any: ...


class GateProvider:
    """
    Wires a Gate to an auth guard and registers the application's policies.

    Subclasses list their policies in the ``policies`` class attribute.
    Entries from ``GateConfig.policies`` are registered afterwards and
    therefore win on conflicts.

    Attributes:
        guard: Source of the current user.
        config: Bootstrap settings.
        gate: The Gate built by ``register()``, or None before that.
    """

    policies: ClassVar[dict[Any, Any]] = {}

    def __init__(
        self,
        guard: Guard,
        config: GateConfig | None = None,
        policy_factory: PolicyFactory | None = None,
    ) -> None:
        self.guard = guard
        self.config = config or GateConfig()
        self._policy_factory = policy_factory
        self.gate: Gate | None = None

    def make_user_resolver(self) -> UserResolver:
        """Build the resolver the Gate calls to find the current user."""
        guard = self.guard

        if self.config.multi_tenant:
            def resolve_tenant_user() -> Any:
                tenant = guard.tenant()
                if tenant is None:
                    return None
                return tenant.get_user()

            return resolve_tenant_user

        return guard.get_user

    def register(self) -> Gate:
        """Create the Gate."""
        self.gate = Gate(self.make_user_resolver(), policy_factory=self._policy_factory)
        return self.gate

    def register_policies(self) -> Gate:
        """Register the application's policies on the Gate, creating it if needed."""
        gate = self.gate if self.gate is not None else self.register()
        for subject_type, policy in {**self.policies, **self.config.policies}.items():
            gate.policy(subject_type, policy)
        logger.debug(f"Registered {len(gate.policies())} policies")
        return gate

    def boot(self) -> Gate:
        """Register policies and return the ready Gate."""
        return self.register_policies()
