"""
Configuration for policygate bootstrap.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from policygate.exceptions import ConfigurationError

ENV_MULTI_TENANT = "POLICYGATE_MULTI_TENANT"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass
class GateConfig:
    """
    Settings used by ``GateProvider`` when wiring a Gate.

    Attributes:
        multi_tenant: Read the user from the guard's current tenant
            instead of from the guard itself.
        policies: Extra subject type -> policy registrations, applied
            after the provider's own mapping.

    Example:
        >>> config = GateConfig.from_mapping({
        ...     "auth": {"multi": {"tenant": True}},
        ...     "policies": {"app.models.Post": "app.policies.PostPolicy"},
        ... })
        >>> config.multi_tenant
        True
    """
    multi_tenant: bool = False
    policies: dict[Any, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> GateConfig:
        """
        Create configuration from a plain mapping.

        Accepts ``multi_tenant`` or the nested ``auth.multi.tenant`` key,
        and ``policies``.

        Raises:
            ConfigurationError: On unknown keys or values of the wrong type.
        """
        unknown = set(data) - {"multi_tenant", "policies", "auth"}
        if unknown:
            raise ConfigurationError(
                config_key=", ".join(sorted(unknown)),
                expected="one of: 'multi_tenant', 'policies', 'auth'",
            )

        multi_tenant = data.get("multi_tenant")
        if multi_tenant is None and "auth" in data:
            multi_tenant = _nested(data, ("auth", "multi", "tenant"))
        if multi_tenant is None:
            multi_tenant = False
        if not isinstance(multi_tenant, bool):
            raise ConfigurationError(
                config_key="multi_tenant", expected="a boolean", received=multi_tenant
            )

        policies = data.get("policies") or {}
        if not isinstance(policies, Mapping):
            raise ConfigurationError(
                config_key="policies",
                expected="a mapping of subject type to policy",
                received=policies,
            )

        return cls(multi_tenant=multi_tenant, policies=dict(policies))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GateConfig:
        """
        Create configuration from environment variables.

        Reads ``POLICYGATE_MULTI_TENANT``. Policies are code, so they are
        never read from the environment.

        Raises:
            ConfigurationError: If the variable is not a recognized boolean.
        """
        env = os.environ if environ is None else environ
        raw = env.get(ENV_MULTI_TENANT)
        if raw is None:
            return cls()

        value = raw.strip().lower()
        if value in _TRUE_VALUES:
            return cls(multi_tenant=True)
        if value in _FALSE_VALUES:
            return cls(multi_tenant=False)
        raise ConfigurationError(
            config_key=ENV_MULTI_TENANT,
            expected="one of: 1, true, yes, on, 0, false, no, off",
            received=raw,
        )


def _nested(data: Mapping[str, Any], path: tuple[str, ...]) -> Any:
    current: Any = data
    for key in path:
        if not isinstance(current, Mapping):
            raise ConfigurationError(
                config_key=".".join(path), expected="a nested mapping", received=current
            )
        current = current.get(key)
        if current is None:
            return None
    return current
