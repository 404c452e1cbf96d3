"""
Custom exceptions for policygate.

Denials from ``Gate.check`` are plain ``False`` values; the exceptions
here cover the cases that must cross the Gate boundary: an explicit
``authorize`` denial and misconfiguration (bad settings, policy
identifiers that cannot be located).
"""

from __future__ import annotations

from typing import Any


class PolicyGateError(Exception):
    """
    Base exception for all policygate errors.

    Attributes:
        message: Human-readable error description.
        details: Additional context about the error.

    Example:
        >>> try:
        ...     gate.authorize("update", post)
        ... except PolicyGateError as e:
        ...     logger.error(f"policygate error: {e}")
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ForbiddenError(PolicyGateError):
    """
    Raised when the current user may not perform an ability.

    This is the denial signal of ``Gate.authorize``. It is distinct from
    every other error so callers can tell "not allowed" apart from
    "something is broken".

    Attributes:
        ability: The ability (or abilities) that were checked.
        status_code: HTTP status a web layer should answer with.

    Example:
        >>> raise ForbiddenError(ability="update")
    """

    status_code = 403
    default_message = "This action is unauthorized."

    def __init__(
        self,
        message: str | None = None,
        ability: Any = None,
        **details: Any,
    ) -> None:
        self.ability = ability
        if ability is not None:
            details = {"ability": ability, **details}
        super().__init__(message or self.default_message, details)


class ConfigurationError(PolicyGateError):
    """
    Raised when the Gate or its bootstrap is misconfigured.

    Attributes:
        config_key: The configuration key that has an issue.
        expected: What was expected for this configuration.
        received: What was actually provided.

    Example:
        >>> raise ConfigurationError(
        ...     config_key="multi_tenant",
        ...     expected="a boolean",
        ...     received="maybe"
        ... )
    """

    def __init__(
        self,
        config_key: str,
        expected: str | None = None,
        received: Any = None,
    ) -> None:
        self.config_key = config_key
        self.expected = expected
        self.received = received

        message = f"Configuration error for '{config_key}'"
        if expected:
            message += f": expected {expected}"
        if received is not None:
            message += f", got {received!r}"

        details = {
            "config_key": config_key,
            "expected": expected,
            "received": str(received) if received is not None else None,
        }
        super().__init__(message, details)


class PolicyResolutionError(ConfigurationError):
    """
    Raised when a policy identifier cannot be turned into a policy.

    A bad identifier is a wiring mistake, not an authorization outcome,
    so the Gate lets this propagate instead of denying.

    Attributes:
        identifier: The policy identifier that failed to resolve.
    """

    def __init__(self, identifier: Any) -> None:
        self.identifier = identifier
        super().__init__(
            config_key="policy",
            expected="a policy class, callable or importable dotted path",
            received=identifier,
        )
