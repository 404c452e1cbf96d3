"""Shared authorization helpers."""

from __future__ import annotations

from typing import Any, NoReturn

from policygate.exceptions import ForbiddenError


class HandlesAuthorization:
    """
    Mixin with the allow/deny vocabulary used by the Gate.

    Example:
        >>> class ReportService(HandlesAuthorization):
        ...     def export(self, user):
        ...         if not user.has_role("auditor"):
        ...             self.deny("Only auditors can export reports.")
        ...         return self.allow()
    """

    def allow(self) -> bool:
        """Grant the ability."""
        return True

    def deny(self, message: str | None = None, **details: Any) -> NoReturn:
        """
        Refuse the ability.

        Args:
            message: Explanation for the caller; a generic message is
                used when omitted.
            **details: Extra context stored on the error (e.g. ability).

        Raises:
            ForbiddenError: Always.
        """
        raise ForbiddenError(message, **details)
