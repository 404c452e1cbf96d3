"""
Policy construction for policygate.

The Gate never builds policies itself; it hands the registered policy
identifier to a factory. ``DefaultPolicyFactory`` covers the common
cases. Applications with a dependency-injection container can pass any
``Callable[[Any], Any]`` in its place.
"""

from __future__ import annotations

import logging
from typing import Any

from policygate.exceptions import PolicyResolutionError
from policygate.types import locate_type

logger = logging.getLogger(__name__)


class DefaultPolicyFactory:
    """
    Builds a fresh policy instance from a policy identifier.

    Supported identifiers:
        - A class, instantiated with no arguments.
        - Any other callable, called with no arguments.
        - A dotted path ("app.policies.PostPolicy") to a class, located
          with importlib and then instantiated.

    Nothing is cached: every call constructs a new instance. Errors
    raised by a policy constructor propagate unchanged.

    Example:
        >>> factory = DefaultPolicyFactory()
        >>> isinstance(factory("app.policies.PostPolicy"), PostPolicy)
        True
    """

    def __call__(self, identifier: Any) -> Any:
        """
        Build the policy named by ``identifier``.

        Raises:
            PolicyResolutionError: If the identifier is neither callable
                nor the dotted path of an importable class.
        """
        if isinstance(identifier, str):
            policy_class = locate_type(identifier)
            if policy_class is None:
                raise PolicyResolutionError(identifier)
            logger.debug(f"Located policy class '{identifier}'")
            return policy_class()

        if callable(identifier):
            return identifier()

        raise PolicyResolutionError(identifier)
