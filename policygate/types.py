"""
Core type definitions for policygate.

This module defines the principal data structure shipped with the
package and the helpers that turn classes, instances and dotted strings
into the type identifiers the policy registry is keyed by.
"""

from __future__ import annotations

import builtins
import importlib
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

# A subject type identifier: "module.QualName", or a class object.
TypeIdentifier = str | type

# Zero-argument callable returning the current principal, or None.
UserResolver = Callable[[], Any]

# Turns a policy identifier into a live policy instance.
PolicyFactory = Callable[[Any], Any]


@dataclass(frozen=True)
class UserContext:
    """
    Represents the authenticated user an authorization check runs for.

    Hosts are free to use their own user objects as principals; this
    class is a convenient default for applications that don't have one.

    Attributes:
        user_id: Unique identifier for the user (e.g., from your auth system).
        roles: Role names assigned to the user. Policies may read them;
            the Gate itself never interprets them.
        attributes: Additional custom attributes for policy decisions
            (e.g., {"department": "engineering"}).

    Example:
        >>> user = UserContext(
        ...     user_id="user_123",
        ...     roles=["editor"],
        ...     attributes={"department": "engineering"}
        ... )
    """
    user_id: str
    roles: list[str] = field(default_factory=list)
    attributes: dict[str, Any] = field(default_factory=dict)

    def has_role(self, role: str) -> bool:
        """Check if user has a specific role."""
        return role in self.roles

    def get_attribute(self, key: str, default: Any = None) -> Any:
        """Get a user attribute with optional default."""
        return self.attributes.get(key, default)


def is_type_identifier(value: Any) -> bool:
    """
    Check whether an argument names a type rather than carrying a value.

    Strings and classes are type tags; every other object is a value.

    Example:
        >>> is_type_identifier(Post), is_type_identifier("app.models.Post")
        (True, True)
        >>> is_type_identifier(Post())
        False
    """
    return isinstance(value, (str, type))


def type_identifier_of(cls: type) -> str:
    """
    Build the canonical identifier for a class.

    Example:
        >>> type_identifier_of(collections.OrderedDict)
        'collections.OrderedDict'
    """
    return f"{cls.__module__}.{cls.__qualname__}"


def normalize_type_identifier(value: Any) -> str | None:
    """
    Normalize a class, instance or dotted string to a type identifier.

    Args:
        value: A class, an instance of some class, or a string.

    Returns:
        The identifier string, or None when ``value`` is None.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, type):
        return type_identifier_of(value)
    return type_identifier_of(type(value))


def locate_type(identifier: str, import_modules: bool = True) -> type | None:
    """
    Find the class named by a dotted identifier.

    The longest module prefix is taken and the remaining parts are walked
    as attributes, so nested classes ("pkg.module.Outer.Inner") resolve
    too. Undotted names are looked up among the builtins.

    Args:
        identifier: Dotted path such as "app.models.Post".
        import_modules: Import modules that aren't loaded yet. When False,
            only modules already in ``sys.modules`` are consulted.

    Returns:
        The class, or None if nothing by that name is a class. Modules
        that fail to import count as not found.
    """
    parts = identifier.split(".")
    if not all(parts):
        return None
    if len(parts) == 1:
        builtin = getattr(builtins, identifier, None)
        return builtin if isinstance(builtin, type) else None

    for index in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:index])
        found: Any = sys.modules.get(module_name)
        if found is None:
            if not import_modules:
                continue
            try:
                found = importlib.import_module(module_name)
            except Exception as e:
                logger.debug(f"Could not import module {module_name}: {e}")
                continue
        for attribute in parts[index:]:
            found = getattr(found, attribute, None)
            if found is None:
                return None
        return found if isinstance(found, type) else None
    return None
