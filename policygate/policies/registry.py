"""
Policy registry for policygate.

This module provides the PolicyRegistry class, an ordered mapping from
subject type identifiers to policy identifiers with ancestor-type
fallback on lookup.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from policygate.types import (
    TypeIdentifier,
    locate_type,
    normalize_type_identifier,
)

logger = logging.getLogger(__name__)


class PolicyRegistry:
    """
    Registry mapping subject types to policy identifiers.

    Keys are type identifiers ("module.QualName"); classes passed as keys
    are normalized to their identifier and remembered, so ancestor checks
    against them need no import. Values are policy identifiers, handed
    untouched to the Gate's policy factory.

    Lookup order:
        1. Exact match on the subject's type identifier. For keys
           registered as classes the subject's class must be that very
           class, since two classes can share a qualname.
        2. The first registered key, in registration order, that is a
           strict ancestor (base class or registered ABC) of the subject.

    Example:
        >>> registry = PolicyRegistry()
        >>> registry.register(Post, PostPolicy)
        >>> registry.lookup(Post()) is PostPolicy
        True
        >>> registry.lookup(FeaturedPost) is PostPolicy  # subclass of Post
        True

    Thread Safety:
        All operations are thread-safe via internal locking.
    """

    def __init__(self, policies: dict[Any, Any] | None = None) -> None:
        """
        Initialize the registry.

        Args:
            policies: Initial subject type -> policy mapping, registered
                in iteration order.
        """
        self._policies: dict[str, Any] = {}
        self._types: dict[str, type] = {}
        self._lock = threading.RLock()
        for subject_type, policy in (policies or {}).items():
            self.register(subject_type, policy)

    def register(self, subject_type: TypeIdentifier, policy: Any) -> None:
        """
        Register a policy for a subject type.

        Registering the same type again overwrites the previous policy
        but keeps the type's original position in lookup order.

        Args:
            subject_type: Class or dotted identifier of the subject type.
            policy: Policy identifier for the factory (class, callable
                or dotted path).

        Example:
            >>> registry.register("app.models.Post", "app.policies.PostPolicy")
        """
        key = normalize_type_identifier(subject_type)
        if not isinstance(subject_type, (str, type)) or not key:
            raise TypeError(
                f"subject type must be a class or a dotted name, got {subject_type!r}"
            )

        with self._lock:
            if key in self._policies:
                logger.warning(
                    f"Overwriting policy for '{key}': "
                    f"{self._policies[key]!r} -> {policy!r}"
                )

            self._policies[key] = policy
            if isinstance(subject_type, type):
                self._types[key] = subject_type

            logger.debug(f"Registered policy {policy!r} for '{key}'")

    def lookup(self, subject: Any) -> Any | None:
        """
        Find the policy identifier for a subject.

        Args:
            subject: An instance, a class, or a dotted type identifier.

        Returns:
            The registered policy identifier, or None if neither the
            subject's type nor any of its ancestors is registered.
        """
        if subject is None:
            return None
        key = normalize_type_identifier(subject)

        with self._lock:
            if key in self._policies and self._is_exact(subject, key):
                return self._policies[key]

            subject_class = self._subject_class(subject, key)
            if subject_class is None:
                return None

            for expected, policy in self._policies.items():
                expected_class = self._resolve_type(expected)
                if expected_class is None or expected_class is subject_class:
                    continue
                try:
                    is_ancestor = issubclass(subject_class, expected_class)
                except TypeError:
                    continue
                if is_ancestor:
                    logger.debug(
                        f"Using policy {policy!r} registered for ancestor "
                        f"'{expected}' of '{key}'"
                    )
                    return policy
        return None

    def _is_exact(self, subject: Any, key: str) -> bool:
        # Distinct classes can share a qualname (e.g. classes built in a function).
        registered = self._types.get(key)
        if registered is None or isinstance(subject, str):
            return True
        subject_class = subject if isinstance(subject, type) else type(subject)
        return subject_class is registered

    def _subject_class(self, subject: Any, key: str) -> type | None:
        if isinstance(subject, type):
            return subject
        if isinstance(subject, str):
            # Subject strings are caller data: never import on their behalf.
            return self._resolve_type(key, import_modules=False)
        return type(subject)

    def _resolve_type(self, key: str, import_modules: bool = True) -> type | None:
        known = self._types.get(key)
        if known is not None:
            return known
        return locate_type(key, import_modules=import_modules)

    def has_policy(self, subject_type: TypeIdentifier) -> bool:
        """
        Check if a policy is registered for exactly this subject type.

        Ancestors are not consulted; use ``lookup`` for that.
        """
        with self._lock:
            return normalize_type_identifier(subject_type) in self._policies

    def as_dict(self) -> dict[str, Any]:
        """
        Get a snapshot of all registrations.

        Returns:
            Dictionary mapping type identifiers to policy identifiers,
            in registration order.
        """
        with self._lock:
            return dict(self._policies)

    def copy(self) -> PolicyRegistry:
        """
        Create an independent registry with the same registrations.

        Later registrations on either registry do not affect the other.
        """
        clone = PolicyRegistry()
        with self._lock:
            clone._policies = dict(self._policies)
            clone._types = dict(self._types)
        return clone

    def __len__(self) -> int:
        with self._lock:
            return len(self._policies)

    def __contains__(self, subject_type: object) -> bool:
        if not isinstance(subject_type, (str, type)):
            return False
        return self.has_policy(subject_type)
