"""
The authorization Gate.

The Gate answers "may the current user do <ability> with <arguments>?"
by finding the policy registered for the first argument's type and
calling the policy method named after the ability. Anything it cannot
resolve (no user, no policy, no such method) is denied.

Example:
    >>> gate = Gate(get_current_user)
    >>> gate.policy(Post, PostPolicy)
    >>>
    >>> gate.allows("update", post)          # PostPolicy().update(user, post)
    >>> gate.check(["view", "update"], post) # every ability must pass
    >>> gate.allows("create", Post)          # PostPolicy().create(user)
    >>> gate.authorize("delete", post)       # raises ForbiddenError if denied
    >>> gate.for_user(other_user).denies("update", post)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from policygate.concerns import HandlesAuthorization
from policygate.policies.base import format_ability_to_method
from policygate.policies.factory import DefaultPolicyFactory
from policygate.policies.registry import PolicyRegistry
from policygate.types import (
    PolicyFactory,
    TypeIdentifier,
    UserResolver,
    is_type_identifier,
)

logger = logging.getLogger(__name__)


def _wrap(value: Any) -> list[Any]:
    """None becomes [], lists and tuples are copied, anything else is wrapped."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _deny(*args: Any) -> bool:
    return False


class Gate(HandlesAuthorization):
    """
    Policy-based authorization decisions for the current user.

    Attributes:
        policy_factory: Turns a registered policy identifier into a live
            policy instance. Called on every check; nothing is cached.

    Example:
        >>> gate = Gate(lambda: current_user, {Post: PostPolicy})
        >>> if gate.denies("publish-draft", post):
        ...     return forbidden()
    """

    def __init__(
        self,
        user_resolver: UserResolver,
        policies: dict[Any, Any] | PolicyRegistry | None = None,
        policy_factory: PolicyFactory | None = None,
    ) -> None:
        """
        Create a new gate.

        Args:
            user_resolver: Zero-argument callable returning the current
                user, or None when nobody is authenticated. It is called
                on every check.
            policies: Initial subject type -> policy mapping, or a
                registry to copy.
            policy_factory: Builds policy instances from identifiers;
                defaults to ``DefaultPolicyFactory``.
        """
        if isinstance(policies, PolicyRegistry):
            self._registry = policies.copy()
        else:
            self._registry = PolicyRegistry(policies)
        self._user_resolver = user_resolver
        self.policy_factory = policy_factory or DefaultPolicyFactory()

    def allows(self, ability: str, arguments: Any = None) -> bool:
        """
        Determine if the given ability should be granted for the current user.

        Args:
            ability: Ability name, e.g. "update" or "create-post".
            arguments: A single argument or a list/tuple of arguments.
                The first one selects the policy.
        """
        return self.check([ability], arguments)

    def denies(self, ability: str, arguments: Any = None) -> bool:
        """Determine if the given ability should be denied for the current user."""
        return not self.allows(ability, arguments)

    def authorize(self, abilities: Any, arguments: Any = None) -> None:
        """
        Require the given abilities for the current user.

        Raises:
            ForbiddenError: If ``check`` would return False.
        """
        if not self.check(abilities, arguments):
            self.deny(ability=abilities)

    def check(self, abilities: Any, arguments: Any = None) -> bool:
        """
        Determine if all of the given abilities should be granted.

        Args:
            abilities: One ability name, or a list/tuple of them.
            arguments: A single argument or a list/tuple of arguments,
                passed to every ability's policy method.

        Returns:
            False when there is no current user; otherwise True only if
            every ability passes. An empty ability list passes.
        """
        user = self._resolve_user()
        if user is None:
            return False

        arguments = _wrap(arguments)
        return all(
            self._call_auth_callback(user, ability, arguments)
            for ability in _wrap(abilities)
        )

    def _call_auth_callback(self, user: Any, ability: str, arguments: list[Any]) -> bool:
        """Resolve and call the appropriate authorization callback."""
        callback = self._resolve_auth_callback(user, ability, arguments)
        return callback(user, *arguments)

    def _resolve_auth_callback(
        self, user: Any, ability: str, arguments: list[Any]
    ) -> Callable[..., bool]:
        """Resolve the callable for the given ability and arguments."""
        if arguments:
            policy = self.get_policy_for(arguments[0])
            if policy is not None:
                callback = self._resolve_policy_callback(user, ability, arguments, policy)
                if callback is not None:
                    return callback

        logger.debug(f"No policy method for ability '{ability}', denying")
        return _deny

    def _resolve_policy_callback(
        self, user: Any, ability: str, arguments: list[Any], policy: Any
    ) -> Callable[..., bool] | None:
        """Resolve the callback for a policy check."""
        if self._policy_method(policy, ability) is None:
            return None

        def callback(*_: Any) -> bool:
            # A leading class or type name only picked the policy; the
            # policy already knows which type it authorizes.
            remaining = arguments[1:] if is_type_identifier(arguments[0]) else arguments
            method = self._policy_method(policy, ability)
            if method is None:
                return False
            return bool(method(user, *remaining))

        return callback

    @staticmethod
    def _policy_method(policy: Any, ability: str) -> Callable[..., Any] | None:
        method_for = getattr(policy, "method_for", None)
        if callable(method_for):
            return method_for(ability)

        name = format_ability_to_method(ability)
        if name.startswith("_"):
            return None
        method = getattr(policy, name, None)
        return method if callable(method) else None

    def get_policy_for(self, subject: Any) -> Any | None:
        """
        Get a policy instance for a given class, instance or type name.

        Args:
            subject: A model instance, its class, or a dotted type name.

        Returns:
            A freshly built policy, or None if no policy is registered for
            the subject's type or any of its ancestors.
        """
        identifier = self._registry.lookup(subject)
        if identifier is None:
            return None
        return self.resolve_policy(identifier)

    def resolve_policy(self, identifier: Any) -> Any:
        """Build a policy instance from its identifier."""
        return self.policy_factory(identifier)

    def _resolve_user(self) -> Any:
        return self._user_resolver()

    def policy(self, subject_type: TypeIdentifier, policy: Any) -> Gate:
        """
        Define a policy for a given subject type.

        Args:
            subject_type: Class or dotted name of the subject type.
            policy: Policy class, callable or dotted path to a class.

        Returns:
            This gate, for chaining.
        """
        self._registry.register(subject_type, policy)
        return self

    def for_user(self, user: Any) -> Gate:
        """
        Get a gate instance for the given user.

        The new gate starts with a copy of this gate's policies and
        shares its policy factory. Registrations made on either gate
        afterwards do not affect the other.
        """
        return self.__class__(
            lambda: user, self._registry, self.policy_factory
        )

    def policies(self) -> dict[str, Any]:
        """Get all of the defined policies, keyed by type identifier."""
        return self._registry.as_dict()
