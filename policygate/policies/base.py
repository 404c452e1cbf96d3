"""
Policy base class for policygate.

A policy groups the authorization rules for one subject type. Each
ability is a public method on the policy that receives the principal
first, then whatever arguments the check was made with, and answers
with a boolean:

    >>> class PostPolicy(Policy):
    ...     def update(self, user, post) -> bool:
    ...         return post.author_id == user.user_id
    ...
    ...     def create(self, user) -> bool:
    ...         return user.has_role("writer")

Ability names may be kebab-case ("publish-draft"); they are mapped to
the snake_case method name ("publish_draft") before lookup.
"""

from __future__ import annotations

from abc import ABC
from collections.abc import Callable
from typing import Any


def format_ability_to_method(ability: str) -> str:
    """
    Map an ability name to the policy method that answers it.

    Hyphenated names are joined with underscores and each segment's
    first letter is lowercased; casing inside a segment is kept.
    Anything without a hyphen is returned unchanged, so the mapping is
    idempotent.

    Example:
        >>> format_ability_to_method("create-post")
        'create_post'
        >>> format_ability_to_method("viewAny-draft")
        'viewAny_draft'
        >>> format_ability_to_method("update")
        'update'
    """
    if "-" not in ability:
        return ability
    return "_".join(
        part[0].lower() + part[1:] for part in ability.split("-") if part
    )


class Policy(ABC):
    """
    Abstract base class for policies.

    Subclasses define one public method per ability. Any public
    callable attribute counts as an ability, except for the lookup
    helpers defined here.

    Policies are instantiated fresh by the Gate's policy factory for
    every check, so they should be cheap to construct and keep no
    per-check state.
    """

    # Helpers on this class that must never be dispatched to as abilities
    _reserved_names = frozenset({"method_for", "get_available_abilities"})

    def method_for(self, ability: str) -> Callable[..., Any] | None:
        """
        Look up the method answering ``ability``.

        Args:
            ability: The ability name, kebab-case or method-cased.

        Returns:
            The bound method, or None if this policy has no such ability.
        """
        name = format_ability_to_method(ability)
        if name.startswith("_") or name in self._reserved_names:
            return None
        method = getattr(self, name, None)
        return method if callable(method) else None

    @classmethod
    def get_available_abilities(cls) -> list[str]:
        """
        Get all abilities defined by this policy.

        Returns:
            Sorted method names of the abilities.

        Example:
            >>> class PostPolicy(Policy):
            ...     def view(self, user, post): return True
            ...     def update(self, user, post): return False
            >>> PostPolicy.get_available_abilities()
            ['update', 'view']
        """
        abilities = []
        for name in dir(cls):
            if name.startswith("_") or name in cls._reserved_names:
                continue
            if callable(getattr(cls, name)):
                abilities.append(name)
        return sorted(abilities)
