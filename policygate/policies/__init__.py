"""
Policy system for policygate.

Policies are plain classes with one public method per ability. The
registry maps subject types to policies; the factory builds a policy
instance from whatever was registered.

Quick Start:
    >>> from policygate.policies import Policy, PolicyRegistry
    >>>
    >>> class PostPolicy(Policy):
    ...     def update(self, user, post) -> bool:
    ...         return post.author_id == user.user_id
    >>>
    >>> registry = PolicyRegistry({Post: PostPolicy})
    >>> registry.lookup(post)
    <class 'PostPolicy'>
"""

from policygate.policies.base import Policy, format_ability_to_method
from policygate.policies.factory import DefaultPolicyFactory
from policygate.policies.registry import PolicyRegistry

__all__ = [
    "Policy",
    "format_ability_to_method",
    "PolicyRegistry",
    "DefaultPolicyFactory",
]
