"""
policygate: policy-based authorization for Python applications.

A Gate decides whether the current user may perform an ability on a
subject by delegating to the policy registered for the subject's type.
Anything the Gate cannot resolve is denied.

Basic Usage:
    >>> from policygate import Gate, Policy, UserContext
    >>>
    >>> class PostPolicy(Policy):
    ...     def update(self, user, post):
    ...         return post.author_id == user.user_id
    ...
    ...     def create(self, user):
    ...         return user.has_role("writer")
    >>>
    >>> gate = Gate(lambda: current_user).policy(Post, PostPolicy)
    >>> gate.allows("update", post)
    >>> gate.allows("create", Post)
    >>> gate.authorize("update", post)  # raises ForbiddenError when denied
"""

__version__ = "0.1.0"

from policygate.concerns import HandlesAuthorization
from policygate.config import GateConfig
from policygate.context import (
    ContextGuard,
    get_current_tenant,
    get_current_user,
    user_context,
)
from policygate.exceptions import (
    ConfigurationError,
    ForbiddenError,
    PolicyGateError,
    PolicyResolutionError,
)
from policygate.gate import Gate
from policygate.policies.base import Policy, format_ability_to_method
from policygate.policies.factory import DefaultPolicyFactory
from policygate.policies.registry import PolicyRegistry
from policygate.provider import GateProvider, Guard
from policygate.types import (
    UserContext,
    is_type_identifier,
    locate_type,
    type_identifier_of,
)

__all__ = [
    # Version
    "__version__",
    # Gate
    "Gate",
    "HandlesAuthorization",
    # Policies
    "Policy",
    "PolicyRegistry",
    "DefaultPolicyFactory",
    "format_ability_to_method",
    # Types
    "UserContext",
    "is_type_identifier",
    "type_identifier_of",
    "locate_type",
    # Exceptions
    "PolicyGateError",
    "ForbiddenError",
    "ConfigurationError",
    "PolicyResolutionError",
    # Bootstrap
    "GateProvider",
    "Guard",
    "GateConfig",
    # Context helpers
    "ContextGuard",
    "user_context",
    "get_current_user",
    "get_current_tenant",
]
