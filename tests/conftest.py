"""
Pytest fixtures for policygate tests.
"""

from __future__ import annotations

import pytest

from policygate import Gate, UserContext
from tests.models import Post, PostPolicy


# ============================================================================
# User Fixtures
# ============================================================================


@pytest.fixture
def author() -> UserContext:
    """A writer who authors posts."""
    return UserContext(user_id="author_1", roles=["writer"])


@pytest.fixture
def reader() -> UserContext:
    """A user with no roles."""
    return UserContext(user_id="reader_2")


@pytest.fixture
def admin() -> UserContext:
    """An administrator."""
    return UserContext(user_id="admin_3", roles=["admin", "editor"])


# ============================================================================
# Domain Fixtures
# ============================================================================


@pytest.fixture
def post(author: UserContext) -> Post:
    """An unpublished post written by ``author``."""
    return Post(author_id=author.user_id)


@pytest.fixture
def published_post() -> Post:
    """A published post written by someone else."""
    return Post(author_id="someone_else", published=True)


# ============================================================================
# Gate Fixtures
# ============================================================================


@pytest.fixture
def gate_for():
    """Build a gate with PostPolicy registered for the given user."""
    def build(user: UserContext | None) -> Gate:
        return Gate(lambda: user, {Post: PostPolicy})
    return build


@pytest.fixture
def gate(gate_for, author: UserContext) -> Gate:
    """A gate acting as ``author``."""
    return gate_for(author)
