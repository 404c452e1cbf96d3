"""
Tests for the Gate.

Tests cover:
- Missing user handling
- Single and multi-ability checks
- Argument and ability normalization
- Type-tag argument dropping
- Fallback to deny
- authorize / for_user / policy registration
"""

from __future__ import annotations

import sys

import pytest

from policygate import ForbiddenError, Gate, PolicyResolutionError, UserContext
from tests.models import (
    BrokenPolicy,
    Comment,
    CommentPolicy,
    FeaturedPost,
    FeaturedPostPolicy,
    Page,
    Post,
    PostPolicy,
    PublishablePolicy,
    Publishable,
)


class TestMissingUser:
    """Checks without a current user are always denied."""

    def test_no_user_denies_known_ability(self, gate_for, post: Post):
        gate = gate_for(None)
        assert gate.check("view", post) is False
        assert gate.allows("view", post) is False

    def test_no_user_denies_empty_ability_list(self, gate_for, post: Post):
        """Even the vacuous check needs a user."""
        gate = gate_for(None)
        assert gate.check([], post) is False
        assert gate.check(None) is False

    def test_falsy_user_is_still_a_user(self, post: Post):
        """Only None means 'nobody is logged in'."""
        class Anonymous:
            user_id = "anon"

            def __bool__(self) -> bool:
                return False

            def has_role(self, role: str) -> bool:
                return False

        gate = Gate(Anonymous, {Post: PostPolicy})
        assert gate.check([], post) is True

    def test_user_resolver_called_on_every_check(self, author: UserContext, post: Post):
        """The resolver result is never cached between checks."""
        users = [author, None, author]
        gate = Gate(lambda: users.pop(0), {Post: PostPolicy})

        assert gate.allows("update", post) is True
        assert gate.allows("update", post) is False
        assert gate.allows("update", post) is True


class TestSingleAbility:
    """Tests for allows/denies with one ability."""

    def test_policy_method_allows(self, gate: Gate, post: Post):
        assert gate.allows("update", post) is True

    def test_policy_method_denies(self, gate_for, reader: UserContext, post: Post):
        gate = gate_for(reader)
        assert gate.allows("update", post) is False

    def test_denies_is_negation_of_allows(self, gate: Gate, post: Post):
        for ability in ["view", "update", "delete", "unknown", "create"]:
            assert gate.denies(ability, post) is (not gate.allows(ability, post))

    def test_kebab_case_ability_maps_to_method(self, gate: Gate, post: Post):
        assert gate.allows("publish-draft", post) is True
        assert gate.allows("publish_draft", post) is True

    def test_missing_method_denies(self, gate: Gate, post: Post):
        assert gate.allows("archive", post) is False

    def test_private_method_is_not_an_ability(self, gate: Gate, post: Post):
        assert gate.allows("_internal", post) is False

    def test_base_class_helpers_are_not_abilities(self, gate: Gate, post: Post):
        assert gate.allows("method_for", post) is False
        assert gate.allows("get-available-abilities", post) is False

    def test_result_is_coerced_to_bool(self, author: UserContext, post: Post):
        class TruthyPolicy:
            def view(self, user, post):
                return "yes"

            def update(self, user, post):
                return None

        gate = Gate(lambda: author, {Post: TruthyPolicy})
        assert gate.allows("view", post) is True
        assert gate.allows("update", post) is False


class TestFallbackToDeny:
    """Anything unresolvable is denied rather than raised."""

    def test_no_arguments_denies(self, gate: Gate):
        assert gate.allows("update") is False
        assert gate.allows("update", []) is False

    def test_unregistered_type_denies(self, gate: Gate):
        assert gate.allows("update", Comment(author_id="author_1")) is False

    def test_unknown_type_name_denies(self, gate: Gate):
        assert gate.allows("create", "nowhere.Model") is False
        assert gate.allows("create", "Post") is False

    def test_string_subject_never_raises(self, gate: Gate, monkeypatch):
        monkeypatch.delitem(sys.modules, "this", raising=False)
        assert gate.allows("view", "this.is.not.a.type") is False
        assert gate.allows("view", "tests.broken_module.Thing") is False
        assert "this" not in sys.modules

    def test_empty_registry_denies(self, author: UserContext, post: Post):
        gate = Gate(lambda: author)
        assert gate.allows("update", post) is False

    def test_non_callable_attribute_denies(self, author: UserContext):
        gate = Gate(lambda: author, {Comment: CommentPolicy})
        assert gate.allows("not_callable", Comment(author_id="x")) is False


class TestArguments:
    """Tests for argument normalization and type tags."""

    def test_single_argument_is_wrapped(self, gate: Gate, post: Post):
        assert gate.check("update", post) is gate.check("update", [post])

    def test_policy_reads_user_attributes(self, author: UserContext):
        gate = Gate(lambda: author, {Comment: CommentPolicy})
        comment = Comment(author_id="x")
        moderator = UserContext(user_id="mod", attributes={"moderator": True})

        assert gate.allows("moderate", comment) is False
        assert gate.for_user(moderator).allows("moderate", comment) is True

    def test_tuple_arguments(self, author: UserContext):
        gate = Gate(lambda: author, {Comment: CommentPolicy})
        comment = Comment(author_id="x")
        assert gate.allows("reply", (comment, "thanks")) is True
        assert gate.allows("reply", [comment, ""]) is False

    def test_class_argument_is_dropped(self, gate: Gate):
        """create(user) is called, not create(user, Post)."""
        assert gate.allows("create", Post) is True

    def test_type_name_argument_is_dropped(self, gate: Gate):
        assert gate.allows("create", "tests.models.Post") is True

    def test_only_leading_type_tag_is_dropped(self, gate: Gate):
        assert gate.allows("create", [Post, "extra"]) is False

    def test_instance_argument_is_kept(self, gate: Gate, post: Post):
        calls = []

        class RecordingPolicy:
            def update(self, user, *args):
                calls.append(args)
                return True

        gate.policy(Post, RecordingPolicy)
        gate.allows("update", [post, 42])
        assert calls == [(post, 42)]

    def test_registration_by_string_key(self, author: UserContext):
        gate = Gate(lambda: author, {"tests.models.Post": PostPolicy})
        assert gate.allows("create", "tests.models.Post") is True
        assert gate.allows("update", Post(author_id=author.user_id)) is True


class TestMultipleAbilities:
    """Tests for all-must-pass aggregation."""

    def test_all_pass(self, gate: Gate, post: Post):
        assert gate.check(["view", "update", "publish-draft"], post) is True

    def test_one_failing_denies(self, gate: Gate, post: Post):
        assert gate.check(["view", "delete"], post) is False

    def test_unknown_ability_in_batch_denies(self, gate: Gate, post: Post):
        assert gate.check(["view", "archive"], post) is False

    def test_empty_ability_list_passes(self, gate: Gate, post: Post):
        assert gate.check([], post) is True
        assert gate.check(None, post) is True

    def test_tuple_of_abilities(self, gate: Gate, post: Post):
        assert gate.check(("view", "update"), post) is True

    def test_batch_matches_individual_checks(self, gate: Gate, post: Post):
        abilities = ["view", "update", "delete", "publish-draft"]
        for count in range(1, len(abilities) + 1):
            batch = abilities[:count]
            expected = all(gate.check([a], post) for a in batch)
            assert gate.check(batch, post) is expected


class TestAncestorFallback:
    """Tests for subclass and ABC lookups through the gate."""

    def test_subclass_uses_parent_policy(self, gate: Gate, author: UserContext):
        featured = FeaturedPost(author_id=author.user_id)
        assert gate.allows("update", featured) is True

    def test_exact_registration_wins_over_ancestor(self, gate: Gate, author: UserContext):
        gate.policy(FeaturedPost, FeaturedPostPolicy)
        featured = FeaturedPost(author_id=author.user_id)
        assert gate.allows("update", featured) is False

    def test_virtual_subclass_of_abc(self, author: UserContext):
        gate = Gate(lambda: author, {Publishable: PublishablePolicy})
        assert gate.allows("publish", Page()) is True
        assert gate.allows("publish", Page) is True


class TestAuthorize:
    """Tests for authorize()."""

    def test_allowed_returns_none(self, gate: Gate, post: Post):
        assert gate.authorize("update", post) is None

    def test_denied_raises_forbidden(self, gate_for, reader: UserContext, post: Post):
        gate = gate_for(reader)
        with pytest.raises(ForbiddenError) as exc_info:
            gate.authorize("update", post)

        assert exc_info.value.ability == "update"
        assert exc_info.value.status_code == 403
        assert "unauthorized" in exc_info.value.message

    def test_no_user_raises_forbidden(self, gate_for, post: Post):
        with pytest.raises(ForbiddenError):
            gate_for(None).authorize("view", post)

    def test_multiple_abilities(self, gate: Gate, post: Post):
        gate.authorize(["view", "update"], post)
        with pytest.raises(ForbiddenError):
            gate.authorize(["view", "delete"], post)

    def test_authorize_matches_check(self, gate: Gate, post: Post):
        for ability in ["view", "update", "delete", "archive"]:
            if gate.check(ability, post):
                gate.authorize(ability, post)
            else:
                with pytest.raises(ForbiddenError):
                    gate.authorize(ability, post)


class TestForUser:
    """Tests for per-user gates."""

    def test_for_user_uses_given_user(self, gate: Gate, admin: UserContext, post: Post):
        assert gate.allows("delete", post) is False
        assert gate.for_user(admin).allows("delete", post) is True

    def test_for_user_does_not_change_original(self, gate: Gate, admin: UserContext, post: Post):
        gate.for_user(admin)
        assert gate.allows("delete", post) is False

    def test_for_user_none_denies(self, gate: Gate, post: Post):
        assert gate.for_user(None).check([], post) is False

    def test_for_user_keeps_registrations(self, gate: Gate, reader: UserContext):
        clone = gate.for_user(reader)
        assert clone.policies() == gate.policies()
        assert clone.policy_factory is gate.policy_factory

    def test_registrations_are_independent(self, gate: Gate, reader: UserContext):
        clone = gate.for_user(reader)
        clone.policy(Comment, CommentPolicy)
        gate.policy(Page, PublishablePolicy)

        assert "tests.models.Comment" in clone.policies()
        assert "tests.models.Comment" not in gate.policies()
        assert "tests.models.Page" not in clone.policies()


class TestRegistration:
    """Tests for policy(), policies() and get_policy_for()."""

    def test_policy_returns_gate_for_chaining(self, author: UserContext):
        gate = Gate(lambda: author)
        assert gate.policy(Post, PostPolicy).policy(Comment, CommentPolicy) is gate

    def test_policies_lists_type_identifiers(self, gate: Gate):
        assert gate.policies() == {"tests.models.Post": PostPolicy}

    def test_policies_returns_a_copy(self, gate: Gate):
        gate.policies()["tests.models.Comment"] = CommentPolicy
        assert "tests.models.Comment" not in gate.policies()

    def test_last_registration_wins(self, gate: Gate, reader: UserContext, post: Post):
        gate.policy(Post, FeaturedPostPolicy)
        assert gate.policies() == {"tests.models.Post": FeaturedPostPolicy}

    def test_get_policy_for_instance_class_and_name(self, gate: Gate, post: Post):
        assert isinstance(gate.get_policy_for(post), PostPolicy)
        assert isinstance(gate.get_policy_for(Post), PostPolicy)
        assert isinstance(gate.get_policy_for("tests.models.Post"), PostPolicy)

    def test_get_policy_for_unknown(self, gate: Gate):
        assert gate.get_policy_for(Comment) is None
        assert gate.get_policy_for(None) is None

    def test_policy_built_fresh_each_time(self, gate: Gate, post: Post):
        first = gate.get_policy_for(post)
        second = gate.get_policy_for(post)
        assert first is not second

    def test_policy_built_per_ability(self, gate: Gate, post: Post):
        before = PostPolicy.instances
        gate.check(["view", "update"], post)
        assert PostPolicy.instances - before == 2

    def test_dotted_policy_identifier(self, author: UserContext, post: Post):
        gate = Gate(lambda: author, {Post: "tests.models.PostPolicy"})
        assert gate.allows("update", post) is True


class TestPolicyFactory:
    """Tests for the policy factory boundary."""

    def test_custom_factory_receives_identifier(self, author: UserContext, post: Post):
        seen = []

        def factory(identifier):
            seen.append(identifier)
            return PostPolicy()

        gate = Gate(lambda: author, {Post: "post-policy"}, policy_factory=factory)
        assert gate.allows("update", post) is True
        assert seen == ["post-policy"]

    def test_constructor_failure_propagates(self, author: UserContext, post: Post):
        gate = Gate(lambda: author, {Post: BrokenPolicy})
        with pytest.raises(RuntimeError, match="unavailable"):
            gate.allows("update", post)

    def test_unresolvable_identifier_propagates(self, author: UserContext, post: Post):
        gate = Gate(lambda: author, {Post: "tests.models.MissingPolicy"})
        with pytest.raises(PolicyResolutionError):
            gate.allows("update", post)

    def test_no_factory_call_without_match(self, author: UserContext):
        def factory(identifier):
            raise AssertionError("factory should not be called")

        gate = Gate(lambda: author, {Post: PostPolicy}, policy_factory=factory)
        assert gate.allows("update", Comment(author_id="x")) is False
