"""Tests for the permit evaluator."""

from __future__ import annotations

import pytest

from scopetree import (
    Permit,
    PermitOptions,
    ScopeTreeConfig,
    UnknownScopeError,
    compile_schema,
    create_permit,
)

SCHEMA = {
    "todo": {
        "view": {"scope": "@view"},
        "action": {
            "create": "Create new todo",
            "update": "Update todo",
            "delete": "Delete todo",
        },
    },
    "users": {
        "manage": {
            "view": "Access user management view page",
            "action": {
                "create": "Create new user",
                "update": "Update user",
                "delete": "Delete user",
            },
        },
        "profile": {
            "view": "Access user profile view page",
        },
    },
}

GRANTED = ["todo.action.create", "@view"]


@pytest.fixture
def permit() -> Permit:
    return create_permit(SCHEMA, granted=GRANTED)


class TestCreatePermit:
    """Tests for permit construction."""

    def test_aggregates(self, permit: Permit) -> None:
        """Leaf flags and branch aggregates reflect the granted list."""
        assert permit.is_.todo.view.ok is True
        assert permit.is_.todo.some is True
        assert permit.is_.todo.action.some is True
        assert permit.is_.todo.action.create.no is False
        assert permit.is_.todo.action.all is False
        assert permit.is_.users.profile.view.ok is False
        assert permit.is_.users.none is True
        assert permit.is_.users.all is False

    def test_check(self, permit: Permit) -> None:
        """check() reads the cache, defaulting to False."""
        assert permit.check("@view") is True
        assert permit.check("todo.action.create") is True
        assert permit.check("todo.action.update") is False
        assert permit.check("not.declared") is False

    def test_from_access_branch(self) -> None:
        """AccessBranch.permit() builds the same evaluator."""
        access = compile_schema(SCHEMA)
        permit = access.permit(GRANTED)
        assert isinstance(permit, Permit)
        assert permit.is_.todo.action.create.ok is True

    def test_default_granted_is_empty(self) -> None:
        """A permit without granted scopes denies everything."""
        permit = compile_schema(SCHEMA).permit()
        assert permit.granted == []
        assert len(permit.denied) == 9
        assert permit.is_.none is True

    def test_options_mapping(self) -> None:
        """Prefix and granted can come from an options mapping."""
        permit = create_permit(SCHEMA, {"prefix": "app", "granted": ["app.todo.action.create"]})
        assert permit.is_.todo.action.create.ok is True
        assert permit.check("app.todo.action.create") is True

    def test_options_model(self) -> None:
        """PermitOptions instance is accepted."""
        options = PermitOptions(prefix="@", spacer="-", granted=["@-users-profile-view"])
        permit = create_permit(SCHEMA, options)
        assert permit.is_.users.profile.all is True

    def test_granted_keyword_overrides_options(self) -> None:
        """granted keyword takes precedence over options.granted."""
        permit = create_permit(SCHEMA, {"granted": ["@view"]}, granted=["users.profile.view"])
        assert permit.check("@view") is False
        assert permit.check("users.profile.view") is True

    def test_scopes(self, permit: Permit) -> None:
        """scopes mirrors the access tree's scopes."""
        assert [node.scope for node in permit.scopes][:2] == ["@view", "todo.action.create"]
        assert len(permit.scopes) == 9


class TestGrantedDenied:
    """Tests for granted / denied views."""

    def test_granted_in_tree_order(self, permit: Permit) -> None:
        """granted lists access nodes in tree order."""
        assert [node.scope for node in permit.granted] == ["@view", "todo.action.create"]

    def test_denied(self, permit: Permit) -> None:
        """denied lists every other declared scope."""
        denied = [node.scope for node in permit.denied]
        assert len(denied) == 7
        assert "todo.action.update" in denied
        assert "@view" not in denied

    def test_undeclared_granted_scope_not_listed(self) -> None:
        """Granted scopes the tree does not declare appear in neither list."""
        permit = create_permit(SCHEMA, granted=["billing.view"])
        scopes = {node.scope for node in permit.granted + permit.denied}
        assert "billing.view" not in scopes
        assert permit.check("billing.view") is False


class TestGrantDeny:
    """Tests for grant() and deny()."""

    def test_grant_flips_check_and_snapshot(self, permit: Permit) -> None:
        """grant() sets check() and the leaf ok flag."""
        permit.grant("users.profile.view")
        assert permit.check("users.profile.view") is True
        assert permit.is_.users.profile.view.ok is True
        assert permit.is_.users.some is True

    def test_deny_flips_back(self, permit: Permit) -> None:
        """deny() undoes grant()."""
        permit.grant("users.profile.view")
        permit.deny("users.profile.view")
        assert permit.check("users.profile.view") is False
        assert permit.is_.users.profile.view.ok is False
        assert permit.is_.users.profile.view.no is True

    def test_variadic_grant(self, permit: Permit) -> None:
        """Several scopes are applied in one call."""
        permit.grant("todo.action.update", "todo.action.delete")
        assert permit.is_.todo.action.all is True
        assert permit.is_.todo.all is True
        assert permit.is_.all is False

    def test_deny_granted_scope(self, permit: Permit) -> None:
        """deny() on a granted scope moves it to denied."""
        permit.deny("@view")
        assert permit.is_.todo.view.no is True
        assert [node.scope for node in permit.granted] == ["todo.action.create"]

    def test_unknown_scope_ignored(self, permit: Permit) -> None:
        """Undeclared scopes are not added to the cache."""
        permit.grant("not.declared")
        assert permit.check("not.declared") is False
        assert len(permit.granted) + len(permit.denied) == 9

    def test_mixed_known_and_unknown(self, permit: Permit) -> None:
        """Known scopes in the call are still applied."""
        permit.grant("not.declared", "users.manage.view")
        assert permit.check("users.manage.view") is True

    def test_grant_all(self, permit: Permit) -> None:
        """Granting every scope makes the root all() True."""
        permit.grant(*(node.scope for node in permit.scopes))
        assert permit.is_.all is True
        assert permit.is_.none is False
        assert permit.denied == []


class TestSnapshots:
    """Tests for snapshot regeneration."""

    def test_mutation_returns_new_snapshot(self, permit: Permit) -> None:
        """Every mutation replaces the snapshot."""
        first = permit.is_
        permit.grant("users.profile.view")
        second = permit.is_
        permit.deny("users.profile.view")
        third = permit.is_
        permit.reset()
        assert len({id(first), id(second), id(third), id(permit.is_)}) == 4

    def test_old_snapshot_unchanged(self, permit: Permit) -> None:
        """Snapshots keep the values they were generated with."""
        before = permit.is_
        permit.grant("todo.action.update", "todo.action.delete")
        assert before.todo.action.all is False
        assert before.todo.action.update.ok is False
        assert permit.is_.todo.action.all is True

    def test_unknown_grant_still_regenerates(self, permit: Permit) -> None:
        """A call with only unknown scopes still produces a new snapshot."""
        before = permit.is_
        permit.grant("not.declared")
        assert permit.is_ is not before
        assert permit.is_.to_dict() == before.to_dict()

    def test_snapshot_is_isomorphic(self, permit: Permit) -> None:
        """Permit tree has the same keys as the access tree at every level."""
        access = compile_schema(SCHEMA)
        assert permit.is_.keys() == access.keys()
        assert permit.is_.users.manage.keys() == access.users.manage.keys()
        assert [n.scope for n in permit.is_.scopes] == [n.scope for n in access.scopes]

    def test_pass_through_carried_over(self) -> None:
        """Pass-through children keep their place in the permit tree."""
        permit = create_permit({"tags": ["a"], "view": "View"}, granted=["view"])
        assert permit.is_["tags"] == ["a"]
        assert permit.is_.all is True


class TestReset:
    """Tests for reset()."""

    def test_reset_restores_granted_list(self, permit: Permit) -> None:
        """reset() discards grant/deny changes."""
        permit.grant("users.profile.view")
        permit.deny("@view")
        permit.reset()
        assert permit.check("users.profile.view") is False
        assert permit.check("@view") is True

    def test_reset_idempotent(self, permit: Permit) -> None:
        """Resetting twice equals resetting once."""
        permit.reset()
        once = permit.is_.to_dict()
        granted_once = permit.granted
        permit.reset()
        assert permit.is_.to_dict() == once
        assert permit.granted == granted_once


class TestEmptyBranch:
    """Tests for branches without scopes."""

    def test_empty_branch_aggregates(self) -> None:
        """Empty branch: all is False, none is True, some is False."""
        permit = create_permit({"empty": {}, "view": "View"}, granted=["view"])
        assert permit.is_.empty.all is False
        assert permit.is_.empty.none is True
        assert permit.is_.empty.some is False

    def test_empty_schema(self) -> None:
        """Permit over an empty schema."""
        permit = create_permit({})
        assert permit.is_.all is False
        assert permit.is_.none is True
        assert permit.granted == []
        assert permit.denied == []


class TestStrictPermit:
    """Tests for strict mode."""

    def test_grant_unknown_raises(self) -> None:
        """grant() raises for undeclared scopes."""
        permit = create_permit(SCHEMA, granted=GRANTED, strict=True)
        with pytest.raises(UnknownScopeError) as exc_info:
            permit.grant("not.declared")
        assert exc_info.value.code == "UNKNOWN_SCOPE"
        assert exc_info.value.details["scopes"] == ["not.declared"]

    def test_failed_call_changes_nothing(self) -> None:
        """Known scopes in a rejected call are not applied."""
        permit = create_permit(SCHEMA, granted=GRANTED, strict=True)
        before = permit.is_
        with pytest.raises(UnknownScopeError):
            permit.grant("todo.action.update", "not.declared")
        assert permit.check("todo.action.update") is False
        assert permit.is_ is before

    def test_deny_unknown_raises(self) -> None:
        """deny() raises for undeclared scopes."""
        permit = compile_schema(SCHEMA).permit(GRANTED, strict=True)
        with pytest.raises(UnknownScopeError):
            permit.deny("not.declared")

    def test_check_unknown_raises(self) -> None:
        """check() raises for undeclared scopes."""
        permit = create_permit(SCHEMA, strict=True)
        with pytest.raises(UnknownScopeError, match="not.declared"):
            permit.check("not.declared")
        assert permit.check("@view") is False

    def test_default_not_strict(self) -> None:
        """Permits ignore undeclared scopes unless strict mode is asked for."""
        assert create_permit(SCHEMA).strict is False
        assert compile_schema(SCHEMA).permit().strict is False

    def test_strict_from_config(self) -> None:
        """strict_scopes on the config reaches the permit through permit_options()."""
        permit = create_permit(SCHEMA, ScopeTreeConfig(strict_scopes=True).permit_options(GRANTED))
        assert permit.strict is True
        assert permit.check("@view") is True
        with pytest.raises(UnknownScopeError):
            permit.grant("not.declared")

    def test_strict_from_mapping(self) -> None:
        """Mapping options may enable strict mode."""
        permit = create_permit(SCHEMA, {"granted": GRANTED, "strict": True})
        assert permit.strict is True

    def test_keyword_overrides_strict_option(self) -> None:
        """strict=False overrides strict options."""
        permit = create_permit(SCHEMA, PermitOptions(strict=True), strict=False)
        assert permit.strict is False
        permit.grant("not.declared")
        assert permit.check("not.declared") is False


class TestPermitToDict:
    """Tests for permit serialization."""

    def test_to_dict(self, permit: Permit) -> None:
        """to_dict() nests aggregates and leaf flags, without scopes lists."""
        data = permit.is_.to_dict()
        assert data["some"] is True
        assert data["all"] is False
        assert "scopes" not in data
        assert data["todo"]["view"] == {"scope": "@view", "description": "", "ok": True, "no": False}
        assert data["users"]["profile"] == {
            "some": False,
            "none": True,
            "all": False,
            "view": {
                "scope": "users.profile.view",
                "description": "Access user profile view page",
                "ok": False,
                "no": True,
            },
        }
