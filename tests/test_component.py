"""Tests for the RoleAccess component and handler reflection."""

from __future__ import annotations

import pytest

from roleaccess import (
    ConfigurationError,
    DirectiveTable,
    HandlerActions,
    MappingMetadataSource,
    MissingActionError,
    Outcome,
    PrivateActionError,
    RoleAccess,
    RoleAccessConfig,
    RoleHierarchy,
    StaticRoleSupplier,
)
from roleaccess.sources import ActionChecker, MetadataSource, RoleSupplier

ROLES = {
    "user": [
        "subscriber",
        {"editor": {"author": {"moderator": {"admin": "superadmin"}}}},
    ],
}


class ArticleController:
    """Sample handler with role directives in docstrings."""

    def index(self):
        """List articles.

        @role.public allow
        @role.admin admin_index Admins get the management view
        """

    def admin_index(self):
        """Management view."""

    def edit(self):
        """Edit an article.

        @role.author deny
        @role.admin allow
        """

    def publish(self):
        """@role.admin missing_handler"""

    def role_purge(self):
        """Redirect-only.

        @role.superadmin allow
        """

    def plain(self):
        pass

    def _helper(self):
        """@role.admin allow"""


def _access(role: str | None = None, **config) -> RoleAccess:
    return RoleAccess(
        RoleAccessConfig(hierarchy=ROLES, **config),
        handler=ArticleController(),
        role_supplier=StaticRoleSupplier(role),
    )


class TestHandlerActions:
    """Tests for reflection over handler objects."""

    def test_metadata_from_docstring(self) -> None:
        """Docstrings are returned dedented."""
        actions = HandlerActions(ArticleController())
        doc = actions.get_metadata("edit")
        assert doc is not None
        assert "@role.author deny" in doc.splitlines()

    def test_has_action(self) -> None:
        """Public callables are actions, private and missing names are not."""
        actions = HandlerActions(ArticleController())
        assert actions.has_action("admin_index")
        assert not actions.has_action("missing_handler")
        assert not actions.has_action("_helper")
        assert not actions.has_action("")

    def test_no_docstring(self) -> None:
        """Methods without docs have no metadata."""
        actions = HandlerActions(ArticleController())
        assert actions.get_metadata("plain") is None
        assert actions.get_metadata("missing") is None

    def test_protocols(self) -> None:
        """Adapters satisfy the collaborator protocols."""
        actions = HandlerActions(ArticleController())
        assert isinstance(actions, MetadataSource)
        assert isinstance(actions, ActionChecker)
        assert isinstance(MappingMetadataSource(), MetadataSource)
        assert isinstance(StaticRoleSupplier("admin"), RoleSupplier)


class TestRoleNames:
    """Tests for caller role lookup."""

    def test_unauthenticated_is_public(self) -> None:
        """No role from the supplier means 'public'."""
        assert _access().get_role_name() == "public"

    def test_supplier_role(self) -> None:
        assert _access("editor").get_role_name() == "editor"

    def test_no_supplier(self) -> None:
        """Without a supplier every caller is public."""
        access = RoleAccess(handler=ArticleController())
        assert access.get_role_name() == "public"

    def test_get_role_path(self) -> None:
        """get_role returns the caller's ancestor path."""
        assert _access("moderator").get_role() == ("moderator", "author", "editor", "user")
        assert _access().get_role() == ("public",)
        assert _access().get_role("subscriber") == ("subscriber", "user")


class TestRoleAccess:
    """End-to-end tests through RoleAccess."""

    def test_inherited_deny(self) -> None:
        """moderator inherits author's deny on edit."""
        assert _access("moderator").resolve("edit") == "deny"
        assert _access("moderator").dispatch("edit").is_denied

    def test_direct_allow(self) -> None:
        assert _access("admin").dispatch("edit") == Outcome.allowed()

    def test_alias_inherits_from_key(self) -> None:
        """superadmin inherits admin's allow."""
        assert _access("superadmin").dispatch("edit").is_allowed

    def test_substitute(self) -> None:
        """admin is redirected to admin_index on index."""
        assert _access("admin").dispatch("index") == Outcome.substitute("admin_index")

    def test_public_allowed(self) -> None:
        assert _access().dispatch("index").is_allowed

    def test_missing_action(self) -> None:
        with pytest.raises(MissingActionError):
            _access("admin").dispatch("publish")

    def test_private_action(self) -> None:
        with pytest.raises(PrivateActionError):
            _access("superadmin").dispatch("role_purge")

    def test_no_directive(self) -> None:
        assert _access("subscriber").dispatch("edit") == Outcome.no_directive()

    def test_explicit_role_argument(self) -> None:
        """A role passed explicitly replaces the caller's role."""
        assert _access("editor").dispatch("edit", role="admin").is_allowed

    def test_set_access(self) -> None:
        """Runtime access overrides win over docstrings."""
        access = _access("admin")
        access.set_access("edit", "admin", "deny")
        assert access.dispatch("edit").is_denied

    def test_set_action(self) -> None:
        """set_action is visible through get_params."""
        access = _access()
        access.set_action("edit", "editor", "admin_index")
        assert access.get_params("edit", "editor") == {"action": "admin_index"}

    def test_set_action_enforced_when_configured(self) -> None:
        """Redirect policy decides whether 'action' is applied."""
        access = _access("editor", redirect_policy="action_when_permitted")
        access.set_action("edit", "editor", "admin_index")
        assert access.dispatch("edit") == Outcome.substitute("admin_index")

    def test_get_params_whole_table(self) -> None:
        """Without a role get_params returns every role's directives."""
        params = _access().get_params("index")
        assert isinstance(params, DirectiveTable)
        assert params.to_dict() == {
            "public": {"access": "allow"},
            "admin": {"access": "admin_index"},
        }

    def test_strict_roles(self) -> None:
        """Strict config rejects roles outside the hierarchy."""
        from roleaccess import RoleNotFoundError

        with pytest.raises(RoleNotFoundError):
            _access("intern", strict_roles=True).dispatch("edit")
        assert _access(strict_roles=True).dispatch("index").is_allowed

    def test_explicit_collaborators(self) -> None:
        """A metadata source and checker can replace the handler."""
        source = MappingMetadataSource({"home": "@role.admin dashboard", "dashboard": ""})
        access = RoleAccess(
            metadata_source=source,
            action_checker=source,
            role_supplier=lambda: "admin",
            hierarchy=RoleHierarchy(),
        )
        assert access.dispatch("home") == Outcome.substitute("dashboard")

    def test_missing_collaborators(self) -> None:
        """A handler or both collaborators are required."""
        with pytest.raises(ConfigurationError):
            RoleAccess(metadata_source=MappingMetadataSource())

    def test_separate_instances_do_not_share_overrides(self) -> None:
        """Overrides belong to one RoleAccess instance."""
        first = _access("admin")
        second = _access("admin")
        first.set_access("edit", "admin", "deny")
        assert second.dispatch("edit").is_allowed
