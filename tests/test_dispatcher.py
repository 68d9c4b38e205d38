"""Tests for the access decision dispatcher."""

from __future__ import annotations

import pytest

from roleaccess import (
    AccessDispatcher,
    AccessDeniedError,
    DirectiveResolver,
    MappingMetadataSource,
    MissingActionError,
    Outcome,
    OutcomeKind,
    PrivateActionError,
    RedirectPolicy,
    RoleHierarchy,
    RoleNotFoundError,
)

CHAIN = {"editor": {"author": {"moderator": {"admin": None}}}}

ACTIONS = {
    "index": "@role.admin admin_index\n@role.author deny\n@role.editor allow\n",
    "admin_index": "",
    "edit": "@role.admin ghost_action\n",
    "view": "@role.editor.action editor_view\n@role.author deny\n",
    "editor_view": "",
    "role_secret": "@role.admin allow",
    "about": "",
}


def _dispatcher(**kwargs) -> AccessDispatcher:
    source = MappingMetadataSource(ACTIONS)
    strict = kwargs.pop("strict", False)
    resolver = DirectiveResolver(source, RoleHierarchy.from_nested(CHAIN, strict=strict))
    return AccessDispatcher(resolver, source, **kwargs)


class TestDispatch:
    """Tests for AccessDispatcher.dispatch outcomes."""

    def test_allowed(self) -> None:
        """'allow' maps to Allowed."""
        outcome = _dispatcher().dispatch("index", "editor")
        assert outcome == Outcome.allowed()
        assert outcome.is_allowed

    def test_denied(self) -> None:
        """'deny' maps to Denied, inherited values included."""
        outcome = _dispatcher().dispatch("index", "moderator")
        assert outcome.kind == OutcomeKind.DENIED
        assert outcome.is_denied

    def test_substitute_existing_action(self) -> None:
        """A value naming an existing action substitutes it."""
        outcome = _dispatcher().dispatch("index", "admin")
        assert outcome == Outcome.substitute("admin_index")
        assert outcome.is_substitute
        assert outcome.action == "admin_index"

    def test_missing_action(self) -> None:
        """A value naming an unknown action is a configuration error."""
        with pytest.raises(MissingActionError) as exc_info:
            _dispatcher().dispatch("edit", "admin")
        assert exc_info.value.code == "MISSING_ACTION"
        assert exc_info.value.details["target"] == "ghost_action"

    def test_no_directive(self) -> None:
        """Nothing resolved maps to NoDirective."""
        assert _dispatcher().dispatch("about", "admin") == Outcome.no_directive()
        assert _dispatcher().dispatch("index", "public").kind == OutcomeKind.NO_DIRECTIVE

    def test_keywords_are_case_sensitive(self) -> None:
        """'Allow' is not a keyword and is treated as an action name."""
        source = MappingMetadataSource({"index": "@role.admin Allow"})
        dispatcher = AccessDispatcher(DirectiveResolver(source, RoleHierarchy()), source)
        with pytest.raises(MissingActionError):
            dispatcher.dispatch("index", "admin")

    def test_override_roundtrip(self) -> None:
        """Overrides drive the outcome regardless of metadata."""
        dispatcher = _dispatcher()
        dispatcher.resolver.overrides.set_access("index", "admin", "deny")
        assert dispatcher.dispatch("index", "admin").is_denied

    def test_strict_unknown_role(self) -> None:
        """RoleNotFoundError surfaces from strict hierarchies."""
        with pytest.raises(RoleNotFoundError):
            _dispatcher(strict=True).dispatch("index", "intern")


class TestPrivateActions:
    """Tests for the redirect-only action guard."""

    def test_private_action_rejected(self) -> None:
        """Prefixed actions cannot be dispatched directly."""
        with pytest.raises(PrivateActionError) as exc_info:
            _dispatcher().dispatch("role_secret", "admin")
        assert isinstance(exc_info.value, AccessDeniedError)
        assert exc_info.value.code == "PRIVATE_ACTION"

    def test_guard_runs_before_resolution(self) -> None:
        """The guard fires even for roles that would raise on resolution."""
        with pytest.raises(PrivateActionError):
            _dispatcher(strict=True).dispatch("role_secret", "intern")

    def test_custom_prefix(self) -> None:
        """The prefix is configurable."""
        dispatcher = _dispatcher(action_prefix="admin_")
        assert dispatcher.is_private("admin_index")
        assert not dispatcher.is_private("role_secret")
        with pytest.raises(PrivateActionError):
            dispatcher.dispatch("admin_index", "admin")

    def test_private_action_as_redirect_target(self) -> None:
        """Redirect-only actions are valid substitution targets."""
        source = MappingMetadataSource({"index": "@role.admin role_admin_index", "role_admin_index": ""})
        dispatcher = AccessDispatcher(DirectiveResolver(source, RoleHierarchy()), source)
        assert dispatcher.dispatch("index", "admin") == Outcome.substitute("role_admin_index")


class TestRedirectPolicy:
    """Tests for enforcement of the 'action' parameter."""

    def test_access_only_ignores_action(self) -> None:
        """By default 'action' is auxiliary and not enforced."""
        assert _dispatcher().dispatch("view", "editor") == Outcome.no_directive()

    def test_action_when_permitted_redirects(self) -> None:
        """With ACTION_WHEN_PERMITTED a resolved 'action' redirects."""
        dispatcher = _dispatcher(redirect_policy=RedirectPolicy.ACTION_WHEN_PERMITTED)
        assert dispatcher.dispatch("view", "editor") == Outcome.substitute("editor_view")

    def test_deny_beats_action(self) -> None:
        """'deny' wins over an inherited redirect."""
        dispatcher = _dispatcher(redirect_policy=RedirectPolicy.ACTION_WHEN_PERMITTED)
        assert dispatcher.dispatch("view", "author").is_denied

    def test_allow_with_action_redirects(self) -> None:
        """A role both allowed and redirected is redirected."""
        source = MappingMetadataSource(
            {"index": "@role.admin allow\n@role.admin.action admin_index", "admin_index": ""}
        )
        dispatcher = AccessDispatcher(
            DirectiveResolver(source, RoleHierarchy()),
            source,
            redirect_policy=RedirectPolicy.ACTION_WHEN_PERMITTED,
        )
        assert dispatcher.dispatch("index", "admin") == Outcome.substitute("admin_index")

    def test_missing_action_target(self) -> None:
        """An 'action' naming an unknown handler fails too."""
        source = MappingMetadataSource({"index": "@role.admin.action nowhere"})
        dispatcher = AccessDispatcher(
            DirectiveResolver(source, RoleHierarchy()),
            source,
            redirect_policy="action_when_permitted",
        )
        with pytest.raises(MissingActionError):
            dispatcher.dispatch("index", "admin")
