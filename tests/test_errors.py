"""Tests for perch.errors — exception hierarchy and error messages."""

import pytest

from perch.errors import (
    ActivationDenied,
    AlreadyNavigating,
    CollaboratorFailure,
    ConfigurationError,
    DeactivationDenied,
    NavigationError,
    NavigationErrorKind,
    NoMatch,
    PerchError,
)


class TestHierarchy:
    def test_navigation_error_is_perch_error(self) -> None:
        assert issubclass(NavigationError, PerchError)

    def test_configuration_error_is_perch_error(self) -> None:
        assert issubclass(ConfigurationError, PerchError)

    @pytest.mark.parametrize(
        ("cls", "kind"),
        [
            (NoMatch, NavigationErrorKind.NO_MATCH),
            (DeactivationDenied, NavigationErrorKind.DEACTIVATION_DENIED),
            (ActivationDenied, NavigationErrorKind.ACTIVATION_DENIED),
            (AlreadyNavigating, NavigationErrorKind.ALREADY_NAVIGATING),
            (CollaboratorFailure, NavigationErrorKind.COLLABORATOR_FAILURE),
        ],
    )
    def test_each_failure_has_a_kind(self, cls: type[NavigationError], kind: NavigationErrorKind) -> None:
        assert issubclass(cls, NavigationError)
        assert cls("/x").kind is kind


class TestMessages:
    def test_no_match_default_detail(self) -> None:
        err = NoMatch("/nope")
        assert err.url == "/nope"
        assert str(err) == "no-match: No route matches '/nope'"

    def test_custom_detail(self) -> None:
        err = NoMatch("/nope", "gone")
        assert str(err) == "no-match: gone"

    def test_deactivation_denied_names_viewport(self) -> None:
        err = DeactivationDenied("/", router_name="Shell", viewport_name="detail")
        assert err.router_name == "Shell"
        assert err.viewport_name == "detail"
        assert "'detail'" in str(err)
        assert "'Shell'" in str(err)

    def test_activation_denied_names_component(self) -> None:
        err = ActivationDenied("/", component="UserDetail")
        assert err.component == "UserDetail"
        assert "UserDetail" in str(err)

    def test_kind_only_when_no_detail(self) -> None:
        assert str(CollaboratorFailure("/")) == "collaborator-failure"


class TestRetry:
    def test_only_already_navigating_is_retryable(self) -> None:
        assert AlreadyNavigating("/").retryable is True
        assert NoMatch("/").retryable is False
        assert DeactivationDenied("/").retryable is False

    def test_notes_can_be_attached(self) -> None:
        err = ActivationDenied("/", component="X")
        err.add_note("while navigating")
        assert err.__notes__ == ["while navigating"]
