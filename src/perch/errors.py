"""Perch exception hierarchy.

Shared across Router, the navigation phases, the route registry and the
component loader so every module raises and catches the same types.

Navigation failures carry an explicit ``NavigationErrorKind`` so callers
can tell a missing route from a refused gate without parsing messages.
"""

from enum import Enum


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when a route table, binding, or policy is invalid.

    Typically raised while configuring routes, before any navigation runs.
    """


class NavigationErrorKind(Enum):
    """Why a navigation attempt was rejected."""

    NO_MATCH = "no-match"
    DEACTIVATION_DENIED = "deactivation-denied"
    ACTIVATION_DENIED = "activation-denied"
    ALREADY_NAVIGATING = "already-navigating"
    COLLABORATOR_FAILURE = "collaborator-failure"


class NavigationError(PerchError):
    """A navigation attempt failed. Nothing was committed.

    Raised out of ``Router.navigate()``. The live router tree and every
    bound viewport are left exactly as they were before the attempt.
    """

    # Not a frozen dataclass: task groups and pytest attach notes and
    # tracebacks to exceptions after they are raised.
    kind: NavigationErrorKind = NavigationErrorKind.COLLABORATOR_FAILURE
    retryable: bool = False

    def __init__(self, url: str | None = None, detail: str = "") -> None:
        self.url = url
        self.detail = detail
        super().__init__(url, detail)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.kind.value}: {self.detail}"
        return self.kind.value


class NoMatch(NavigationError):  # noqa: N818
    """The route registry could not resolve the URL."""

    kind = NavigationErrorKind.NO_MATCH

    def __init__(self, url: str | None = None, detail: str = "") -> None:
        super().__init__(url, detail or f"No route matches {url!r}")


class DeactivationDenied(NavigationError):  # noqa: N818
    """A currently bound viewport refused to yield its slot."""

    kind = NavigationErrorKind.DEACTIVATION_DENIED

    def __init__(
        self,
        url: str | None = None,
        detail: str = "",
        *,
        router_name: str | None = None,
        viewport_name: str | None = None,
    ) -> None:
        self.router_name = router_name
        self.viewport_name = viewport_name
        default_detail = (
            f"Viewport {viewport_name!r} of router {router_name!r} refused deactivation"
        )
        super().__init__(url, detail or default_detail)


class ActivationDenied(NavigationError):  # noqa: N818
    """A freshly initialized controller refused activation."""

    kind = NavigationErrorKind.ACTIVATION_DENIED

    def __init__(
        self,
        url: str | None = None,
        detail: str = "",
        *,
        component: str | None = None,
    ) -> None:
        self.component = component
        super().__init__(url, detail or f"Component {component!r} refused activation")


class AlreadyNavigating(NavigationError):  # noqa: N818
    """A navigation from the same router is still in flight.

    Not fatal: the caller may retry once the current attempt settles.
    """

    kind = NavigationErrorKind.ALREADY_NAVIGATING
    retryable = True

    def __init__(self, url: str | None = None, detail: str = "") -> None:
        super().__init__(url, detail or f"Navigation in progress; rejected {url!r}")


class CollaboratorFailure(NavigationError):
    """The component loader or a viewport raised.

    The original exception is chained as ``__cause__``.
    """

    kind = NavigationErrorKind.COLLABORATOR_FAILURE
