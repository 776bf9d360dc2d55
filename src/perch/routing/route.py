"""RouteDefinition and RouteMatch frozen dataclasses."""

from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/users``    (is_param=False)
    Param:   ``/{id}``     (is_param=True, param_name="id")
    Colon:   ``/:id``      (same as ``/{id}``)
    Typed:   ``/{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class RouteDefinition:
    """A frozen route table entry.

    ``components`` maps viewport names to the component that fills each
    one when the route matches. A route with ``redirect_to`` set has no
    components; recognition restarts at the redirect target.
    """

    path: str
    components: Mapping[str, str] = field(default_factory=dict)
    name: str | None = None
    redirect_to: str | None = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of matching a path prefix against one route table."""

    route: RouteDefinition
    params: dict[str, str]
    consumed: int  # Number of path parts this route consumed
