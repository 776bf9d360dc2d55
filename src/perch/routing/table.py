"""Per-router route table with trie-based prefix matching.

Each router name owns one ``RouteTable``. Unlike a flat URL router, a
route may match only a *prefix* of the path: the unconsumed remainder is
handed to the tables of the components the route places in its viewports.
Candidates are therefore produced lazily, most specific first, and the
registry keeps the first one whose children can consume the rest.
"""

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from perch.errors import ConfigurationError
from perch.routing.params import accepts, is_converter
from perch.routing.route import PathSegment, RouteDefinition, RouteMatch

_FLASK_STYLE = re.compile(r"^<[^>]*>$")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"             -> [PathSegment("users")]
        "/users/{id}"        -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/users/:id"         -> same as "/users/{id}"
        "/users/{id:int}"    -> [..., PathSegment("{id:int}", is_param=True, param_type="int")]
        "/files/{rest:path}" -> [..., PathSegment("{rest:path}", is_param=True, param_type="path")]
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if _FLASK_STYLE.match(part):
            msg = (
                f"Route path {path!r} uses <param> syntax. "
                f"Use {{param}} or :param instead."
            )
            raise ConfigurationError(msg)
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            if ":" in inner:
                param_name, param_type = inner.split(":", 1)
            else:
                param_name = inner
                param_type = "str"
        elif part.startswith(":") and len(part) > 1:
            param_name, param_type = part[1:], "str"
        else:
            segments.append(PathSegment(value=part))
            continue
        if not is_converter(param_type):
            msg = f"Unknown converter {param_type!r} in route path {path!r}"
            raise ConfigurationError(msg)
        segments.append(
            PathSegment(
                value=part,
                is_param=True,
                param_name=param_name,
                param_type=param_type,
            )
        )
    return segments


def split_url(url: str) -> tuple[str, ...]:
    """Split a URL into path parts, dropping query string and fragment."""
    path = url.split("#", 1)[0].split("?", 1)[0]
    return tuple(p for p in path.split("/") if p)


class _TrieNode:
    """A node in the route trie. Mutated only by ``RouteTable.add``."""

    __slots__ = ("catch_all", "children", "param_children", "param_names", "route")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Parameter children keyed by converter: "int" -> node
        self.param_children: dict[str, _TrieNode] = {}
        # Catch-all route (path converter)
        self.catch_all: _CatchAllEdge | None = None
        # Route terminating at this node, with its own param names in order
        self.route: RouteDefinition | None = None
        self.param_names: tuple[str, ...] = ()


@dataclass(slots=True)
class _CatchAllEdge:
    """A catch-all (path) edge, consuming the remaining path."""

    param_names: tuple[str, ...]
    route: RouteDefinition


class RouteTable:
    """Route trie for a single router name.

    Param edges are shared between routes with the same shape, so they
    capture values positionally; names come from the route that matched.

    Usage::

        table = RouteTable("/")
        table.add(RouteDefinition("/users/{id}", {"default": "user"}))
        match = next(table.match(("users", "42")))
    """

    __slots__ = ("_root", "name")

    def __init__(self, name: str) -> None:
        self.name = name
        self._root = _TrieNode()

    def add(self, route: RouteDefinition) -> None:
        """Add *route*, replacing any route with the same path shape."""
        node = self._root
        segments = parse_path(route.path)
        names = tuple(seg.param_name or "" for seg in segments if seg.is_param)

        for seg in segments:
            if seg.is_param and seg.param_type == "path":
                # Catch-all: consumes rest of path, must be last segment
                node.catch_all = _CatchAllEdge(param_names=names, route=route)
                return

            if seg.is_param:
                node = node.param_children.setdefault(seg.param_type, _TrieNode())
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        node.route = route
        node.param_names = names

    @property
    def routes(self) -> list[RouteDefinition]:
        """Return all registered routes, depth first."""
        result: list[RouteDefinition] = []
        self._collect_routes(self._root, result)
        return result

    def _collect_routes(self, node: _TrieNode, result: list[RouteDefinition]) -> None:
        if node.route is not None:
            result.append(node.route)
        for child in node.children.values():
            self._collect_routes(child, result)
        for child in node.param_children.values():
            self._collect_routes(child, result)
        if node.catch_all is not None:
            result.append(node.catch_all.route)

    def match(self, parts: Sequence[str]) -> Iterator[RouteMatch]:
        """Yield every route matching a prefix of *parts*, most specific first.

        Deeper matches come before shallower ones; at each depth static
        segments beat parameters, which beat catch-alls.
        """
        yield from self._match_node(self._root, parts, 0, ())

    def _match_node(
        self,
        node: _TrieNode,
        parts: Sequence[str],
        index: int,
        values: tuple[str, ...],
    ) -> Iterator[RouteMatch]:
        if index < len(parts):
            part = parts[index]

            # 1. Static child (exact match)
            if part in node.children:
                yield from self._match_node(node.children[part], parts, index + 1, values)

            # 2. Parameter children, in registration order
            for param_type, child in node.param_children.items():
                if accepts(param_type, part):
                    yield from self._match_node(child, parts, index + 1, (*values, part))

            # 3. Catch-all
            if node.catch_all is not None:
                captured = (*values, "/".join(parts[index:]))
                yield RouteMatch(
                    route=node.catch_all.route,
                    params=dict(zip(node.catch_all.param_names, captured, strict=True)),
                    consumed=len(parts),
                )

        # 4. This node's own route, as a prefix match
        if node.route is not None:
            yield RouteMatch(
                route=node.route,
                params=dict(zip(node.param_names, values, strict=True)),
                consumed=index,
            )
