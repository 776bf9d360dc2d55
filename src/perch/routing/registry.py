"""Reference route registry — URL to instruction tree and back.

Route tables are keyed by router name. The root router's table lives
under ``RouterConfig.root_name``; every other table is named after the
component whose child routes it holds, matching the way ``Router``
names its children after the components placed in its slots::

    registry = Registry()
    registry.config("/", [
        {"path": "/", "component": "home"},
        {"path": "/users/:id", "component": "user_shell", "name": "user"},
    ])
    registry.config("user_shell", {"path": "/", "components": {"detail": "user_detail"}})

    instruction = registry.recognize("/users/42")
    # Instruction(None, viewports={"default": Instruction("user_shell",
    #     params={"id": "42"}, viewports={"detail": Instruction("user_detail")})})
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from perch._internal.types import RouteEntry
from perch.config import RouterConfig
from perch.errors import ConfigurationError
from perch.instruction import Instruction
from perch.routing.params import accepts
from perch.routing.route import RouteDefinition
from perch.routing.table import RouteTable, parse_path, split_url

logger = logging.getLogger("perch.routing")

_ENTRY_KEYS = frozenset({"path", "component", "components", "name", "redirect_to"})


class _Redirect(Exception):  # noqa: N818
    def __init__(self, target: str) -> None:
        super().__init__(target)
        self.target = target


class Registry:
    """Trie-backed route registry implementing the ``RouteRegistry`` protocol.

    Deterministic: the same route tables and URL always produce an
    equivalent instruction tree.
    """

    __slots__ = ("_named", "_tables", "settings")

    def __init__(self, settings: RouterConfig | None = None) -> None:
        self.settings: RouterConfig = settings or RouterConfig()
        self._tables: dict[str, RouteTable] = {}
        # route name -> (table name, definition)
        self._named: dict[str, tuple[str, RouteDefinition]] = {}

    # -- Configuration --

    def config(self, router_name: str, mapping: Any) -> None:
        """Add routes to the table for *router_name*.

        *mapping* may be a single route entry (a dict or
        ``RouteDefinition``) or an iterable of them. Entries use the keys
        ``path``, ``component`` or ``components``, ``name`` and
        ``redirect_to``.
        """
        routes = self._normalize(mapping)
        table = self._tables.get(router_name)
        if table is None:
            table = RouteTable(router_name)
            self._tables[router_name] = table

        for route in routes:
            table.add(route)
            if route.name is not None:
                self._named[route.name] = (router_name, route)
            logger.debug("Configured route %s on %r", route.path, router_name)

    def table(self, router_name: str) -> RouteTable | None:
        return self._tables.get(router_name)

    def _normalize(self, mapping: Any) -> list[RouteDefinition]:
        if isinstance(mapping, (RouteDefinition, Mapping)):
            entries: Iterable[Any] = [mapping]
        elif isinstance(mapping, Iterable) and not isinstance(mapping, (str, bytes)):
            entries = mapping
        else:
            msg = f"Route config must be a mapping or an iterable of mappings, got {mapping!r}"
            raise ConfigurationError(msg)
        return [self._to_definition(entry) for entry in entries]

    def _to_definition(self, entry: RouteDefinition | RouteEntry) -> RouteDefinition:
        if isinstance(entry, RouteDefinition):
            route = entry
        elif isinstance(entry, Mapping):
            unknown = set(entry) - _ENTRY_KEYS
            if unknown:
                msg = f"Unknown route config keys: {sorted(unknown)}"
                raise ConfigurationError(msg)
            if "path" not in entry:
                msg = f"Route config {dict(entry)!r} has no 'path'"
                raise ConfigurationError(msg)
            if "component" in entry and "components" in entry:
                msg = f"Route {entry['path']!r} sets both 'component' and 'components'"
                raise ConfigurationError(msg)
            components = dict(entry.get("components") or {})
            if "component" in entry:
                components = {self.settings.default_viewport: entry["component"]}
            route = RouteDefinition(
                path=entry["path"],
                components=components,
                name=entry.get("name"),
                redirect_to=entry.get("redirect_to"),
            )
        else:
            msg = f"Invalid route config entry: {entry!r}"
            raise ConfigurationError(msg)

        if not route.components and route.redirect_to is None:
            msg = f"Route {route.path!r} needs a component, components, or redirect_to"
            raise ConfigurationError(msg)
        if route.components and route.redirect_to is not None:
            msg = f"Route {route.path!r} cannot both redirect and place components"
            raise ConfigurationError(msg)
        # Validate path syntax eagerly
        parse_path(route.path)
        return route

    # -- Recognition --

    def recognize(self, url: str, router_name: str | None = None) -> Instruction | None:
        """Resolve *url* into an instruction tree, or ``None`` if nothing matches.

        Recognition starts at *router_name*'s table (the root table by
        default). Redirects restart recognition from the root table.
        """
        start = router_name or self.settings.root_name
        target = url
        for _ in range(self.settings.max_redirects + 1):
            parts = split_url(target)
            try:
                viewports = self._resolve(start, parts, {})
            except _Redirect as redirect:
                logger.debug("Redirect %s -> %s", target, redirect.target)
                target = redirect.target
                start = self.settings.root_name
                continue
            if not viewports:
                return None
            return Instruction(None, viewports=viewports, canonical_url=_join(parts))

        msg = f"Too many redirects while recognizing {url!r}"
        raise ConfigurationError(msg)

    def _resolve(
        self,
        router_name: str,
        parts: Sequence[str],
        inherited: Mapping[str, str],
    ) -> dict[str, Instruction] | None:
        """Return the viewport instructions for *parts* under *router_name*.

        Every matched component must consume the whole of *parts*. An
        empty path always resolves (to no viewports) when nothing matches.
        Params captured by ancestors are visible to descendants.
        """
        table = self._tables.get(router_name)
        if table is not None:
            for match in table.match(parts):
                route = match.route
                if route.redirect_to is not None:
                    # Redirects only fire on a full match
                    if match.consumed == len(parts):
                        raise _Redirect(route.redirect_to)
                    continue

                remaining = parts[match.consumed:]
                params = {**inherited, **match.params}
                viewports: dict[str, Instruction] = {}
                for viewport_name, component in route.components.items():
                    child = self._resolve(component, remaining, params)
                    if child is None or (not child and remaining):
                        break
                    viewports[viewport_name] = Instruction(
                        component,
                        params=params,
                        viewports=child,
                        canonical_url=_join(parts),
                    )
                else:
                    return viewports

        return {} if not parts else None

    # -- Generation --

    def generate(self, name: str, params: Mapping[str, Any] | None = None) -> str:
        """Build the URL for the named route.

        Routes registered on a component's table are prefixed with the
        path of the route that places that component.

        Raises ``ConfigurationError`` for unknown names, missing params, or
        params that do not fit the segment's converter.
        """
        params = params or {}
        entry = self._named.get(name)
        if entry is None:
            msg = f"No route named {name!r}"
            raise ConfigurationError(msg)

        table_name, route = entry
        pieces = [self._fill(route.path, params)]
        seen = {table_name}
        while table_name != self.settings.root_name:
            parent = self._placing_route(table_name)
            if parent is None:
                break
            table_name, parent_route = parent
            if table_name in seen:
                msg = f"Cyclic component nesting while generating {name!r}"
                raise ConfigurationError(msg)
            seen.add(table_name)
            pieces.append(self._fill(parent_route.path, params))

        parts = [p for piece in reversed(pieces) for p in piece.strip("/").split("/") if p]
        return _join(parts)

    def _placing_route(self, component: str) -> tuple[str, RouteDefinition] | None:
        """Find the first route, in any table, that places *component*."""
        for table_name, table in self._tables.items():
            for route in table.routes:
                if component in route.components.values():
                    return table_name, route
        return None

    def _fill(self, path: str, params: Mapping[str, Any]) -> str:
        parts: list[str] = []
        for seg in parse_path(path):
            if not seg.is_param:
                parts.append(seg.value)
                continue
            key = seg.param_name or ""
            if key not in params:
                msg = f"Missing parameter {key!r} for route path {path!r}"
                raise ConfigurationError(msg)
            value = str(params[key])
            if not accepts(seg.param_type, value):
                msg = f"Parameter {key!r}={value!r} is not a valid {seg.param_type}"
                raise ConfigurationError(msg)
            parts.append(value)
        return _join(parts)


def _join(parts: Sequence[str]) -> str:
    return "/" + "/".join(parts)
