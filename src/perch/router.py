"""Router nodes — persistent coordination state for nested viewports.

One ``Router`` exists per (parent, name) pair. The root router is created
once per session; child routers are created lazily the first time their
slot is addressed and live as long as their parent. Routers hold no view
state of their own: they own viewport bindings (``ports``), child router
slots (``children``) and the per-node ``navigating`` guard.

Usage::

    router = create_router(registry, loader)
    await router.config([{"path": "/", "component": "home"}])
    await router.register_viewport(main_viewport)
    url = await router.navigate("/")
"""

import logging
import weakref
from collections.abc import Mapping
from typing import Any

from perch._internal.invoke import invoke
from perch.config import RouterConfig
from perch.errors import (
    AlreadyNavigating,
    CollaboratorFailure,
    ConfigurationError,
    NavigationError,
    NoMatch,
)
from perch.instruction import Instruction
from perch.navigation import run_pipeline
from perch.protocols import ComponentLoader, RouteRegistry, Viewport

logger = logging.getLogger("perch.router")


class Router:
    """A node in the router tree.

    The root and child routers are the same type; the root is simply the
    router without a parent. Children share the root's registry, loader
    and settings.

    Concurrency:
        Everything runs on one event loop. ``navigating`` is the only
        exclusion mechanism: while a navigation started at this router is
        in flight, further ``navigate()`` calls on it are rejected with
        ``AlreadyNavigating``. Sibling subtrees navigated directly do not
        block each other.
    """

    __slots__ = (
        "__weakref__",
        "_parent",
        "children",
        "last_navigation_attempt",
        "loader",
        "name",
        "navigating",
        "ports",
        "previous_url",
        "registry",
        "settings",
    )

    def __init__(
        self,
        registry: RouteRegistry,
        loader: ComponentLoader,
        *,
        settings: RouterConfig | None = None,
        parent: "Router | None" = None,
        name: str | None = None,
    ) -> None:
        self.settings: RouterConfig = settings or RouterConfig()
        self.registry = registry
        self.loader = loader
        self.name: str = name if name is not None else self.settings.root_name
        self._parent: weakref.ref[Router] | None = (
            weakref.ref(parent) if parent is not None else None
        )
        self.ports: dict[str, Any] = {}
        self.children: dict[str, Router] = {}
        self.navigating: bool = False
        self.last_navigation_attempt: str | None = None
        self.previous_url: str | None = None

    # -- Tree --

    @property
    def parent(self) -> "Router | None":
        """The owning router, or ``None`` for the root."""
        if self._parent is None:
            return None
        return self._parent()

    @property
    def is_root(self) -> bool:
        return self._parent is None

    @property
    def root(self) -> "Router":
        node = self
        while (parent := node.parent) is not None:
            node = parent
        return node

    @property
    def path(self) -> tuple[str, ...]:
        """Router names from the root down to this node."""
        names: list[str] = []
        node: Router | None = self
        while node is not None:
            names.append(node.name)
            node = node.parent
        return tuple(reversed(names))

    def child_router(self, name: str | None = None) -> "Router":
        """Return the child router for *name*, creating it on first use."""
        name = name or self.settings.default_viewport
        child = self.children.get(name)
        if child is None:
            child = Router(
                self.registry,
                self.loader,
                settings=self.settings,
                parent=self,
                name=name,
            )
            self.children[name] = child
            logger.debug("Created child router %r under %r", name, self.name)
        return child

    # -- Bindings and configuration --

    async def register_viewport(self, viewport: Viewport, name: str | None = None) -> str | None:
        """Bind *viewport* to the named slot, then renavigate.

        Registering an occupied name replaces the previous binding (unless
        ``RouterConfig.replace_viewports`` is off, in which case
        ``ConfigurationError`` is raised). Returns the renavigation result,
        or ``None`` when there is nothing to replay.
        """
        name = name or self.settings.default_viewport
        current = self.ports.get(name)
        if current is not None and current is not viewport:
            if not self.settings.replace_viewports:
                msg = f"Viewport {name!r} is already registered on router {self.name!r}"
                raise ConfigurationError(msg)
            logger.debug("Replacing viewport %r on router %r", name, self.name)
        self.ports[name] = viewport
        if not self.settings.renavigate_on_register:
            return None
        return await self.renavigate()

    async def config(self, mapping: Any) -> str | None:
        """Forward a route table update for this router, then renavigate."""
        self.registry.config(self.name, mapping)
        if not self.settings.renavigate_on_config:
            return None
        return await self.renavigate()

    # -- Navigation --

    async def navigate(self, url: str) -> str:
        """Navigate this router's subtree to *url*.

        Returns the canonical URL on success. Raises a ``NavigationError``
        subclass on failure, in which case no viewport was activated and
        ``previous_url`` is unchanged.

        ``last_navigation_attempt`` holds *url* while it is pending and is
        kept after a failure, so ``renavigate()`` can retry it once the
        route table or bindings change. A commit settles it back to ``None``.
        """
        if self.navigating:
            logger.debug("Rejected navigation to %s: router %r is busy", url, self.name)
            raise AlreadyNavigating(url)

        self.navigating = True
        self.last_navigation_attempt = url
        try:
            instruction = await self._recognize(url)
            instruction.fill("router", self)
            await run_pipeline(self, instruction, url)
        except NavigationError as exc:
            logger.info("Navigation to %s failed: %s", url, exc)
            raise
        finally:
            self.navigating = False

        self.previous_url = instruction.canonical_url
        self.last_navigation_attempt = None
        logger.info("Navigated %s to %s", self.name, instruction.canonical_url)
        return instruction.canonical_url

    async def renavigate(self) -> str | None:
        """Replay the last committed (or attempted) URL if idle."""
        destination = self.previous_url or self.last_navigation_attempt
        if self.navigating or not destination:
            return None
        logger.debug("Renavigating %s to %s", self.name, destination)
        return await self.navigate(destination)

    def recognize(self, url: str) -> Instruction | None:
        """Resolve *url* against this router's route table."""
        if self.is_root:
            return self.registry.recognize(url)
        return self.registry.recognize(url, router_name=self.name)

    def generate(self, name: str, params: Mapping[str, Any] | None = None) -> str:
        """Build a URL for the named route. No side effects."""
        return self.registry.generate(name, params)

    async def _recognize(self, url: str) -> Instruction:
        try:
            instruction = await invoke(self.recognize, url)
        except NavigationError:
            raise
        except Exception as exc:
            raise CollaboratorFailure(url, f"recognize failed: {exc}") from exc
        if instruction is None or not instruction.viewports:
            raise NoMatch(url)
        return instruction

    def __repr__(self) -> str:
        return f"<Router {self.path!r} ports={sorted(self.ports)}>"


def create_router(
    registry: RouteRegistry,
    loader: ComponentLoader,
    settings: RouterConfig | None = None,
) -> Router:
    """Create the root router of a new tree."""
    return Router(registry, loader, settings=settings)
