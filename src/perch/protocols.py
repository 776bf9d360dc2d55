"""Collaborator protocols consumed by the navigation engine.

No base classes required. The engine checks the shape, not the lineage,
and every hook may be a plain ``def`` or an ``async def``::

    class PanelViewport:
        def can_deactivate(self, instruction):
            return not self.form.dirty

        async def activate(self, instruction):
            await self.swap(instruction.template if instruction else None)

Optional hooks (``Viewport.can_deactivate``, ``Controller.can_activate``)
are looked up with ``getattr``; a missing hook means "always permit".
"""

from collections.abc import Awaitable, Mapping
from typing import Any, Protocol, runtime_checkable

from perch.instruction import Instruction

type MaybeAwaitable[T] = T | Awaitable[T]


@runtime_checkable
class RouteRegistry(Protocol):
    """Resolves URLs into instruction trees and generates URLs back.

    Must be deterministic for a given route table and URL.
    """

    def recognize(self, url: str, router_name: str | None = None) -> Instruction | None: ...

    def generate(self, name: str, params: Mapping[str, Any] | None = None) -> str: ...

    def config(self, router_name: str, mapping: Any) -> None: ...


@runtime_checkable
class ComponentLoader(Protocol):
    """Produces controllers and rendering artifacts for instructions."""

    def init(self, instruction: Instruction) -> MaybeAwaitable[Any]: ...

    def load(self, instruction: Instruction) -> MaybeAwaitable[Any]: ...


@runtime_checkable
class Viewport(Protocol):
    """A consumer-supplied slot that renders or clears a component.

    ``activate(None)`` means "clear this slot".
    """

    def activate(self, instruction: Instruction | None) -> MaybeAwaitable[None]: ...
