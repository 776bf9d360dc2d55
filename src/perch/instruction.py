"""Instruction tree — which component occupies which viewport.

An ``Instruction`` is produced fresh for every navigation attempt by the
route registry. Its shape (``component``, ``params``, ``viewports``) is
fixed at creation; the lifecycle phases only fill in ``router``,
``controller`` and ``template``, each exactly once.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from perch.router import Router


@dataclass(slots=True, eq=False)
class Instruction:
    """A resolved slot in the instruction tree.

    Attributes:
        component: Component identifier for this slot. ``None`` for the
            top-level instruction, which stands for the navigating router.
        params: Route parameters captured for this slot.
        viewports: Child instructions keyed by viewport name. Read-only.
        canonical_url: Normalized URL this instruction (and its subtree)
            resolves to.
    """

    component: str | None
    params: Mapping[str, str] = field(default_factory=dict)
    viewports: Mapping[str, "Instruction"] = field(default_factory=dict)
    canonical_url: str = "/"

    # Filled during navigation, once each
    router: "Router | None" = field(default=None, repr=False)
    controller: Any = field(default=None, repr=False)
    template: Any = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.params = dict(self.params)
        self.viewports = MappingProxyType(dict(self.viewports))

    def fill(self, attr: str, value: Any) -> None:
        """Set ``router``, ``controller`` or ``template`` exactly once.

        Re-filling with the same object is a no-op. Raises ``RuntimeError``
        if the slot already holds a different value.
        """
        if attr not in ("router", "controller", "template"):
            msg = f"Instruction has no fillable attribute {attr!r}"
            raise AttributeError(msg)
        current = getattr(self, attr)
        if current is not None and current is not value:
            msg = f"Instruction {self.component!r} already has a {attr}"
            raise RuntimeError(msg)
        setattr(self, attr, value)

    def traverse_sync(self, fn: Callable[["Instruction", "Instruction"], None]) -> None:
        """Call ``fn(parent, child)`` for every edge, one level at a time.

        All edges of this level are visited before recursing, so a parent
        is always handled before any of its children.
        """
        for child in self.viewports.values():
            fn(self, child)
        for child in self.viewports.values():
            child.traverse_sync(fn)

    def find_child(self, component: str) -> "Instruction | None":
        """Return the direct child instruction whose component is *component*."""
        for child in self.viewports.values():
            if child.component == component:
                return child
        return None
