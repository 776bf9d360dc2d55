"""Navigation phases — the lifecycle run for every navigation attempt.

``Router.navigate()`` guards, recognizes and finalizes; everything in
between lives here. Phases run strictly in order and each one is
terminal on failure::

    2. Materialize     make_descendant_routers()   sync, top-down
    3. Can-deactivate  can_deactivate_ports()      previous router tree
    4. Init            instantiate()               instruction tree
    5. Can-activate    check_can_activate()        instruction tree
    6. Load            load_templates()            instruction tree
    7. Commit          activate_ports()            parent ports first

Phases 3-6 are breadth passes: every sibling at a level starts before any
is awaited, and a level settles before its children's level starts.
Nothing visible changes before phase 7.
"""

import logging
from collections.abc import Awaitable, Callable
from functools import partial
from typing import TYPE_CHECKING, Any

from perch._internal.fanout import fan_out
from perch._internal.invoke import invoke, invoke_optional
from perch.errors import (
    ActivationDenied,
    CollaboratorFailure,
    DeactivationDenied,
    NavigationError,
)
from perch.instruction import Instruction

if TYPE_CHECKING:
    from perch.router import Router

logger = logging.getLogger("perch.router")

type InstructionStep = Callable[[Instruction, str], Awaitable[None]]


async def run_pipeline(router: "Router", instruction: Instruction, url: str) -> None:
    """Run phases 2-7 for an instruction already bound to *router*."""
    make_descendant_routers(instruction)
    await can_deactivate_ports(router, instruction, url)
    await instantiate(instruction, router.loader, url)
    await check_can_activate(instruction, url)
    await load_templates(instruction, router.loader, url)
    await activate_ports(router, instruction, url)


# -- Traversal --


async def traverse_instruction(instruction: Instruction, fn: InstructionStep) -> None:
    """Apply *fn* to every descendant of *instruction*, one level at a time.

    ``fn(child, viewport_name)`` runs concurrently for all children, and
    only once they have all succeeded does each child's own subtree start.
    """
    await fan_out(
        {name: partial(fn, child, name) for name, child in instruction.viewports.items()}
    )
    await fan_out(
        {
            name: partial(traverse_instruction, child, fn)
            for name, child in instruction.viewports.items()
        }
    )


# -- Phase 2: Materialize --


def make_descendant_routers(instruction: Instruction) -> None:
    """Attach a child router to every instruction below the top level.

    Grows the router tree as needed. Synchronous and total: each node is
    visited exactly once, parents before children.
    """

    def _attach(parent: Instruction, child: Instruction) -> None:
        owner = parent.router
        if owner is None:
            msg = f"Instruction {parent.component!r} has no router attached"
            raise RuntimeError(msg)
        child.fill("router", owner.child_router(child.component))

    instruction.traverse_sync(_attach)


# -- Phase 3: Can-deactivate --


async def can_deactivate_ports(
    router: "Router",
    instruction: Instruction | None,
    url: str,
) -> None:
    """Ask every bound viewport in the current tree whether it may yield.

    Walks the routers that exist *before* this navigation commits, not the
    new instruction: a child router is asked even when the new instruction
    no longer reaches it (it then receives ``None``).
    """
    ports = dict(router.ports)

    async def _ask(port_name: str, port: Any) -> None:
        target = instruction.viewports.get(port_name) if instruction is not None else None
        try:
            allowed = await invoke_optional(port, "can_deactivate", target, default=True)
        except Exception as exc:
            raise DeactivationDenied(
                url,
                f"Viewport {port_name!r} of router {router.name!r} raised: {exc}",
                router_name=router.name,
                viewport_name=port_name,
            ) from exc
        if not allowed:
            raise DeactivationDenied(url, router_name=router.name, viewport_name=port_name)

    await fan_out({name: partial(_ask, name, port) for name, port in ports.items()})

    children = dict(router.children)
    await fan_out(
        {
            name: partial(
                can_deactivate_ports,
                child,
                instruction.find_child(name) if instruction is not None else None,
                url,
            )
            for name, child in children.items()
        }
    )


# -- Phase 4: Init --


async def instantiate(instruction: Instruction, loader: Any, url: str) -> None:
    """Ask the component loader for a controller per instruction."""

    async def _init(child: Instruction, viewport_name: str) -> None:
        controller = await _call_collaborator(url, "init", child, partial(loader.init, child))
        child.fill("controller", controller)

    await traverse_instruction(instruction, _init)


# -- Phase 5: Can-activate --


async def check_can_activate(instruction: Instruction, url: str) -> None:
    """Consult ``controller.can_activate`` for every new instruction."""

    async def _check(child: Instruction, viewport_name: str) -> None:
        try:
            allowed = await invoke_optional(
                child.controller, "can_activate", child, default=True
            )
        except Exception as exc:
            raise ActivationDenied(
                url,
                f"Component {child.component!r} raised in can_activate: {exc}",
                component=child.component,
            ) from exc
        if not allowed:
            raise ActivationDenied(url, component=child.component)

    await traverse_instruction(instruction, _check)


# -- Phase 6: Load --


async def load_templates(instruction: Instruction, loader: Any, url: str) -> None:
    """Ask the component loader for a rendering artifact per instruction."""

    async def _load(child: Instruction, viewport_name: str) -> None:
        template = await _call_collaborator(url, "load", child, partial(loader.load, child))
        child.fill("template", template)

    await traverse_instruction(instruction, _load)


# -- Phase 7: Commit --


async def activate_ports(router: "Router", instruction: Instruction, url: str) -> None:
    """Activate *router*'s bound viewports, then descend.

    A node's own ports all settle before any child router is touched:
    child viewports typically register themselves while their parent
    slot activates, so the child port snapshot is taken afterwards.
    """
    ports = dict(router.ports)

    async def _activate(port_name: str, port: Any) -> None:
        target = instruction.viewports.get(port_name)
        try:
            await invoke(port.activate, target)
        except Exception as exc:
            logger.warning(
                "Viewport %r of router %r failed to activate for %s",
                port_name, router.name, url, exc_info=True,
            )
            raise CollaboratorFailure(
                url, f"Viewport {port_name!r} of router {router.name!r} failed: {exc}"
            ) from exc

    await fan_out({name: partial(_activate, name, port) for name, port in ports.items()})

    await fan_out(
        {
            name: partial(activate_ports, child.router, child, url)
            for name, child in instruction.viewports.items()
            if child.router is not None
        }
    )


# -- Helpers --


async def _call_collaborator(
    url: str,
    operation: str,
    instruction: Instruction,
    call: Callable[[], Any],
) -> Any:
    """Invoke a component loader hook, wrapping its failures."""
    try:
        return await invoke(call)
    except NavigationError:
        raise
    except Exception as exc:
        logger.warning(
            "Component loader %s failed for %r (%s)",
            operation, instruction.component, url, exc_info=True,
        )
        raise CollaboratorFailure(
            url, f"{operation} failed for component {instruction.component!r}: {exc}"
        ) from exc
