"""Shared fixtures: the users scenario route table and a mounted router tree."""

from dataclasses import dataclass

import pytest

from perch.instruction import Instruction
from perch.router import Router, create_router
from perch.routing.registry import Registry
from perch.testing import CallLog, RecordingLoader, RecordingViewport


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def log() -> CallLog:
    return CallLog()


@pytest.fixture
def registry() -> Registry:
    """``/`` -> Home, ``/users/:id`` -> UserShell with a ``detail`` slot -> UserDetail."""
    reg = Registry()
    reg.config(
        "/",
        [
            {"path": "/", "component": "Home", "name": "home"},
            {"path": "/users/:id", "component": "UserShell", "name": "user"},
        ],
    )
    reg.config("UserShell", {"path": "/", "components": {"detail": "UserDetail"}})
    return reg


@dataclass
class Tree:
    """A root router with its main viewport and the nested detail viewport."""

    router: Router
    main: RecordingViewport
    detail: RecordingViewport
    loader: RecordingLoader
    log: CallLog


async def mount(
    registry: Registry,
    log: CallLog,
    *,
    loader: RecordingLoader | None = None,
    allow_detail_deactivate: bool = True,
) -> Tree:
    """Build a router tree whose main view registers ``detail`` when UserShell activates."""
    loader = loader or RecordingLoader(log)
    router = create_router(registry, loader)
    detail = RecordingViewport("detail", log, allow_deactivate=allow_detail_deactivate)

    async def _register_children(instruction: Instruction | None) -> None:
        if instruction is not None and instruction.component == "UserShell":
            await router.child_router("UserShell").register_viewport(detail, "detail")

    main = RecordingViewport("main", log, on_activate=_register_children)
    await router.register_viewport(main)
    return Tree(router=router, main=main, detail=detail, loader=loader, log=log)
