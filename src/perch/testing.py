"""Test helpers for perch router trees.

Recording fakes for the viewport and component loader collaborators.
Every call lands in a shared ``CallLog`` so tests can assert on order
across the whole tree::

    log = CallLog()
    loader = RecordingLoader(log)
    router = create_router(registry, loader)
    await router.register_viewport(RecordingViewport("main", log))

    await router.navigate("/users/42")
    assert log.index("activate", "main") < log.index("activate", "detail")
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import anyio

from perch._internal.invoke import invoke
from perch.instruction import Instruction


@dataclass(frozen=True, slots=True)
class Call:
    """One recorded collaborator call."""

    operation: str
    target: str | None
    component: str | None = None


@dataclass(slots=True)
class CallLog:
    """Ordered record of collaborator calls."""

    calls: list[Call] = field(default_factory=list)

    def record(self, operation: str, target: str | None, instruction: Instruction | None) -> None:
        component = instruction.component if instruction is not None else None
        self.calls.append(Call(operation, target, component))

    def operations(self) -> list[str]:
        return [c.operation for c in self.calls]

    def of(self, operation: str) -> list[Call]:
        return [c for c in self.calls if c.operation == operation]

    def index(self, operation: str, target: str | None) -> int:
        """Position of the first *operation* call on *target*.

        Raises ``ValueError`` if there is no such call.
        """
        for i, call in enumerate(self.calls):
            if call.operation == operation and call.target == target:
                return i
        msg = f"No {operation!r} call recorded for {target!r}"
        raise ValueError(msg)

    def clear(self) -> None:
        self.calls.clear()


class RecordingViewport:
    """Viewport fake that records gate and activate calls.

    ``allow_deactivate`` may be a bool or a callable taking the incoming
    instruction. ``on_activate`` runs after recording, which lets a test
    register child viewports the way a real parent view would.
    """

    def __init__(
        self,
        name: str,
        log: CallLog,
        *,
        allow_deactivate: bool | Callable[[Instruction | None], bool] = True,
        on_activate: Callable[[Instruction | None], Any] | None = None,
        delay: float = 0,
    ) -> None:
        self.name = name
        self.log = log
        self.allow_deactivate = allow_deactivate
        self.on_activate = on_activate
        self.delay = delay
        self.current: Instruction | None = None

    async def can_deactivate(self, instruction: Instruction | None) -> bool:
        self.log.record("can_deactivate", self.name, instruction)
        if self.delay:
            await anyio.sleep(self.delay)
        if callable(self.allow_deactivate):
            return self.allow_deactivate(instruction)
        return self.allow_deactivate

    async def activate(self, instruction: Instruction | None) -> None:
        self.log.record("activate", self.name, instruction)
        if self.delay:
            await anyio.sleep(self.delay)
        self.current = instruction
        if self.on_activate is not None:
            await invoke(self.on_activate, instruction)


class Controller:
    """Minimal controller with a configurable ``can_activate`` answer.

    When given a *log*, every ``can_activate`` consultation is recorded.
    """

    def __init__(
        self,
        instruction: Instruction,
        *,
        allow: bool = True,
        log: CallLog | None = None,
    ) -> None:
        self.instruction = instruction
        self.allow = allow
        self.log = log

    def can_activate(self, instruction: Instruction) -> bool:
        if self.log is not None:
            self.log.record("can_activate", instruction.component, instruction)
        return self.allow


class RecordingLoader:
    """Component loader fake that records ``init`` and ``load`` calls.

    Components listed in *deny* get a controller that refuses activation;
    components listed in *fail* raise ``RuntimeError`` from ``init``.
    """

    def __init__(
        self,
        log: CallLog,
        *,
        deny: frozenset[str] = frozenset(),
        fail: frozenset[str] = frozenset(),
        delay: float = 0,
    ) -> None:
        self.log = log
        self.deny = deny
        self.fail = fail
        self.delay = delay

    async def init(self, instruction: Instruction) -> Controller:
        self.log.record("init", instruction.component, instruction)
        if self.delay:
            await anyio.sleep(self.delay)
        if instruction.component in self.fail:
            msg = f"cannot build {instruction.component}"
            raise RuntimeError(msg)
        return Controller(
            instruction, allow=instruction.component not in self.deny, log=self.log
        )

    def load(self, instruction: Instruction) -> str:
        self.log.record("load", instruction.component, instruction)
        return f"<{instruction.component}>"
