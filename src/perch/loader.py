"""Reference component loader — controllers from factories, templates from kida.

``init()`` looks up the controller factory registered for the
instruction's component; ``load()`` resolves the component's template
through a kida ``Environment``. The environment is optional: without one
``load()`` produces no artifact and viewports render from the controller
alone.

Usage::

    loader = ComponentLoader(Environment(loader=FileSystemLoader("components")))

    @loader.component("user_detail")
    class UserDetail:
        template = "users/detail.html"

        def __init__(self, instruction):
            self.user_id = instruction.params["id"]

        async def can_activate(self, instruction):
            return await users.exists(self.user_id)
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from kida import Environment

from perch._internal.invoke import invoke
from perch._internal.types import ControllerFactory
from perch.errors import ConfigurationError
from perch.instruction import Instruction

logger = logging.getLogger("perch.loader")


class ComponentLoader:
    """Component registry implementing the ``ComponentLoader`` protocol.

    Factories may be classes or functions, sync or async, and may take
    either no arguments or the ``Instruction`` being initialized.
    """

    __slots__ = ("_factories", "env", "template_pattern")

    def __init__(
        self,
        env: Environment | None = None,
        *,
        template_pattern: str = "{component}.html",
    ) -> None:
        self.env = env
        self.template_pattern = template_pattern
        self._factories: dict[str, ControllerFactory] = {}

    # -- Registration --

    def register(self, component: str, factory: ControllerFactory) -> None:
        """Register the controller factory for *component*."""
        if not callable(factory):
            msg = f"Controller factory for {component!r} is not callable: {factory!r}"
            raise ConfigurationError(msg)
        self._factories[component] = factory

    def component(self, name: str) -> Callable[[ControllerFactory], ControllerFactory]:
        """Register a controller factory via decorator."""

        def decorator(factory: ControllerFactory) -> ControllerFactory:
            self.register(name, factory)
            return factory

        return decorator

    def __contains__(self, component: str) -> bool:
        return component in self._factories

    # -- ComponentLoader protocol --

    async def init(self, instruction: Instruction) -> Any:
        """Create the controller for *instruction*.

        Raises ``LookupError`` if no factory is registered for the component.
        """
        factory = self._factories.get(instruction.component or "")
        if factory is None:
            msg = f"No controller registered for component {instruction.component!r}"
            raise LookupError(msg)

        if _accepts_instruction(factory):
            return await invoke(factory, instruction)
        return await invoke(factory)

    def load(self, instruction: Instruction) -> Any:
        """Resolve the template for *instruction*, or ``None`` without an environment.

        A controller's ``template`` attribute overrides the default
        ``template_pattern`` name.
        """
        if self.env is None:
            return None
        name = getattr(instruction.controller, "template", None) or self.template_pattern.format(
            component=instruction.component
        )
        logger.debug("Loading template %s for %r", name, instruction.component)
        return self.env.get_template(name)


def _accepts_instruction(factory: ControllerFactory) -> bool:
    """Return True if *factory* takes at least one positional argument."""
    try:
        sig = inspect.signature(factory)
    except (TypeError, ValueError):
        return False
    return any(
        p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.VAR_POSITIONAL)
        for p in sig.parameters.values()
    )
