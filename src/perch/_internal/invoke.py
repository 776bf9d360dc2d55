"""Invoke helpers — call sync or async collaborators uniformly.

Viewports, controllers and loaders can implement their hooks as ``def``
or ``async def``. Any code that calls a consumer-provided hook must
handle both cases. This module keeps the sync/async check in exactly
one place.

Usage::

    from perch._internal.invoke import invoke, invoke_optional

    controller = await invoke(loader.init, instruction)
    allowed = await invoke_optional(viewport, "can_deactivate", instruction, default=True)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a hook and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync — returns immediately, no await needed
        def can_deactivate(self, instruction):
            return not self.dirty

        # async — returns coroutine, awaited automatically
        async def can_deactivate(self, instruction):
            return await self.confirm("Discard changes?")
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


async def invoke_optional(
    target: Any,
    method: str,
    *args: Any,
    default: Any = None,
) -> Any:
    """Call ``target.method(*args)`` if it exists, else return *default*.

    Lifecycle hooks such as ``can_activate`` are optional; a missing hook
    means "always permit".
    """
    hook = getattr(target, method, None)
    if hook is None:
        return default
    return await invoke(hook, *args)
