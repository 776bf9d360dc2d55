"""Perch — nested viewport navigation with a gated, phased lifecycle.

A tree of routers owns named viewport slots. ``navigate(url)`` resolves
the URL into an instruction tree, asks every affected viewport and
controller for permission, loads what the new components need, and only
then activates viewports, parents before children. Any failure leaves
the current view untouched.

Basic usage::

    from perch import ComponentLoader, Registry, create_router

    registry = Registry()
    loader = ComponentLoader()
    router = create_router(registry, loader)

    await router.config([
        {"path": "/", "component": "home"},
        {"path": "/users/:id", "component": "user_shell"},
    ])
    await router.register_viewport(main_viewport)
    await router.navigate("/users/42")
"""

__version__ = "0.1.0-dev"
__all__ = [
    "ActivationDenied",
    "AlreadyNavigating",
    "CollaboratorFailure",
    "ComponentLoader",
    "ConfigurationError",
    "DeactivationDenied",
    "Instruction",
    "NavigationError",
    "NavigationErrorKind",
    "NoMatch",
    "PerchError",
    "Registry",
    "RouteDefinition",
    "Router",
    "RouterConfig",
    "Viewport",
    "create_router",
]

# public name -> defining module
_LAZY_IMPORTS: dict[str, str] = {
    "ActivationDenied": "perch.errors",
    "AlreadyNavigating": "perch.errors",
    "CollaboratorFailure": "perch.errors",
    "ComponentLoader": "perch.loader",
    "ConfigurationError": "perch.errors",
    "DeactivationDenied": "perch.errors",
    "Instruction": "perch.instruction",
    "NavigationError": "perch.errors",
    "NavigationErrorKind": "perch.errors",
    "NoMatch": "perch.errors",
    "PerchError": "perch.errors",
    "Registry": "perch.routing.registry",
    "RouteDefinition": "perch.routing.route",
    "Router": "perch.router",
    "RouterConfig": "perch.config",
    "Viewport": "perch.protocols",
    "create_router": "perch.router",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast (no kida import until the loader is used)
    while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
