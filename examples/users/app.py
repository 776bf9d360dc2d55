"""Users — nested viewports rendered to a text screen.

Demonstrates a two-level viewport tree. The ``main`` viewport shows a
user shell; when the shell activates it registers a ``detail`` viewport on
its own child router, which then shows the user's profile. An editor with
unsaved changes refuses to be navigated away from.

Run:
    python app.py
"""

import anyio
from kida import DictLoader, Environment

from perch import ComponentLoader, DeactivationDenied, Instruction, NavigationError, Registry, create_router

TEMPLATES = {
    "Home.html": "Home: {{ count }} users",
    "UserShell.html": "User #{{ id }}",
    "UserDetail.html": "{{ name }} <{{ email }}>",
}

USERS = {
    "1": {"name": "Ada", "email": "ada@example.com"},
    "2": {"name": "Grace", "email": "grace@example.com"},
}

registry = Registry()
registry.config(
    "/",
    [
        {"path": "/", "component": "Home", "name": "home"},
        {"path": "/users/{id:int}", "component": "UserShell", "name": "user"},
    ],
)
registry.config("UserShell", {"path": "/", "components": {"detail": "UserDetail"}})

loader = ComponentLoader(Environment(loader=DictLoader(TEMPLATES)))


@loader.component("Home")
class Home:
    def context(self) -> dict:
        return {"count": len(USERS)}


@loader.component("UserShell")
class UserShell:
    def __init__(self, instruction: Instruction) -> None:
        self.id = instruction.params["id"]

    def can_activate(self, instruction: Instruction) -> bool:
        return self.id in USERS

    def context(self) -> dict:
        return {"id": self.id}


@loader.component("UserDetail")
class UserDetail:
    def __init__(self, instruction: Instruction) -> None:
        self.user = USERS.get(instruction.params["id"], {})

    def context(self) -> dict:
        return self.user


# Rendered output, keyed by viewport name
screen: dict[str, str] = {}


class TextViewport:
    """Renders the active component's template into ``screen``."""

    def __init__(self, name: str, *, owns_screen: bool = False) -> None:
        self.name = name
        self.owns_screen = owns_screen
        self.dirty = False

    def can_deactivate(self, instruction: Instruction | None) -> bool:
        return not self.dirty

    async def activate(self, instruction: Instruction | None) -> None:
        self.dirty = False
        if self.owns_screen:
            # Top-level view; nested views repaint after it
            screen.clear()
        if instruction is None:
            screen.pop(self.name, None)
            return
        screen[self.name] = instruction.template.render(instruction.controller.context())
        if instruction.component == "UserShell":
            await instruction.router.register_viewport(detail, "detail")


main = TextViewport("main", owns_screen=True)
detail = TextViewport("detail")
router = create_router(registry, loader)


async def main_loop() -> None:
    await router.register_viewport(main)
    for url in ("/", "/users/1", "/users/2", "/users/3", "/"):
        try:
            await router.navigate(url)
        except NavigationError as exc:
            print(f"{url}: {exc}")
            continue
        print(f"{url}: {' | '.join(screen.values())}")

    detail.dirty = True
    try:
        await router.navigate(router.generate("user", {"id": 1}))
    except DeactivationDenied as exc:
        print(f"blocked: {exc}")


if __name__ == "__main__":
    anyio.run(main_loop)
