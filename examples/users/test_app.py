"""Tests for the users example."""

import pytest

from perch import ActivationDenied, DeactivationDenied

pytestmark = pytest.mark.anyio


class TestUsersApp:
    """Drive the example's router tree and inspect the rendered screen."""

    async def test_home(self, example) -> None:
        await example.router.register_viewport(example.main)
        assert await example.router.navigate("/") == "/"
        assert example.screen == {"main": "Home: 2 users"}

    async def test_user_fills_nested_viewport(self, example) -> None:
        await example.router.register_viewport(example.main)
        await example.router.navigate("/users/1")
        assert example.screen["main"] == "User #1"
        assert "Ada" in example.screen["detail"]
        assert example.router.child_router("UserShell").ports == {"detail": example.detail}

    async def test_switching_users_repaints_detail(self, example) -> None:
        await example.router.register_viewport(example.main)
        await example.router.navigate("/users/1")
        await example.router.navigate("/users/2")
        assert example.screen["main"] == "User #2"
        assert "Grace" in example.screen["detail"]

    async def test_back_home_drops_detail(self, example) -> None:
        await example.router.register_viewport(example.main)
        await example.router.navigate("/users/1")
        await example.router.navigate("/")
        assert example.screen == {"main": "Home: 2 users"}

    async def test_unknown_user_is_refused(self, example) -> None:
        await example.router.register_viewport(example.main)
        await example.router.navigate("/users/1")
        with pytest.raises(ActivationDenied):
            await example.router.navigate("/users/3")
        assert example.screen["main"] == "User #1"
        assert example.router.previous_url == "/users/1"

    async def test_dirty_detail_blocks_navigation(self, example) -> None:
        await example.router.register_viewport(example.main)
        await example.router.navigate("/users/1")
        example.detail.dirty = True
        with pytest.raises(DeactivationDenied):
            await example.router.navigate("/")
        assert example.screen["main"] == "User #1"

    async def test_generate(self, example) -> None:
        assert example.router.generate("user", {"id": 2}) == "/users/2"
