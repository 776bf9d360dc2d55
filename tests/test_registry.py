"""Tests for perch.routing.registry — recognition, redirects, generation, config."""

import pytest

from perch.config import RouterConfig
from perch.errors import ConfigurationError
from perch.routing.registry import Registry
from perch.routing.route import RouteDefinition


class TestRecognize:
    def test_root(self, registry: Registry) -> None:
        instruction = registry.recognize("/")
        assert instruction is not None
        assert instruction.component is None
        assert instruction.canonical_url == "/"
        assert list(instruction.viewports) == ["default"]
        assert instruction.viewports["default"].component == "Home"

    def test_nested_components(self, registry: Registry) -> None:
        instruction = registry.recognize("/users/42")
        assert instruction is not None
        shell = instruction.viewports["default"]
        assert shell.component == "UserShell"
        assert shell.params == {"id": "42"}
        assert list(shell.viewports) == ["detail"]
        assert shell.viewports["detail"].component == "UserDetail"
        assert shell.viewports["detail"].viewports == {}

    def test_descendants_see_ancestor_params(self, registry: Registry) -> None:
        instruction = registry.recognize("/users/42")
        assert instruction is not None
        detail = instruction.viewports["default"].viewports["detail"]
        assert detail.params == {"id": "42"}

    def test_canonical_url_is_normalized(self, registry: Registry) -> None:
        instruction = registry.recognize("//users/42/?tab=1")
        assert instruction is not None
        assert instruction.canonical_url == "/users/42"

    def test_no_match(self, registry: Registry) -> None:
        assert registry.recognize("/nope") is None

    def test_unconsumed_remainder_is_no_match(self, registry: Registry) -> None:
        assert registry.recognize("/users/42/posts") is None

    def test_empty_registry(self) -> None:
        assert Registry().recognize("/") is None

    def test_child_table_consumes_remainder(self) -> None:
        registry = Registry()
        registry.config("/", {"path": "/users/:id", "component": "UserShell"})
        registry.config(
            "UserShell",
            [
                {"path": "/", "component": "Overview"},
                {"path": "/posts", "component": "Posts"},
            ],
        )

        instruction = registry.recognize("/users/42/posts")
        assert instruction is not None
        shell = instruction.viewports["default"]
        assert shell.canonical_url == "/users/42/posts"
        posts = shell.viewports["default"]
        assert posts.component == "Posts"
        assert posts.canonical_url == "/posts"

        overview = registry.recognize("/users/42")
        assert overview is not None
        assert overview.viewports["default"].viewports["default"].component == "Overview"

    def test_sibling_viewports(self) -> None:
        registry = Registry()
        registry.config("/", {"path": "/dash", "components": {"left": "Nav", "right": "Feed"}})

        instruction = registry.recognize("/dash")
        assert instruction is not None
        assert {k: v.component for k, v in instruction.viewports.items()} == {
            "left": "Nav",
            "right": "Feed",
        }

    def test_from_child_router_table(self, registry: Registry) -> None:
        instruction = registry.recognize("/", router_name="UserShell")
        assert instruction is not None
        assert instruction.viewports["detail"].component == "UserDetail"

    def test_deterministic(self, registry: Registry) -> None:
        first = registry.recognize("/users/1")
        second = registry.recognize("/users/1")
        assert first is not None and second is not None
        assert first is not second
        assert first.viewports["default"].component == second.viewports["default"].component


class TestRedirects:
    def test_redirect_on_full_match(self) -> None:
        registry = Registry()
        registry.config(
            "/",
            [
                {"path": "/", "redirect_to": "/home"},
                {"path": "/home", "component": "Home"},
            ],
        )
        instruction = registry.recognize("/")
        assert instruction is not None
        assert instruction.canonical_url == "/home"

    def test_redirect_ignored_as_prefix(self) -> None:
        registry = Registry()
        registry.config(
            "/",
            [
                {"path": "/", "redirect_to": "/home"},
                {"path": "/home", "component": "Home"},
            ],
        )
        assert registry.recognize("/elsewhere") is None

    def test_redirect_loop(self) -> None:
        registry = Registry(RouterConfig(max_redirects=3))
        registry.config(
            "/",
            [
                {"path": "/a", "redirect_to": "/b"},
                {"path": "/b", "redirect_to": "/a"},
            ],
        )
        with pytest.raises(ConfigurationError, match="Too many redirects"):
            registry.recognize("/a")


class TestSiblingParamRoutes:
    @pytest.fixture
    def profiles(self) -> Registry:
        registry = Registry()
        registry.config(
            "/",
            [
                {"path": "/users/{id}", "component": "Profile", "name": "profile"},
                {"path": "/users/{name}/posts", "component": "Posts", "name": "posts"},
            ],
        )
        return registry

    def test_each_route_names_its_own_params(self, profiles: Registry) -> None:
        posts = profiles.recognize("/users/ada/posts")
        assert posts is not None
        assert posts.viewports["default"].component == "Posts"
        assert posts.viewports["default"].params == {"name": "ada"}

        profile = profiles.recognize("/users/7")
        assert profile is not None
        assert profile.viewports["default"].params == {"id": "7"}

    def test_generate_matches_recognize(self, profiles: Registry) -> None:
        url = profiles.generate("posts", {"name": "ada"})
        assert url == "/users/ada/posts"
        instruction = profiles.recognize(url)
        assert instruction is not None
        assert instruction.viewports["default"].params == {"name": "ada"}


class TestGenerate:
    def test_named_route(self, registry: Registry) -> None:
        assert registry.generate("user", {"id": "42"}) == "/users/42"

    def test_child_route_is_prefixed(self) -> None:
        registry = Registry()
        registry.config("/", {"path": "/users/:id", "component": "UserShell"})
        registry.config("UserShell", {"path": "/posts/{post:int}", "component": "Post", "name": "post"})

        assert registry.generate("post", {"id": 7, "post": 3}) == "/users/7/posts/3"

    def test_unknown_name(self, registry: Registry) -> None:
        with pytest.raises(ConfigurationError, match="No route named"):
            registry.generate("missing")

    def test_missing_param(self, registry: Registry) -> None:
        with pytest.raises(ConfigurationError, match="Missing parameter 'id'"):
            registry.generate("user", {})

    def test_converter_mismatch(self) -> None:
        registry = Registry()
        registry.config("/", {"path": "/items/{id:int}", "component": "Item", "name": "item"})
        with pytest.raises(ConfigurationError, match="not a valid int"):
            registry.generate("item", {"id": "abc"})


class TestConfig:
    def test_accepts_route_definitions(self) -> None:
        registry = Registry()
        registry.config("/", RouteDefinition("/", {"default": "Home"}, name="home"))
        assert registry.generate("home") == "/"

    def test_component_shorthand_uses_default_viewport(self) -> None:
        registry = Registry(RouterConfig(default_viewport="main"))
        registry.config("/", {"path": "/", "component": "Home"})
        instruction = registry.recognize("/")
        assert instruction is not None
        assert list(instruction.viewports) == ["main"]

    @pytest.mark.parametrize(
        ("entry", "message"),
        [
            ({"component": "Home"}, "has no 'path'"),
            ({"path": "/", "component": "A", "components": {"x": "B"}}, "both"),
            ({"path": "/"}, "needs a component"),
            ({"path": "/", "component": "A", "redirect_to": "/b"}, "cannot both"),
            ({"path": "/", "component": "A", "handler": None}, "Unknown route config keys"),
            ({"path": "/<id>", "component": "A"}, "<param>"),
        ],
    )
    def test_invalid_entries(self, entry: dict[str, object], message: str) -> None:
        with pytest.raises(ConfigurationError, match=message):
            Registry().config("/", entry)

    def test_rejects_non_mapping(self) -> None:
        with pytest.raises(ConfigurationError):
            Registry().config("/", "/users")
