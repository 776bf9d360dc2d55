"""Shared type aliases used across perch modules."""

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

# Controller factory — class or function, optionally receives the instruction
ControllerFactory: TypeAlias = Callable[..., Any]

# Raw route entry accepted by Registry.config() before normalization
RouteEntry: TypeAlias = Mapping[str, Any]
