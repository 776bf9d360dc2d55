"""Router configuration.

RouterConfig is a frozen dataclass — immutable after creation, shared by
every router in one tree, no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router tree configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(default_viewport="main", replace_viewports=False)
    """

    # Tree
    root_name: str = "/"  # Name of the root router (and its route table)
    default_viewport: str = "default"  # Slot used when a name is omitted

    # Viewport bindings
    replace_viewports: bool = True  # False = registering an occupied name raises
    renavigate_on_register: bool = True
    renavigate_on_config: bool = True

    # Reference route registry
    max_redirects: int = 10
