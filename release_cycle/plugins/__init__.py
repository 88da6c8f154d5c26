"""Release-cycle plugins.

Importing this package registers the built-in plugins; the import order
below is the order in which their namespaces run.
"""

from release_cycle.plugins import (  # noqa: F401
    version,
    git,
    github,
    gitlab,
    npm,
)
from release_cycle.plugins.base import (
    IncrementBase,
    PluginContext,
    PluginRegistry,
    ReleasePlugin,
)

__all__ = [
    "IncrementBase",
    "PluginContext",
    "PluginRegistry",
    "ReleasePlugin",
]
