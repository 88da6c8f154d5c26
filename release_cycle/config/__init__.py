"""Configuration management for release-cycle."""

from release_cycle.config.loader import load_config
from release_cycle.config.models import (
    ForgeConfig,
    GitConfig,
    GitHubConfig,
    GitLabConfig,
    NamespaceConfig,
    NPMConfig,
    ReleaseConfig,
)

__all__ = [
    "load_config",
    "ReleaseConfig",
    "NamespaceConfig",
    "GitConfig",
    "ForgeConfig",
    "GitHubConfig",
    "GitLabConfig",
    "NPMConfig",
]
