"""Pydantic v2 configuration models for release-cycle.

These models provide:
- Type-safe configuration loading
- Validation of hook keys and increments
- Default values for every built-in namespace
- Environment variable override support (RELEASE_CYCLE_ prefix)
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from release_cycle.hooks import HookCommand, normalize_commands, parse_hook_key
from release_cycle.utils.version import INCREMENTS, is_valid_version


class NamespaceConfig(BaseModel):
    """Settings shared by every plugin namespace."""

    enabled: bool = Field(default=True, description="Whether the namespace takes part in the release")


class GitConfig(NamespaceConfig):
    """Git commit, tag and push configuration."""

    require_clean_working_dir: bool = Field(
        default=True,
        description="Abort when the working directory has uncommitted changes",
    )
    commit: bool = Field(default=True, description="Commit the version bump")
    commit_message: str = Field(
        default="Release ${version}",
        description="Commit message template",
    )
    commit_args: list[str] = Field(default_factory=list, description="Extra 'git commit' arguments")
    tag: bool = Field(default=True, description="Tag the release commit")
    tag_name: str = Field(default="${version}", description="Tag name template")
    tag_annotation: str = Field(
        default="Release ${version}",
        description="Annotated tag message template",
    )
    push: bool = Field(default=True, description="Push commit and tag to the remote")
    push_args: list[str] = Field(
        default_factory=lambda: ["--follow-tags"],
        description="Extra 'git push' arguments",
    )
    push_repo: str = Field(default="origin", description="Remote name or URL to push to")


class ForgeConfig(NamespaceConfig):
    """Release creation on a hosted forge (GitHub, GitLab)."""

    release: bool = Field(default=False, description="Create a release on the forge")
    release_name: str = Field(
        default="Release ${version}",
        description="Release title template",
    )
    draft: bool = Field(default=False, description="Create the release as a draft")
    prerelease: bool = Field(default=False, description="Mark the release as a pre-release")
    push_repo: str | None = Field(
        default=None,
        description="Repository URL overriding the git remote (owner/project are taken from it)",
    )
    skip_checks: bool = Field(
        default=False,
        description="Skip the authentication check during init",
    )


class GitHubConfig(ForgeConfig):
    """GitHub release configuration (uses the gh CLI)."""


class GitLabConfig(ForgeConfig):
    """GitLab release configuration (uses the glab CLI)."""

    @model_validator(mode="after")
    def reject_unsupported_flags(self) -> "GitLabConfig":
        # glab has no draft or pre-release flag
        unsupported = [name for name in ("draft", "prerelease") if getattr(self, name)]
        if unsupported:
            raise ValueError(f"not supported for GitLab releases: {', '.join(unsupported)}")
        return self


class NPMConfig(NamespaceConfig):
    """npm version bump and publish configuration."""

    publish: bool = Field(default=True, description="Publish the package to the registry")
    publish_path: str = Field(default=".", description="Path passed to 'npm publish'")
    tag: str = Field(default="latest", description="dist-tag to publish under")
    access: Literal["public", "restricted"] | None = Field(
        default=None,
        description="Package access level",
    )
    ignore_version: bool = Field(
        default=False,
        description="Do not read or bump the version in package.json",
    )
    skip_checks: bool = Field(
        default=False,
        description="Skip the 'npm whoami' check during init",
    )


class ReleaseConfig(BaseSettings):
    """Root configuration model.

    Supports environment variable overrides with RELEASE_CYCLE_ prefix.
    Example: RELEASE_CYCLE_GIT__PUSH=false
    """

    increment: str | None = Field(
        default=None,
        description="major, minor, patch, or an explicit version",
    )
    ci: bool = Field(default=False, description="Non-interactive mode: use default answers")
    dry_run: bool = Field(default=False, description="Do not run commands that change state")
    verbose: bool = Field(default=False, description="Echo every command and its output")
    hooks: dict[str, list[HookCommand]] = Field(
        default_factory=dict,
        description="Hook key (e.g. 'after:git:release') to command(s)",
    )
    git: GitConfig = Field(default_factory=GitConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    gitlab: GitLabConfig = Field(default_factory=GitLabConfig)
    npm: NPMConfig = Field(default_factory=NPMConfig)
    plugins: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="User plugins: 'module:Class' import path to plugin options",
    )

    model_config = {
        "env_prefix": "RELEASE_CYCLE_",
        "env_nested_delimiter": "__",
    }

    @field_validator("increment")
    @classmethod
    def validate_increment(cls, v: str | None) -> str | None:
        if v is not None and v not in INCREMENTS and not is_valid_version(v):
            raise ValueError("increment must be major, minor, patch, or a semantic version")
        return v

    @field_validator("hooks", mode="before")
    @classmethod
    def validate_hooks(cls, v: Any) -> Any:
        if not isinstance(v, dict):
            return v
        normalized = {}
        for key, value in v.items():
            parse_hook_key(key)
            normalized[key] = normalize_commands(value)
        return normalized

    def section(self, namespace: str) -> NamespaceConfig | None:
        """Return the built-in configuration section for a namespace."""
        value = getattr(self, namespace, None)
        return value if isinstance(value, NamespaceConfig) else None
