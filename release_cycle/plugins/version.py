"""Version increment plugin.

Decides the next version from the latest one. The configured
``increment`` (major, minor, patch or an explicit version) wins; otherwise
CI runs default to a patch release and interactive runs ask.
"""

from typing import ClassVar

from release_cycle.plugins.base import IncrementBase, PluginRegistry, ReleasePlugin
from release_cycle.prompt import Prompter
from release_cycle.utils.version import INCREMENTS, increment_version, is_valid_version

CUSTOM_CHOICE = "custom"


@PluginRegistry.register
class VersionPlugin(ReleasePlugin):
    """Computes version increments. Has no lifecycle work of its own."""

    namespace: ClassVar[str] = "version"
    display_name: ClassVar[str] = "Version"

    def get_incremented_version_ci(self, base: IncrementBase) -> str | None:
        return increment_version(base.latest_version, base.increment or "patch")

    def get_incremented_version(self, base: IncrementBase, prompter: Prompter) -> str | None:
        if base.increment:
            return increment_version(base.latest_version, base.increment)

        previews = {
            increment: increment_version(base.latest_version, increment)
            for increment in INCREMENTS
        }
        for increment, version in previews.items():
            self.log.info(f"{increment}: {base.latest_version} -> {version}")

        choice = prompter.select(
            "Select increment (next version)",
            choices=[*INCREMENTS, CUSTOM_CHOICE],
            default=INCREMENTS[0],
        )
        if choice != CUSTOM_CHOICE:
            return previews[choice]

        while True:
            custom = prompter.select("Please enter a valid version", choices=[], default="")
            if is_valid_version(custom):
                return increment_version(base.latest_version, custom)
            self.log.warn(f"'{custom}' is not a valid semantic version")
