"""Reentry avoidance for reference-graph traversals."""

from enum import Enum
from typing import Set, Union

from .identity import ModuleVersion, NodePath


class ReentryGranularity(Enum):
    """What counts as "the same module" for reentry avoidance."""
    MODULE = "module"                   # Any version of a module is processed once
    MODULE_VERSION = "module_version"   # Each version of a module is processed once


class ModuleReentryAvoider:
    """Per-run guard ensuring a module is processed at most once.

    Guarantees termination on cyclic reference graphs and avoids redoing
    the work for a dependency shared by several parents (diamonds).
    Create one per job invocation.
    """

    def __init__(self, granularity: ReentryGranularity = ReentryGranularity.MODULE_VERSION):
        self.granularity = granularity
        self._processed: Set[Union[NodePath, ModuleVersion]] = set()

    def _key(self, module_version: ModuleVersion) -> Union[NodePath, ModuleVersion]:
        if self.granularity is ReentryGranularity.MODULE:
            return module_version.node_path
        return module_version

    def should_process(self, module_version: ModuleVersion) -> bool:
        """Record module_version and tell whether it is seen for the first time.

        Returns:
            True on the first call for a key, False afterwards
        """
        key = self._key(module_version)
        if key in self._processed:
            return False
        self._processed.add(key)
        return True

    def is_processed(self, module_version: ModuleVersion) -> bool:
        """Check without recording."""
        return self._key(module_version) in self._processed

    def reset(self) -> None:
        self._processed.clear()

    def __contains__(self, module_version: ModuleVersion) -> bool:
        return self.is_processed(module_version)

    def __len__(self) -> int:
        return len(self._processed)
