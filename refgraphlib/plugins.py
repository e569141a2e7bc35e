"""Contracts of the per-module collaborators used by the traversal core.

The core never talks to a source-control system or parses dependency
declarations itself. Each module exposes these plugins through the
ModelAdapter, and tests plug in the fakes from refgraphlib.testing.
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .core.identity import Version
from .core.reference import Reference


# Commit attribute flagging a commit that only retargets a reference.
COMMIT_ATTR_REFERENCE_VERSION_CHANGE = "reference-version-change"

# Version attribute holding the project code a version belongs to.
VERSION_ATTR_PROJECT_CODE = "project-code"


class SyncScope(Enum):
    """Which differences count when checking a workspace is synchronized."""
    ALL = "all"
    LOCAL_CHANGES_ONLY = "local"
    REMOTE_CHANGES_ONLY = "remote"


class ScmPlugin(ABC):
    """Source-control operations for one module."""

    @abstractmethod
    def checkout_workspace(self, version: Optional[Version]) -> Path:
        """Return a workspace directory holding the module at version.

        A None version means the default version of the module.

        Implementations reuse an existing workspace when one is already
        checked out at that version.
        """
        pass

    @abstractmethod
    def is_synchronized(self, path: Path, scope: SyncScope = SyncScope.ALL) -> bool:
        """Check the workspace at path has no unsynchronized changes."""
        pass

    @abstractmethod
    def commit(self, path: Path, message: str, attributes: Optional[Dict[str, str]] = None) -> None:
        """Commit the pending changes of the workspace at path."""
        pass

    @abstractmethod
    def version_exists(self, version: Version) -> bool:
        pass

    def default_version(self) -> Optional[Version]:
        """Return the version used when a ModuleVersion has none."""
        return None


class ReferenceManagerPlugin(ABC):
    """Dependency-declaration access for one module (optional capability)."""

    @abstractmethod
    def list_references(self, path: Path) -> List[Reference]:
        """Discover the references declared by the sources at path.

        References that cannot be mapped to a known module are returned with
        a None module_version rather than omitted.
        """
        pass

    @abstractmethod
    def update_reference_version(self, path: Path, reference: Reference, new_version: Version,
                                 options: Optional[Dict[str, Any]] = None) -> bool:
        """Retarget reference to new_version in the sources at path.

        Returns:
            True if the sources were modified, False if no artifact-level
            change was needed (already at the desired effective version)
        """
        pass
