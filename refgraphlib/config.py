"""Configuration system for RefGraphLib.

This module defines how callers specify what a traversal does: visit
order, which version kinds are handled, reentry avoidance and the
synchronization check performed on each workspace.
"""

from dataclasses import dataclass
from typing import List, Optional

from .core.control import TraversalOrder
from .core.node import NodeType
from .core.reentry import ReentryGranularity
from .plugins import SyncScope


@dataclass
class HierarchyTraversalConfig:
    """Configuration for walks over the classification tree."""

    order: TraversalOrder = TraversalOrder.PARENT_FIRST
    node_type_filter: Optional[NodeType] = None   # None = visit every node type

    @classmethod
    def parent_first(cls) -> 'HierarchyTraversalConfig':
        return cls(order=TraversalOrder.PARENT_FIRST)

    @classmethod
    def depth_first(cls) -> 'HierarchyTraversalConfig':
        return cls(order=TraversalOrder.DEPTH_FIRST)

    @classmethod
    def modules_only(cls) -> 'HierarchyTraversalConfig':
        """Visit modules only, classification nodes are walked through."""
        return cls(node_type_filter=NodeType.MODULE)

    @property
    def is_depth_first(self) -> bool:
        return self.order is TraversalOrder.DEPTH_FIRST

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        if not isinstance(self.order, TraversalOrder):
            errors.append(f"order must be a TraversalOrder, got {self.order!r}")
        if self.node_type_filter is not None and not isinstance(self.node_type_filter, NodeType):
            errors.append(f"node_type_filter must be a NodeType or None, got {self.node_type_filter!r}")
        return errors


@dataclass
class ReferenceTraversalConfig:
    """Complete configuration for a reference-graph traversal.

    This is the primary way jobs specify how the graph rooted at the root
    module-versions is walked.
    """

    # Visit order
    order: TraversalOrder = TraversalOrder.PARENT_FIRST

    # Version kinds. A static version only references static versions, so
    # handle_static_version=False also prunes descent below it.
    handle_static_version: bool = True
    handle_dynamic_version: bool = True

    # Reentry avoidance
    avoid_reentry: bool = True
    reentry_granularity: ReentryGranularity = ReentryGranularity.MODULE_VERSION

    # Workspace checks
    sync_scope: SyncScope = SyncScope.ALL

    # Matching
    use_global_matcher: bool = True

    # Order of the job's subtree skip hook relative to the reentry check
    skip_check_before_reentry: bool = True

    # Convenience constructors for common configurations

    @classmethod
    def parent_first(cls) -> 'ReferenceTraversalConfig':
        return cls(order=TraversalOrder.PARENT_FIRST)

    @classmethod
    def depth_first(cls) -> 'ReferenceTraversalConfig':
        return cls(order=TraversalOrder.DEPTH_FIRST)

    @classmethod
    def dynamic_only(cls) -> 'ReferenceTraversalConfig':
        """Create config for jobs that only act on dynamic versions.

        Static versions are immutable, so jobs modifying sources use this.
        """
        return cls(handle_static_version=False)

    @classmethod
    def exhaustive(cls) -> 'ReferenceTraversalConfig':
        """Create config visiting every occurrence of every module-version.

        Reentry avoidance is off; the cycle guard still ensures termination.
        """
        return cls(avoid_reentry=False, use_global_matcher=False)

    @property
    def is_depth_first(self) -> bool:
        return self.order is TraversalOrder.DEPTH_FIRST

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not isinstance(self.order, TraversalOrder):
            errors.append(f"order must be a TraversalOrder, got {self.order!r}")

        if not isinstance(self.reentry_granularity, ReentryGranularity):
            errors.append(f"reentry_granularity must be a ReentryGranularity, got {self.reentry_granularity!r}")

        if not isinstance(self.sync_scope, SyncScope):
            errors.append(f"sync_scope must be a SyncScope, got {self.sync_scope!r}")

        if not self.handle_static_version and not self.handle_dynamic_version:
            errors.append("at least one of handle_static_version and handle_dynamic_version must be set")

        return errors


__all__ = [
    'TraversalOrder',
    'HierarchyTraversalConfig',
    'ReferenceTraversalConfig',
]
