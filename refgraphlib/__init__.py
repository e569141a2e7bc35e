"""RefGraphLib - Traversal engine for module reference graphs.

RefGraphLib walks two structures:

    The classification tree: a static hierarchy of classification nodes
    with modules as leaves.
        from refgraphlib import traverse_model

    The reference graph: module-versions reachable from root
    module-versions through the references declared in their sources,
    cycles included.
        from refgraphlib import traverse_reference_graph

Jobs built on the engine live in refgraphlib.jobs; in-memory models and
plugins for tests live in refgraphlib.testing.
"""

__version__ = "0.1.0"

from .core import (
    NodePath,
    Version,
    VersionType,
    ModuleVersion,
    Reference,
    ReferencePath,
    Node,
    NodeType,
    ClassificationNode,
    ModuleNode,
    ModelAdapter,
    VisitControl,
    TraversalOrder,
    TraversalState,
    StepOutcome,
    ReferencePathMatcher,
    MatchAllMatcher,
    ByElementMatcher,
    VersionAttributeMatcher,
    ProjectCodeMatcher,
    AndMatcher,
    OrMatcher,
    combine_matchers,
    ModuleReentryAvoider,
    ReentryGranularity,
    HierarchyTraverser,
    NodeVisitor,
)
from .config import HierarchyTraversalConfig, ReferenceTraversalConfig
from .context import ExecContext
from .errors import RefGraphError, UserError, SynchronizationError, ConfigurationError, PropertiesError
from .error_policies import (
    ToolExitStatus,
    PolicyDecision,
    ErrorPolicy,
    FailFastPolicy,
    ContinueOnErrorsPolicy,
    ThresholdPolicy,
    PropertyLookupPolicy,
)
from .interaction import UserInteraction, ConsoleUserInteraction
from .plugins import ScmPlugin, ReferenceManagerPlugin, SyncScope
from .properties import PropertiesStore, InMemoryPropertiesStore, JsonPropertiesStore
from .root_manager import RootManager
from .caching import CachingModelAdapter
from .api import (
    traverse_model,
    traverse_reference_graph,
    collect_matched_paths,
    build_reference_graph,
    list_modules,
)

__all__ = [
    "__version__",
    # Identity and references
    "NodePath",
    "Version",
    "VersionType",
    "ModuleVersion",
    "Reference",
    "ReferencePath",
    # Model
    "Node",
    "NodeType",
    "ClassificationNode",
    "ModuleNode",
    "ModelAdapter",
    "CachingModelAdapter",
    # Control
    "VisitControl",
    "TraversalOrder",
    "TraversalState",
    "StepOutcome",
    # Matchers
    "ReferencePathMatcher",
    "MatchAllMatcher",
    "ByElementMatcher",
    "VersionAttributeMatcher",
    "ProjectCodeMatcher",
    "AndMatcher",
    "OrMatcher",
    "combine_matchers",
    # Traversal
    "ModuleReentryAvoider",
    "ReentryGranularity",
    "HierarchyTraverser",
    "NodeVisitor",
    "HierarchyTraversalConfig",
    "ReferenceTraversalConfig",
    # Execution
    "ExecContext",
    "RootManager",
    "UserInteraction",
    "ConsoleUserInteraction",
    "ScmPlugin",
    "ReferenceManagerPlugin",
    "SyncScope",
    "PropertiesStore",
    "InMemoryPropertiesStore",
    "JsonPropertiesStore",
    # Errors
    "RefGraphError",
    "UserError",
    "SynchronizationError",
    "ConfigurationError",
    "PropertiesError",
    "ToolExitStatus",
    "PolicyDecision",
    "ErrorPolicy",
    "FailFastPolicy",
    "ContinueOnErrorsPolicy",
    "ThresholdPolicy",
    "PropertyLookupPolicy",
    # Functional API
    "traverse_model",
    "traverse_reference_graph",
    "collect_matched_paths",
    "build_reference_graph",
    "list_modules",
]
