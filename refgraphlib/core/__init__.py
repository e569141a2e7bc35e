"""Core abstractions for RefGraphLib.

Identity values, the node/adapter split for the classification tree,
reference paths, matchers, reentry avoidance and control signals.
"""

from .identity import NodePath, Version, VersionType, ModuleVersion
from .reference import Reference, ReferencePath
from .node import Node, NodeType, ClassificationNode, ModuleNode
from .adapter import ModelAdapter
from .control import (
    VisitControl, TraversalOrder, TraversalState, OutcomeKind, StepOutcome, CONTINUE, ABORT,
)
from .matcher import (
    ReferencePathMatcher,
    MatchAllMatcher,
    ByElementMatcher,
    VersionAttributeMatcher,
    ProjectCodeMatcher,
    AndMatcher,
    OrMatcher,
    combine_matchers,
)
from .reentry import ModuleReentryAvoider, ReentryGranularity
from .hierarchy import HierarchyTraverser, NodeVisitor

__all__ = [
    "NodePath",
    "Version",
    "VersionType",
    "ModuleVersion",
    "Reference",
    "ReferencePath",
    "Node",
    "NodeType",
    "ClassificationNode",
    "ModuleNode",
    "ModelAdapter",
    "VisitControl",
    "TraversalOrder",
    "TraversalState",
    "OutcomeKind",
    "StepOutcome",
    "CONTINUE",
    "ABORT",
    "ReferencePathMatcher",
    "MatchAllMatcher",
    "ByElementMatcher",
    "VersionAttributeMatcher",
    "ProjectCodeMatcher",
    "AndMatcher",
    "OrMatcher",
    "combine_matchers",
    "ModuleReentryAvoider",
    "ReentryGranularity",
    "HierarchyTraverser",
    "NodeVisitor",
]
