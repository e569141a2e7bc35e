"""High-level API for RefGraphLib.

This module provides simple, functional interfaces for common traversals.
These functions wrap the job classes for ease of use in simple cases.
"""

from typing import Callable, List, Optional, Sequence

from .config import HierarchyTraversalConfig, ReferenceTraversalConfig
from .context import ExecContext
from .core.control import StepOutcome, TraversalOrder, VisitControl
from .core.hierarchy import HierarchyTraverser
from .core.identity import ModuleVersion, NodePath
from .core.matcher import ReferencePathMatcher
from .core.node import ClassificationNode, ModuleNode, NodeType
from .core.reference import ReferencePath
from .jobs.model_visitor import CallbackModelVisitorJob
from .jobs.reference_graph import BuildReferenceGraph, ReferenceGraph
from .jobs.root_module_version import RootModuleVersionJob


def traverse_model(
    context: ExecContext,
    on_module: Optional[Callable[[ModuleNode], Optional[VisitControl]]] = None,
    on_classification_node: Optional[Callable[[ClassificationNode], Optional[VisitControl]]] = None,
    base_node_paths: Optional[Sequence[NodePath]] = None,
    node_type_filter: Optional[NodeType] = None,
    depth_first: bool = False,
) -> StepOutcome:
    """Simple interface for classification-tree traversal.

    Args:
        context: Execution context
        on_module: Called for every module
        on_classification_node: Called for every classification node
        base_node_paths: Where to start, the root if None
        node_type_filter: Only visit nodes of this type
        depth_first: Visit classification nodes after their children

    Returns:
        Outcome of the job

    Example:
        >>> traverse_model(context, on_module=lambda m: print(m.node_path))
    """
    config = HierarchyTraversalConfig(
        order=TraversalOrder.DEPTH_FIRST if depth_first else TraversalOrder.PARENT_FIRST,
        node_type_filter=node_type_filter,
    )
    job = CallbackModelVisitorJob(
        context,
        on_module=on_module,
        on_classification_node=on_classification_node,
        base_node_paths=base_node_paths,
        config=config,
    )
    return job.perform_job()


class _CallbackRootModuleVersionJob(RootModuleVersionJob):

    def __init__(self, context, visit, roots, config, matcher):
        super().__init__(context, roots, config, matcher)
        self._visit = visit

    def visit_matched_module_version(self, reference_path: ReferencePath) -> Optional[VisitControl]:
        return self._visit(reference_path)


def traverse_reference_graph(
    context: ExecContext,
    visit: Callable[[ReferencePath], Optional[VisitControl]],
    roots: Optional[Sequence[ModuleVersion]] = None,
    matcher: Optional[ReferencePathMatcher] = None,
    config: Optional[ReferenceTraversalConfig] = None,
) -> StepOutcome:
    """Call visit for every matched reference path.

    Args:
        context: Execution context
        visit: Receives each matched ReferencePath, returns a VisitControl
            or None
        roots: Root module-versions, the RootManager list if None
        matcher: Restriction on the paths visited
        config: Traversal configuration

    Returns:
        Outcome of the job

    Example:
        >>> traverse_reference_graph(context, print, roots=[ModuleVersion.parse("App/web:D/develop")])
    """
    job = _CallbackRootModuleVersionJob(context, visit, roots, config, matcher)
    return job.perform_job()


def collect_matched_paths(
    context: ExecContext,
    roots: Optional[Sequence[ModuleVersion]] = None,
    matcher: Optional[ReferencePathMatcher] = None,
    config: Optional[ReferenceTraversalConfig] = None,
) -> List[ReferencePath]:
    """Return the matched reference paths in visit order."""
    paths: List[ReferencePath] = []
    traverse_reference_graph(context, paths.append, roots, matcher, config)
    return paths


def build_reference_graph(
    context: ExecContext,
    roots: Optional[Sequence[ModuleVersion]] = None,
    matcher: Optional[ReferencePathMatcher] = None,
) -> ReferenceGraph:
    """Build the ReferenceGraph of every matched path from roots."""
    job = BuildReferenceGraph(context, roots, matcher=matcher)
    job.perform_job()
    return job.reference_graph


def list_modules(context: ExecContext, base_node_path: NodePath = NodePath.ROOT) -> List[ModuleNode]:
    """List the modules below a classification node, in declaration order.

    Returns an empty list when base_node_path does not resolve.
    """
    model = context.model
    base = model.get_node(base_node_path)
    if base is None:
        return []
    traverser = HierarchyTraverser(model)
    return [node for node, _ in traverser.iter_nodes(base) if node.node_type is NodeType.MODULE]
