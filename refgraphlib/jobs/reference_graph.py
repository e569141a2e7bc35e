"""In-memory reference graph and the job building it."""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence

from ..config import ReferenceTraversalConfig
from ..context import ExecContext
from ..core.control import VisitControl
from ..core.identity import ModuleVersion, NodePath
from ..core.matcher import ReferencePathMatcher
from ..core.reentry import ModuleReentryAvoider
from ..core.reference import Reference, ReferencePath
from .root_module_version import RootModuleVersionJob

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Referrer:
    """A module-version referring to another through reference."""

    module_version: ModuleVersion
    reference: Reference


class _GraphNode:

    __slots__ = ("module_version", "referrers", "references")

    def __init__(self, module_version: ModuleVersion):
        self.module_version = module_version
        self.referrers: List[Referrer] = []
        self.references: List[Reference] = []


class ReferenceGraph:
    """Module-versions and the references between them.

    Insertion order is preserved everywhere: roots, matched module-versions
    and the edges of each node come back in the order they were recorded.
    """

    def __init__(self):
        self._nodes: Dict[ModuleVersion, _GraphNode] = {}
        self._roots: Dict[ModuleVersion, None] = {}
        self._matched: Dict[ModuleVersion, None] = {}

    def _node(self, module_version: ModuleVersion) -> _GraphNode:
        node = self._nodes.get(module_version)
        if node is None:
            node = _GraphNode(module_version)
            self._nodes[module_version] = node
        return node

    def _existing_node(self, module_version: ModuleVersion) -> _GraphNode:
        try:
            return self._nodes[module_version]
        except KeyError:
            raise KeyError(f"Module-version {module_version} not in reference graph") from None

    # Building

    def add_root_module_version(self, module_version: ModuleVersion) -> None:
        self._node(module_version)
        self._roots[module_version] = None

    def add_reference(self, referrer: ModuleVersion, reference: Reference) -> None:
        """Record the edge referrer -> reference.module_version, once."""
        referrer_node = self._node(referrer)
        if reference not in referrer_node.references:
            referrer_node.references.append(reference)
        target_node = self._node(reference.module_version)
        entry = Referrer(referrer, reference)
        if entry not in target_node.referrers:
            target_node.referrers.append(entry)

    def add_matched_reference_path(self, reference_path: ReferencePath) -> None:
        """Record every edge of reference_path and mark its leaf as matched."""
        self.add_root_module_version(reference_path.root_module_version)
        previous = reference_path.root_module_version
        for reference in reference_path.references[1:]:
            self.add_reference(previous, reference)
            previous = reference.module_version
        self._matched[reference_path.leaf_module_version] = None

    # Queries

    def module_version_exists(self, module_version: ModuleVersion) -> bool:
        return module_version in self._nodes

    def root_module_versions(self) -> List[ModuleVersion]:
        return list(self._roots)

    def is_root(self, module_version: ModuleVersion) -> bool:
        return module_version in self._roots

    def matched_module_versions(self) -> List[ModuleVersion]:
        return list(self._matched)

    def is_matched(self, module_version: ModuleVersion) -> bool:
        return module_version in self._matched

    def module_versions(self, node_path: Optional[NodePath] = None) -> List[ModuleVersion]:
        """All module-versions, or those of the module at node_path."""
        if node_path is None:
            return list(self._nodes)
        return [mv for mv in self._nodes if mv.node_path == node_path]

    def referrers(self, module_version: ModuleVersion) -> List[Referrer]:
        """Raises KeyError when module_version is not in the graph."""
        return list(self._existing_node(module_version).referrers)

    def references(self, module_version: ModuleVersion) -> List[Reference]:
        """Raises KeyError when module_version is not in the graph."""
        return list(self._existing_node(module_version).references)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, module_version: ModuleVersion) -> bool:
        return self.module_version_exists(module_version)


class BuildReferenceGraph(RootModuleVersionJob):
    """Record every matched reference path in a ReferenceGraph.

    Generic reentry avoidance is disabled so that every edge leading to an
    already known module-version is still recorded; the subtree below a
    module-version is expanded only the first time it is matched.
    """

    def __init__(self,
                 context: ExecContext,
                 root_module_versions: Optional[Sequence[ModuleVersion]] = None,
                 config: Optional[ReferenceTraversalConfig] = None,
                 matcher: Optional[ReferencePathMatcher] = None,
                 reference_graph: Optional[ReferenceGraph] = None):
        config = replace(config if config is not None else ReferenceTraversalConfig(), avoid_reentry=False)
        super().__init__(context, root_module_versions, config, matcher)
        self.reference_graph = reference_graph if reference_graph is not None else ReferenceGraph()
        self._expanded = ModuleReentryAvoider(self.config.reentry_granularity)

    def visit_matched_module_version(self, reference_path: ReferencePath) -> Optional[VisitControl]:
        self.reference_graph.add_matched_reference_path(reference_path)
        if self._expanded.should_process(reference_path.leaf_module_version):
            return VisitControl.CONTINUE
        logger.debug("Module-version %s already expanded", reference_path.leaf_module_version)
        return VisitControl.SKIP_CHILDREN
