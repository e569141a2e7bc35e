"""ModelAdapter abstraction for RefGraphLib.

The ModelAdapter is what makes the traversal code independent of where the
model comes from. It resolves NodePaths to Nodes, enumerates children, and
exposes the per-module plugins and version attributes the reference-graph
traversal needs.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, Iterator, Optional

from .identity import ModuleVersion, NodePath
from .node import ClassificationNode, ModuleNode, Node, NodeType

if TYPE_CHECKING:
    from ..plugins import ReferenceManagerPlugin, ScmPlugin


class ModelAdapter(ABC):
    """Abstract adapter over a classification-tree model.

    Only get_node, get_children, get_version_attributes and the plugin
    accessors are required. Everything else has a default implementation
    built on top of them that adapters can override when they can do better.
    """

    @abstractmethod
    def get_node(self, node_path: NodePath) -> Optional[Node]:
        """Resolve a NodePath.

        Args:
            node_path: Partial path for a classification node, complete
                path for a module

        Returns:
            The Node, or None if the model has no such node
        """
        pass

    @abstractmethod
    def get_children(self, node: ClassificationNode) -> Iterator[Node]:
        """Iterate over the children of a classification node in declaration order."""
        pass

    @abstractmethod
    def get_version_attributes(self, module_version: ModuleVersion) -> Dict[str, str]:
        """Return the attributes attached to a version of a module.

        Returns an empty dict when the version carries no attributes.
        """
        pass

    @abstractmethod
    def get_scm_plugin(self, module: ModuleNode) -> 'ScmPlugin':
        pass

    def get_reference_manager(self, module: ModuleNode) -> Optional['ReferenceManagerPlugin']:
        """Return the module's reference manager, None if it declares no
        dependency-manager capability."""
        return None

    def get_parent(self, node: Node) -> Optional[ClassificationNode]:
        """Get the parent classification node, None for the root."""
        parent_path = node.node_path.parent
        if parent_path is None:
            return None
        return self.get_classification_node(parent_path)

    def get_root(self) -> Optional[ClassificationNode]:
        return self.get_classification_node(NodePath.ROOT)

    def get_classification_node(self, node_path: NodePath) -> Optional[ClassificationNode]:
        node = self.get_node(node_path)
        if node is None or node.node_type is not NodeType.CLASSIFICATION:
            return None
        return node

    def get_module(self, node_path: NodePath) -> Optional[ModuleNode]:
        node = self.get_node(node_path)
        if node is None or node.node_type is not NodeType.MODULE:
            return None
        return node

    def module_exists(self, node_path: NodePath) -> bool:
        return self.get_module(node_path) is not None

    def get_depth(self, node: Node) -> int:
        """Depth of a node where root = 0."""
        return len(node.node_path.segments)
