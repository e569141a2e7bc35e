"""Node abstraction for the static classification tree.

Nodes are intentionally kept simple - they are data containers. Navigation
and lookups (children, parents, plugins, version attributes) are delegated
to the ModelAdapter, which lets the same traversal code run against any
model source: an in-memory tree, a configuration file, a remote service.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

from .identity import NodePath


class NodeType(Enum):
    """Kind of a node in the classification tree."""
    CLASSIFICATION = "classification"   # Interior node grouping other nodes
    MODULE = "module"                   # Leaf node, one versionable source artifact


class Node(ABC):
    """Abstract base class for nodes of the classification tree.

    This class defines the minimal interface every node implements. The
    NodePath is the node's identity: it must be unique within the model and
    stable across traversals.
    """

    def __init__(self, node_path: NodePath, properties: Optional[Dict[str, Any]] = None):
        self._node_path = node_path
        self._properties = dict(properties or {})

    @property
    @abstractmethod
    def node_type(self) -> NodeType:
        """Return the NodeType used to dispatch visits."""
        pass

    @property
    def node_path(self) -> NodePath:
        return self._node_path

    @property
    def name(self) -> Optional[str]:
        return self._node_path.name

    @property
    def properties(self) -> Dict[str, Any]:
        """Free-form node configuration (read-only copy)."""
        return dict(self._properties)

    def identifier(self) -> str:
        """Return the unique identifier for this node (its NodePath string)."""
        return str(self._node_path)

    def is_leaf(self) -> bool:
        return self.node_type is NodeType.MODULE

    def __str__(self) -> str:
        """String representation defaults to identifier."""
        return self.identifier()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.identifier()!r})"

    def __eq__(self, other: object) -> bool:
        """Nodes are equal if they have the same identifier."""
        if not isinstance(other, Node):
            return NotImplemented
        return self.identifier() == other.identifier()

    def __hash__(self) -> int:
        return hash(self.identifier())


class ClassificationNode(Node):
    """Interior node. Children are kept in declaration order."""

    def __init__(self, node_path: NodePath, children: Optional[List[Node]] = None,
                 properties: Optional[Dict[str, Any]] = None):
        if node_path.is_complete:
            raise ValueError(f"ClassificationNode requires a partial NodePath, got {node_path}")
        super().__init__(node_path, properties)
        self._children: List[Node] = list(children or [])

    @property
    def node_type(self) -> NodeType:
        return NodeType.CLASSIFICATION

    @property
    def children(self) -> List[Node]:
        return list(self._children)

    def add_child(self, child: Node) -> None:
        """Append a child node.

        Raises:
            ValueError: If the child's path is not directly under this node
                or a child with the same name already exists
        """
        if child.node_path.parent != self.node_path:
            raise ValueError(f"{child.node_path} is not a direct child of {self.node_path}")
        if any(existing.name == child.name for existing in self._children):
            raise ValueError(f"Duplicate child {child.name!r} under {self.node_path}")
        self._children.append(child)


class ModuleNode(Node):
    """Leaf node representing one module."""

    def __init__(self, node_path: NodePath, properties: Optional[Dict[str, Any]] = None):
        if node_path.is_partial:
            raise ValueError(f"ModuleNode requires a complete NodePath, got {node_path}")
        super().__init__(node_path, properties)

    @property
    def node_type(self) -> NodeType:
        return NodeType.MODULE
