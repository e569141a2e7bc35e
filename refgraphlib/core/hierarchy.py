"""Traversal of the static classification tree.

The HierarchyTraverser walks classification nodes and modules through a
ModelAdapter, in parent-first (pre-order) or depth-first (post-order)
order, and hands each node to a NodeVisitor. Visits are dispatched on the
node's NodeType to one of two explicit callback slots.
"""

import logging
from typing import Callable, Dict, Iterator, Optional, Tuple

from .adapter import ModelAdapter
from .control import TraversalOrder, VisitControl
from .node import ClassificationNode, Node, NodeType

logger = logging.getLogger(__name__)

NodeCallback = Callable[[Node], Optional[VisitControl]]


class NodeVisitor:
    """Pair of callbacks, one per NodeType.

    A callback returning None is treated as VisitControl.CONTINUE. A
    missing callback means nodes of that type are traversed through but
    never visited.

    Example:
        visitor = NodeVisitor(on_module=lambda module: print(module))
    """

    def __init__(self,
                 on_classification_node: Optional[NodeCallback] = None,
                 on_module: Optional[NodeCallback] = None):
        self._handlers: Dict[NodeType, Optional[NodeCallback]] = {
            NodeType.CLASSIFICATION: on_classification_node,
            NodeType.MODULE: on_module,
        }

    def handles(self, node_type: NodeType) -> bool:
        return self._handlers.get(node_type) is not None

    def visit(self, node: Node) -> VisitControl:
        handler = self._handlers.get(node.node_type)
        if handler is None:
            return VisitControl.CONTINUE
        result = handler(node)
        return VisitControl.CONTINUE if result is None else result


class HierarchyTraverser:
    """Depth-first walker over the classification tree.

    Works with any ModelAdapter. Children are visited in declaration order.
    """

    def __init__(self, adapter: ModelAdapter):
        """Initialize traverser with an adapter.

        Args:
            adapter: ModelAdapter for navigating the tree
        """
        self.adapter = adapter

    @staticmethod
    def _accepts(node_type: NodeType, node_type_filter: Optional[NodeType]) -> bool:
        return node_type_filter is None or node_type_filter is node_type

    def traverse(self,
                 base: Node,
                 visitor: NodeVisitor,
                 node_type_filter: Optional[NodeType] = None,
                 order: TraversalOrder = TraversalOrder.PARENT_FIRST) -> VisitControl:
        """Visit base and, for a classification node, its whole subtree.

        Args:
            base: Node to start from
            visitor: Callbacks to invoke
            node_type_filter: Only visit nodes of this type (None = all).
                Filtered-out classification nodes are still traversed.
            order: PARENT_FIRST visits a classification node before its
                children, DEPTH_FIRST after them

        Returns:
            ABORT if a callback aborted, SKIP_CURRENT_BASE if a callback
            abandoned the base, CONTINUE otherwise
        """
        if base.node_type is NodeType.MODULE:
            if not self._accepts(NodeType.MODULE, node_type_filter):
                return VisitControl.CONTINUE
            control = visitor.visit(base)
            if control is VisitControl.SKIP_CHILDREN:
                return VisitControl.CONTINUE
            return control
        depth_first = order is TraversalOrder.DEPTH_FIRST
        return self._traverse_classification(base, visitor, node_type_filter, depth_first)

    def _traverse_classification(self,
                                 node: ClassificationNode,
                                 visitor: NodeVisitor,
                                 node_type_filter: Optional[NodeType],
                                 depth_first: bool) -> VisitControl:
        visit_self = self._accepts(NodeType.CLASSIFICATION, node_type_filter)

        # Visit parent first (pre-order)
        if not depth_first and visit_self:
            control = visitor.visit(node)
            if control is VisitControl.SKIP_CHILDREN:
                logger.debug("Children of %s skipped by visitor", node)
                return VisitControl.CONTINUE
            if control is not VisitControl.CONTINUE:
                return control

        for child in self.adapter.get_children(node):
            if child.node_type is NodeType.CLASSIFICATION:
                control = self._traverse_classification(child, visitor, node_type_filter, depth_first)
            elif self._accepts(NodeType.MODULE, node_type_filter):
                control = visitor.visit(child)
                if control is VisitControl.SKIP_CHILDREN:
                    control = VisitControl.CONTINUE
            else:
                continue
            if control is not VisitControl.CONTINUE:
                return control

        # Then the parent (post-order), children are already done so
        # SKIP_CHILDREN has nothing left to skip
        if depth_first and visit_self:
            control = visitor.visit(node)
            if control is VisitControl.SKIP_CHILDREN:
                return VisitControl.CONTINUE
            return control

        return VisitControl.CONTINUE

    def iter_nodes(self, base: Node,
                   order: TraversalOrder = TraversalOrder.PARENT_FIRST) -> Iterator[Tuple[Node, int]]:
        """Yield (node, depth) for base and its subtree, depth relative to base.

        Read-only counterpart of traverse() for callers that just want to
        enumerate nodes.
        """
        depth_first = order is TraversalOrder.DEPTH_FIRST

        def _recursive(node: Node, depth: int) -> Iterator[Tuple[Node, int]]:
            if not depth_first:
                yield (node, depth)
            if node.node_type is NodeType.CLASSIFICATION:
                for child in self.adapter.get_children(node):
                    yield from _recursive(child, depth + 1)
            if depth_first:
                yield (node, depth)

        yield from _recursive(base, 0)
