"""Jobs visiting the classification tree.

A ModelVisitorJob walks the classification tree from a list of base node
paths and calls visit_classification_node / visit_module on each node.
Failures of those callbacks are resolved per node through the context's
error policy, so one bad module does not necessarily stop the job.
"""

import logging
from typing import Callable, List, Optional, Sequence

from ..config import HierarchyTraversalConfig
from ..context import ExecContext
from ..core.control import ABORT, CONTINUE, StepOutcome, TraversalState, VisitControl
from ..core.hierarchy import HierarchyTraverser, NodeVisitor
from ..core.identity import NodePath
from ..core.node import ClassificationNode, ModuleNode, Node
from ..error_policies import EXCEPTION_THROWN_WHILE_VISITING_NODE, NODE_NOT_FOUND
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


class ModelVisitorJob:
    """Base class for jobs visiting nodes of the classification tree.

    Subclasses override visit_classification_node and/or visit_module and
    usually set node_type_filter in their config to the type they handle.
    Both hooks return a VisitControl; None is taken as CONTINUE.

    Example:
        class ListModules(ModelVisitorJob):
            def visit_module(self, module):
                self.actions_performed.append(str(module.node_path))

        ListModules(context, config=HierarchyTraversalConfig.modules_only()).perform_job()
    """

    def __init__(self,
                 context: ExecContext,
                 base_node_paths: Optional[Sequence[NodePath]] = None,
                 config: Optional[HierarchyTraversalConfig] = None):
        self.config = config if config is not None else HierarchyTraversalConfig()
        problems = self.config.validate()
        if problems:
            raise ConfigurationError(problems)

        self.context = context
        self.base_node_paths: List[NodePath] = (
            list(base_node_paths) if base_node_paths is not None else [NodePath.ROOT]
        )
        self.actions_performed: List[str] = []
        self.state = TraversalState.READY

        self._traverser = HierarchyTraverser(context.model)
        self._fatal: Optional[StepOutcome] = None

    @property
    def user_interaction(self):
        return self.context.user_interaction

    # Hooks

    def before_iterate(self) -> None:
        pass

    def after_iterate(self) -> None:
        pass

    def visit_classification_node(self, node: ClassificationNode) -> Optional[VisitControl]:
        return VisitControl.CONTINUE

    def visit_module(self, module: ModuleNode) -> Optional[VisitControl]:
        return VisitControl.CONTINUE

    # Driver

    def perform_job(self) -> StepOutcome:
        """Run the job over every base node path.

        Returns:
            CONTINUE when all base paths were processed, ABORT when the
            abort flag stopped the job, FATAL when an exceptional condition
            was resolved as "do not continue"
        """
        self.state = TraversalState.TRAVERSING
        self._fatal = None
        self.before_iterate()
        outcome = self._iterate_base_node_paths()
        self.after_iterate()
        self.state = TraversalState.COMPLETED if outcome.is_continue else TraversalState.ABORTED
        return outcome

    def _iterate_base_node_paths(self) -> StepOutcome:
        ui = self.user_interaction
        ui.provide_info(f"Starting job {type(self).__name__}.")
        logger.info("Starting the iteration among the base node paths %s", self.base_node_paths)

        outcome = CONTINUE
        for base_node_path in self.base_node_paths:
            if self.context.is_abort():
                ui.provide_info("Job aborted.")
                outcome = ABORT
                break
            ui.provide_info(f"Initiating traversal of base node path {base_node_path}.")
            with ui.indent():
                step = self._visit_base_node_path(base_node_path)
            if step.is_fatal:
                ui.provide_info(f"Job {type(self).__name__} stopped: {step.reason}")
                return step
            ui.provide_info(f"Traversal of base node path {base_node_path} completed.")
            if self.context.is_abort():
                ui.provide_info("Job aborted.")
                outcome = ABORT
                break

        logger.info("Iteration among the base node paths %s completed", self.base_node_paths)
        self._report_actions()
        ui.provide_info(f"Job {type(self).__name__} completed.")
        return outcome

    def _report_actions(self) -> None:
        if self.actions_performed:
            self.user_interaction.provide_info("Actions performed:\n" + "\n".join(self.actions_performed))
        else:
            self.user_interaction.provide_info("No actions performed.")

    def _visit_base_node_path(self, base_node_path: NodePath) -> StepOutcome:
        model = self.context.model
        node: Optional[Node]
        if base_node_path.is_partial:
            node = model.get_classification_node(base_node_path)
        else:
            node = model.get_module(base_node_path)

        if node is None:
            return self._node_not_found(base_node_path)

        visitor = NodeVisitor(
            on_classification_node=self._guard(self.visit_classification_node),
            on_module=self._guard(self.visit_module),
        )
        self._traverser.traverse(node, visitor, self.config.node_type_filter, self.config.order)

        if self._fatal is not None:
            return self._fatal
        return CONTINUE

    def _node_not_found(self, base_node_path: NodePath) -> StepOutcome:
        decision = self.context.handle_exceptional_condition(None, NODE_NOT_FOUND, base_node_path)
        message = f"{decision.exit_status.name}: node {base_node_path} not found."
        if decision.should_continue:
            self.user_interaction.provide_info(message)
            return CONTINUE
        return StepOutcome.fatal(message)

    def _guard(self, callback: Callable[[Node], Optional[VisitControl]]) -> Callable[[Node], VisitControl]:
        """Wrap a visit hook with per-node failure handling and abort tracking."""

        def guarded(node: Node) -> VisitControl:
            if self.context.is_abort():
                return VisitControl.ABORT
            try:
                control = callback(node)
            except Exception as e:
                decision = self.context.handle_exceptional_condition(
                    e, EXCEPTION_THROWN_WHILE_VISITING_NODE, node.node_path)
                message = f"{decision.exit_status.name}: exception while visiting {node.node_path}: {e}"
                if decision.should_continue:
                    logger.info("Exception while visiting %s", node.node_path, exc_info=True)
                    self.user_interaction.provide_info(message)
                    return VisitControl.CONTINUE
                self._fatal = StepOutcome.fatal(message)
                return VisitControl.ABORT

            if control is None:
                control = VisitControl.CONTINUE
            if control is VisitControl.ABORT:
                self.context.set_abort()
            return control

        return guarded


class CallbackModelVisitorJob(ModelVisitorJob):
    """ModelVisitorJob driven by plain callables.

    A missing callable leaves the corresponding node type unvisited.
    """

    def __init__(self,
                 context: ExecContext,
                 on_module: Optional[Callable[[ModuleNode], Optional[VisitControl]]] = None,
                 on_classification_node: Optional[Callable[[ClassificationNode], Optional[VisitControl]]] = None,
                 base_node_paths: Optional[Sequence[NodePath]] = None,
                 config: Optional[HierarchyTraversalConfig] = None):
        super().__init__(context, base_node_paths, config)
        self._on_module = on_module
        self._on_classification_node = on_classification_node

    def visit_classification_node(self, node: ClassificationNode) -> Optional[VisitControl]:
        if self._on_classification_node is None:
            return VisitControl.CONTINUE
        return self._on_classification_node(node)

    def visit_module(self, module: ModuleNode) -> Optional[VisitControl]:
        if self._on_module is None:
            return VisitControl.CONTINUE
        return self._on_module(module)


__all__ = [
    'ModelVisitorJob',
    'CallbackModelVisitorJob',
]
