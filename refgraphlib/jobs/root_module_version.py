"""Jobs walking the reference graph from root module-versions.

RootModuleVersionJob expands the graph of module-versions reachable from
each root through the references discovered in their workspaces. Every
reference path whose leaf satisfies the job's combined matcher is handed
to visit_matched_module_version. The walk guarantees termination on cyclic
graphs and processes each module (or module-version) at most once per run.

Steps return a StepOutcome: ABORT and FATAL short-circuit the loops by
plain return values, exceptions are only converted at the seams where an
error policy decides whether the job goes on.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from ..config import ReferenceTraversalConfig
from ..context import ExecContext
from ..core.control import ABORT, CONTINUE, StepOutcome, TraversalState, VisitControl
from ..core.identity import ModuleVersion
from ..core.matcher import ProjectCodeMatcher, ReferencePathMatcher, combine_matchers
from ..core.node import ModuleNode
from ..core.reentry import ModuleReentryAvoider
from ..core.reference import ReferencePath
from ..error_policies import EXCEPTION_THROWN_WHILE_VISITING_MODULE_VERSION
from ..errors import ConfigurationError, SynchronizationError, UserError
from ..root_manager import RootManager

logger = logging.getLogger(__name__)


class RootModuleVersionJob:
    """Base class for jobs acting on the reference graph.

    Subclasses implement visit_matched_module_version and may override
    should_skip_subtree to prune parts of the graph for job-specific
    reasons. Results accumulate in actions_performed, notices and
    exceptions_thrown, all reported at the end of perform_job.

    Example:
        class PrintPaths(RootModuleVersionJob):
            def visit_matched_module_version(self, reference_path):
                print(reference_path)

        PrintPaths(context, matcher=ByElementMatcher("Domain/**")).perform_job()
    """

    def __init__(self,
                 context: ExecContext,
                 root_module_versions: Optional[Sequence[ModuleVersion]] = None,
                 config: Optional[ReferenceTraversalConfig] = None,
                 matcher: Optional[ReferencePathMatcher] = None):
        """
        Args:
            context: Execution context
            root_module_versions: Roots in processing order, the RootManager
                list of the context if None
            config: Traversal configuration
            matcher: Restriction supplied by the caller, combined with the
                project-code and global matchers
        """
        self.config = config if config is not None else ReferenceTraversalConfig()
        problems = self.config.validate()
        if problems:
            raise ConfigurationError(problems)

        self.context = context
        if root_module_versions is None:
            root_module_versions = RootManager(context).list_module_versions()
        self.root_module_versions: List[ModuleVersion] = list(root_module_versions)
        self.provided_matcher = matcher

        self.reentry_avoider = ModuleReentryAvoider(self.config.reentry_granularity)
        self.actions_performed: List[str] = []
        self.notices: List[str] = []
        self.exceptions_thrown: List[str] = []
        self.state = TraversalState.READY

        self._matcher: Optional[ReferencePathMatcher] = None
        self._skip_current_root = False

    @property
    def user_interaction(self):
        return self.context.user_interaction

    @property
    def matcher(self) -> ReferencePathMatcher:
        """Combined matcher, built on first use and kept for the job's lifetime.

        AND of the provided matcher, the project-code matcher when
        PROJECT_CODE is set, and the global matcher when enabled and not
        empty. Matches everything when none applies.
        """
        if self._matcher is None:
            project_matcher = None
            project_code = self.context.project_code
            if project_code:
                project_matcher = ProjectCodeMatcher(project_code, self.context.model)

            global_matcher = None
            if self.config.use_global_matcher:
                candidate = RootManager(self.context).get_global_matcher()
                # An empty OR matches nothing, so it only applies once populated
                if len(candidate) > 0:
                    global_matcher = candidate

            self._matcher = combine_matchers(self.provided_matcher, project_matcher, global_matcher)
            logger.debug("Combined matcher for %s: %r", type(self).__name__, self._matcher)
        return self._matcher

    # Hooks

    def before_iterate(self) -> None:
        pass

    def after_iterate(self) -> None:
        pass

    def should_skip_subtree(self, reference_path: ReferencePath) -> bool:
        """Job-level pruning evaluated on every visited path.

        Evaluated before or after the reentry check according to
        config.skip_check_before_reentry. True means the leaf is neither
        visited nor descended into.
        """
        return False

    def visit_matched_module_version(self, reference_path: ReferencePath) -> Optional[VisitControl]:
        """Act on the leaf of a matched reference path.

        Returns:
            CONTINUE (or None), SKIP_CHILDREN to stop the descent below the
            leaf, SKIP_CURRENT_BASE to abandon the current root, ABORT to
            stop the job
        """
        return VisitControl.CONTINUE

    # Driver

    def perform_job(self) -> StepOutcome:
        """Run the job over every root module-version.

        Returns:
            CONTINUE when every root was processed, ABORT when the job was
            aborted, FATAL when an exceptional condition stopped it
        """
        self.state = TraversalState.TRAVERSING
        self.before_iterate()
        outcome = self._iterate_roots()
        self.after_iterate()
        self.state = TraversalState.COMPLETED if outcome.is_continue else TraversalState.ABORTED
        return outcome

    def _iterate_roots(self) -> StepOutcome:
        ui = self.user_interaction
        ui.provide_info(f"Starting job {type(self).__name__}.")
        logger.info("Starting the iteration among the root module-versions %s", self.root_module_versions)

        outcome = CONTINUE
        for root in self.root_module_versions:
            # The abort flag may be left over from a previous execution
            if self.context.is_abort():
                ui.provide_info("Job aborted.")
                outcome = ABORT
                break

            reference_path = ReferencePath.from_root(root)
            if not self._should_visit_root(root, reference_path):
                continue

            ui.provide_info(f"Visiting root module-version {root}.")
            self._skip_current_root = False
            with ui.indent():
                step = self._visit_guarded(reference_path)

            if step.is_fatal:
                ui.provide_info(f"Job {type(self).__name__} stopped: {step.reason}")
                outcome = step
                break
            if step.is_abort or self.context.is_abort():
                ui.provide_info("Job aborted.")
                outcome = ABORT
                break

        logger.info("Iteration among the root module-versions completed with %s", outcome)
        self._report_summary()
        ui.provide_info(f"Job {type(self).__name__} completed.")
        return outcome

    def _should_visit_root(self, root: ModuleVersion, reference_path: ReferencePath) -> bool:
        ui = self.user_interaction
        if self.config.avoid_reentry and self.reentry_avoider.is_processed(root):
            ui.provide_info(f"Root module-version {root} was already processed as part of another root. Skipped.")
            return False
        if root.is_static and not self.config.handle_static_version:
            ui.provide_info(f"Root module-version {root} is static and static versions are not handled. Skipped.")
            return False
        if not self.matcher.matches(reference_path) and not self.matcher.can_match_children(reference_path):
            ui.provide_info(f"Root module-version {root} and its references cannot be matched. Skipped.")
            return False
        return True

    def _report_summary(self) -> None:
        ui = self.user_interaction
        if self.actions_performed:
            ui.provide_info("Actions performed:\n" + "\n".join(self.actions_performed))
        else:
            ui.provide_info("No actions performed.")
        if self.notices:
            ui.provide_info("Notices:\n" + "\n".join(self.notices))
        if self.exceptions_thrown:
            ui.provide_info("Exceptions thrown while visiting module-versions:\n" + "\n".join(self.exceptions_thrown))

    def _visit_guarded(self, reference_path: ReferencePath) -> StepOutcome:
        """Visit reference_path, resolving exceptions through the error policy."""
        try:
            return self.visit_module_version(reference_path)
        except SynchronizationError as e:
            logger.info("Synchronization failure while visiting %s", reference_path, exc_info=True)
            return StepOutcome.fatal(str(e))
        except Exception as e:
            decision = self.context.handle_exceptional_condition(
                e, EXCEPTION_THROWN_WHILE_VISITING_MODULE_VERSION, reference_path)
            message = (f"{decision.exit_status.name}: exception while visiting "
                       f"{reference_path.leaf_module_version}: {type(e).__name__}: {e}")
            if decision.should_continue:
                logger.info("Exception while visiting %s", reference_path, exc_info=True)
                self.exceptions_thrown.append(f"{reference_path.leaf_module_version} - {type(e).__name__}: {e}")
                self.user_interaction.provide_info(message)
                return CONTINUE
            return StepOutcome.fatal(message)

    # Traversal

    def _is_version_kind_handled(self, module_version: ModuleVersion) -> bool:
        if module_version.is_static:
            return self.config.handle_static_version
        if module_version.is_dynamic:
            return self.config.handle_dynamic_version
        return True

    def visit_module_version(self, reference_path: ReferencePath) -> StepOutcome:
        """Visit the leaf of reference_path and, recursively, its references.

        Raises:
            UserError: The leaf module does not exist in the model
            SynchronizationError: The leaf's workspace is not synchronized
        """
        module_version = reference_path.leaf_module_version
        config = self.config

        if config.skip_check_before_reentry and self.should_skip_subtree(reference_path):
            logger.info("Subtree of %s skipped by %s", reference_path, type(self).__name__)
            return CONTINUE

        if config.avoid_reentry and not self.reentry_avoider.should_process(module_version):
            logger.info("Module-version %s already processed. Reentry avoided for reference path %s",
                        module_version, reference_path)
            return CONTINUE

        if not config.skip_check_before_reentry and self.should_skip_subtree(reference_path):
            logger.info("Subtree of %s skipped by %s", reference_path, type(self).__name__)
            return CONTINUE

        # The leaf closing a cycle is still visited, never descended into
        cyclic = reference_path.is_cyclic()
        if cyclic:
            logger.info("Cycle detected on reference path %s", reference_path)
            self.notices.append(f"Cycle detected: {reference_path}")

        # A static version only references static versions: nothing below it
        # can be handled either.
        if module_version.is_static and not config.handle_static_version:
            logger.info("Module-version %s is static and is not to be handled", module_version)
            return CONTINUE

        logger.info("Visiting leaf module-version of reference path %s", reference_path)

        module = self.context.model.get_module(module_version.node_path)
        if module is None:
            raise UserError(f"Module {module_version.node_path} does not exist")

        # The workspace is only checked out once the leaf is matched or
        # descended into
        workspace = None
        kind_handled = self._is_version_kind_handled(module_version)
        visit_children = not cyclic

        if not config.is_depth_first and self._is_matched(reference_path, kind_handled):
            workspace = self._checkout_synchronized(module, module_version)
            step, descend = self._visit_matched(reference_path)
            if step.is_stop:
                return step
            visit_children = visit_children and descend

        if visit_children and not self._skip_current_root and self.matcher.can_match_children(reference_path):
            if workspace is None:
                workspace = self._checkout_synchronized(module, module_version)
            step = self._visit_references(reference_path, module, workspace)
            if step.is_stop:
                return step

        if config.is_depth_first and not self._skip_current_root and self._is_matched(reference_path, kind_handled):
            if workspace is None:
                self._checkout_synchronized(module, module_version)
            step, _ = self._visit_matched(reference_path)
            if step.is_stop:
                return step

        return CONTINUE

    def _checkout_synchronized(self, module: ModuleNode, module_version: ModuleVersion):
        """Check out the workspace of module_version.

        Raises:
            SynchronizationError: The workspace is not synchronized
        """
        scm = self.context.model.get_scm_plugin(module)
        workspace = scm.checkout_workspace(module_version.version)
        if not scm.is_synchronized(workspace, self.config.sync_scope):
            raise SynchronizationError(
                f"Workspace {workspace} of {module_version} is not synchronized ({self.config.sync_scope.value})",
                workspace)
        return workspace

    def _is_matched(self, reference_path: ReferencePath, kind_handled: bool) -> bool:
        if not kind_handled:
            logger.info("Module-version %s is %s and is not to be handled",
                        reference_path.leaf_module_version,
                        "static" if reference_path.leaf_module_version.is_static else "dynamic")
            return False
        return self.matcher.matches(reference_path)

    def _visit_matched(self, reference_path: ReferencePath) -> Tuple[StepOutcome, bool]:
        """Invoke the job on a matched reference path.

        Returns:
            (outcome, whether to descend into the references of the leaf)
        """
        if self.context.is_abort():
            return ABORT, False

        self.user_interaction.provide_info(f"Visiting matched reference path {reference_path}.")
        with self.user_interaction.indent():
            control = self.visit_matched_module_version(reference_path)

        if control is None:
            control = VisitControl.CONTINUE
        if control is VisitControl.ABORT:
            self.context.set_abort()
            return ABORT, False
        if self.context.is_abort():
            return ABORT, False
        if control is VisitControl.SKIP_CURRENT_BASE:
            self._skip_current_root = True
            return CONTINUE, False
        return CONTINUE, control is not VisitControl.SKIP_CHILDREN

    def _visit_references(self, reference_path: ReferencePath, module: ModuleNode, workspace) -> StepOutcome:
        module_version = reference_path.leaf_module_version
        reference_manager = self.context.model.get_reference_manager(module)
        references = reference_manager.list_references(workspace) if reference_manager is not None else []

        for reference in references:
            if not reference.is_resolved:
                logger.info("Reference %s within reference path %s does not resolve to a known module",
                            reference, reference_path)
                self.notices.append(
                    f"Reference {reference.implementation_data or reference} of {module_version} "
                    f"does not resolve to a known module. Skipped.")
                continue

            logger.debug("Processing reference %s within reference path %s", reference, reference_path)
            step = self._visit_guarded(reference_path.append(reference))
            if step.is_stop:
                return step
            if self.context.is_abort():
                return ABORT
            if self._skip_current_root:
                break

        return CONTINUE
