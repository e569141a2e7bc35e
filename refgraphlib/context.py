"""Execution context shared by the jobs of one tool execution.

An ExecContext is passed explicitly to every job: it holds the model, the
runtime properties, the user interaction sink, the error policy and the
per-execution state (abort flag, exit status, transient caches).
"""

import logging
from typing import Any, Dict, Optional

from .core.adapter import ModelAdapter
from .error_policies import ErrorPolicy, PolicyDecision, PropertyLookupPolicy, ToolExitStatus
from .interaction import ConsoleUserInteraction, UserInteraction
from .properties import InMemoryPropertiesStore, PropertiesStore

logger = logging.getLogger(__name__)

# Well-known runtime properties
PROJECT_CODE = "PROJECT_CODE"
ABORT = "ABORT"
IND_NO_CONFIRM = "IND_NO_CONFIRM"


class ExecContext:
    """State and collaborators of one tool execution.

    Example:
        context = ExecContext(model, properties=JsonPropertiesStore(path))
        job = RootModuleVersionJob(context)
    """

    def __init__(self,
                 model: ModelAdapter,
                 properties: Optional[PropertiesStore] = None,
                 user_interaction: Optional[UserInteraction] = None,
                 error_policy: Optional[ErrorPolicy] = None):
        """
        Args:
            model: Adapter over the classification-tree model
            properties: Runtime properties (in-memory store if None)
            user_interaction: Message sink (console if None)
            error_policy: Policy for exceptional conditions (property
                lookup if None)
        """
        self.model = model
        self.properties = properties if properties is not None else InMemoryPropertiesStore()
        self.user_interaction = user_interaction if user_interaction is not None else ConsoleUserInteraction()
        self.error_policy = error_policy if error_policy is not None else PropertyLookupPolicy(self.properties)
        self.transient: Dict[str, Any] = {}
        self._exit_status = ToolExitStatus.SUCCESS

    @property
    def project_code(self) -> Optional[str]:
        return self.properties.get(PROJECT_CODE)

    # Abort flag, persisted so that a later execution can see it

    def is_abort(self) -> bool:
        return self.properties.get_bool(ABORT, False)

    def set_abort(self) -> None:
        logger.info("Abort requested")
        self.properties.set(ABORT, "true")

    def clear_abort(self) -> None:
        self.properties.remove(ABORT)

    # Exit status

    @property
    def exit_status(self) -> ToolExitStatus:
        return self._exit_status

    def record_exit_status(self, status: ToolExitStatus) -> None:
        """Keep the most severe status seen."""
        self._exit_status = ToolExitStatus.most_severe(self._exit_status, status)

    def handle_exceptional_condition(self, error: Optional[BaseException], condition: str,
                                     subject: Any) -> PolicyDecision:
        """Resolve an exceptional condition through the error policy.

        The resulting exit status is recorded.
        """
        decision = self.error_policy.handle(error, condition, subject)
        self.record_exit_status(decision.exit_status)
        logger.debug("Exceptional condition %s on %s: %s", condition, subject, decision)
        return decision

    def confirm(self, context_name: str, prompt: str) -> bool:
        """Ask the user whether to go on.

        Confirmation is bypassed when IND_NO_CONFIRM or
        IND_NO_CONFIRM.<context_name> is true. A "no" answer sets the
        abort flag.

        Returns:
            True to proceed
        """
        if self.properties.get_bool(IND_NO_CONFIRM, False):
            return True
        if self.properties.get_bool(f"{IND_NO_CONFIRM}.{context_name}", False):
            return True
        if self.user_interaction.ask_yes_no(prompt):
            return True
        self.set_abort()
        return False
