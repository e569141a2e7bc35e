"""Control signals exchanged between traversals and visit callbacks.

Callbacks answer with a VisitControl. Traversal steps answer with a
StepOutcome, which is propagated by plain return values: an abort or a fatal
failure short-circuits the outer loops without unwinding the stack through
exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class VisitControl(Enum):
    """What a visit callback wants the traversal to do next."""
    CONTINUE = "continue"                   # Proceed normally
    SKIP_CHILDREN = "skip_children"         # Do not descend below the visited node
    SKIP_CURRENT_BASE = "skip_current_base" # Abandon the current base path only
    ABORT = "abort"                         # Stop the whole job


class TraversalOrder(Enum):
    """When a node is visited relative to its children."""
    PARENT_FIRST = "parent_first"   # Pre-order
    DEPTH_FIRST = "depth_first"     # Post-order


class TraversalState(Enum):
    """Lifecycle of a traversal run."""
    READY = "ready"
    TRAVERSING = "traversing"
    COMPLETED = "completed"
    ABORTED = "aborted"


class OutcomeKind(Enum):
    CONTINUE = "continue"
    ABORT = "abort"
    FATAL = "fatal"


@dataclass(frozen=True)
class StepOutcome:
    """Result of one traversal step.

    Use the module-level CONTINUE and ABORT constants and StepOutcome.fatal()
    rather than building instances directly.
    """

    kind: OutcomeKind
    reason: Optional[str] = None

    @classmethod
    def fatal(cls, reason: str) -> 'StepOutcome':
        return cls(OutcomeKind.FATAL, reason)

    @property
    def is_continue(self) -> bool:
        return self.kind is OutcomeKind.CONTINUE

    @property
    def is_abort(self) -> bool:
        return self.kind is OutcomeKind.ABORT

    @property
    def is_fatal(self) -> bool:
        return self.kind is OutcomeKind.FATAL

    @property
    def is_stop(self) -> bool:
        """True for ABORT and FATAL, i.e. outer loops must stop."""
        return self.kind is not OutcomeKind.CONTINUE

    def __str__(self) -> str:
        if self.reason:
            return f"{self.kind.value.upper()}({self.reason})"
        return self.kind.value.upper()


CONTINUE = StepOutcome(OutcomeKind.CONTINUE)
ABORT = StepOutcome(OutcomeKind.ABORT)
