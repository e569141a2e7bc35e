"""
Error handling policies for RefGraphLib.

This module provides a flexible error handling system through the Policy pattern,
allowing callers to define how exceptional conditions met during a traversal
are handled: which exit status they contribute and whether the job goes on.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


# Exceptional conditions reported by the traversal engine
NODE_NOT_FOUND = "NODE_NOT_FOUND"
EXCEPTION_THROWN_WHILE_VISITING_NODE = "EXCEPTION_THROWN_WHILE_VISITING_NODE"
EXCEPTION_THROWN_WHILE_VISITING_MODULE_VERSION = "EXCEPTION_THROWN_WHILE_VISITING_MODULE_VERSION"

# Property name templates consulted by PropertyLookupPolicy
EXIT_STATUS_PROPERTY = "EXCEPTIONAL_COND_{}.EXIT_STATUS"
CONTINUE_PROPERTY = "EXCEPTIONAL_COND_{}.CONTINUE"


class ToolExitStatus(Enum):
    """Exit status of a tool run, ordered by severity."""
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    INDIVIDUAL_ERROR = "INDIVIDUAL_ERROR"
    ERROR = "ERROR"

    @property
    def severity(self) -> int:
        return list(ToolExitStatus).index(self)

    def is_more_severe_than(self, other: 'ToolExitStatus') -> bool:
        return self.severity > other.severity

    @classmethod
    def most_severe(cls, first: 'ToolExitStatus', second: 'ToolExitStatus') -> 'ToolExitStatus':
        return second if second.is_more_severe_than(first) else first


@dataclass(frozen=True)
class PolicyDecision:
    """How an exceptional condition affects the run."""

    exit_status: ToolExitStatus
    should_continue: bool


class ErrorPolicy(ABC):
    """
    Base class for error handling policies.

    Subclasses implement different strategies for handling the exceptional
    conditions met while visiting nodes and module-versions.
    """

    @abstractmethod
    def handle(self, error: Optional[BaseException], condition: str, subject: Any) -> PolicyDecision:
        """
        Decide how an exceptional condition affects the run.

        Args:
            error: The exception that was raised, None for conditions that are
                not caused by an exception (e.g. NODE_NOT_FOUND)
            condition: Name of the exceptional condition
            subject: The node path, node or reference path being processed

        Returns:
            The exit status to record and whether the job should continue
        """
        pass

    @staticmethod
    def _record(error: Optional[BaseException], condition: str, subject: Any) -> Dict[str, Any]:
        return {
            'subject': str(subject) if subject is not None else None,
            'condition': condition,
            'error': error,
            'error_type': type(error).__name__ if error is not None else None,
            'error_message': str(error) if error is not None else None,
        }


class FailFastPolicy(ErrorPolicy):
    """
    Policy that stops the job on any exceptional condition.

    Useful when partial results are not acceptable.
    """

    def handle(self, error: Optional[BaseException], condition: str, subject: Any) -> PolicyDecision:
        return PolicyDecision(ToolExitStatus.ERROR, False)


class ContinueOnErrorsPolicy(ErrorPolicy):
    """
    Policy that logs exceptional conditions and continues the job.

    Conditions are collected for later inspection. This is useful when you
    want to process as much as possible despite some failures.
    """

    def __init__(self, verbose: bool = True, exit_status: ToolExitStatus = ToolExitStatus.WARNING):
        """
        Initialize the policy.

        Args:
            verbose: If True, log a warning when a condition is recorded
            exit_status: Exit status contributed by each condition
        """
        self.errors: List[Dict[str, Any]] = []
        self.verbose = verbose
        self.exit_status = exit_status

    def handle(self, error: Optional[BaseException], condition: str, subject: Any) -> PolicyDecision:
        record = self._record(error, condition, subject)
        self.errors.append(record)

        if self.verbose:
            if error is None:
                logger.warning("%s for '%s'", condition, record['subject'])
            else:
                logger.warning("%s for '%s': %s", condition, record['subject'], error)

        return PolicyDecision(self.exit_status, True)

    def get_statistics(self) -> dict:
        """
        Get statistics about the conditions encountered.

        Returns:
            Dictionary with counts per condition and the full records
        """
        by_condition: Dict[str, int] = {}
        for record in self.errors:
            by_condition[record['condition']] = by_condition.get(record['condition'], 0) + 1
        return {
            'total_errors': len(self.errors),
            'by_condition': by_condition,
            'errors': self.errors  # Full error details
        }


class ThresholdPolicy(ErrorPolicy):
    """
    Policy that tolerates conditions up to a threshold, then fails fast.

    Useful when some failures are expected but too many indicate
    a systemic problem that should halt processing.
    """

    def __init__(self, max_errors: int = 10, verbose: bool = True):
        """
        Initialize threshold policy.

        Args:
            max_errors: Maximum conditions to tolerate before failing
            verbose: If True, log a warning for each condition
        """
        self.max_errors = max_errors
        self.error_count = 0
        self.verbose = verbose
        self.errors: List[Dict[str, Any]] = []

    def handle(self, error: Optional[BaseException], condition: str, subject: Any) -> PolicyDecision:
        self.error_count += 1
        self.errors.append(self._record(error, condition, subject))

        if self.error_count > self.max_errors:
            logger.error("Error threshold exceeded (%d errors)", self.max_errors)
            return PolicyDecision(ToolExitStatus.ERROR, False)

        if self.verbose:
            logger.warning("[%d/%d] %s for '%s': %s",
                           self.error_count, self.max_errors, condition, subject, error)

        return PolicyDecision(ToolExitStatus.WARNING, True)


class PropertyLookupPolicy(ErrorPolicy):
    """
    Policy resolving each condition from runtime properties.

    For a condition named COND:
        EXCEPTIONAL_COND_COND.EXIT_STATUS  exit status name, default WARNING
        EXCEPTIONAL_COND_COND.CONTINUE     "true"/"false", default: continue
                                           unless the exit status is ERROR

    This is the default policy of an ExecContext, so that a deployment can
    tune the behaviour per condition without code changes.
    """

    def __init__(self, properties, default_exit_status: ToolExitStatus = ToolExitStatus.WARNING):
        self._properties = properties
        self.default_exit_status = default_exit_status

    def lookup_exit_status(self, condition: str) -> ToolExitStatus:
        value = self._properties.get(EXIT_STATUS_PROPERTY.format(condition))
        if value is None:
            return self.default_exit_status
        try:
            return ToolExitStatus[value.strip().upper()]
        except KeyError:
            logger.warning("Ignoring invalid exit status %r for condition %s", value, condition)
            return self.default_exit_status

    def lookup_continue(self, condition: str, exit_status: ToolExitStatus) -> bool:
        default = exit_status is not ToolExitStatus.ERROR
        return self._properties.get_bool(CONTINUE_PROPERTY.format(condition), default)

    def handle(self, error: Optional[BaseException], condition: str, subject: Any) -> PolicyDecision:
        exit_status = self.lookup_exit_status(condition)
        should_continue = self.lookup_continue(condition, exit_status)
        logger.debug("Condition %s for '%s' resolved to %s (continue=%s)",
                     condition, subject, exit_status.name, should_continue)
        return PolicyDecision(exit_status, should_continue)
