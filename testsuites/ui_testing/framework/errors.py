"""
================================================================================
Automation Errors
================================================================================

Error taxonomy for the interaction layer. Every error is terminal for the
current flow and carries enough context to diagnose without re-running.

    AutomationError
      ├── ResolutionError      (NOT_FOUND | AMBIGUOUS | TIMEOUT)
      ├── ActionError          (NOT_ACTIONABLE | FAILED)
      ├── GateTimeoutError
      ├── FlowError            (step_index + cause)
      ├── MissingParameterError
      ├── TemplateError
      └── SessionStateError
            ├── SessionBusyError
            └── FlowStateError

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Sequence

if TYPE_CHECKING:
    from .descriptors import ElementDescriptor, Strategy


class AutomationError(Exception):
    """Base class for all interaction layer failures."""
    pass


class ResolutionErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"
    TIMEOUT = "timeout"


class ResolutionError(AutomationError):
    """Raised when no strategy of a descriptor yields a usable element."""

    def __init__(
        self,
        kind: ResolutionErrorKind,
        descriptor: "ElementDescriptor",
        tried: Sequence[str],
        last_attempted: Optional["Strategy"] = None,
    ):
        self.kind = kind
        self.descriptor = descriptor
        self.tried = list(tried)
        self.last_attempted = last_attempted
        super().__init__(
            f"Could not resolve '{descriptor.display_name}' ({kind.value}). "
            f"Tried: {', '.join(self.tried) or '<none>'}"
        )


class ActionErrorKind(str, Enum):
    NOT_ACTIONABLE = "not_actionable"
    FAILED = "failed"


class ActionError(AutomationError):
    """Raised when an action cannot be applied to a resolved element."""

    def __init__(
        self,
        kind: ActionErrorKind,
        reason: str,
        action: str,
        target: str,
        last_attempted: Optional["Strategy"] = None,
    ):
        self.kind = kind
        self.reason = reason
        self.action = action
        self.target = target
        self.last_attempted = last_attempted
        super().__init__(f"Cannot {action} '{target}': {reason}")


class GateTimeoutError(AutomationError):
    """Raised when a post-condition does not hold before the timeout."""

    def __init__(self, condition: Any, last_observed: Any, timeout: float):
        self.condition = condition
        self.last_observed = last_observed
        self.timeout = timeout
        super().__init__(
            f"Condition {condition} not met within {timeout:.1f}s "
            f"(last observed: {last_observed!r})"
        )


class FlowError(AutomationError):
    """Raised when a flow step fails; wraps the original cause."""

    def __init__(self, flow_name: str, step_index: int, step_name: str, cause: BaseException):
        self.flow_name = flow_name
        self.step_index = step_index
        self.step_name = step_name
        self.cause = cause
        super().__init__(
            f"Flow '{flow_name}' failed at step {step_index} ({step_name}): {cause}"
        )


class MissingParameterError(AutomationError, KeyError):
    """Raised when a placeholder has no bound flow parameter."""

    def __init__(self, missing: Sequence[str], template: str):
        self.missing = list(missing)
        self.template = template
        AutomationError.__init__(
            self, f"Missing parameter(s) {', '.join(self.missing)} for template {template!r}"
        )

    def __str__(self) -> str:
        return self.args[0]


class TemplateError(AutomationError, ValueError):
    """Raised when a template is malformed (stray brace, positional field)."""

    def __init__(self, template: str, problem: str):
        self.template = template
        self.problem = problem
        super().__init__(
            f"Invalid template {template!r}: {problem}. "
            "Write literal braces as '{{' and '}}'"
        )


class SessionStateError(AutomationError):
    """Raised when a session is used in a state that forbids it."""
    pass


class SessionBusyError(SessionStateError):
    """Raised when a second flow is started on a session with one in flight."""
    pass


class FlowStateError(SessionStateError):
    """Raised when a finished flow run is asked to run again."""
    pass


__all__ = [
    "AutomationError",
    "ResolutionErrorKind",
    "ResolutionError",
    "ActionErrorKind",
    "ActionError",
    "GateTimeoutError",
    "FlowError",
    "MissingParameterError",
    "TemplateError",
    "SessionStateError",
    "SessionBusyError",
    "FlowStateError",
]
