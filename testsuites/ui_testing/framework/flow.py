"""
================================================================================
Interaction Flows
================================================================================

Named, reusable, ordered sequences of interactions representing one business
action ("log in", "search route", "book trip").

A FlowStep is immutable data shared by every Session that runs it. Running a
flow walks its steps strictly in order:

    Navigate     -> session.goto(url)
    Interaction  -> resolve(descriptor) -> act(action, payload)
    Expect       -> await_condition(condition)

The first failure aborts the remaining steps and surfaces as a FlowError that
names the failing step index. Nothing is retried here; whether to re-run a
whole flow is the test runner's decision.

Usage:
    >>> await run_flow(session, LOGIN, {"email": "...", "password": "..."})
    >>> await chain(session, GOTO_LOGIN.bind(), LOGIN.bind(email=..., password=...))

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import allure
from loguru import logger

from .assertion_gate import Condition, await_condition
from .descriptors import ElementDescriptor, bind_template
from .element_actions import Action, act, mask_payload
from .errors import FlowError, FlowStateError
from .session import Session
from .smart_locator import resolve
from .wait_helpers import DEFAULT_POLL_INTERVAL


# =============================================================================
# Flow Definitions
# =============================================================================

@dataclass(frozen=True)
class Navigate:
    """Open a URL (``{placeholders}`` allowed)."""
    url: str
    name: str = ""

    @property
    def title(self) -> str:
        return self.name or f"navigate {self.url}"


@dataclass(frozen=True)
class Interaction:
    """Resolve an element and apply one action to it."""
    descriptor: ElementDescriptor
    action: Action
    payload: Optional[str] = None
    name: str = ""
    timeout: Optional[float] = None

    @property
    def title(self) -> str:
        return self.name or f"{self.action.value} {self.descriptor.display_name}"


@dataclass(frozen=True)
class Expect:
    """Block until a condition holds."""
    condition: Condition
    name: str = ""
    timeout: Optional[float] = None

    @property
    def title(self) -> str:
        return self.name or f"expect {self.condition}"


Step = Union[Navigate, Interaction, Expect]


@dataclass(frozen=True)
class FlowStep:
    """
    Immutable definition of one business action.

    Attributes:
        name: Flow name used in logs, reports and errors
        steps: Ordered steps
        post_condition: Optional gate evaluated after the last step
        post_condition_timeout: Gate budget override in seconds
    """
    name: str
    steps: Tuple[Step, ...]
    post_condition: Optional[Condition] = None
    post_condition_timeout: Optional[float] = None

    @property
    def all_steps(self) -> Tuple[Step, ...]:
        if self.post_condition is None:
            return self.steps
        return self.steps + (
            Expect(self.post_condition, name="post-condition", timeout=self.post_condition_timeout),
        )

    def bind(self, **params: Any) -> "BoundFlow":
        """Pair this definition with run-time parameters."""
        return BoundFlow(self, params)


@dataclass(frozen=True)
class BoundFlow:
    flow: FlowStep
    params: Mapping[str, Any] = field(default_factory=dict)


# =============================================================================
# Execution
# =============================================================================

class FlowState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class FlowTimeouts:
    """Per-operation budgets in seconds."""
    resolve: float = 10.0
    action: float = 10.0
    gate: float = 30.0
    interval: float = DEFAULT_POLL_INTERVAL


@dataclass
class ExecutionResult:
    """
    Outcome of one flow run.

    Attributes:
        flow_name: Name of the flow
        success: Whether every step completed
        elapsed: Wall time in seconds
        step_index: Failing step index (failures only)
        step_name: Failing step title (failures only)
        error: The underlying error (failures only)
        last_attempted: Last locator strategy tried (failures only, if any)
    """
    flow_name: str
    success: bool
    elapsed: float
    step_index: Optional[int] = None
    step_name: Optional[str] = None
    error: Optional[BaseException] = None
    last_attempted: Optional[str] = None


class FlowRun:
    """
    A single execution of a FlowStep.

    State machine: NOT_STARTED -> RUNNING -> COMPLETED | FAILED.
    Terminal states never resume.
    """

    def __init__(
        self,
        flow: FlowStep,
        params: Optional[Mapping[str, Any]] = None,
        timeouts: Optional[FlowTimeouts] = None,
    ):
        self.flow = flow
        self.params: Dict[str, Any] = dict(params or {})
        self.timeouts = timeouts or FlowTimeouts()
        self.state = FlowState.NOT_STARTED
        self.current_index = 0
        self.result: Optional[ExecutionResult] = None

    @property
    def current_step_name(self) -> str:
        steps = self.flow.all_steps
        if self.current_index < len(steps):
            return steps[self.current_index].title
        return "<end>"

    async def execute(self, session: Session) -> Session:
        """
        Run every step against ``session``.

        Returns:
            The same session, for chaining

        Raises:
            FlowStateError: The run already finished
            SessionStateError: The session is not active or already busy
            FlowError: A step failed (session is marked failed)
        """
        if self.state is not FlowState.NOT_STARTED:
            raise FlowStateError(f"Flow '{self.flow.name}' run is {self.state.value}")

        async with session.exclusive():
            self.state = FlowState.RUNNING
            loop = asyncio.get_running_loop()
            started = loop.time()
            logger.info(f"▶️ [{session.name}] Flow '{self.flow.name}' started")

            try:
                with allure.step(f"Flow: {self.flow.name}"):
                    for index, step in enumerate(self.flow.all_steps):
                        self.current_index = index
                        with allure.step(f"[{index}] {step.title}"):
                            await self._run_step(session, step)
            except asyncio.CancelledError as e:
                self._fail(session, started, e)
                await session.close()
                raise
            except Exception as e:
                self._fail(session, started, e)
                raise FlowError(self.flow.name, self.current_index, self.current_step_name, e) from e

            self.state = FlowState.COMPLETED
            self.result = ExecutionResult(self.flow.name, True, loop.time() - started)
            session.history.append(self.result)
            logger.info(
                f"✅ [{session.name}] Flow '{self.flow.name}' completed "
                f"in {self.result.elapsed:.2f}s"
            )
            return session

    def _fail(self, session: Session, started: float, error: BaseException) -> None:
        self.state = FlowState.FAILED
        last_attempted = getattr(error, "last_attempted", None)
        self.result = ExecutionResult(
            flow_name=self.flow.name,
            success=False,
            elapsed=asyncio.get_running_loop().time() - started,
            step_index=self.current_index,
            step_name=self.current_step_name,
            error=error,
            last_attempted=str(last_attempted) if last_attempted is not None else None,
        )
        session.history.append(self.result)
        session.mark_failed()
        logger.error(
            f"❌ [{session.name}] Flow '{self.flow.name}' failed at step "
            f"{self.current_index} ({self.current_step_name}): {error!r}"
        )

    async def _run_step(self, session: Session, step: Step) -> None:
        timeouts = self.timeouts

        if isinstance(step, Navigate):
            await session.goto(bind_template(step.url, self.params))

        elif isinstance(step, Interaction):
            descriptor = step.descriptor.bind(self.params)
            payload = bind_template(step.payload, self.params)
            logger.debug(
                f"[{session.name}] {step.action.value} {descriptor.display_name} "
                f"{mask_payload(descriptor.display_name, payload)}"
            )
            element = await resolve(
                session, descriptor, step.timeout or timeouts.resolve, timeouts.interval
            )
            await act(element, step.action, payload, step.timeout or timeouts.action, timeouts.interval)

        elif isinstance(step, Expect):
            await await_condition(
                session, step.condition.bind(self.params), step.timeout or timeouts.gate, timeouts.interval
            )

        else:
            raise TypeError(f"Unknown flow step: {step!r}")


async def run_flow(
    session: Session,
    flow: FlowStep,
    params: Optional[Mapping[str, Any]] = None,
    timeouts: Optional[FlowTimeouts] = None,
    timeout: Optional[float] = None,
) -> Session:
    """
    Execute one flow against a session.

    Args:
        session: Session to drive
        flow: Flow definition
        params: Values for ``{placeholders}`` in the flow
        timeouts: Per-operation budgets
        timeout: Optional overall budget; on expiry the session is failed,
            closed, and a FlowError wrapping asyncio.TimeoutError is raised

    Returns:
        The same session, for chaining
    """
    run = FlowRun(flow, params, timeouts)
    if timeout is None:
        return await run.execute(session)

    try:
        return await asyncio.wait_for(run.execute(session), timeout)
    except asyncio.TimeoutError as e:
        raise FlowError(flow.name, run.current_index, run.current_step_name, e) from e


async def chain(
    session: Session,
    *flows: BoundFlow,
    timeouts: Optional[FlowTimeouts] = None,
    timeout: Optional[float] = None,
) -> Session:
    """
    Run bound flows left to right; stops at the first FlowError.

    Args:
        session: Session to drive
        *flows: Bound flows, run in order
        timeouts: Per-operation budgets shared by every flow
        timeout: Optional overall budget applied to each flow

    Usage:
        >>> await chain(session, GOTO.bind(url=...), LOGIN.bind(email=..., password=...))
    """
    for bound in flows:
        session = await run_flow(session, bound.flow, bound.params, timeouts, timeout)
    return session


__all__ = [
    "BoundFlow",
    "ExecutionResult",
    "Expect",
    "FlowRun",
    "FlowState",
    "FlowStep",
    "FlowTimeouts",
    "Interaction",
    "Navigate",
    "Step",
    "chain",
    "run_flow",
]
