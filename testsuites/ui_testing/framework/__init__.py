"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based interaction layer with auto-waiting and locator fallback.

Components:
    - descriptors: Declarative, strategy-ordered element descriptions
    - smart_locator: Locator resolution with prioritised fallback strategies
    - element_actions: Actionability checks + single-attempt actions
    - assertion_gate: Blocking waits for URL / visibility post-conditions
    - flow: Reusable FlowStep definitions and their sequential execution
    - session: One isolated live document context per test
    - browser_manager: Browser lifecycle and session provisioning
    - page_base: Base page object
    - log_config: loguru setup from the logging config section

Author: Automation Team
License: MIT
================================================================================
"""

from .assertion_gate import ElementVisible, UrlMatches, await_condition
from .browser_manager import BrowserManager
from .config_loader import ConfigLoader, FrameworkSettings
from .descriptors import ElementDescriptor, Strategy, StrategyKind
from .element_actions import Action, act
from .errors import (
    ActionError,
    AutomationError,
    FlowError,
    GateTimeoutError,
    ResolutionError,
)
from .flow import (
    ExecutionResult,
    Expect,
    FlowStep,
    FlowTimeouts,
    Interaction,
    Navigate,
    chain,
    run_flow,
)
from .log_config import init_logger
from .page_base import BasePage
from .session import Session, SessionState
from .smart_locator import SmartLocator, resolve

__all__ = [
    "Action",
    "ActionError",
    "AutomationError",
    "BasePage",
    "BrowserManager",
    "ConfigLoader",
    "ElementDescriptor",
    "ElementVisible",
    "ExecutionResult",
    "Expect",
    "FlowError",
    "FlowStep",
    "FlowTimeouts",
    "FrameworkSettings",
    "GateTimeoutError",
    "Interaction",
    "Navigate",
    "ResolutionError",
    "Session",
    "SessionState",
    "SmartLocator",
    "Strategy",
    "StrategyKind",
    "UrlMatches",
    "act",
    "await_condition",
    "init_logger",
    "chain",
    "resolve",
    "run_flow",
]
