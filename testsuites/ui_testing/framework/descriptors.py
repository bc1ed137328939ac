"""
================================================================================
Element Descriptors
================================================================================

Declarative, strategy-ordered descriptions of how to find one UI element.

A descriptor is data, not code: it lists the locator strategies that may
identify the element and the resolver decides which one wins. Strategy values
may contain ``{placeholders}`` that are bound from flow parameters at run time;
literal braces are written ``{{`` and ``}}``.

Strategy Priority (highest first):
    1. testid  - data-testid attribute (Playwright get_by_test_id; other
                 attributes such as data-test go through css)
    2. role    - ARIA role + accessible name
    3. text    - visible text content
    4. css     - CSS fallback chain, in declared order

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
import string
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Tuple

from .errors import MissingParameterError, TemplateError


class StrategyKind(str, Enum):
    """Supported locator strategies."""

    TEST_ID = "testid"
    ROLE = "role"
    TEXT = "text"
    CSS = "css"


STRATEGY_PRIORITY = {
    StrategyKind.TEST_ID: 0,
    StrategyKind.ROLE: 1,
    StrategyKind.TEXT: 2,
    StrategyKind.CSS: 3,
}

_FORMATTER = string.Formatter()

# Leading identifier of a field ("user" in "{user.email}" or "{user[email]}")
_FIELD_ROOT = re.compile(r"[^.\[]*")


def _placeholders(template: str) -> Tuple[str, ...]:
    """Root names of every placeholder, in order."""
    try:
        fields = [name for _, name, _, _ in _FORMATTER.parse(template) if name is not None]
    except ValueError as e:
        raise TemplateError(template, str(e)) from e

    roots = []
    for field_name in fields:
        root = _FIELD_ROOT.match(field_name).group(0)
        if not root or root.isdigit():
            raise TemplateError(template, f"positional placeholder '{{{field_name}}}'")
        roots.append(root)
    return tuple(roots)


def bind_template(template: Optional[str], params: Mapping[str, Any]) -> Optional[str]:
    """
    Substitute ``{name}`` placeholders in a template.

    Literal braces are escaped by doubling: ``"a[data-x='{{v}}']"``.

    Raises:
        MissingParameterError: When a placeholder has no matching parameter
        TemplateError: When the template itself is malformed
    """
    if template is None:
        return None
    missing = [name for name in _placeholders(template) if name not in params]
    if missing:
        raise MissingParameterError(missing, template)
    try:
        return template.format(**params)
    except (AttributeError, IndexError, KeyError, ValueError) as e:
        raise TemplateError(template, str(e)) from e


@dataclass(frozen=True)
class Strategy:
    """
    One way of finding an element.

    Attributes:
        kind: Strategy type
        value: Test id, role, text or CSS selector depending on kind
        name: Accessible name (role strategy only)
    """

    kind: StrategyKind
    value: str
    name: Optional[str] = None

    def bind(self, params: Mapping[str, Any]) -> "Strategy":
        return replace(
            self,
            value=bind_template(self.value, params),
            name=bind_template(self.name, params),
        )

    def __str__(self) -> str:
        if self.kind is StrategyKind.ROLE and self.name is not None:
            return f"role={self.value}[name={self.name!r}]"
        return f"{self.kind.value}={self.value}"


@dataclass(frozen=True)
class ElementDescriptor:
    """
    Immutable description of a single UI element.

    Attributes:
        strategies: Candidate strategies (resolved in priority order)
        exact: Require exact, case-sensitive name/text matching
        nth: Ordinal among matches. 0 is the first in document order,
            negative values count from the end, None demands a unique match
        parent: Optional CSS selector scoping the search
        has_text: Optional substring filter applied to every candidate
        label: Human-readable element name used in logs and reports
    """

    strategies: Tuple[Strategy, ...]
    exact: bool = False
    nth: Optional[int] = 0
    parent: Optional[str] = None
    has_text: Optional[str] = None
    label: str = ""

    def __post_init__(self) -> None:
        if not self.strategies:
            raise ValueError("ElementDescriptor requires at least one strategy")

    @classmethod
    def of(
        cls,
        *,
        test_id: Optional[str] = None,
        role: Optional[str] = None,
        name: Optional[str] = None,
        text: Optional[str] = None,
        css: Sequence[str] = (),
        exact: bool = False,
        nth: Optional[int] = 0,
        parent: Optional[str] = None,
        has_text: Optional[str] = None,
        label: str = "",
    ) -> "ElementDescriptor":
        """
        Build a descriptor from keyword strategies.

        Usage:
            >>> ElementDescriptor.of(test_id="login-button", text="Login")
        """
        strategies = []
        if test_id is not None:
            strategies.append(Strategy(StrategyKind.TEST_ID, test_id))
        if role is not None:
            strategies.append(Strategy(StrategyKind.ROLE, role, name))
        if text is not None:
            strategies.append(Strategy(StrategyKind.TEXT, text))
        strategies.extend(Strategy(StrategyKind.CSS, selector) for selector in css)
        return cls(
            strategies=tuple(strategies),
            exact=exact,
            nth=nth,
            parent=parent,
            has_text=has_text,
            label=label,
        )

    @property
    def ordered(self) -> Tuple[Strategy, ...]:
        """Strategies sorted by priority; CSS keeps its declared order."""
        return tuple(sorted(self.strategies, key=lambda s: STRATEGY_PRIORITY[s.kind]))

    @property
    def primary(self) -> Strategy:
        return self.ordered[0]

    @property
    def display_name(self) -> str:
        return self.label or str(self.primary)

    def bind(self, params: Mapping[str, Any]) -> "ElementDescriptor":
        """Return a copy with every placeholder substituted from ``params``."""
        return replace(
            self,
            strategies=tuple(s.bind(params) for s in self.strategies),
            parent=bind_template(self.parent, params),
            has_text=bind_template(self.has_text, params),
            label=bind_template(self.label, params) or "",
        )

    def __str__(self) -> str:
        return self.display_name


__all__ = [
    "StrategyKind",
    "STRATEGY_PRIORITY",
    "Strategy",
    "ElementDescriptor",
    "bind_template",
]
