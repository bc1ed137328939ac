"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for application pages.

Each page module declares:
    - Element descriptors
    - FlowStep definitions for its business actions
    - A page class exposing those flows as chainable methods

Author: Automation Team
License: MIT
================================================================================
"""

from .shuttler_page import ShuttlerPage

__all__ = [
    "ShuttlerPage",
]
