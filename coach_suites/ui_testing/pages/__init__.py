"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for the Decision Coach UI.

Author: Automation Team
License: MIT
================================================================================
"""

from .coach_page import DecisionCoachPage, ElementInventory

__all__ = [
    "DecisionCoachPage",
    "ElementInventory",
]
