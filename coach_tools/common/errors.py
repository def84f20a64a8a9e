"""
================================================================================
Shared Exception Types
================================================================================

Base error for the Decision Coach UI suite. Framework modules derive their
own infrastructure errors from it so scenarios can tell an infrastructure
failure apart from a failed content assertion.

Author: Automation Team
License: MIT
================================================================================
"""


class CoachTestError(Exception):
    """Base class for infrastructure failures raised by the suite."""
    pass


__all__ = ["CoachTestError"]
