"""
Result enums.
"""

from enum import IntEnum


class Severity(IntEnum):
    """
    Message severity, using the ESLint numeric values.

    Off (0) never appears in results, so it is not a member.
    """

    WARNING = 1
    ERROR = 2
