"""
Number formatting for analytics summaries.

Deliberately locale-independent: grouping uses a fixed separator
(ASSISTANT_THOUSANDS_SEPARATOR, "," by default) instead of the host
locale, so the same data always renders to the same bytes on every
machine. Set the separator to a space for pl-PL style output.
"""

import math


def format_int(value: float, separator: str = ",") -> str:
    """Round half up and group thousands: 1234567.5 -> '1,234,568'."""
    rounded = int(math.floor(float(value) + 0.5))
    return f"{rounded:,}".replace(",", separator)
