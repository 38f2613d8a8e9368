"""
Helper utility functions.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """
    Current UTC time as a naive datetime.

    Workspace records store naive UTC timestamps, so comparisons against
    them must use the same representation.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def safe_ratio(part: float, total: float) -> float:
    """
    Divide with a zero guard.

    Returns:
        part / total, or 0.0 when total is zero
    """
    if not total:
        return 0.0
    return part / total


def calculate_percentage(part: float, total: float) -> float:
    """
    Calculate percentage with safe division.

    Args:
        part: Part value
        total: Total value

    Returns:
        Percentage value (0-100 for part <= total)
    """
    return safe_ratio(part, total) * 100


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    """Clamp a value into [lower, upper]."""
    return max(lower, min(upper, value))


def format_currency(amount: float) -> str:
    """
    Format a dollar amount compactly for summaries.

    Example:
        format_currency(1_250_000)  # "$1.2M"
        format_currency(12_400)     # "$12K"
        format_currency(950)        # "$950"
    """
    if amount >= 1_000_000:
        return f"${amount / 1_000_000:.1f}M"
    if amount >= 1_000:
        return f"${amount / 1_000:.0f}K"
    return f"${amount:.0f}"


def format_amount(amount: float) -> str:
    """Format a dollar amount with thousands separators ("$6,000")."""
    return f"${amount:,.0f}"


def deep_merge(dict1: dict, dict2: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        dict1: First dictionary
        dict2: Second dictionary (takes precedence)

    Returns:
        Merged dictionary
    """
    result = dict1.copy()

    for key, value in dict2.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result
