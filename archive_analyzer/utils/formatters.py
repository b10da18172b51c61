"""Formatting utilities for presenting analysis results."""


def format_count(count: int) -> str:
    """Format an integer with thousands separators.
    
    - 1234567 -> '1,234,567'
    - 42 -> '42'
    """
    return f"{count:,}"


def format_line_badge(line_count: int) -> str:
    """Format a file's line count for display ('1,024 lines')."""
    return f"{format_count(line_count)} lines"


def format_duration(seconds: float) -> str:
    """Format duration for display.
    
    Converts seconds to human-readable format:
    - 147.5 -> '2m 27s'
    - 45 -> '45s'
    - 0.25 -> '250ms'
    
    Args:
        seconds: Duration in seconds
        
    Returns:
        Formatted string representation
    """
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"
    m, s = divmod(int(seconds), 60)
    if m > 0:
        return f"{m}m {s}s"
    return f"{s}s"
