"""Utility functions for crosspub.

Key functions:
    long_date: Format a date the way pages display it.
    slugify: Turn a title into a file-name-safe slug.
"""

from __future__ import annotations

import re
from datetime import date


def long_date(value: date | None) -> str:
    """Format a date as a long, human-readable string.

    Args:
        value: Date to format, or None.

    Returns:
        Formatted date, or an empty string for None.

    Examples:
        >>> long_date(date(2024, 3, 1))
        'March 1, 2024'
    """
    if value is None:
        return ""
    return f"{value:%B} {value.day}, {value.year}"


def slugify(text: str) -> str:
    """Convert a title to a lowercase, dash-separated slug.

    Examples:
        >>> slugify("Hello, Gemini World!")
        'hello-gemini-world'
    """
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", text)
    return cleaned.strip("-").lower()

