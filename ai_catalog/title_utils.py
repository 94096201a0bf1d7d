"""
Title processing utilities for the AI Catalog Bot.

Titles shown in change descriptions are limited to 50 characters.
Longer titles are cut at the limit and suffixed with "...".
"""

from typing import Optional, Tuple

# Title limit for dataset change descriptions
MAX_SUMMARY_TITLE_LENGTH = 50

ELLIPSIS = '...'


def clean_text(text: Optional[str]) -> str:
    """Collapse runs of whitespace (including newlines) into single spaces."""
    if not text:
        return ''
    return ' '.join(text.split())


def truncate_title(title: str, max_length: int = MAX_SUMMARY_TITLE_LENGTH) -> Tuple[str, bool]:
    """
    Truncate title to max_length characters, appending "..." when cut.

    Args:
        title: The title to truncate
        max_length: Maximum number of title characters kept (default 50)

    Returns:
        Tuple of (truncated_title, was_truncated)

    Examples:
        >>> truncate_title("Hello World", 50)
        ('Hello World', False)

        >>> truncate_title("This is a very long title", 10)
        ('This is a ...', True)
    """
    if not title:
        return ('', False)

    if len(title) <= max_length:
        return (title, False)

    return (title[:max_length] + ELLIPSIS, True)
