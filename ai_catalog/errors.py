"""
Error taxonomy for the AI Catalog Bot.

Fetch and persistence errors reach the user as short apologetic messages.
Analysis errors never leave the extractor; they are collapsed into fallback
values. Invalid categories are answered with a reprompt.
"""


class CatalogBotError(Exception):
    """Base class for all bot errors."""


class ExtractionError(CatalogBotError):
    """Content could not be extracted from a URL."""


class FetchError(ExtractionError):
    """Webpage fetch failed (timeout, transport error, non-2xx, non-HTML)."""


class AnalysisError(CatalogBotError):
    """The content-analysis service is disabled or the call failed."""


class AnalysisParseError(AnalysisError):
    """Model output was not the expected JSON object."""


class PersistenceError(CatalogBotError):
    """Reading or writing the remote dataset failed."""

    def __init__(self, message: str, conflict: bool = False):
        super().__init__(message)
        self.conflict = conflict


class InvalidCategoryError(CatalogBotError, ValueError):
    """User input does not match any category label."""

    def __init__(self, label: str):
        super().__init__(f"Unrecognized category label: {label!r}")
        self.label = label
