"""AI Catalog Bot: turns shared links into categorized catalog entries."""

from .errors import (
    CatalogBotError,
    ExtractionError,
    FetchError,
    AnalysisError,
    AnalysisParseError,
    PersistenceError,
    InvalidCategoryError,
)

from .config import Settings, load_settings

from .content_extractor import (
    ExtractedContent,
    ContentExtractor,
    fetch_webpage,
    extract_title,
    extract_description,
    get_social_platform,
    is_social_url,
)

from .categories import (
    CategoryKey,
    CATEGORY_LABELS,
    resolve_category,
    build_catalog_entry,
)

from .session_store import PendingSession, SessionStore, InMemorySessionStore

from .catalog_writer import CatalogWriter, DatasetStore, GitHubContentStore

from .analysis_client import AnalysisClient

from .conversation import ConversationController, Reply

__all__ = [
    # Errors
    'CatalogBotError',
    'ExtractionError',
    'FetchError',
    'AnalysisError',
    'AnalysisParseError',
    'PersistenceError',
    'InvalidCategoryError',
    # Configuration
    'Settings',
    'load_settings',
    # Extraction
    'ExtractedContent',
    'ContentExtractor',
    'fetch_webpage',
    'extract_title',
    'extract_description',
    'get_social_platform',
    'is_social_url',
    # Categories
    'CategoryKey',
    'CATEGORY_LABELS',
    'resolve_category',
    'build_catalog_entry',
    # Sessions
    'PendingSession',
    'SessionStore',
    'InMemorySessionStore',
    # Persistence
    'CatalogWriter',
    'DatasetStore',
    'GitHubContentStore',
    # Analysis
    'AnalysisClient',
    # Conversation
    'ConversationController',
    'Reply',
]
