"""
Shared pytest fixtures for AI Catalog Bot tests.
"""

import copy
import pytest
import sys
import importlib.util
from pathlib import Path
from bs4 import BeautifulSoup

from ai_catalog.catalog_writer import DatasetStore
from ai_catalog.content_extractor import ExtractedContent
from ai_catalog.errors import AnalysisError, PersistenceError

# Project root for finding the bot entry point
PROJECT_ROOT = Path(__file__).parent.parent


def _load_module_from_path(module_name: str, file_path: Path):
    """Load a module from a specific file path."""
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


# Load the bot entry point with a unique name at module load time
_catalog_bot_module = _load_module_from_path(
    'catalog_bot_main',
    PROJECT_ROOT / 'catalog-bot' / 'main.py'
)


# ============================================================================
# Entry Point Fixtures
# ============================================================================

@pytest.fixture
def catalog_bot_module():
    """Returns the loaded catalog-bot entry point module."""
    return _catalog_bot_module


@pytest.fixture
def health_check():
    """Returns health_check function from catalog-bot."""
    return _catalog_bot_module.health_check


@pytest.fixture
def build_keyboard():
    """Returns build_keyboard function from catalog-bot."""
    return _catalog_bot_module.build_keyboard


@pytest.fixture
def mock_flask_request():
    """Factory for creating mock Flask request objects."""
    class MockRequest:
        def __init__(self, path='/', method='GET'):
            self.path = path
            self.method = method

    return MockRequest


# ============================================================================
# Collaborator Fakes
# ============================================================================

class FakeAnalysisClient:
    """Returns canned model responses in order; raises AnalysisError when disabled."""

    def __init__(self, responses=None, enabled=True, error=None):
        self.responses = list(responses or [])
        self.prompts = []
        self._enabled = enabled
        self._error = error

    @property
    def enabled(self):
        return self._enabled

    def generate(self, prompt):
        self.prompts.append(prompt)
        if not self._enabled:
            raise AnalysisError('GEMINI_API_KEY not configured')
        if self._error is not None:
            raise self._error
        if not self.responses:
            return ''
        return self.responses.pop(0)


class InMemoryDatasetStore(DatasetStore):
    """DatasetStore keeping one document per path with sha-like revisions."""

    def __init__(self, documents=None):
        self.documents = copy.deepcopy(documents or {})
        self.revisions = {path: 'rev-1' for path in self.documents}
        self.messages = []
        self.fail_reads = False
        self.fail_writes = False
        self.stale_on_write = False

    def read(self, path):
        if self.fail_reads:
            raise PersistenceError('Failed to read dataset: connection reset')
        if path not in self.documents:
            raise PersistenceError('Dataset not found (HTTP 404)')
        return copy.deepcopy(self.documents[path]), self.revisions[path]

    def write(self, path, document, revision, message):
        if self.stale_on_write:
            self.revisions[path] = 'rev-concurrent'
        if self.fail_writes:
            raise PersistenceError('Missing permission to write dataset (HTTP 403)')
        if self.revisions.get(path) != revision:
            raise PersistenceError('Dataset changed since it was read (HTTP 409)', conflict=True)
        self.documents[path] = copy.deepcopy(document)
        self.revisions[path] = f'rev-{len(self.messages) + 2}'
        self.messages.append(message)
        return self.revisions[path]


@pytest.fixture
def fake_analysis():
    """Factory for FakeAnalysisClient."""
    return FakeAnalysisClient


@pytest.fixture
def dataset_store_factory():
    """Factory for InMemoryDatasetStore."""
    return InMemoryDatasetStore


@pytest.fixture
def dataset_store():
    """Dataset store holding an existing catalog document."""
    return InMemoryDatasetStore({
        'ai-data.json': {
            'content': [{'author': '@someone', 'content': 'Old post', 'category': 'AI News',
                         'dateAdded': '2024-01-01', 'link': 'https://x.com/someone/status/1'}],
            'tools': [{'name': 'OldTool', 'description': 'An older tool', 'category': 'AI Tool',
                       'features': [], 'dateAdded': '2024-01-02', 'link': 'https://old.example.com'}],
            'lastUpdated': '2024-01-02T00:00:00.000Z',
        }
    })


# ============================================================================
# Content Fixtures
# ============================================================================

@pytest.fixture
def tool_content():
    """Extraction result of the MyTool example page."""
    return ExtractedContent(
        title='MyTool',
        description='An AI tool for X',
        category='AI Tool',
        features=['a', 'b'],
    )


@pytest.fixture
def mytool_html():
    """Page with a title tag, no description meta and one paragraph."""
    return """
    <!DOCTYPE html>
    <html>
    <head><title>MyTool</title></head>
    <body>
        <h1>Welcome to MyTool</h1>
        <p>A tool for X</p>
        <p>Second paragraph</p>
    </body>
    </html>
    """


@pytest.fixture
def sample_meta_soup():
    """Returns BeautifulSoup of a page with full meta tags."""
    html = """
    <!DOCTYPE html>
    <html>
    <head>
        <title>10 Prompt Tricks | Example Blog</title>
        <meta property="og:title" content="10 Prompt Tricks You Should Know">
        <meta name="description" content="Learn essential prompting tricks">
        <meta property="og:description" content="OG description">
    </head>
    <body>
        <article>
            <h1>10 Prompt Tricks You Should Know</h1>
            <p>Here are some tricks for prompting.</p>
        </article>
    </body>
    </html>
    """
    return BeautifulSoup(html, 'html.parser')


@pytest.fixture
def empty_soup():
    """Returns empty BeautifulSoup."""
    return BeautifulSoup("", 'html.parser')
