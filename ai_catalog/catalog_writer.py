"""
Catalog Writer

Persists catalog entries into a JSON document stored in a GitHub repository.

The write is a read-modify-write guarded by the blob sha read at the start.
GitHub rejects the write if the document changed in between, so a failed
write never leaves a partially updated document behind. There is no retry
on conflict; the user re-sends the category to try again.
"""

import base64
import copy
import json
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional, Tuple

import requests

from .categories import (
    SINGULAR_NAMES,
    CatalogEntry,
    CategoryKey,
    build_catalog_entry,
    entry_to_dict,
)
from .config import Settings
from .content_extractor import ExtractedContent
from .errors import PersistenceError
from .title_utils import truncate_title

GITHUB_API_URL = 'https://api.github.com'
DEFAULT_TIMEOUT = 15


class DatasetStore(ABC):
    """Remote JSON document store with revision-token guarded writes."""

    @abstractmethod
    def read(self, path: str) -> Tuple[dict, str]:
        """Return (document, revision)."""
        raise NotImplementedError

    @abstractmethod
    def write(self, path: str, document: dict, revision: str, message: str) -> str:
        """Write the document if revision is current; returns the new revision."""
        raise NotImplementedError


def encode_document(document: dict) -> str:
    """Serialize a document as pretty-printed JSON and base64-encode it."""
    text = json.dumps(document, indent=2, ensure_ascii=False)
    return base64.b64encode(text.encode('utf-8')).decode('ascii')


def decode_document(content: str) -> dict:
    """
    Decode base64 JSON content as returned by the GitHub contents API.

    Raises:
        PersistenceError: if the content is not a base64-encoded JSON object
    """
    try:
        document = json.loads(base64.b64decode(content or '').decode('utf-8'))
    except (ValueError, UnicodeDecodeError) as e:
        raise PersistenceError(f'Dataset is not valid JSON: {e}') from e

    if not isinstance(document, dict):
        raise PersistenceError('Dataset is not a JSON object')
    return document


class GitHubContentStore(DatasetStore):
    """DatasetStore over the GitHub repository contents API."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        branch: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        api_url: str = GITHUB_API_URL,
    ):
        self._token = token
        self._owner = owner
        self._repo = repo
        self._branch = branch
        self._timeout = timeout
        self._api_url = api_url.rstrip('/')

    def _contents_url(self, path: str) -> str:
        return f'{self._api_url}/repos/{self._owner}/{self._repo}/contents/{path.lstrip("/")}'

    def _headers(self) -> dict:
        return {
            'Authorization': f'Bearer {self._token}',
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': '2022-11-28',
        }

    def read(self, path: str) -> Tuple[dict, str]:
        params = {'ref': self._branch} if self._branch else None
        try:
            response = requests.get(
                self._contents_url(path),
                headers=self._headers(),
                params=params,
                timeout=self._timeout,
            )
        except requests.exceptions.RequestException as e:
            raise PersistenceError(f'Failed to read dataset: {e}') from e

        _check_status(response, 'read')

        try:
            data = response.json()
        except ValueError as e:
            raise PersistenceError('GitHub returned an invalid response') from e

        if not isinstance(data, dict) or 'sha' not in data:
            raise PersistenceError(f'Dataset path is not a file: {path}')

        return decode_document(data.get('content', '')), data['sha']

    def write(self, path: str, document: dict, revision: str, message: str) -> str:
        payload = {
            'message': message,
            'content': encode_document(document),
            'sha': revision,
        }
        if self._branch:
            payload['branch'] = self._branch

        try:
            response = requests.put(
                self._contents_url(path),
                headers=self._headers(),
                json=payload,
                timeout=self._timeout,
            )
        except requests.exceptions.RequestException as e:
            raise PersistenceError(f'Failed to write dataset: {e}') from e

        _check_status(response, 'write')

        try:
            return response.json()['content']['sha']
        except (ValueError, KeyError, TypeError):
            return ''


def _check_status(response: requests.Response, action: str) -> None:
    status = response.status_code
    if 200 <= status < 300:
        return
    if status in (401, 403):
        raise PersistenceError(f'Missing permission to {action} dataset (HTTP {status})')
    if status == 404:
        raise PersistenceError('Dataset not found (HTTP 404)')
    if status == 409:
        raise PersistenceError('Dataset changed since it was read (HTTP 409)', conflict=True)
    raise PersistenceError(f'GitHub error on {action}: HTTP {status}')


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def merge_entry(document: dict, entry: dict, category_key: CategoryKey, updated_at: Optional[str] = None) -> dict:
    """
    Return a copy of document with entry prepended to its category array.

    The input document is not modified. A missing category is created;
    any other non-list value raises PersistenceError.
    """
    key = CategoryKey(category_key).value
    merged = copy.deepcopy(document)

    entries = merged.get(key)
    if entries is None:
        entries = []
    elif not isinstance(entries, list):
        raise PersistenceError(f'Dataset category "{key}" is not a list')
    merged[key] = [entry] + entries
    merged['lastUpdated'] = updated_at or utc_timestamp()
    return merged


def build_change_description(category_key: CategoryKey, title: str) -> str:
    """Commit message such as "Add tool: MyTool"."""
    short_title, _ = truncate_title(title or '')
    return f'Add {SINGULAR_NAMES[CategoryKey(category_key)]}: {short_title}'


class CatalogWriter:
    """Appends catalog entries to the remote dataset."""

    def __init__(self, store: Optional[DatasetStore], path: str):
        self._store = store
        self._path = path

    @classmethod
    def from_settings(cls, settings: Settings) -> 'CatalogWriter':
        store = None
        if settings.catalog_enabled:
            store = GitHubContentStore(
                settings.github_token,
                settings.github_owner,
                settings.github_repo,
                branch=settings.github_branch,
            )
        return cls(store, settings.github_data_path)

    @property
    def enabled(self) -> bool:
        return self._store is not None

    def append(self, entry: CatalogEntry, category_key: CategoryKey, title: str) -> dict:
        """
        Prepend entry to its category and persist the dataset.

        Args:
            entry: The entry to store
            category_key: Category array receiving the entry
            title: Title used in the change description

        Returns:
            The updated dataset as written

        Raises:
            PersistenceError: if the store is disabled, unreadable, rejects
                the write or the revision is stale
        """
        if not self.enabled:
            raise PersistenceError('GitHub catalog storage not configured')

        document, revision = self._store.read(self._path)
        updated = merge_entry(document, entry_to_dict(entry), category_key)
        message = build_change_description(category_key, title)
        self._store.write(self._path, updated, revision, message)

        print(f"✅ Added new {CategoryKey(category_key).value} entry: {title}")
        return updated

    def add(self, extracted: ExtractedContent, category_key: CategoryKey, link: str) -> dict:
        """Build the entry for an extraction result and append it."""
        entry = build_catalog_entry(extracted, category_key, link)
        return self.append(entry, category_key, extracted.title)
