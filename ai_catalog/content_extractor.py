"""
Content Extractor

Turns a URL into an ExtractedContent record for the catalog.

Responsibilities:
- Detect social-post URLs and infer their content with the analysis model
- Fetch generic webpages and extract title and description
- Enrich webpages with a model-provided category, description and features

Only fetch failures are raised. Model failures always collapse into
fallback values so the conversation can continue.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

from .analysis_client import AnalysisClient
from .analysis_utils import (
    DEFAULT_SOCIAL_CATEGORY,
    build_page_prompt,
    build_social_prompt,
    fallback_page_analysis,
    parse_page_analysis,
    parse_social_analysis,
)
from .errors import AnalysisError, FetchError
from .title_utils import clean_text

USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
MAX_REDIRECTS = 5
DEFAULT_TIMEOUT = 10

UNTITLED = 'Untitled'
NO_DESCRIPTION = 'No description available'

# Social hosts are matched on the hostname, subdomains included
SOCIAL_PLATFORMS = {
    'twitter.com': 'Twitter',
    'x.com': 'Twitter',
    'instagram.com': 'Instagram',
    'threads.net': 'Threads',
    'linkedin.com': 'LinkedIn',
    'facebook.com': 'Facebook',
}

HTML_CONTENT_TYPES = ('text/html', 'application/xhtml+xml')


@dataclass
class ExtractedContent:
    """Normalized result of extracting a URL."""
    title: str
    description: str
    category: str
    author: Optional[str] = None
    features: List[str] = field(default_factory=list)


def get_social_platform(url: str) -> Optional[str]:
    """Return the platform name if the URL host is a known social domain."""
    try:
        host = (urlparse(url).hostname or '').lower()
    except ValueError:
        return None

    for domain, platform in SOCIAL_PLATFORMS.items():
        if host == domain or host.endswith('.' + domain):
            return platform
    return None


def is_social_url(url: str) -> bool:
    return get_social_platform(url) is not None


def social_placeholder(platform: str) -> ExtractedContent:
    """Degraded record used when a social post cannot be inferred."""
    return ExtractedContent(
        title=f'{platform} Post',
        description='Content extraction failed',
        author='Unknown',
        category=DEFAULT_SOCIAL_CATEGORY,
    )


def fetch_webpage(url: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    """
    Fetch webpage HTML.

    Raises:
        FetchError: on timeout, transport error, non-2xx status, too many
            redirects or a non-HTML response
    """
    headers = {
        'User-Agent': USER_AGENT,
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.5',
    }

    with requests.Session() as session:
        session.max_redirects = MAX_REDIRECTS
        try:
            response = session.get(url, headers=headers, timeout=timeout, allow_redirects=True)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise FetchError('Request timed out') from e
        except requests.exceptions.TooManyRedirects as e:
            raise FetchError(f'Too many redirects (max {MAX_REDIRECTS})') from e
        except requests.exceptions.HTTPError as e:
            raise FetchError(f'HTTP error: {e.response.status_code}') from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f'Request failed: {str(e)}') from e

    content_type = response.headers.get('Content-Type', '')
    if content_type and not any(t in content_type.lower() for t in HTML_CONTENT_TYPES):
        raise FetchError(f'Unsupported content type: {content_type}')

    return response.text


def _first_non_empty(*candidates: Optional[str]) -> Optional[str]:
    for candidate in candidates:
        text = clean_text(candidate)
        if text:
            return text
    return None


def _meta_content(soup: BeautifulSoup, **attrs) -> Optional[str]:
    tag = soup.find('meta', attrs=attrs)
    return tag.get('content') if tag else None


def _tag_text(soup: BeautifulSoup, name: str) -> Optional[str]:
    tag = soup.find(name)
    return tag.get_text(strip=True) if tag else None


def extract_title(soup: BeautifulSoup) -> str:
    """Title precedence: <title> -> og:title -> first <h1> -> "Untitled"."""
    return _first_non_empty(
        _tag_text(soup, 'title'),
        _meta_content(soup, property='og:title'),
        _tag_text(soup, 'h1'),
    ) or UNTITLED


def extract_description(soup: BeautifulSoup) -> str:
    """Description precedence: meta description -> og:description -> first <p>."""
    return _first_non_empty(
        _meta_content(soup, name='description'),
        _meta_content(soup, property='og:description'),
        _tag_text(soup, 'p'),
    ) or NO_DESCRIPTION


class ContentExtractor:
    """Classifies URLs and produces ExtractedContent records."""

    def __init__(self, analysis: AnalysisClient, timeout: float = DEFAULT_TIMEOUT):
        self._analysis = analysis
        self._timeout = timeout

    def extract(self, url: str) -> ExtractedContent:
        """
        Extract catalog content from a URL.

        Raises:
            FetchError: if a generic webpage cannot be fetched
        """
        platform = get_social_platform(url)
        if platform:
            return self.extract_social(url, platform)
        return self.extract_webpage(url)

    def extract_social(self, url: str, platform: str) -> ExtractedContent:
        """Infer a social post from its URL. Never raises."""
        try:
            response_text = self._analysis.generate(build_social_prompt(url, platform))
            parsed = parse_social_analysis(response_text)
        except AnalysisError as e:
            print(f"⚠️ Social extraction fell back for {url}: {e}")
            return social_placeholder(platform)

        if platform == 'Twitter':
            title = f"Tweet by @{parsed['author']}"
        else:
            title = f"{platform} post by @{parsed['author']}"

        return ExtractedContent(
            title=title,
            description=parsed['content'],
            author=f"@{parsed['author']}",
            category=parsed['category'],
        )

    def extract_webpage(self, url: str) -> ExtractedContent:
        """Fetch and enrich a generic webpage."""
        html = fetch_webpage(url, timeout=self._timeout)
        soup = BeautifulSoup(html, 'html.parser')

        title = extract_title(soup)
        raw_description = extract_description(soup)

        analysis = self.analyze_page(url, title, raw_description)

        return ExtractedContent(
            title=title,
            description=analysis['enhancedDescription'],
            category=analysis['category'],
            features=analysis['features'],
        )

    def analyze_page(self, url: str, title: str, raw_description: str) -> dict:
        """Enrich a webpage with the analysis model. Never raises."""
        try:
            response_text = self._analysis.generate(build_page_prompt(url, title, raw_description))
            return parse_page_analysis(response_text, raw_description)
        except AnalysisError as e:
            print(f"⚠️ Page analysis fell back for {url}: {e}")
            return fallback_page_analysis(raw_description)
