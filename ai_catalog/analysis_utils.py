"""
Content-analysis utilities for the AI Catalog Bot.

Builds the prompts sent to the content-analysis model and parses its
responses. Every response is expected to contain a single JSON object,
possibly wrapped in a markdown code fence or surrounded by prose.
"""

import json
import re
from typing import Any, Dict, List

from .errors import AnalysisParseError

DEFAULT_SOCIAL_CATEGORY = 'AI Research'
DEFAULT_PAGE_CATEGORY = 'AI Tool'

SOCIAL_KEYS = ('author', 'content', 'category')
PAGE_KEYS = ('category', 'enhancedDescription', 'features')


def build_social_prompt(url: str, platform: str) -> str:
    """Prompt asking the model to infer a social post from its URL alone."""
    return f"""Extract information from this {platform} URL: {url}

Please provide:
- Author username (without @)
- Post content
- Category (AI Research, AI Tools, AI News, etc.)

Respond in this exact JSON format:
{{"author": "username", "content": "post text", "category": "AI Research"}}
"""


def build_page_prompt(url: str, title: str, description: str) -> str:
    """Prompt asking the model to categorize and describe a fetched webpage."""
    return f"""Analyze this website content and categorize it for an AI catalog:

URL: {url}
Title: {title}
Description: {description}

Please determine:
1. What category this fits: AI Tool, AI Research, AI News, AI Resource, etc.
2. A concise description (2-3 sentences max)
3. Key features if it's a tool

Respond in this exact JSON format:
{{"category": "AI Tool", "enhancedDescription": "2-3 sentences", "features": ["feature one", "feature two"]}}
"""


def build_question_prompt(question: str) -> str:
    """Prompt for open questions sent with /ask."""
    return f"""You are the assistant of a personal AI catalog. Answer the question below
concisely in plain text (no markdown tables), in at most 5 sentences.

Question: {question}
"""


def parse_json_object(response_text: str) -> Dict[str, Any]:
    """
    Extract the first JSON object from model output.

    Args:
        response_text: Raw text returned by the model

    Returns:
        The decoded object

    Raises:
        AnalysisParseError: if no JSON object can be decoded
    """
    if not response_text or not response_text.strip():
        raise AnalysisParseError('Empty model response')

    json_match = re.search(r'\{[\s\S]*\}', response_text)
    if not json_match:
        raise AnalysisParseError('No JSON object in model response')

    try:
        parsed = json.loads(json_match.group())
    except json.JSONDecodeError as e:
        raise AnalysisParseError(f'Invalid JSON in model response: {e}') from e

    if not isinstance(parsed, dict):
        raise AnalysisParseError('Model response is not a JSON object')

    return parsed


def _as_text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, (dict, list)):
        return ''
    return ' '.join(str(value).split())


def coerce_features(value: Any) -> List[str]:
    """Normalize a model-provided features value into a list of non-empty strings."""
    if not isinstance(value, list):
        return []
    features = []
    for item in value:
        text = _as_text(item)
        if text:
            features.append(text)
    return features


def parse_social_analysis(response_text: str) -> Dict[str, str]:
    """
    Parse the social-post response into author, content and category.

    Author and content are required; a missing category is defaulted.
    A leading "@" on the author is removed.

    Raises:
        AnalysisParseError: if the object is missing or lacks author/content
    """
    parsed = parse_json_object(response_text)

    author = _as_text(parsed.get('author')).lstrip('@').strip()
    content = _as_text(parsed.get('content'))
    if not author or not content:
        raise AnalysisParseError('Social analysis is missing author or content')

    return {
        'author': author,
        'content': content,
        'category': _as_text(parsed.get('category')) or DEFAULT_SOCIAL_CATEGORY,
    }


def parse_page_analysis(response_text: str, raw_description: str) -> Dict[str, Any]:
    """
    Parse the webpage enrichment response.

    Missing or empty values fall back individually: category to "AI Tool",
    enhancedDescription to the raw description and features to [].

    Raises:
        AnalysisParseError: if no JSON object can be decoded
    """
    parsed = parse_json_object(response_text)

    return {
        'category': _as_text(parsed.get('category')) or DEFAULT_PAGE_CATEGORY,
        'enhancedDescription': _as_text(parsed.get('enhancedDescription')) or raw_description,
        'features': coerce_features(parsed.get('features')),
    }


def fallback_page_analysis(raw_description: str) -> Dict[str, Any]:
    """Enrichment result used when the model call or its parsing fails."""
    return {
        'category': DEFAULT_PAGE_CATEGORY,
        'enhancedDescription': raw_description,
        'features': [],
    }
