"""
Unit tests for the content extractor.

External calls are replaced: the analysis model by FakeAnalysisClient and the
webpage fetch by patching fetch_webpage.
"""

import json

import pytest
from bs4 import BeautifulSoup
from unittest.mock import patch

from ai_catalog.content_extractor import (
    ContentExtractor,
    extract_description,
    extract_title,
    get_social_platform,
    is_social_url,
)
from ai_catalog.errors import AnalysisError, FetchError


class TestGetSocialPlatform:
    """Tests for get_social_platform()"""

    def test_x_url(self):
        assert get_social_platform("https://x.com/user/status/123") == "Twitter"

    def test_twitter_url_with_www(self):
        assert get_social_platform("https://www.twitter.com/user/status/123") == "Twitter"

    def test_mobile_twitter_subdomain(self):
        assert get_social_platform("https://mobile.twitter.com/user/status/1") == "Twitter"

    def test_instagram_url(self):
        assert get_social_platform("https://www.instagram.com/p/abc123/") == "Instagram"

    def test_threads_url(self):
        assert get_social_platform("https://threads.net/@user/post/1") == "Threads"

    def test_uppercase_host(self):
        assert get_social_platform("https://X.COM/user/status/1") == "Twitter"

    def test_host_ending_in_x_com_is_not_social(self):
        # Substring of another domain
        assert get_social_platform("https://netflix.com/title/1") is None

    def test_social_domain_in_path_is_not_social(self):
        assert get_social_platform("https://example.com/share?u=x.com") is None

    def test_generic_url(self):
        assert get_social_platform("https://example.com/tool") is None

    def test_is_social_url(self):
        assert is_social_url("https://x.com/a/status/1") is True
        assert is_social_url("https://example.com") is False


class TestExtractTitle:
    """Tests for extract_title()"""

    def test_title_tag_wins(self, sample_meta_soup):
        assert extract_title(sample_meta_soup) == "10 Prompt Tricks | Example Blog"

    def test_og_title_when_no_title_tag(self):
        soup = BeautifulSoup('<html><head><meta property="og:title" content="OG Title"></head>'
                             '<body><h1>Heading</h1></body></html>', 'html.parser')
        assert extract_title(soup) == "OG Title"

    def test_h1_when_no_title_or_og(self):
        soup = BeautifulSoup('<html><body><h1> Heading </h1><h1>Second</h1></body></html>', 'html.parser')
        assert extract_title(soup) == "Heading"

    def test_empty_title_tag_falls_through(self):
        soup = BeautifulSoup('<html><head><title>   </title></head><body><h1>Heading</h1></body></html>',
                             'html.parser')
        assert extract_title(soup) == "Heading"

    def test_whitespace_collapsed(self):
        soup = BeautifulSoup('<title>\n  My\n   Tool  \n</title>', 'html.parser')
        assert extract_title(soup) == "My Tool"

    def test_untitled(self, empty_soup):
        assert extract_title(empty_soup) == "Untitled"


class TestExtractDescription:
    """Tests for extract_description()"""

    def test_meta_description_wins(self, sample_meta_soup):
        assert extract_description(sample_meta_soup) == "Learn essential prompting tricks"

    def test_og_description_when_no_meta(self):
        soup = BeautifulSoup('<meta property="og:description" content="OG description"><p>Para</p>',
                             'html.parser')
        assert extract_description(soup) == "OG description"

    def test_first_paragraph(self, mytool_html):
        soup = BeautifulSoup(mytool_html, 'html.parser')
        assert extract_description(soup) == "A tool for X"

    def test_empty_meta_falls_through(self):
        soup = BeautifulSoup('<meta name="description" content=""><p>Para</p>', 'html.parser')
        assert extract_description(soup) == "Para"

    def test_no_description_available(self):
        soup = BeautifulSoup('<html><head><title>T</title></head><body><div>text</div></body></html>',
                             'html.parser')
        assert extract_description(soup) == "No description available"

    def test_empty_page(self, empty_soup):
        assert extract_description(empty_soup) == "No description available"


class TestExtractSocial:
    """Tests for the social-post branch."""

    def test_successful_tweet(self, fake_analysis):
        analysis = fake_analysis([json.dumps({
            'author': 'karpathy', 'content': 'New video on LLMs', 'category': 'AI Research'
        })])
        result = ContentExtractor(analysis).extract("https://x.com/karpathy/status/1")

        assert result.title == "Tweet by @karpathy"
        assert result.description == "New video on LLMs"
        assert result.author == "@karpathy"
        assert result.category == "AI Research"
        assert result.features == []

    def test_url_is_in_prompt(self, fake_analysis):
        analysis = fake_analysis(['{}'])
        ContentExtractor(analysis).extract("https://x.com/karpathy/status/1")
        assert "https://x.com/karpathy/status/1" in analysis.prompts[0]

    def test_at_sign_not_doubled(self, fake_analysis):
        analysis = fake_analysis(['{"author": "@user", "content": "Hello"}'])
        result = ContentExtractor(analysis).extract("https://twitter.com/user/status/1")
        assert result.author == "@user"
        assert result.title == "Tweet by @user"

    def test_missing_category_defaults(self, fake_analysis):
        analysis = fake_analysis(['{"author": "user", "content": "Hello"}'])
        result = ContentExtractor(analysis).extract("https://x.com/user/status/1")
        assert result.category == "AI Research"

    def test_non_twitter_platform_title(self, fake_analysis):
        analysis = fake_analysis(['{"author": "user", "content": "Hello", "category": "AI News"}'])
        result = ContentExtractor(analysis).extract("https://www.instagram.com/p/abc/")
        assert result.title == "Instagram post by @user"

    def test_fenced_json(self, fake_analysis):
        analysis = fake_analysis(['```json\n{"author": "user", "content": "Hi"}\n```'])
        result = ContentExtractor(analysis).extract("https://x.com/user/status/1")
        assert result.description == "Hi"

    @pytest.mark.parametrize("response_text", [
        "",
        "I cannot access this URL.",
        "{not json}",
        "[1, 2, 3]",
        '{"author": "", "content": "text"}',
        '{"author": "user"}',
        '{"author": null, "content": null, "category": null}',
        '{"author": {"name": "x"}, "content": ["a"]}',
    ])
    def test_malformed_response_returns_placeholder(self, fake_analysis, response_text):
        analysis = fake_analysis([response_text])
        result = ContentExtractor(analysis).extract("https://x.com/user/status/1")

        assert result.title == "Twitter Post"
        assert result.description == "Content extraction failed"
        assert result.author == "Unknown"
        assert result.category == "AI Research"
        for value in (result.title, result.description, result.author, result.category):
            assert value

    def test_model_error_returns_placeholder(self, fake_analysis):
        analysis = fake_analysis(error=AnalysisError('Gemini request failed: 503'))
        result = ContentExtractor(analysis).extract("https://x.com/user/status/1")
        assert result.title == "Twitter Post"

    def test_disabled_model_returns_placeholder(self, fake_analysis):
        analysis = fake_analysis(enabled=False)
        result = ContentExtractor(analysis).extract("https://threads.net/@user/post/1")
        assert result.title == "Threads Post"
        assert result.author == "Unknown"

    def test_social_url_is_not_fetched(self, fake_analysis):
        analysis = fake_analysis(['{"author": "user", "content": "Hi"}'])
        with patch('ai_catalog.content_extractor.fetch_webpage') as mock_fetch:
            ContentExtractor(analysis).extract("https://x.com/user/status/1")
        mock_fetch.assert_not_called()


class TestExtractWebpage:
    """Tests for the generic webpage branch."""

    def test_mytool_scenario(self, fake_analysis, mytool_html):
        analysis = fake_analysis([json.dumps({
            'category': 'AI Tool',
            'enhancedDescription': 'An AI tool for X',
            'features': ['a', 'b'],
        })])

        with patch('ai_catalog.content_extractor.fetch_webpage', return_value=mytool_html) as mock_fetch:
            result = ContentExtractor(analysis, timeout=7).extract("https://example.com/tool")

        mock_fetch.assert_called_once_with("https://example.com/tool", timeout=7)
        assert result.title == "MyTool"
        assert result.description == "An AI tool for X"
        assert result.category == "AI Tool"
        assert result.features == ["a", "b"]
        assert result.author is None

    def test_raw_values_sent_to_model(self, fake_analysis, mytool_html):
        analysis = fake_analysis(['{}'])
        with patch('ai_catalog.content_extractor.fetch_webpage', return_value=mytool_html):
            ContentExtractor(analysis).extract("https://example.com/tool")

        prompt = analysis.prompts[0]
        assert "https://example.com/tool" in prompt
        assert "MyTool" in prompt
        assert "A tool for X" in prompt

    def test_unparseable_analysis_falls_back(self, fake_analysis, mytool_html):
        analysis = fake_analysis(["Sure! This looks like a great tool."])
        with patch('ai_catalog.content_extractor.fetch_webpage', return_value=mytool_html):
            result = ContentExtractor(analysis).extract("https://example.com/tool")

        assert result.title == "MyTool"
        assert result.description == "A tool for X"
        assert result.category == "AI Tool"
        assert result.features == []

    def test_partial_analysis_fills_missing_values(self, fake_analysis, mytool_html):
        analysis = fake_analysis(['{"category": "AI Research"}'])
        with patch('ai_catalog.content_extractor.fetch_webpage', return_value=mytool_html):
            result = ContentExtractor(analysis).extract("https://example.com/tool")

        assert result.category == "AI Research"
        assert result.description == "A tool for X"
        assert result.features == []

    def test_disabled_model_falls_back(self, fake_analysis):
        analysis = fake_analysis(enabled=False)
        with patch('ai_catalog.content_extractor.fetch_webpage', return_value="<html></html>"):
            result = ContentExtractor(analysis).extract("https://example.com/empty")

        assert result.title == "Untitled"
        assert result.description == "No description available"
        assert result.category == "AI Tool"

    def test_fetch_error_propagates(self, fake_analysis):
        analysis = fake_analysis()
        with patch('ai_catalog.content_extractor.fetch_webpage', side_effect=FetchError('HTTP error: 404')):
            with pytest.raises(FetchError):
                ContentExtractor(analysis).extract("https://example.com/missing")
        assert analysis.prompts == []
