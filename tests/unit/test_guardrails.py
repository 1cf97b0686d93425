"""
Unit tests for the URL and content guardrails.
"""

import pytest

from errors import ContentMismatch, InvalidURL
from extraction.guardrails import check_content_match, extract_source_id, validate_url


class TestValidateUrl:
    """Tests for validate_url()"""

    def test_https_url(self):
        url = "https://boardgamegeek.com/boardgame/266192/wingspan"
        assert validate_url(url) == url

    def test_http_url(self):
        assert validate_url("http://example.com/item/1") == "http://example.com/item/1"

    def test_strips_whitespace(self):
        assert validate_url("  https://example.com/a  ") == "https://example.com/a"

    @pytest.mark.parametrize("url", [
        "ftp://example.com/file",
        "javascript:alert(1)",
        "not a url",
        "https://",
        "example.com/item/42",
        "http://[::1",
    ])
    def test_rejects_bad_urls(self, url):
        with pytest.raises(InvalidURL):
            validate_url(url)

    @pytest.mark.parametrize("value", [None, "", "   ", 42])
    def test_rejects_missing_url(self, value):
        with pytest.raises(InvalidURL) as exc_info:
            validate_url(value)
        assert exc_info.value.message == "URL is required"
        assert exc_info.value.status_code == 400


class TestExtractSourceId:
    """Tests for extract_source_id()"""

    def test_bgg_url(self):
        assert extract_source_id("https://boardgamegeek.com/boardgame/266192/wingspan") == "266192"

    def test_generic_item_url(self):
        assert extract_source_id("https://source.example/item/42/foo") == "42"

    def test_id_at_end_of_path(self):
        assert extract_source_id("https://source.example/item/42") == "42"

    def test_no_numeric_segment(self):
        assert extract_source_id("https://source.example/search/wingspan") is None

    def test_digits_in_query_are_ignored(self):
        assert extract_source_id("https://source.example/item?id=42") is None

    def test_mixed_segment_is_not_an_id(self):
        assert extract_source_id("https://source.example/item/42abc/foo") is None


class TestCheckContentMatch:
    """Tests for check_content_match()"""

    def test_markdown_mentions_id(self):
        check_content_match("https://source.example/item/42/foo", "Game #42 details")

    def test_markdown_mentions_url_case_insensitive(self):
        url = "https://Source.example/item/7/Foo"
        check_content_match(url, "canonical: https://source.example/item/7/foo")

    def test_mismatch_fails_closed(self):
        with pytest.raises(ContentMismatch) as exc_info:
            check_content_match(
                "https://source.example/item/42/foo",
                "# The Hotness\n\nTrending games this week",
            )
        assert exc_info.value.status_code == 502
        assert exc_info.value.details["source_id"] == "42"

    def test_missing_markdown_fails_closed(self):
        with pytest.raises(ContentMismatch):
            check_content_match("https://source.example/item/42/foo", None)

    def test_skipped_without_id(self):
        check_content_match("https://source.example/games/wingspan", "anything at all")
